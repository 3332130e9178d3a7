"""Host-runtime boundary and audit trail."""

from .audit import AuditEntry, JsonlAuditLogger
from .host import MISSING, BinaryData, ExecutionContext, Item, StaticExecutionContext

__all__ = [
    "AuditEntry",
    "BinaryData",
    "ExecutionContext",
    "Item",
    "JsonlAuditLogger",
    "MISSING",
    "StaticExecutionContext",
]
