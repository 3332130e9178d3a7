from __future__ import annotations

import re

SECRET_PATTERNS = [
    re.compile(r"\b(Basic|Bearer)\s+[A-Za-z0-9._\-+/=]{8,}", re.IGNORECASE),
    re.compile(r"([?&](?:api[_-]?key|token|key)=)[^&\s]+", re.IGNORECASE),
]


def mask_sensitive_text(text: str) -> str:
    masked = SECRET_PATTERNS[0].sub(lambda match: f"{match.group(1)} [REDACTED]", text)
    return SECRET_PATTERNS[1].sub(lambda match: f"{match.group(1)}[REDACTED]", masked)
