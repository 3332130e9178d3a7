from __future__ import annotations

import json
from typing import Any, Iterable

from .hooks.observability import EventLogger

PROFILES_KEY = "profiles"

QUOTE_TRANSLATION = str.maketrans(
    {
        "“": '"',
        "”": '"',
        "„": '"',
        "‟": '"',
        "″": '"',
        "‘": "'",
        "’": "'",
        "‚": "'",
        "′": "'",
    }
)


def sanitize_profiles(
    body: dict[str, Any],
    *,
    recognized_keys: Iterable[str] = (),
    logger: EventLogger | None = None,
) -> None:
    """Normalize the free-form ``profiles`` field of a request body in place.

    Keys of the parsed profile that the endpoint knows about are lifted into
    the body unless the body already sets them; everything else stays in
    ``profiles`` as compact JSON. An empty or unparseable value is dropped
    with a warning, never raised.
    """
    if PROFILES_KEY not in body:
        return
    raw = body[PROFILES_KEY]

    if isinstance(raw, dict):
        parsed: dict[str, Any] | None = dict(raw)
    else:
        text = "" if raw is None else str(raw).strip()
        if not text:
            del body[PROFILES_KEY]
            return
        parsed = _parse_profile_text(text)
        if parsed is None:
            del body[PROFILES_KEY]
            if logger is not None:
                logger.on_warning("profiles", f"dropped unparseable profiles value: {text[:80]}")
            return

    recognized = set(recognized_keys) - {PROFILES_KEY}
    remaining: dict[str, Any] = {}
    for key, value in parsed.items():
        if key in recognized:
            if body.get(key) in (None, ""):
                body[key] = value
            continue
        remaining[key] = value

    if remaining:
        body[PROFILES_KEY] = json.dumps(remaining, ensure_ascii=True, separators=(",", ":"))
    else:
        del body[PROFILES_KEY]


def _parse_profile_text(text: str) -> dict[str, Any] | None:
    normalized = text.translate(QUOTE_TRANSLATION)
    if not normalized.startswith("{"):
        normalized = f"{{ {normalized}"
    if not normalized.endswith("}"):
        normalized = f"{normalized} }}"

    for candidate in (normalized, normalized.replace("'", '"')):
        try:
            payload = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(payload, dict):
            return payload
        return None
    return None
