"""Session id format for the streamable HTTP transport."""

import re
import uuid

_SESSION_ID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)


def is_valid_session_id(session_id: str | None) -> bool:
    """Check that a session id has the canonical 8-4-4-4-12 hex UUID shape.

    Matching is case-insensitive. Empty or missing ids are invalid, and so is
    any surrounding whitespace.
    """
    if not isinstance(session_id, str) or not session_id:
        return False
    return _SESSION_ID_PATTERN.fullmatch(session_id) is not None


def generate_session_id() -> str:
    return str(uuid.uuid4())
