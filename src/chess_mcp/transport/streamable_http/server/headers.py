from collections.abc import Mapping, Sequence

SESSION_ID_HEADER = "mcp-session-id"
PROTOCOL_VERSION_HEADER = "mcp-protocol-version"

HeaderValue = str | Sequence[str]


def extract_session_id(
    headers: Mapping[str, HeaderValue] | None, name: str = SESSION_ID_HEADER
) -> str | None:
    """Pull a single header value out of a possibly multi-valued mapping.

    HTTP allows a header to repeat, so a value may be a list of strings. The
    first occurrence wins. Scalars are returned unchanged.

    Args:
        headers: Lower-cased header name to value(s). Starlette's `Headers`
            works as-is.
        name: Lower-cased header name.
    """
    if not headers:
        return None
    value = headers.get(name)
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return value[0] if value else None
