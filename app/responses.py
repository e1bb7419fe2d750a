# =============================================================================
# app/responses.py - Success Envelope
# =============================================================================
# Every successful response has the shape
#   {"success": true, "message"?: str, "data"?: any, "count"?: int}
# Errors use the same envelope; see RecipeBookException.to_dict().
# =============================================================================

from typing import Any


def envelope(
    data: Any = None,
    message: str | None = None,
    count: int | None = None,
) -> dict[str, Any]:
    """Build a success body, leaving out keys that weren't given."""
    body: dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    if count is not None:
        body["count"] = count
    return body
