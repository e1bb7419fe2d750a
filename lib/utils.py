# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

from datetime import datetime, timezone
from typing import Any
from uuid import UUID


# =============================================================================
# UUID Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Handles both string and UUID objects, ensuring consistent string output.

    Example:
        recipe_id = normalize_uuid(uuid_obj)  # "550e8400-..."
        recipe_id = normalize_uuid("550e8400-...")  # "550e8400-..."
    """
    return str(value) if isinstance(value, UUID) else value


def is_valid_uuid(value: Any) -> bool:
    """Check whether a value parses as a UUID (recipe ids are UUIDs)."""
    if isinstance(value, UUID):
        return True
    try:
        UUID(str(value))
    except (ValueError, TypeError):
        return False
    return True


# =============================================================================
# Time Utilities
# =============================================================================

def utc_now() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """
    Parse a PostgREST timestamp into an aware datetime.

    Supabase returns ISO strings, sometimes with a trailing "Z".
    Naive values are assumed to be UTC.

    Returns:
        datetime, or None if the value is empty or unparseable
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except (ValueError, TypeError):
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
