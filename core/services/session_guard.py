# =============================================================================
# core/services/session_guard.py - Rolling Idle Timeout
# =============================================================================
# Every authenticated request passes through SessionGuard.check() after the
# bearer token has been verified and before any business logic runs.
#
#   idle > timeout  -> SessionExpiredError, last_active left untouched
#   otherwise       -> last_active = now, request proceeds
#
# A user without a record yet (first touch, before registration) proceeds
# without any write.
# =============================================================================

import logging
from datetime import datetime
from typing import Any, Callable

from app.exceptions import SessionExpiredError
from core.models.user import DEFAULT_SESSION_TIMEOUT_MINUTES
from lib.supabase_client import SupabaseClient
from lib.utils import parse_timestamp, utc_now

logger = logging.getLogger(__name__)


class SessionGuard:
    """
    Enforces the per-user idle timeout stored with the user record.

    Args:
        default_timeout_minutes: Used when the record has no timeout of its own
        clock: Returns the current aware UTC datetime (injectable for tests)
    """

    def __init__(
        self,
        default_timeout_minutes: int = DEFAULT_SESSION_TIMEOUT_MINUTES,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.default_timeout_minutes = default_timeout_minutes
        self.clock = clock

    def timeout_for(self, record: dict[str, Any]) -> int:
        return record.get("session_timeout_minutes") or self.default_timeout_minutes

    def idle_minutes(self, record: dict[str, Any], now: datetime) -> float:
        """Minutes since last_active; 0 when the record never recorded activity."""
        last_active = parse_timestamp(record.get("last_active"))
        if last_active is None:
            return 0.0
        return (now - last_active).total_seconds() / 60

    def check(self, uid: str, record: dict[str, Any] | None) -> dict[str, Any] | None:
        """
        Validate freshness for a verified uid and refresh last_active.

        Args:
            uid: Subject id from the verified token
            record: The persisted user row, or None if not registered yet

        Returns:
            The refreshed user row, or None for a first-touch user

        Raises:
            SessionExpiredError: If idle time exceeds the timeout
        """
        if record is None:
            logger.debug(f"No user record for {uid}; first touch")
            return None

        now = self.clock()
        idle = self.idle_minutes(record, now)
        timeout = self.timeout_for(record)

        if idle > timeout:
            logger.warning(f"Session expired for {uid}: idle {idle:.1f}m > {timeout}m")
            raise SessionExpiredError(uid, idle, timeout)

        refreshed = SupabaseClient.touch_user(uid, now.isoformat())
        return refreshed or {**record, "last_active": now.isoformat()}

    def start(self, uid: str) -> dict[str, Any] | None:
        """Begin a fresh session (login): last_active = now, no expiry check."""
        now = self.clock()
        logger.info(f"Session started for {uid}")
        return SupabaseClient.touch_user(uid, now.isoformat())
