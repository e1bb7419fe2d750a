# =============================================================================
# core/services/user_service.py - User Business Logic
# =============================================================================
# Identity bootstrap (register / login / create-or-update) and profiles.
# The uid always comes from the identity provider; this service only mirrors
# it into the users table.
# =============================================================================

import logging
from typing import Any

from app.exceptions import (
    EmailTakenError,
    IdentityMismatchError,
    MissingCredentialError,
    PayloadValidationError,
    UserNotFoundError,
)
from core.models.user import UserProfileUpdate, UserRegister, UserUpsert
from core.services.session_guard import SessionGuard
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import utc_now

logger = logging.getLogger(__name__)


class UserService:
    """Service for user records."""

    @staticmethod
    def _ensure_email_free(email: str, uid: str) -> None:
        existing = SupabaseClient.fetch_user_by_email(email)
        if existing and existing.get("uid") != uid:
            raise EmailTakenError(email)

    @staticmethod
    def _insert(uid: str, name: str, email: str, photo_url: str) -> dict[str, Any]:
        UserService._ensure_email_free(email, uid)
        try:
            user = SupabaseClient.insert_user({
                "uid": uid,
                "name": name,
                "email": email,
                "photo_url": photo_url or "",
                "last_active": utc_now().isoformat(),
            })
        except SupabaseClientError as e:
            if e.code == "UNIQUE_VIOLATION":
                raise EmailTakenError(email)
            raise

        logger.info(f"Registered user {uid}")
        return user

    @staticmethod
    def get_user(uid: str) -> dict[str, Any]:
        """
        Raises:
            UserNotFoundError: If uid has no record
        """
        user = SupabaseClient.fetch_user(uid)
        if not user:
            raise UserNotFoundError(uid)
        return user

    @staticmethod
    def register(payload: UserRegister) -> tuple[dict[str, Any], bool]:
        """
        Register a user, or return the existing record.

        Returns:
            (user row, created) - created is False if the uid already existed

        Raises:
            EmailTakenError: If another uid already uses the email
        """
        existing = SupabaseClient.fetch_user(payload.uid)
        if existing:
            return existing, False

        user = UserService._insert(payload.uid, payload.name, payload.email, payload.photo_url)
        return user, True

    @staticmethod
    def login(
        subject_uid: str,
        guard: SessionGuard,
        claimed_uid: str | None = None,
    ) -> dict[str, Any]:
        """
        Start a fresh session for the verified subject.

        Resets last_active so a user whose session expired can continue
        after signing in again with a freshly verified token.

        Args:
            subject_uid: uid from the verified bearer token
            guard: Session guard that records the new session
            claimed_uid: Optional uid from the request body

        Raises:
            IdentityMismatchError: If claimed_uid names another user
            UserNotFoundError: If the subject has no record
        """
        if claimed_uid is not None and claimed_uid != subject_uid:
            raise IdentityMismatchError(claimed_uid, subject_uid)

        UserService.get_user(subject_uid)
        return guard.start(subject_uid) or UserService.get_user(subject_uid)

    @staticmethod
    def create_or_update(
        payload: UserUpsert,
        subject_uid: str | None = None,
    ) -> tuple[dict[str, Any], bool]:
        """
        Update name/email/photo of an existing user, or create it.

        Creating is open (first sign-in). Changing an existing record needs a
        verified token for that same uid.

        Args:
            payload: Upsert body
            subject_uid: uid from a verified bearer token, if one was sent

        Returns:
            (user row, created)

        Raises:
            MissingCredentialError: Updating without a token
            IdentityMismatchError: Updating someone else's record
            PayloadValidationError: If creating without name or email
            EmailTakenError: If the email belongs to another uid
        """
        existing = SupabaseClient.fetch_user(payload.uid)

        if existing:
            if subject_uid is None:
                raise MissingCredentialError()
            if subject_uid != payload.uid:
                raise IdentityMismatchError(payload.uid, subject_uid)

            updates: dict[str, Any] = {}
            if payload.name:
                updates["name"] = payload.name
            if payload.email and payload.email != existing.get("email"):
                UserService._ensure_email_free(payload.email, payload.uid)
                updates["email"] = payload.email
            if payload.photo_url:
                updates["photo_url"] = payload.photo_url

            if not updates:
                return existing, False

            updated = SupabaseClient.update_user(payload.uid, updates) or existing
            logger.info(f"Updated user {payload.uid}: {sorted(updates)}")
            return updated, False

        missing = [field for field in ("name", "email") if not getattr(payload, field)]
        if missing:
            raise PayloadValidationError(
                f"Missing required fields for new user: {', '.join(missing)}",
                fields=missing,
            )

        user = UserService._insert(payload.uid, payload.name, payload.email, payload.photo_url or "")
        return user, True

    @staticmethod
    def update_profile(uid: str, payload: UserProfileUpdate) -> dict[str, Any]:
        """
        Update the caller's profile fields.

        Raises:
            UserNotFoundError: If uid has no record
        """
        user = UserService.get_user(uid)

        updates = payload.to_row_updates()
        if not updates:
            return user

        updated = SupabaseClient.update_user(uid, updates)
        if not updated:
            raise UserNotFoundError(uid)

        logger.info(f"Updated profile {uid}: {sorted(updates)}")
        return updated
