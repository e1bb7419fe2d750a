# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication.
#
# get_verified_identity:
#   1. Bearer token extraction        -> MissingCredentialError (401)
#   2. Identity provider verification -> InvalidCredentialError (401)
#
# get_current_user adds:
#   3. Session guard (idle timeout)   -> SessionExpiredError (401)
#
# get_verified_identity alone backs POST /api/users/login, which starts a new
# session for the token's subject and so must not be blocked by an expired one.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/protected")
#   def protected(user: AuthUser = Depends(get_current_user)):
#       return {"uid": user.uid}
# =============================================================================

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.auth.models import AuthUser
from app.auth.verifier import IdentityVerifier, VerifiedIdentity
from app.dependencies import get_identity_verifier, get_session_guard
from app.exceptions import MissingCredentialError
from core.services.session_guard import SessionGuard
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor; missing tokens are reported as our own 401
security = HTTPBearer(auto_error=False)


def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> Optional[VerifiedIdentity]:
    """
    Verify the bearer token if one was sent.

    Returns:
        VerifiedIdentity, or None when no Authorization header was given

    Raises:
        InvalidCredentialError: A token was sent but failed verification
    """
    if credentials is None or not credentials.credentials:
        return None
    return verifier.verify(credentials.credentials)


def get_verified_identity(
    identity: Optional[VerifiedIdentity] = Depends(get_optional_identity),
) -> VerifiedIdentity:
    """
    Require a valid bearer token; no session check.

    Raises:
        MissingCredentialError: No bearer token
        InvalidCredentialError: Token failed verification
    """
    if identity is None:
        raise MissingCredentialError()
    return identity


def get_current_user(
    identity: VerifiedIdentity = Depends(get_verified_identity),
    guard: SessionGuard = Depends(get_session_guard),
) -> AuthUser:
    """
    Authenticate the caller and enforce the idle session timeout.

    Returns:
        AuthUser: The authenticated user

    Raises:
        MissingCredentialError: No bearer token
        InvalidCredentialError: Token failed verification
        SessionExpiredError: User idle beyond their timeout
    """
    record = SupabaseClient.fetch_user(identity.uid)
    record = guard.check(identity.uid, record)

    logger.debug(f"Authenticated user: {identity.uid}")
    return AuthUser(
        uid=identity.uid,
        email=identity.email or (record or {}).get("email"),
        name=identity.name or (record or {}).get("name"),
        registered=record is not None,
    )
