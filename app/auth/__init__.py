# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Verifies identity provider (Firebase) ID tokens and enforces the idle
# session timeout on every protected route.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/protected")
#   def protected(user: AuthUser = Depends(get_current_user)):
#       return {"uid": user.uid}
# =============================================================================

from app.auth.dependencies import (
    get_current_user,
    get_optional_identity,
    get_verified_identity,
)
from app.auth.models import AuthUser
from app.auth.verifier import IdentityVerifier, VerifiedIdentity

__all__ = [
    "get_current_user",
    "get_optional_identity",
    "get_verified_identity",
    "AuthUser",
    "IdentityVerifier",
    "VerifiedIdentity",
]
