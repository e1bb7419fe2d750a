# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
# =============================================================================

from typing import TYPE_CHECKING, Annotated

from fastapi import Depends, Request

from app.config import settings
from core.services.session_guard import SessionGuard

if TYPE_CHECKING:
    from app.auth.verifier import IdentityVerifier


def get_identity_verifier(request: Request) -> "IdentityVerifier":
    """
    Get the process-wide identity verifier.

    Built once in the application lifespan and kept on app.state.
    """
    return request.app.state.identity_verifier


def get_session_guard() -> SessionGuard:
    """Session guard using the configured default idle timeout."""
    return SessionGuard(default_timeout_minutes=settings.SESSION_TIMEOUT_MINUTES)


# Type alias for dependency injection
SessionGuardDep = Annotated[SessionGuard, Depends(get_session_guard)]
