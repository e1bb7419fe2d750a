# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from typing import Optional

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """
    Authenticated caller, after token verification and the session check.

    `registered` is False for a verified identity that has no users row yet
    (first touch before POST /api/users/register).
    """

    model_config = ConfigDict(frozen=True)

    uid: str
    email: Optional[str] = None
    name: Optional[str] = None
    registered: bool = False
