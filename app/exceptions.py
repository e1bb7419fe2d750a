# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error is rendered in the standard envelope:
#   {"success": false, "message": "...", "error": "<CODE>"}
# =============================================================================

import logging
import traceback
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.config import settings

logger = logging.getLogger(__name__)


class RecipeBookException(Exception):
    """
    Base exception for the Recipe Book API.

    All custom exceptions inherit from this class. `extra` keys are merged
    into the response body next to message/error.
    """

    def __init__(
        self,
        message: str,
        code: str = "RECIPE_BOOK_ERROR",
        status_code: int = 500,
        details: dict[str, Any] | None = None,
        extra: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        self.extra = extra or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result: dict[str, Any] = {
            "success": False,
            "message": self.message,
            "error": self.code,
        }
        result.update(self.extra)
        return result


# =============================================================================
# Authentication Exceptions
# =============================================================================

class MissingCredentialError(RecipeBookException):
    """Raised when no bearer token accompanies a protected request."""

    def __init__(self):
        super().__init__(
            message="Unauthorized - No token provided",
            code="MISSING_CREDENTIAL",
            status_code=401,
        )


class InvalidCredentialError(RecipeBookException):
    """Raised when the identity provider token fails verification."""

    def __init__(self, reason: str = "Invalid token"):
        super().__init__(
            message=f"Unauthorized - {reason}",
            code="INVALID_CREDENTIAL",
            status_code=401,
            details={"reason": reason},
        )


class SessionExpiredError(RecipeBookException):
    """Raised when a user has been idle longer than their session timeout."""

    def __init__(self, uid: str, idle_minutes: float, timeout_minutes: int):
        super().__init__(
            message="Session expired. Please login again.",
            code="SESSION_EXPIRED",
            status_code=401,
            details={
                "uid": uid,
                "idle_minutes": round(idle_minutes, 1),
                "timeout_minutes": timeout_minutes,
            },
            extra={"sessionExpired": True},
        )


class MissingActorError(RecipeBookException):
    """Raised when an operation needs an acting user id and none was given."""

    def __init__(self):
        super().__init__(
            message="User not authenticated",
            code="MISSING_ACTOR",
            status_code=401,
        )


class PayloadValidationError(RecipeBookException):
    """Raised by services when a payload is well-typed but incomplete."""

    def __init__(self, message: str, fields: list[str] | None = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            details={"fields": fields or []},
        )


# =============================================================================
# Lookup Exceptions
# =============================================================================

class RecipeNotFoundError(RecipeBookException):
    """Raised when a recipe ID doesn't exist."""

    def __init__(self, recipe_id: str):
        super().__init__(
            message="Recipe not found",
            code="RECIPE_NOT_FOUND",
            status_code=404,
            details={"recipe_id": recipe_id},
        )


class UserNotFoundError(RecipeBookException):
    """Raised when no user record exists for a uid."""

    def __init__(self, uid: str, label: str = "User"):
        super().__init__(
            message=f"{label} not found",
            code="USER_NOT_FOUND",
            status_code=404,
            details={"uid": uid},
        )


# =============================================================================
# Authorization Exceptions
# =============================================================================

class ForbiddenError(RecipeBookException):
    """Raised when the caller doesn't own the recipe they're changing."""

    def __init__(self, action: str, recipe_id: str):
        super().__init__(
            message=f"Not authorized to {action} this recipe",
            code="FORBIDDEN",
            status_code=403,
            details={"recipe_id": recipe_id, "action": action},
        )


class IdentityMismatchError(RecipeBookException):
    """Raised when a body uid names someone other than the token's subject."""

    def __init__(self, claimed_uid: str, subject_uid: str):
        super().__init__(
            message="Not authorized to act on another user's account",
            code="FORBIDDEN",
            status_code=403,
            details={"uid": claimed_uid, "subject": subject_uid},
        )


# =============================================================================
# Conflict Exceptions (like ledger / social graph / registration)
# =============================================================================

class ConflictError(RecipeBookException):
    """Request is well-formed but conflicts with current state."""

    def __init__(self, message: str, code: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code=code,
            status_code=400,
            details=details,
        )


class AlreadyLikedError(ConflictError):
    def __init__(self, recipe_id: str):
        super().__init__("Recipe already liked", "ALREADY_LIKED", {"recipe_id": recipe_id})


class NotLikedError(ConflictError):
    def __init__(self, recipe_id: str):
        super().__init__("Recipe not liked", "NOT_LIKED", {"recipe_id": recipe_id})


class SelfLikeError(ConflictError):
    def __init__(self, recipe_id: str):
        super().__init__("You cannot like your own recipe.", "SELF_LIKE", {"recipe_id": recipe_id})


class AlreadyFollowingError(ConflictError):
    def __init__(self, target_uid: str):
        super().__init__("Already following this user", "ALREADY_FOLLOWING", {"uid": target_uid})


class NotFollowingError(ConflictError):
    def __init__(self, target_uid: str):
        super().__init__("Not following this user", "NOT_FOLLOWING", {"uid": target_uid})


class SelfFollowError(ConflictError):
    def __init__(self):
        super().__init__("Cannot follow yourself", "SELF_FOLLOW")


class SelfUnfollowError(ConflictError):
    def __init__(self):
        super().__init__("Cannot unfollow yourself", "SELF_UNFOLLOW")


class EmailTakenError(ConflictError):
    def __init__(self, email: str):
        super().__init__("Email is already registered", "EMAIL_TAKEN", {"email": email})


# =============================================================================
# Exception Handlers
# =============================================================================

async def recipe_book_exception_handler(
    request: Request,
    exc: RecipeBookException
) -> JSONResponse:
    """Convert RecipeBookException to the error envelope."""
    if exc.status_code == 401:
        logger.warning(f"{exc.code} on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Messages from every failing field are joined into one string.
    """
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = str(error.get("msg", "Invalid value"))
        messages.append(f"{location}: {message}" if location else message)

    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "message": ", ".join(messages) or "Validation error",
            "error": "VALIDATION_ERROR",
        }
    )


async def unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Internal detail only leaves the server in development mode.
    """
    logger.exception(f"Unexpected error: {exc}")
    content: dict[str, Any] = {
        "success": False,
        "message": "Something went wrong on the server",
        "error": "INTERNAL_ERROR",
    }
    if settings.is_development:
        content["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    return JSONResponse(status_code=500, content=content)
