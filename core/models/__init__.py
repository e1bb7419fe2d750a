# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - recipe.py: Recipe payloads, response shape and closed enums
# - user.py: Identity bootstrap, profile payloads and response shape
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Recipe Models
# -----------------------------------------------------------------------------
from .recipe import (
    CuisineType,
    Recipe,
    RecipeCategory,
    RecipeCreate,
    RecipeUpdate,
)

# -----------------------------------------------------------------------------
# User Models
# -----------------------------------------------------------------------------
from .user import (
    DEFAULT_SESSION_TIMEOUT_MINUTES,
    User,
    UserLogin,
    UserProfileUpdate,
    UserRegister,
    UserUpsert,
)

__all__ = [
    # Recipe
    "CuisineType",
    "Recipe",
    "RecipeCategory",
    "RecipeCreate",
    "RecipeUpdate",
    # User
    "DEFAULT_SESSION_TIMEOUT_MINUTES",
    "User",
    "UserLogin",
    "UserProfileUpdate",
    "UserRegister",
    "UserUpsert",
]
