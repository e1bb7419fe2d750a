# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .like_ledger import LikeLedger
from .ownership import OwnershipPolicy
from .recipe_service import RecipeService
from .session_guard import SessionGuard
from .social_graph import SocialGraphService
from .user_service import UserService

__all__ = [
    "LikeLedger",
    "OwnershipPolicy",
    "RecipeService",
    "SessionGuard",
    "SocialGraphService",
    "UserService",
]
