# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - recipes.py: Recipe browsing, owner CRUD, likes
# - users.py: Identity bootstrap, profiles, likes, follows
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import recipes
from . import users

__all__ = [
    "health",
    "recipes",
    "users",
]
