# =============================================================================
# app/routers/users.py - User Endpoints
# =============================================================================
# - Identity bootstrap: register (public), login (token, no idle check),
#   create-or-update (public create, token-bound update)
# - Public profiles and listings
# - Authenticated: current user, profile edit, likes, follows
# =============================================================================

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Response, status

from app.auth import (
    AuthUser,
    VerifiedIdentity,
    get_current_user,
    get_optional_identity,
    get_verified_identity,
)
from app.dependencies import SessionGuardDep
from app.responses import envelope
from core.models.recipe import Recipe
from core.models.user import User, UserLogin, UserProfileUpdate, UserRegister, UserUpsert
from core.services.like_ledger import LikeLedger
from core.services.recipe_service import RecipeService
from core.services.social_graph import SocialGraphService
from core.services.user_service import UserService

router = APIRouter()


# =============================================================================
# Identity Bootstrap
# =============================================================================

@router.post("/register")
def register_user(request: UserRegister, response: Response):
    """
    Register a user after sign-up with the identity provider.

    201 when created, 200 when the uid is already registered.
    """
    user, created = UserService.register(request)
    if created:
        response.status_code = status.HTTP_201_CREATED
        return envelope(data=User.from_row(user).to_api(), message="User registered successfully")
    return envelope(data=User.from_row(user).to_api(), message="User already exists")


@router.post("/login")
def login_user(
    guard: SessionGuardDep,
    identity: VerifiedIdentity = Depends(get_verified_identity),
    request: Optional[UserLogin] = None,
):
    """
    Start a new session for the bearer token's subject.

    Needs a valid token but skips the idle check, so an expired session can
    be resumed by signing in again. A body uid must match the token.
    """
    user = UserService.login(
        identity.uid,
        guard,
        claimed_uid=request.uid if request else None,
    )
    return envelope(data=User.from_row(user).to_api(), message="User logged in successfully")


@router.post("/create-or-update")
def create_or_update_user(
    request: UserUpsert,
    response: Response,
    identity: Optional[VerifiedIdentity] = Depends(get_optional_identity),
):
    """
    Create the user if missing, otherwise update name/email/photo.

    Updating an existing user needs that user's bearer token.
    """
    user, created = UserService.create_or_update(
        request,
        subject_uid=identity.uid if identity else None,
    )
    if created:
        response.status_code = status.HTTP_201_CREATED
        return envelope(data=User.from_row(user).to_api(), message="User created successfully")
    return envelope(data=User.from_row(user).to_api(), message="User updated successfully")


# =============================================================================
# Authenticated Endpoints
# =============================================================================

@router.get("/current")
def current_user(user: AuthUser = Depends(get_current_user)):
    """The authenticated user's record."""
    record = UserService.get_user(user.uid)
    return envelope(data=User.from_row(record).to_api())


@router.put("/profile")
def update_profile(
    request: UserProfileUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """Update name, bio, photo, specialties or session timeout."""
    record = UserService.update_profile(user.uid, request)
    return envelope(data=User.from_row(record).to_api(), message="Profile updated successfully")


@router.post("/like/{recipe_id}")
def like_recipe(
    recipe_id: Annotated[str, Path(description="Recipe UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """Like a recipe (not your own, not twice)."""
    recipe = LikeLedger.like(user.uid, recipe_id)
    return envelope(
        data={"recipeId": str(recipe["id"]), "likeCount": recipe.get("like_count", 0)},
        message="Recipe liked successfully",
    )


@router.delete("/unlike/{recipe_id}")
def unlike_recipe(
    recipe_id: Annotated[str, Path(description="Recipe UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """Remove your like from a recipe."""
    recipe = LikeLedger.unlike(user.uid, recipe_id)
    return envelope(
        data={"recipeId": str(recipe["id"]), "likeCount": recipe.get("like_count", 0)},
        message="Recipe unliked successfully",
    )


@router.post("/follow/{user_id}")
def follow_user(
    user_id: Annotated[str, Path(description="uid of the user to follow")],
    user: AuthUser = Depends(get_current_user),
):
    SocialGraphService.follow(user.uid, user_id)
    return envelope(message="User followed successfully")


@router.delete("/unfollow/{user_id}")
def unfollow_user(
    user_id: Annotated[str, Path(description="uid of the user to unfollow")],
    user: AuthUser = Depends(get_current_user),
):
    SocialGraphService.unfollow(user.uid, user_id)
    return envelope(message="User unfollowed successfully")


# =============================================================================
# Public Profiles
# =============================================================================

@router.get("/profile/{uid}")
def get_profile(uid: Annotated[str, Path(description="User uid")]):
    """Public profile of any user."""
    record = UserService.get_user(uid)
    return envelope(data=User.from_row(record).to_api())


@router.get("/{uid}/recipes")
def user_recipes(uid: Annotated[str, Path(description="User uid")]):
    """Recipes created by a user."""
    data = [Recipe.from_row(row).to_api() for row in RecipeService.recipes_by_owner(uid)]
    return envelope(data=data, count=len(data))


@router.get("/{uid}/liked-recipes")
def liked_recipes(uid: Annotated[str, Path(description="User uid")]):
    """Recipes a user has liked. 404 if the user doesn't exist."""
    data = [Recipe.from_row(row).to_api() for row in RecipeService.liked_recipes(uid)]
    return envelope(data=data, count=len(data))


@router.get("/{uid}/followers")
def followers(uid: Annotated[str, Path(description="User uid")]):
    """Profiles of everyone following a user."""
    data = [User.from_row(row).to_api() for row in SocialGraphService.followers(uid)]
    return envelope(data=data, count=len(data))


@router.get("/{uid}/following")
def following(uid: Annotated[str, Path(description="User uid")]):
    """Profiles of everyone a user follows."""
    data = [User.from_row(row).to_api() for row in SocialGraphService.following(uid)]
    return envelope(data=data, count=len(data))
