# =============================================================================
# app/routers/recipes.py - Recipe Endpoints
# =============================================================================
# Public browsing (list, top, by cuisine, single recipe) and owner-only
# create/update/delete. Likes go through the like ledger.
# =============================================================================

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Path, Query, status

from app.auth import AuthUser, get_current_user
from app.config import settings
from app.responses import envelope
from core.models.recipe import CuisineType, Recipe, RecipeCategory, RecipeCreate, RecipeUpdate
from core.services.like_ledger import LikeLedger
from core.services.recipe_service import RecipeService

router = APIRouter()


def _serialize(rows: list[dict]) -> list[dict]:
    return [Recipe.from_row(row).to_api() for row in rows]


# =============================================================================
# Public Endpoints
# =============================================================================

@router.get("")
def list_recipes(
    cuisine_type: Annotated[CuisineType | None, Query(alias="cuisineType")] = None,
    category: Annotated[RecipeCategory | None, Query()] = None,
    sort: Annotated[Literal["asc", "desc"], Query(description="Order by creation time")] = "desc",
    page: Annotated[int | None, Query(ge=1, description="Page number (needs limit)")] = None,
    limit: Annotated[int | None, Query(ge=1, le=100, description="Items per page")] = None,
):
    """
    List recipes.

    Optional filters by cuisine and category; newest first unless sort=asc.
    """
    recipes = RecipeService.list_recipes(
        cuisine_type=cuisine_type,
        category=category,
        sort=sort,
        page=page,
        limit=limit,
    )
    data = _serialize(recipes)
    return envelope(data=data, count=len(data))


@router.get("/top")
def top_recipes(
    limit: Annotated[int | None, Query(ge=1, le=50, description="How many recipes")] = None,
):
    """Most liked recipes, highest likeCount first."""
    recipes = RecipeService.top_recipes(limit or settings.TOP_RECIPES_LIMIT)
    data = _serialize(recipes)
    return envelope(data=data, count=len(data))


@router.get("/cuisine/{cuisine_type}")
def recipes_by_cuisine(
    cuisine_type: Annotated[CuisineType, Path(description="Cuisine name")],
):
    """All recipes of one cuisine, newest first."""
    recipes = RecipeService.list_recipes(cuisine_type=cuisine_type)
    data = _serialize(recipes)
    return envelope(data=data, count=len(data))


@router.get("/user")
def my_recipes(user: AuthUser = Depends(get_current_user)):
    """Recipes created by the authenticated user."""
    recipes = RecipeService.recipes_by_owner(user.uid)
    data = _serialize(recipes)
    return envelope(data=data, count=len(data))


@router.get("/{recipe_id}")
def get_recipe(
    recipe_id: Annotated[str, Path(description="Recipe UUID")],
):
    """Get one recipe. 404 if it doesn't exist."""
    recipe = RecipeService.get_recipe(recipe_id)
    return envelope(data=Recipe.from_row(recipe).to_api())


# =============================================================================
# Authenticated Endpoints
# =============================================================================

@router.post("", status_code=status.HTTP_201_CREATED)
def create_recipe(
    request: RecipeCreate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Create a recipe owned by the authenticated user.

    The owner (userId, userEmail) always comes from the verified token.
    """
    recipe = RecipeService.create_recipe(
        request,
        owner_uid=user.uid,
        owner_email=user.email,
        owner_name=user.name,
    )
    return envelope(
        data=Recipe.from_row(recipe).to_api(),
        message="Recipe created successfully",
    )


@router.put("/{recipe_id}")
def update_recipe(
    recipe_id: Annotated[str, Path(description="Recipe UUID")],
    request: RecipeUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Update a recipe. Only its owner may do this.

    A `userId` in the body is treated as an owner claim and must match.
    """
    recipe = RecipeService.update_recipe(recipe_id, request, subject_uid=user.uid)
    return envelope(
        data=Recipe.from_row(recipe).to_api(),
        message="Recipe updated successfully",
    )


@router.delete("/{recipe_id}")
def delete_recipe(
    recipe_id: Annotated[str, Path(description="Recipe UUID")],
    user_id: Annotated[str | None, Query(alias="userId", description="Owner claim")] = None,
    user: AuthUser = Depends(get_current_user),
):
    """Delete a recipe. Only its owner may do this."""
    RecipeService.delete_recipe(recipe_id, subject_uid=user.uid, owner_claim=user_id)
    return envelope(message="Recipe deleted successfully")


@router.post("/{recipe_id}/like")
def like_recipe(
    recipe_id: Annotated[str, Path(description="Recipe UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """
    Like a recipe.

    Same ledger as POST /api/users/like/{recipeId}: no self-likes, no
    duplicate likes, counter and liked set always change together.
    """
    recipe = LikeLedger.like(user.uid, recipe_id)
    return envelope(
        data=Recipe.from_row(recipe).to_api(),
        message="Recipe liked successfully",
    )
