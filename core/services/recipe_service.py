# =============================================================================
# core/services/recipe_service.py - Recipe Business Logic
# =============================================================================
# Handles recipe CRUD and listings.
# Separates HTTP concerns from database/business logic.
# Likes are NOT handled here; see like_ledger.py.
# =============================================================================

import logging
from typing import Any, Literal

from app.exceptions import PayloadValidationError, RecipeNotFoundError, UserNotFoundError
from core.models.recipe import CuisineType, RecipeCategory, RecipeCreate, RecipeUpdate
from core.services.ownership import OwnershipPolicy
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


class RecipeService:
    """
    Service for recipe operations.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def list_recipes(
        cuisine_type: CuisineType | None = None,
        category: RecipeCategory | None = None,
        sort: Literal["asc", "desc"] = "desc",
        page: int | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        List recipes, optionally filtered, ordered by creation time.

        Pagination only applies when limit is given; page is 1-indexed.
        """
        offset = ((page or 1) - 1) * limit if limit else 0
        return SupabaseClient.list_recipes(
            cuisine_type=cuisine_type.value if cuisine_type else None,
            category=category.value if category else None,
            descending=(sort == "desc"),
            offset=offset,
            limit=limit,
        )

    @staticmethod
    def top_recipes(limit: int) -> list[dict[str, Any]]:
        """Most liked recipes first."""
        return SupabaseClient.top_recipes(limit)

    @staticmethod
    def recipes_by_owner(uid: str) -> list[dict[str, Any]]:
        """Recipes created by uid, newest first."""
        return SupabaseClient.list_recipes(owner_uid=uid)

    @staticmethod
    def liked_recipes(uid: str) -> list[dict[str, Any]]:
        """
        Recipes in a user's liked set.

        Raises:
            UserNotFoundError: If uid has no record
        """
        user = SupabaseClient.fetch_user(uid)
        if not user:
            raise UserNotFoundError(uid)
        return SupabaseClient.fetch_recipes_by_ids(user.get("liked_recipes") or [])

    @staticmethod
    def get_recipe(recipe_id: str) -> dict[str, Any]:
        """
        Get a recipe by ID.

        Raises:
            RecipeNotFoundError: If the recipe doesn't exist or the id is malformed
        """
        recipe = SupabaseClient.fetch_recipe(recipe_id)
        if not recipe:
            raise RecipeNotFoundError(recipe_id)
        return recipe

    @staticmethod
    def create_recipe(
        payload: RecipeCreate,
        owner_uid: str,
        owner_email: str | None,
        owner_name: str | None,
    ) -> dict[str, Any]:
        """
        Create a recipe owned by the verified caller.

        Raises:
            PayloadValidationError: If no owner email is known
        """
        if not owner_email:
            raise PayloadValidationError(
                "User information is missing. Cannot create recipe.",
                fields=["userEmail"],
            )

        row = payload.to_row(
            owner_uid=owner_uid,
            owner_email=owner_email,
            owner_name=owner_name or owner_email.split("@")[0],
        )
        recipe = SupabaseClient.insert_recipe(row)
        logger.info(f"Created recipe {recipe['id']} for user {owner_uid}")
        return recipe

    @staticmethod
    def update_recipe(
        recipe_id: str,
        payload: RecipeUpdate,
        subject_uid: str,
    ) -> dict[str, Any]:
        """
        Update an owned recipe.

        Raises:
            RecipeNotFoundError: Checked first
            ForbiddenError: If the caller (or the payload's userId claim)
                isn't the owner
        """
        recipe = RecipeService.get_recipe(recipe_id)
        OwnershipPolicy.ensure_can_mutate(
            recipe, subject_uid, owner_claim=payload.user_id, action="update"
        )

        updates = payload.to_row_updates()
        if not updates:
            return recipe  # Nothing to update

        updated = SupabaseClient.update_recipe(recipe_id, updates)
        if not updated:
            # Deleted between the read and the write
            raise RecipeNotFoundError(recipe_id)

        logger.info(f"Updated recipe {recipe_id}: {sorted(updates)}")
        return updated

    @staticmethod
    def delete_recipe(
        recipe_id: str,
        subject_uid: str,
        owner_claim: str | None = None,
    ) -> None:
        """
        Delete an owned recipe; its id is removed from every liked set.

        Raises:
            RecipeNotFoundError, ForbiddenError
        """
        recipe = RecipeService.get_recipe(recipe_id)
        OwnershipPolicy.ensure_can_mutate(
            recipe, subject_uid, owner_claim=owner_claim, action="delete"
        )

        if not SupabaseClient.delete_recipe(recipe_id):
            raise RecipeNotFoundError(recipe_id)

        logger.info(f"Deleted recipe {recipe_id} by {subject_uid}")
