# =============================================================================
# core/services/like_ledger.py - Recipe Like Ledger
# =============================================================================
# A like is recorded twice: the recipe id in users.liked_recipes and +1 on
# recipes.like_count. Both call sites (POST /api/recipes/{id}/like and
# POST /api/users/like/{recipeId}) go through this ledger, so
#
#   recipe.like_count == |{u : recipe.id in u.liked_recipes}|
#
# holds after every request. The paired write is one guarded RPC
# (apply_recipe_like) running in a single Postgres transaction.
# =============================================================================

import logging
from typing import Any

from app.exceptions import (
    AlreadyLikedError,
    MissingActorError,
    NotLikedError,
    RecipeNotFoundError,
    SelfLikeError,
    UserNotFoundError,
)
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


class LikeLedger:
    """
    Like/unlike operations with check order:
    actor given -> recipe exists -> not own recipe -> actor exists -> state.
    """

    @staticmethod
    def _load(actor_uid: str | None, recipe_id: str) -> tuple[dict[str, Any], dict[str, Any]]:
        if not actor_uid:
            raise MissingActorError()

        recipe = SupabaseClient.fetch_recipe(recipe_id)
        if not recipe:
            raise RecipeNotFoundError(recipe_id)

        return recipe, SupabaseClient.fetch_user(actor_uid)

    @staticmethod
    def has_liked(user: dict[str, Any], recipe_id: str) -> bool:
        return str(recipe_id) in {str(r) for r in user.get("liked_recipes") or []}

    @staticmethod
    def like(actor_uid: str | None, recipe_id: str) -> dict[str, Any]:
        """
        Record that actor likes the recipe.

        Returns:
            The recipe row after the like

        Raises:
            MissingActorError, RecipeNotFoundError, SelfLikeError,
            UserNotFoundError, AlreadyLikedError
        """
        recipe, user = LikeLedger._load(actor_uid, recipe_id)

        if recipe.get("user_id") == actor_uid:
            raise SelfLikeError(recipe_id)

        if not user:
            raise UserNotFoundError(actor_uid)

        if LikeLedger.has_liked(user, recipe_id):
            raise AlreadyLikedError(recipe_id)

        applied = SupabaseClient.apply_recipe_like(actor_uid, recipe_id, like=True)
        if not applied:
            # Lost a race with a concurrent like from the same user
            raise AlreadyLikedError(recipe_id)

        logger.info(f"User {actor_uid} liked recipe {recipe_id}")
        return SupabaseClient.fetch_recipe(recipe_id) or recipe

    @staticmethod
    def unlike(actor_uid: str | None, recipe_id: str) -> dict[str, Any]:
        """
        Remove actor's like; the counter never drops below zero.

        Returns:
            The recipe row after the unlike

        Raises:
            MissingActorError, RecipeNotFoundError, UserNotFoundError,
            NotLikedError
        """
        recipe, user = LikeLedger._load(actor_uid, recipe_id)

        if not user:
            raise UserNotFoundError(actor_uid)

        if not LikeLedger.has_liked(user, recipe_id):
            raise NotLikedError(recipe_id)

        applied = SupabaseClient.apply_recipe_like(actor_uid, recipe_id, like=False)
        if not applied:
            raise NotLikedError(recipe_id)

        logger.info(f"User {actor_uid} unliked recipe {recipe_id}")
        return SupabaseClient.fetch_recipe(recipe_id) or recipe

    @staticmethod
    def reconcile(recipe_id: str) -> int:
        """
        Recompute like_count from the membership sets.

        Returns:
            The corrected like count

        Raises:
            RecipeNotFoundError: If the recipe doesn't exist
        """
        count = SupabaseClient.reconcile_like_count(recipe_id)
        if count is None:
            raise RecipeNotFoundError(recipe_id)
        logger.info(f"Reconciled like_count for recipe {recipe_id}: {count}")
        return count

    @staticmethod
    def reconcile_all(recipe_ids: list[str] | None = None) -> dict[str, int]:
        """
        Reconcile several recipes, or every recipe when no ids are given.

        Returns:
            {recipe_id: corrected like count}

        Raises:
            RecipeNotFoundError: If an explicitly listed recipe doesn't exist
        """
        if recipe_ids is None:
            recipe_ids = [str(row["id"]) for row in SupabaseClient.list_recipes()]

        return {recipe_id: LikeLedger.reconcile(recipe_id) for recipe_id in recipe_ids}
