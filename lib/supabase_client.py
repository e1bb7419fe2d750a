# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides specialized methods for:
# - User lookups (by uid, by email) and profile writes
# - Recipe lookups, filtered listings and owner writes
# - Transactional RPC calls for paired writes (likes, follows, deletes)
#
# Rows are returned exactly as PostgREST sends them (snake_case columns).
# Conversion to API shapes happens in core/models.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   user = SupabaseClient.fetch_user("firebase-uid")
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import Client, ClientOptions, create_client

from app.config import settings
from lib.utils import is_valid_uuid, normalize_uuid

# Set up logging for this module
logger = logging.getLogger(__name__)

USERS_TABLE = "users"
RECIPES_TABLE = "recipes"

# PostgREST / Postgres error codes we translate
NO_ROWS_CODE = "PGRST116"
UNIQUE_VIOLATION_CODE = "23505"


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Provides actionable error messages:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        recipe = SupabaseClient.fetch_recipe("550e8400-...")
        applied = SupabaseClient.apply_recipe_like("uid-1", recipe["id"], like=True)
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        Every PostgREST call is bounded by DB_TIMEOUT_SECONDS.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY,
                    options=ClientOptions(
                        postgrest_client_timeout=settings.DB_TIMEOUT_SECONDS,
                    ),
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return normalize_uuid(uuid_value)

    @staticmethod
    def _is_no_rows(error: Exception) -> bool:
        return NO_ROWS_CODE in str(error)

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    @classmethod
    def ping(cls) -> None:
        """Run a trivial query; raises SupabaseClientError if unreachable."""
        client = cls.get_client()
        try:
            client.table(USERS_TABLE).select("uid").limit(1).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Database ping failed: {e}",
                code="PING_FAILED",
            )

    # -------------------------------------------------------------------------
    # User Operations
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_user(cls, uid: str) -> dict[str, Any] | None:
        """
        Fetch a user by identity-provider uid.

        Returns:
            User row, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table(USERS_TABLE)
                .select("*")
                .eq("uid", uid)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if cls._is_no_rows(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch user: {e}",
                code="FETCH_USER_FAILED",
                details={"uid": uid}
            )

    @classmethod
    def fetch_user_by_email(cls, email: str) -> dict[str, Any] | None:
        """Fetch a user by (lower-cased) email, or None."""
        client = cls.get_client()

        try:
            response = (
                client.table(USERS_TABLE)
                .select("*")
                .eq("email", email.lower())
                .limit(1)
                .execute()
            )
            rows = response.data or []
            return rows[0] if rows else None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch user by email: {e}",
                code="FETCH_USER_FAILED",
                details={"email": email}
            )

    @classmethod
    def fetch_users(cls, uids: list[str]) -> list[dict[str, Any]]:
        """Fetch several users by uid. Unknown uids are skipped."""
        if not uids:
            return []

        client = cls.get_client()

        try:
            response = (
                client.table(USERS_TABLE)
                .select("*")
                .in_("uid", list(uids))
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch users: {e}",
                code="FETCH_USERS_FAILED",
                details={"count": len(uids)}
            )

    @classmethod
    def insert_user(cls, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a new user row.

        Raises:
            SupabaseClientError: code UNIQUE_VIOLATION when uid or email
                already exists, INSERT_USER_FAILED otherwise
        """
        client = cls.get_client()

        try:
            response = (
                client.table(USERS_TABLE)
                .insert(data)
                .execute()
            )

            if response.data:
                return response.data[0]
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA"
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            if UNIQUE_VIOLATION_CODE in str(e):
                raise SupabaseClientError(
                    message=f"User already exists: {e}",
                    code="UNIQUE_VIOLATION",
                    details={"uid": data.get("uid"), "email": data.get("email")}
                )
            raise SupabaseClientError(
                message=f"Failed to insert user: {e}",
                code="INSERT_USER_FAILED",
                details={"uid": data.get("uid")}
            )

    @classmethod
    def update_user(cls, uid: str, data: dict[str, Any]) -> dict[str, Any] | None:
        """
        Update scalar columns of a user.

        Array columns (liked_recipes, followers, following) must only be
        changed through the RPC helpers below.

        Returns:
            Updated row, or None if the user doesn't exist
        """
        client = cls.get_client()

        try:
            response = (
                client.table(USERS_TABLE)
                .update(data)
                .eq("uid", uid)
                .execute()
            )
            rows = response.data or []
            return rows[0] if rows else None

        except Exception as e:
            if UNIQUE_VIOLATION_CODE in str(e):
                raise SupabaseClientError(
                    message=f"Email already in use: {e}",
                    code="UNIQUE_VIOLATION",
                    details={"uid": uid}
                )
            raise SupabaseClientError(
                message=f"Failed to update user: {e}",
                code="UPDATE_USER_FAILED",
                details={"uid": uid}
            )

    @classmethod
    def touch_user(cls, uid: str, last_active: str) -> dict[str, Any] | None:
        """Set last_active for a user (session refresh)."""
        return cls.update_user(uid, {"last_active": last_active})

    # -------------------------------------------------------------------------
    # Recipe Operations
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_recipe(cls, recipe_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a recipe by ID.

        Malformed ids are treated as not found rather than sent to Postgres,
        which would reject them with a cast error.

        Returns:
            Recipe row, or None if not found
        """
        if not is_valid_uuid(recipe_id):
            return None

        client = cls.get_client()
        recipe_id_str = cls._normalize_uuid(recipe_id)

        try:
            response = (
                client.table(RECIPES_TABLE)
                .select("*")
                .eq("id", recipe_id_str)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if cls._is_no_rows(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch recipe: {e}",
                code="FETCH_RECIPE_FAILED",
                details={"recipe_id": recipe_id_str}
            )

    @classmethod
    def fetch_recipes_by_ids(cls, recipe_ids: list[str]) -> list[dict[str, Any]]:
        """Fetch recipes whose id is in the list, newest first."""
        ids = [cls._normalize_uuid(r) for r in recipe_ids if is_valid_uuid(r)]
        if not ids:
            return []

        client = cls.get_client()

        try:
            response = (
                client.table(RECIPES_TABLE)
                .select("*")
                .in_("id", ids)
                .order("created_at", desc=True)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch recipes: {e}",
                code="FETCH_RECIPES_FAILED",
                details={"count": len(ids)}
            )

    @classmethod
    def list_recipes(
        cls,
        cuisine_type: str | None = None,
        category: str | None = None,
        owner_uid: str | None = None,
        descending: bool = True,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        List recipes with optional filters, ordered by created_at.

        Args:
            cuisine_type: Exact cuisine match
            category: Recipes whose categories array contains this value
            owner_uid: Recipes created by this user
            descending: Newest first when True
            offset: Rows to skip (pagination)
            limit: Max rows, or None for all
        """
        client = cls.get_client()

        query = client.table(RECIPES_TABLE).select("*")
        if cuisine_type:
            query = query.eq("cuisine_type", cuisine_type)
        if category:
            query = query.contains("categories", [category])
        if owner_uid:
            query = query.eq("user_id", owner_uid)

        query = query.order("created_at", desc=descending)
        if limit is not None:
            query = query.range(offset, offset + limit - 1)

        try:
            response = query.execute()
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list recipes: {e}",
                code="LIST_RECIPES_FAILED",
                details={"cuisine_type": cuisine_type, "category": category}
            )

    @classmethod
    def top_recipes(cls, limit: int) -> list[dict[str, Any]]:
        """Recipes ordered by like_count descending."""
        client = cls.get_client()

        try:
            response = (
                client.table(RECIPES_TABLE)
                .select("*")
                .order("like_count", desc=True)
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch top recipes: {e}",
                code="TOP_RECIPES_FAILED",
                details={"limit": limit}
            )

    @classmethod
    def insert_recipe(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a recipe row; like_count is always created at 0."""
        client = cls.get_client()
        data = {**data, "like_count": 0}

        try:
            response = (
                client.table(RECIPES_TABLE)
                .insert(data)
                .execute()
            )

            if response.data:
                return response.data[0]
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA"
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert recipe: {e}",
                code="INSERT_RECIPE_FAILED",
                details={"user_id": data.get("user_id")}
            )

    @classmethod
    def update_recipe(cls, recipe_id: str | UUID, data: dict[str, Any]) -> dict[str, Any] | None:
        """
        Update owner-editable recipe columns.

        like_count and owner columns are stripped; they never change here.
        """
        client = cls.get_client()
        recipe_id_str = cls._normalize_uuid(recipe_id)
        data = {
            k: v for k, v in data.items()
            if k not in ("like_count", "user_id", "user_email", "id", "created_at")
        }

        try:
            response = (
                client.table(RECIPES_TABLE)
                .update(data)
                .eq("id", recipe_id_str)
                .execute()
            )
            rows = response.data or []
            return rows[0] if rows else None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update recipe: {e}",
                code="UPDATE_RECIPE_FAILED",
                details={"recipe_id": recipe_id_str}
            )

    # -------------------------------------------------------------------------
    # Transactional RPCs (see supabase/migrations)
    # -------------------------------------------------------------------------

    @classmethod
    def _rpc(cls, function: str, params: dict[str, Any]) -> Any:
        client = cls.get_client()

        try:
            response = client.rpc(function, params).execute()
            return response.data

        except Exception as e:
            raise SupabaseClientError(
                message=f"RPC {function} failed: {e}",
                code="RPC_FAILED",
                suggestion="Check that the supabase/migrations have been applied",
                details={"function": function, **params}
            )

    @classmethod
    def delete_recipe(cls, recipe_id: str | UUID) -> bool:
        """
        Delete a recipe and strip its id from every user's liked_recipes,
        in one transaction.

        Returns:
            True if a recipe row was deleted
        """
        return bool(cls._rpc(
            "delete_recipe_cascade",
            {"p_recipe_id": cls._normalize_uuid(recipe_id)},
        ))

    @classmethod
    def apply_recipe_like(cls, uid: str, recipe_id: str | UUID, like: bool) -> bool:
        """
        Guarded paired write for the like ledger.

        like=True adds recipe_id to the user's liked_recipes and increments
        like_count, only if it wasn't already there. like=False removes it and
        decrements like_count (floored at 0), only if it was there.

        Returns:
            True if membership changed (and the counter with it)
        """
        return bool(cls._rpc(
            "apply_recipe_like",
            {
                "p_uid": uid,
                "p_recipe_id": cls._normalize_uuid(recipe_id),
                "p_like": like,
            },
        ))

    @classmethod
    def apply_follow_edge(cls, actor_uid: str, target_uid: str, follow: bool) -> bool:
        """
        Guarded paired write for the social graph.

        follow=True appends target to actor.following and actor to
        target.followers; follow=False removes both. Both rows are locked and
        written in one transaction.

        Returns:
            True if the edge changed
        """
        return bool(cls._rpc(
            "apply_follow_edge",
            {
                "p_actor": actor_uid,
                "p_target": target_uid,
                "p_follow": follow,
            },
        ))

    @classmethod
    def reconcile_like_count(cls, recipe_id: str | UUID) -> int | None:
        """
        Recompute like_count from users.liked_recipes and store it.

        Returns:
            The corrected count, or None if the recipe doesn't exist
        """
        result = cls._rpc(
            "reconcile_like_count",
            {"p_recipe_id": cls._normalize_uuid(recipe_id)},
        )
        return None if result is None else int(result)
