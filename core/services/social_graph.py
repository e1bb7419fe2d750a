# =============================================================================
# core/services/social_graph.py - Follower / Following Graph
# =============================================================================
# Edges are stored on both ends: actor.following holds the target uid and
# target.followers holds the actor uid. apply_follow_edge writes both rows in
# one transaction, so
#
#   target in actor.following  <=>  actor in target.followers
#
# is never observed half-applied.
# =============================================================================

import logging
from typing import Any

from app.exceptions import (
    AlreadyFollowingError,
    NotFollowingError,
    SelfFollowError,
    SelfUnfollowError,
    UserNotFoundError,
)
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


class SocialGraphService:
    """Follow/unfollow and follower listings."""

    @staticmethod
    def _load_pair(actor_uid: str, target_uid: str, verb: str) -> tuple[dict[str, Any], dict[str, Any]]:
        actor = SupabaseClient.fetch_user(actor_uid)
        if not actor:
            raise UserNotFoundError(actor_uid, label="Current user")

        target = SupabaseClient.fetch_user(target_uid)
        if not target:
            raise UserNotFoundError(target_uid, label=f"User to {verb}")

        return actor, target

    @staticmethod
    def is_following(actor: dict[str, Any], target_uid: str) -> bool:
        return target_uid in (actor.get("following") or [])

    @staticmethod
    def follow(actor_uid: str, target_uid: str) -> None:
        """
        Make actor follow target.

        Raises:
            SelfFollowError, UserNotFoundError, AlreadyFollowingError
        """
        if actor_uid == target_uid:
            raise SelfFollowError()

        actor, _ = SocialGraphService._load_pair(actor_uid, target_uid, "follow")

        if SocialGraphService.is_following(actor, target_uid):
            raise AlreadyFollowingError(target_uid)

        if not SupabaseClient.apply_follow_edge(actor_uid, target_uid, follow=True):
            raise AlreadyFollowingError(target_uid)

        logger.info(f"User {actor_uid} followed {target_uid}")

    @staticmethod
    def unfollow(actor_uid: str, target_uid: str) -> None:
        """
        Remove the actor -> target edge.

        Raises:
            SelfUnfollowError, UserNotFoundError, NotFollowingError
        """
        if actor_uid == target_uid:
            raise SelfUnfollowError()

        actor, _ = SocialGraphService._load_pair(actor_uid, target_uid, "unfollow")

        if not SocialGraphService.is_following(actor, target_uid):
            raise NotFollowingError(target_uid)

        if not SupabaseClient.apply_follow_edge(actor_uid, target_uid, follow=False):
            raise NotFollowingError(target_uid)

        logger.info(f"User {actor_uid} unfollowed {target_uid}")

    @staticmethod
    def followers(uid: str) -> list[dict[str, Any]]:
        """User rows of everyone following uid."""
        user = SupabaseClient.fetch_user(uid)
        if not user:
            raise UserNotFoundError(uid)
        return SupabaseClient.fetch_users(user.get("followers") or [])

    @staticmethod
    def following(uid: str) -> list[dict[str, Any]]:
        """User rows of everyone uid follows."""
        user = SupabaseClient.fetch_user(uid)
        if not user:
            raise UserNotFoundError(uid)
        return SupabaseClient.fetch_users(user.get("following") or [])
