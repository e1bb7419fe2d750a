# =============================================================================
# core/services/ownership.py - Recipe Ownership Policy
# =============================================================================
# Decides whether a caller may update or delete a recipe.
#
# The decision is bound to the verified subject from the session. A
# caller-supplied owner claim (PUT body `userId`, DELETE query `userId`) is
# only ever an extra constraint: if present it must match the stored owner.
# =============================================================================

import logging
from typing import Any

from app.exceptions import ForbiddenError

logger = logging.getLogger(__name__)


class OwnershipPolicy:
    """Owner-only mutation rule for recipes."""

    @staticmethod
    def owner_of(recipe: dict[str, Any]) -> str | None:
        return recipe.get("user_id")

    @staticmethod
    def can_mutate(
        recipe: dict[str, Any],
        subject_uid: str | None,
        owner_claim: str | None = None,
    ) -> bool:
        """
        True when the verified subject owns the recipe and any owner claim
        agrees with the stored owner.
        """
        owner = OwnershipPolicy.owner_of(recipe)
        if not owner or not subject_uid:
            return False
        if owner_claim is not None and owner_claim != owner:
            return False
        return subject_uid == owner

    @staticmethod
    def ensure_can_mutate(
        recipe: dict[str, Any],
        subject_uid: str | None,
        owner_claim: str | None = None,
        action: str = "update",
    ) -> None:
        """
        Raises:
            ForbiddenError: If can_mutate() is False
        """
        if not OwnershipPolicy.can_mutate(recipe, subject_uid, owner_claim):
            logger.warning(
                f"Denied {action} on recipe {recipe.get('id')}: "
                f"subject={subject_uid} claim={owner_claim} owner={recipe.get('user_id')}"
            )
            raise ForbiddenError(action, str(recipe.get("id")))
