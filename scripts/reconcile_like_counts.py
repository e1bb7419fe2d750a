#!/usr/bin/env python3
# =============================================================================
# scripts/reconcile_like_counts.py - Repair Recipe Like Counters
# =============================================================================
# Recomputes recipes.like_count from users.liked_recipes through the
# reconcile_like_count database function. Run it after restoring a backup or
# editing rows by hand.
#
# Usage:
#   # Every recipe
#   python scripts/reconcile_like_counts.py
#
#   # Specific recipes
#   python scripts/reconcile_like_counts.py <recipe-id> [<recipe-id> ...]
#
# Prerequisites:
#   - Environment variables must be set (.env file)
#   - supabase/migrations applied
# =============================================================================

import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.exceptions import RecipeNotFoundError
from core.services.like_ledger import LikeLedger


def main(argv: list[str] | None = None) -> int:
    """Reconcile the given recipes (or all); returns the process exit code."""
    recipe_ids = list(argv if argv is not None else sys.argv[1:]) or None

    try:
        counts = LikeLedger.reconcile_all(recipe_ids)
    except RecipeNotFoundError as e:
        print(f"Recipe not found: {e.details['recipe_id']}")
        return 1

    for recipe_id, count in counts.items():
        print(f"{recipe_id}: {count}")
    print(f"Reconciled {len(counts)} recipe(s)")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    sys.exit(main())
