# =============================================================================
# tests/test_reconcile_script.py - Like Counter Repair Script Tests
# =============================================================================

import uuid

from scripts.reconcile_like_counts import main


class TestReconcileScript:
    """Tests for scripts/reconcile_like_counts.py main()."""

    def test_repairs_all_recipes(self, fake_db, capsys):
        fake_db.add_user("alice")
        recipe_id = fake_db.add_recipe("alice")["id"]
        fake_db.recipes[recipe_id]["like_count"] = 7

        assert main([]) == 0

        assert fake_db.recipes[recipe_id]["like_count"] == 0
        assert "Reconciled 1 recipe(s)" in capsys.readouterr().out

    def test_unknown_recipe_fails(self, fake_db, capsys):
        missing = str(uuid.uuid4())

        assert main([missing]) == 1
        assert missing in capsys.readouterr().out
