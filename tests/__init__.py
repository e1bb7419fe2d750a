# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Recipe Book API:
# - test_models.py: Pydantic model validation
# - test_session_guard.py / test_ownership.py: authorization layer
# - test_like_ledger.py / test_social_graph.py: cross-entity invariants
# - test_verifier.py: identity provider token verification
# - test_api_recipes.py / test_api_users.py: endpoint integration tests
#
# Run tests with: pytest
# =============================================================================
