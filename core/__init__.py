# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic business logic:
# - models/: Pydantic schemas for data validation
# - services/: Session guard, ownership policy, like ledger, social graph,
#   and the recipe/user services built on lib.supabase_client
#
# Code in this package should NOT import from FastAPI.
# This keeps the logic testable and reusable.
# =============================================================================
