# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic business logic:
# - scheduling.py: Training session date calculator (pure)
# - accounting.py: Commission and remaining-balance rules (pure)
# - models/: Pydantic schemas for data validation
# - services/: Supabase-backed operations used by the API routes
#
# Code in this package should NOT import from FastAPI.
# This keeps the logic testable and reusable.
# =============================================================================
