# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the BPM CRM API:
# - test_scheduling.py / test_accounting.py: pure date and money rules
# - test_models.py: Unit tests for Pydantic model validation
# - test_*_service.py: services against the in-memory Supabase (conftest)
# - test_reporter.py: OpenAI report writer with a mocked client
# - test_auth.py / test_routers.py: HTTP layer, tokens and roles
#
# Run tests with: pytest
# =============================================================================
