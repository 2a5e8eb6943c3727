# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the GuitarVault API:
# - test_models.py: Unit tests for Pydantic model validation
# - test_guitar_query.py: Filter and search query construction
# - test_guitar_service.py: Catalog operations on the in-memory table
# - test_object_acl.py: Object access policy evaluation
# - test_object_storage.py: Upload URLs, path mapping, policies, downloads
# - test_guitar_routes.py / test_object_routes.py / test_health.py: API endpoints
# - fakes.py: In-memory Supabase and S3 clients
#
# Run tests with: pytest
# =============================================================================
