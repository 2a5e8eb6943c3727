# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the catalog's business logic:
# - models/: Pydantic schemas for guitars and object access policies
# - services/: Guitar queries, access policy evaluation, object storage
#
# Services receive their clients explicitly and never touch request
# objects, so they can be tested without HTTP.
# =============================================================================
