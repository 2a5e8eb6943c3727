# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - guitars.py: Guitar listing CRUD, search, and filter endpoints
# - objects.py: Image upload URL and download endpoints
# - health.py: Health check endpoints
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import guitars
from . import health
from . import objects

__all__ = [
    "guitars",
    "health",
    "objects",
]
