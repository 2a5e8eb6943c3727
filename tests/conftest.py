# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides in-memory Supabase and S3 clients and the services built on them
# - Provides a TestClient with dependencies overridden
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from app.dependencies import (
    get_guitar_service,
    get_object_storage_provider,
    get_object_storage_service,
)
from app.main import app
from core.services.guitar_service import GuitarService
from core.services.object_acl import create_access_group_registry
from core.services.object_storage_service import ObjectStorageService
from tests.fakes import FakeS3Client, FakeSupabaseClient

BUCKET = "guitar-media"
PRIVATE_DIR = f"/{BUCKET}/.private"
PUBLIC_PATHS = [f"/{BUCKET}/public", f"/{BUCKET}/shared"]
STORAGE_URL = "https://s3.test"


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def supabase():
    """Empty in-memory Supabase client."""
    return FakeSupabaseClient()


@pytest.fixture
def guitar_service(supabase):
    return GuitarService(supabase, "guitars")


@pytest.fixture
def s3():
    """Empty in-memory S3 client."""
    return FakeS3Client()


@pytest.fixture
def groups(supabase):
    return create_access_group_registry(supabase)


@pytest.fixture
def storage(s3, groups):
    """Object storage service over the fake S3 client."""
    return ObjectStorageService(
        client=s3,
        groups=groups,
        private_object_dir=PRIVATE_DIR,
        public_search_paths=list(PUBLIC_PATHS),
        public_url=STORAGE_URL,
        upload_url_ttl_seconds=900,
    )


@pytest.fixture
def client(guitar_service, storage):
    """TestClient with services replaced by the in-memory ones."""
    app.dependency_overrides[get_guitar_service] = lambda: guitar_service
    app.dependency_overrides[get_object_storage_service] = lambda: storage
    app.dependency_overrides[get_object_storage_provider] = lambda: (lambda: storage)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def sample_guitar_payload():
    """Valid create payload, as the storefront sends it."""
    return {
        "brand": "Fender",
        "model": "Stratocaster",
        "type": "electric",
        "year": 2020,
        "condition": "excellent",
        "color": "Sunburst",
        "price": 1200,
        "pickupLocation": "Pick up",
    }


@pytest.fixture
def sample_guitar_rows():
    """Rows as they sit in the guitars table."""
    return [
        {
            "id": "g-1", "brand": "Fender", "model": "Precision Bass", "type": "bass",
            "year": 2018, "condition": "good", "color": "Olympic White", "price": "450.00",
            "pickup_location": "Bond St", "description": "Light wear on the pickguard",
            "status": "available", "image_url": None, "image_urls": [],
        },
        {
            "id": "g-2", "brand": "Music Man", "model": "StingRay", "type": "bass",
            "year": 2021, "condition": "excellent", "color": "Black", "price": "900.00",
            "pickup_location": "Bond St", "description": None,
            "status": "reserved", "image_url": None, "image_urls": [],
        },
        {
            "id": "g-3", "brand": "Gibson", "model": "Les Paul Standard", "type": "electric",
            "year": 2019, "condition": "excellent", "color": "Heritage Cherry Sunburst", "price": "2499.00",
            "pickup_location": "Warehouse", "description": "Includes hard case",
            "status": "available", "image_url": "/objects/uploads/lp-front", "image_urls": ["/objects/uploads/lp-back"],
        },
        {
            "id": "g-4", "brand": "Yamaha", "model": "C40", "type": "classical",
            "year": 2022, "condition": "new", "color": "Natural", "price": "149.99",
            "pickup_location": "Bond St", "description": "Great first guitar, pairs with a gibson strap",
            "status": "sold", "image_url": None, "image_urls": [],
        },
    ]


@pytest.fixture
def seeded_service(guitar_service, supabase, sample_guitar_rows):
    """Guitar service over a table holding sample_guitar_rows."""
    supabase.tables["guitars"] = [dict(row) for row in sample_guitar_rows]
    return guitar_service
