# =============================================================================
# tests/test_object_routes.py - Object Upload/Download Endpoint Tests
# =============================================================================

import inspect

from botocore.exceptions import ClientError

from app.dependencies import get_object_storage_provider, get_object_storage_service
from app.exceptions import ObjectStorageConfigError
from app.main import app
from core.models.object_acl import ObjectAclPolicy, ObjectVisibility
from tests.conftest import BUCKET

UPLOAD_KEY = ".private/uploads/abc"


def _broken_storage():
    raise ObjectStorageConfigError("PRIVATE_OBJECT_DIR", "Set PRIVATE_OBJECT_DIR")


def _publish(storage, path: str) -> None:
    policy = ObjectAclPolicy(owner="bond-st-guitars", visibility=ObjectVisibility.PUBLIC)
    storage.set_acl_policy(storage.resolve(path), policy)


class TestUploadUrl:
    """Tests for POST /api/objects/upload."""

    def test_returns_signed_url(self, client, s3):
        response = client.post("/api/objects/upload")

        assert response.status_code == 200
        assert response.json()["uploadURL"].endswith("X-Amz-Expires=900&X-Amz-Signature=fake")
        assert s3.signed[-1]["key"].startswith(".private/uploads/")

    def test_signing_failure_hides_storage_error(self, client, s3, monkeypatch):
        def deny(**kwargs):
            raise ClientError(
                {"Error": {"Code": "AccessDenied", "Message": "key AKIASECRET123 denied on internal-bucket-x"}},
                "PutObject",
            )

        monkeypatch.setattr(s3, "generate_presigned_url", deny)

        response = client.post("/api/objects/upload")

        assert response.status_code == 500
        assert response.json()["code"] == "STORAGE_UPLOAD_ERROR"
        assert "AKIASECRET123" not in response.text
        assert "internal-bucket-x" not in response.text

    def test_missing_configuration(self, client):
        app.dependency_overrides[get_object_storage_service] = _broken_storage

        response = client.post("/api/objects/upload")

        assert response.status_code == 500
        assert response.json()["code"] == "OBJECT_STORAGE_CONFIG_ERROR"

    def test_guitars_without_images_do_not_need_storage(self, client, sample_guitar_payload):
        app.dependency_overrides[get_object_storage_provider] = lambda: _broken_storage

        assert client.post("/api/guitars", json=sample_guitar_payload).status_code == 201


class TestDownloadObject:
    """Tests for GET /objects/{path}."""

    def test_public_object(self, client, s3, storage):
        s3.put(BUCKET, UPLOAD_KEY, content=b"jpeg-bytes", content_type="image/jpeg")
        _publish(storage, "/objects/uploads/abc")

        response = client.get("/objects/uploads/abc")

        assert response.status_code == 200
        assert response.content == b"jpeg-bytes"
        assert response.headers["content-type"] == "image/jpeg"
        assert response.headers["cache-control"] == "public, max-age=3600"

    def test_object_without_policy_is_hidden(self, client, s3):
        s3.put(BUCKET, UPLOAD_KEY)

        response = client.get("/objects/uploads/abc")

        assert response.status_code == 404
        assert response.json()["code"] == "OBJECT_NOT_FOUND"

    def test_private_object_is_hidden(self, client, s3, storage):
        s3.put(BUCKET, UPLOAD_KEY)
        policy = ObjectAclPolicy(owner="bond-st-guitars", visibility=ObjectVisibility.PRIVATE)
        storage.set_acl_policy(storage.resolve("/objects/uploads/abc"), policy)

        assert client.get("/objects/uploads/abc").status_code == 404

    def test_missing_object(self, client):
        assert client.get("/objects/uploads/never-uploaded").status_code == 404


class TestDownloadPublicObject:
    """Tests for GET /public-objects/{path}."""

    def test_found(self, client, s3):
        s3.put(BUCKET, "shared/brand/logo.png", content=b"png", content_type="image/png")

        response = client.get("/public-objects/brand/logo.png")

        assert response.status_code == 200
        assert response.content == b"png"
        assert response.headers["content-type"] == "image/png"

    def test_not_found(self, client):
        assert client.get("/public-objects/nothing.png").status_code == 404


class TestHandlersRunInThreadpool:
    """Routes that call supabase or S3 must not block the event loop."""

    def test_blocking_routes_are_sync(self):
        blocking = [
            route for route in app.routes
            if getattr(route, "path", "").startswith(("/api/guitars", "/api/objects", "/objects", "/public-objects"))
            or getattr(route, "path", "") == "/api/health/ready"
        ]

        assert len(blocking) == 9
        for route in blocking:
            assert not inspect.iscoroutinefunction(route.endpoint), route.path
