"""Tests for the HTTP surface over the data layer."""

import httpx
import pytest
from fastapi.testclient import TestClient
from supabase import PostgrestAPIError

from tests.conftest import photo_row, vault_row
from vaultshare.config import settings
from vaultshare.core.dependencies import get_current_user
from vaultshare.main import app, limiter

USER = {"id": "user-1", "email": "ada@example.com"}


def membership(vault_id="vault-1", role="owner", count=3):
    return {"role": role, "vaults": [vault_row(vault_id, "Family", "2024-05-01T10:00:00+00:00", [{"count": count}])]}


@pytest.fixture
def client(connector):
    limiter.reset()
    app.state.connector = connector
    app.dependency_overrides[get_current_user] = lambda: USER
    yield TestClient(app)
    app.dependency_overrides.clear()
    app.state.connector = None


class TestVaultRoutes:
    def test_list_vaults_returns_views(self, client, backend):
        backend.queue("vault_members", [membership(), {"role": "member", "vaults": vault_row(
            "vault-2", "Friends", "2024-04-01T10:00:00+00:00", [{"count": 1}])}])

        response = client.get("/api/v1/vaults")

        assert response.status_code == 200
        body = response.json()
        assert [v["id"] for v in body] == ["vault-1", "vault-2"]
        assert [v["photo_count"] for v in body] == [3, 1]
        assert body[1]["role"] == "member"

    def test_create_vault(self, client, backend):
        backend.queue("vaults", [vault_row("vault-1", "Family", "2024-05-01T10:00:00+00:00")])
        backend.queue("vault_members", [{"vault_id": "vault-1", "user_id": "user-1", "role": "owner"}])

        response = client.post("/api/v1/vaults", json={"name": "Family", "color": "bg-rose-500"})

        assert response.status_code == 201
        assert response.json()["id"] == "vault-1"

    def test_non_member_cannot_read_vault(self, client, backend):
        backend.queue("vault_members", [membership("other-vault")])

        response = client.get("/api/v1/vaults/vault-1")

        assert response.status_code == 403

    def test_member_cannot_delete_vault(self, client, backend):
        backend.queue("vault_members", [membership(role="member")])

        response = client.delete("/api/v1/vaults/vault-1")

        assert response.status_code == 403
        assert backend.queries_for("vaults") == []

    def test_admin_can_delete_vault(self, client, backend):
        backend.queue("vault_members", [membership(role="admin")])
        backend.queue("vaults", [vault_row("vault-1", "Family", "2024-05-01T10:00:00+00:00")])

        response = client.delete("/api/v1/vaults/vault-1")

        assert response.status_code == 204
        assert backend.queries_for("vaults")[0].called("delete")

    def test_vault_description_can_be_cleared(self, client, backend):
        backend.queue("vault_members", [membership()])
        backend.queue("vaults", [vault_row("vault-1", "Family", "2024-05-01T10:00:00+00:00")])

        response = client.put("/api/v1/vaults/vault-1", json={"description": None, "name": None})

        assert response.status_code == 200
        (_, (payload,), _), = backend.queries_for("vaults")[0].called("update")
        assert payload == {"description": None}

    def test_duplicate_member_is_conflict(self, client, backend):
        backend.queue("vault_members", [membership()], PostgrestAPIError({
            "message": "duplicate key value violates unique constraint", "code": "23505",
        }))

        response = client.post("/api/v1/vaults/vault-1/members", json={"user_id": "user-2"})

        assert response.status_code == 409

    def test_unreachable_backend_is_503(self, client, backend):
        backend.queue("vault_members", *[httpx.ConnectError("refused")] * 3)

        response = client.get("/api/v1/vaults")

        assert response.status_code == 503
        assert response.json()["retry"] is True


class TestPhotoRoutes:
    def test_batch_upload_reports_per_file_status(self, client, backend):
        backend.queue("vault_members", [membership()])
        backend.queue("photos", [photo_row("photo-1")])

        response = client.post(
            "/api/v1/photos/upload",
            data={"vault_id": "vault-1"},
            files=[
                ("files", ("beach.jpg", b"\xff\xd8jpeg", "image/jpeg")),
                ("files", ("notes.txt", b"hello", "text/plain")),
            ],
        )

        assert response.status_code == 200
        body = response.json()
        assert [i["status"] for i in body["items"]] == ["success", "skipped"]
        assert body["all_successful"] is True

    def test_missing_photo_is_404(self, client, backend):
        backend.queue("photos", PostgrestAPIError({"message": "no rows", "code": "PGRST116"}))

        response = client.get("/api/v1/photos/photo-9")

        assert response.status_code == 404


class TestProfileAndUsageRoutes:
    def test_save_profile(self, client, backend):
        backend.queue("profiles", PostgrestAPIError({"message": "no rows", "code": "PGRST116"}), [{
            "id": "user-1", "full_name": "Ada", "created_at": "2024-05-01T10:00:00+00:00",
        }])

        response = client.put("/api/v1/profile", json={"full_name": "Ada"})

        assert response.status_code == 200
        assert response.json()["full_name"] == "Ada"

    def test_profile_fields_can_be_cleared(self, client, backend):
        row = {"id": "user-1", "full_name": "Ada", "bio": "Hi", "created_at": "2024-05-01T10:00:00+00:00"}
        backend.queue("profiles", row, [{**row, "bio": None}])

        response = client.put("/api/v1/profile", json={"bio": None, "notifications_enabled": None})

        assert response.status_code == 200
        assert response.json()["bio"] is None
        (_, (payload,), _), = backend.queries_for("profiles")[1].called("update")
        assert payload["bio"] is None
        assert "notifications_enabled" not in payload
        assert "full_name" not in payload

    def test_avatar_rejects_non_images(self, client, bucket):
        response = client.post(
            "/api/v1/profile/avatar", files={"file": ("cv.pdf", b"%PDF", "application/pdf")}
        )

        assert response.status_code == 422
        bucket.upload.assert_not_awaited()

    def test_storage_usage(self, client, backend):
        backend.queue("vault_members", [membership(count=30), membership("vault-2", count=10)])

        response = client.get("/api/v1/usage/storage")

        assert response.status_code == 200
        body = response.json()
        assert body["used_mb"] == 100
        assert body["available_mb"] == 924
        assert body["used_percentage"] == pytest.approx(9.765625)

    def test_dashboard(self, client, backend):
        backend.queue("vault_members", [membership(count=2)])
        backend.queue("photos", [photo_row("p1"), photo_row("p2")])

        response = client.get("/api/v1/usage/dashboard")

        assert response.status_code == 200
        body = response.json()
        assert body["total_vaults"] == 1
        assert body["total_photos"] == 2


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_ready_checks_backend(self, client, backend):
        backend.queue("profiles", [])
        assert client.get("/ready").status_code == 200

    def test_not_ready_when_backend_down(self, client, backend):
        backend.queue("profiles", *[httpx.ConnectError("refused")] * 3)
        assert client.get("/ready").status_code == 503


class TestRateLimit:
    def test_default_limit_applies_to_routes(self, client):
        allowed = int(settings.rate_limit.split("/")[0])
        statuses = [client.get("/health").status_code for _ in range(allowed + 1)]

        assert statuses[:allowed] == [200] * allowed
        assert statuses[allowed] == 429
