import io
from datetime import timedelta

import pytest
from starlette.datastructures import UploadFile

from gs_portfolio.core.config import settings
from gs_portfolio.core.security import utcnow
from gs_portfolio.models import AdminSession, GSFile
from gs_portfolio.routes.admin import _read_checked
from gs_portfolio.utils.validators import FileValidationError, validate_gs_file
from tests.utils import ADMIN_PASSWORD, ADMIN_USERNAME

SPLAT = "application/octet-stream"


async def upload(client, filename="demo.splat", data=b"splat", display_name="Demo", content_type=SPLAT, **extra):
    files = {"file": (filename, data, content_type)}
    if "thumbnail" in extra:
        files["thumbnail"] = extra.pop("thumbnail")
    form = {"display_name": display_name, **extra}
    return await client.post("/api/admin/gs-files", files=files, data=form)


def _record_reads(monkeypatch):
    """Patch UploadFile.read to log (filename, size) for every call."""
    reads = []
    original = UploadFile.read

    async def read(self, size=-1):
        reads.append((self.filename, size))
        return await original(self, size)

    monkeypatch.setattr(UploadFile, "read", read)
    return reads


@pytest.mark.unit
class TestReadChecked:
    async def test_unknown_size_reads_one_past_the_limit(self, monkeypatch):
        monkeypatch.setattr(settings, "MAX_GS_FILE_SIZE", 10)
        body = UploadFile(io.BytesIO(b"x" * 4096), filename="big.splat")
        with pytest.raises(FileValidationError, match="too large"):
            await _read_checked(body, 10, lambda n: validate_gs_file("big.splat", SPLAT, n))
        assert body.file.tell() == 11

    async def test_declared_size_rejects_before_reading(self, monkeypatch):
        monkeypatch.setattr(settings, "MAX_GS_FILE_SIZE", 10)
        body = UploadFile(io.BytesIO(b"x" * 4096), filename="big.splat", size=4096)
        with pytest.raises(FileValidationError, match="too large"):
            await _read_checked(body, 10, lambda n: validate_gs_file("big.splat", SPLAT, n))
        assert body.file.tell() == 0

    async def test_within_limit(self):
        body = UploadFile(io.BytesIO(b"splat"), filename="ok.splat", size=5)
        data = await _read_checked(body, 10, lambda n: validate_gs_file("ok.splat", SPLAT, n))
        assert data == b"splat"


@pytest.mark.integration
class TestAuthFlow:
    async def test_login_me_logout(self, client, admin_user):
        resp = await client.post("/api/admin/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["data"]["user"]["id"] == admin_user.id
        assert "password_hash" not in body["data"]["user"]
        assert "token" not in body["data"]

        set_cookie = resp.headers["set-cookie"]
        for attr in ("session=", "HttpOnly", "Secure", "SameSite=Strict", "Max-Age=86400", "Path=/"):
            assert attr in set_cookie

        me = await client.get("/api/admin/me")
        assert me.status_code == 200
        assert me.json()["data"]["user"]["id"] == admin_user.id
        assert me.json()["data"]["user"]["last_login"] is not None

        out = await client.post("/api/admin/logout")
        assert out.status_code == 200
        assert out.json()["message"] == "Logged out"
        assert "Max-Age=0" in out.headers["set-cookie"]

        me = await client.get("/api/admin/me")
        assert me.status_code == 401
        assert me.json() == {"success": False, "error": "Authentication required"}

    async def test_session_is_deleted_on_logout(self, client, admin_user):
        resp = await client.post("/api/admin/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
        token = resp.cookies["session"]
        await client.post("/api/admin/logout")

        client.cookies.clear()
        replay = await client.get("/api/admin/me", headers={"Cookie": f"session={token}"})
        assert replay.status_code == 401

    @pytest.mark.parametrize(
        "username, password",
        [(ADMIN_USERNAME, "wrong-password"), ("nobody", ADMIN_PASSWORD)],
    )
    async def test_bad_credentials(self, client, admin_user, username, password):
        resp = await client.post("/api/admin/login", json={"username": username, "password": password})
        assert resp.status_code == 401
        assert resp.json()["error"] == "Incorrect username or password"
        assert "set-cookie" not in resp.headers

    @pytest.mark.parametrize("payload", [{}, {"username": "admin"}, {"username": "", "password": "x"}])
    async def test_missing_fields(self, client, payload):
        resp = await client.post("/api/admin/login", json=payload)
        assert resp.status_code == 400

    async def test_malformed_body(self, client):
        resp = await client.post(
            "/api/admin/login", content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert resp.status_code == 400
        assert resp.json()["success"] is False
        assert resp.json()["error"] == "Malformed request body"

    async def test_inactive_admin_cannot_login(self, client, admin_user, db_session):
        admin_user.is_active = False
        await db_session.commit()
        resp = await client.post("/api/admin/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
        assert resp.status_code == 401

    async def test_unknown_cookie(self, client):
        resp = await client.get("/api/admin/me", headers={"Cookie": "session=forged"})
        assert resp.status_code == 401

    async def test_expired_session(self, client, admin_user, db_session):
        db_session.add(
            AdminSession(user_id=admin_user.id, session_token="stale", expires_at=utcnow() - timedelta(minutes=1))
        )
        await db_session.commit()

        resp = await client.get("/api/admin/me", headers={"Cookie": "session=stale"})
        assert resp.status_code == 401
        assert resp.json() == {"success": False, "error": "Authentication required"}

    async def test_user_deactivated_after_login(self, admin_client, admin_user, db_session):
        assert (await admin_client.get("/api/admin/me")).status_code == 200

        admin_user.is_active = False
        await db_session.commit()

        resp = await admin_client.get("/api/admin/me")
        assert resp.status_code == 401
        assert resp.json() == {"success": False, "error": "Authentication required"}

    @pytest.mark.parametrize(
        "method, path",
        [
            ("POST", "/api/admin/logout"),
            ("POST", "/api/admin/gs-files"),
            ("PUT", "/api/admin/gs-files/1"),
            ("DELETE", "/api/admin/gs-files/1"),
        ],
    )
    async def test_admin_routes_require_auth(self, client, method, path):
        resp = await client.request(method, path)
        assert resp.status_code == 401


@pytest.mark.integration
class TestJwtAuth:
    async def test_bearer_token_when_enabled(self, client, admin_user, monkeypatch):
        monkeypatch.setattr(settings, "ENABLE_JWT_AUTH", True)
        resp = await client.post("/api/admin/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
        token = resp.json()["data"]["token"]

        client.cookies.clear()
        me = await client.get("/api/admin/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["data"]["user"]["username"] == ADMIN_USERNAME

    async def test_bearer_token_ignored_when_disabled(self, client, admin_user, monkeypatch):
        monkeypatch.setattr(settings, "ENABLE_JWT_AUTH", True)
        resp = await client.post("/api/admin/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
        token = resp.json()["data"]["token"]

        monkeypatch.setattr(settings, "ENABLE_JWT_AUTH", False)
        client.cookies.clear()
        me = await client.get("/api/admin/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 401


@pytest.mark.integration
class TestUpload:
    async def test_upload_list_download(self, admin_client, fake_minio):
        data = bytes(range(256)) * (10 * 1024 * 1024 // 256)
        resp = await upload(admin_client, "demo.splat", data, "Demo", description="A 10MB scene")
        assert resp.status_code == 201
        body = resp.json()
        assert body["message"] == "File uploaded"
        created = body["data"]
        assert created["display_name"] == "Demo"
        assert created["file_size"] == len(data)
        assert created["file_path"].startswith("gs-files/")
        assert created["file_path"].endswith("-demo.splat")
        assert fake_minio.keys("gs-files/") == [created["file_path"]]

        listing = (await admin_client.get("/api/gs-files")).json()["data"]["data"]
        assert [f["id"] for f in listing] == [created["id"]]

        download = await admin_client.get(f"/api/gs-files/{created['id']}/file")
        assert download.status_code == 200
        assert download.content == data

    async def test_upload_with_thumbnail(self, admin_client, fake_minio):
        resp = await upload(admin_client, thumbnail=("thumb.png", b"\x89PNG", "image/png"))
        assert resp.status_code == 201
        created = resp.json()["data"]
        assert created["thumbnail_path"].startswith("thumbnails/")
        assert fake_minio.keys("thumbnails/") == [created["thumbnail_path"]]

        thumb = await admin_client.get(f"/api/gs-files/{created['id']}/thumbnail")
        assert thumb.content == b"\x89PNG"

    @pytest.mark.parametrize("content_type", [SPLAT, "application/x-msdownload"])
    async def test_rejects_exe(self, admin_client, fake_minio, content_type):
        resp = await upload(admin_client, "setup.exe", b"MZ", content_type=content_type)
        assert resp.status_code == 400
        assert "Only .splat and .ply" in resp.json()["error"]
        assert fake_minio.keys() == []

    async def test_rejects_bad_thumbnail(self, admin_client, fake_minio):
        resp = await upload(admin_client, thumbnail=("thumb.gif", b"GIF89a", "image/gif"))
        assert resp.status_code == 400
        assert fake_minio.keys() == []

    async def test_rejects_oversized(self, admin_client, monkeypatch):
        monkeypatch.setattr(settings, "MAX_GS_FILE_SIZE", 10)
        resp = await upload(admin_client, data=b"x" * 11)
        assert resp.status_code == 400
        assert "too large" in resp.json()["error"]

    async def test_oversized_body_is_not_buffered(self, admin_client, fake_minio, monkeypatch):
        monkeypatch.setattr(settings, "MAX_GS_FILE_SIZE", 10)
        reads = _record_reads(monkeypatch)
        resp = await upload(admin_client, data=b"x" * 4096)
        assert resp.status_code == 400
        assert "too large" in resp.json()["error"]
        assert all(0 <= size <= 11 for name, size in reads if name == "demo.splat")
        assert fake_minio.keys() == []

    async def test_oversized_thumbnail(self, admin_client, fake_minio, monkeypatch):
        monkeypatch.setattr(settings, "MAX_THUMBNAIL_SIZE", 10)
        reads = _record_reads(monkeypatch)
        resp = await upload(admin_client, thumbnail=("thumb.png", b"\x89PNG" * 1024, "image/png"))
        assert resp.status_code == 400
        assert "Thumbnail is too large" in resp.json()["error"]
        assert all(0 <= size <= 11 for name, size in reads if name == "thumb.png")
        assert fake_minio.keys() == []

    async def test_requires_display_name(self, admin_client):
        resp = await upload(admin_client, display_name="")
        assert resp.status_code == 400
        assert resp.json()["error"] == "A file and a display name are required"

    async def test_requires_file(self, admin_client):
        resp = await admin_client.post("/api/admin/gs-files", data={"display_name": "Demo"})
        assert resp.status_code == 400


@pytest.mark.integration
class TestUpdateAndDelete:
    async def test_update(self, admin_client):
        created = (await upload(admin_client, description="old")).json()["data"]
        resp = await admin_client.put(
            f"/api/admin/gs-files/{created['id']}", json={"display_name": "Renamed", "description": ""}
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "File updated"
        assert body["data"]["display_name"] == "Renamed"
        assert body["data"]["description"] == "old"

        fetched = (await admin_client.get(f"/api/gs-files/{created['id']}")).json()["data"]
        assert fetched["display_name"] == "Renamed"

    async def test_update_missing(self, admin_client):
        resp = await admin_client.put("/api/admin/gs-files/999", json={"display_name": "x"})
        assert resp.status_code == 404

    async def test_update_rejects_long_name(self, admin_client):
        created = (await upload(admin_client)).json()["data"]
        resp = await admin_client.put(f"/api/admin/gs-files/{created['id']}", json={"display_name": "x" * 256})
        assert resp.status_code == 400

    async def test_delete(self, admin_client, fake_minio, session_factory):
        created = (await upload(admin_client, thumbnail=("t.webp", b"RIFF", "image/webp"))).json()["data"]
        resp = await admin_client.delete(f"/api/admin/gs-files/{created['id']}")
        assert resp.status_code == 200
        assert resp.json()["message"] == "File deleted"
        assert fake_minio.keys() == []

        assert (await admin_client.get(f"/api/gs-files/{created['id']}")).status_code == 404
        # soft delete: the row stays, inactive
        async with session_factory() as db:
            row = await db.get(GSFile, created["id"])
            assert row is not None
            assert row.is_active is False

        again = await admin_client.delete(f"/api/admin/gs-files/{created['id']}")
        assert again.status_code == 404

    async def test_delete_missing(self, admin_client):
        resp = await admin_client.delete("/api/admin/gs-files/999")
        assert resp.status_code == 404
        assert resp.json()["error"] == "File not found"

    async def test_storage_failure_keeps_row(self, admin_client, fake_minio):
        created = (await upload(admin_client)).json()["data"]
        fake_minio.fail_removes = True

        resp = await admin_client.delete(f"/api/admin/gs-files/{created['id']}")
        assert resp.status_code == 500
        assert resp.json()["success"] is False

        still_there = await admin_client.get(f"/api/gs-files/{created['id']}")
        assert still_there.status_code == 200
