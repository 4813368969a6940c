"""Tests for admin uploads to object storage."""

import pytest

from autologic import storage
from autologic.errors import ValidationFailed

from .conftest import auth_headers


def png(name="photo.png"):
    return (name, b"\x89PNG fake image", "image/png")


class TestValidation:
    def test_accepts_image(self):
        storage.validate_upload("photo.png", "image/png", 10)

    @pytest.mark.parametrize(
        "filename,content_type,size",
        [
            ("photo.png", "application/pdf", 10),
            ("../etc/passwd.png", "image/png", 10),
            ("photo.png", "image/png", 0),
            ("photo.png", "image/png", 50 * 1024 * 1024),
        ],
    )
    def test_rejects(self, filename, content_type, size):
        with pytest.raises(ValidationFailed):
            storage.validate_upload(filename, content_type, size)


class TestUploadApi:
    def test_single_upload(self, client, admin, r2):
        resp = client.post(
            "/api/upload/single/blogImages", files={"file": png()}, headers=auth_headers(admin)
        )
        assert resp.status_code == 200
        stored = resp.json()["data"]["file"]
        assert stored["publicId"].startswith("autologic/blog/")
        assert stored["publicId"].endswith(".png")
        assert stored["url"].endswith(stored["publicId"])
        assert stored["originalName"] == "photo.png"
        assert r2.objects[stored["publicId"]]["content_type"] == "image/png"

    def test_invalid_upload_type(self, client, admin, r2):
        resp = client.post("/api/upload/single/avatars", files={"file": png()}, headers=auth_headers(admin))
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid upload type"
        assert r2.objects == {}

    def test_multiple_upload(self, client, admin, r2):
        resp = client.post(
            "/api/upload/multiple/projectImages",
            files=[("files", png("a.png")), ("files", png("b.png"))],
            headers=auth_headers(admin),
        )
        body = resp.json()
        assert body["results"] == 2
        assert len(r2.objects) == 2

    def test_multiple_respects_max_count(self, client, admin, r2):
        resp = client.post(
            "/api/upload/multiple/projectImages",
            params={"maxCount": 1},
            files=[("files", png("a.png")), ("files", png("b.png"))],
            headers=auth_headers(admin),
        )
        assert resp.status_code == 400
        assert r2.objects == {}

    def test_customers_cannot_upload(self, client, customer, r2):
        resp = client.post(
            "/api/upload/single/blogImages", files={"file": png()}, headers=auth_headers(customer)
        )
        assert resp.status_code == 403

    def test_delete_single(self, client, admin, r2):
        stored = client.post(
            "/api/upload/single/serviceImages", files={"file": png()}, headers=auth_headers(admin)
        ).json()["data"]["file"]
        resp = client.delete(f"/api/upload/{stored['publicId']}", headers=auth_headers(admin))
        assert resp.json()["data"] == {"publicId": stored["publicId"]}
        assert r2.deleted == [stored["publicId"]]

    def test_bulk_delete(self, client, admin, r2):
        resp = client.request(
            "DELETE",
            "/api/upload/multiple",
            json={"publicIds": ["autologic/blog/a.png", "autologic/blog/b.png"]},
            headers=auth_headers(admin),
        )
        assert resp.json()["message"] == "Files deleted successfully"
        assert r2.deleted == ["autologic/blog/a.png", "autologic/blog/b.png"]

    def test_storage_failure_is_reported(self, client, admin, monkeypatch):
        class BrokenR2:
            def put_object(self, **kwargs):
                raise ConnectionError("unreachable")

        monkeypatch.setattr(storage, "get_r2_client", lambda: BrokenR2())
        resp = client.post(
            "/api/upload/single/blogImages", files={"file": png()}, headers=auth_headers(admin)
        )
        assert resp.status_code == 502
        assert resp.json()["message"] == "File upload failed"
