"""End-to-end tests for the HTTP routes."""

import json
import os
import re
from datetime import datetime

import pytest

from src.filedrop.core.paths import PathKind

from conftest import SERVER_URL


def post_upload(client, name, content, options=None, **kwargs):
    """Upload ``content`` as ``name`` with an optional options payload."""
    data = {"options": json.dumps(options)} if options is not None else None
    return client.post(
        "/",
        files={"file": (name, content, "application/octet-stream")},
        data=data,
        follow_redirects=False,
        **kwargs,
    )


class TestUpload:
    """Tests for POST /."""

    def test_default_upload_redirects_to_random_name(self, client):
        """Test the default options answer with a redirect."""
        response = post_upload(client, "a.txt", b"hello")

        assert response.status_code == 303
        url = response.json()["url"]
        assert response.headers["location"] == url
        assert re.fullmatch(re.escape(SERVER_URL) + r"[A-Za-z0-9]{8}\.txt", url)

    def test_original_filename(self, client):
        """Test uploads keeping the original name."""
        response = post_upload(client, "a.txt", b"hello", {"useOriginalFilename": True})

        assert response.status_code == 303
        assert response.json()["url"].endswith("a.txt")

    def test_without_redirect(self, client):
        """Test plain success responses."""
        response = post_upload(client, "a.txt", b"hello", {"redirect": False})

        assert response.status_code == 200
        assert "location" not in response.headers
        assert response.json()["url"].startswith(SERVER_URL)

    def test_malformed_options_use_defaults(self, client):
        """Test that unparseable options are ignored."""
        response = client.post(
            "/",
            files={"file": ("a.txt", b"hello")},
            data={"options": "{not json"},
            follow_redirects=False,
        )

        assert response.status_code == 303
        assert not response.json()["url"].endswith("/a.txt")

    def test_second_upload_overwrites(self, client, settings):
        """Test that same-name uploads replace the earlier content."""
        options = {"useOriginalFilename": True, "redirect": False}
        post_upload(client, "a.txt", b"first", options)
        post_upload(client, "a.txt", b"second", options)

        assert (settings.base_dir / "a.txt").read_bytes() == b"second"
        assert client.get("/a.txt").content == b"second"

    def test_empty_upload(self, client, settings):
        """Test zero-byte uploads fail and leave no file behind."""
        response = post_upload(client, "a.txt", b"")

        assert response.status_code == 400
        assert response.json()["detail"] == "Uploaded file is empty"
        assert [p for p in settings.base_dir.iterdir() if p.is_file()] == []

    def test_missing_file_part(self, client):
        """Test multipart requests without a file part."""
        response = client.post("/", files={"options": (None, "{}")}, follow_redirects=False)

        assert response.status_code == 400
        assert response.json() == {"detail": "Missing file part", "status_code": 400}

    def test_non_multipart_body(self, client, settings):
        """Test that other body encodings are refused."""
        response = client.post("/", data={"file": "hello"}, follow_redirects=False)

        assert response.status_code == 400
        assert response.json()["detail"] == "Expected a multipart/form-data body"
        assert [p for p in settings.base_dir.iterdir() if p.is_file()] == []

    def test_malformed_multipart_body(self, client):
        """Test that a body not matching its boundary is refused."""
        response = client.post(
            "/",
            content=b"no boundary in sight",
            headers={"content-type": "multipart/form-data; boundary=xyz"},
            follow_redirects=False,
        )

        assert response.status_code == 400

    def test_non_ascii_original_filename(self, client, settings):
        """Test that non-ASCII names are stored and served under their own name."""
        options = {"useOriginalFilename": True, "redirect": False}
        post_upload(client, "документ.txt", b"one", options)
        response = post_upload(client, "отчёт.txt", b"two", options)

        assert response.json()["url"] == SERVER_URL + "%D0%BE%D1%82%D1%87%D1%91%D1%82.txt"
        assert (settings.base_dir / "документ.txt").read_bytes() == b"one"
        assert (settings.base_dir / "отчёт.txt").read_bytes() == b"two"
        assert client.get("/отчёт.txt").content == b"two"

    def test_image_upload_gets_thumbnail(self, client, settings, thumbnail_worker, png_bytes):
        """Test that thumbnails appear once the background job ran."""
        response = post_upload(client, "pic.png", png_bytes, {"useOriginalFilename": True})
        thumbnail_worker.shutdown(wait=True)

        assert response.status_code == 303
        assert (settings.base_dir / "thumbnails" / "pic.png").is_file()
        assert client.get("/thumbnails/pic.png").status_code == 200


class TestAuthentication:
    """Tests for optional basic auth."""

    @pytest.fixture
    def settings(self, settings):
        return settings.model_copy(update={"auth_user": "alice", "auth_pass": "secret"})

    def test_rejects_missing_credentials(self, client):
        response = post_upload(client, "a.txt", b"hello")

        assert response.status_code == 401
        assert response.headers["www-authenticate"].startswith("Basic")

    def test_rejects_wrong_credentials(self, client):
        response = client.get("/recent", auth=("alice", "wrong"))

        assert response.status_code == 401

    def test_accepts_valid_credentials(self, client):
        response = post_upload(client, "a.txt", b"hello", auth=("alice", "secret"))

        assert response.status_code == 303
        assert client.get("/recent", auth=("alice", "secret")).status_code == 200

    def test_stored_files_stay_public(self, client, settings):
        (settings.base_dir / "a.txt").parent.mkdir(parents=True, exist_ok=True)
        (settings.base_dir / "a.txt").write_bytes(b"hello")

        assert client.get("/a.txt").status_code == 200


class TestListing:
    """Tests for listing routes."""

    @pytest.fixture
    def stored(self, paths):
        for name, size, modified in [
            ("small.txt", 5, datetime(2020, 5, 1, 10, 0, 0)),
            ("large.txt", 500, datetime(2020, 6, 1, 10, 0, 0)),
            ("older.txt", 50, datetime(2019, 1, 1, 10, 0, 0)),
        ]:
            path = paths.base_dir / name
            path.write_bytes(b"x" * size)
            os.utime(path, (modified.timestamp(), modified.timestamp()))
        return paths

    def test_recent(self, client, stored):
        response = client.get("/recent")

        assert response.status_code == 200
        body = response.text
        assert body.index("large.txt") < body.index("small.txt") < body.index("older.txt")
        assert "2020-06-01 10:00:00" in body
        assert "/static/no-thumbnail.svg" in body

    def test_largest(self, client, stored):
        body = client.get("/largest").text

        assert body.index("large.txt") < body.index("older.txt") < body.index("small.txt")

    def test_year_and_month(self, client, stored):
        body = client.get("/recent/2020/5").text

        assert "small.txt" in body
        assert "large.txt" not in body
        assert "older.txt" not in body

    def test_largest_by_year(self, client, stored):
        body = client.get("/largest/2019").text

        assert "older.txt" in body
        assert "small.txt" not in body

    def test_invalid_month(self, client, stored):
        assert client.get("/recent/2020/13").status_code == 422

    def test_negative_page(self, client, stored):
        assert client.get("/recent", params={"page": -1}).status_code == 422

    def test_page_links(self, client, settings, stored):
        settings.page_size = 1

        body = client.get("/recent/2020", params={"page": 0}).text

        assert "/recent/2020?page=1" in body


class TestDelete:
    """Tests for POST /delete."""

    def test_deletes_file_and_thumbnail(self, client, paths):
        paths.resolve("gone.txt").write_bytes(b"bye")
        paths.resolve("gone.txt", PathKind.THUMBNAIL).write_bytes(b"thumb")

        response = client.post("/delete", data={"filename": "gone.txt"}, follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/recent"
        assert not paths.resolve("gone.txt").exists()
        assert not paths.resolve("gone.txt", PathKind.THUMBNAIL).exists()

    def test_missing_thumbnail_is_ignored(self, client, paths):
        paths.resolve("plain.txt").write_bytes(b"bye")

        response = client.post("/delete", data={"filename": "plain.txt"}, follow_redirects=False)

        assert response.status_code == 303
        assert not paths.resolve("plain.txt").exists()

    def test_rejects_unsanitized_name(self, client, paths):
        response = client.post("/delete", data={"filename": "../secret.txt"})

        assert response.status_code == 400

    def test_missing_file(self, client, paths):
        response = client.post("/delete", data={"filename": "nothing.txt"})

        assert response.status_code == 404


class TestServing:
    """Tests for serving stored files."""

    def test_missing_file(self, client, paths):
        assert client.get("/nothing.txt").status_code == 404

    def test_placeholder_asset(self, client):
        response = client.get("/static/no-thumbnail.svg")

        assert response.status_code == 200

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["storage_writable"] is True

    def test_index(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert 'name="file"' in response.text
