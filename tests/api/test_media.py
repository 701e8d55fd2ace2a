import io
import os

from fastapi import status
from fastapi.testclient import TestClient

from tipjar.core.config import settings


def _stored_files():
    return set(os.listdir(settings.UPLOAD_DIR))


class TestMediaUploadAPI:
    """Test cases for POST /api/media/upload"""

    def test_upload_success(self, client: TestClient, auth_headers):
        response = client.post(
            "/api/media/upload",
            files={"file": ("Song.MP3", io.BytesIO(b"ID3" + b"\x00" * 128), "audio/mpeg")},
            headers=auth_headers(),
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["filename"].endswith(".mp3")
        assert data["url"] == f"/uploads/{data['filename']}"
        assert data["mimetype"] == "audio/mpeg"
        assert data["size"] == 131
        assert os.path.exists(os.path.join(settings.UPLOAD_DIR, data["filename"]))

        served = client.get(data["url"])
        assert served.status_code == status.HTTP_200_OK
        assert served.content.startswith(b"ID3")

    def test_upload_requires_token(self, client: TestClient):
        response = client.post(
            "/api/media/upload",
            files={"file": ("a.png", io.BytesIO(b"png"), "image/png")},
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_disallowed_type_writes_nothing(self, client: TestClient, auth_headers):
        headers = auth_headers()
        before = _stored_files()

        response = client.post(
            "/api/media/upload",
            files={"file": ("run.exe", io.BytesIO(b"MZ"), "application/x-msdownload")},
            headers=headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "File type application/x-msdownload not allowed"}
        assert _stored_files() == before

    def test_too_large_is_removed(self, client: TestClient, auth_headers, monkeypatch):
        monkeypatch.setattr(settings, "MAX_FILE_SIZE", 10)
        headers = auth_headers()
        before = _stored_files()

        response = client.post(
            "/api/media/upload",
            files={"file": ("note.txt", io.BytesIO(b"x" * 11), "text/plain")},
            headers=headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "File too large"}
        assert _stored_files() == before

    def test_category_narrows_types(self, client: TestClient, auth_headers):
        headers = auth_headers()
        rejected = client.post(
            "/api/media/upload",
            data={"category": "video"},
            files={"file": ("song.mp3", io.BytesIO(b"ID3"), "audio/mpeg")},
            headers=headers,
        )
        assert rejected.status_code == status.HTTP_400_BAD_REQUEST
        assert rejected.json() == {"error": "File type audio/mpeg not allowed for video"}

        accepted = client.post(
            "/api/media/upload",
            data={"category": "Podcast"},
            files={"file": ("episode.mp3", io.BytesIO(b"ID3"), "audio/mpeg")},
            headers=headers,
        )
        assert accepted.status_code == status.HTTP_201_CREATED

    def test_unknown_category(self, client: TestClient, auth_headers):
        response = client.post(
            "/api/media/upload",
            data={"category": "gaming"},
            files={"file": ("a.png", io.BytesIO(b"png"), "image/png")},
            headers=auth_headers(),
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "Invalid category"}

    def test_no_file(self, client: TestClient, auth_headers):
        response = client.post("/api/media/upload", data={"category": "music"}, headers=auth_headers())
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "No file uploaded"}


class TestThumbnailUploadAPI:
    """Test cases for POST /api/media/thumbnail"""

    def test_thumbnail_success(self, client: TestClient, auth_headers):
        response = client.post(
            "/api/media/thumbnail",
            files={"file": ("cover.jpg", io.BytesIO(b"\xff\xd8\xff"), "image/jpeg")},
            headers=auth_headers(),
        )
        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["filename"].endswith(".jpg")

    def test_thumbnail_rejects_non_image(self, client: TestClient, auth_headers):
        response = client.post(
            "/api/media/thumbnail",
            files={"file": ("clip.mp4", io.BytesIO(b"\x00"), "video/mp4")},
            headers=auth_headers(),
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "Only image files allowed for thumbnails"}

    def test_thumbnail_size_limit(self, client: TestClient, auth_headers, monkeypatch):
        monkeypatch.setattr(settings, "MAX_THUMBNAIL_SIZE", 4)
        response = client.post(
            "/api/media/thumbnail",
            files={"file": ("cover.png", io.BytesIO(b"x" * 5), "image/png")},
            headers=auth_headers(),
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "File too large"}
