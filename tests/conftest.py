"""Shared fixtures for filedrop tests."""

import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image as PILImage

from src.filedrop.api.dependencies import get_thumbnail_worker
from src.filedrop.core.config import Settings, get_settings
from src.filedrop.core.paths import PathResolver
from src.filedrop.core.thumbnails import ThumbnailWorker
from src.filedrop.main import app

SERVER_URL = "http://files.example.com/"


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a temporary storage directory.

    Returns:
        Settings instance for testing.
    """
    return Settings(
        base_dir=tmp_path / "storage",
        server_url=SERVER_URL,
        page_size=15,
        thumbnail_size=32,
    )


@pytest.fixture
def paths(settings):
    """Path resolver for the temporary storage directory."""
    resolver = PathResolver(settings.base_dir)
    resolver.ensure_directories()
    return resolver


@pytest.fixture
def thumbnail_worker(settings):
    """Thumbnail worker drained at teardown.

    Yields:
        ThumbnailWorker instance.
    """
    worker = ThumbnailWorker(size=settings.thumbnail_size, max_workers=1)
    yield worker
    worker.shutdown(wait=True)


@pytest.fixture
def client(settings, paths, thumbnail_worker):  # noqa: ARG001
    """Test client with settings and worker overridden.

    Depends on ``paths`` so storage directories exist, as the app lifespan
    would create them on startup.

    Yields:
        TestClient bound to the application.
    """
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_thumbnail_worker] = lambda: thumbnail_worker
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def png_bytes():
    """A small non-square PNG image."""
    buffer = io.BytesIO()
    PILImage.new("RGBA", (120, 80), (200, 30, 30, 255)).save(buffer, "PNG")
    return buffer.getvalue()
