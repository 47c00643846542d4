import io
import logging
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from photo_api.config import Settings, get_settings
from photo_api.deps import get_storage
from photo_api.main import app
from photo_api.storage import FileSystemStorage, PhotoStorage
from photo_api.utils.jwt import create_access_token

# Configure basic logging for tests
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

JWT_SECRET = "test-secret"  # noqa: S105


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        storage_backend="filesystem",
        filesystem_storage_path=str(tmp_path),
        jwt_secret_key=JWT_SECRET,
    )


@pytest.fixture
def storage(settings: Settings) -> FileSystemStorage:
    return FileSystemStorage(
        base_path=settings.filesystem_storage_path,
        container_name=settings.container_name,
    )


def _override(settings: Settings, storage: PhotoStorage) -> TestClient:
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_storage] = lambda: storage
    return TestClient(app)


@pytest.fixture
def client(
    settings: Settings, storage: FileSystemStorage
) -> Generator[TestClient, None, None]:
    yield _override(settings, storage)
    app.dependency_overrides.clear()


@pytest.fixture
def client_factory() -> Generator[
    Callable[[Settings, PhotoStorage], TestClient], None, None
]:
    """Build a TestClient bound to arbitrary settings and storage."""
    yield _override
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> Callable[[str], dict[str, str]]:
    def _headers(principal: str) -> dict[str, str]:
        token = create_access_token({"sub": principal}, JWT_SECRET)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    def _make(
        size: tuple[int, int],
        color: tuple[int, ...] = (200, 30, 30),
        mode: str = "RGB",
        fmt: str = "PNG",
    ) -> bytes:
        buffer = io.BytesIO()
        Image.new(mode, size, color).save(buffer, format=fmt)
        return buffer.getvalue()

    return _make
