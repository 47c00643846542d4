import io
from collections.abc import Callable
from unittest.mock import MagicMock

import pytest
from PIL import Image

from photo_api.config import Settings
from photo_api.errors import (
    DeleteFailedError,
    InvalidImageError,
    NotOwnerError,
    PhotoNotFoundError,
    StorageError,
    UnsupportedMethodError,
)
from photo_api.handler import (
    PhotoHandler,
    build_photo_url,
    check_method,
    photo_name,
)
from photo_api.models import OWNER_METADATA_KEY, PHOTO_CONTENT_TYPE, Principal
from photo_api.storage import FileSystemStorage, PhotoStorage

ALICE = Principal(name="alice")
BOB = Principal(name="bob")


@pytest.fixture
def handler(settings: Settings, storage: FileSystemStorage) -> PhotoHandler:
    return PhotoHandler(settings=settings, storage=storage)


@pytest.mark.parametrize("method", ["GET", "get", "Post", "DELETE"])
def test_check_method_accepts_supported(method: str) -> None:
    assert check_method(method) == method.lower()


@pytest.mark.parametrize("method", ["PUT", "PATCH", "HEAD", "OPTIONS", ""])
def test_check_method_rejects_others(method: str) -> None:
    with pytest.raises(UnsupportedMethodError, match="Invalid operation requested."):
        check_method(method)


def test_photo_name() -> None:
    assert photo_name({"photo_id": "abc.jpg"}) == "abc.jpg"
    # Bare route: the final path segment of /api/photo
    assert photo_name({}) == "photo"


def test_build_photo_url() -> None:
    assert (
        build_photo_url("https", "photos.example.com:8443", "x.jpg")
        == "https://photos.example.com:8443/api/photo/x.jpg"
    )


def test_post_stores_normalized_jpeg_with_owner(
    handler: PhotoHandler,
    storage: FileSystemStorage,
    make_image: Callable[..., bytes],
) -> None:
    created = handler.post_photo(make_image((2000, 1000)), ALICE, "http", "host")
    assert created.name.endswith(".jpg")
    assert created.url == f"http://host/api/photo/{created.name}"

    assert storage.get_metadata(created.name) == {OWNER_METADATA_KEY: "alice"}
    stored = storage.get_photo(created.name)
    assert stored.content_type == PHOTO_CONTENT_TYPE
    with Image.open(io.BytesIO(stored.data)) as image:
        assert image.format == "JPEG"
        assert image.size == (800, 400)


def test_post_generates_unique_names(
    handler: PhotoHandler, make_image: Callable[..., bytes]
) -> None:
    data = make_image((10, 10))
    first = handler.post_photo(data, ALICE, "http", "host")
    second = handler.post_photo(data, ALICE, "http", "host")
    assert first.name != second.name


def test_post_invalid_image_touches_no_storage(settings: Settings) -> None:
    storage = MagicMock(spec=PhotoStorage)
    handler = PhotoHandler(settings=settings, storage=storage)
    with pytest.raises(InvalidImageError):
        handler.post_photo(b"nope", ALICE, "http", "host")
    assert storage.mock_calls == []


def test_post_requires_owner_when_gate_enabled(
    handler: PhotoHandler, make_image: Callable[..., bytes]
) -> None:
    with pytest.raises(NotOwnerError):
        handler.post_photo(make_image((10, 10)), None, "http", "host")


def test_post_without_gate_stores_no_owner(
    tmp_path: object, make_image: Callable[..., bytes]
) -> None:
    storage = FileSystemStorage(base_path=str(tmp_path))
    handler = PhotoHandler(Settings(auth_enabled=False), storage)
    created = handler.post_photo(make_image((10, 10)), None, "http", "host")
    assert storage.get_metadata(created.name) == {}


def test_post_upload_failure_propagates(
    settings: Settings, make_image: Callable[..., bytes]
) -> None:
    storage = MagicMock(spec=PhotoStorage)
    storage.upload.side_effect = StorageError("upload failed")
    handler = PhotoHandler(settings=settings, storage=storage)
    with pytest.raises(StorageError):
        handler.post_photo(make_image((10, 10)), ALICE, "http", "host")
    storage.ensure_container.assert_called_once_with()
    storage.set_content_type.assert_not_called()


def test_post_sets_content_type_after_upload(
    settings: Settings, make_image: Callable[..., bytes]
) -> None:
    storage = MagicMock(spec=PhotoStorage)
    handler = PhotoHandler(settings=settings, storage=storage)
    created = handler.post_photo(make_image((10, 10)), ALICE, "http", "host")
    call_names = [call[0] for call in storage.mock_calls]
    assert call_names == ["ensure_container", "upload", "set_content_type"]
    storage.set_content_type.assert_called_once_with(created.name, PHOTO_CONTENT_TYPE)


def test_get_returns_stored_bytes_for_owner(
    handler: PhotoHandler, make_image: Callable[..., bytes]
) -> None:
    created = handler.post_photo(make_image((50, 50)), ALICE, "http", "host")
    photo = handler.get_photo(created.name, ALICE)
    assert photo.data == handler.storage.get_photo(created.name).data


def test_get_missing_raises_not_found(handler: PhotoHandler) -> None:
    with pytest.raises(PhotoNotFoundError):
        handler.get_photo("missing.jpg", ALICE)
    with pytest.raises(PhotoNotFoundError):
        handler.get_photo("", ALICE)


def test_get_by_other_principal_is_rejected(
    handler: PhotoHandler, make_image: Callable[..., bytes]
) -> None:
    created = handler.post_photo(make_image((50, 50)), ALICE, "http", "host")
    with pytest.raises(NotOwnerError):
        handler.get_photo(created.name, BOB)


def test_get_without_owner_metadata_is_rejected(
    handler: PhotoHandler, storage: FileSystemStorage
) -> None:
    storage.ensure_container()
    storage.upload("legacy.jpg", b"x")
    with pytest.raises(NotOwnerError):
        handler.get_photo("legacy.jpg", ALICE)


def test_owner_metadata_key_case_insensitive(settings: Settings) -> None:
    storage = MagicMock(spec=PhotoStorage)
    storage.exists.return_value = True
    storage.get_metadata.return_value = {OWNER_METADATA_KEY.lower(): "alice"}
    handler = PhotoHandler(settings=settings, storage=storage)
    handler.get_photo("a.jpg", ALICE)
    storage.get_photo.assert_called_once_with("a.jpg")


def test_get_without_gate_skips_ownership(
    tmp_path: object, make_image: Callable[..., bytes]
) -> None:
    storage = FileSystemStorage(base_path=str(tmp_path))
    handler = PhotoHandler(Settings(auth_enabled=False), storage)
    created = handler.post_photo(make_image((10, 10)), None, "http", "host")
    assert handler.get_photo(created.name, None).data


def test_delete_by_owner(
    handler: PhotoHandler, make_image: Callable[..., bytes]
) -> None:
    created = handler.post_photo(make_image((50, 50)), ALICE, "http", "host")
    handler.delete_photo(created.name, ALICE)
    with pytest.raises(PhotoNotFoundError):
        handler.get_photo(created.name, ALICE)


def test_delete_missing_raises_not_found(handler: PhotoHandler) -> None:
    with pytest.raises(PhotoNotFoundError):
        handler.delete_photo("missing.jpg", ALICE)


def test_delete_by_other_principal_is_rejected(
    handler: PhotoHandler, make_image: Callable[..., bytes]
) -> None:
    created = handler.post_photo(make_image((50, 50)), ALICE, "http", "host")
    with pytest.raises(NotOwnerError):
        handler.delete_photo(created.name, BOB)
    assert handler.storage.exists(created.name)


def test_delete_reported_failure(settings: Settings) -> None:
    storage = MagicMock(spec=PhotoStorage)
    storage.exists.return_value = True
    storage.get_metadata.return_value = {OWNER_METADATA_KEY: "alice"}
    storage.delete.return_value = False
    handler = PhotoHandler(settings=settings, storage=storage)
    with pytest.raises(DeleteFailedError, match="Failed to delete existing photo."):
        handler.delete_photo("a.jpg", ALICE)
