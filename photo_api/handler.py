"""
Photo request handling: ownership checks, normalization and storage calls.

Operations raise the exceptions in photo_api.errors; mapping them to HTTP
responses is left to the router.
"""

import logging
import uuid
from collections.abc import Mapping

from photo_api.config import Settings
from photo_api.errors import (
    DeleteFailedError,
    NotOwnerError,
    PhotoNotFoundError,
    UnsupportedMethodError,
)
from photo_api.imaging import normalize_image
from photo_api.models import (
    OWNER_METADATA_KEY,
    PHOTO_CONTENT_TYPE,
    CreatedPhoto,
    Principal,
)
from photo_api.storage import PhotoStorage, StoredPhoto

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = frozenset({"get", "post", "delete"})
PHOTO_ROUTE = "/api/photo"
BARE_ROUTE_NAME = "photo"


def check_method(method: str) -> str:
    """
    Return the lower-cased method, or raise UnsupportedMethodError.
    """
    normalized = method.lower()
    if normalized not in SUPPORTED_METHODS:
        error_message = "Invalid operation requested."
        raise UnsupportedMethodError(error_message)
    return normalized


def photo_name(path_params: Mapping[str, str]) -> str:
    """
    The photo id path parameter; on the bare route the final path segment
    is "photo".
    """
    return path_params.get("photo_id", BARE_ROUTE_NAME)


def build_photo_url(scheme: str, host: str, name: str) -> str:
    return f"{scheme}://{host}{PHOTO_ROUTE}/{name}"


class PhotoHandler:
    def __init__(self, settings: Settings, storage: PhotoStorage) -> None:
        self.settings = settings
        self.storage = storage

    def _require_existing(self, name: str) -> None:
        if not name or not self.storage.exists(name):
            error_message = f"Photo {name!r} not found"
            raise PhotoNotFoundError(error_message)

    def _assert_owner(self, name: str, principal: Principal | None) -> None:
        if not self.settings.auth_enabled:
            return
        metadata = self.storage.get_metadata(name)
        # Blob services may change the case of metadata keys.
        owners = {
            key.lower(): value for key, value in (metadata or {}).items()
        }
        owner = owners.get(OWNER_METADATA_KEY.lower())
        if principal is None or owner is None or owner != principal.name:
            error_message = f"Photo {name!r} is not owned by the caller"
            raise NotOwnerError(error_message)

    def get_photo(self, name: str, principal: Principal | None) -> StoredPhoto:
        self._require_existing(name)
        self._assert_owner(name, principal)
        return self.storage.get_photo(name)

    def post_photo(
        self, body: bytes, principal: Principal | None, scheme: str, host: str
    ) -> CreatedPhoto:
        """
        Normalize the uploaded image and store it under a fresh "<uuid>.jpg"
        name, stamped with the uploader as owner when authorization is on.
        """
        data = normalize_image(body)
        self.storage.ensure_container()
        name = f"{uuid.uuid4()}.jpg"

        metadata: dict[str, str] = {}
        if self.settings.auth_enabled:
            if principal is None:
                error_message = "An owner is required to store a photo"
                raise NotOwnerError(error_message)
            metadata[OWNER_METADATA_KEY] = principal.name

        self.storage.upload(name, data, metadata)
        self.storage.set_content_type(name, PHOTO_CONTENT_TYPE)
        url = build_photo_url(scheme, host, name)
        logger.info("Stored photo %s (%d bytes)", name, len(data))
        return CreatedPhoto(name=name, url=url)

    def delete_photo(self, name: str, principal: Principal | None) -> None:
        self._require_existing(name)
        self._assert_owner(name, principal)
        if not self.storage.delete(name):
            error_message = "Failed to delete existing photo."
            raise DeleteFailedError(error_message)
        logger.info("Deleted photo %s", name)
