from photo_api.config import Settings

from .azure_blob_storage import AzureBlobStorage
from .filesystem_storage import FileSystemStorage
from .photo_storage import PhotoStorage, StoredPhoto


def get_storage_backend(settings: Settings) -> PhotoStorage:
    """
    Factory for storage backend based on settings.storage_backend.
    Defaults to AzureBlobStorage.

    Supported values (case-insensitive):
      - 'azure'
      - 'filesystem'
    """
    backend = settings.storage_backend.lower()
    if backend == "filesystem":
        return FileSystemStorage(
            base_path=settings.filesystem_storage_path,
            container_name=settings.container_name,
        )
    if backend in ("azure", ""):  # default
        return AzureBlobStorage(
            connection_string=settings.storage_connection_string,
            container_name=settings.container_name,
        )
    error_message = f"Unknown storage backend: {backend}"
    raise ValueError(error_message)


__all__ = [
    "AzureBlobStorage",
    "FileSystemStorage",
    "PhotoStorage",
    "StoredPhoto",
    "get_storage_backend",
]
