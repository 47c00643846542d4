import logging

from azure.core.exceptions import (
    AzureError,
    ResourceExistsError,
    ResourceNotFoundError,
)
from azure.storage.blob import (
    BlobClient,
    BlobServiceClient,
    ContainerClient,
    ContentSettings,
)

from photo_api.errors import StorageError

from .photo_storage import DEFAULT_CONTENT_TYPE, PhotoStorage, StoredPhoto

logger = logging.getLogger(__name__)


class AzureBlobStorage(PhotoStorage):
    """
    Photo storage using Azure Blob Storage.
    The service client is created on first use so that a missing connection
    string surfaces as a StorageError inside a request rather than at startup.
    """

    def __init__(
        self,
        connection_string: str | None,
        container_name: str = "photos",
        service_client: BlobServiceClient | None = None,
    ) -> None:
        self.connection_string = connection_string
        self.container_name = container_name
        self._service_client = service_client

    @property
    def service_client(self) -> BlobServiceClient:
        if self._service_client is None:
            if not self.connection_string:
                error_message = "Storage connection string is not set"
                raise StorageError(error_message)
            try:
                self._service_client = BlobServiceClient.from_connection_string(
                    self.connection_string
                )
            except (ValueError, AzureError) as exc:
                error_message = f"Invalid storage connection string: {exc}"
                raise StorageError(error_message) from exc
        return self._service_client

    def _container(self) -> ContainerClient:
        return self.service_client.get_container_client(self.container_name)

    def _blob(self, name: str) -> BlobClient:
        return self._container().get_blob_client(name)

    def ensure_container(self) -> None:
        try:
            # No public_access argument: the container stays private.
            self._container().create_container()
        except ResourceExistsError:
            return
        except AzureError as exc:
            error_message = f"Failed to create container {self.container_name}: {exc}"
            raise StorageError(error_message) from exc
        logger.info("Created blob container %s", self.container_name)

    def exists(self, name: str) -> bool:
        try:
            return bool(self._blob(name).exists())
        except AzureError as exc:
            error_message = f"Blob exists check failed for {name}: {exc}"
            raise StorageError(error_message) from exc

    def get_metadata(self, name: str) -> dict[str, str] | None:
        try:
            properties = self._blob(name).get_blob_properties()
        except ResourceNotFoundError:
            return None
        except AzureError as exc:
            error_message = f"Failed to read properties of {name}: {exc}"
            raise StorageError(error_message) from exc
        return dict(properties.metadata or {})

    def upload(
        self, name: str, data: bytes, metadata: dict[str, str] | None = None
    ) -> None:
        try:
            self._blob(name).upload_blob(
                data, metadata=metadata or None, overwrite=False
            )
        except AzureError as exc:
            error_message = f"Failed to upload {name}: {exc}"
            raise StorageError(error_message) from exc

    def set_content_type(self, name: str, content_type: str) -> None:
        try:
            self._blob(name).set_http_headers(
                content_settings=ContentSettings(content_type=content_type)
            )
        except AzureError as exc:
            error_message = f"Failed to set content type of {name}: {exc}"
            raise StorageError(error_message) from exc

    def get_photo(self, name: str) -> StoredPhoto:
        try:
            downloader = self._blob(name).download_blob()
            data = downloader.readall()
        except AzureError as exc:
            error_message = f"Failed to download {name}: {exc}"
            raise StorageError(error_message) from exc
        content_settings = downloader.properties.content_settings
        content_type = (
            content_settings.content_type if content_settings else None
        ) or DEFAULT_CONTENT_TYPE
        return StoredPhoto(data=data, content_type=content_type)

    def delete(self, name: str) -> bool:
        try:
            self._blob(name).delete_blob()
        except ResourceNotFoundError:
            logger.warning("Blob %s disappeared before it could be deleted", name)
            return False
        except AzureError as exc:
            error_message = f"Failed to delete {name}: {exc}"
            raise StorageError(error_message) from exc
        return True
