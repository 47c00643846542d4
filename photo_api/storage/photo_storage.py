from abc import ABC, abstractmethod
from dataclasses import dataclass

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class StoredPhoto:
    data: bytes
    content_type: str = DEFAULT_CONTENT_TYPE


class PhotoStorage(ABC):
    """
    Interface for photo storage backends.
    All photos live in a single container; names are plain blob names such as
    "<uuid>.jpg". Backends wrap their own failures in StorageError.
    """

    @abstractmethod
    def ensure_container(self) -> None:
        """
        Create the photo container if it does not exist, with no public access.
        """
        error_message = "ensure_container not implemented"
        raise NotImplementedError(error_message)

    @abstractmethod
    def exists(self, name: str) -> bool:
        error_message = "exists not implemented"
        raise NotImplementedError(error_message)

    @abstractmethod
    def get_metadata(self, name: str) -> dict[str, str] | None:
        """
        Return the string metadata stored with the photo, or None if the
        backend has no properties for it.
        """
        error_message = "get_metadata not implemented"
        raise NotImplementedError(error_message)

    @abstractmethod
    def upload(
        self, name: str, data: bytes, metadata: dict[str, str] | None = None
    ) -> None:
        error_message = "upload not implemented"
        raise NotImplementedError(error_message)

    @abstractmethod
    def set_content_type(self, name: str, content_type: str) -> None:
        error_message = "set_content_type not implemented"
        raise NotImplementedError(error_message)

    @abstractmethod
    def get_photo(self, name: str) -> StoredPhoto:
        """
        Retrieve the raw bytes and content type of the photo.
        """
        error_message = "get_photo not implemented"
        raise NotImplementedError(error_message)

    @abstractmethod
    def delete(self, name: str) -> bool:
        """
        Delete the photo. Returns False if the backend reports the delete did
        not take place.
        """
        error_message = "delete not implemented"
        raise NotImplementedError(error_message)
