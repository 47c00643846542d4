import json
from pathlib import Path

from photo_api.errors import StorageError

from .photo_storage import DEFAULT_CONTENT_TYPE, PhotoStorage, StoredPhoto

_PROPERTIES_DIR = ".properties"


class FileSystemStorage(PhotoStorage):
    """
    Photo storage using the local filesystem.
    The container is a directory under base_path; metadata and content type
    are kept in a JSON sidecar file per photo.
    """

    def __init__(self, base_path: str = ".", container_name: str = "photos") -> None:
        self.container_path = Path(base_path) / container_name

    @staticmethod
    def _is_valid_name(name: str) -> bool:
        return bool(name) and Path(name).name == name and not name.startswith(".")

    def _photo_path(self, name: str) -> Path:
        if not self._is_valid_name(name):
            error_message = f"Invalid photo name: {name!r}"
            raise StorageError(error_message)
        return self.container_path / name

    def _properties_path(self, name: str) -> Path:
        return self.container_path / _PROPERTIES_DIR / f"{name}.json"

    def _read_properties(self, name: str) -> dict[str, object] | None:
        path = self._properties_path(name)
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as exc:
            error_message = f"Unreadable properties for {name}: {exc}"
            raise StorageError(error_message) from exc

    def _write_properties(self, name: str, properties: dict[str, object]) -> None:
        path = self._properties_path(name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(properties), encoding="utf-8")
        except OSError as exc:
            error_message = f"Failed to write properties for {name}: {exc}"
            raise StorageError(error_message) from exc

    def ensure_container(self) -> None:
        try:
            self.container_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            error_message = f"Failed to create container {self.container_path}: {exc}"
            raise StorageError(error_message) from exc

    def exists(self, name: str) -> bool:
        if not self._is_valid_name(name):
            return False
        return (self.container_path / name).is_file()

    def get_metadata(self, name: str) -> dict[str, str] | None:
        self._photo_path(name)
        properties = self._read_properties(name)
        if properties is None:
            return None
        metadata = properties.get("metadata")
        return dict(metadata) if isinstance(metadata, dict) else {}

    def upload(
        self, name: str, data: bytes, metadata: dict[str, str] | None = None
    ) -> None:
        path = self._photo_path(name)
        try:
            path.write_bytes(data)
        except OSError as exc:
            error_message = f"Failed to write photo {name}: {exc}"
            raise StorageError(error_message) from exc
        self._write_properties(
            name,
            {"metadata": dict(metadata or {}), "content_type": DEFAULT_CONTENT_TYPE},
        )

    def set_content_type(self, name: str, content_type: str) -> None:
        self._photo_path(name)
        properties = self._read_properties(name) or {"metadata": {}}
        properties["content_type"] = content_type
        self._write_properties(name, properties)

    def get_photo(self, name: str) -> StoredPhoto:
        path = self._photo_path(name)
        try:
            data = path.read_bytes()
        except OSError as exc:
            error_message = f"Failed to read photo {name}: {exc}"
            raise StorageError(error_message) from exc
        properties = self._read_properties(name) or {}
        content_type = properties.get("content_type") or DEFAULT_CONTENT_TYPE
        return StoredPhoto(data=data, content_type=str(content_type))

    def delete(self, name: str) -> bool:
        path = self._photo_path(name)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            error_message = f"Failed to delete photo {name}: {exc}"
            raise StorageError(error_message) from exc
        self._properties_path(name).unlink(missing_ok=True)
        return True
