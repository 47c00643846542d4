from dataclasses import dataclass

OWNER_METADATA_KEY = "HTBOX_USER_PRINCIPAL"
PHOTO_CONTENT_TYPE = "image/jpg"


@dataclass(frozen=True)
class Principal:
    """Authenticated caller; name is the identity stamped on owned photos."""

    name: str


@dataclass(frozen=True)
class CreatedPhoto:
    name: str
    url: str
