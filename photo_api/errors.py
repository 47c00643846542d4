"""
Exceptions raised by the photo handler and its collaborators.
The HTTP router is the only place these are turned into status codes.
"""


class PhotoError(Exception):
    """Base class for photo handling failures."""


class PhotoNotFoundError(PhotoError):
    pass


class NotOwnerError(PhotoError):
    """The principal does not own the requested photo."""


class InvalidImageError(PhotoError):
    """The uploaded body could not be decoded as an image."""


class StorageError(PhotoError):
    """A blob storage call failed."""


class DeleteFailedError(PhotoError):
    """The storage backend reported that a delete did not happen."""


class UnsupportedMethodError(PhotoError):
    pass
