"""Exception types raised by the edit session.

No-op conditions (empty undo stack, commit without a crop region, compress
without an image) are not errors and never raise. Everything here is fatal
for the single request that raised it and is meant to be reported to the
user by the calling collaborator.
"""

from __future__ import annotations


class PhotoSessionError(Exception):
    """Base class for all photo_session errors."""


class ImageProcessingError(PhotoSessionError):
    """Decoding or encoding image bytes failed."""


class ImageDecodeError(ImageProcessingError):
    pass


class ImageEncodeError(ImageProcessingError):
    pass


class UnknownPresetError(PhotoSessionError, KeyError):
    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown preset: {self.name!r}"


class InvalidParameterError(PhotoSessionError, ValueError):
    pass


class SessionBusyError(PhotoSessionError):
    """An image operation is in flight and the working image must not change."""
