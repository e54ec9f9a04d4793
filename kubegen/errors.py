"""Error types raised by the encoding, normalization and export layers.

Every error carries a component prefix (``kubegen/<component>:``) in its
message and is raised with ``from`` so the proximate cause stays attached.
None of these are transient, so nothing catches them to retry.
"""
from __future__ import annotations
from typing import Optional


class KubegenError(Exception):
    """Base class for all kubegen errors."""


class UnsupportedFormat(KubegenError):
    """No serializer is registered for the requested content type."""

    def __init__(self, message: str, content_type: Optional[str] = None):
        super().__init__(message)
        self.content_type = content_type


class EncodeError(KubegenError):
    """Converting an object or document to bytes failed."""


class DecodeError(KubegenError):
    """Converting bytes to a document failed, or the document has the wrong shape."""


class WriteError(KubegenError):
    """Persisting an artifact failed."""

    def __init__(self, message: str, filename: str):
        super().__init__(message)
        self.filename = filename


class ArtifactNameError(KubegenError):
    """An item of a collection cannot be given an artifact filename.

    These are per-item: the partitioner records them and moves on unless it
    runs in strict mode.
    """

    def __init__(self, message: str, kind: Optional[str], index: int):
        super().__init__(message)
        self.kind = kind
        self.index = index


class UnknownDiscriminator(ArtifactNameError):
    """The item's kind has no filename rule."""


class MissingName(ArtifactNameError):
    """The item has no ``metadata.name``."""


class InvalidName(ArtifactNameError):
    """The item's ``metadata.name`` is not a DNS-1123 name and cannot be used as a filename."""


class DuplicateName(ArtifactNameError):
    """Another item of the same collection already produced this filename."""
