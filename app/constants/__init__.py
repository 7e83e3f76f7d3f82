"""Constants package for the Drive service."""

from .extensions import (
    UPLOAD_EXTENSIONS,
    VALID_EXTENSIONS,
    extension_examples,
    is_uploadable,
    resolve_extension,
)

__all__ = [
    "UPLOAD_EXTENSIONS",
    "VALID_EXTENSIONS",
    "extension_examples",
    "is_uploadable",
    "resolve_extension",
]
