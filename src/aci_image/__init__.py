"""ACI Image - App Container Image inspection and extraction."""

__version__ = "0.1.0"

from .core.image import Image
from .core.types import AciLayout, ExtractOptions, ReaderConfig
from .exceptions import (
    AciError,
    ArchiveOpenError,
    ArchiveReadError,
    ExtractionError,
    ManifestError,
)
from .image import (
    extract_rootfs,
    file_list,
    get_manifest,
    is_app_container_image,
    save_manifest,
    validate_structure,
)
from .models import Classification, PathKind, ValidationOutcome

__all__ = [
    "Image",
    "AciLayout",
    "ExtractOptions",
    "ReaderConfig",
    "AciError",
    "ArchiveOpenError",
    "ArchiveReadError",
    "ExtractionError",
    "ManifestError",
    "Classification",
    "PathKind",
    "ValidationOutcome",
    "extract_rootfs",
    "file_list",
    "get_manifest",
    "is_app_container_image",
    "save_manifest",
    "validate_structure",
]
