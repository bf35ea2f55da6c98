"""Single-pass operations over ACI archives."""

from .extract import extract_rootfs_to
from .listing import list_files
from .manifest import read_manifest
from .validate import validate_entries, validate_structure

__all__ = [
    "extract_rootfs_to",
    "list_files",
    "read_manifest",
    "validate_entries",
    "validate_structure",
]
