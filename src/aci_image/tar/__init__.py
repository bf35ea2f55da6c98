"""Tar archive codec."""

from .models import ArchiveEntry, EntryType
from .reader import ArchiveReader, open_archive
from .writer import DiskWriter

__all__ = ["ArchiveEntry", "ArchiveReader", "DiskWriter", "EntryType", "open_archive"]
