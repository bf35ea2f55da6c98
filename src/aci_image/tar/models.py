"""Data models for tar archive entries."""

import tarfile
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict


class EntryType(Enum):
    """File type of an archive entry."""

    REGULAR = "regular"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    HARDLINK = "hardlink"
    FIFO = "fifo"
    CHAR_DEVICE = "char_device"
    BLOCK_DEVICE = "block_device"
    OTHER = "other"


def _entry_type(info: tarfile.TarInfo) -> EntryType:
    if info.isreg():
        return EntryType.REGULAR
    if info.isdir():
        return EntryType.DIRECTORY
    if info.issym():
        return EntryType.SYMLINK
    if info.islnk():
        return EntryType.HARDLINK
    if info.isfifo():
        return EntryType.FIFO
    if info.ischr():
        return EntryType.CHAR_DEVICE
    if info.isblk():
        return EntryType.BLOCK_DEVICE
    return EntryType.OTHER


@dataclass(frozen=True)
class ArchiveEntry:
    """One entry of an archive stream.

    Only valid until the next entry is read from the same stream.
    """

    path: str
    type: EntryType
    mode: int
    size: int
    mtime: float = 0
    linkname: str = ""
    devmajor: int = 0
    devminor: int = 0
    pax_headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_tarinfo(cls, info: tarfile.TarInfo) -> "ArchiveEntry":
        return cls(
            path=info.name,
            type=_entry_type(info),
            mode=info.mode,
            size=info.size,
            mtime=info.mtime,
            linkname=info.linkname,
            devmajor=info.devmajor,
            devminor=info.devminor,
            pax_headers=dict(info.pax_headers),
        )

    def with_path(self, path: str) -> "ArchiveEntry":
        """Copy of this entry stored under a different path."""
        return replace(self, path=path)

    def with_linkname(self, linkname: str) -> "ArchiveEntry":
        return replace(self, linkname=linkname)

    @property
    def is_regular(self) -> bool:
        return self.type is EntryType.REGULAR

    @property
    def is_directory(self) -> bool:
        return self.type is EntryType.DIRECTORY
