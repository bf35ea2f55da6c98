"""Disk writer for archive entries."""

import grp
import logging
import os
import pwd
import stat
import struct
from pathlib import Path
from typing import BinaryIO, List, Optional, Tuple, Union

from ..core.types import ExtractOptions
from ..exceptions import ExtractionError
from .models import ArchiveEntry, EntryType

logger = logging.getLogger(__name__)

# pax ACL records and the Linux attributes they are stored in
ACL_XATTRS = {
    "SCHILY.acl.access": "system.posix_acl_access",
    "SCHILY.acl.default": "system.posix_acl_default",
}
ACL_XATTR_VERSION = 2
ACL_UNDEFINED_ID = 0xFFFFFFFF

# Tag name to (owner tag, named tag)
ACL_TAGS = {
    "user": (0x01, 0x02),
    "group": (0x04, 0x08),
    "mask": (0x10, 0x10),
    "other": (0x20, 0x20),
}
ACL_PERMS = {"r": 4, "w": 2, "x": 1}

FFLAGS_KEY = "SCHILY.fflags"

# BSD file flag names as stored by bsdtar
FILE_FLAGS = {
    "nodump": stat.UF_NODUMP,
    "uchg": stat.UF_IMMUTABLE,
    "uappnd": stat.UF_APPEND,
    "uunlnk": stat.UF_NOUNLINK,
    "opaque": stat.UF_OPAQUE,
    "hidden": stat.UF_HIDDEN,
    "arch": stat.SF_ARCHIVED,
    "schg": stat.SF_IMMUTABLE,
    "sappnd": stat.SF_APPEND,
    "sunlnk": stat.SF_NOUNLINK,
}


def is_within(path: str, root: str) -> bool:
    """Check if path equals root or lies below it."""
    return os.path.commonpath([path, root]) == root


def parse_file_flags(value: str) -> int:
    """Convert a comma separated flag list to a chflags() bit mask."""
    flags = 0
    for name in value.split(","):
        name = name.strip()
        if name:
            flags |= FILE_FLAGS.get(name, 0)
    return flags


def _acl_qualifier(tag: str, name: str, numeric_id: str) -> int:
    if numeric_id:
        return int(numeric_id)
    if name.isdigit():
        return int(name)
    try:
        if tag == "user":
            return pwd.getpwnam(name).pw_uid
        return grp.getgrnam(name).gr_gid
    except KeyError:
        raise ValueError(f"unknown {tag} {name}") from None


def encode_acl(text: str) -> bytes:
    """Convert a POSIX.1e ACL text form to the Linux xattr encoding.

    Accepts the entries GNU tar and bsdtar store in pax ACL records, comma
    or newline separated: "user::rw-", "user:1000:r--", "user:alice:r--:1001"
    (bsdtar appends the numeric id), "group:staff:r-x", "mask::r--" and
    "other::---". Comments after "#" are ignored.

    Raises:
        ValueError: If an entry cannot be parsed or a name cannot be resolved
    """
    entries = []
    for raw in text.replace("\n", ",").split(","):
        item = raw.split("#", 1)[0].strip()
        if not item:
            continue
        fields = item.split(":")
        if len(fields) not in (3, 4):
            raise ValueError(f"malformed ACL entry {item!r}")
        tag, name, perms = fields[:3]
        numeric_id = fields[3] if len(fields) == 4 else ""

        tag = {"u": "user", "g": "group", "m": "mask", "o": "other"}.get(tag, tag)
        if tag not in ACL_TAGS:
            raise ValueError(f"unknown ACL tag in {item!r}")
        perm = 0
        for char in perms:
            if char in ACL_PERMS:
                perm |= ACL_PERMS[char]
            elif char != "-":
                raise ValueError(f"unknown ACL permission in {item!r}")

        owner_tag, named_tag = ACL_TAGS[tag]
        if name and tag in ("user", "group"):
            entries.append((named_tag, _acl_qualifier(tag, name, numeric_id), perm))
        else:
            entries.append((owner_tag, ACL_UNDEFINED_ID, perm))

    # The kernel expects entries ordered by tag, then by id
    entries.sort(key=lambda item: (item[0], item[1]))
    return struct.pack("<I", ACL_XATTR_VERSION) + b"".join(
        struct.pack("<HHI", tag, perm, qualifier) for tag, qualifier, perm in entries
    )


class DiskWriter:
    """Writes archive entries below a destination directory.

    Entries are written one at a time: write_header(), zero or more
    write_data_block() calls, then finish_entry(). Directory metadata is
    applied on close() so that later entries can still be created inside.
    """

    def __init__(
        self, destination: Union[str, Path], options: Optional[ExtractOptions] = None
    ) -> None:
        """Initialize disk writer.

        Args:
            destination: Directory every entry must be written under
            options: Metadata to restore
        """
        self.destination = Path(destination)
        self.options = options or ExtractOptions()
        self._root = os.path.realpath(self.destination)
        self._entry: Optional[ArchiveEntry] = None
        self._target: Optional[str] = None
        self._file: Optional[BinaryIO] = None
        self._directories: List[Tuple[str, ArchiveEntry]] = []
        self._closed = False

    def __enter__(self) -> "DiskWriter":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is None:
            self.close()
        else:
            self._release()

    def write_header(self, entry: ArchiveEntry) -> None:
        """Create the filesystem object for an entry.

        Args:
            entry: Entry whose path is the target path on disk

        Raises:
            ExtractionError: If the entry cannot be created
        """
        if self._closed:
            raise ExtractionError("Writer is closed")
        if self._entry is not None:
            raise ExtractionError(f"Entry {self._entry.path} was not finished")

        target = self._confine(entry.path)
        try:
            parent = os.path.dirname(target)
            if parent:
                os.makedirs(parent, exist_ok=True)
            self._make(entry, target)
        except OSError as e:
            raise ExtractionError(f"Cannot create {entry.path}: {e}") from e

        self._entry = entry
        self._target = target

    def write_data_block(self, data: bytes, offset: int) -> None:
        """Write one block of the current regular file at offset."""
        if self._file is None:
            raise ExtractionError("No regular file entry is open for writing")
        try:
            self._file.seek(offset)
            self._file.write(data)
        except OSError as e:
            raise ExtractionError(f"Cannot write {self._target}: {e}") from e

    def finish_entry(self) -> None:
        """Flush the current entry and restore its metadata."""
        if self._entry is None:
            raise ExtractionError("No entry to finish")

        entry, target = self._entry, self._target
        self._entry = None
        self._target = None
        try:
            if self._file is not None:
                file_obj, self._file = self._file, None
                file_obj.truncate(entry.size)
                file_obj.close()

            if entry.is_directory:
                self._directories.append((target, entry))
            elif entry.type is not EntryType.HARDLINK:
                self._apply_metadata(entry, target)
        except OSError as e:
            raise ExtractionError(f"Cannot finish {entry.path}: {e}") from e

    def close(self) -> None:
        """Apply deferred directory metadata and close the writer.

        Raises:
            ExtractionError: If directory metadata cannot be restored
        """
        if self._closed:
            return
        self._release()

        # Deepest directories first, so parent mtimes are set last
        directories = sorted(self._directories, key=lambda item: item[0], reverse=True)
        self._directories = []
        for target, entry in directories:
            try:
                self._apply_metadata(entry, target)
            except OSError as e:
                raise ExtractionError(f"Cannot restore {entry.path}: {e}") from e
        logger.debug("Closed writer for %s", self.destination)

    def _release(self) -> None:
        self._closed = True
        if self._file is not None:
            self._file.close()
            self._file = None

    def _confine(self, path: str) -> str:
        """Resolve path and refuse anything outside the destination."""
        target = os.path.abspath(path)
        if os.path.realpath(target) == self._root:
            return target
        parent = os.path.realpath(os.path.dirname(target))
        if not is_within(parent, self._root):
            raise ExtractionError(f"{path} is outside {self.destination}")
        return target

    def _make(self, entry: ArchiveEntry, target: str) -> None:
        if entry.is_directory:
            # Symlinks are replaced by real directories, except the destination itself
            if os.path.realpath(target) != self._root:
                self._remove_existing(target)
            os.makedirs(target, exist_ok=True)
            return

        self._remove_existing(target)
        if entry.is_regular:
            self._file = open(target, "wb")
        elif entry.type is EntryType.SYMLINK:
            os.symlink(entry.linkname, target)
        elif entry.type is EntryType.HARDLINK:
            source = os.path.abspath(entry.linkname)
            # The link names the source itself, which may be a symlink
            resolved = os.path.join(
                os.path.realpath(os.path.dirname(source)), os.path.basename(source)
            )
            if not is_within(resolved, self._root):
                raise ExtractionError(
                    f"Link target {entry.linkname} is outside {self.destination}"
                )
            os.link(source, target, follow_symlinks=False)
        elif entry.type is EntryType.FIFO:
            os.mkfifo(target)
        elif entry.type in (EntryType.CHAR_DEVICE, EntryType.BLOCK_DEVICE):
            kind = stat.S_IFCHR if entry.type is EntryType.CHAR_DEVICE else stat.S_IFBLK
            os.mknod(
                target,
                entry.mode | kind,
                os.makedev(entry.devmajor, entry.devminor),
            )
        else:
            raise ExtractionError(f"Unsupported entry type for {entry.path}")

    @staticmethod
    def _remove_existing(target: str) -> None:
        if os.path.islink(target) or (
            os.path.lexists(target) and not os.path.isdir(target)
        ):
            os.unlink(target)

    def _apply_metadata(self, entry: ArchiveEntry, target: str) -> None:
        is_link = entry.type is EntryType.SYMLINK

        if self.options.preserve_perm and not is_link:
            os.chmod(target, entry.mode & 0o7777)

        if self.options.preserve_acl and not is_link and hasattr(os, "setxattr"):
            for key, attribute in ACL_XATTRS.items():
                text = entry.pax_headers.get(key)
                if not text:
                    continue
                try:
                    value = encode_acl(text)
                except ValueError as e:
                    raise ExtractionError(f"Invalid ACL on {entry.path}: {e}") from e
                os.setxattr(target, attribute, value)

        if self.options.preserve_time:
            if not is_link:
                os.utime(target, (entry.mtime, entry.mtime))
            elif os.utime in os.supports_follow_symlinks:
                os.utime(target, (entry.mtime, entry.mtime), follow_symlinks=False)

        # Flags last, immutable files reject further changes
        flags_value = entry.pax_headers.get(FFLAGS_KEY)
        if self.options.preserve_flags and flags_value and hasattr(os, "chflags"):
            os.chflags(target, parse_file_flags(flags_value), follow_symlinks=False)
