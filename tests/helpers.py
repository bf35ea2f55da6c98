"""Test helpers for building ACI archives."""

import io
import tarfile
from pathlib import Path

DEFAULT_MTIME = 1_600_000_000


def file_entry(name, content=b"", mode=0o644, mtime=DEFAULT_MTIME, pax_headers=None):
    """Regular file entry as (TarInfo, data)."""
    info = tarfile.TarInfo(name)
    info.size = len(content)
    info.mode = mode
    info.mtime = mtime
    if pax_headers:
        info.pax_headers = dict(pax_headers)
    return info, content


def dir_entry(name, mode=0o755, mtime=DEFAULT_MTIME):
    """Directory entry as (TarInfo, None)."""
    info = tarfile.TarInfo(name)
    info.type = tarfile.DIRTYPE
    info.mode = mode
    info.mtime = mtime
    return info, None


def symlink_entry(name, target, mtime=DEFAULT_MTIME):
    """Symbolic link entry as (TarInfo, None)."""
    info = tarfile.TarInfo(name)
    info.type = tarfile.SYMTYPE
    info.linkname = target
    info.mode = 0o777
    info.mtime = mtime
    return info, None


def hardlink_entry(name, target, mtime=DEFAULT_MTIME):
    """Hard link entry as (TarInfo, None)."""
    info = tarfile.TarInfo(name)
    info.type = tarfile.LNKTYPE
    info.linkname = target
    info.mode = 0o644
    info.mtime = mtime
    return info, None


def make_aci(path: Path, entries, compression: str = "") -> Path:
    """Write entries to a tar archive in the given order."""
    mode = f"w:{compression}" if compression else "w"
    with tarfile.open(path, mode, format=tarfile.PAX_FORMAT) as tar:
        for info, content in entries:
            fileobj = io.BytesIO(content) if content is not None else None
            tar.addfile(info, fileobj=fileobj)
    return path


def simple_entries(prefix: str = ""):
    """manifest "hello", rootfs/ and rootfs/bin/app "X"."""
    return [
        file_entry(f"{prefix}manifest", b"hello"),
        dir_entry(f"{prefix}rootfs/"),
        file_entry(f"{prefix}rootfs/bin/app", b"X", mode=0o755),
    ]


def walk_relative(root: Path) -> set[str]:
    """Rootfs-style relative paths ("/a/b") of everything under root."""
    paths = set()
    for path in root.rglob("*"):
        paths.add("/" + path.relative_to(root).as_posix())
    return paths


def member_bytes(entries) -> bytes:
    """Raw header and padded data blocks, without the end-of-archive marker."""
    blocks = []
    for info, content in entries:
        blocks.append(info.tobuf(tarfile.PAX_FORMAT))
        if content:
            padding = -len(content) % tarfile.BLOCKSIZE
            blocks.append(content + tarfile.NUL * padding)
    return b"".join(blocks)


def garbage_in_middle(path: Path, before, after) -> Path:
    """Write an archive with an invalid header block between two entry runs."""
    data = member_bytes(before) + b"Z" * tarfile.BLOCKSIZE + member_bytes(after)
    path.write_bytes(data + tarfile.NUL * (2 * tarfile.BLOCKSIZE))
    return path
