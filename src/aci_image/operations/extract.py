"""Rootfs extraction to disk."""

import logging
import os
from pathlib import Path
from typing import Optional, Union

from ..core.types import (
    DEFAULT_LAYOUT,
    DEFAULT_READER_CONFIG,
    AciLayout,
    ExtractOptions,
    ReaderConfig,
)
from ..exceptions import AciError, ExtractionError
from ..models import Classification, PathKind
from ..tar.models import ArchiveEntry, EntryType
from ..tar.reader import open_archive
from ..tar.writer import DiskWriter
from ..utils.paths import classify_path, has_parent_reference

logger = logging.getLogger(__name__)


def rootfs_target(destination: Union[str, Path], classification: Classification) -> str:
    """Map a rootfs marker or member onto the destination directory.

    Raises:
        ExtractionError: If the path is not part of rootfs or climbs out of it
    """
    if classification.kind is PathKind.ROOTFS_MARKER:
        return os.fspath(destination)

    if classification.kind is not PathKind.ROOTFS_MEMBER:
        raise ExtractionError(f"{classification.path} is not under rootfs")
    if has_parent_reference(classification.relative_path):
        raise ExtractionError(
            f"{classification.path} contains a parent directory reference"
        )
    return os.path.join(destination, classification.relative_path.lstrip("/"))


def rewrite_entry(
    entry: ArchiveEntry, destination: Union[str, Path], layout: AciLayout
) -> ArchiveEntry:
    """Rewrite an entry's path, and a hard link's target, onto destination."""
    rewritten = entry.with_path(
        rootfs_target(destination, classify_path(entry.path, layout))
    )
    if entry.type is EntryType.HARDLINK:
        link_target = rootfs_target(destination, classify_path(entry.linkname, layout))
        rewritten = rewritten.with_linkname(link_target)
    return rewritten


def extract_rootfs_to(
    filename: Union[str, Path],
    destination: Union[str, Path],
    layout: AciLayout = DEFAULT_LAYOUT,
    config: ReaderConfig = DEFAULT_READER_CONFIG,
    options: Optional[ExtractOptions] = None,
) -> None:
    """Extract the rootfs of an ACI archive into destination.

    The rootfs/ prefix is removed, so rootfs/bin/app lands at
    destination/bin/app. The manifest is never written. Extraction stops
    at the first failing entry; entries written before it stay on disk.

    Args:
        filename: Path to the archive
        destination: Directory to extract into, created if missing
        layout: Fixed ACI names
        config: Stream configuration
        options: Metadata to restore

    Raises:
        ArchiveOpenError: If the archive cannot be opened
        ArchiveReadError: If the archive stream is corrupt
        ExtractionError: If an entry cannot be written or lies outside rootfs
    """
    count = 0
    try:
        with open_archive(filename, config) as reader, DiskWriter(
            destination, options
        ) as writer:
            for entry in reader:
                if classify_path(entry.path, layout).kind is PathKind.MANIFEST:
                    reader.skip_data()
                    continue

                rewritten = rewrite_entry(entry, destination, layout)
                logger.debug("Extracting %s to %s", entry.path, rewritten.path)

                writer.write_header(rewritten)
                if entry.size > 0:
                    for block, offset in reader.iter_data_blocks():
                        writer.write_data_block(block, offset)
                writer.finish_entry()
                count += 1
    except AciError as e:
        logger.warning(
            "Extraction of %s aborted after %d entries: %s", filename, count, e
        )
        raise

    logger.debug("Extracted %d entries from %s to %s", count, filename, destination)
