"""ACI structure validation."""

import logging
from pathlib import Path
from typing import Iterable, Union

from ..core.types import DEFAULT_LAYOUT, DEFAULT_READER_CONFIG, AciLayout, ReaderConfig
from ..exceptions import ArchiveOpenError, ArchiveReadError
from ..models import PathKind, ValidationOutcome
from ..tar.models import ArchiveEntry
from ..tar.reader import open_archive
from ..utils.paths import classify_path, has_parent_reference

logger = logging.getLogger(__name__)

MULTIPLE_MANIFESTS = "multiple manifest entries"
MANIFEST_NOT_REGULAR = "manifest is not a regular file"
ROOTFS_NOT_DIRECTORY = "rootfs is not a directory"


def not_under_rootfs(path: str) -> str:
    return f"{path} is not under rootfs"


def has_parent_directory_reference(path: str) -> str:
    return f"{path} contains a parent directory reference"


def validate_entries(
    entries: Iterable[ArchiveEntry], layout: AciLayout = DEFAULT_LAYOUT
) -> ValidationOutcome:
    """Check a stream of entries against the ACI layout.

    Stops at the first violation. Entry data is never read; consuming the
    iterator advances past it.

    Args:
        entries: Archive entries in stream order
        layout: Fixed ACI names

    Returns:
        ValidationOutcome, valid or carrying the first violation
    """
    manifest_count = 0

    for entry in entries:
        classification = classify_path(entry.path, layout)

        if classification.kind is PathKind.MANIFEST:
            manifest_count += 1
            if manifest_count > 1:
                return ValidationOutcome.invalid(MULTIPLE_MANIFESTS)
            if not entry.is_regular:
                return ValidationOutcome.invalid(MANIFEST_NOT_REGULAR)

        elif classification.kind is PathKind.ROOTFS_MARKER:
            if not entry.is_directory:
                return ValidationOutcome.invalid(ROOTFS_NOT_DIRECTORY)

        elif classification.kind is PathKind.FOREIGN:
            return ValidationOutcome.invalid(not_under_rootfs(classification.path))

        elif has_parent_reference(classification.relative_path):
            return ValidationOutcome.invalid(
                has_parent_directory_reference(classification.path)
            )

    return ValidationOutcome.ok()


def validate_structure(
    filename: Union[str, Path],
    layout: AciLayout = DEFAULT_LAYOUT,
    config: ReaderConfig = DEFAULT_READER_CONFIG,
) -> ValidationOutcome:
    """Validate the container structure of an ACI archive.

    Archive errors are reported as an invalid outcome carrying the
    underlying message, never raised.

    Args:
        filename: Path to the archive
        layout: Fixed ACI names
        config: Stream configuration

    Returns:
        ValidationOutcome
    """
    try:
        with open_archive(filename, config) as reader:
            outcome = validate_entries(reader, layout)
    except (ArchiveOpenError, ArchiveReadError) as e:
        outcome = ValidationOutcome.invalid(str(e))

    if not outcome:
        logger.warning("Invalid ACI %s: %s", filename, outcome.reason)
    return outcome
