"""Manifest extraction from ACI archives."""

import logging
from pathlib import Path
from typing import Union

from ..core.types import DEFAULT_LAYOUT, DEFAULT_READER_CONFIG, AciLayout, ReaderConfig
from ..exceptions import ManifestError
from ..models import PathKind
from ..tar.reader import open_archive
from ..utils.paths import classify_path

logger = logging.getLogger(__name__)


def read_manifest(
    filename: Union[str, Path],
    layout: AciLayout = DEFAULT_LAYOUT,
    config: ReaderConfig = DEFAULT_READER_CONFIG,
) -> bytes:
    """Read the manifest of an ACI archive.

    The stream is abandoned as soon as the manifest has been read.

    Args:
        filename: Path to the archive
        layout: Fixed ACI names
        config: Stream configuration

    Returns:
        Raw manifest bytes

    Raises:
        ArchiveOpenError: If the archive cannot be opened
        ArchiveReadError: If the archive stream is corrupt
        ManifestError: If the manifest is missing or not a regular file
    """
    with open_archive(filename, config) as reader:
        for entry in reader:
            if classify_path(entry.path, layout).kind is not PathKind.MANIFEST:
                reader.skip_data()
                continue

            if not entry.is_regular:
                raise ManifestError("manifest is not a regular file")

            data = reader.read_data()
            logger.debug("Read %d byte manifest from %s", len(data), filename)
            return data

    raise ManifestError("archive did not contain a manifest")
