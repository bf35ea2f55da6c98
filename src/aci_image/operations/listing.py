"""Rootfs file listing."""

from pathlib import Path
from typing import List, Union

from ..core.types import DEFAULT_LAYOUT, DEFAULT_READER_CONFIG, AciLayout, ReaderConfig
from ..tar.reader import open_archive
from ..utils.paths import classify_path


def list_files(
    filename: Union[str, Path],
    layout: AciLayout = DEFAULT_LAYOUT,
    config: ReaderConfig = DEFAULT_READER_CONFIG,
) -> List[str]:
    """List rootfs paths relative to rootfs, in archive order.

    Duplicates in the archive are kept.

    Raises:
        ArchiveOpenError: If the archive cannot be opened
        ArchiveReadError: If the archive stream is corrupt
    """
    file_list: List[str] = []
    with open_archive(filename, config) as reader:
        for entry in reader:
            classification = classify_path(entry.path, layout)
            if classification.is_member:
                file_list.append(classification.relative_path)
            reader.skip_data()
    return file_list
