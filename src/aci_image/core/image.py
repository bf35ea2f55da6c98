"""App Container Image handle."""

from pathlib import Path
from typing import List, Optional, Union

from ..models import ValidationOutcome
from ..operations.extract import extract_rootfs_to
from ..operations.listing import list_files
from ..operations.manifest import read_manifest
from ..operations.validate import validate_structure
from .types import (
    DEFAULT_LAYOUT,
    DEFAULT_READER_CONFIG,
    AciLayout,
    ExtractOptions,
    ReaderConfig,
)


class Image:
    """An ACI archive on disk.

    The image only remembers its filename and configuration. Every
    operation opens its own read stream, so one Image can be used from
    several threads at once.
    """

    def __init__(
        self,
        filename: Union[str, Path],
        layout: Optional[AciLayout] = None,
        reader_config: Optional[ReaderConfig] = None,
        extract_options: Optional[ExtractOptions] = None,
    ) -> None:
        """Initialize image handle.

        Args:
            filename: Path to the .aci archive
            layout: Fixed ACI names (default: manifest and rootfs)
            reader_config: Stream configuration
            extract_options: Metadata restored on extraction
        """
        self.filename = Path(filename)
        self.layout = layout or DEFAULT_LAYOUT
        self.reader_config = reader_config or DEFAULT_READER_CONFIG
        self.extract_options = extract_options or ExtractOptions()

    def __repr__(self) -> str:
        return f"Image({str(self.filename)!r})"

    def file_list(self) -> List[str]:
        """List files in the rootfs, relative to rootfs."""
        return list_files(self.filename, self.layout, self.reader_config)

    def validate_structure(self) -> ValidationOutcome:
        """Check for a valid ACI structure."""
        return validate_structure(self.filename, self.layout, self.reader_config)

    def manifest(self) -> bytes:
        """Return the raw manifest."""
        return read_manifest(self.filename, self.layout, self.reader_config)

    def extract_rootfs_to(self, destination: Union[str, Path]) -> None:
        """Extract contents of rootfs to destination, without the rootfs/ base."""
        extract_rootfs_to(
            self.filename,
            destination,
            self.layout,
            self.reader_config,
            self.extract_options,
        )
