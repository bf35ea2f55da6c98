"""Forward-only tar archive reader."""

import logging
import tarfile
from pathlib import Path
from typing import Iterator, Optional, Tuple, Union

from ..core.types import DEFAULT_READER_CONFIG, ReaderConfig
from ..exceptions import ArchiveOpenError, ArchiveReadError
from .models import ArchiveEntry

logger = logging.getLogger(__name__)

# Errors the tar stream raises for unreadable or corrupt input
STREAM_ERRORS = (tarfile.TarError, OSError, EOFError)


class StrictTarInfo(tarfile.TarInfo):
    """TarInfo that reports damaged headers instead of ending the stream.

    TarFile.next() treats an invalid or truncated header after the first
    member as the end of the archive. Raising SubsequentHeaderError makes
    it fail with ReadError at any position.
    """

    @classmethod
    def frombuf(cls, buf, encoding, errors):
        try:
            return super().frombuf(buf, encoding, errors)
        except (tarfile.InvalidHeaderError, tarfile.TruncatedHeaderError) as e:
            raise tarfile.SubsequentHeaderError(str(e)) from e


class ArchiveReader:
    """Sequential reader over the entries of a tar archive.

    The archive is opened in tarfile stream mode, so entries can only be
    visited once, in order. Data of the current entry is either read through
    iter_data_blocks() or skipped when the next entry is requested.
    """

    def __init__(
        self, filename: Union[str, Path], config: ReaderConfig = DEFAULT_READER_CONFIG
    ) -> None:
        """Initialize archive reader.

        Args:
            filename: Path to the archive
            config: Stream configuration
        """
        self.filename = Path(filename)
        self.config = config
        self._tar_file: Optional[tarfile.TarFile] = None
        self._current: Optional[tarfile.TarInfo] = None

    def __enter__(self) -> "ArchiveReader":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def open(self) -> None:
        """Open the archive stream.

        Raises:
            ArchiveOpenError: If the archive cannot be opened
        """
        try:
            self._tar_file = tarfile.open(
                str(self.filename),
                self.config.mode,
                bufsize=self.config.block_size,
                tarinfo=StrictTarInfo,
            )
        except STREAM_ERRORS as e:
            raise ArchiveOpenError(str(e)) from e
        logger.debug("Opened archive %s", self.filename)

    def close(self) -> None:
        """Close the archive stream."""
        if self._tar_file:
            self._tar_file.close()
            self._tar_file = None
            self._current = None
            logger.debug("Closed archive %s", self.filename)

    def __iter__(self) -> Iterator[ArchiveEntry]:
        if not self._tar_file:
            raise ArchiveReadError("Archive not opened")

        while True:
            try:
                info = self._tar_file.next()
            except STREAM_ERRORS as e:
                raise ArchiveReadError(str(e)) from e
            if info is None:
                break

            # Entries are not retained once the stream moves past them
            self._tar_file.members.clear()
            self._current = info
            yield ArchiveEntry.from_tarinfo(info)

        self._current = None

    def skip_data(self) -> None:
        """Skip the data of the current entry.

        The tar stream discards unread data when it advances, so this only
        drops the reference to the current entry.
        """
        self._current = None

    def iter_data_blocks(self) -> Iterator[Tuple[bytes, int]]:
        """Read the current entry's data in blocks.

        Yields:
            (block, offset) pairs, offset being the position within the entry

        Raises:
            ArchiveReadError: If the data cannot be read
        """
        if self._tar_file is None or self._current is None:
            raise ArchiveReadError("No current entry to read")

        try:
            file_obj = self._tar_file.extractfile(self._current)
        except STREAM_ERRORS as e:
            raise ArchiveReadError(str(e)) from e
        if file_obj is None:
            return

        offset = 0
        with file_obj:
            while True:
                try:
                    block = file_obj.read(self.config.block_size)
                except STREAM_ERRORS as e:
                    raise ArchiveReadError(str(e)) from e
                if not block:
                    break
                yield block, offset
                offset += len(block)

    def read_data(self) -> bytes:
        """Read the current entry's data into memory."""
        return b"".join(block for block, _ in self.iter_data_blocks())


def open_archive(
    filename: Union[str, Path], config: ReaderConfig = DEFAULT_READER_CONFIG
) -> ArchiveReader:
    """Create a reader for use as a context manager."""
    return ArchiveReader(filename, config)
