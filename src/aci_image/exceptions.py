"""Custom exceptions for the ACI image toolkit."""


class AciError(Exception):
    """Base exception for all ACI image errors."""

    pass


class ArchiveOpenError(AciError):
    """Raised when the archive cannot be opened."""

    pass


class ArchiveReadError(AciError):
    """Raised when the archive stream is corrupt or cannot be read."""

    pass


class ManifestError(AciError):
    """Raised when the manifest is missing or is not a regular file."""

    pass


class ExtractionError(AciError):
    """Raised when writing the rootfs to disk fails."""

    pass
