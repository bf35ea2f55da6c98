"""Configuration types for ACI image operations."""

import os
from dataclasses import dataclass

# Values that turn an ACI_PRESERVE_* variable off
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class AciLayout:
    """Fixed names of the ACI container layout."""

    manifest_name: str = "manifest"
    rootfs_name: str = "rootfs"

    @property
    def rootfs_prefix(self) -> str:
        """Prefix every rootfs member path starts with."""
        return f"{self.rootfs_name}/"


@dataclass(frozen=True)
class ReaderConfig:
    """Archive read stream configuration.

    Attributes:
        block_size: tar stream buffer size and data block chunk size
        mode: tarfile open mode, must be a forward-only stream mode
    """

    block_size: int = 10240
    mode: str = "r|*"


@dataclass(frozen=True)
class ExtractOptions:
    """Metadata restored by the disk writer."""

    preserve_time: bool = True
    preserve_perm: bool = True
    preserve_acl: bool = True
    preserve_flags: bool = True

    @classmethod
    def from_env(cls) -> "ExtractOptions":
        """Build options from ACI_PRESERVE_* environment variables."""

        def flag(name: str) -> bool:
            value = os.getenv(name)
            if value is None:
                return True
            return value.strip().lower() not in _FALSE_VALUES

        return cls(
            preserve_time=flag("ACI_PRESERVE_TIME"),
            preserve_perm=flag("ACI_PRESERVE_PERM"),
            preserve_acl=flag("ACI_PRESERVE_ACL"),
            preserve_flags=flag("ACI_PRESERVE_FLAGS"),
        )


DEFAULT_LAYOUT = AciLayout()
DEFAULT_READER_CONFIG = ReaderConfig()
