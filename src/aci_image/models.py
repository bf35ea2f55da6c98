"""Result models for ACI structure checks."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class PathKind(Enum):
    """Semantic category of an archive path."""

    MANIFEST = "manifest"
    ROOTFS_MARKER = "rootfs_marker"
    ROOTFS_MEMBER = "rootfs_member"
    FOREIGN = "foreign"


@dataclass(frozen=True)
class Classification:
    """Classified archive path."""

    kind: PathKind
    path: str  # Normalized path
    relative_path: Optional[str] = None  # Set for rootfs members only, e.g. "/bin/app"

    @property
    def is_member(self) -> bool:
        return self.kind is PathKind.ROOTFS_MEMBER


@dataclass(frozen=True)
class ValidationOutcome:
    """Terminal outcome of a structure validation."""

    valid: bool
    reason: Optional[str] = None

    @classmethod
    def ok(cls) -> "ValidationOutcome":
        return cls(valid=True)

    @classmethod
    def invalid(cls, reason: str) -> "ValidationOutcome":
        return cls(valid=False, reason=reason)

    def __bool__(self) -> bool:
        return self.valid
