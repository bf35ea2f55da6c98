"""Archive path classification against the ACI layout."""

from ..core.types import DEFAULT_LAYOUT, AciLayout
from ..models import Classification, PathKind

DOT_SLASH = "./"
PARENT_DIR = ".."


def normalize_path(path: str) -> str:
    """Strip one leading "./" from an archive path.

    A bare "./" is returned unchanged.
    """
    if len(path) > len(DOT_SLASH) and path.startswith(DOT_SLASH):
        return path[len(DOT_SLASH) :]
    return path


def is_rootfs_marker(normalized: str, layout: AciLayout = DEFAULT_LAYOUT) -> bool:
    """Check if a normalized path is the rootfs directory itself."""
    return normalized in (layout.rootfs_name, layout.rootfs_prefix)


def is_rootfs_member(normalized: str, layout: AciLayout = DEFAULT_LAYOUT) -> bool:
    """Check if a normalized path lies strictly under rootfs/."""
    prefix = layout.rootfs_prefix
    return len(normalized) > len(prefix) and normalized.startswith(prefix)


def classify_path(path: str, layout: AciLayout = DEFAULT_LAYOUT) -> Classification:
    """Classify a raw archive path.

    Args:
        path: Entry path as stored in the archive
        layout: Fixed ACI names

    Returns:
        Classification of the normalized path
    """
    normalized = normalize_path(path)

    if normalized == layout.manifest_name:
        return Classification(PathKind.MANIFEST, normalized)

    if is_rootfs_marker(normalized, layout):
        return Classification(PathKind.ROOTFS_MARKER, normalized)

    if is_rootfs_member(normalized, layout):
        relative_path = normalized[len(layout.rootfs_name) :]
        return Classification(PathKind.ROOTFS_MEMBER, normalized, relative_path)

    return Classification(PathKind.FOREIGN, normalized)


def has_parent_reference(path: str) -> bool:
    """Check if any component of a slash separated path is ".."."""
    return PARENT_DIR in path.split("/")
