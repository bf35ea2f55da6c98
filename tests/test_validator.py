"""Tests for ACI structure validation."""

from aci_image.models import ValidationOutcome
from aci_image.operations.validate import validate_entries, validate_structure
from aci_image.tar.models import ArchiveEntry, EntryType
from tests.helpers import (
    dir_entry,
    file_entry,
    garbage_in_middle,
    make_aci,
    simple_entries,
    symlink_entry,
)


def test_validate_simple_aci(simple_aci):
    """Test validation of a minimal valid ACI."""
    outcome = validate_structure(simple_aci)

    assert outcome.valid is True
    assert outcome.reason is None
    assert bool(outcome) is True


def test_validate_rich_aci(rich_aci):
    """Test validation of an ACI with nested directories."""
    assert validate_structure(rich_aci) == ValidationOutcome.ok()


def test_validate_dot_slash_paths(tmp_path):
    """Test that ./ prefixed entries validate like plain ones."""
    tar_path = make_aci(tmp_path / "dotslash.aci", simple_entries("./"))

    assert validate_structure(tar_path).valid is True


def test_validate_compressed_aci(tmp_path):
    """Test that gzip compressed archives are read transparently."""
    tar_path = make_aci(tmp_path / "simple.aci.gz", simple_entries(), compression="gz")

    assert validate_structure(tar_path).valid is True


def test_validate_multiple_manifests(tmp_path):
    """Test validation fails with two manifest entries."""
    entries = simple_entries() + [file_entry("./manifest", b"again")]
    tar_path = make_aci(tmp_path / "two_manifests.aci", entries)

    outcome = validate_structure(tar_path)

    assert outcome.valid is False
    assert "multiple manifest" in outcome.reason


def test_validate_manifest_not_regular(tmp_path):
    """Test validation fails when manifest is a directory."""
    entries = [dir_entry("manifest/"), dir_entry("rootfs/")]
    tar_path = make_aci(tmp_path / "manifest_dir.aci", entries)

    outcome = validate_structure(tar_path)

    assert outcome == ValidationOutcome.invalid("manifest is not a regular file")


def test_validate_manifest_symlink(tmp_path):
    """Test validation fails when manifest is a symlink."""
    entries = [symlink_entry("manifest", "rootfs/manifest"), dir_entry("rootfs/")]
    tar_path = make_aci(tmp_path / "manifest_link.aci", entries)

    assert validate_structure(tar_path).reason == "manifest is not a regular file"


def test_validate_rootfs_not_directory(tmp_path):
    """Test validation fails when rootfs is a regular file."""
    entries = [file_entry("manifest", b"{}"), file_entry("rootfs", b"oops")]
    tar_path = make_aci(tmp_path / "rootfs_file.aci", entries)

    outcome = validate_structure(tar_path)

    assert outcome == ValidationOutcome.invalid("rootfs is not a directory")


def test_validate_entry_outside_rootfs(tmp_path):
    """Test validation fails for a top-level file."""
    entries = simple_entries() + [file_entry("other.txt", b"stray")]
    tar_path = make_aci(tmp_path / "stray.aci", entries)

    outcome = validate_structure(tar_path)

    assert outcome.valid is False
    assert "other.txt is not under rootfs" in outcome.reason


def test_validate_prefix_collision(tmp_path):
    """Test that rootfsextra is rejected rather than treated as rootfs content."""
    entries = simple_entries() + [file_entry("rootfsextra", b"")]
    tar_path = make_aci(tmp_path / "collision.aci", entries)

    outcome = validate_structure(tar_path)

    assert outcome.reason == "rootfsextra is not under rootfs"


def test_validate_parent_directory_reference(tmp_path):
    """Test that .. inside rootfs members is rejected."""
    entries = simple_entries() + [file_entry("rootfs/../etc/passwd", b"root")]
    tar_path = make_aci(tmp_path / "traversal.aci", entries)

    outcome = validate_structure(tar_path)

    assert outcome.valid is False
    assert "contains a parent directory reference" in outcome.reason
    assert "rootfs/../etc/passwd" in outcome.reason


def test_validate_stops_at_first_violation(tmp_path):
    """Test that only the first violation is reported."""
    entries = [
        file_entry("manifest", b"{}"),
        file_entry("first.txt", b""),
        file_entry("manifest", b"{}"),
    ]
    tar_path = make_aci(tmp_path / "many_errors.aci", entries)

    assert validate_structure(tar_path).reason == "first.txt is not under rootfs"


def test_validate_without_manifest_is_valid(tmp_path):
    """Test that a manifest is not required by the structure check."""
    tar_path = make_aci(tmp_path / "no_manifest.aci", [dir_entry("rootfs/")])

    assert validate_structure(tar_path).valid is True


def test_validate_is_idempotent(simple_aci, tmp_path):
    """Test repeated validation gives the same outcome."""
    invalid = make_aci(tmp_path / "invalid.aci", [file_entry("x", b"")])

    assert validate_structure(simple_aci) == validate_structure(simple_aci)
    assert validate_structure(invalid) == validate_structure(invalid)


def test_validate_nonexistent_file(missing_aci):
    """Test that open failures become an invalid outcome."""
    outcome = validate_structure(missing_aci)

    assert outcome.valid is False
    assert "No such file or directory" in outcome.reason


def test_validate_not_a_tar_file(tmp_path):
    """Test validation of a file that is not an archive."""
    not_tar = tmp_path / "not_a_tar.aci"
    not_tar.write_text("This is not a tar file")

    outcome = validate_structure(not_tar)

    assert outcome.valid is False
    assert outcome.reason


def test_validate_truncated_archive(tmp_path):
    """Test that a stream ending mid-entry is reported, not raised."""
    entries = simple_entries() + [file_entry("rootfs/big", b"x" * 100_000)]
    tar_path = make_aci(tmp_path / "truncated.aci", entries)
    data = tar_path.read_bytes()
    tar_path.write_bytes(data[:50_000])

    outcome = validate_structure(tar_path)

    assert outcome.valid is False
    assert outcome.reason


def test_validate_damaged_header_mid_stream(tmp_path):
    """Test that an invalid header between entries is not taken as the end."""
    tar_path = garbage_in_middle(
        tmp_path / "damaged.aci", simple_entries(), [file_entry("other.txt", b"x")]
    )

    outcome = validate_structure(tar_path)

    assert outcome.valid is False
    assert "invalid header" in outcome.reason


# Entry stream tests


def _entry(path, entry_type=EntryType.REGULAR):
    return ArchiveEntry(path=path, type=entry_type, mode=0o644, size=0)


def test_validate_entries_valid():
    """Test validation over an in-memory entry stream."""
    entries = [
        _entry("manifest"),
        _entry("rootfs", EntryType.DIRECTORY),
        _entry("rootfs/bin", EntryType.DIRECTORY),
        _entry("rootfs/bin/sh", EntryType.SYMLINK),
    ]

    assert validate_entries(entries).valid is True


def test_validate_entries_is_lazy():
    """Test that entries after the first violation are not consumed."""
    consumed = []

    def stream():
        for path in ("manifest", "stray", "rootfs/a"):
            consumed.append(path)
            yield _entry(path)

    outcome = validate_entries(stream())

    assert outcome.reason == "stray is not under rootfs"
    assert consumed == ["manifest", "stray"]
