"""Test configuration and fixtures."""

import pytest

from tests.helpers import dir_entry, file_entry, make_aci, simple_entries


@pytest.fixture
def simple_aci(tmp_path):
    """ACI with manifest "hello", rootfs/ and rootfs/bin/app "X"."""
    return make_aci(tmp_path / "simple.aci", simple_entries())


@pytest.fixture
def rich_aci(tmp_path):
    """ACI with nested directories, modes and several files."""
    entries = [
        file_entry("manifest", b'{"acKind": "ImageManifest"}'),
        dir_entry("rootfs/"),
        dir_entry("rootfs/bin/"),
        file_entry("rootfs/bin/app", b"#!/bin/sh\necho hi\n", mode=0o755),
        dir_entry("rootfs/etc/", mode=0o750),
        file_entry("rootfs/etc/hosts", b"127.0.0.1 localhost\n", mode=0o600),
        dir_entry("rootfs/var/"),
        dir_entry("rootfs/var/empty/"),
    ]
    return make_aci(tmp_path / "rich.aci", entries)


@pytest.fixture
def missing_aci(tmp_path):
    """Path to an archive that does not exist."""
    return tmp_path / "does_not_exist.aci"
