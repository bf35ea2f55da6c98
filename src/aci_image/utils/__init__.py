"""Utility functions for ACI image handling."""

from .paths import classify_path, has_parent_reference, normalize_path

__all__ = ["classify_path", "has_parent_reference", "normalize_path"]
