"""Utility functions for the registry dashboard."""

from .reference import (
    is_valid_image_reference,
    is_valid_repository,
    is_valid_tag,
)

__all__ = [
    "is_valid_image_reference",
    "is_valid_repository",
    "is_valid_tag",
]
