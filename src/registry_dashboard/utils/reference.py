"""Image reference helpers."""

import re

# Characters that can never appear in a repository path or tag
_FORBIDDEN = re.compile(r"[\s\"'`$;&|<>\\]")

TAG_PATTERN = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.-]{0,127}$")
REPOSITORY_PATTERN = re.compile(
    r"^[a-z0-9]+(?:(?:[._]|__|-+)[a-z0-9]+)*(?:/[a-z0-9]+(?:(?:[._]|__|-+)[a-z0-9]+)*)*$"
)


def is_valid_image_reference(image: object) -> bool:
    """Check that a string is safe to pass to the docker CLI as an image."""
    if not isinstance(image, str) or not image:
        return False
    if image.startswith("-") or _FORBIDDEN.search(image):
        return False
    return True


def is_valid_repository(repository: object) -> bool:
    """Check a registry repository name (e.g., "library/nginx")."""
    return isinstance(repository, str) and bool(REPOSITORY_PATTERN.match(repository))


def is_valid_tag(tag: object) -> bool:
    """Check a registry tag name."""
    return isinstance(tag, str) and bool(TAG_PATTERN.match(tag))
