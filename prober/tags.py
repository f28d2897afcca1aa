"""
Image tag derivation and validation
"""

import re

from .errors import InvalidImageTagError, MissingImageTagError

DEFAULT_TAG_PREFIX = 'land_'
DEFAULT_SHORT_LENGTH = 8

# Tag grammar from the OCI distribution spec
TAG_PATTERN = re.compile(r'^[A-Za-z0-9_][A-Za-z0-9._-]{0,127}$')


def derive_tag(revision: str, prefix: str = DEFAULT_TAG_PREFIX,
               length: int = DEFAULT_SHORT_LENGTH) -> str:
    """
    Derive the image tag built for a revision

    Examples:
        1a2b3c4d5e6f... -> land_1a2b3c4d

    Args:
        revision: Commit hash (full or abbreviated)
        prefix: Literal tag prefix (default: "land_")
        length: Number of hash characters to keep (default: 8)

    Returns:
        Image tag string
    """
    if length <= 0:
        raise ValueError(f"Short length must be positive, got {length}")

    revision = (revision or '').strip().lower()
    if not revision:
        raise ValueError("Cannot derive an image tag from an empty revision")

    return f"{prefix}{revision[:length]}"


def validate_tag(tag) -> str:
    """Raise if `tag` is missing or not a valid image tag, else return it"""
    if tag is None or (isinstance(tag, str) and not tag.strip()):
        raise MissingImageTagError()
    if not isinstance(tag, str) or not TAG_PATTERN.match(tag):
        raise InvalidImageTagError(tag)
    return tag
