from __future__ import annotations

import pytest

from prober.errors import InvalidImageTagError, MissingImageTagError
from prober.tags import derive_tag, validate_tag

REVISION = "1a2b3c4d5e6f7a8b9c0d1e2f3a4b5c6d7e8f9a0b"


def test_derive_tag_uses_prefix_and_short_hash() -> None:
    assert derive_tag(REVISION) == "land_1a2b3c4d"


def test_derive_tag_is_deterministic() -> None:
    assert derive_tag(REVISION) == derive_tag(REVISION)


def test_derive_tag_normalizes_revision() -> None:
    assert derive_tag("  1A2B3C4D5E6F\n") == "land_1a2b3c4d"


def test_derive_tag_custom_prefix_and_length() -> None:
    assert derive_tag(REVISION, prefix="ci-", length=12) == "ci-1a2b3c4d5e6f"


def test_derive_tag_keeps_short_revision_whole() -> None:
    assert derive_tag("abc") == "land_abc"


@pytest.mark.parametrize("revision", ["", "   ", None])
def test_derive_tag_rejects_empty_revision(revision) -> None:
    with pytest.raises(ValueError):
        derive_tag(revision)


def test_derive_tag_rejects_non_positive_length() -> None:
    with pytest.raises(ValueError, match="positive"):
        derive_tag(REVISION, length=0)


@pytest.mark.parametrize("tag", ["", "  ", None])
def test_validate_tag_missing(tag) -> None:
    with pytest.raises(MissingImageTagError, match="Missing image tag"):
        validate_tag(tag)


@pytest.mark.parametrize("tag", ["-leading-dash", "has space", "a" * 129, "tag:colon"])
def test_validate_tag_invalid(tag) -> None:
    with pytest.raises(InvalidImageTagError):
        validate_tag(tag)


def test_validate_tag_returns_valid_tag() -> None:
    assert validate_tag("land_1a2b3c4d") == "land_1a2b3c4d"
