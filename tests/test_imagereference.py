#!/usr/bin/env python

"""ImageReference tests."""

import pytest

from ecr_copy_async import FormattedDigest, ImageReference, InputError

DIGEST = "sha256:0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"


@pytest.mark.parametrize(
    "string,digest,tag",
    [
        (DIGEST, DIGEST, None),
        ("latest", None, "latest"),
        ("1.2.3", None, "1.2.3"),
        ("release:candidate", None, "release:candidate"),
        # Uppercase hex is not treated as a digest
        ("sha256:ABCDEF", None, "sha256:ABCDEF"),
        ("no-colon-deadbeef", None, "no-colon-deadbeef"),
        ("trailing:", None, "trailing:"),
    ],
)
def test_parse(string: str, digest: str, tag: str):
    """Test that references are classified as digests or tags."""
    image_reference = ImageReference.parse(string)
    assert image_reference.digest == digest
    assert image_reference.tag == tag
    assert image_reference.is_digest() == bool(digest)
    assert str(image_reference) == string
    if digest:
        assert isinstance(image_reference.digest, FormattedDigest)


def test_parse_ambiguous(caplog):
    """Test that a tag which looks like <name>:<hex> is looked up as a digest."""
    for string in ["name:deadbeef", "sha256:abc", f"name:{'deadbeef' * 8}"]:
        image_reference = ImageReference.parse(string)
        assert image_reference.is_digest()
        assert image_reference.digest == string
        assert image_reference.tag is None
        assert not isinstance(image_reference.digest, FormattedDigest)
    assert "name:deadbeef" in caplog.text

    string = f"sha512:{'deadbeef' * 16}"
    image_reference = ImageReference.parse(string)
    assert image_reference.is_digest()
    assert image_reference.digest.algorithm == "sha512"


@pytest.mark.parametrize("string", ["", None])
def test_parse_invalid(string: str):
    """Test that empty references are rejected."""
    with pytest.raises(InputError):
        ImageReference.parse(string)


def test___init__():
    """Test that exactly one of digest or tag is required."""
    with pytest.raises(ValueError):
        ImageReference()
    with pytest.raises(ValueError):
        ImageReference(digest=FormattedDigest(DIGEST), tag="latest")
    assert ImageReference(tag="latest") == ImageReference.parse("latest")
