#!/usr/bin/env python

"""Formatted digest tests."""

import hashlib

import pytest

from ecr_copy_async import FormattedDigest


def test___new__():
    """Test that a formatted digest can be instantiated."""
    digest = "0123456789012345678901234567890123456789012345678901234567890123"
    formatteddigest = FormattedDigest(digest)
    assert formatteddigest
    assert formatteddigest.algorithm == "sha256"  # pylint: disable=no-member
    assert formatteddigest.hex == digest  # pylint: disable=no-member
    assert str(formatteddigest) == f"sha256:{digest}"

    digest = "sha256:0123456789012345678901234567890123456789012345678901234567890123"
    formatteddigest = FormattedDigest(digest)
    assert formatteddigest.hex == digest[7:]  # pylint: disable=no-member
    assert str(formatteddigest) == digest

    digest = f"sha512:{'ab' * 64}"
    formatteddigest = FormattedDigest(digest)
    assert formatteddigest.algorithm == "sha512"  # pylint: disable=no-member
    assert str(formatteddigest) == digest

    with pytest.raises(ValueError) as exc_info:
        FormattedDigest(None)
    assert "None" in str(exc_info.value)

    digest = "012345678901234567890123456789012345678901234567890123456789012"
    with pytest.raises(ValueError) as exc_info:
        FormattedDigest(digest)
    assert digest in str(exc_info.value)

    digest = "sha1:0123456789012345678901234567890123456789012345678901234567890123"
    with pytest.raises(ValueError) as exc_info:
        FormattedDigest(digest)
    assert digest in str(exc_info.value)

    digest = "sha256:012345678901234567890123456789012345678901234567890123456789012g"
    with pytest.raises(ValueError) as exc_info:
        FormattedDigest(digest)
    assert digest in str(exc_info.value)


def test___new___normalization():
    """Test that formatted digests are case-normalized before comparison."""
    digest = "ABCDEF0123456789ABCDEF0123456789ABCDEF0123456789ABCDEF0123456789"
    formatteddigest = FormattedDigest(f"sha256:{digest}")
    assert formatteddigest.hex == digest.lower()  # pylint: disable=no-member
    assert formatteddigest == f"sha256:{digest.lower()}"
    assert formatteddigest == FormattedDigest(digest.lower())
    assert {formatteddigest} == {FormattedDigest(digest.lower())}


def test_parse():
    """Test that a formatted digest can be parsed."""
    digest = "0123456789012345678901234567890123456789012345678901234567890123"
    with pytest.raises(ValueError) as exc_info:
        FormattedDigest.parse(digest)
    assert digest in str(exc_info.value)

    digest = "sha256:0123456789012345678901234567890123456789012345678901234567890123"
    formatteddigest = FormattedDigest.parse(digest)
    assert formatteddigest
    assert formatteddigest.hex == digest[7:]  # pylint: disable=no-member
    assert str(formatteddigest) == digest

    with pytest.raises(ValueError) as exc_info:
        FormattedDigest.parse(None)
    assert "None" in str(exc_info.value)

    digest = "sha256:012345678901234567890123456789012345678901234567890123456789012"
    with pytest.raises(ValueError) as exc_info:
        FormattedDigest.parse(digest)
    assert digest in str(exc_info.value)


def test_calculate():
    """Test that a formatted digest can be calculated."""
    assert (
        FormattedDigest.calculate(b"test data")
        == "sha256:916f0027a575074ce72a331777c3478d6513f786a591bd892da1a577bf2335f9"
    )
    assert (
        FormattedDigest.calculate(b"test data", algorithm="sha512")
        == f"sha512:{hashlib.sha512(b'test data').hexdigest()}"
    )


@pytest.mark.parametrize("algorithm", ["sha256", "sha384", "sha512"])
def test_hasher(algorithm: str):
    """Test that the hash accumulator matches the algorithm of the digest."""
    data = b"test data"
    digest = FormattedDigest.calculate(data, algorithm=algorithm)
    hasher = digest.hasher()
    hasher.update(data[:4])
    hasher.update(data[4:])
    assert FormattedDigest(hasher.hexdigest(), algorithm=algorithm) == digest
