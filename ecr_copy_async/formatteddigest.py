#!/usr/bin/env python

"""Utility classes."""

import hashlib
import re

# https://github.com/opencontainers/image-spec/blob/main/descriptor.md#registered-algorithms
ALGORITHMS = {"sha256": 64, "sha384": 96, "sha512": 128}
HEX_PATTERN = re.compile(r"^[a-f0-9]+$")


class FormattedDigest(str):
    """An algorithm prefixed content digest value."""

    def __new__(cls, digest: str, *, algorithm: str = "sha256"):
        if digest and ":" in digest:
            algorithm, digest = digest.split(":", 1)
        if digest:
            digest = digest.lower()
        if (
            not digest
            or algorithm not in ALGORITHMS
            or len(digest) != ALGORITHMS[algorithm]
            or not HEX_PATTERN.match(digest)
        ):
            raise ValueError(f"{algorithm}:{digest}" if digest else digest)
        obj = super().__new__(cls, f"{algorithm}:{digest}")
        obj.algorithm = algorithm
        obj.hex = digest
        return obj

    def hasher(self):
        """Initializes an empty hash accumulator for the algorithm of this digest."""
        return hashlib.new(self.algorithm)

    @staticmethod
    def parse(digest: str) -> "FormattedDigest":
        """
        Initializes a FormattedDigest from a given digest value.

        Args:
            digest: A digest value in form <algorithm>:<digest value>.

        Returns:
            The newly initialized object.
        """
        if not digest or ":" not in digest:
            raise ValueError(digest)
        return FormattedDigest(digest)

    @staticmethod
    def calculate(data: bytes, *, algorithm: str = "sha256") -> "FormattedDigest":
        """
        Calculates the digest value for given data.

        Args:
            data: The data for which to calculate the digest value.
            algorithm: The hash algorithm to use.

        Returns:
            The FormattedDigest containing the corresponding digest value.
        """
        return FormattedDigest(
            hashlib.new(algorithm, data).hexdigest(), algorithm=algorithm
        )
