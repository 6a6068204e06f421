#!/usr/bin/env python

"""
JSON that is really (read-only) bytes ;)
"""

import json

from copy import deepcopy

from .formatteddigest import FormattedDigest


class JsonBytes:
    """
    Abstract base class to parse JSON while preserving the original bytes representation.

    The bytes are never regenerated from the parsed value; any re-serialization could change the
    byte sequence, and with it the digest of the document.
    """

    def __init__(self, _bytes: bytes):
        """
        Args:
            _bytes: The raw bytes value.
        """
        if isinstance(_bytes, str):
            _bytes = _bytes.encode("utf-8")
        self.bytes = _bytes
        self.json = json.loads(self.bytes)

    def __bytes__(self):
        return self.get_bytes()

    def __str__(self):
        return self.get_bytes().decode("utf-8")

    def get_bytes(self) -> bytes:
        """
        Retrieves the raw bytes.

        Returns:
            The raw bytes.
        """
        return self.bytes

    def get_digest(self) -> FormattedDigest:
        """
        Retrieves the SHA256 digest value of the raw bytes value.

        Returns:
            The SHA256 digest value of the raw bytes.
        """
        return FormattedDigest.calculate(self.get_bytes())

    def get_json(self):
        """
        Retrieves the bytes in JSON form.

        Returns:
            A copy of the bytes in JSON form.
        """
        return deepcopy(self.json)
