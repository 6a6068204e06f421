#!/usr/bin/env python

"""Class that provides classification of image references as digests or tags."""

import logging

from typing import Optional, Union

from .errors import InputError
from .formatteddigest import FormattedDigest, HEX_PATTERN
from .typing import ImageReferenceParseString

LOGGER = logging.getLogger(__name__)


class ImageReference:
    """
    Image reference abstraction; either a content digest or a (mutable) tag.
    """

    def __init__(
        self,
        *,
        digest: Optional[Union[FormattedDigest, str]] = None,
        tag: Optional[str] = None,
    ):
        """
        Keyword Args:
            digest: Optional digest value.
            tag: Optional tag name.
        """
        if bool(digest) == bool(tag):
            raise ValueError("Exactly one of digest or tag must be provided!")
        self.digest = digest
        self.tag = tag

    def __eq__(self, other):
        """
        Args:
            other: The instance to which "self" is compared.
        """
        return str(self) == str(other)

    def __hash__(self):
        """Hash according to our string value"""
        return hash(str(self))

    def __repr__(self):
        return f"ImageReference({str(self)!r})"

    def __str__(self):
        return self.digest if self.digest else self.tag

    @staticmethod
    def _parse_string(string: str) -> ImageReferenceParseString:
        """
        Classifies a given string as either a digest or a tag.

        Args:
            string: The string to be parsed.

        Returns:
            dict:
                digest: The digest value, if the string looks like <algorithm>:<hex>.
                tag: The tag name, otherwise.
        """
        if not string:
            raise InputError("Image reference must not be empty!")

        # Note: This is a heuristic; a tag that happens to look like <name>:<hex> is looked up as a digest.
        _, separator, remainder = string.partition(":")
        if separator and HEX_PATTERN.match(remainder):
            digest = string
            try:
                digest = FormattedDigest(string)
            except ValueError:
                # The registry has the final say on unknown algorithms and lengths.
                LOGGER.warning("Looking up unrecognized digest reference: %s", string)
            return ImageReferenceParseString(digest=digest, tag=None)

        return ImageReferenceParseString(digest=None, tag=string)

    def is_digest(self) -> bool:
        """Checks if the reference is a content digest."""
        return self.digest is not None

    @staticmethod
    def parse(image_reference: str) -> "ImageReference":
        """
        Initializes an ImageReference from a given digest-or-tag string.

        Args:
            image_reference: String containing the reference to be parsed.

        Returns:
            The newly initialized object.
        """
        parsed = ImageReference._parse_string(image_reference)
        return ImageReference(digest=parsed.digest, tag=parsed.tag)
