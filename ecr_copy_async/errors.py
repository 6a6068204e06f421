#!/usr/bin/env python

"""Exceptions raised while copying an image."""

from typing import Optional


class EcrCopyError(Exception):
    """Base exception for all image copy errors."""


class InputError(EcrCopyError):
    """Raised for a malformed invocation, before any network call is made."""


class ResolutionError(EcrCopyError):
    """Raised when the source image cannot be uniquely found or parsed."""


class TransferError(EcrCopyError):
    """Raised when a blob cannot be copied to the destination."""

    def __init__(
        self,
        msg: str,
        *,
        digest: Optional[str] = None,
        first_byte: Optional[int] = None,
        last_byte: Optional[int] = None,
    ):
        """
        Args:
            msg: Message describing the failed operation.
            digest: Digest of the blob being transferred.
            first_byte: Offset of the first byte of the failed part.
            last_byte: Offset of the last byte of the failed part.
        """
        self.digest = digest
        self.first_byte = first_byte
        self.last_byte = last_byte
        if digest:
            msg = f"{msg} ({digest})"
        if first_byte is not None and last_byte is not None:
            msg = f"{msg} ({first_byte}-{last_byte})"
        super().__init__(msg)


class IllegalStateError(TransferError):
    """Raised when the part accumulator reaches a state it must never be in."""


class PublicationError(EcrCopyError):
    """Raised when the manifest cannot be published to the destination."""
