#!/usr/bin/env python

# pylint: disable=missing-class-docstring,too-few-public-methods

"""Typing classes."""

from typing import Any, List, NamedTuple, Optional, Union

from .formatteddigest import FormattedDigest


class BlobRef(NamedTuple):
    media_type: str
    size: int
    digest: FormattedDigest


class UploadSession(NamedTuple):
    upload_id: str
    part_size: int


class ImageReferenceParseString(NamedTuple):
    digest: Optional[Union[FormattedDigest, str]]
    tag: Optional[str]


class RegistryClientCommitUpload(NamedTuple):
    digest: Optional[str]
    response: Any


class RegistryClientPublishManifest(NamedTuple):
    digest: Optional[str]
    response: Any


class LayerTransferCopy(NamedTuple):
    digest: FormattedDigest
    parts: int
    size: int


class ImageCopyResult(NamedTuple):
    blobs: List[BlobRef]
    manifest_digest: FormattedDigest
    tag: Optional[str]
    transferred: List[BlobRef]


class RegistryClientResolveImage(NamedTuple):
    digest: Optional[str]
    manifest: bytes
    media_type: Optional[str]
