#!/usr/bin/env python

"""
Abstraction of a single (flat) image manifest, as defined in:

* https://github.com/docker/distribution/tree/master/docs/spec
* https://github.com/opencontainers/image-spec/blob/master/manifest.md
"""

from typing import List

from .formatteddigest import FormattedDigest
from .jsonbytes import JsonBytes
from .specs import DockerMediaTypes, INDEX_MEDIA_TYPES, MediaTypes, OCIMediaTypes
from .typing import BlobRef


class Manifest(JsonBytes):
    """
    Read-only view of an image manifest listing a config blob and its layers.
    """

    def __init__(self, manifest: bytes, *, media_type: str = None):
        """
        Args:
            manifest: The raw image manifest value.
            media_type: The media type of the image manifest.
        """
        super().__init__(manifest)
        self.media_type = media_type
        if not self.media_type:
            self._detect_media_type()

    def _detect_media_type(self):
        """
        Attempts to detect the media type of the image manifest.
        """
        # Is there a declared media type (applies to all of Docker manifest v2.2)?
        if "mediaType" in self.json:
            self.media_type = self.json["mediaType"]

        # Is this an OCI image index?
        elif "manifests" in self.json:
            self.media_type = OCIMediaTypes.IMAGE_INDEX_V1

        # Is this an OCI image manifest?
        elif "layers" in self.json:
            self.media_type = OCIMediaTypes.IMAGE_MANIFEST_V1

        # Is this a Docker manifest v2.1?
        elif "fsLayers" in self.json:
            self.media_type = DockerMediaTypes.DISTRIBUTION_MANIFEST_V1_SIGNED

        # Give up
        else:
            self.media_type = MediaTypes.APPLICATION_JSON

    @staticmethod
    def _parse_blob(descriptor) -> BlobRef:
        return BlobRef(
            media_type=descriptor.get("mediaType", MediaTypes.APPLICATION_OCTET_STREAM),
            size=int(descriptor.get("size", 0)),
            digest=FormattedDigest.parse(descriptor["digest"]),
        )

    def get_blobs(self) -> List[BlobRef]:
        """
        Retrieves all blobs referenced by the image manifest; the layers, in order, followed by the config.

        Returns:
            The referenced blobs.
        """
        return self.get_layers() + [self.get_config()]

    def get_config(self) -> BlobRef:
        """
        Retrieves the image configuration blob.

        Returns:
            The image configuration blob.
        """
        return Manifest._parse_blob(self.json["config"])

    def get_layers(self) -> List[BlobRef]:
        """
        Retrieves the image layer blobs.

        Returns:
            The image layer blobs, in manifest order.
        """
        return [Manifest._parse_blob(layer) for layer in self.json["layers"]]

    def get_media_type(self) -> str:
        """
        Retrieves the media type of the image manifest.

        Returns:
            The media type of the image manifest.
        """
        return self.media_type

    def is_index(self) -> bool:
        """Checks if the image manifest references other manifests (manifest list / image index)."""
        return self.media_type in INDEX_MEDIA_TYPES or "manifests" in self.json
