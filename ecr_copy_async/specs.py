#!/usr/bin/env python

# pylint: disable=too-few-public-methods

"""Reusable string literals."""


class DockerMediaTypes:
    """https://github.com/docker/distribution/blob/master/docs/spec/manifest-v2-2.md#manifest-list"""

    CONTAINER_IMAGE_V1 = "application/vnd.docker.container.image.v1+json"
    DISTRIBUTION_MANIFEST_LIST_V2 = (
        "application/vnd.docker.distribution.manifest.list.v2+json"
    )
    DISTRIBUTION_MANIFEST_V1_SIGNED = (
        "application/vnd.docker.distribution.manifest.v1+prettyjws"
    )
    DISTRIBUTION_MANIFEST_V2 = "application/vnd.docker.distribution.manifest.v2+json"
    IMAGE_ROOTFS_DIFF = "application/vnd.docker.image.rootfs.diff.tar.gzip"


class LayerAvailability:
    """https://docs.aws.amazon.com/AmazonECR/latest/APIReference/API_Layer.html"""

    AVAILABLE = "AVAILABLE"
    UNAVAILABLE = "UNAVAILABLE"


class MediaTypes:
    """Generic mime types."""

    APPLICATION_JSON = "application/json"
    APPLICATION_OCTET_STREAM = "application/octet-stream"


class OCIMediaTypes:
    """https://github.com/opencontainers/image-spec/blob/master/media-types.md"""

    IMAGE_INDEX_V1 = "application/vnd.oci.image.index.v1+json"
    IMAGE_MANIFEST_V1 = "application/vnd.oci.image.manifest.v1+json"


# Manifests that reference other manifests rather than a config and layers.
INDEX_MEDIA_TYPES = (
    DockerMediaTypes.DISTRIBUTION_MANIFEST_LIST_V2,
    OCIMediaTypes.IMAGE_INDEX_V1,
)
