#!/usr/bin/env python

# pylint: disable=redefined-outer-name

"""Manifest tests."""

import json

import pytest

from ecr_copy_async import (
    DockerMediaTypes,
    FormattedDigest,
    Manifest,
    MediaTypes,
    OCIMediaTypes,
)

from .testutils import build_image, TypingImage


@pytest.fixture()
def image() -> TypingImage:
    """Provides an image with two layers."""
    return build_image(b"layer one", b"layer two")


@pytest.mark.parametrize(
    "document,media_type",
    [
        (
            {"mediaType": DockerMediaTypes.DISTRIBUTION_MANIFEST_V2, "layers": []},
            DockerMediaTypes.DISTRIBUTION_MANIFEST_V2,
        ),
        ({"manifests": []}, OCIMediaTypes.IMAGE_INDEX_V1),
        ({"config": {}, "layers": []}, OCIMediaTypes.IMAGE_MANIFEST_V1),
        ({"fsLayers": []}, DockerMediaTypes.DISTRIBUTION_MANIFEST_V1_SIGNED),
        ({}, MediaTypes.APPLICATION_JSON),
    ],
)
def test__detect_media_type(document: dict, media_type: str):
    """Test that media types can be detected."""
    manifest = Manifest(json.dumps(document).encode("utf-8"))
    assert manifest.get_media_type() == media_type


def test___init__(image: TypingImage):
    """Test that an image manifest can be instantiated."""
    manifest = Manifest(image.manifest)
    assert manifest.bytes == image.manifest
    assert manifest.json
    assert manifest.get_media_type() == DockerMediaTypes.DISTRIBUTION_MANIFEST_V2

    manifest = Manifest(image.manifest, media_type=OCIMediaTypes.IMAGE_MANIFEST_V1)
    assert manifest.get_media_type() == OCIMediaTypes.IMAGE_MANIFEST_V1

    manifest = Manifest(image.manifest.decode("utf-8"))
    assert manifest.get_bytes() == image.manifest


def test___bytes__(image: TypingImage):
    """Test __bytes__ pass-through."""
    assert bytes(Manifest(image.manifest)) == image.manifest


def test___str__(image: TypingImage):
    """Test __str__ pass-through."""
    assert str(Manifest(image.manifest)) == image.manifest.decode("utf-8")


def test_get_bytes_verbatim(image: TypingImage):
    """Test that the raw bytes are retained, and never re-serialized."""
    manifest = Manifest(image.manifest)
    assert manifest.get_bytes() is image.manifest
    assert manifest.get_bytes() != json.dumps(manifest.get_json()).encode("utf-8")
    manifest.get_json()["layers"].clear()
    assert len(manifest.get_layers()) == 2
    assert manifest.get_bytes() == image.manifest


def test_get_digest(image: TypingImage):
    """Test image manifest digest calculation."""
    assert Manifest(image.manifest).get_digest() == FormattedDigest.calculate(
        image.manifest
    )


def test_get_blobs(image: TypingImage):
    """Test that the config blob is appended after the layers, in order."""
    manifest = Manifest(image.manifest)
    blobs = manifest.get_blobs()
    assert [blob.digest for blob in blobs] == [
        FormattedDigest.calculate(b"layer one"),
        FormattedDigest.calculate(b"layer two"),
        FormattedDigest.calculate(image.config),
    ]
    assert blobs[-1] == manifest.get_config()
    assert blobs[:-1] == manifest.get_layers()
    assert blobs[0].media_type == DockerMediaTypes.IMAGE_ROOTFS_DIFF
    assert blobs[0].size == len(b"layer one")
    assert blobs[-1].media_type == DockerMediaTypes.CONTAINER_IMAGE_V1


def test_get_blobs_normalization():
    """Test that blob digests are case-normalized."""
    digest = FormattedDigest.calculate(b"data")
    document = {
        "config": {"digest": digest.upper().replace("SHA256", "sha256"), "size": 4},
        "layers": [],
    }
    manifest = Manifest(json.dumps(document).encode("utf-8"))
    assert manifest.get_config().digest == digest
    assert manifest.get_config().media_type == MediaTypes.APPLICATION_OCTET_STREAM


@pytest.mark.parametrize(
    "document,result",
    [
        ({"manifests": []}, True),
        (
            {"mediaType": DockerMediaTypes.DISTRIBUTION_MANIFEST_LIST_V2},
            True,
        ),
        ({"config": {}, "layers": []}, False),
    ],
)
def test_is_index(document: dict, result: bool):
    """Test that manifest lists / image indices are identified."""
    assert Manifest(json.dumps(document).encode("utf-8")).is_index() == result
