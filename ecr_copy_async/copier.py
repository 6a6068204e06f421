#!/usr/bin/env python

"""Copies an image (manifest and blobs) from one repository to another."""

import asyncio
import logging

from json import JSONDecodeError
from typing import List, Optional, Union

from .errors import ResolutionError
from .imagereference import ImageReference
from .layertransfer import LayerTransfer
from .manifest import Manifest
from .registryclient import RegistryClient
from .specs import LayerAvailability
from .typing import BlobRef, ImageCopyResult
from .utils import MAX_CONCURRENCY

LOGGER = logging.getLogger(__name__)


class ImageCopier:
    """
    Resolves a source manifest, transfers the blobs missing from the destination, and republishes the manifest.
    """

    def __init__(
        self,
        registry_client: RegistryClient,
        *,
        check_digest: bool = True,
        max_concurrency: int = None,
    ):
        """
        Args:
            registry_client: The registry on which the source and destination repositories reside.
            check_digest: If True, an exception will be raised if the local and expected blob digests are
                          inconsistent.
            max_concurrency: Maximum number of blobs to transfer at once; 1 transfers blobs sequentially.
        """
        if max_concurrency is None:
            max_concurrency = MAX_CONCURRENCY
        if max_concurrency < 1:
            raise ValueError(f"Invalid maximum concurrency: {max_concurrency}")

        self.layer_transfer = LayerTransfer(registry_client, check_digest=check_digest)
        self.max_concurrency = max_concurrency
        self.registry_client = registry_client

    async def check_availability(
        self, repository: str, blobs: List[BlobRef]
    ) -> List[BlobRef]:
        """
        Determines which blobs are not (definitively) available in a repository.

        Args:
            repository: The repository in which to check for the blobs.
            blobs: The candidate blobs.

        Returns:
            The transfer plan; the unique blobs not reported as available, in order of first occurrence.
        """
        # A manifest may reference the same blob more than once.
        unique = {}
        for blob in blobs:
            unique.setdefault(blob.digest, blob)
        unique = list(unique.values())
        availability = await self.registry_client.check_blobs_present(
            repository, [blob.digest for blob in unique]
        )
        available = {
            digest.lower()
            for digest, status in availability.items()
            if status == LayerAvailability.AVAILABLE
        }
        return [blob for blob in unique if blob.digest not in available]

    async def copy(
        self,
        source_repository: str,
        image_reference: Union[ImageReference, str],
        destination_repository: str,
        new_tag: Optional[str] = None,
    ) -> ImageCopyResult:
        """
        Copies an image from one repository to another.

        Args:
            source_repository: The repository from which to copy the image.
            image_reference: The image digest or tag.
            destination_repository: The repository to which to copy the image.
            new_tag: Optional tag name under which to publish the image in the destination repository.

        Returns:
            dict:
                blobs: All blobs referenced by the image manifest.
                manifest_digest: The digest of the image manifest.
                tag: The tag name under which the manifest was published, or None.
                transferred: The blobs that were transferred.
        """
        if not isinstance(image_reference, ImageReference):
            image_reference = ImageReference.parse(image_reference)

        manifest = await self.resolve_manifest(source_repository, image_reference)
        blobs = manifest.get_blobs()

        transfer_plan = await self.check_availability(destination_repository, blobs)
        LOGGER.info(
            "Manifest has %d layers, need to copy %d of them",
            len(blobs),
            len(transfer_plan),
        )

        await self.copy_blobs(source_repository, destination_repository, transfer_plan)

        await self.publish_manifest(destination_repository, manifest, tag=new_tag)

        LOGGER.info(
            "Copied %s from %s to %s",
            image_reference,
            source_repository,
            destination_repository,
        )
        return ImageCopyResult(
            blobs=blobs,
            manifest_digest=manifest.get_digest(),
            tag=new_tag,
            transferred=transfer_plan,
        )

    async def copy_blobs(
        self,
        source_repository: str,
        destination_repository: str,
        transfer_plan: List[BlobRef],
    ):
        """
        Transfers blobs, failing fast on the first error.

        Args:
            source_repository: The repository from which to download the blobs.
            destination_repository: The repository to which to upload the blobs.
            transfer_plan: The blobs to be transferred.
        """
        if self.max_concurrency == 1:
            for i, blob in enumerate(transfer_plan, start=1):
                LOGGER.info(
                    "Copying blob %d of %d: %s", i, len(transfer_plan), blob.digest
                )
                await self.layer_transfer.copy(
                    source_repository, destination_repository, blob.digest
                )
            return

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _copy(blob: BlobRef):
            async with semaphore:
                LOGGER.info("Copying blob: %s", blob.digest)
                return await self.layer_transfer.copy(
                    source_repository, destination_repository, blob.digest
                )

        tasks = [asyncio.ensure_future(_copy(blob)) for blob in transfer_plan]
        if not tasks:
            return
        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
            for task in done:
                if task.exception():
                    raise task.exception()
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    async def publish_manifest(
        self, repository: str, manifest: Manifest, *, tag: Optional[str] = None
    ):
        """
        Publishes the original (unmodified) manifest bytes.

        Args:
            repository: The repository to which to publish the manifest.
            manifest: The image manifest.
            tag: Optional tag name; if omitted the manifest is published by digest only.
        """
        response = await self.registry_client.publish_manifest(
            repository,
            manifest.get_bytes(),
            media_type=manifest.get_media_type(),
            tag=tag,
        )
        LOGGER.info(
            "Published %s to %s%s",
            response.digest or manifest.get_digest(),
            repository,
            f":{tag}" if tag else "",
        )

    async def resolve_manifest(
        self, repository: str, image_reference: ImageReference
    ) -> Manifest:
        """
        Retrieves and parses the manifest of exactly one image.

        Args:
            repository: The repository containing the image.
            image_reference: The image digest or tag.

        Returns:
            The image manifest; the raw bytes are retained verbatim.
        """
        response = await self.registry_client.resolve_image(repository, image_reference)
        try:
            manifest = Manifest(response.manifest, media_type=response.media_type)
        except (JSONDecodeError, UnicodeDecodeError) as exception:
            raise ResolutionError(
                f"Unable to parse manifest: {repository}@{image_reference}"
            ) from exception

        if manifest.is_index():
            raise ResolutionError(
                f"Manifest lists / image indices are not supported: {repository}@{image_reference} "
                f"({manifest.get_media_type()})"
            )
        try:
            manifest.get_blobs()
        except (KeyError, TypeError, ValueError) as exception:
            raise ResolutionError(
                f"Manifest does not reference a config and layers: {repository}@{image_reference}"
            ) from exception

        return manifest
