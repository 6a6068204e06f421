#!/usr/bin/env python

"""Abstract registry collaborator consumed while copying an image."""

from abc import ABC, abstractmethod
from typing import AsyncContextManager, Dict, Iterable, Optional

from .formatteddigest import FormattedDigest
from .imagereference import ImageReference
from .typing import (
    RegistryClientCommitUpload,
    RegistryClientPublishManifest,
    RegistryClientResolveImage,
    UploadSession,
)


class RegistryClient(ABC):
    """
    Control-plane and data-plane operations of an image registry.

    Implementations raise ResolutionError, TransferError or PublicationError, naming the failed
    operation and the identifiers involved.
    """

    async def __aenter__(self) -> "RegistryClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self):
        """Gracefully closes this instance."""

    @abstractmethod
    async def check_blobs_present(
        self, repository: str, digests: Iterable[FormattedDigest]
    ) -> Dict[FormattedDigest, str]:
        """
        Retrieves the availability of a set of blobs with a single (logical) query.

        Args:
            repository: The repository in which to check for the blobs.
            digests: Digests of the blobs.

        Returns:
            Mapping of digest to the availability status reported by the registry. Digests for which the registry
            reported nothing are omitted.
        """

    @abstractmethod
    async def commit_upload(
        self,
        repository: str,
        upload_id: str,
        token: str,
        *,
        digest: FormattedDigest = None,
    ) -> RegistryClientCommitUpload:
        """
        Completes an upload session.

        Args:
            repository: The repository to which the blob was uploaded.
            upload_id: Identifier of the upload session.
            token: Upload completion token; <upload id>:<hex digest>.
            digest: Digest of the uploaded blob, for context.

        Returns:
            dict:
                digest: The digest reported by the registry.
                response: The underlying response.
        """

    @abstractmethod
    async def get_blob_download_location(
        self, repository: str, digest: FormattedDigest
    ) -> str:
        """
        Retrieves a (time-limited) URL from which a blob can be downloaded.

        Args:
            repository: The repository containing the blob.
            digest: Digest of the blob.

        Returns:
            The download URL.
        """

    @abstractmethod
    def open_blob_stream(self, url: str) -> AsyncContextManager:
        """
        Opens a streaming read of a blob download URL.

        Args:
            url: The download URL.

        Returns:
            Asynchronous context manager providing a reader; read(n) returns at most n bytes and at_eof() signals the
            end of the stream.
        """

    @abstractmethod
    async def open_upload_session(self, repository: str) -> UploadSession:
        """
        Initiates an upload session.

        Args:
            repository: The repository to which a blob will be uploaded.

        Returns:
            dict:
                part_size: The size, dictated by the registry, of every part except the last.
                upload_id: Identifier of the upload session.
        """

    @abstractmethod
    async def publish_manifest(
        self,
        repository: str,
        manifest: bytes,
        *,
        media_type: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> RegistryClientPublishManifest:
        """
        Publishes an image manifest, verbatim.

        Args:
            repository: The repository to which to publish the manifest.
            manifest: The raw image manifest value.
            media_type: The media type of the image manifest.
            tag: Optional tag name; if omitted the manifest is only addressable by digest.

        Returns:
            dict:
                digest: The manifest digest reported by the registry.
                response: The underlying response.
        """

    @abstractmethod
    async def resolve_image(
        self, repository: str, image_reference: ImageReference
    ) -> RegistryClientResolveImage:
        """
        Retrieves the raw manifest of exactly one image.

        Args:
            repository: The repository containing the image.
            image_reference: The image digest or tag.

        Returns:
            dict:
                digest: The manifest digest reported by the registry.
                manifest: The raw image manifest value.
                media_type: The media type reported by the registry.
        """

    @abstractmethod
    async def upload_part(
        self,
        repository: str,
        upload_id: str,
        data: bytes,
        *,
        first_byte: int,
        last_byte: int,
        digest: FormattedDigest = None,
    ):
        """
        Uploads a single part of a blob; parts must be contiguous and in order.

        Args:
            repository: The repository to which the blob is uploaded.
            upload_id: Identifier of the upload session.
            data: The part content.
            first_byte: Offset of the first byte of the part.
            last_byte: Offset of the last byte of the part.
            digest: Digest of the blob, for context.
        """
