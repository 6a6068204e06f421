#!/usr/bin/env python

"""Streams blobs from a source repository into a chunked upload on a destination repository."""

import asyncio
import logging

from enum import Enum
from typing import AsyncIterator, Optional

from aiohttp import ClientError

from .errors import IllegalStateError, TransferError
from .formatteddigest import FormattedDigest
from .registryclient import RegistryClient
from .typing import LayerTransferCopy
from .utils import must_be_equal

LOGGER = logging.getLogger(__name__)

# Errors a stream reader may raise that abort the transfer (anything else propagates as-is).
READ_ERRORS = (ClientError, asyncio.TimeoutError, OSError)


class ReadState(Enum):
    """States of the part accumulator."""

    ACCUMULATING = "accumulating"
    PART_READY = "part_ready"
    STREAM_ENDED = "stream_ended"
    READ_FAILED = "read_failed"


def next_state(
    *,
    filled: int,
    part_size: int,
    bytes_read: int,
    at_eof: bool,
    error: Optional[BaseException] = None,
) -> ReadState:
    """
    Determines the state of the part accumulator following a single read.

    Args:
        filled: Number of bytes accumulated before the read.
        part_size: Size of a complete part.
        bytes_read: Number of bytes returned by the read.
        at_eof: True if the stream signaled the end of the stream.
        error: The error raised by the read, if any.

    Returns:
        The next state.
    """
    if error is not None:
        return ReadState.READ_FAILED

    filled += bytes_read
    if bytes_read < 0 or filled > part_size:
        raise IllegalStateError(
            f"Read of {bytes_read} bytes overflows part: {filled} > {part_size}"
        )

    if filled == part_size:
        if not filled:
            raise IllegalStateError("Part is ready with zero bytes to emit")
        return ReadState.PART_READY

    # Note: A short read (including zero bytes) that is not at the end of the stream keeps accumulating.
    if at_eof:
        return ReadState.STREAM_ENDED
    return ReadState.ACCUMULATING


async def read_parts(
    reader, part_size: int, *, digest: FormattedDigest = None
) -> AsyncIterator[bytes]:
    """
    Accumulates (short) reads from a stream into parts of a given size.

    Args:
        reader: The stream from which to read; read(n) returns at most n bytes, at_eof() signals the end.
        part_size: Size of every part except the last.
        digest: Digest of the blob being read, for context.

    Returns:
        Iterator over the parts; the last part may be short, and is never empty.
    """
    if part_size < 1:
        raise IllegalStateError(f"Invalid part size: {part_size}", digest=digest)

    buffer = bytearray(part_size)
    filled = offset = 0
    while True:
        chunk = b""
        error = None
        try:
            chunk = await reader.read(part_size - filled)
        except READ_ERRORS as exception:
            error = exception

        state = next_state(
            at_eof=error is None and reader.at_eof(),
            bytes_read=len(chunk),
            error=error,
            filled=filled,
            part_size=part_size,
        )
        if state == ReadState.READ_FAILED:
            raise TransferError(
                f"Read failed after {offset + filled} bytes: {error}", digest=digest
            ) from error

        buffer[filled : filled + len(chunk)] = chunk
        filled += len(chunk)

        if state == ReadState.PART_READY:
            yield bytes(buffer)
            offset += filled
            filled = 0
        elif state == ReadState.STREAM_ENDED:
            # Note: Blobs that are an exact multiple of the part size end here with nothing to emit.
            if filled:
                yield bytes(buffer[:filled])
            return


class LayerTransfer:
    """
    Copies a single blob between repositories without staging it locally.
    """

    def __init__(self, registry_client: RegistryClient, *, check_digest: bool = True):
        """
        Args:
            registry_client: The registry on which the source and destination repositories reside.
            check_digest: If True, an exception will be raised before committing if the local and expected digests
                          are inconsistent.
        """
        self.check_digest = check_digest
        self.registry_client = registry_client

    async def copy(
        self,
        source_repository: str,
        destination_repository: str,
        digest: FormattedDigest,
    ) -> LayerTransferCopy:
        """
        Ensures that a blob exists in the destination repository, or fails.

        Args:
            source_repository: The repository from which to download the blob.
            destination_repository: The repository to which to upload the blob.
            digest: Digest of the blob.

        Returns:
            dict:
                digest: The locally computed digest of the uploaded bytes.
                parts: The number of uploaded parts.
                size: The byte size of the blob.
        """
        download_url = await self.registry_client.get_blob_download_location(
            source_repository, digest
        )
        upload_session = await self.registry_client.open_upload_session(
            destination_repository
        )
        LOGGER.info(
            "Starting upload %s for %s (part size: %d)",
            upload_session.upload_id,
            digest,
            upload_session.part_size,
        )

        hasher = digest.hasher()
        first_byte = parts = 0
        async with self.registry_client.open_blob_stream(download_url) as reader:
            async for part in read_parts(
                reader, upload_session.part_size, digest=digest
            ):
                last_byte = first_byte + len(part) - 1
                LOGGER.info(
                    "Uploading %d bytes from %d to %d", len(part), first_byte, last_byte
                )
                await self.registry_client.upload_part(
                    destination_repository,
                    upload_session.upload_id,
                    part,
                    digest=digest,
                    first_byte=first_byte,
                    last_byte=last_byte,
                )
                hasher.update(part)
                first_byte += len(part)
                parts += 1

        local_digest = FormattedDigest(hasher.hexdigest(), algorithm=digest.algorithm)
        if self.check_digest:
            must_be_equal(
                digest,
                local_digest,
                "Local and expected digests are inconsistent",
                digest=digest,
                error_type=TransferError,
            )

        token = f"{upload_session.upload_id}:{local_digest.hex}"
        response = await self.registry_client.commit_upload(
            destination_repository, upload_session.upload_id, token, digest=digest
        )
        LOGGER.info(
            "Committed upload %s: %d bytes in %d parts (registry digest: %s)",
            upload_session.upload_id,
            first_byte,
            parts,
            response.digest,
        )

        return LayerTransferCopy(digest=local_digest, parts=parts, size=first_byte)
