#!/usr/bin/env python

# pylint: disable=too-many-instance-attributes

"""Asynchronous Amazon ECR registry client."""

import asyncio
import logging
import os

from contextlib import asynccontextmanager
from ssl import create_default_context, SSLContext
from typing import Dict, Iterable, List, Optional, Union
from urllib.parse import urlparse

import boto3

from aiohttp import (
    AsyncResolver,
    ClientError as AioHttpClientError,
    ClientResponseError,
    ClientSession,
    ClientTimeout,
    Fingerprint,
    TCPConnector,
)
from aiohttp.helpers import BasicAuth
from botocore.exceptions import BotoCoreError, ClientError

from .errors import PublicationError, ResolutionError, TransferError
from .formatteddigest import FormattedDigest
from .imagereference import ImageReference
from .registryclient import RegistryClient
from .specs import DockerMediaTypes, OCIMediaTypes
from .typing import (
    RegistryClientCommitUpload,
    RegistryClientPublishManifest,
    RegistryClientResolveImage,
    UploadSession,
)
from .utils import async_wrap, batched

LOGGER = logging.getLogger(__name__)

SDK_ERRORS = (BotoCoreError, ClientError)


class EcrRegistryClientAsync(RegistryClient):
    """
    Amazon ECR control-plane (boto3) and pre-signed blob download (AIOHTTP) client.
    """

    # https://docs.aws.amazon.com/AmazonECR/latest/APIReference/API_BatchCheckLayerAvailability.html
    BATCH_CHECK_LAYER_AVAILABILITY_MAX = 100
    DEBUG = os.environ.get("ECR_COPY_DEBUG", "")
    DEFAULT_ACCEPTED_MEDIA_TYPES = [
        DockerMediaTypes.DISTRIBUTION_MANIFEST_V2,
        OCIMediaTypes.IMAGE_MANIFEST_V1,
    ]
    DEFAULT_REGION = os.environ.get("ECR_COPY_REGION", None)

    def __init__(
        self,
        *,
        boto3_session: boto3.session.Session = None,
        client_session: ClientSession = None,
        client_session_kwargs: Dict = None,
        ecr_client=None,
        no_proxy: str = None,
        proxies: Dict[str, str] = None,
        proxy_auth: BasicAuth = None,
        region_name: str = None,
        registry_id: str = None,
        resolver_kwargs: Dict = None,
        ssl: Union[None, bool, Fingerprint, SSLContext] = None,
        tcp_connector_kwargs: Dict = None,
    ):
        # pylint: disable=too-many-arguments
        """
        Args:
            boto3_session: The AWS session from which to create the ECR client; credentials are discovered by boto3.
            client_session: The underlying client session to use when downloading blobs.
            client_session_kwargs: Arguments to be passed to the client session.
            ecr_client: A preconfigured boto3 ECR client.
            no_proxy: A comma separated list of domains to exclude from proxying.
            proxies: Mapping of protocols to proxy urls, optionally including credentials.
            proxy_auth: The credentials to use when proxying.
            region_name: The AWS region of the registry.
            registry_id: The AWS account id of the registry; defaults to that of the credentials.
            resolver_kwargs: Arguments to be passed to the resolver
            ssl: SSL context.
            tcp_connector_kwargs: Arguments to be passed to the TCP connector.
        """
        if not client_session_kwargs:
            client_session_kwargs = {}
        # Unbounded total duration; blobs can be gigabytes.
        client_session_kwargs.setdefault("timeout", ClientTimeout(total=None))
        if not proxies:
            proxies = {}
        http_proxy = os.environ.get("HTTP_PROXY", os.environ.get("http_proxy"))
        if http_proxy and "http" not in proxies:
            proxies["http"] = http_proxy
        https_proxy = os.environ.get("HTTPS_PROXY", os.environ.get("https_proxy"))
        if https_proxy and "https" not in proxies:
            proxies["https"] = https_proxy
        if not no_proxy:
            no_proxy = os.environ.get("NO_PROXY", os.environ.get("no_proxy"))
        no_proxy = no_proxy.split(",") if no_proxy else []
        if not region_name:
            region_name = EcrRegistryClientAsync.DEFAULT_REGION
        if not resolver_kwargs:
            resolver_kwargs = {}
        if not ssl:
            cacerts = os.environ.get("ECR_COPY_CACERTS", None)
            if cacerts:
                if EcrRegistryClientAsync.DEBUG:
                    LOGGER.debug("Using cacerts: %s", cacerts)
                ssl = create_default_context(cafile=str(cacerts))
        if not tcp_connector_kwargs:
            tcp_connector_kwargs = {}

        self.boto3_session = boto3_session
        self.client_session = client_session
        self.client_session_kwargs = client_session_kwargs
        self.ecr_client = ecr_client
        self.proxies = proxies
        self.proxy_auth = proxy_auth
        self.proxy_no = no_proxy
        self.region_name = region_name
        self.registry_id = registry_id
        self.resolver_kwargs = resolver_kwargs
        self.ssl = ssl
        self.tcp_connector_kwargs = tcp_connector_kwargs

    async def close(self):
        """Gracefully closes this instance."""
        if self.client_session:
            await self.client_session.close()
        self.client_session = None

    async def _call(self, operation: str, **kwargs) -> Dict:
        """
        Invokes an ECR API operation in an executor.

        Args:
            operation: The (boto3) name of the operation.
            kwargs: Pass-through; the registry id is added when configured.

        Returns:
            The operation response.
        """
        if self.registry_id:
            kwargs["registryId"] = self.registry_id
        ecr_client = self._get_ecr_client()
        response = await async_wrap(getattr(ecr_client, operation))(**kwargs)
        if EcrRegistryClientAsync.DEBUG:
            response_debug = {
                key: value
                for key, value in response.items()
                if key != "ResponseMetadata"
            }
            LOGGER.debug("%s: %s", operation, response_debug)
        return response

    async def _get_client_session(self) -> ClientSession:
        """
        Initializes and / or retrieves an AIOHTTP client session.

        Returns:
            The AIOHTTP client session.
        """
        if not self.client_session:
            if "resolver" not in self.tcp_connector_kwargs:
                self.tcp_connector_kwargs["resolver"] = AsyncResolver(
                    **self.resolver_kwargs
                )
            if "ssl" not in self.tcp_connector_kwargs and self.ssl is not None:
                self.tcp_connector_kwargs["ssl"] = self.ssl
            if "connector" not in self.client_session_kwargs:
                self.client_session_kwargs["connector"] = TCPConnector(
                    **self.tcp_connector_kwargs
                )
            self.client_session = ClientSession(**self.client_session_kwargs)

        return self.client_session

    def _get_ecr_client(self):
        """
        Initializes and / or retrieves a boto3 ECR client.

        Returns:
            The boto3 ECR client.
        """
        if self.ecr_client is None:
            if self.boto3_session is None:
                self.boto3_session = boto3.session.Session(region_name=self.region_name)
            self.ecr_client = self.boto3_session.client("ecr")

        return self.ecr_client

    async def _get_proxy(self, *, endpoint: str, protocol: str) -> Optional[str]:
        """
        Retrieves the proxy configuration for a given endpoint.

        Args:
            endpoint: The endpoint for which to retrieve the proxy configuration.
            protocol: The protocol used to connect to the endpoint.
        """
        result = None
        if endpoint not in self.proxy_no and protocol in self.proxies:
            result = self.proxies[protocol]
        return result

    async def check_blobs_present(
        self, repository: str, digests: Iterable[FormattedDigest]
    ) -> Dict[FormattedDigest, str]:
        result = {}
        for batch in batched(
            digests, EcrRegistryClientAsync.BATCH_CHECK_LAYER_AVAILABILITY_MAX
        ):
            try:
                response = await self._call(
                    "batch_check_layer_availability",
                    layerDigests=[str(digest) for digest in batch],
                    repositoryName=repository,
                )
            except SDK_ERRORS as exception:
                raise TransferError(
                    f"BatchCheckLayerAvailability({repository}): {exception}"
                ) from exception
            for layer in response.get("layers", []):
                result[FormattedDigest(layer["layerDigest"])] = layer.get(
                    "layerAvailability"
                )
            for failure in response.get("failures", []):
                LOGGER.debug(
                    "Layer %s is not available: %s %s",
                    failure.get("layerDigest"),
                    failure.get("failureCode"),
                    failure.get("failureReason"),
                )
        return result

    async def commit_upload(
        self,
        repository: str,
        upload_id: str,
        token: str,
        *,
        digest: FormattedDigest = None,
    ) -> RegistryClientCommitUpload:
        try:
            response = await self._call(
                "complete_layer_upload",
                layerDigests=[token],
                repositoryName=repository,
                uploadId=upload_id,
            )
        except SDK_ERRORS as exception:
            raise TransferError(
                f"CompleteLayerUpload({repository}, {upload_id}): {exception}",
                digest=digest,
            ) from exception
        return RegistryClientCommitUpload(
            digest=response.get("layerDigest"), response=response
        )

    async def get_blob_download_location(
        self, repository: str, digest: FormattedDigest
    ) -> str:
        try:
            response = await self._call(
                "get_download_url_for_layer",
                layerDigest=str(digest),
                repositoryName=repository,
            )
        except SDK_ERRORS as exception:
            raise TransferError(
                f"GetDownloadUrlForLayer({repository}): {exception}", digest=digest
            ) from exception
        return response["downloadUrl"]

    @asynccontextmanager
    async def open_blob_stream(self, url: str):
        parts = urlparse(url)
        client_session = await self._get_client_session()
        proxy = await self._get_proxy(endpoint=parts.netloc, protocol=parts.scheme)
        # Note: Pre-signed URLs carry credentials; only the host is ever logged.
        try:
            client_response = await client_session.get(
                proxy=proxy,
                proxy_auth=self.proxy_auth,
                raise_for_status=True,
                url=url,
            )
        except ClientResponseError as exception:
            raise TransferError(
                f"GET blob from {parts.netloc}: {exception.status}, {exception.message}"
            ) from exception
        except (AioHttpClientError, asyncio.TimeoutError) as exception:
            raise TransferError(
                f"GET blob from {parts.netloc}: {exception}"
            ) from exception
        async with client_response:
            yield client_response.content

    async def open_upload_session(self, repository: str) -> UploadSession:
        try:
            response = await self._call(
                "initiate_layer_upload", repositoryName=repository
            )
        except SDK_ERRORS as exception:
            raise TransferError(
                f"InitiateLayerUpload({repository}): {exception}"
            ) from exception
        return UploadSession(
            part_size=int(response["partSize"]), upload_id=response["uploadId"]
        )

    async def publish_manifest(
        self,
        repository: str,
        manifest: bytes,
        *,
        media_type: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> RegistryClientPublishManifest:
        kwargs = {
            "imageManifest": manifest.decode("utf-8"),
            "repositoryName": repository,
        }
        if media_type:
            kwargs["imageManifestMediaType"] = media_type
        if tag:
            kwargs["imageTag"] = tag
        try:
            response = await self._call("put_image", **kwargs)
        except ClientError as exception:
            # Re-publishing an identical manifest (and tag) is not an error.
            if (
                exception.response.get("Error", {}).get("Code")
                == "ImageAlreadyExistsException"
            ):
                LOGGER.info(
                    "Image already exists: %s%s", repository, f":{tag}" if tag else ""
                )
                return RegistryClientPublishManifest(
                    digest=None, response=exception.response
                )
            raise PublicationError(
                f"PutImage({repository}, {tag}): {exception}"
            ) from exception
        except BotoCoreError as exception:
            raise PublicationError(
                f"PutImage({repository}, {tag}): {exception}"
            ) from exception
        return RegistryClientPublishManifest(
            digest=response.get("image", {}).get("imageId", {}).get("imageDigest"),
            response=response,
        )

    async def resolve_image(
        self, repository: str, image_reference: ImageReference
    ) -> RegistryClientResolveImage:
        image_id = (
            {"imageDigest": str(image_reference.digest)}
            if image_reference.is_digest()
            else {"imageTag": image_reference.tag}
        )
        try:
            response = await self._call(
                "batch_get_image",
                acceptedMediaTypes=EcrRegistryClientAsync.DEFAULT_ACCEPTED_MEDIA_TYPES,
                imageIds=[image_id],
                repositoryName=repository,
            )
        except SDK_ERRORS as exception:
            raise ResolutionError(
                f"BatchGetImage({repository}, {image_reference}): {exception}"
            ) from exception

        images = response.get("images", [])  # type: List[Dict]
        if len(images) != 1:
            failures = [
                f"{failure.get('failureCode')}: {failure.get('failureReason')}"
                for failure in response.get("failures", [])
            ]
            raise ResolutionError(
                f"BatchGetImage({repository}, {image_reference}): "
                f"Got {len(images)} images {failures}"
            )

        return RegistryClientResolveImage(
            digest=images[0].get("imageId", {}).get("imageDigest"),
            manifest=images[0]["imageManifest"].encode("utf-8"),
            media_type=images[0].get("imageManifestMediaType"),
        )

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
        try:
            await self._call(
                "upload_layer_part",
                layerPartBlob=data,
                partFirstByte=first_byte,
                partLastByte=last_byte,
                repositoryName=repository,
                uploadId=upload_id,
            )
        except SDK_ERRORS as exception:
            raise TransferError(
                f"UploadLayerPart({repository}, {upload_id}): {exception}",
                digest=digest,
                first_byte=first_byte,
                last_byte=last_byte,
            ) from exception
