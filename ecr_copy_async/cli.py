#!/usr/bin/env python

"""Command line interface."""

import argparse
import asyncio
import logging

from typing import List

from .copier import ImageCopier
from .ecrclient import EcrRegistryClientAsync
from .errors import EcrCopyError, InputError
from .imagereference import ImageReference
from .typing import ImageCopyResult
from .utils import MAX_CONCURRENCY

LOGGER = logging.getLogger(__name__)


def get_parser() -> argparse.ArgumentParser:
    """Builds the argument parser."""
    parser = argparse.ArgumentParser(
        description="Copies an image between Amazon ECR repositories without staging it locally.",
        prog="ecr-copy",
    )
    parser.add_argument("source_repository", metavar="from-repo")
    parser.add_argument("image_reference", metavar="image-digest-or-tag")
    parser.add_argument("destination_repository", metavar="to-repo")
    parser.add_argument("new_tag", metavar="new-tag", nargs="?", default=None)
    parser.add_argument(
        "--max-concurrency",
        default=MAX_CONCURRENCY,
        help="Number of blobs to transfer at once (default: %(default)s).",
        type=int,
    )
    parser.add_argument("--region", default=None, help="AWS region of the registry.")
    parser.add_argument(
        "--registry-id", default=None, help="AWS account id of the registry."
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging."
    )
    return parser


async def copy(
    args: argparse.Namespace, image_reference: ImageReference
) -> ImageCopyResult:
    """Copies an image as described by the parsed arguments."""
    async with EcrRegistryClientAsync(
        region_name=args.region, registry_id=args.registry_id
    ) as registry_client:
        image_copier = ImageCopier(
            registry_client, max_concurrency=args.max_concurrency
        )
        return await image_copier.copy(
            args.source_repository,
            image_reference,
            args.destination_repository,
            args.new_tag,
        )


def main(argv: List[str] = None) -> int:
    """Entrypoint; returns the process exit code."""
    parser = get_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        level=logging.DEBUG if args.verbose else logging.INFO,
    )

    try:
        if args.max_concurrency < 1:
            raise InputError(f"Invalid maximum concurrency: {args.max_concurrency}")
        image_reference = ImageReference.parse(args.image_reference)
    except InputError as exception:
        parser.print_usage()
        LOGGER.error("%s", exception)
        return 2

    try:
        asyncio.run(copy(args, image_reference))
    except EcrCopyError as exception:
        LOGGER.error("%s", exception)
        return 1

    return 0
