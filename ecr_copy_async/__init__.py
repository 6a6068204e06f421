#!/usr/bin/env python

"""Copies container images between Amazon ECR repositories without local staging."""

from .copier import ImageCopier
from .ecrclient import EcrRegistryClientAsync
from .errors import (
    EcrCopyError,
    IllegalStateError,
    InputError,
    PublicationError,
    ResolutionError,
    TransferError,
)
from .formatteddigest import FormattedDigest
from .imagereference import ImageReference
from .layertransfer import LayerTransfer
from .manifest import Manifest
from .registryclient import RegistryClient
from .specs import DockerMediaTypes, LayerAvailability, MediaTypes, OCIMediaTypes

__version__ = "0.1.0"
