#!/usr/bin/env python

"""Allows execution as: python -m ecr_copy_async"""

import sys

from .cli import main

sys.exit(main())
