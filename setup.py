#!/usr/bin/env python

import os
import re

from setuptools import setup, find_packages


def find_version(*segments):
    root = os.path.abspath(os.path.dirname(__file__))
    abspath = os.path.join(root, *segments)
    with open(abspath, "r") as file:
        content = file.read()
    match = re.search(r"^__version__ = ['\"]([^'\"]+)['\"]", content, re.MULTILINE)
    if match:
        return match.group(1)
    raise RuntimeError("Unable to find version string!")


setup(
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
    description="Copies container images between Amazon ECR repositories without local staging.",
    entry_points={"console_scripts": ["ecr-copy = ecr_copy_async.cli:main"]},
    extras_require={
        "dev": [
            "black",
            "pylint",
            "pytest",
            "pytest-asyncio",
            "twine",
            "wheel",
        ],
        "test": ["pytest", "pytest-asyncio", "pytest-xdist"],
    },
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=[
        "aiodns",
        "aiohttp",
        "boto3",
        "botocore",
    ],
    keywords="async aws copy docker ecr image layer registry",
    license="Apache License 2.0",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    name="ecr_copy_async",
    packages=find_packages(exclude=["tests"]),
    tests_require=[
        "pytest",
        "pytest-asyncio",
    ],
    test_suite="tests",
    version=find_version("ecr_copy_async", "__init__.py"),
)
