#!/usr/bin/env python

"""Utility classes."""

import os

from functools import wraps, partial
from typing import Iterable, Iterator, List

import asyncio

MAX_CONCURRENCY = int(os.environ.get("ECR_COPY_MAX_CONCURRENCY", 1))


def async_wrap(func):
    """Decorates a given function for execution via an executor."""
    # https://dev.to/0xbf/turn-sync-function-to-async-python-tips-58nn
    @wraps(func)
    async def run_in_executor(*args, loop=None, executor=None, **kwargs):
        if loop is None:
            loop = asyncio.get_event_loop()
        partial_func = partial(func, *args, **kwargs)
        return await loop.run_in_executor(executor, partial_func)

    return run_in_executor


def batched(iterable: Iterable, size: int) -> Iterator[List]:
    """
    Splits a given iterable into consecutive lists of at most a given size.

    Args:
        iterable: The iterable to be split.
        size: The maximum size of each list.

    Returns:
        Iterator over the lists.
    """
    if size < 1:
        raise ValueError(size)
    batch = []
    for item in iterable:
        batch.append(item)
        if len(batch) == size:
            yield batch
            batch = []
    if batch:
        yield batch


def must_be_equal(
    expected,
    actual,
    msg: str = "Actual value does not match expected value",
    *,
    error_type=RuntimeError,
    **kwargs,
):
    """
    Compares two values and raises an exception if they are not equal.

    Args:
        expected: The expected value.
        actual: The actual value.
        msg: Message describing the context of the comparison.
        error_type: The type of exception to be raised if not equal.
        kwargs: Pass-through to the exception.
    """
    if actual != expected:
        raise error_type(f"{msg}: {actual} != {expected}", **kwargs)
