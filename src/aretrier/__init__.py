r"""aretrier - Retry asynchronous operations under a caller-supplied policy.

This package runs the attempts of an operation one after the other and,
after each failure, lets a decision policy choose between giving up,
retrying after a delay, or waiting for an awaitable that yields the
decision. It does not compute backoff curves: policies return raw delays
in milliseconds.

Key Features:
    - Operation factories receive the last error and the failure count
    - Policies decide synchronously or later through a one-shot ``decide``
    - Awaitable decisions, so policies can be ``async def`` functions
    - Progress notifications before each retry delay
    - Pluggable future implementations through future adapters
    - Ready-made httpx operation and Retry-After policy

Example:
    ```pycon
    >>> import asyncio
    >>> from aretrier import configure
    >>> from aretrier.future import AsyncioAdapter
    >>> attempt = configure(AsyncioAdapter())
    >>> async def fetch(error, attempt_no):
    ...     if attempt_no == 0:
    ...         raise ConnectionError("unreachable")
    ...     return {"key": "value"}
    ...
    >>> async def main():
    ...     return await attempt(fetch, lambda error, attempt_no, decide: attempt_no * 10)
    ...
    >>> asyncio.run(main())
    {'key': 'value'}

    ```
"""

from __future__ import annotations

__all__ = [
    "AretrierError",
    "AsyncioAdapter",
    "ConfigurationError",
    "FutureAdapter",
    "ProgressFuture",
    "Retrier",
    "RetrierBuilder",
    "RetrierConfig",
    "RetrierFactory",
    "RetryInfo",
    "__version__",
    "always_reject",
    "configure",
]

from importlib.metadata import PackageNotFoundError, version

from aretrier.config import RetrierConfig
from aretrier.decision import always_reject
from aretrier.exceptions import AretrierError, ConfigurationError
from aretrier.factory import RetrierBuilder, RetrierFactory, configure
from aretrier.future import AsyncioAdapter, FutureAdapter, ProgressFuture
from aretrier.retrier import Retrier, RetryInfo

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
