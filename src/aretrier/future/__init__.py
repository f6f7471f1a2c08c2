r"""Future adapters the retrier runs on.

Public API:
    - FutureAdapter: Abstract base class of all future adapters
    - AsyncioAdapter: Future adapter for asyncio event loops
    - ProgressFuture: asyncio future with progress notifications
    - UnconfiguredAdapter: Fail-fast adapter used before configuration
"""

from __future__ import annotations

__all__ = [
    "AsyncioAdapter",
    "FutureAdapter",
    "ProgressFuture",
    "UnconfiguredAdapter",
    "UnconfiguredFuture",
]

from aretrier.future.aio import AsyncioAdapter, ProgressFuture
from aretrier.future.base import FutureAdapter
from aretrier.future.unconfigured import UnconfiguredAdapter, UnconfiguredFuture
