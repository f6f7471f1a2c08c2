r"""Configuration dataclass and validation for retrier factories.

This module provides the ``RetrierConfig`` dataclass shared by the
``RetrierFactory`` and ``RetrierBuilder`` classes, and the validation
helpers used when a retrier is created.
"""

from __future__ import annotations

__all__ = [
    "RetrierConfig",
    "validate_adapter",
    "validate_operation_factory",
    "validate_policy",
]

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from aretrier.decision import always_reject
from aretrier.future.base import FutureAdapter

if TYPE_CHECKING:
    from collections.abc import Callable


def validate_adapter(adapter: Any) -> None:
    """Validate a future adapter.

    Args:
        adapter: The adapter to validate. ``None`` is accepted and means
            "not configured".

    Raises:
        TypeError: If the adapter is not a ``FutureAdapter``.

    Example:
        ```pycon
        >>> from aretrier.config import validate_adapter
        >>> from aretrier.future import AsyncioAdapter
        >>> validate_adapter(AsyncioAdapter())
        >>> validate_adapter(None)

        ```
    """
    if adapter is not None and not isinstance(adapter, FutureAdapter):
        msg = f"adapter must be a FutureAdapter, got {type(adapter).__qualname__}"
        raise TypeError(msg)


def validate_policy(policy: Any) -> None:
    """Validate a decision policy.

    Raises:
        TypeError: If the policy is not callable.
    """
    if not callable(policy):
        msg = f"decision policy must be callable, got {policy!r}"
        raise TypeError(msg)


def validate_operation_factory(operation_factory: Any) -> None:
    """Validate an operation factory.

    Raises:
        TypeError: If the operation factory is not callable.
    """
    if not callable(operation_factory):
        msg = f"operation factory must be callable, got {operation_factory!r}"
        raise TypeError(msg)


@dataclass
class RetrierConfig:
    """Configuration shared by the retriers of a factory.

    Args:
        adapter: The future adapter the retriers run on. Without an
            adapter, retriers return a placeholder that raises
            ``ConfigurationError`` when used.
        default_policy: The decision policy of the retriers created
            without an explicit one.

    Example:
        ```pycon
        >>> from aretrier.config import RetrierConfig
        >>> from aretrier.future import AsyncioAdapter
        >>> config = RetrierConfig()
        >>> config.adapter is None
        True
        >>> config = config.merge(adapter=AsyncioAdapter())
        >>> config.adapter
        AsyncioAdapter(loop=None)

        ```
    """

    adapter: FutureAdapter | None = None
    default_policy: Callable[..., Any] = field(default=always_reject)

    def __post_init__(self) -> None:
        """Validate configuration parameters after initialization.

        Raises:
            TypeError: If any parameter fails validation.
        """
        validate_adapter(self.adapter)
        validate_policy(self.default_policy)

    def merge(self, **overrides: Any) -> RetrierConfig:
        """Create a new config with some parameters overridden.

        Args:
            **overrides: The parameters to override.

        Returns:
            A new validated ``RetrierConfig``, this one is unchanged.
        """
        return replace(self, **overrides)
