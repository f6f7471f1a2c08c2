r"""Factories creating retriers that share one configuration.

The future implementation is an explicit dependency of a factory rather
than a process-wide setting: ``configure`` returns a factory bound to an
adapter, and that factory is what the rest of the application uses.
"""

from __future__ import annotations

__all__ = ["RetrierBuilder", "RetrierFactory", "configure"]

import logging
from typing import TYPE_CHECKING, Any

from aretrier.config import RetrierConfig
from aretrier.future.unconfigured import UnconfiguredAdapter
from aretrier.retrier import Retrier

if TYPE_CHECKING:
    from collections.abc import Callable

    from aretrier.future.base import FutureAdapter

logger: logging.Logger = logging.getLogger(__name__)


class RetrierFactory:
    r"""Creates retriers from a shared configuration.

    ``factory.create(...)`` and ``factory(...)`` are equivalent and both
    return the outcome future of a new ``Retrier``. Without an adapter in
    the configuration, the returned placeholder raises
    ``ConfigurationError`` as soon as it is used.

    Args:
        config: Optional configuration. By default, no adapter is
            configured and retriers never retry.

    Example:
        ```pycon
        >>> import asyncio
        >>> from aretrier import RetrierFactory
        >>> from aretrier.config import RetrierConfig
        >>> from aretrier.future import AsyncioAdapter
        >>> attempt = RetrierFactory(RetrierConfig(adapter=AsyncioAdapter()))
        >>> async def fail(error, attempt_no):
        ...     raise ValueError("boom")
        ...
        >>> async def main():
        ...     try:
        ...         await attempt(fail)
        ...     except ValueError as exc:
        ...         return exc
        ...
        >>> asyncio.run(main())
        ValueError('boom')

        ```
    """

    def __init__(self, config: RetrierConfig | None = None) -> None:
        self.config = config if config is not None else RetrierConfig()
        self._adapter: FutureAdapter = (
            self.config.adapter if self.config.adapter is not None else UnconfiguredAdapter()
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(adapter={self._adapter!r})"

    @property
    def adapter(self) -> FutureAdapter:
        """The future adapter the created retriers run on."""
        return self._adapter

    @property
    def configured(self) -> bool:
        """``True`` if the configuration has a future adapter."""
        return self.config.adapter is not None

    def create(
        self,
        operation_factory: Callable[..., Any],
        decision_policy: Callable[..., Any] | None = None,
    ) -> Any:
        """Start a new retry session.

        Args:
            operation_factory: Function called with
                ``(last_error, attempt)`` that returns an awaitable for
                one attempt.
            decision_policy: Optional decision policy, the default policy
                of the configuration is used if not provided.

        Returns:
            The outcome future of the session.
        """
        if not self.configured:
            logger.debug("Creating a retrier without a future adapter")
        if decision_policy is None:
            decision_policy = self.config.default_policy
        return Retrier(operation_factory, decision_policy, adapter=self._adapter).future

    def __call__(
        self,
        operation_factory: Callable[..., Any],
        decision_policy: Callable[..., Any] | None = None,
    ) -> Any:
        return self.create(operation_factory, decision_policy)


class RetrierBuilder:
    r"""Fluent builder for ``RetrierFactory``.

    Example:
        ```pycon
        >>> from aretrier import RetrierBuilder
        >>> from aretrier.future import AsyncioAdapter
        >>> factory = (
        ...     RetrierBuilder()
        ...     .with_adapter(AsyncioAdapter())
        ...     .with_default_policy(lambda error, attempt, decide: 100 * attempt)
        ...     .build()
        ... )
        >>> factory.configured
        True

        ```
    """

    def __init__(self, config: RetrierConfig | None = None) -> None:
        self._config = config if config is not None else RetrierConfig()

    def with_adapter(self, adapter: FutureAdapter) -> RetrierBuilder:
        """Set the future adapter.

        Raises:
            TypeError: If the adapter is not a ``FutureAdapter``.
        """
        self._config = self._config.merge(adapter=adapter)
        return self

    def with_default_policy(self, policy: Callable[..., Any]) -> RetrierBuilder:
        """Set the decision policy used when none is given.

        Raises:
            TypeError: If the policy is not callable.
        """
        self._config = self._config.merge(default_policy=policy)
        return self

    def build(self) -> RetrierFactory:
        """Build a factory from the current configuration."""
        return RetrierFactory(self._config)


def configure(adapter: FutureAdapter) -> RetrierFactory:
    r"""Create a factory bound to a future adapter.

    Configure once and share the returned factory; calling ``configure``
    again creates an independent factory and leaves the previous ones
    unchanged.

    Args:
        adapter: The future adapter the retriers run on.

    Returns:
        The configured factory.

    Raises:
        TypeError: If the adapter is not a ``FutureAdapter``.

    Example:
        ```pycon
        >>> from aretrier import configure
        >>> from aretrier.future import AsyncioAdapter
        >>> attempt = configure(AsyncioAdapter())
        >>> attempt
        RetrierFactory(adapter=AsyncioAdapter(loop=None))

        ```
    """
    return RetrierBuilder().with_adapter(adapter).build()
