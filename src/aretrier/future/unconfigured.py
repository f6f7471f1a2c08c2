r"""Fail-fast stand-in used when no future adapter is configured."""

from __future__ import annotations

__all__ = ["UnconfiguredAdapter", "UnconfiguredFuture"]

from typing import TYPE_CHECKING, Any, NoReturn

from aretrier.exceptions import ConfigurationError
from aretrier.future.base import FutureAdapter

if TYPE_CHECKING:
    from collections.abc import Callable, Generator

MESSAGE = "configure() a future adapter before using a retrier"


def _fail() -> NoReturn:
    raise ConfigurationError(MESSAGE)


class UnconfiguredFuture:
    """Placeholder returned by a retrier without a future adapter.

    Every way of observing the outcome raises ``ConfigurationError``, so a
    missing configuration is reported at the first use instead of leaving
    the caller waiting forever.

    Example:
        ```pycon
        >>> from aretrier.future.unconfigured import UnconfiguredFuture
        >>> UnconfiguredFuture().then(print)
        Traceback (most recent call last):
            ...
        aretrier.exceptions.ConfigurationError: configure() a future adapter before using a retrier

        ```
    """

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}()"

    def then(self, *args: Any, **kwargs: Any) -> NoReturn:
        _fail()

    def add_done_callback(self, *args: Any, **kwargs: Any) -> NoReturn:
        _fail()

    def add_progress_callback(self, *args: Any, **kwargs: Any) -> NoReturn:
        _fail()

    def __await__(self) -> Generator[Any, None, NoReturn]:
        _fail()
        yield  # pragma: no cover


class UnconfiguredAdapter(FutureAdapter):
    """Future adapter used by a factory built without an adapter.

    ``create`` ignores the resolver, so no attempt is ever started, and
    returns an ``UnconfiguredFuture``. The other operations are never
    reached through a retrier and raise ``ConfigurationError``.
    """

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}()"

    def create(self, resolver: Callable[..., None]) -> UnconfiguredFuture:  # noqa: ARG002
        return UnconfiguredFuture()

    def is_done(self, future: Any) -> NoReturn:  # noqa: ARG002
        _fail()

    def is_future(self, value: Any) -> NoReturn:  # noqa: ARG002
        _fail()

    def subscribe(
        self,
        future: Any,  # noqa: ARG002
        on_success: Callable[[Any], None],  # noqa: ARG002
        on_failure: Callable[[BaseException], None],  # noqa: ARG002
    ) -> NoReturn:
        _fail()

    def call_later(self, delay: float, callback: Callable[[], None]) -> NoReturn:  # noqa: ARG002
        _fail()
