r"""Abstract base class for future adapters."""

from __future__ import annotations

__all__ = ["FutureAdapter"]

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable


class FutureAdapter(ABC):
    """Abstract base class for future adapters.

    A future adapter is everything the retrier knows about the future
    implementation it runs on: how to create the outcome future, how to
    recognize and observe awaitable values, and how to arm a timer. The
    retrier itself never touches a concrete future type.
    """

    @abstractmethod
    def create(self, resolver: Callable[..., None]) -> Any:
        """Create a new outcome future.

        Args:
            resolver: Function called with the ``(resolve, reject, notify)``
                functions that settle or notify the new future.

        Returns:
            The new future.
        """

    @abstractmethod
    def is_future(self, value: Any) -> bool:
        """Indicate whether a value is an awaitable the retrier can follow.

        Args:
            value: The value to check.

        Returns:
            ``True`` if ``subscribe`` accepts the value, otherwise ``False``.
        """

    @abstractmethod
    def subscribe(
        self,
        future: Any,
        on_success: Callable[[Any], None],
        on_failure: Callable[[BaseException], None],
    ) -> None:
        """Register success and failure continuations on an awaitable.

        Exactly one of the continuations is called, once the awaitable
        settles.

        Args:
            future: The awaitable to observe.
            on_success: Called with the result on success.
            on_failure: Called with the exception on failure.

        Raises:
            TypeError: If ``future`` is not an awaitable.
        """

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        """Arm a timer.

        Args:
            delay: The delay in seconds. Must be >= 0.
            callback: The function to call when the timer expires.
        """

    @abstractmethod
    def is_done(self, future: Any) -> bool:
        """Indicate whether an outcome future is already settled.

        A future settled from the outside, for example a cancelled one,
        stops the retrier that created it.

        Args:
            future: A future returned by ``create``.

        Returns:
            ``True`` if the future is resolved, rejected or cancelled.
        """
