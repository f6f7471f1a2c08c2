r"""Retry state machine.

This module provides the ``Retrier`` class that runs the attempts of an
operation one after the other, asks a decision policy what to do after
each failure, and reports the outcome through a future created by a
future adapter.
"""

from __future__ import annotations

__all__ = ["Retrier", "RetryInfo"]

import logging
from functools import partial
from typing import TYPE_CHECKING, Any, NamedTuple

from aretrier.config import (
    validate_adapter,
    validate_operation_factory,
    validate_policy,
)
from aretrier.decision import (
    DecisionKind,
    always_reject,
    classify_decision,
    invoke_policy,
    to_delay,
)
from aretrier.utils.structured_logging import log_structured

if TYPE_CHECKING:
    from collections.abc import Callable

    from aretrier.future.base import FutureAdapter

logger: logging.Logger = logging.getLogger(__name__)


class RetryInfo(NamedTuple):
    """Progress notification sent before each retry delay.

    Attributes:
        error: The error of the failed attempt.
        attempt: The number of failures so far (1 for the first retry).
    """

    error: BaseException | None
    attempt: int


def _ignore(value: Any) -> None:  # noqa: ARG001
    return None


class Retrier:
    r"""Runs the attempts of an operation until success or rejection.

    The first attempt starts when the retrier is created. After each
    failure, the decision policy is called with
    ``(error, attempt, decide)`` and decides what happens next, either by
    returning a decision or by calling ``decide`` later. Only the first
    decision of a failure cycle counts:

    - ``None``, ``False`` or ``math.inf`` rejects the outcome with the
      error of the failed attempt
    - an awaitable is followed and its result used as the decision, a
      failure of the awaitable rejects
    - a number retries after that many milliseconds, observers are
      notified with ``RetryInfo(error, attempt)`` before the delay

    A policy returning ``None`` without calling ``decide`` leaves the
    retrier waiting for ``decide``, so an implicit ``return`` does not
    give up: return ``False`` to reject. A policy that raises rejects.
    Cancelling the outcome future stops the retrier, no attempt starts
    after that.

    Args:
        operation_factory: Function called with ``(last_error, attempt)``
            that returns an awaitable for one attempt. ``last_error`` is
            ``None`` and ``attempt`` is 0 for the first attempt.
        decision_policy: Optional decision policy. By default, the
            retrier never retries.
        adapter: The future adapter to run on.

    Attributes:
        future: The outcome future, settled exactly once.
        attempt: The number of failures so far.
        last_error: The error of the last failed attempt.

    Raises:
        TypeError: If an argument is invalid.

    Example:
        ```pycon
        >>> import asyncio
        >>> from aretrier import Retrier
        >>> from aretrier.future import AsyncioAdapter
        >>> async def flaky(error, attempt):
        ...     if attempt < 2:
        ...         raise ConnectionError("unreachable")
        ...     return "ok"
        ...
        >>> async def main():
        ...     retrier = Retrier(flaky, lambda error, attempt, decide: 10, adapter=AsyncioAdapter())
        ...     return await retrier.future, retrier.attempt
        ...
        >>> asyncio.run(main())
        ('ok', 2)

        ```
    """

    def __init__(
        self,
        operation_factory: Callable[..., Any],
        decision_policy: Callable[..., Any] | None = None,
        *,
        adapter: FutureAdapter,
    ) -> None:
        validate_operation_factory(operation_factory)
        if decision_policy is None:
            decision_policy = always_reject
        validate_policy(decision_policy)
        if adapter is None:
            msg = "adapter is required"
            raise TypeError(msg)
        validate_adapter(adapter)

        self.operation_factory = operation_factory
        self.decision_policy = decision_policy
        self.adapter = adapter

        self.attempt = 0
        self.last_error: BaseException | None = None
        self._settled = False
        self._decided = False
        self._resolve: Callable[[Any], None] = _ignore
        self._reject: Callable[[BaseException | None], None] = _ignore
        self._notify: Callable[[Any], None] = _ignore
        self.future: Any = None

        self.future = adapter.create(self._start)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(attempt={self.attempt}, "
            f"settled={self._settled}, adapter={self.adapter!r})"
        )

    @property
    def settled(self) -> bool:
        """``True`` once the outcome future has been resolved or rejected.

        An outcome settled from the outside, for example cancelled, is
        seen as settled from the next callback of the retrier on.
        """
        return self._settled

    def _start(
        self,
        resolve: Callable[[Any], None],
        reject: Callable[[BaseException | None], None],
        notify: Callable[[Any], None] | None = None,
    ) -> None:
        self._resolve = resolve
        self._reject = reject
        self._notify = notify if notify is not None else _ignore
        self._run_attempt()

    def _is_stopped(self) -> bool:
        if self._settled:
            return True
        if self.future is not None and self.adapter.is_done(self.future):
            self._settled = True
            log_structured(
                logger,
                logging.DEBUG,
                f"Outcome settled externally after {self.attempt} failure(s), stopping",
                attempt=self.attempt,
            )
        return self._settled

    def _run_attempt(self) -> None:
        if self._is_stopped():
            return
        log_structured(
            logger, logging.DEBUG, f"Starting attempt {self.attempt}", attempt=self.attempt
        )
        try:
            pending = self.operation_factory(self.last_error, self.attempt)
        except Exception as exc:  # noqa: BLE001
            self.adapter.call_later(0, partial(self._on_failure, exc))
            return
        if not self.adapter.is_future(pending):
            msg = f"operation factory must return an awaitable, got {pending!r}"
            self.adapter.call_later(0, partial(self._on_failure, TypeError(msg)))
            return
        self.adapter.subscribe(pending, self._on_success, self._on_failure)

    def _on_success(self, value: Any) -> None:
        if self._is_stopped():
            return
        self._settled = True
        log_structured(
            logger, logging.DEBUG, f"Attempt {self.attempt} succeeded", attempt=self.attempt
        )
        self._resolve(value)

    def _on_failure(self, error: BaseException) -> None:
        if self._is_stopped():
            return
        self.last_error = error
        self.attempt += 1
        self._decided = False
        decide = self._make_decide(self.attempt)

        result = invoke_policy(self.decision_policy, error, self.attempt, decide)
        if not result.ok:
            log_structured(
                logger,
                logging.DEBUG,
                f"Decision policy raised after failure {self.attempt}, giving up",
                exc_info=result.error,
                attempt=self.attempt,
            )
            decide(None)
        elif result.value is not None:
            decide(result.value)
        elif not self._decided:
            log_structured(
                logger,
                logging.DEBUG,
                f"Decision policy returned None after failure {self.attempt}, "
                "waiting for decide()",
                attempt=self.attempt,
            )

    def _make_decide(self, cycle: int) -> Callable[..., None]:
        def decide(decision: Any = None) -> None:
            if cycle != self.attempt or self._decided:
                return
            self._decided = True
            self._resolve_decision(decision)

        return decide

    def _resolve_decision(self, decision: Any) -> None:
        if self._is_stopped():
            return
        try:
            self._apply_decision(decision)
        except Exception as exc:  # noqa: BLE001
            log_structured(
                logger,
                logging.WARNING,
                f"Failed to apply retry decision {decision!r}, giving up",
                exc_info=exc,
                attempt=self.attempt,
            )
            if not self._settled:
                self._settle_rejected(decision)

    def _apply_decision(self, decision: Any) -> None:
        kind = classify_decision(decision, self.adapter.is_future)
        if kind is None:
            log_structured(
                logger,
                logging.WARNING,
                f"Invalid retry decision {decision!r}, giving up",
                attempt=self.attempt,
            )
            kind = DecisionKind.REJECT

        if kind is DecisionKind.REJECT:
            self._settle_rejected(decision)
        elif kind is DecisionKind.FOLLOW:
            log_structured(
                logger,
                logging.DEBUG,
                f"Waiting for the decision after failure {self.attempt}",
                attempt=self.attempt,
                decision="follow",
            )
            self.adapter.subscribe(decision, self._resolve_decision, self._on_follow_failure)
        else:
            delay = to_delay(decision)
            log_structured(
                logger,
                logging.DEBUG,
                f"Retrying in {delay:g} ms after failure {self.attempt}: {self.last_error!r}",
                attempt=self.attempt,
                delay_ms=delay,
                decision="delay",
            )
            self._notify(RetryInfo(self.last_error, self.attempt))
            self.adapter.call_later(delay / 1000.0, self._run_attempt)

    def _on_follow_failure(self, error: BaseException) -> None:
        log_structured(
            logger,
            logging.DEBUG,
            f"Followed decision failed: {error!r}",
            attempt=self.attempt,
        )
        self._resolve_decision(None)

    def _settle_rejected(self, decision: Any) -> None:
        self._settled = True
        log_structured(
            logger,
            logging.DEBUG,
            f"Giving up after {self.attempt} failure(s): {self.last_error!r}",
            attempt=self.attempt,
            decision=repr(decision),
        )
        self._reject(self.last_error)
