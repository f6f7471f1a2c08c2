r"""Interpretation of the values returned by decision policies.

A decision policy is called after each failed attempt with
``(error, attempt, decide)`` and decides, by returning a value or by
calling ``decide`` later, what happens next:

- ``None``, ``False`` or ``math.inf``: give up, the outcome is rejected
  with the last error
- an awaitable: wait for it and use its result as the decision
- a number: retry after that many milliseconds
"""

from __future__ import annotations

__all__ = [
    "DecisionKind",
    "PolicyResult",
    "always_reject",
    "classify_decision",
    "invoke_policy",
    "to_delay",
]

import math
from dataclasses import dataclass
from enum import Enum
from numbers import Real
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable


class DecisionKind(Enum):
    """Kinds of decision.

    Attributes:
        REJECT: Stop retrying and reject with the last error.
        FOLLOW: Wait for an awaitable and decide on its result.
        DELAY: Retry after a delay in milliseconds.
    """

    REJECT = "reject"
    FOLLOW = "follow"
    DELAY = "delay"


@dataclass(frozen=True)
class PolicyResult:
    """Outcome of a decision policy invocation.

    Attributes:
        value: The value returned by the policy (None if it raised).
        error: The exception raised by the policy, if any.
    """

    value: Any = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        """``True`` if the policy returned without raising."""
        return self.error is None


def always_reject(error: BaseException | None, attempt: int, decide: Callable) -> bool:  # noqa: ARG001
    """Decision policy that never retries.

    Example:
        ```pycon
        >>> from aretrier.decision import always_reject
        >>> always_reject(RuntimeError("boom"), 1, print)
        False

        ```
    """
    return False


def classify_decision(value: Any, is_future: Callable[[Any], bool]) -> DecisionKind | None:
    """Classify a decision value.

    Args:
        value: The decision value.
        is_future: Predicate recognizing the awaitables that can be
            followed, usually ``FutureAdapter.is_future``.

    Returns:
        The decision kind, or ``None`` if the value is not a valid
        decision.

    Example:
        ```pycon
        >>> import math
        >>> from aretrier.decision import classify_decision
        >>> classify_decision(False, lambda value: False)
        <DecisionKind.REJECT: 'reject'>
        >>> classify_decision(math.inf, lambda value: False)
        <DecisionKind.REJECT: 'reject'>
        >>> classify_decision(0, lambda value: False)
        <DecisionKind.DELAY: 'delay'>
        >>> classify_decision("soon", lambda value: False) is None
        True

        ```
    """
    # identity checks, ``0 == False`` must stay a delay
    if value is None or value is False:
        return DecisionKind.REJECT
    if isinstance(value, Real):
        if to_delay(value) == math.inf:
            return DecisionKind.REJECT
        return DecisionKind.DELAY
    if is_future(value):
        return DecisionKind.FOLLOW
    return None


def to_delay(value: Real) -> float:
    """Convert a delay decision to milliseconds.

    Negative values and NaN mean an immediate retry. Values too large
    for a float are infinite.

    Example:
        ```pycon
        >>> from aretrier.decision import to_delay
        >>> to_delay(250)
        250.0
        >>> to_delay(-10)
        0.0
        >>> to_delay(True)
        1.0
        >>> to_delay(10**400)
        inf

        ```
    """
    try:
        delay = float(value)
    except OverflowError:
        delay = math.inf if value > 0 else -math.inf
    if math.isnan(delay) or delay < 0:
        return 0.0
    return delay


def invoke_policy(
    policy: Callable[..., Any],
    error: BaseException | None,
    attempt: int,
    decide: Callable[[Any], None],
) -> PolicyResult:
    """Invoke a decision policy and capture its outcome.

    Args:
        policy: The decision policy.
        error: The error of the failed attempt.
        attempt: The number of failures so far.
        decide: The one-shot decide function of the failure cycle.

    Returns:
        The value returned by the policy, or the exception it raised.

    Example:
        ```pycon
        >>> from aretrier.decision import invoke_policy
        >>> invoke_policy(lambda error, attempt, decide: attempt * 100, None, 2, print)
        PolicyResult(value=200, error=None)
        >>> result = invoke_policy(lambda error, attempt, decide: 1 / 0, None, 1, print)
        >>> result.ok
        False

        ```
    """
    try:
        return PolicyResult(value=policy(error, attempt, decide))
    except Exception as exc:  # noqa: BLE001
        return PolicyResult(error=exc)
