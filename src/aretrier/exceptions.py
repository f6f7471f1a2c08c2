r"""Exceptions raised by aretrier.

The retry engine never wraps the failures of the attempts it runs: a
rejected outcome always carries the last attempt's error unchanged. The
exceptions defined here only report misuse of the library itself.
"""

from __future__ import annotations

__all__ = ["AretrierError", "ConfigurationError"]


class AretrierError(Exception):
    """Base class for all the errors raised by aretrier."""


class ConfigurationError(AretrierError, RuntimeError):
    """Exception raised when a retrier is used without a future adapter.

    Args:
        message: A descriptive error message.

    Example:
        ```pycon
        >>> from aretrier.exceptions import ConfigurationError
        >>> raise ConfigurationError("configure() a future adapter before use")
        Traceback (most recent call last):
            ...
        aretrier.exceptions.ConfigurationError: configure() a future adapter before use

        ```
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
