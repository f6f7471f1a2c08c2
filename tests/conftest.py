from __future__ import annotations

from unittest.mock import Mock

import pytest

from aretrier import RetrierFactory, configure
from aretrier.future import AsyncioAdapter


@pytest.fixture
def adapter() -> AsyncioAdapter:
    """Create an asyncio future adapter bound to the running loop."""
    return AsyncioAdapter()


@pytest.fixture
def attempt(adapter: AsyncioAdapter) -> RetrierFactory:
    """Create a retrier factory running on asyncio."""
    return configure(adapter)


@pytest.fixture
def mock_callback() -> Mock:
    """Create a mock callback function for testing progress notifications.

    Returns:
        A Mock object that can be used as a callback function.
    """
    return Mock()
