"""Shared test fixtures.

Provides a webhook client double and a real client for transport tests.
Session and random-source stand-ins live in ``tests.fixtures``.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from dingbot.webhook import WebhookClient


@pytest.fixture
def robot():
    """Webhook client double; ``send`` is an AsyncMock."""
    mock = AsyncMock(spec=WebhookClient)
    mock.send.return_value = None
    return mock


@pytest.fixture
def webhook_client():
    return WebhookClient("test-token")
