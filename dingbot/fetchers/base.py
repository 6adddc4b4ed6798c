"""
Base class for content fetchers.
A fetcher calls one provider API, parses its payload and posts a message built from it.
"""

import asyncio
import json
import logging
import random
from abc import ABC, abstractmethod
from typing import Any, Optional

import aiohttp

from ..errors import DecodeError, TransportError
from ..messages import Message
from ..webhook import WebhookClient

logger = logging.getLogger(__name__)

# Shared by every fetcher unless a test injects its own.
_default_rng = random.Random()


def dig(data: Any, *path: Any) -> Any:
    """
    Walk nested dicts/lists, raising DecodeError on a missing key or index.

    Example:
        dig(payload, "d", "entrylist", 3, "title")
    """
    current = data
    for step in path:
        try:
            current = current[step]
        except (KeyError, IndexError, TypeError) as e:
            raise DecodeError(f"missing field {step!r} in provider payload") from e
    return current


def as_float(value: Any, name: str) -> float:
    """Convert a provider reading to float, raising DecodeError if it is not numeric."""
    if isinstance(value, bool):
        raise DecodeError(f"{name} is not numeric: {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"{name} is not numeric: {value!r}") from e


class BaseFetcher(ABC):
    """Shared HTTP plumbing for the provider fetchers."""

    #: Name used in logs
    name = "fetcher"

    def __init__(
        self,
        robot: WebhookClient,
        api_url: str,
        timeout_seconds: float = 10.0,
        rng: Optional[random.Random] = None
    ):
        """
        Args:
            robot: Webhook client used to post the built message
            api_url: Provider endpoint
            timeout_seconds: Total timeout for one GET
            rng: Random source for index draws; defaults to a process-wide instance
        """
        self.robot = robot
        self.api_url = api_url
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self.rng = rng or _default_rng
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def _get_json(self, url: str) -> Any:
        """
        Issue one GET and decode the JSON body.

        Raises:
            TransportError: network failure or non-2xx status
            DecodeError: body is not JSON
        """
        session = await self._get_session()

        try:
            async with session.get(url) as response:
                raw = await response.read()
                status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"{self.name} request failed: {e!r}") from e

        if not 200 <= status < 300:
            raise TransportError(f"{self.name} API returned HTTP {status}")

        try:
            return json.loads(raw)
        except ValueError as e:
            raise DecodeError(f"{self.name} API returned invalid JSON") from e

    @abstractmethod
    async def fetch(self) -> Any:
        """Fetch and parse the provider payload."""

    @abstractmethod
    def build_message(self, result: Any) -> Message:
        """Turn a parsed payload into a robot message."""

    async def run(self) -> Message:
        """
        Fetch, build and send one message.

        Returns:
            The message that was delivered

        Raises:
            RobotError: any fetch, decode or delivery failure
        """
        result = await self.fetch()
        message = self.build_message(result)
        await self.robot.send(message)
        logger.info(f"{self.name}: sent {message.kind.value} message")
        return message
