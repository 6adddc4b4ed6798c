"""
Group-chat robot webhook client.
Posts serialized messages to the robot send URL and decodes the reply envelope.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import aiohttp

from ..errors import DecodeError, TransportError, UpstreamRejected
from ..messages import Message

logger = logging.getLogger(__name__)

DEFAULT_SEND_URL_TEMPLATE = "https://oapi.dingtalk.com/robot/send?access_token={ACCESS_TOKEN}"
JSON_CONTENT_TYPE = "application/json"


class WebhookClient:
    """Client for a single robot webhook endpoint."""

    def __init__(
        self,
        access_token: str,
        send_url_template: str = DEFAULT_SEND_URL_TEMPLATE,
        timeout_seconds: float = 10.0
    ):
        """
        Initialize the webhook client.

        Args:
            access_token: Robot access token
            send_url_template: Send URL containing an ``{ACCESS_TOKEN}`` placeholder
            timeout_seconds: Total timeout for one POST
        """
        self.send_url = send_url_template.replace("{ACCESS_TOKEN}", access_token, 1)
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
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

    async def send(self, message: Message) -> None:
        """
        Post a message to the webhook. One attempt, no retries.

        Args:
            message: Message to deliver

        Raises:
            TransportError: the request failed or returned an HTTP error status
            DecodeError: the reply is not a ``{errcode, errmsg}`` envelope
            UpstreamRejected: the envelope carries a non-zero errcode
        """
        session = await self._get_session()
        payload = message.to_dict()

        try:
            async with session.post(
                self.send_url,
                json=payload,
                headers={"Content-Type": JSON_CONTENT_TYPE}
            ) as response:
                body = await response.read()
                status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"webhook request failed: {e!r}") from e

        if status >= 400:
            snippet = body[:200].decode("utf-8", errors="replace")
            raise TransportError(f"webhook returned HTTP {status}: {snippet}")

        envelope = self._decode_envelope(body)
        if envelope["errcode"] != 0:
            raise UpstreamRejected(envelope["errmsg"], code=envelope["errcode"])

        logger.info(f"Delivered {message.kind.value} message")

    @staticmethod
    def _decode_envelope(body: bytes) -> Dict[str, Any]:
        # UnicodeDecodeError is a ValueError
        try:
            data = json.loads(body.decode("utf-8"))
        except ValueError as e:
            raise DecodeError(f"webhook reply is not JSON: {body[:200]!r}") from e

        if not isinstance(data, dict):
            raise DecodeError(f"webhook reply is not an object: {data!r}")

        code = data.get("errcode")
        if not isinstance(code, int) or isinstance(code, bool):
            raise DecodeError(f"webhook reply has no integer errcode: {data!r}")

        return {"errcode": code, "errmsg": str(data.get("errmsg", ""))}
