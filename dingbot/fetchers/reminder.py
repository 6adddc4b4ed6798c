"""Fixed text reminder that @-mentions chat members."""

import logging
from typing import Iterable

from ..messages import Message, MessageBuilder, MessageType
from ..webhook import WebhookClient

logger = logging.getLogger(__name__)


class ReminderJob:
    """Sends the same text message, with mentions, every time it runs."""

    name = "reminder"

    def __init__(
        self,
        robot: WebhookClient,
        text: str,
        mobiles: Iterable[str] = (),
        at_all: bool = False
    ):
        self.robot = robot
        self.text = text
        self.mobiles = tuple(mobiles)
        self.at_all = at_all

    def build_message(self) -> Message:
        return (
            MessageBuilder(MessageType.TEXT)
            .with_text(self.text)
            .with_mention(self.mobiles, self.at_all)
            .build()
        )

    async def run(self) -> Message:
        message = self.build_message()
        await self.robot.send(message)
        logger.info(f"reminder: sent to {len(self.mobiles)} mentioned members")
        return message

    async def close(self) -> None:
        """Nothing to release; the webhook client is closed by its owner."""
