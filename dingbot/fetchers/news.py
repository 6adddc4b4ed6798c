"""
Tech news fetcher.
Posts one randomly chosen story as an action card titled with the top headline.
"""

import logging
import random
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from ..errors import DecodeError
from ..messages import (
    ActionCardBuilder,
    Message,
    MessageBuilder,
    MessageTemplates,
    MessageType,
    Orientation,
)
from ..webhook import WebhookClient
from .base import BaseFetcher, dig
from .results import NewsEntry, NewsSelection

logger = logging.getLogger(__name__)

INDEX_MIN = 1
INDEX_MAX = 5  # exclusive


class NewsFetcher(BaseFetcher):
    """Posts a news story as a single-button ActionCard."""

    name = "news"

    def __init__(
        self,
        robot: WebhookClient,
        api_url: str,
        site_url: str,
        timeout_seconds: float = 10.0,
        rng: Optional[random.Random] = None
    ):
        """
        Args:
            robot: Webhook client
            api_url: News feed endpoint
            site_url: Prefix joined with each story's relative ``source_url``
        """
        super().__init__(robot, api_url, timeout_seconds, rng)
        self.site_url = site_url.rstrip("/")

    async def fetch(self) -> NewsSelection:
        data = await self._get_json(self.api_url)
        return self.select(data)

    def select(self, data: Dict[str, Any]) -> NewsSelection:
        """
        Take entry 0's title as the headline and draw a detail entry from [INDEX_MIN, INDEX_MAX).

        Raises:
            DecodeError: payload shape is wrong or has fewer than two stories
        """
        stories = dig(data, "data")
        if not isinstance(stories, list):
            raise DecodeError("news payload data is not a list")

        upper = min(INDEX_MAX, len(stories))
        if upper <= INDEX_MIN:
            raise DecodeError(f"news payload has {len(stories)} stories, need at least 2")

        index = self.rng.randrange(INDEX_MIN, upper)
        logger.debug(f"News index: {index}")

        story = dig(stories, index)
        images = story.get("image_list") if isinstance(story, dict) else None
        image_url = None
        if images:
            image_url = str(dig(images, 0, "url"))

        return NewsSelection(
            headline=str(dig(stories, 0, "title")),
            index=index,
            entry=NewsEntry(
                title=str(dig(story, "title")),
                abstract=str(dig(story, "abstract")),
                source_url=str(dig(story, "source_url")),
                image_url=image_url,
            ),
        )

    def detail_url(self, entry: NewsEntry) -> str:
        if urlparse(entry.source_url).scheme in ("http", "https"):
            return entry.source_url
        if entry.source_url.startswith("/"):
            return self.site_url + entry.source_url
        return f"{self.site_url}/{entry.source_url}"

    def build_message(self, result: NewsSelection) -> Message:
        card = (
            ActionCardBuilder(
                result.headline,
                MessageTemplates.format_news_message(result.entry),
                Orientation.HORIZONTAL,
                avatar_hidden=True,
            )
            .single_button(MessageTemplates.NEWS_BUTTON_LABEL, self.detail_url(result.entry))
            .build()
        )
        return MessageBuilder(MessageType.ACTION_CARD).with_action_card(card).build()
