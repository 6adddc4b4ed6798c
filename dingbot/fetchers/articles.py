"""
Tech-article feed fetcher.
Picks three consecutive entries at a random offset and posts them as a feed card.
"""

import logging
from typing import Any, Dict, List

from ..errors import DecodeError
from ..messages import FeedCardBuilder, Message, MessageBuilder, MessageType
from .base import BaseFetcher, dig
from .results import ArticleEntry, ArticleSelection

logger = logging.getLogger(__name__)

ITEM_COUNT = 3
OFFSET_MIN = 1
OFFSET_MAX = 196  # exclusive


class ArticleFetcher(BaseFetcher):
    """Posts three articles from the feed as a FeedCard."""

    name = "articles"

    async def fetch(self) -> ArticleSelection:
        data = await self._get_json(self.api_url)
        return self.select(data)

    def select(self, data: Dict[str, Any]) -> ArticleSelection:
        """
        Draw an offset and take the ITEM_COUNT entries starting there.

        The offset is uniform over [OFFSET_MIN, OFFSET_MAX). When the feed is
        shorter than OFFSET_MAX + ITEM_COUNT - 1 entries the upper bound shrinks
        so the window always fits.

        Raises:
            DecodeError: payload shape is wrong or the feed is too short
        """
        entrylist = dig(data, "d", "entrylist")
        if not isinstance(entrylist, list):
            raise DecodeError("article feed entrylist is not a list")

        upper = min(OFFSET_MAX, len(entrylist) - ITEM_COUNT + 1)
        if upper <= OFFSET_MIN:
            raise DecodeError(
                f"article feed has {len(entrylist)} entries, need at least {OFFSET_MIN + ITEM_COUNT}"
            )

        offset = self.rng.randrange(OFFSET_MIN, upper)
        logger.debug(f"Article offset: {offset} (feed size {len(entrylist)})")

        entries: List[ArticleEntry] = []
        for raw in entrylist[offset:offset + ITEM_COUNT]:
            entries.append(ArticleEntry(
                title=str(dig(raw, "title")),
                url=str(dig(raw, "originalUrl")),
                screenshot=str(raw.get("screenshot") or ""),
            ))
        return ArticleSelection(offset=offset, entries=entries)

    def build_message(self, result: ArticleSelection) -> Message:
        feed_card = FeedCardBuilder()
        for entry in result.entries:
            feed_card.link(entry.title, entry.url, entry.screenshot)
        return (
            MessageBuilder(MessageType.FEED_CARD)
            .with_feed_card(feed_card.build())
            .build()
        )
