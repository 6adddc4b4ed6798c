"""
Fluent builders for robot messages.

Example:
    card = (
        ActionCardBuilder("Title", "body", Orientation.HORIZONTAL, avatar_hidden=True)
        .single_button("查看详情", "http://example.com")
        .build()
    )
    message = MessageBuilder(MessageType.ACTION_CARD).with_action_card(card).build()
"""

from typing import Any, Dict, Iterable, List, Optional

from ..errors import MessageBuildError
from .models import (
    ActionCardElement,
    ButtonElement,
    FeedCardElement,
    FeedLinkElement,
    LinkElement,
    MarkdownElement,
    MentionElement,
    Message,
    MessageType,
    Orientation,
    TextElement,
    variant_attribute,
)


class ActionCardBuilder:
    """Builds an ActionCardElement; single-button and multi-button modes are not exclusive."""

    def __init__(
        self,
        title: str,
        text: str,
        orientation: Orientation = Orientation.VERTICAL,
        avatar_hidden: bool = False
    ):
        self._title = title
        self._text = text
        self._orientation = orientation
        self._avatar_hidden = avatar_hidden
        self._single_title: Optional[str] = None
        self._single_url: Optional[str] = None
        self._buttons: List[ButtonElement] = []

    def single_button(self, title: str, url: str) -> "ActionCardBuilder":
        """Set the whole-card button. A second call overwrites the first."""
        self._single_title = title
        self._single_url = url
        return self

    def button(self, title: str, url: str) -> "ActionCardBuilder":
        """Append an independent button."""
        self._buttons.append(ButtonElement(title=title, action_url=url))
        return self

    def build(self) -> ActionCardElement:
        return ActionCardElement(
            title=self._title,
            text=self._text,
            orientation=self._orientation,
            avatar_hidden=self._avatar_hidden,
            single_title=self._single_title,
            single_url=self._single_url,
            buttons=tuple(self._buttons),
        )


class FeedCardBuilder:
    """Builds a FeedCardElement from links appended in display order."""

    def __init__(self):
        self._links: List[FeedLinkElement] = []

    def link(
        self, title: str, message_url: str, picture_url: str = "", text: str = ""
    ) -> "FeedCardBuilder":
        self._links.append(
            FeedLinkElement(
                title=title, message_url=message_url, picture_url=picture_url, text=text
            )
        )
        return self

    def build(self) -> FeedCardElement:
        return FeedCardElement(links=tuple(self._links))


class MessageBuilder:
    """
    Builds a Message of a fixed kind.

    Payload setters must match the kind given to the constructor, otherwise
    MessageBuildError is raised. ``with_mention`` applies to every kind.
    Calling a payload setter twice keeps the last value.
    """

    def __init__(self, kind: MessageType):
        self.kind = MessageType(kind)
        self._fields: Dict[str, Any] = {}

    def _set_payload(self, kind: MessageType, element: Any) -> "MessageBuilder":
        if kind is not self.kind:
            raise MessageBuildError(
                f"cannot set {kind.value} payload on a {self.kind.value} message"
            )
        self._fields[variant_attribute(kind)] = element
        return self

    def with_text(self, content: str) -> "MessageBuilder":
        return self._set_payload(MessageType.TEXT, TextElement(content=content))

    def with_link(
        self,
        title: str,
        text: str,
        message_url: str,
        picture_url: str = ""
    ) -> "MessageBuilder":
        return self._set_payload(
            MessageType.LINK,
            LinkElement(title=title, text=text, message_url=message_url, picture_url=picture_url),
        )

    def with_markdown(self, title: str, text: str) -> "MessageBuilder":
        return self._set_payload(MessageType.MARKDOWN, MarkdownElement(title=title, text=text))

    def with_action_card(self, element: ActionCardElement) -> "MessageBuilder":
        return self._set_payload(MessageType.ACTION_CARD, element)

    def with_feed_card(self, element: FeedCardElement) -> "MessageBuilder":
        return self._set_payload(MessageType.FEED_CARD, element)

    def with_mention(self, mobiles: Iterable[str], is_at_all: bool = False) -> "MessageBuilder":
        self._fields["mention"] = MentionElement.of(mobiles, is_at_all)
        return self

    def build(self) -> Message:
        """
        Return a frozen Message snapshot.

        Raises:
            MessageBuildError: if the payload for this kind was never set
        """
        if variant_attribute(self.kind) not in self._fields:
            raise MessageBuildError(f"{self.kind.value} message has no payload")
        return Message(kind=self.kind, **self._fields)
