"""
Message models for the group-chat robot.
These frozen dataclasses mirror the JSON body accepted by the robot webhook.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple


class MessageType(str, Enum):
    """Discriminator carried in the ``msgtype`` field."""
    TEXT = "text"
    LINK = "link"
    MARKDOWN = "markdown"
    ACTION_CARD = "actionCard"
    FEED_CARD = "feedCard"


class Orientation(str, Enum):
    """ActionCard button layout (``btnOrientation``)."""
    VERTICAL = "0"
    HORIZONTAL = "1"


@dataclass(frozen=True)
class TextElement:
    content: str

    def to_dict(self) -> dict:
        return {"content": self.content}

    @classmethod
    def from_dict(cls, data: dict) -> "TextElement":
        return cls(content=data["content"])


@dataclass(frozen=True)
class LinkElement:
    """A single link card with title, summary, target and picture."""
    title: str
    text: str
    message_url: str
    picture_url: str = ""

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "text": self.text,
            "messageUrl": self.message_url,
            "picUrl": self.picture_url,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LinkElement":
        return cls(
            title=data["title"],
            text=data["text"],
            message_url=data["messageUrl"],
            picture_url=data.get("picUrl", ""),
        )


@dataclass(frozen=True)
class MarkdownElement:
    title: str
    text: str

    def to_dict(self) -> dict:
        return {"title": self.title, "text": self.text}

    @classmethod
    def from_dict(cls, data: dict) -> "MarkdownElement":
        return cls(title=data["title"], text=data["text"])


@dataclass(frozen=True)
class ButtonElement:
    title: str
    action_url: str

    def to_dict(self) -> dict:
        return {"title": self.title, "actionURL": self.action_url}

    @classmethod
    def from_dict(cls, data: dict) -> "ButtonElement":
        return cls(title=data["title"], action_url=data["actionURL"])


@dataclass(frozen=True)
class ActionCardElement:
    """
    A call-to-action card.

    Attributes:
        title: Card title shown in the conversation list
        text: Markdown body
        orientation: Button layout
        avatar_hidden: Whether the robot avatar is hidden
        single_title: Label of the single whole-card button
        single_url: Target of the single whole-card button
        buttons: Independent buttons, in display order

    A card built with both ``single_*`` and ``buttons`` keeps both; the
    webhook then decides which one to honour.
    """
    title: str
    text: str
    orientation: Orientation = Orientation.VERTICAL
    avatar_hidden: bool = False
    single_title: Optional[str] = None
    single_url: Optional[str] = None
    buttons: Tuple[ButtonElement, ...] = ()

    def to_dict(self) -> dict:
        data: Dict[str, Any] = {
            "title": self.title,
            "text": self.text,
            "btnOrientation": self.orientation.value,
            "hideAvatar": "1" if self.avatar_hidden else "0",
        }
        if self.single_title is not None:
            data["singleTitle"] = self.single_title
        if self.single_url is not None:
            data["singleURL"] = self.single_url
        if self.buttons:
            data["btns"] = [button.to_dict() for button in self.buttons]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ActionCardElement":
        return cls(
            title=data["title"],
            text=data["text"],
            orientation=Orientation(data.get("btnOrientation", Orientation.VERTICAL.value)),
            avatar_hidden=data.get("hideAvatar", "0") == "1",
            single_title=data.get("singleTitle"),
            single_url=data.get("singleURL"),
            buttons=tuple(ButtonElement.from_dict(b) for b in data.get("btns", [])),
        )


@dataclass(frozen=True)
class FeedLinkElement:
    title: str
    message_url: str
    picture_url: str = ""
    text: str = ""

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "text": self.text,
            "messageURL": self.message_url,
            "picURL": self.picture_url,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FeedLinkElement":
        return cls(
            title=data["title"],
            message_url=data["messageURL"],
            picture_url=data.get("picURL", ""),
            text=data.get("text", ""),
        )


@dataclass(frozen=True)
class FeedCardElement:
    """An ordered list of linked items."""
    links: Tuple[FeedLinkElement, ...] = ()

    def to_dict(self) -> dict:
        return {"links": [link.to_dict() for link in self.links]}

    @classmethod
    def from_dict(cls, data: dict) -> "FeedCardElement":
        return cls(links=tuple(FeedLinkElement.from_dict(link) for link in data.get("links", [])))


@dataclass(frozen=True)
class MentionElement:
    """@-mentions attached to a message; mobiles are unique, first-seen order."""
    mobiles: Tuple[str, ...] = ()
    is_at_all: bool = False

    @classmethod
    def of(cls, mobiles: Iterable[str], is_at_all: bool = False) -> "MentionElement":
        return cls(mobiles=tuple(dict.fromkeys(mobiles)), is_at_all=is_at_all)

    def to_dict(self) -> dict:
        return {"atMobiles": list(self.mobiles), "isAtAll": self.is_at_all}

    @classmethod
    def from_dict(cls, data: dict) -> "MentionElement":
        return cls.of(data.get("atMobiles", []), bool(data.get("isAtAll", False)))


# msgtype -> (Message attribute, wire key, element class)
_VARIANTS = {
    MessageType.TEXT: ("text", "text", TextElement),
    MessageType.LINK: ("link", "link", LinkElement),
    MessageType.MARKDOWN: ("markdown", "markdown", MarkdownElement),
    MessageType.ACTION_CARD: ("action_card", "actionCard", ActionCardElement),
    MessageType.FEED_CARD: ("feed_card", "feedCard", FeedCardElement),
}


def variant_attribute(kind: MessageType) -> str:
    """Name of the Message attribute holding the payload for ``kind``."""
    return _VARIANTS[kind][0]


@dataclass(frozen=True)
class Message:
    """
    An outbound robot message.

    Exactly one payload attribute, the one selected by ``kind``, is expected
    to be set. Use MessageBuilder to construct instances.
    """
    kind: MessageType
    text: Optional[TextElement] = None
    link: Optional[LinkElement] = None
    markdown: Optional[MarkdownElement] = None
    action_card: Optional[ActionCardElement] = None
    feed_card: Optional[FeedCardElement] = None
    mention: Optional[MentionElement] = field(default=None)

    @property
    def payload(self) -> Any:
        """The populated element for the active variant."""
        return getattr(self, variant_attribute(self.kind))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the webhook JSON body; only the active variant is emitted."""
        _, key, _ = _VARIANTS[self.kind]
        data: Dict[str, Any] = {"msgtype": self.kind.value}
        if self.payload is not None:
            data[key] = self.payload.to_dict()
        if self.mention is not None:
            data["at"] = self.mention.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        """Decode a webhook JSON body produced by ``to_dict``."""
        kind = MessageType(data["msgtype"])
        attribute, key, element_cls = _VARIANTS[kind]
        kwargs: Dict[str, Any] = {}
        if key in data:
            kwargs[attribute] = element_cls.from_dict(data[key])
        if "at" in data:
            kwargs["mention"] = MentionElement.from_dict(data["at"])
        return cls(kind=kind, **kwargs)
