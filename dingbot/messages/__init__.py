"""Message models, builders and templates."""

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
)
from .builder import ActionCardBuilder, FeedCardBuilder, MessageBuilder
from .templates import MessageTemplates

__all__ = [
    "ActionCardElement",
    "ButtonElement",
    "FeedCardElement",
    "FeedLinkElement",
    "LinkElement",
    "MarkdownElement",
    "MentionElement",
    "Message",
    "MessageType",
    "Orientation",
    "TextElement",
    "ActionCardBuilder",
    "FeedCardBuilder",
    "MessageBuilder",
    "MessageTemplates",
]
