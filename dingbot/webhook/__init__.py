"""Robot webhook client."""

from .client import WebhookClient, DEFAULT_SEND_URL_TEMPLATE

__all__ = ["WebhookClient", "DEFAULT_SEND_URL_TEMPLATE"]
