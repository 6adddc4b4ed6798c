"""
Weather fetcher.
Reads current conditions from either the legacy forecast API or the realtime API
and posts them as a markdown message.
"""

import logging
import random
from datetime import datetime
from typing import Any, Dict, Optional

import pytz

from ..errors import ConfigError
from ..messages import Message, MessageBuilder, MessageTemplates, MessageType
from ..webhook import WebhookClient
from .base import BaseFetcher, as_float, dig
from .results import WeatherReading

logger = logging.getLogger(__name__)

PROVIDERS = ("legacy", "realtime")

# Realtime provider condition codes
SKYCON_LABELS: Dict[str, str] = {
    "CLEAR_DAY": "晴",
    "CLEAR_NIGHT": "晴",
    "PARTLY_CLOUDY_DAY": "多云",
    "PARTLY_CLOUDY_NIGHT": "多云",
    "CLOUDY": "阴",
    "LIGHT_HAZE": "轻度雾霾",
    "MODERATE_HAZE": "中度雾霾",
    "HEAVY_HAZE": "重度雾霾",
    "HAZE": "雾霾",
    "LIGHT_RAIN": "小雨",
    "MODERATE_RAIN": "中雨",
    "HEAVY_RAIN": "大雨",
    "STORM_RAIN": "暴雨",
    "RAIN": "雨",
    "FOG": "雾",
    "LIGHT_SNOW": "小雪",
    "MODERATE_SNOW": "中雪",
    "HEAVY_SNOW": "大雪",
    "STORM_SNOW": "暴雪",
    "SNOW": "雪",
    "DUST": "浮尘",
    "SAND": "沙尘",
    "WIND": "大风",
}

UNKNOWN_SKYCON_LABEL = "未知"


def skycon_label(code: Any) -> str:
    """Map a skycon code to its display label; unmapped codes give UNKNOWN_SKYCON_LABEL."""
    return SKYCON_LABELS.get(str(code).upper(), UNKNOWN_SKYCON_LABEL)


class WeatherFetcher(BaseFetcher):
    """Posts the current weather as a markdown message."""

    name = "weather"

    def __init__(
        self,
        robot: WebhookClient,
        api_url: str,
        provider: str = "legacy",
        location_name: str = "",
        timezone: pytz.BaseTzInfo = pytz.UTC,
        timeout_seconds: float = 10.0,
        rng: Optional[random.Random] = None
    ):
        """
        Args:
            robot: Webhook client
            api_url: Weather endpoint, including any API key
            provider: ``legacy`` or ``realtime`` response shape
            location_name: Place name shown in the message header
            timezone: Timezone for the publish time in the footer
        """
        if provider not in PROVIDERS:
            raise ConfigError(f"unknown weather provider {provider!r}")
        super().__init__(robot, api_url, timeout_seconds, rng)
        self.provider = provider
        self.location_name = location_name
        self.timezone = timezone

    async def fetch(self) -> WeatherReading:
        data = await self._get_json(self.api_url)
        if self.provider == "legacy":
            return self._parse_legacy_response(data)
        return self._parse_realtime_response(data)

    def _parse_legacy_response(self, data: Dict[str, Any]) -> WeatherReading:
        """Parse ``{HeWeather5: [{now: {...}}]}``."""
        now = dig(data, "HeWeather5", 0, "now")
        return WeatherReading(
            source="legacy",
            condition=str(dig(now, "cond", "txt")),
            temperature=as_float(dig(now, "tmp"), "tmp"),
            feels_like=as_float(dig(now, "fl"), "fl"),
            humidity=as_float(dig(now, "hum"), "hum"),
            wind_direction=str(dig(now, "wind", "dir")),
            wind_scale=str(dig(now, "wind", "sc")),
            fetched_at=datetime.now(self.timezone),
        )

    def _parse_realtime_response(self, data: Dict[str, Any]) -> WeatherReading:
        """Parse ``{result: {temperature, skycon, pm25, humidity}}``."""
        result = dig(data, "result")
        code = dig(result, "skycon")
        label = skycon_label(code)
        if label == UNKNOWN_SKYCON_LABEL:
            logger.warning(f"Unmapped skycon code: {code!r}")

        humidity = as_float(dig(result, "humidity"), "humidity")
        # The realtime provider reports relative humidity as a 0-1 fraction
        if humidity <= 1:
            humidity *= 100

        return WeatherReading(
            source="realtime",
            condition=label,
            temperature=as_float(dig(result, "temperature"), "temperature"),
            humidity=humidity,
            pm25=as_float(dig(result, "pm25"), "pm25"),
            fetched_at=datetime.now(self.timezone),
        )

    def build_message(self, result: WeatherReading) -> Message:
        text = MessageTemplates.format_weather_message(result, self.location_name)
        return (
            MessageBuilder(MessageType.MARKDOWN)
            .with_markdown(MessageTemplates.WEATHER_TITLE, text)
            .build()
        )
