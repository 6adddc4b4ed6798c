"""
Message templates for robot notifications.
Bodies use the robot's markdown dialect.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..fetchers.results import NewsEntry, WeatherReading


DEFAULT_FALLBACK_TEMPLATE = "抱歉~狗狗今儿没拿到最新{category}数据。"


class MessageTemplates:
    """Formatter for the markdown and text bodies sent by each job."""

    WEATHER_TITLE = "早上好~"
    NEWS_BUTTON_LABEL = "查看详情"

    # provider -> (display name, homepage)
    WEATHER_SOURCES = {
        "legacy": ("和风天气", "https://www.heweather.com/"),
        "realtime": ("彩云天气", "https://caiyunapp.com/"),
    }

    @staticmethod
    def format_reading(value: Optional[float]) -> str:
        """Format a numeric reading with one decimal place."""
        if value is None:
            return "—"
        return f"{value:.1f}"

    @classmethod
    def format_weather_message(cls, reading: "WeatherReading", location_name: str) -> str:
        """
        Format the morning weather markdown body.

        Args:
            reading: Parsed weather reading
            location_name: Place name shown in the header

        Returns:
            Markdown body with header, readings line and source footer
        """
        if reading.source == "legacy":
            details = (
                f"> 天气状况{reading.condition}，"
                f"温度{cls.format_reading(reading.temperature)}度，"
                f"体感温度{cls.format_reading(reading.feels_like)}度，"
                f"相对湿度{cls.format_reading(reading.humidity)}%，"
                f"{reading.wind_direction or ''}{reading.wind_scale or ''}级，"
            )
        else:
            details = (
                f"> 天气状况{reading.condition}，"
                f"温度{cls.format_reading(reading.temperature)}度，"
                f"相对湿度{cls.format_reading(reading.humidity)}%，"
                f"PM2.5浓度{cls.format_reading(reading.pm25)}，"
            )

        source_name, source_url = cls.WEATHER_SOURCES.get(
            reading.source, cls.WEATHER_SOURCES["realtime"]
        )
        published = reading.fetched_at.strftime("%H点%M分")

        return (
            f"#### {location_name}天气\n"
            f"{details}\n\n"
            f"> ###### {published}发布 数据来自[{source_name}]({source_url}) \n"
        )

    @classmethod
    def format_news_message(cls, entry: "NewsEntry") -> str:
        """Format the news card body: picture, heading, abstract."""
        lines = []
        if entry.image_url:
            lines.append(f"![screenshot]({entry.image_url}) \n")
        lines.append(f"### {entry.title}\n {entry.abstract}")
        return "".join(lines)

    @staticmethod
    def format_fallback_message(category: str, template: str = DEFAULT_FALLBACK_TEMPLATE) -> str:
        """Apology text sent when a job could not deliver its content."""
        try:
            return template.format(category=category)
        except (KeyError, IndexError, ValueError):
            return DEFAULT_FALLBACK_TEMPLATE.format(category=category)
