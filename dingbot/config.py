"""
Configuration management for the notification robot.
Settings are read once at startup from a TOML file; the access token and a few
runtime knobs can be overridden from the environment (.env is loaded).
"""

import os
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from dotenv import load_dotenv
import pytz
import toml

from .errors import ConfigError
from .messages.templates import DEFAULT_FALLBACK_TEMPLATE
from .scheduler import cron_trigger
from .webhook.client import DEFAULT_SEND_URL_TEMPLATE

load_dotenv()

DEFAULT_CONFIG_PATH = "config.toml"

DEFAULT_WEATHER_CRON = "0 30 8 * * 1-5"
DEFAULT_ARTICLES_CRON = "0 30 12,18 * * *"
DEFAULT_NEWS_CRON = "0 0 20 * * *"


def _mobiles_from_value(v: Any) -> Tuple[str, ...]:
    if isinstance(v, (list, tuple)):
        return tuple(str(x).strip() for x in v if str(x).strip())
    if isinstance(v, str) and v:
        return tuple(m.strip() for m in v.split(",") if m.strip())
    return ()


def _bool_from_value(v: Any) -> bool:
    return v if isinstance(v, bool) else str(v).lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class WeatherSettings:
    provider: str = "legacy"
    api_url: str = ""
    location_name: str = "互联网金融中心"
    cron: str = DEFAULT_WEATHER_CRON
    category: str = "天气"


@dataclass(frozen=True)
class ArticleSettings:
    api_url: str = ""
    cron: str = DEFAULT_ARTICLES_CRON
    category: str = "掘金技术文章"


@dataclass(frozen=True)
class NewsSettings:
    api_url: str = ""
    site_url: str = "http://www.toutiao.com"
    cron: str = DEFAULT_NEWS_CRON
    category: str = "头条科技新闻"


@dataclass(frozen=True)
class ReminderSettings:
    """Plain-text @-mention reminder; disabled while ``cron`` is empty."""
    cron: str = ""
    text: str = ""
    mobiles: Tuple[str, ...] = ()
    at_all: bool = False
    category: str = "提醒"


@dataclass(frozen=True)
class Config:
    """
    Application configuration.
    Built once by ``Config.load`` and passed to the components that need it.
    """

    access_token: str = ""
    send_url_template: str = DEFAULT_SEND_URL_TEMPLATE
    timezone: str = "Asia/Shanghai"
    log_level: str = "INFO"
    http_timeout_seconds: float = 10.0
    fallback_template: str = DEFAULT_FALLBACK_TEMPLATE
    weather: WeatherSettings = field(default_factory=WeatherSettings)
    articles: ArticleSettings = field(default_factory=ArticleSettings)
    news: NewsSettings = field(default_factory=NewsSettings)
    reminder: ReminderSettings = field(default_factory=ReminderSettings)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Build a Config from parsed TOML; unknown keys are ignored."""
        sections = {}
        for name in ("weather", "articles", "news", "reminder"):
            section = data.get(name) or {}
            if not isinstance(section, dict):
                raise ConfigError(f"[{name}] must be a table, got {type(section).__name__}")
            sections[name] = section
        weather = sections["weather"]
        articles = sections["articles"]
        news = sections["news"]
        reminder = sections["reminder"]

        defaults = cls()
        try:
            return cls(
                access_token=str(data.get("access_token", "") or ""),
                send_url_template=str(data.get("send_url_template") or DEFAULT_SEND_URL_TEMPLATE),
                timezone=str(data.get("timezone") or defaults.timezone),
                log_level=str(data.get("log_level") or "INFO").upper(),
                http_timeout_seconds=float(
                    data.get("http_timeout_seconds", defaults.http_timeout_seconds)
                ),
                fallback_template=str(data.get("fallback_template") or DEFAULT_FALLBACK_TEMPLATE),
                weather=WeatherSettings(
                    provider=str(weather.get("provider", defaults.weather.provider)),
                    api_url=str(weather.get("api_url", "") or ""),
                    location_name=str(weather.get("location_name", defaults.weather.location_name)),
                    cron=str(weather.get("cron", defaults.weather.cron)),
                    category=str(weather.get("category", defaults.weather.category)),
                ),
                articles=ArticleSettings(
                    api_url=str(articles.get("api_url", "") or ""),
                    cron=str(articles.get("cron", defaults.articles.cron)),
                    category=str(articles.get("category", defaults.articles.category)),
                ),
                news=NewsSettings(
                    api_url=str(news.get("api_url", "") or ""),
                    site_url=str(news.get("site_url", defaults.news.site_url)),
                    cron=str(news.get("cron", defaults.news.cron)),
                    category=str(news.get("category", defaults.news.category)),
                ),
                reminder=ReminderSettings(
                    cron=str(reminder.get("cron", "") or ""),
                    text=str(reminder.get("text", "") or ""),
                    mobiles=_mobiles_from_value(reminder.get("mobiles", [])),
                    at_all=_bool_from_value(reminder.get("at_all", False)),
                    category=str(reminder.get("category", defaults.reminder.category)),
                ),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid configuration value: {e}") from e

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Config":
        """
        Load configuration from TOML, then apply environment overrides.

        Args:
            path: TOML file; defaults to $CONFIG_PATH or ``config.toml``.
                A missing file is not an error.

        Environment:
            DINGTALK_ACCESS_TOKEN, TIMEZONE, LOG_LEVEL
        """
        config_path = Path(path or os.getenv("CONFIG_PATH", DEFAULT_CONFIG_PATH))
        data: Dict[str, Any] = {}
        if config_path.exists():
            try:
                data = toml.load(str(config_path))
            except toml.TomlDecodeError as e:
                raise ConfigError(f"cannot parse {config_path}: {e}") from e
        else:
            logging.getLogger(__name__).warning(f"Config file {config_path} not found, using defaults")

        config = cls.from_dict(data)

        overrides: Dict[str, Any] = {}
        if os.getenv("DINGTALK_ACCESS_TOKEN"):
            overrides["access_token"] = os.environ["DINGTALK_ACCESS_TOKEN"]
        if os.getenv("TIMEZONE"):
            overrides["timezone"] = os.environ["TIMEZONE"]
        if os.getenv("LOG_LEVEL"):
            overrides["log_level"] = os.environ["LOG_LEVEL"].upper()
        return replace(config, **overrides) if overrides else config

    def get_timezone(self) -> pytz.BaseTzInfo:
        """Get the configured timezone object."""
        try:
            return pytz.timezone(self.timezone)
        except pytz.exceptions.UnknownTimeZoneError:
            logging.warning(f"Unknown timezone '{self.timezone}', using UTC")
            return pytz.UTC

    def validate(self) -> List[str]:
        """
        Validate configuration and return list of errors.
        Returns empty list if configuration is valid.
        """
        errors = []

        if not self.access_token:
            errors.append("access_token (or DINGTALK_ACCESS_TOKEN) is required")

        if "{ACCESS_TOKEN}" not in self.send_url_template:
            errors.append("send_url_template must contain {ACCESS_TOKEN}")

        if self.http_timeout_seconds <= 0:
            errors.append("http_timeout_seconds must be positive")

        if "{category}" not in self.fallback_template:
            errors.append("fallback_template must contain {category}")

        if self.weather.provider not in ("legacy", "realtime"):
            errors.append(f"weather.provider must be 'legacy' or 'realtime', got '{self.weather.provider}'")

        jobs = (
            ("weather", self.weather.cron, self.weather.api_url),
            ("articles", self.articles.cron, self.articles.api_url),
            ("news", self.news.cron, self.news.api_url),
            ("reminder", self.reminder.cron, self.reminder.text),
        )
        for name, cron, required in jobs:
            if not cron:
                continue
            if not required:
                what = "text" if name == "reminder" else "api_url"
                errors.append(f"{name}.{what} is required when {name}.cron is set")
            try:
                cron_trigger(cron)
            except ConfigError as e:
                errors.append(f"{name}.cron: {e}")

        return errors

    def setup_logging(self) -> None:
        """Configure logging based on settings."""
        log_level = getattr(logging, self.log_level, logging.INFO)

        logging.basicConfig(
            level=log_level,
            format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            handlers=[logging.StreamHandler()]
        )

        # Reduce noise from external libraries
        logging.getLogger("aiohttp").setLevel(logging.WARNING)
        logging.getLogger("apscheduler").setLevel(logging.WARNING)
