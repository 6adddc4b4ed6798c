"""Content fetchers for the scheduled jobs."""

from .base import BaseFetcher
from .weather import WeatherFetcher, SKYCON_LABELS, UNKNOWN_SKYCON_LABEL
from .articles import ArticleFetcher
from .news import NewsFetcher
from .reminder import ReminderJob
from .results import WeatherReading, ArticleEntry, ArticleSelection, NewsEntry, NewsSelection

__all__ = [
    "BaseFetcher",
    "WeatherFetcher",
    "SKYCON_LABELS",
    "UNKNOWN_SKYCON_LABEL",
    "ArticleFetcher",
    "NewsFetcher",
    "ReminderJob",
    "WeatherReading",
    "ArticleEntry",
    "ArticleSelection",
    "NewsEntry",
    "NewsSelection",
]
