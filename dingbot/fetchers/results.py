"""
Parsed provider payloads.
Created per fetch, used to build one message, then discarded.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class WeatherReading:
    """Current conditions from either weather provider."""
    source: str  # "legacy" or "realtime"
    condition: str
    temperature: float  # Celsius
    humidity: float  # percentage
    fetched_at: datetime

    # Legacy provider only
    feels_like: Optional[float] = None
    wind_direction: Optional[str] = None
    wind_scale: Optional[str] = None

    # Realtime provider only
    pm25: Optional[float] = None


@dataclass
class ArticleEntry:
    title: str
    url: str
    screenshot: str = ""


@dataclass
class ArticleSelection:
    """Consecutive entries picked from the article feed."""
    offset: int
    entries: List[ArticleEntry] = field(default_factory=list)


@dataclass
class NewsEntry:
    title: str
    abstract: str
    source_url: str
    image_url: Optional[str] = None


@dataclass
class NewsSelection:
    """The headline title (entry 0) plus one randomly drawn detail entry."""
    headline: str
    index: int
    entry: NewsEntry
