"""Mock provider payloads and network stand-ins for robot tests."""

from __future__ import annotations

import json
import random
from typing import Any, List, Optional, Tuple


class FakeResponse:
    """Async-context-manager response with a fixed body."""

    def __init__(self, body: Any, status: int = 200):
        if isinstance(body, (dict, list)):
            body = json.dumps(body, ensure_ascii=False)
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        self.status = status

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    async def read(self) -> bytes:
        return self._body

    async def text(self) -> str:
        return self._body.decode("utf-8")


class FakeSession:
    """Records requests and replays queued responses (or raises ``error``)."""

    def __init__(
        self,
        responses: Optional[List[FakeResponse]] = None,
        error: Optional[BaseException] = None,
    ):
        self.responses = list(responses or [])
        self.error = error
        self.requests: List[Tuple[str, str, dict]] = []
        self.closed = False

    def _respond(self, method: str, url: str, **kwargs) -> FakeResponse:
        self.requests.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)

    def get(self, url: str, **kwargs) -> FakeResponse:
        return self._respond("GET", url, **kwargs)

    def post(self, url: str, **kwargs) -> FakeResponse:
        return self._respond("POST", url, **kwargs)

    async def close(self) -> None:
        self.closed = True


class FixedRandom(random.Random):
    """Random source whose ``randrange`` always returns ``value``."""

    def __init__(self, value: int):
        super().__init__(0)
        self.value = value
        self.calls: List[Tuple[int, int]] = []

    def randrange(self, start, stop=None, step=1):
        self.calls.append((start, stop))
        return self.value

LEGACY_WEATHER_RESPONSE = {
    "HeWeather5": [
        {
            "basic": {"city": "北京", "id": "CN101010100"},
            "now": {
                "cond": {"code": "101", "txt": "多云"},
                "fl": "11",
                "hum": "34",
                "pcpn": "0",
                "pres": "1020",
                "tmp": "13",
                "vis": "10",
                "wind": {"deg": "200", "dir": "西南风", "sc": "3", "spd": "12"},
            },
            "status": "ok",
        }
    ]
}

REALTIME_WEATHER_RESPONSE = {
    "status": "ok",
    "result": {
        "status": "ok",
        "temperature": 21.37,
        "skycon": "PARTLY_CLOUDY_DAY",
        "pm25": 38.0,
        "humidity": 0.58,
    },
}

REALTIME_WEATHER_UNKNOWN_SKYCON = {
    "result": {
        "temperature": -3.0,
        "skycon": "VOLCANIC_ASH",
        "pm25": 12,
        "humidity": 0.9,
    },
}


def make_article_response(count: int) -> dict:
    """Article feed payload with ``count`` numbered entries."""
    return {
        "s": 1,
        "m": "ok",
        "d": {
            "entrylist": [
                {
                    "title": f"Article {i}",
                    "screenshot": f"https://img.example.com/{i}.png",
                    "originalUrl": f"https://articles.example.com/post/{i}",
                }
                for i in range(count)
            ]
        },
    }


NEWS_RESPONSE = {
    "message": "success",
    "data": [
        {
            "title": f"Story {i}",
            "abstract": f"Abstract of story {i}",
            "source_url": f"/group/{1000 + i}/",
            "image_list": [{"url": f"//p3.example.com/list/{i}.jpg"}],
        }
        for i in range(5)
    ],
}

WEBHOOK_OK = {"errcode": 0, "errmsg": "ok"}

WEBHOOK_TOKEN_INVALID = {"errcode": 1, "errmsg": "token invalid"}
