"""Tests for cron parsing and the job wrapper."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from unittest.mock import AsyncMock

import pytest
import pytz

from dingbot.errors import ConfigError, TransportError, UpstreamRejected
from dingbot.fetchers import WeatherFetcher
from dingbot.messages import MessageType
from dingbot.scheduler import JobBinding, JobScheduler, convert_day_of_week, cron_trigger
from tests.fixtures import FakeResponse, FakeSession

SHANGHAI = pytz.timezone("Asia/Shanghai")


# ---------------------------------------------------------------------------
# Cron expressions
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "expression, expected",
    [
        ("*", "*"),
        ("?", "*"),
        ("1-5", "mon,tue,wed,thu,fri"),
        ("0", "sun"),
        ("7", "sun"),
        ("0,6", "sun,sat"),
        ("*/2", "sun,tue,thu,sat"),
        ("mon-fri", "mon-fri"),
    ],
)
def test_convert_day_of_week(expression, expected):
    assert convert_day_of_week(expression) == expected


def test_convert_day_of_week_out_of_range():
    with pytest.raises(ConfigError):
        convert_day_of_week("3-9")


def test_weekday_cron_skips_weekend():
    trigger = cron_trigger("0 30 8 * * 1-5", SHANGHAI)
    friday_morning = SHANGHAI.localize(datetime(2024, 1, 5, 9, 0))

    fire = trigger.get_next_fire_time(None, friday_morning)

    assert (fire.year, fire.month, fire.day, fire.hour, fire.minute, fire.second) == (2024, 1, 8, 8, 30, 0)


def test_twice_daily_cron():
    trigger = cron_trigger("0 30 12,18 * * *", SHANGHAI)
    after_lunch = SHANGHAI.localize(datetime(2024, 1, 5, 13, 0))

    fire = trigger.get_next_fire_time(None, after_lunch)

    assert (fire.day, fire.hour, fire.minute) == (5, 18, 30)


def test_sunday_is_zero():
    trigger = cron_trigger("0 0 10 * * 0", SHANGHAI)
    friday = SHANGHAI.localize(datetime(2024, 1, 5, 9, 0))

    fire = trigger.get_next_fire_time(None, friday)

    assert (fire.day, fire.hour) == (7, 10)


@pytest.mark.parametrize("expression", ["0 30 8 * *", "0 30 8 * * 1-5 2024", "0 61 8 * * *"])
def test_invalid_cron_expressions(expression):
    with pytest.raises(ConfigError):
        cron_trigger(expression)


# ---------------------------------------------------------------------------
# Job registration and wrapper
# ---------------------------------------------------------------------------


def test_registers_only_enabled_jobs(robot):
    bindings = [
        JobBinding("weather", "0 30 8 * * 1-5", AsyncMock(), "天气"),
        JobBinding("reminder", "", AsyncMock(), "提醒"),
    ]

    scheduler = JobScheduler(robot, bindings, timezone=SHANGHAI)

    assert [job.id for job in scheduler.scheduler.get_jobs()] == ["weather"]


def test_duplicate_job_names_rejected(robot):
    bindings = [
        JobBinding("news", "0 0 20 * * *", AsyncMock()),
        JobBinding("news", "0 0 21 * * *", AsyncMock()),
    ]

    with pytest.raises(ConfigError):
        JobScheduler(robot, bindings)


@pytest.mark.asyncio
async def test_successful_job_sends_no_fallback(robot):
    action = AsyncMock()
    scheduler = JobScheduler(robot, [JobBinding("news", "0 0 20 * * *", action, "头条科技新闻")])

    assert await scheduler.run_job("news") is True
    action.assert_awaited_once()
    robot.send.assert_not_awaited()


@pytest.mark.asyncio
async def test_failed_job_sends_one_fallback(robot, caplog):
    action = AsyncMock(side_effect=UpstreamRejected("token invalid", code=1))
    scheduler = JobScheduler(robot, [JobBinding("articles", "0 30 12,18 * * *", action, "掘金技术文章")])

    with caplog.at_level(logging.ERROR, logger="dingbot.scheduler"):
        assert await scheduler.run_job("articles") is False

    robot.send.assert_awaited_once()
    message = robot.send.await_args.args[0]
    assert message.kind is MessageType.TEXT
    assert message.text.content == "抱歉~狗狗今儿没拿到最新掘金技术文章数据。"
    assert "Job articles failed" in caplog.text


@pytest.mark.asyncio
async def test_fallback_failure_is_logged_and_swallowed(robot, caplog):
    robot.send.side_effect = TransportError("down")
    action = AsyncMock(side_effect=TransportError("down"))
    scheduler = JobScheduler(robot, [JobBinding("news", "0 0 20 * * *", action, "头条科技新闻")])

    with caplog.at_level(logging.ERROR, logger="dingbot.scheduler"):
        assert await scheduler.run_job("news") is False

    assert "Failed to send fallback message for job news" in caplog.text


@pytest.mark.asyncio
async def test_fallback_with_undecodable_reply_is_swallowed(webhook_client, caplog):
    webhook_client._session = FakeSession([FakeResponse(b"\xff\xfe")])
    action = AsyncMock(side_effect=TransportError("down"))
    scheduler = JobScheduler(
        webhook_client, [JobBinding("weather", "0 30 8 * * 1-5", action, "天气")]
    )

    with caplog.at_level(logging.ERROR, logger="dingbot.scheduler"):
        assert await scheduler.run_job("weather") is False

    assert "Job weather failed" in caplog.text
    assert "Failed to send fallback message for job weather" in caplog.text


@pytest.mark.asyncio
async def test_unexpected_fallback_error_is_swallowed(robot, caplog):
    robot.send.side_effect = RuntimeError("bug")
    action = AsyncMock(side_effect=RuntimeError("boom"))
    scheduler = JobScheduler(robot, [JobBinding("articles", "0 30 12,18 * * *", action, "文章")])

    with caplog.at_level(logging.ERROR, logger="dingbot.scheduler"):
        assert await scheduler.run_job("articles") is False

    robot.send.assert_awaited_once()
    assert "Failed to send fallback message for job articles: bug" in caplog.text


@pytest.mark.asyncio
async def test_custom_fallback_template(robot):
    action = AsyncMock(side_effect=RuntimeError("boom"))
    scheduler = JobScheduler(
        robot,
        [JobBinding("weather", "0 30 8 * * 1-5", action, "weather")],
        fallback_template="Sorry, no {category} today.",
    )

    await scheduler.run_job("weather")

    assert robot.send.await_args.args[0].text.content == "Sorry, no weather today."


@pytest.mark.asyncio
async def test_unknown_job_name(robot):
    scheduler = JobScheduler(robot, [])

    with pytest.raises(KeyError):
        await scheduler.run_job("missing")


@pytest.mark.asyncio
async def test_weather_timeout_sends_single_fallback(robot, caplog):
    fetcher = WeatherFetcher(robot, "https://weather.example.com/now", timezone=SHANGHAI)
    fetcher._session = FakeSession(error=asyncio.TimeoutError())
    scheduler = JobScheduler(
        robot, [JobBinding("weather", "0 30 8 * * 1-5", fetcher.run, "天气")], timezone=SHANGHAI
    )

    with caplog.at_level(logging.ERROR, logger="dingbot.scheduler"):
        ok = await scheduler.run_job("weather")

    assert ok is False
    robot.send.assert_awaited_once()
    fallback = robot.send.await_args.args[0]
    assert fallback.kind is MessageType.TEXT
    assert "天气" in fallback.text.content
    assert any(record.levelno == logging.ERROR for record in caplog.records)


@pytest.mark.asyncio
async def test_start_and_shutdown(robot):
    scheduler = JobScheduler(
        robot, [JobBinding("news", "0 0 20 * * *", AsyncMock(), "新闻")], timezone=SHANGHAI
    )

    scheduler.start()
    try:
        assert scheduler.running
        job = scheduler.scheduler.get_job("news")
        assert job.next_run_time is not None
        assert job.next_run_time.hour == 20
    finally:
        scheduler.shutdown()

    await asyncio.sleep(0)
    assert not scheduler.running
