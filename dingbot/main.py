"""
Main entry point for the notification robot.
Initializes all components and runs the scheduled jobs until a shutdown signal.
"""

import argparse
import asyncio
import logging
import signal
from typing import List, Optional

from .config import Config
from .errors import ConfigError
from .fetchers import ArticleFetcher, NewsFetcher, ReminderJob, WeatherFetcher
from .scheduler import JobBinding, JobScheduler
from .webhook import WebhookClient

logger = logging.getLogger(__name__)


class NotifyBot:
    """
    Main robot class that coordinates all components.
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize the robot.

        Args:
            config: Preloaded configuration; loaded from disk/env when omitted
        """
        self.config = config
        self.robot: Optional[WebhookClient] = None
        self.weather: Optional[WeatherFetcher] = None
        self.articles: Optional[ArticleFetcher] = None
        self.news: Optional[NewsFetcher] = None
        self.reminder: Optional[ReminderJob] = None
        self.scheduler: Optional[JobScheduler] = None
        self._stop_event = asyncio.Event()

    def initialize(self) -> None:
        """
        Initialize all robot components.

        Raises:
            ConfigError: configuration is invalid
        """
        if self.config is None:
            self.config = Config.load()

        self.config.setup_logging()
        errors = self.config.validate()
        if errors:
            for error in errors:
                logger.error(f"Config error: {error}")
            raise ConfigError("Invalid configuration. Check config.toml or the environment.")

        config = self.config
        timezone = config.get_timezone()
        timeout = config.http_timeout_seconds

        self.robot = WebhookClient(config.access_token, config.send_url_template, timeout)
        self.weather = WeatherFetcher(
            self.robot,
            config.weather.api_url,
            provider=config.weather.provider,
            location_name=config.weather.location_name,
            timezone=timezone,
            timeout_seconds=timeout,
        )
        self.articles = ArticleFetcher(self.robot, config.articles.api_url, timeout)
        self.news = NewsFetcher(
            self.robot, config.news.api_url, config.news.site_url, timeout
        )
        self.reminder = ReminderJob(
            self.robot, config.reminder.text, config.reminder.mobiles, config.reminder.at_all
        )

        self.scheduler = JobScheduler(
            self.robot,
            self._job_table(),
            timezone=timezone,
            fallback_template=config.fallback_template,
        )

        logger.debug("Notification robot initialized successfully")

    def _job_table(self) -> List[JobBinding]:
        """The static (cron -> job) bindings."""
        config = self.config
        return [
            JobBinding("weather", config.weather.cron, self.weather.run, config.weather.category),
            JobBinding("articles", config.articles.cron, self.articles.run, config.articles.category),
            JobBinding("news", config.news.cron, self.news.run, config.news.category),
            JobBinding("reminder", config.reminder.cron, self.reminder.run, config.reminder.category),
        ]

    async def start(self) -> None:
        """Start the scheduler and block until ``stop`` is called."""
        if self.scheduler.running:
            logger.warning("Robot is already running")
            return

        logger.info("Starting notification robot...")
        self._stop_event.clear()
        self.scheduler.start()
        await self._stop_event.wait()

    async def run_now(self, job_name: str) -> bool:
        """Fire one job immediately, outside its schedule."""
        return await self.scheduler.run_job(job_name)

    async def stop(self) -> None:
        """Stop the robot gracefully."""
        logger.debug("Stopping notification robot...")
        self._stop_event.set()

        if self.scheduler:
            self.scheduler.shutdown()

        for component in (self.weather, self.articles, self.news, self.reminder, self.robot):
            if component:
                await component.close()

        logger.debug("Notification robot stopped")


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Scheduled group-chat notification robot")
    parser.add_argument("--config", help="path to the TOML config file")
    parser.add_argument(
        "--run-now",
        metavar="JOB",
        help="run one job (weather, articles, news, reminder) immediately and exit",
    )
    return parser.parse_args(argv)


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = _parse_args(argv)
    bot = NotifyBot(Config.load(args.config))

    try:
        bot.initialize()
        if args.run_now:
            return 0 if await bot.run_now(args.run_now) else 1

        # Setup signal handlers for graceful shutdown
        loop = asyncio.get_running_loop()

        def signal_handler():
            logger.debug("Received shutdown signal")
            asyncio.create_task(bot.stop())

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, signal_handler)

        await bot.start()
        return 0
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        raise
    finally:
        await bot.stop()


def run() -> None:
    """Run the robot (blocking)."""
    try:
        raise SystemExit(asyncio.run(main()))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
