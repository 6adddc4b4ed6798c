"""
Job scheduling for the robot.
Binds six-field cron expressions to jobs and runs them on an asyncio scheduler,
sending an apology message whenever a job fails.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, List

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
import pytz

from .errors import ConfigError
from .messages import MessageBuilder, MessageTemplates, MessageType
from .messages.templates import DEFAULT_FALLBACK_TEMPLATE
from .webhook import WebhookClient

logger = logging.getLogger(__name__)

CRON_FIELDS = ("second", "minute", "hour", "day", "month", "day_of_week")

# Cron numbering: 0 and 7 are Sunday
DAY_NAMES = ("sun", "mon", "tue", "wed", "thu", "fri", "sat", "sun")


@dataclass(frozen=True)
class JobBinding:
    """
    A scheduled job.

    Attributes:
        name: Unique job id
        cron: Six-field cron expression; empty disables the job
        action: Zero-argument coroutine function doing the work
        category: Data category named in the apology message on failure
    """
    name: str
    cron: str
    action: Callable[[], Awaitable[Any]]
    category: str = ""


def _expand_day_of_week(part: str) -> List[str]:
    """Translate one cron day-of-week list element to APScheduler day names."""
    if part in ("*", "?"):
        return ["*"]

    body, _, step_text = part.partition("/")
    try:
        step = int(step_text) if step_text else 1
        if body in ("*", "?"):
            start, end = 0, 6
        elif "-" in body:
            first, last = body.split("-", 1)
            start, end = int(first), int(last)
        else:
            start = int(body)
            end = 6 if step_text else start
    except ValueError:
        # Already names such as "mon-fri"
        return [part]

    if not (0 <= start <= 7 and 0 <= end <= 7) or start > end or step < 1:
        raise ConfigError(f"invalid day-of-week element {part!r}")
    return [DAY_NAMES[day] for day in range(start, end + 1, step)]


def convert_day_of_week(expression: str) -> str:
    """
    Convert a cron day-of-week field to APScheduler syntax.

    APScheduler numbers weekdays from Monday = 0, cron from Sunday = 0, so
    numeric values are rewritten as day names.

    Example:
        convert_day_of_week("1-5") -> "mon,tue,wed,thu,fri"
    """
    days: List[str] = []
    for part in expression.split(","):
        for day in _expand_day_of_week(part.strip().lower()):
            if day not in days:
                days.append(day)
    if "*" in days:
        return "*"
    return ",".join(days)


def cron_trigger(expression: str, timezone: pytz.BaseTzInfo = pytz.UTC) -> CronTrigger:
    """
    Build a CronTrigger from ``second minute hour day month day_of_week``.

    Raises:
        ConfigError: wrong number of fields or an invalid field value
    """
    values = expression.split()
    if len(values) != len(CRON_FIELDS):
        raise ConfigError(
            f"cron expression {expression!r} must have {len(CRON_FIELDS)} fields, got {len(values)}"
        )

    fields: Dict[str, str] = dict(zip(CRON_FIELDS, values))
    fields["day_of_week"] = convert_day_of_week(fields["day_of_week"])
    if fields["day"] == "?":
        fields["day"] = "*"

    try:
        return CronTrigger(timezone=timezone, **fields)
    except ValueError as e:
        raise ConfigError(f"invalid cron expression {expression!r}: {e}") from e


class JobScheduler:
    """
    Runs job bindings on an AsyncIOScheduler.

    Every job runs inside ``run_job``, which logs failures and sends the
    fallback apology. Nothing a job raises reaches the scheduler.
    """

    def __init__(
        self,
        robot: WebhookClient,
        bindings: Iterable[JobBinding],
        timezone: pytz.BaseTzInfo = pytz.UTC,
        fallback_template: str = DEFAULT_FALLBACK_TEMPLATE
    ):
        """
        Initialize the scheduler and register every enabled binding.

        Args:
            robot: Webhook client used for apology messages
            bindings: Job table; names must be unique
            timezone: Timezone the cron expressions are evaluated in
            fallback_template: Apology text with a ``{category}`` placeholder
        """
        self.robot = robot
        self.timezone = timezone
        self.fallback_template = fallback_template
        self.bindings: Dict[str, JobBinding] = {}
        for binding in bindings:
            if binding.name in self.bindings:
                raise ConfigError(f"duplicate job name {binding.name!r}")
            self.bindings[binding.name] = binding

        self.scheduler = AsyncIOScheduler(timezone=timezone)
        self._register_jobs()

    def _register_jobs(self) -> None:
        for binding in self.bindings.values():
            if not binding.cron:
                logger.info(f"Job {binding.name} disabled (no cron expression)")
                continue
            self.scheduler.add_job(
                self.run_job,
                trigger=cron_trigger(binding.cron, self.timezone),
                args=[binding.name],
                id=binding.name,
                name=f"{binding.name} ({binding.cron})",
                replace_existing=True,
                misfire_grace_time=60,
                coalesce=True,
            )
            logger.debug(f"Registered job {binding.name}: {binding.cron}")

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def start(self) -> None:
        """Start firing jobs. Requires a running event loop."""
        self.scheduler.start()
        for job in self.scheduler.get_jobs():
            logger.info(f"Scheduled {job.name}, next run at {job.next_run_time}")

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    async def run_job(self, name: str) -> bool:
        """
        Run one job now.

        Args:
            name: Job name from the binding table

        Returns:
            True if the job completed, False if it failed and the apology was attempted
        """
        binding = self.bindings.get(name)
        if binding is None:
            raise KeyError(f"unknown job {name!r}")

        logger.info(f"Starting job {name}")
        try:
            await binding.action()
        except Exception as e:
            logger.exception(f"Job {name} failed: {e}")
            await self._send_fallback(binding)
            return False

        logger.info(f"Job {name} completed")
        return True

    async def _send_fallback(self, binding: JobBinding) -> None:
        """Send the apology message; a failure here is logged and dropped."""
        text = MessageTemplates.format_fallback_message(
            binding.category or binding.name, self.fallback_template
        )
        message = MessageBuilder(MessageType.TEXT).with_text(text).build()
        try:
            await self.robot.send(message)
            logger.info(f"Sent fallback message for job {binding.name}")
        except Exception as e:
            logger.error(f"Failed to send fallback message for job {binding.name}: {e}")
