"""
Exception types raised by the robot.

Fetch and send failures derive from RobotError so the scheduler's job
wrapper can catch them in one place.
"""

from typing import Optional


class RobotError(Exception):
    """Base class for failures while fetching content or posting a message."""


class TransportError(RobotError):
    """The HTTP call itself failed (connection, timeout, bad status)."""


class DecodeError(RobotError):
    """A response body was not the JSON shape we expected."""


class UpstreamRejected(RobotError):
    """The webhook answered with a non-zero errcode."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class MessageBuildError(ValueError):
    """A message builder was used with a payload that does not match its kind."""


class ConfigError(ValueError):
    """Configuration is missing or malformed."""
