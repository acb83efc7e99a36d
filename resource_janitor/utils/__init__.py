"""Utility modules for the resource janitor."""

from .arn_utils import build_arn
from .duration import format_duration, parse_duration

__all__ = ["build_arn", "format_duration", "parse_duration"]
