"""Data models for the resource janitor."""

from .tags import Tag, TagMatcher, TagPatternError, TagRequirement
from .options import Options, TagPolicy
from .sweep import SweepReport
from .s3_path import S3Path

__all__ = [
    "Tag",
    "TagMatcher",
    "TagPatternError",
    "TagRequirement",
    "Options",
    "TagPolicy",
    "SweepReport",
    "S3Path",
]
