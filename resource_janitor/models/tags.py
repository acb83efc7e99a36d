# Copyright (c) 2025-2026 OptimNow. All Rights Reserved.
# Licensed under the Apache License, Version 2.0.
# See LICENSE file in the project root for full license information.

"""Tag data models and the compiled tag pattern matcher.

Operators describe tag policy with pattern strings of the form ``key`` or
``key=value``. A bare key matches a tag with that key and any value. A
``key=value`` pattern also requires the value to match exactly, so ``key=``
only matches a tag whose value is the empty string.
"""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field


class TagPatternError(ValueError):
    """Raised when an operator-supplied tag pattern cannot be parsed."""

    pass


class Tag(BaseModel):
    """A single tag attached to a cloud resource."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Tag key")
    value: str = Field("", description="Tag value (may be empty)")

    @classmethod
    def of(cls, key: str | None, value: str | None) -> "Tag":
        """Build a tag from nullable AWS SDK fields."""
        return cls(key=key or "", value=value or "")


class TagRequirement(BaseModel):
    """One parsed ``key`` or ``key=value`` pattern."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., min_length=1, description="Required tag key")
    value: str | None = Field(
        None,
        description="Required tag value. None means any value is accepted.",
    )

    @classmethod
    def parse(cls, pattern: str) -> "TagRequirement":
        """
        Parse a pattern string, splitting at the first ``=``.

        Args:
            pattern: ``key`` or ``key=value``

        Returns:
            The parsed requirement

        Raises:
            TagPatternError: If the pattern is not a string or has an empty key
        """
        if not isinstance(pattern, str):
            raise TagPatternError(f"Tag pattern must be a string, got {type(pattern).__name__}")

        key, sep, value = pattern.partition("=")
        if not key:
            raise TagPatternError(f"Tag pattern {pattern!r} has an empty key")

        return cls(key=key, value=value if sep else None)

    def satisfied_by(self, tag: Tag) -> bool:
        """Check whether a single tag meets this requirement."""
        if tag.key != self.key:
            return False
        return self.value is None or self.value == tag.value

    def __str__(self) -> str:
        if self.value is None:
            return self.key
        return f"{self.key}={self.value}"


class TagMatcher(BaseModel):
    """
    Immutable, ordered set of tag requirements.

    ``matches`` is an OR over all requirements for one tag. Policy code that
    needs every requirement to hold reads ``requirements`` directly.
    """

    model_config = ConfigDict(frozen=True)

    requirements: tuple[TagRequirement, ...] = Field(
        default=(), description="Parsed requirements, in pattern order"
    )

    @classmethod
    def for_tags(cls, patterns: Iterable[str] | None) -> "TagMatcher":
        """
        Compile tag patterns into a matcher.

        Args:
            patterns: Pattern strings. None or empty yields the empty matcher.

        Returns:
            TagMatcher holding one requirement per pattern

        Raises:
            TagPatternError: If any pattern is malformed
        """
        if patterns is None:
            return cls()
        if isinstance(patterns, str):
            raise TagPatternError("Tag patterns must be a list of strings, not a single string")
        return cls(requirements=tuple(TagRequirement.parse(p) for p in patterns))

    def matches(self, tag: Tag) -> bool:
        """Return True if any requirement is satisfied by the tag."""
        return any(req.satisfied_by(tag) for req in self.requirements)

    def __len__(self) -> int:
        return len(self.requirements)

    def __bool__(self) -> bool:
        return bool(self.requirements)

    def __str__(self) -> str:
        return ",".join(str(req) for req in self.requirements)
