# Copyright (c) 2025-2026 OptimNow. All Rights Reserved.
# Licensed under the Apache License, Version 2.0.
# See LICENSE file in the project root for full license information.

"""Tag policy and per-run scanner options."""

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .tags import Tag, TagMatcher


class TagPolicy(BaseModel):
    """
    Include/exclude tag policy deciding whether a resource is managed.

    Exclusion is disjunctive: any tag matching any exclude requirement
    protects the resource. Inclusion is conjunctive: every include
    requirement must be satisfied by at least one of the resource's tags.
    """

    model_config = ConfigDict(frozen=True)

    include_tags: TagMatcher = Field(
        default_factory=TagMatcher, description="Requirements a resource must all meet"
    )
    exclude_tags: TagMatcher = Field(
        default_factory=TagMatcher, description="Requirements that protect a resource"
    )

    def managed_per_tags(self, tags: Iterable[Tag] | None) -> bool:
        """
        Decide whether a resource with these tags may be managed.

        Args:
            tags: The resource's live tags (None is treated as no tags)

        Returns:
            True if the resource is not excluded and meets every include requirement
        """
        tag_list = list(tags or [])

        if self.exclude_tags and any(self.exclude_tags.matches(tag) for tag in tag_list):
            return False

        return all(
            any(req.satisfied_by(tag) for tag in tag_list)
            for req in self.include_tags.requirements
        )


class Options(TagPolicy):
    """Configuration handed to every scanner for one invocation."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    account: str = Field("", description="AWS account ID being cleaned")
    region: str = Field(..., description="AWS region being cleaned")
    session: Any = Field(
        None, description="boto3 Session used to build clients", exclude=True, repr=False
    )
    dry_run: bool = Field(False, description="Identify and report only, never delete")
