# Copyright (c) 2025-2026 OptimNow. All Rights Reserved.
# Licensed under the Apache License, Version 2.0.
# See LICENSE file in the project root for full license information.

"""Contract shared by the per-resource-type scanners."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Protocol

from ..clients.aws_client import AWSClient
from ..models import Options, Tag, TagPolicy
from ..services.resource_tracker import ResourceTracker


class Marker(Protocol):
    """ResourceTracker or SynchronizedTracker."""

    def mark(
        self,
        policy: TagPolicy,
        key: str,
        created: datetime | None,
        tags: list[Tag] | None,
    ) -> bool: ...


class ResourceScanner(ABC):
    """
    Lists, marks and deletes one type of AWS resource.

    Listing failures propagate as AWSAPIError. Tag-fetch and delete
    failures for a single resource are logged and skipped.
    """

    name: str = ""

    @abstractmethod
    async def list_all(self, options: Options, aws: AWSClient) -> ResourceTracker:
        """Return a zero-TTL tracker seeded with every live resource key."""

    @abstractmethod
    async def mark_and_sweep(self, options: Options, tracker: Marker, aws: AWSClient) -> None:
        """Mark every live resource and delete those the tracker flags."""

    @staticmethod
    def seeded_tracker(keys: Iterable[str]) -> ResourceTracker:
        """Build a zero-TTL tracker that has seen each key now."""
        tracker = ResourceTracker(timedelta(0))
        for key in keys:
            tracker.seed(key)
        return tracker

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
