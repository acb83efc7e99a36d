# Copyright (c) 2025-2026 OptimNow. All Rights Reserved.
# Licensed under the Apache License, Version 2.0.
# See LICENSE file in the project root for full license information.

"""Mark-and-sweep tracking of resource age across janitor runs.

The tracker remembers the earliest time each resource key was known to
exist. Every run marks the resources it can see; the tracker advises
deletion once a managed resource is older than the TTL, and forgets keys
that were not marked by the end of the run.
"""

import threading
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timedelta, timezone

from ..models import SweepReport, Tag, TagPolicy
from .sweep_reporter import LoggingSweepReporter, SweepReporter

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class TrackerStateError(Exception):
    """Raised when the tracker is used outside its run lifecycle."""

    pass


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Normalize a datetime to aware UTC, treating naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ResourceTracker:
    """
    Tracks the first time each resource was seen, and the global TTL.

    ``first_seen`` is the only durable state. ``marked`` and ``swept`` are
    rebuilt on every run and never persisted. One driver owns a tracker for
    the duration of a run; use SynchronizedTracker when several scanners
    mark concurrently.
    """

    def __init__(
        self,
        ttl: timedelta,
        first_seen: Mapping[str, datetime] | None = None,
        clock: Callable[[], datetime] | None = None,
        reporter: SweepReporter | None = None,
    ):
        """
        Initialize a tracker.

        Args:
            ttl: Maximum age of a managed resource. Zero means delete on sight.
            first_seen: Durable key -> timestamp table from a previous run
            clock: Returns the current time (defaults to UTC now)
            reporter: Receives the SweepReport from mark_complete()
        """
        if ttl < timedelta(0):
            raise ValueError(f"TTL must not be negative, got {ttl}")

        self._ttl = ttl
        self._first_seen: dict[str, datetime] = {
            key: as_utc(ts) for key, ts in (first_seen or {}).items()
        }
        self._marked: set[str] = set()
        self._swept: list[str] = []
        self._clock = clock or utc_now
        self._reporter = reporter or LoggingSweepReporter()
        self._report: SweepReport | None = None

    @classmethod
    def from_first_seen(
        cls,
        ttl: timedelta,
        table: Mapping[str, datetime],
        clock: Callable[[], datetime] | None = None,
    ) -> "ResourceTracker":
        """Hydrate a tracker from a persisted first-seen table."""
        return cls(ttl, first_seen=table, clock=clock)

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    @property
    def first_seen(self) -> dict[str, datetime]:
        """Copy of the durable key -> first-seen table."""
        return dict(self._first_seen)

    @property
    def swept(self) -> list[str]:
        return list(self._swept)

    @property
    def is_complete(self) -> bool:
        return self._report is not None

    @property
    def report(self) -> SweepReport | None:
        """The outcome of complete(), or None while the run is in progress."""
        return self._report

    def is_marked(self, key: str) -> bool:
        return key in self._marked

    def get_arns(self) -> list[str]:
        """Return every tracked key, sorted."""
        return sorted(self._first_seen)

    def seed(self, key: str, seen_at: datetime | None = None) -> None:
        """Record a key as observed without evaluating policy or TTL."""
        self._first_seen[key] = as_utc(seen_at or self._clock())

    def mark(
        self,
        policy: TagPolicy,
        key: str,
        created: datetime | None,
        tags: Iterable[Tag] | None,
    ) -> bool:
        """
        Mark a resource as present and advise whether to delete it.

        The creation estimate is the earliest of: now, the supplied creation
        time (ignored when unknown, at the epoch, or in the future), and any
        earlier record of this key. The estimate is never moved later.

        Args:
            policy: Tag policy deciding whether the resource is managed
            key: Stable resource key
            created: Creation time reported by the API, or None if unknown
            tags: The resource's live tags

        Returns:
            True if the resource is managed per tags and its TTL has expired

        Raises:
            TrackerStateError: If the run was already completed
        """
        if self.is_complete:
            raise TrackerStateError(f"cannot mark {key}: run already completed")

        self._marked.add(key)

        now = as_utc(self._clock())
        first_seen = now
        if created is not None:
            created = as_utc(created)
            if created != EPOCH and created <= now:
                first_seen = created

        previous = self._first_seen.get(key)
        if previous is not None and previous < first_seen:
            first_seen = previous
        self._first_seen[key] = first_seen

        if not policy.managed_per_tags(tags):
            return False

        # Zero TTL means delete now
        if self._ttl == timedelta(0) or now - first_seen > self._ttl:
            self._swept.append(key)
            return True
        return False

    def complete(self) -> SweepReport:
        """
        Finish the run: forget keys that were not marked.

        Must be called exactly once, after every scanner has marked.

        Returns:
            SweepReport with the swept and forgotten keys

        Raises:
            TrackerStateError: If the run was already completed
        """
        if self.is_complete:
            raise TrackerStateError("run already completed")

        gone = [key for key in self._first_seen if key not in self._marked]
        for key in gone:
            del self._first_seen[key]

        self._report = SweepReport(
            swept=list(self._swept),
            forgotten=sorted(gone),
            tracked=len(self._first_seen),
        )
        return self._report

    def mark_complete(self) -> int:
        """
        Complete the run and report the outcome.

        Returns:
            Number of resources swept this run
        """
        report = self.complete()
        self._reporter.report(report)
        return report.swept_count


class SynchronizedTracker:
    """Serializes mark() calls from scanners running concurrently."""

    def __init__(self, tracker: ResourceTracker):
        self._tracker = tracker
        self._lock = threading.Lock()

    @property
    def tracker(self) -> ResourceTracker:
        return self._tracker

    def mark(
        self,
        policy: TagPolicy,
        key: str,
        created: datetime | None,
        tags: Iterable[Tag] | None,
    ) -> bool:
        with self._lock:
            return self._tracker.mark(policy, key, created, tags)
