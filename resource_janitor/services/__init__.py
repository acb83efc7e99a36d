"""Service layer for the resource janitor."""

from .resource_tracker import ResourceTracker, SynchronizedTracker, TrackerStateError
from .sweep_reporter import LoggingSweepReporter, SweepReporter
from .state_store import S3StateStore, StateStoreError
from .janitor_service import JanitorService, ScanFailedError

__all__ = [
    "ResourceTracker",
    "SynchronizedTracker",
    "TrackerStateError",
    "LoggingSweepReporter",
    "SweepReporter",
    "S3StateStore",
    "StateStoreError",
    "JanitorService",
    "ScanFailedError",
]
