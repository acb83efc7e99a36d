# Copyright (c) 2025-2026 OptimNow. All Rights Reserved.
# Licensed under the Apache License, Version 2.0.
# See LICENSE file in the project root for full license information.

"""Persistence of the tracker's first-seen table in an S3 object."""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ConfigDict, TypeAdapter, ValidationError

from ..models import S3Path
from .resource_tracker import ResourceTracker, TrackerStateError

logger = logging.getLogger(__name__)

MISSING_OBJECT_CODES = frozenset(["NoSuchKey", "404", "NotFound"])

# Strict: only RFC 3339 strings, never numeric Unix timestamps
_FIRST_SEEN_ADAPTER = TypeAdapter(dict[str, datetime], config=ConfigDict(strict=True))


class StateStoreError(Exception):
    """Raised when tracker state cannot be read or written."""

    pass


def encode_first_seen(first_seen: dict[str, datetime]) -> bytes:
    """Serialize a first-seen table as indented JSON with sorted keys."""
    ordered = {key: first_seen[key] for key in sorted(first_seen)}
    return _FIRST_SEEN_ADAPTER.dump_json(ordered, indent=2)


def decode_first_seen(data: bytes | str) -> dict[str, datetime]:
    """Parse a first-seen table written by encode_first_seen."""
    return _FIRST_SEEN_ADAPTER.validate_json(data)


def bucket_region(location_constraint: str | None) -> str:
    """Map a GetBucketLocation constraint to a region name."""
    if not location_constraint:
        return "us-east-1"
    if location_constraint == "EU":
        return "eu-west-1"
    return location_constraint


class S3StateStore:
    """
    Loads and saves tracker state as one JSON object in S3.

    The object maps resource keys to RFC 3339 timestamps. It is read once
    at the start of a run and overwritten in full at the end.
    """

    def __init__(self, path: S3Path, session: boto3.Session | None = None):
        """
        Initialize the store.

        Args:
            path: Location of the state object
            session: boto3 Session to build the S3 client from
        """
        self._path = path
        self._session = session or boto3.Session()
        self._client: Any = None

    @property
    def path(self) -> S3Path:
        return self._path

    def _s3(self) -> Any:
        if self._client is None:
            if self._path.region is None:
                self._path = self._path.with_region(self._lookup_region())
            self._client = self._session.client("s3", region_name=self._path.region)
        return self._client

    def _lookup_region(self) -> str:
        try:
            response = self._session.client("s3").get_bucket_location(Bucket=self._path.bucket)
        except (ClientError, BotoCoreError) as e:
            raise StateStoreError(
                f"Failed to determine region of bucket {self._path.bucket}: {e}"
            ) from e

        region = bucket_region(response.get("LocationConstraint"))
        logger.debug(f"Bucket {self._path.bucket} is in {region}")
        return region

    def load(
        self,
        ttl: timedelta,
        clock: Callable[[], datetime] | None = None,
    ) -> ResourceTracker:
        """
        Load a tracker from the state object.

        A missing object yields an empty tracker.

        Args:
            ttl: TTL for the returned tracker
            clock: Optional clock for the returned tracker

        Returns:
            ResourceTracker hydrated with the persisted first-seen table

        Raises:
            StateStoreError: If the object cannot be read or decoded
        """
        try:
            response = self._s3().get_object(Bucket=self._path.bucket, Key=self._path.key)
            body = response["Body"].read()
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            if error_code in MISSING_OBJECT_CODES:
                logger.info(f"No state at {self._path}, starting with an empty table")
                return ResourceTracker(ttl, clock=clock)
            raise StateStoreError(f"Failed to load state from {self._path}: {e}") from e
        except BotoCoreError as e:
            raise StateStoreError(f"Failed to load state from {self._path}: {e}") from e

        try:
            table = decode_first_seen(body)
        except ValidationError as e:
            raise StateStoreError(f"Invalid state in {self._path}: {e}") from e

        logger.info(f"Loaded {len(table)} tracked resources from {self._path}")
        return ResourceTracker.from_first_seen(ttl, table, clock=clock)

    def save(self, tracker: ResourceTracker) -> None:
        """
        Overwrite the state object with the tracker's first-seen table.

        Args:
            tracker: A tracker whose run has been completed

        Raises:
            TrackerStateError: If mark_complete() has not run yet
            StateStoreError: If the object cannot be written
        """
        if not tracker.is_complete:
            raise TrackerStateError("tracker must be completed before it is saved")

        body = encode_first_seen(tracker.first_seen)
        try:
            self._s3().put_object(
                Bucket=self._path.bucket,
                Key=self._path.key,
                Body=body,
                ContentType="application/json",
                CacheControl="max-age=0",
            )
        except (ClientError, BotoCoreError) as e:
            raise StateStoreError(f"Failed to save state to {self._path}: {e}") from e

        logger.info(f"Saved {len(tracker.first_seen)} tracked resources to {self._path}")
