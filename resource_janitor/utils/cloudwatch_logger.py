# Copyright (c) 2025-2026 OptimNow. All Rights Reserved.
# Licensed under the Apache License, Version 2.0.
# See LICENSE file in the project root for full license information.

"""Shipping janitor logs to AWS CloudWatch Logs."""

import logging
import sys
from datetime import datetime, timezone

import boto3
from botocore.exceptions import BotoCoreError, ClientError

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class CloudWatchHandler(logging.Handler):
    """Logging handler that puts each record to a CloudWatch log stream."""

    def __init__(self, log_group: str, log_stream: str, region: str = "us-east-1"):
        """
        Initialize CloudWatch logging handler.

        Args:
            log_group: CloudWatch log group name
            log_stream: CloudWatch log stream name
            region: AWS region for CloudWatch
        """
        super().__init__()
        self.log_group = log_group
        self.log_stream = log_stream
        self.region = region
        self.client = boto3.client("logs", region_name=region)
        self._ensure_log_group_and_stream()

    def _ensure_log_group_and_stream(self) -> None:
        """Create the log group and stream unless they already exist."""
        for create, kwargs in (
            (self.client.create_log_group, {"logGroupName": self.log_group}),
            (
                self.client.create_log_stream,
                {"logGroupName": self.log_group, "logStreamName": self.log_stream},
            ),
        ):
            try:
                create(**kwargs)
            except ClientError as e:
                if e.response["Error"]["Code"] != "ResourceAlreadyExistsException":
                    raise

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.client.put_log_events(
                logGroupName=self.log_group,
                logStreamName=self.log_stream,
                logEvents=[
                    {
                        "message": self.format(record),
                        "timestamp": int(record.created * 1000),
                    }
                ],
            )
        except (ClientError, BotoCoreError):
            # A logging handler must not raise into the caller
            self.handleError(record)


def default_log_stream() -> str:
    """Stream name for one janitor invocation, e.g. ``janitor-20250101T120000Z``."""
    return "janitor-" + datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def configure_cloudwatch_logging(
    log_group: str,
    log_stream: str | None = None,
    region: str = "us-east-1",
) -> CloudWatchHandler | None:
    """
    Attach a CloudWatch handler to the root logger.

    Setup failures are reported on stderr and leave console logging in place.

    Args:
        log_group: CloudWatch log group name
        log_stream: Log stream name (one per invocation if not set)
        region: AWS region for CloudWatch

    Returns:
        The installed handler, or None if setup failed
    """
    stream = log_stream or default_log_stream()
    try:
        handler = CloudWatchHandler(log_group=log_group, log_stream=stream, region=region)
    except (ClientError, BotoCoreError) as e:
        print(f"Failed to configure CloudWatch logging: {e}", file=sys.stderr)
        return None

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.getLogger().addHandler(handler)

    logging.getLogger(__name__).info(
        f"CloudWatch logging configured: group={log_group}, stream={stream}"
    )
    return handler
