# Copyright (c) 2025-2026 OptimNow. All Rights Reserved.
# Licensed under the Apache License, Version 2.0.
# See LICENSE file in the project root for full license information.

"""EC2 instance scanner."""

import logging
from typing import Any

from ..clients.aws_client import AWSAPIError, AWSClient
from ..models import Options
from ..services.resource_tracker import ResourceTracker
from ..utils.arn_utils import build_arn
from .base import Marker, ResourceScanner

logger = logging.getLogger(__name__)

SKIPPED_STATES = frozenset(["shutting-down", "terminated"])


class EC2Instances(ResourceScanner):
    """Terminates EC2 instances that outlive the TTL."""

    name = "ec2-instances"

    @staticmethod
    def instance_arn(options: Options, instance_id: str) -> str:
        return build_arn("ec2", options.region, options.account, f"instance/{instance_id}")

    async def _list_instances(self, aws: AWSClient) -> list[dict[str, Any]]:
        reservations = await aws.paginate("ec2", "describe_instances", "Reservations")
        return [
            instance
            for reservation in reservations
            for instance in reservation.get("Instances", [])
            if instance.get("State", {}).get("Name") not in SKIPPED_STATES
        ]

    async def mark_and_sweep(self, options: Options, tracker: Marker, aws: AWSClient) -> None:
        to_delete: list[tuple[str, str]] = []

        for instance in await self._list_instances(aws):
            instance_id = instance["InstanceId"]
            arn = self.instance_arn(options, instance_id)
            tags = aws.extract_tags(instance.get("Tags"))

            if not tracker.mark(options, arn, instance.get("LaunchTime"), tags):
                continue

            logger.warning(f"{arn}: terminating instance")
            if not options.dry_run:
                to_delete.append((arn, instance_id))

        for arn, instance_id in to_delete:
            try:
                await aws.call("ec2", "terminate_instances", InstanceIds=[instance_id])
            except AWSAPIError as e:
                logger.warning(f"{arn}: terminate failed: {e}")

    async def list_all(self, options: Options, aws: AWSClient) -> ResourceTracker:
        try:
            instances = await self._list_instances(aws)
        except AWSAPIError as e:
            raise AWSAPIError(
                f"couldn't list EC2 instances for {options.account!r} in {options.region!r}: {e}",
                e.error_code,
            ) from e

        return self.seeded_tracker(
            self.instance_arn(options, instance["InstanceId"]) for instance in instances
        )
