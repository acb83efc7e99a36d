# Copyright (c) 2025-2026 OptimNow. All Rights Reserved.
# Licensed under the Apache License, Version 2.0.
# See LICENSE file in the project root for full license information.

"""CloudFormation stack scanner."""

import logging
from dataclasses import dataclass

from ..clients.aws_client import AWSAPIError, AWSClient
from ..models import Options, Tag
from ..services.resource_tracker import ResourceTracker
from ..utils.arn_utils import build_arn
from .base import Marker, ResourceScanner

logger = logging.getLogger(__name__)

# Stacks already gone or on their way out
SKIPPED_STATUSES = frozenset(["DELETE_COMPLETE", "DELETE_IN_PROGRESS"])


@dataclass(frozen=True)
class CloudFormationStack:
    account: str
    region: str
    id: str
    name: str

    @property
    def arn(self) -> str:
        return build_arn("cloudformation", self.region, self.account, f"stack/{self.id}")

    @property
    def resource_key(self) -> str:
        return self.name


class CloudFormationStacks(ResourceScanner):
    """Deletes CloudFormation stacks that outlive the TTL."""

    name = "cloudformation-stacks"

    async def _list_stacks(self, options: Options, aws: AWSClient) -> list[tuple[CloudFormationStack, dict]]:
        summaries = await aws.paginate("cloudformation", "list_stacks", "StackSummaries")
        stacks = []
        for summary in summaries:
            if summary.get("StackStatus") in SKIPPED_STATUSES:
                continue
            stack = CloudFormationStack(
                account=options.account,
                region=options.region,
                id=summary.get("StackId", ""),
                name=summary.get("StackName", ""),
            )
            stacks.append((stack, summary))
        return stacks

    async def _fetch_tags(self, aws: AWSClient, stack: CloudFormationStack) -> list[Tag]:
        described = await aws.paginate(
            "cloudformation", "describe_stacks", "Stacks", StackName=stack.id
        )
        tags: list[Tag] = []
        for item in described:
            if item.get("StackId") != stack.id:
                logger.error(f"unexpected stack id in DescribeStacks output: {item.get('StackId')}")
                continue
            tags.extend(aws.extract_tags(item.get("Tags")))
        return tags

    async def mark_and_sweep(self, options: Options, tracker: Marker, aws: AWSClient) -> None:
        # Deletion is deferred until the whole list has been read
        to_delete: list[CloudFormationStack] = []

        for stack, summary in await self._list_stacks(options, aws):
            try:
                tags = await self._fetch_tags(aws, stack)
            except AWSAPIError as e:
                logger.warning(f"{stack.arn}: failed to fetch tags: {e}")
                continue

            if not tracker.mark(options, stack.resource_key, summary.get("CreationTime"), tags):
                continue

            logger.warning(f"{stack.arn}: deleting stack {stack.name}")
            if not options.dry_run:
                to_delete.append(stack)

        for stack in to_delete:
            try:
                await aws.call("cloudformation", "delete_stack", StackName=stack.name)
            except AWSAPIError as e:
                logger.warning(f"{stack.arn}: delete failed: {e}")

    async def list_all(self, options: Options, aws: AWSClient) -> ResourceTracker:
        try:
            stacks = await self._list_stacks(options, aws)
        except AWSAPIError as e:
            raise AWSAPIError(
                f"couldn't list cloud formation stacks for {options.account!r} in {options.region!r}: {e}",
                e.error_code,
            ) from e

        return self.seeded_tracker(stack.resource_key for stack, _ in stacks)
