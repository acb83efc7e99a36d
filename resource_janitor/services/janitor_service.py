# Copyright (c) 2025-2026 OptimNow. All Rights Reserved.
# Licensed under the Apache License, Version 2.0.
# See LICENSE file in the project root for full license information.

"""Driver for one janitor invocation.

Loads the tracker, runs every scanner against it, completes the
mark-and-sweep pass and persists the surviving first-seen table.
"""

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from ..clients.aws_client import AWSAPIError, AWSClient
from ..models import Options, SweepReport
from ..utils.duration import format_duration
from .resource_tracker import ResourceTracker, SynchronizedTracker
from .state_store import S3StateStore

if TYPE_CHECKING:
    from ..scanners.base import ResourceScanner

logger = logging.getLogger(__name__)


class ScanFailedError(Exception):
    """Raised when one or more scanners could not complete their pass.

    The tracker is neither completed nor saved, so resources owned by the
    failed scanners are not forgotten.
    """

    def __init__(self, message: str, failed_scanners: list[str]):
        super().__init__(message)
        self.failed_scanners = failed_scanners


class JanitorService:
    """Runs scanners against a shared tracker and persists the result."""

    def __init__(
        self,
        store: S3StateStore | None,
        scanners: Sequence["ResourceScanner"],
        max_concurrency: int = 1,
    ):
        """
        Initialize the service.

        Args:
            store: Where tracker state is loaded from and saved to (None for listing only)
            scanners: Scanners to run, in order
            max_concurrency: How many scanners may run at once
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

        self._store = store
        self._scanners = list(scanners)
        self._max_concurrency = max_concurrency

    @property
    def scanners(self) -> list["ResourceScanner"]:
        return list(self._scanners)

    async def _run_scanner(
        self,
        scanner: "ResourceScanner",
        options: Options,
        tracker: SynchronizedTracker,
        aws: AWSClient,
        semaphore: asyncio.Semaphore,
    ) -> str | None:
        """Run one scanner; return its name if it failed."""
        async with semaphore:
            start = time.time()
            logger.info(f"Running {scanner.name}")
            try:
                await scanner.mark_and_sweep(options, tracker, aws)
            except AWSAPIError as e:
                logger.error(f"{scanner.name} failed: {e}")
                return scanner.name
            logger.debug(f"{scanner.name} finished in {time.time() - start:.1f}s")
            return None

    async def run(
        self,
        options: Options,
        aws: AWSClient,
        ttl: timedelta,
        clock: Callable[[], datetime] | None = None,
    ) -> SweepReport:
        """
        Execute one mark-and-sweep pass.

        Args:
            options: Per-run options (tag policy, account, region, dry run)
            aws: AWS client wrapper used by the scanners
            ttl: Maximum resource age
            clock: Optional clock for the tracker

        Returns:
            SweepReport of the pass

        Raises:
            StateStoreError: If state cannot be loaded or saved
            ScanFailedError: If any scanner raised before finishing its pass
        """
        if self._store is None:
            raise ValueError("a state store is required to run a sweep")

        loop = asyncio.get_running_loop()
        tracker: ResourceTracker = await loop.run_in_executor(
            None, lambda: self._store.load(ttl, clock=clock)
        )
        logger.info(
            f"Starting sweep of {options.account or 'unknown account'} in {options.region} "
            f"(ttl={format_duration(ttl)}, dry_run={options.dry_run}, "
            f"include={options.include_tags or '-'}, exclude={options.exclude_tags or '-'})"
        )

        synchronized = SynchronizedTracker(tracker)
        semaphore = asyncio.Semaphore(self._max_concurrency)
        # return_exceptions=True lets every scanner finish even if one raises
        results = await asyncio.gather(
            *(
                self._run_scanner(scanner, options, synchronized, aws, semaphore)
                for scanner in self._scanners
            ),
            return_exceptions=True,
        )

        failed = []
        for scanner, result in zip(self._scanners, results):
            if isinstance(result, Exception):
                logger.error(
                    f"{scanner.name} failed with unexpected error: {result!r}",
                    exc_info=result,
                )
                failed.append(scanner.name)
            elif result:
                failed.append(result)
        if failed:
            raise ScanFailedError(
                f"{len(failed)} scanner(s) failed: {', '.join(failed)}; state not updated",
                failed,
            )

        swept = tracker.mark_complete()
        report = tracker.report
        await loop.run_in_executor(None, self._store.save, tracker)

        logger.info(
            f"Sweep complete: {swept} swept, {len(report.forgotten)} forgotten, "
            f"{report.tracked} tracked"
        )
        return report

    async def list_all(self, options: Options, aws: AWSClient) -> list[str]:
        """
        List every resource key the scanners can see, without touching state.

        Returns:
            Sorted, de-duplicated resource keys
        """
        keys: set[str] = set()
        for scanner in self._scanners:
            listed = await scanner.list_all(options, aws)
            keys.update(listed.get_arns())
        return sorted(keys)
