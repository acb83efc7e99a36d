# Copyright (c) 2025-2026 OptimNow. All Rights Reserved.
# Licensed under the Apache License, Version 2.0.
# See LICENSE file in the project root for full license information.

"""
Command-line entry point for the resource janitor.

Usage:
    resource-janitor --path s3://bucket/janitor.json --ttl 24h
    resource-janitor --path s3://bucket/janitor.json --include-tags team=ci --dry-run
    resource-janitor --list

Every flag falls back to the matching environment setting (see config.py).
"""

import argparse
import asyncio
import logging
import sys
from datetime import timedelta

import boto3
from pydantic import ValidationError

from .clients.aws_client import AWSAPIError, AWSClient
from .config import Settings, get_settings, split_patterns
from .models import Options, S3Path, TagMatcher
from .scanners import REGISTERED_SCANNERS, ResourceScanner, get_scanners
from .services import JanitorService, S3StateStore, ScanFailedError, StateStoreError
from .utils.cloudwatch_logger import configure_cloudwatch_logging
from .utils.duration import parse_duration
from .utils.logging_config import configure_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_RUN_FAILED = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="resource-janitor",
        description="Delete AWS resources that outlive a TTL, honoring tag policy.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--path",
        help="s3://bucket/key of the tracker state object (JANITOR_STATE_PATH)",
    )
    parser.add_argument(
        "--ttl",
        help="Maximum resource age, e.g. 24h, 90m, 1h30m (JANITOR_TTL, default 24h)",
    )
    parser.add_argument("--region", help="AWS region to clean (AWS_REGION)")
    parser.add_argument(
        "--include-tags",
        action="append",
        default=[],
        metavar="PATTERN",
        help="key or key=value a resource must carry; repeatable, all must match",
    )
    parser.add_argument(
        "--exclude-tags",
        action="append",
        default=[],
        metavar="PATTERN",
        help="key or key=value that protects a resource; repeatable, any matches",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Report deletion candidates without deleting them",
    )
    parser.add_argument(
        "--scanner",
        action="append",
        default=[],
        choices=[scanner.name for scanner in REGISTERED_SCANNERS],
        help="Only run the named scanner; repeatable (default: all)",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print every resource key the scanners can see and exit",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (LOG_LEVEL)",
    )
    return parser


def _patterns(cli_values: list[str], fallback: list[str]) -> list[str]:
    patterns = [p for value in cli_values for p in split_patterns(value)]
    return patterns or fallback


async def _run(
    args: argparse.Namespace,
    config: Settings,
    region: str,
    ttl: timedelta,
    include_tags: TagMatcher,
    exclude_tags: TagMatcher,
    scanners: list[ResourceScanner],
    state_path: S3Path | None,
) -> int:
    session = boto3.Session(region_name=region)
    aws = AWSClient(region=region, session=session)

    try:
        account = await aws.get_account_id()
        options = Options(
            account=account,
            region=region,
            session=session,
            include_tags=include_tags,
            exclude_tags=exclude_tags,
            dry_run=config.dry_run if args.dry_run is None else args.dry_run,
        )

        store = S3StateStore(state_path, session=session) if state_path else None
        service = JanitorService(store, scanners, max_concurrency=config.max_concurrent_scanners)

        if args.list:
            for key in await service.list_all(options, aws):
                print(key)
            return EXIT_OK

        await service.run(options, aws, ttl)
    except (AWSAPIError, StateStoreError, ScanFailedError) as e:
        logger.error(f"Janitor run failed: {e}")
        return EXIT_RUN_FAILED

    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, configure logging and run one janitor pass."""
    args = build_parser().parse_args(argv)

    try:
        config = get_settings()
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    region = args.region or config.aws_region
    configure_logging(args.log_level or config.log_level)
    if config.cloudwatch_enabled:
        configure_cloudwatch_logging(
            log_group=config.cloudwatch_log_group,
            log_stream=config.cloudwatch_log_stream,
            region=region,
        )

    try:
        ttl = parse_duration(args.ttl) if args.ttl else config.ttl
        include_tags = TagMatcher.for_tags(_patterns(args.include_tags, config.include_tag_patterns))
        exclude_tags = TagMatcher.for_tags(_patterns(args.exclude_tags, config.exclude_tag_patterns))
        scanners = get_scanners(args.scanner)

        raw_path = args.path or config.state_path
        if not raw_path and not args.list:
            raise ValueError("--path (or JANITOR_STATE_PATH) is required")
        state_path = S3Path.parse(raw_path) if raw_path else None
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_CONFIG_ERROR

    return asyncio.run(
        _run(args, config, region, ttl, include_tags, exclude_tags, scanners, state_path)
    )


if __name__ == "__main__":
    sys.exit(main())
