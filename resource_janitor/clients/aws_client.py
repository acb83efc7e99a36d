# Copyright (c) 2025-2026 OptimNow. All Rights Reserved.
# Licensed under the Apache License, Version 2.0.
# See LICENSE file in the project root for full license information.

"""AWS client wrapper with rate limiting and backoff."""

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..models import Tag

logger = logging.getLogger(__name__)

THROTTLING_ERROR_CODES = frozenset([
    "Throttling",
    "ThrottlingException",
    "RequestLimitExceeded",
])


class AWSAPIError(Exception):
    """Raised when AWS API calls fail."""

    def __init__(self, message: str, error_code: str = ""):
        super().__init__(message)
        self.error_code = error_code


class AWSClient:
    """
    Wrapper around boto3 clients with rate limiting and exponential backoff.

    Clients are created lazily from one boto3 Session and reused.
    Blocking boto3 calls run in the default executor so scanners can await
    them.
    """

    def __init__(
        self,
        region: str = "us-east-1",
        session: boto3.Session | None = None,
        max_retries: int = 5,
        base_delay: float = 1.0,
    ):
        """
        Initialize the wrapper.

        Args:
            region: AWS region for regional services
            session: boto3 Session to build clients from (default session if None)
            max_retries: Attempts per call when throttled
            base_delay: First backoff delay in seconds, doubled per attempt
        """
        self.region = region
        self.session = session or boto3.Session(region_name=region)
        self._config = Config(
            region_name=region,
            retries={
                'max_attempts': 3,
                'mode': 'adaptive'
            }
        )
        self._clients: dict[str, Any] = {}
        self._max_retries = max_retries
        self._base_delay = base_delay

        # Rate limiting state
        self._last_call_time: dict[str, float] = {}
        self._min_call_interval = 0.1  # 100ms between calls to same service

    def client(self, service_name: str) -> Any:
        """Get or create the boto3 client for a service."""
        if service_name not in self._clients:
            logger.debug(f"Creating {service_name} client for region {self.region}")
            self._clients[service_name] = self.session.client(service_name, config=self._config)
        return self._clients[service_name]

    async def _rate_limit(self, service_name: str) -> None:
        if service_name in self._last_call_time:
            elapsed = time.time() - self._last_call_time[service_name]
            if elapsed < self._min_call_interval:
                await asyncio.sleep(self._min_call_interval - elapsed)

        self._last_call_time[service_name] = time.time()

    async def _call_with_backoff(
        self,
        service_name: str,
        func: Callable[..., Any],
        *args,
        **kwargs
    ) -> Any:
        """
        Call AWS API with exponential backoff on rate limit errors.

        Args:
            service_name: Name of the AWS service
            func: Blocking callable to run
            *args: Positional arguments for the callable
            **kwargs: Keyword arguments for the callable

        Returns:
            Response from AWS API

        Raises:
            AWSAPIError: If the API call fails after retries
        """
        await self._rate_limit(service_name)

        for attempt in range(self._max_retries):
            try:
                # Run boto3 call in thread pool to avoid blocking
                loop = asyncio.get_running_loop()
                return await loop.run_in_executor(
                    None,
                    lambda: func(*args, **kwargs)
                )

            except ClientError as e:
                error_code = e.response.get('Error', {}).get('Code', '')

                if error_code in THROTTLING_ERROR_CODES and attempt < self._max_retries - 1:
                    delay = self._base_delay * (2 ** attempt)
                    logger.debug(f"{service_name} throttled ({error_code}), retrying in {delay}s")
                    await asyncio.sleep(delay)
                    continue

                raise AWSAPIError(f"AWS API error: {error_code} - {str(e)}", error_code) from e

            except BotoCoreError as e:
                raise AWSAPIError(f"Boto3 error: {str(e)}") from e

        raise AWSAPIError(f"Max retries exceeded for {service_name}")

    async def call(self, service_name: str, operation: str, **kwargs) -> dict[str, Any]:
        """
        Invoke one API operation.

        Args:
            service_name: AWS service (e.g., "cloudformation")
            operation: boto3 method name (e.g., "describe_stacks")
            **kwargs: Request parameters

        Returns:
            The API response
        """
        method = getattr(self.client(service_name), operation)
        return await self._call_with_backoff(service_name, method, **kwargs)

    async def paginate(
        self,
        service_name: str,
        operation: str,
        result_key: str,
        **kwargs
    ) -> list[Any]:
        """
        Collect every item of a paginated operation.

        Pages are fetched in one executor call; a failure on any page fails
        the whole listing.

        Args:
            service_name: AWS service
            operation: Paginated boto3 method name
            result_key: Key of the item list within each page
            **kwargs: Request parameters

        Returns:
            Items from all pages, in order
        """
        paginator = self.client(service_name).get_paginator(operation)
        pages = await self._call_with_backoff(
            service_name,
            lambda: list(paginator.paginate(**kwargs))
        )
        return [item for page in pages for item in page.get(result_key, [])]

    async def get_account_id(self) -> str:
        """Return the account ID of the calling identity."""
        response = await self.call("sts", "get_caller_identity")
        return response["Account"]

    @staticmethod
    def extract_tags(tag_list: list[dict[str, str]] | None) -> list[Tag]:
        """
        Convert AWS tag list format to Tag models.

        Args:
            tag_list: Tags in AWS format [{"Key": "...", "Value": "..."}]
                     or ECS format [{"key": "...", "value": "..."}]

        Returns:
            List of tags, skipping entries without a key
        """
        if not tag_list:
            return []

        tags = []
        for tag in tag_list:
            key = tag.get("Key") or tag.get("key", "")
            value = tag.get("Value") or tag.get("value", "")
            if key:
                tags.append(Tag.of(key, value))
        return tags
