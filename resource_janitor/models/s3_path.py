# Copyright (c) 2025-2026 OptimNow. All Rights Reserved.
# Licensed under the Apache License, Version 2.0.
# See LICENSE file in the project root for full license information.

"""Location of the persisted tracker state."""

from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field


class S3Path(BaseModel):
    """An S3 object location, optionally pinned to a region."""

    model_config = ConfigDict(frozen=True)

    bucket: str = Field(..., min_length=1, description="S3 bucket name")
    key: str = Field(..., min_length=1, description="Object key within the bucket")
    region: str | None = Field(
        None, description="Bucket region. None means look it up from the bucket."
    )

    @classmethod
    def parse(cls, url: str, region: str | None = None) -> "S3Path":
        """
        Parse an ``s3://bucket/key`` URL.

        Args:
            url: S3 URL of the state object
            region: Optional bucket region

        Returns:
            Parsed S3Path

        Raises:
            ValueError: If the URL is not an s3 URL or lacks a bucket or key
        """
        parsed = urlparse(url or "")
        if parsed.scheme != "s3":
            raise ValueError(f"State path must be an s3:// URL, got {url!r}")
        if not parsed.netloc:
            raise ValueError(f"State path {url!r} has no bucket")

        key = parsed.path.lstrip("/")
        if not key:
            raise ValueError(f"State path {url!r} has no object key")

        return cls(bucket=parsed.netloc, key=key, region=region or None)

    def with_region(self, region: str) -> "S3Path":
        return self.model_copy(update={"region": region})

    def __str__(self) -> str:
        return f"s3://{self.bucket}/{self.key}"
