# Copyright (c) 2025-2026 OptimNow. All Rights Reserved.
# Licensed under the Apache License, Version 2.0.
# See LICENSE file in the project root for full license information.

"""ARN construction helpers shared by the scanners."""


def build_arn(
    service: str,
    region: str,
    account: str,
    resource: str,
    partition: str = "aws",
) -> str:
    """
    Build an ARN from its components.

    Example:
        >>> build_arn("ec2", "us-east-1", "123456789012", "instance/i-abc123")
        'arn:aws:ec2:us-east-1:123456789012:instance/i-abc123'
    """
    return f"arn:{partition}:{service}:{region}:{account}:{resource}"
