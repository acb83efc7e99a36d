"""Per-resource-type scanners."""

from .base import Marker, ResourceScanner
from .cloudformation import CloudFormationStacks
from .ec2_instances import EC2Instances

# Stacks first: deleting a stack also removes the instances it owns
REGISTERED_SCANNERS: tuple[ResourceScanner, ...] = (
    CloudFormationStacks(),
    EC2Instances(),
)


def get_scanners(names: list[str] | None = None) -> list[ResourceScanner]:
    """
    Select registered scanners by name, keeping registration order.

    Args:
        names: Scanner names. None or empty selects every scanner.

    Returns:
        The selected scanners

    Raises:
        ValueError: If a name is not registered
    """
    if not names:
        return list(REGISTERED_SCANNERS)

    known = {scanner.name for scanner in REGISTERED_SCANNERS}
    unknown = sorted(set(names) - known)
    if unknown:
        raise ValueError(
            f"Unknown scanner(s): {', '.join(unknown)}. Known scanners: {', '.join(sorted(known))}"
        )
    return [scanner for scanner in REGISTERED_SCANNERS if scanner.name in names]


__all__ = [
    "Marker",
    "ResourceScanner",
    "CloudFormationStacks",
    "EC2Instances",
    "REGISTERED_SCANNERS",
    "get_scanners",
]
