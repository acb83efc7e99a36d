"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from resource_janitor.models import Options, Tag, TagMatcher
from resource_janitor.services.sweep_reporter import LoggingSweepReporter

ACCOUNT_ID = "123456789012"
REGION = "us-east-1"


# =============================================================================
# Environment and Configuration Fixtures
# =============================================================================

@pytest.fixture
def aws_credentials(monkeypatch):
    """Fake credentials so boto3 never reaches for real ones under moto."""
    test_vars = {
        "AWS_ACCESS_KEY_ID": "testing",
        "AWS_SECRET_ACCESS_KEY": "testing",
        "AWS_SECURITY_TOKEN": "testing",
        "AWS_SESSION_TOKEN": "testing",
        "AWS_DEFAULT_REGION": REGION,
    }
    for key, value in test_vars.items():
        monkeypatch.setenv(key, value)
    return test_vars


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove janitor settings that could leak in from the environment or a .env file."""
    for key in (
        "JANITOR_STATE_PATH",
        "STATE_PATH",
        "JANITOR_TTL",
        "TTL",
        "JANITOR_INCLUDE_TAGS",
        "JANITOR_EXCLUDE_TAGS",
        "JANITOR_DRY_RUN",
        "JANITOR_MAX_CONCURRENT_SCANNERS",
        "AWS_REGION",
        "AWS_DEFAULT_REGION",
        "LOG_LEVEL",
        "CLOUDWATCH_ENABLED",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


# =============================================================================
# Clock and Policy Fixtures
# =============================================================================

class FakeClock:
    """Manually advanced clock for tracker tests."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def reporter():
    """A reporter double that records what it was given."""
    return MagicMock(spec=LoggingSweepReporter)


@pytest.fixture
def open_policy():
    """Options that manage every resource."""
    return Options(account=ACCOUNT_ID, region=REGION)


@pytest.fixture
def ci_policy():
    """Options that only manage resources tagged team=ci and not keep."""
    return Options(
        account=ACCOUNT_ID,
        region=REGION,
        include_tags=TagMatcher.for_tags(["team=ci"]),
        exclude_tags=TagMatcher.for_tags(["keep"]),
    )


@pytest.fixture
def ci_tags():
    return [Tag(key="team", value="ci"), Tag(key="Name", value="build-1")]


# =============================================================================
# AWS Client Doubles
# =============================================================================

@pytest.fixture
def mock_aws_client():
    """AWSClient double with async paginate/call and the real tag extraction."""
    from resource_janitor.clients.aws_client import AWSClient

    client = MagicMock(spec=AWSClient)
    client.region = REGION
    client.paginate = AsyncMock(return_value=[])
    client.call = AsyncMock(return_value={})
    client.get_account_id = AsyncMock(return_value=ACCOUNT_ID)
    client.extract_tags.side_effect = AWSClient.extract_tags
    return client
