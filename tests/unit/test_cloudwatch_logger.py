"""Unit tests for CloudWatch logging integration."""

import logging
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, NoCredentialsError

from resource_janitor.utils.cloudwatch_logger import (
    CloudWatchHandler,
    configure_cloudwatch_logging,
    default_log_stream,
)
from resource_janitor.utils.logging_config import configure_logging


class TestCloudWatchHandler:
    """Tests for CloudWatchHandler class."""

    @patch("resource_janitor.utils.cloudwatch_logger.boto3.client")
    def test_handler_initialization(self, mock_boto_client):
        """Test CloudWatchHandler initialization."""
        handler = CloudWatchHandler(
            log_group="/test/group",
            log_stream="test-stream",
            region="eu-west-1",
        )

        assert handler.log_group == "/test/group"
        assert handler.log_stream == "test-stream"
        assert handler.region == "eu-west-1"
        mock_boto_client.assert_called_once_with("logs", region_name="eu-west-1")

    @patch("resource_janitor.utils.cloudwatch_logger.boto3.client")
    def test_handler_creates_log_group_and_stream(self, mock_boto_client):
        """Test that handler creates log group and stream on initialization."""
        mock_client = MagicMock()
        mock_boto_client.return_value = mock_client

        CloudWatchHandler(log_group="/test/group", log_stream="test-stream")

        mock_client.create_log_group.assert_called_once_with(logGroupName="/test/group")
        mock_client.create_log_stream.assert_called_once_with(
            logGroupName="/test/group",
            logStreamName="test-stream",
        )

    @patch("resource_janitor.utils.cloudwatch_logger.boto3.client")
    def test_handler_handles_existing_log_group(self, mock_boto_client):
        """Existing group and stream are not errors."""
        mock_client = MagicMock()
        mock_boto_client.return_value = mock_client
        exists = ClientError({"Error": {"Code": "ResourceAlreadyExistsException"}}, "Create")
        mock_client.create_log_group.side_effect = exists
        mock_client.create_log_stream.side_effect = exists

        handler = CloudWatchHandler(log_group="/test/group", log_stream="test-stream")

        assert handler is not None

    @patch("resource_janitor.utils.cloudwatch_logger.boto3.client")
    def test_handler_propagates_other_setup_errors(self, mock_boto_client):
        mock_client = MagicMock()
        mock_boto_client.return_value = mock_client
        mock_client.create_log_group.side_effect = ClientError(
            {"Error": {"Code": "AccessDeniedException"}}, "CreateLogGroup"
        )

        with pytest.raises(ClientError):
            CloudWatchHandler(log_group="/test/group", log_stream="test-stream")

    @patch("resource_janitor.utils.cloudwatch_logger.boto3.client")
    def test_handler_emits_log_record(self, mock_boto_client):
        """Test that handler emits log records to CloudWatch."""
        mock_client = MagicMock()
        mock_boto_client.return_value = mock_client
        handler = CloudWatchHandler(log_group="/test/group", log_stream="test-stream")
        handler.setFormatter(logging.Formatter("%(message)s"))

        record = logging.LogRecord(
            name="test", level=logging.WARNING, pathname="", lineno=0,
            msg="2 resources swept", args=(), exc_info=None,
        )
        handler.emit(record)

        kwargs = mock_client.put_log_events.call_args.kwargs
        assert kwargs["logGroupName"] == "/test/group"
        assert kwargs["logStreamName"] == "test-stream"
        assert kwargs["logEvents"][0]["message"] == "2 resources swept"
        assert kwargs["logEvents"][0]["timestamp"] == int(record.created * 1000)

    @patch("resource_janitor.utils.cloudwatch_logger.boto3.client")
    def test_emit_failure_does_not_raise(self, mock_boto_client):
        mock_client = MagicMock()
        mock_boto_client.return_value = mock_client
        mock_client.put_log_events.side_effect = ClientError(
            {"Error": {"Code": "ThrottlingException"}}, "PutLogEvents"
        )
        handler = CloudWatchHandler(log_group="/test/group", log_stream="test-stream")

        record = logging.LogRecord("test", logging.INFO, "", 0, "msg", (), None)
        with patch.object(handler, "handleError") as handle_error:
            handler.emit(record)

        handle_error.assert_called_once_with(record)


class TestConfigureCloudWatchLogging:
    """Tests for configure_cloudwatch_logging."""

    @pytest.fixture(autouse=True)
    def restore_root_handlers(self):
        root = logging.getLogger()
        handlers = list(root.handlers)
        yield
        root.handlers = handlers

    @patch("resource_janitor.utils.cloudwatch_logger.boto3.client")
    def test_attaches_handler_to_root_logger(self, mock_boto_client):
        handler = configure_cloudwatch_logging(
            log_group="/resource-janitor", log_stream="run-1", region="us-east-1"
        )

        assert handler in logging.getLogger().handlers
        assert handler.log_stream == "run-1"

    @patch("resource_janitor.utils.cloudwatch_logger.boto3.client")
    def test_default_stream_per_run(self, mock_boto_client):
        handler = configure_cloudwatch_logging(log_group="/resource-janitor")

        assert handler.log_stream.startswith("janitor-")

    @patch("resource_janitor.utils.cloudwatch_logger.boto3.client")
    def test_setup_failure_returns_none(self, mock_boto_client, capsys):
        mock_boto_client.return_value.create_log_group.side_effect = NoCredentialsError()

        handler = configure_cloudwatch_logging(log_group="/resource-janitor")

        assert handler is None
        assert "Failed to configure CloudWatch logging" in capsys.readouterr().err


def test_default_log_stream_format():
    stream = default_log_stream()

    assert stream.startswith("janitor-")
    assert stream.endswith("Z")
    assert len(stream) == len("janitor-20250101T120000Z")


def test_configure_logging_quiets_boto():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    try:
        configure_logging("debug")

        assert root.level == logging.DEBUG
        assert logging.getLogger("botocore").level == logging.INFO
    finally:
        root.handlers = handlers
        root.setLevel(level)
