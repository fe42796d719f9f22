"""Unit tests for the logging middleware."""

import json
import unittest
from unittest.mock import MagicMock, patch

from src.engine.record_store import RecordStore
from src.middleware.logging import describe_request, logging_middleware


class TestDescribeRequest(unittest.TestCase):
    """Test cases for describe_request."""

    def test_post_operation(self):
        """Test that the operation is read from a JSON body."""
        event = {"routeKey": "POST /users", "body": json.dumps({"operation": "get"})}

        self.assertEqual(
            {"route": "POST /users", "operation": "get"}, describe_request(event)
        )

    def test_without_usable_body(self):
        """Test that missing, invalid or encoded bodies yield no operation."""
        for event in [
            {"routeKey": "GET /users"},
            {"routeKey": "POST /users", "body": "{not json"},
            {"routeKey": "POST /users", "body": "[1]"},
            {"routeKey": "POST /users", "body": "eyJ9", "isBase64Encoded": True},
        ]:
            self.assertIsNone(describe_request(event)["operation"])


class TestLoggingMiddleware(unittest.TestCase):
    """Test cases for logging_middleware."""

    def setUp(self):
        """Set up test fixtures."""
        self.logger_patch = patch("src.middleware.logging.logger")
        self.mock_logger = self.logger_patch.start()

        self.record_store = RecordStore()
        self.record_store.put("u1", "PROFILE", {"name": "Ann"})

        self.context = MagicMock()
        self.context.function_name = "single-table-store"
        self.context.memory_limit_in_mb = 128
        self.context.invoked_function_arn = "arn:aws:lambda:eu-west-1:123:function:store"
        self.context.aws_request_id = "request-1"

        self.event = {
            "routeKey": "POST /users",
            "body": json.dumps({"operation": "delete", "userId": "u1", "sk": "PROFILE"}),
        }

    def tearDown(self):
        """Tear down test fixtures."""
        self.logger_patch.stop()

    def test_logs_context_operation_and_record_counts(self):
        """Test that context keys, the operation and store size are logged."""
        # Arrange
        @logging_middleware(record_store=self.record_store)
        def handler(event, context):
            self.record_store.delete("u1", "PROFILE")
            return {"statusCode": 200}

        # Act
        response = handler(self.event, self.context)

        # Assert
        self.assertEqual({"statusCode": 200}, response)
        appended = {}
        for call in self.mock_logger.append_keys.call_args_list:
            appended.update(call.kwargs)
        self.assertEqual("request-1", appended["function_request_id"])
        self.assertEqual("delete", appended["operation"])

        extras = [call.kwargs["extra"] for call in self.mock_logger.info.call_args_list]
        self.assertEqual(1, extras[0]["record_count"])
        self.assertEqual(0, extras[-1]["record_count"])
        self.assertEqual(200, extras[-1]["status_code"])
        self.mock_logger.remove_keys.assert_called_once_with(["route", "operation"])

    def test_reraises_handler_errors(self):
        """Test that handler exceptions are logged and re-raised."""
        # Arrange
        @logging_middleware
        def handler(event, context):
            raise RuntimeError("boom")

        # Act & Assert
        with self.assertRaises(RuntimeError):
            handler(self.event, self.context)
        self.mock_logger.exception.assert_called_once()
        self.mock_logger.remove_keys.assert_called_once()


if __name__ == "__main__":
    unittest.main()
