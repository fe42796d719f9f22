"""Request parsing service for JSON operation payloads."""

import json
from typing import Any, Dict, Tuple

from aws_lambda_powertools.event_handler import APIGatewayHttpResolver
from aws_lambda_powertools.logging import Logger
from pydantic import BaseModel

from ..middleware.exceptions import BadRequestError
from ..models.api.requests import OPERATION_MODELS, ListItemsQuery


class RequestParsingService:
    """Service for parsing HTTP request data."""

    def __init__(self, app: APIGatewayHttpResolver, logger: Logger):
        """Initialize request parsing service.

        Args:
            app: The API Gateway resolver instance
            logger: Logger instance
        """
        self.app = app
        self.logger = logger

    def get_json_body(self) -> Dict[str, Any]:
        """Decode the request body as a JSON object.

        Returns:
            The decoded payload

        Raises:
            BadRequestError: If the body is missing, not JSON, or not an object
        """
        if not self.app.current_event.body:
            raise BadRequestError("Request body is required")

        try:
            payload = self.app.current_event.json_body
        except (json.JSONDecodeError, TypeError, ValueError) as e:
            self.logger.warning(f"Invalid JSON body: {e}")
            raise BadRequestError("Request body must be valid JSON")

        if not isinstance(payload, dict):
            raise BadRequestError("Request body must be a JSON object")
        return payload

    def parse_operation(self, payload: Dict[str, Any]) -> Tuple[str, BaseModel]:
        """Split a payload into its operation name and validated request model.

        Args:
            payload: Decoded request body

        Returns:
            Tuple of (operation, request model)

        Raises:
            BadRequestError: If the operation is missing or unknown
            ValidationError: If the payload does not match the operation's model
        """
        data = dict(payload)
        operation = data.pop("operation", None)
        if not operation:
            raise BadRequestError("Missing required field: operation")

        model = OPERATION_MODELS.get(operation)
        if model is None:
            raise BadRequestError(
                "Invalid operation",
                details={"availableOperations": list(OPERATION_MODELS)},
            )

        self.logger.debug(
            "Parsed operation", extra={"operation": operation, "fields": sorted(data)}
        )
        return operation, model.model_validate(data)

    def parse_list_query(self) -> ListItemsQuery:
        """Validate the query string of GET /users.

        Raises:
            BadRequestError: If a sort-key query has no prefix, or a prefix
                is given without a user or a sort-key query type
        """
        params = self.app.current_event.query_string_parameters or {}
        query = ListItemsQuery.model_validate(params)
        if query.query_type == "bySort" and not query.sk_prefix:
            raise BadRequestError("Sort key prefix is required for this query")
        if query.sk_prefix and query.query_type is None and not query.user_id:
            raise BadRequestError(
                "skPrefix requires userId or queryType=bySort",
                details={"parameters": dict(params)},
            )
        return query
