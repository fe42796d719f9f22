"""Handler for item operations (POST /users).

The request body names an ``operation`` and carries its arguments. Each
operation maps onto exactly one record store call.
"""

from typing import Callable, Dict

from aws_lambda_powertools.event_handler import APIGatewayHttpResolver
from aws_lambda_powertools.logging import Logger
from pydantic import BaseModel

from ..engine.record_store import RecordStore
from ..models.api import (
    DeleteResponse,
    ItemListResponse,
    ItemResponse,
    UpdateResponse,
)
from ..repositories.store_user_item import StoreUserItemRepository
from ..services.request_parser import RequestParsingService
from ..services.user_item import UserItemService


def _create_profile(service: UserItemService, request) -> ItemResponse:
    record = service.create_profile(request)
    return ItemResponse.from_record(
        record,
        message="Profile created successfully",
        operation="Put",
        explanation="Put creates a new item or fully replaces an existing one with the same key",
    )


def _add_detail(service: UserItemService, request) -> ItemResponse:
    record = service.add_detail(request)
    return ItemResponse.from_record(
        record,
        message="Detail added successfully",
        operation="Put",
        explanation="Details share the user's partition; the DETAIL# sort key groups them",
    )


def _add_activity(service: UserItemService, request) -> ItemResponse:
    record = service.add_activity(request)
    return ItemResponse.from_record(
        record,
        message="Activity added successfully",
        operation="Put",
        explanation="Activity sort keys end with a timestamp, so a user's log reads chronologically",
    )


def _get(service: UserItemService, request) -> ItemResponse:
    record = service.get_item(request)
    return ItemResponse.from_record(
        record,
        operation="Get",
        explanation="Get retrieves a single item by its partition key and sort key",
    )


def _query_user(service: UserItemService, request) -> ItemListResponse:
    records = service.query_user(request)
    return ItemListResponse.from_records(
        records,
        operation="QueryByPartition",
        explanation="Query reads one partition in sort key order, optionally narrowed by a sort key prefix",
    )


def _query_by_sort(service: UserItemService, request) -> ItemListResponse:
    records = service.query_by_sort(request)
    return ItemListResponse.from_records(
        records,
        operation="QueryBySortPrefix",
        explanation="The secondary index finds items of every user whose sort key has the prefix",
    )


def _update(service: UserItemService, request) -> UpdateResponse:
    record, patch = service.update_item(request)
    return UpdateResponse.from_record(
        record,
        message="Item updated successfully",
        operation="Patch",
        explanation="Patch removes then sets the named fields atomically and returns the updated item",
        update={
            "set": patch.set_fields,
            "remove": sorted(patch.remove_fields),
        },
    )


def _delete(service: UserItemService, request) -> DeleteResponse:
    removed = service.delete_item(request)
    return DeleteResponse(
        message="Item deleted successfully",
        key={"userId": request.user_id, "sk": request.sk},
        removed=removed,
        operation="Delete",
        explanation="Delete removes an item by its key; deleting a missing item is not an error",
    )


OPERATION_HANDLERS: Dict[str, Callable[[UserItemService, BaseModel], BaseModel]] = {
    "createProfile": _create_profile,
    "addDetail": _add_detail,
    "addActivity": _add_activity,
    "get": _get,
    "queryUser": _query_user,
    "queryBySort": _query_by_sort,
    "update": _update,
    "delete": _delete,
}


def handle_user_operation(
    app: APIGatewayHttpResolver,
    record_store: RecordStore,
    logger: Logger,
) -> BaseModel:
    """Handle POST /users requests.

    Args:
        app: The API Gateway resolver instance
        record_store: The process-wide record store
        logger: Logger instance

    Returns:
        Response model for the requested operation

    Raises:
        BadRequestError: If the body or operation is invalid
        ValidationError: If the operation's fields are invalid
        RecordNotFoundError: If a get or update targets a missing item
        StorageError: If the store rejects the operation
    """
    # Initialize services
    parser_service = RequestParsingService(app, logger)
    item_service = UserItemService(
        StoreUserItemRepository(record_store), clock=record_store.now
    )

    # 1. Parse request content - will raise BadRequestError if invalid
    payload = parser_service.get_json_body()
    operation, request = parser_service.parse_operation(payload)

    # 2. Dispatch to the operation
    logger.info("Executing user operation", extra={"operation": operation})
    return OPERATION_HANDLERS[operation](item_service, request)
