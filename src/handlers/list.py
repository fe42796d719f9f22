"""Handler for listing items (GET /users).

Without query parameters this is a full scan. ``userId`` (optionally with
``skPrefix``) reads one partition; ``queryType=bySort`` with ``skPrefix``
reads the secondary index across partitions.
"""

from aws_lambda_powertools.event_handler import APIGatewayHttpResolver
from aws_lambda_powertools.logging import Logger

from ..engine.record_store import RecordStore
from ..models.api import ItemListResponse, QueryBySortRequest, QueryUserRequest
from ..repositories.store_user_item import StoreUserItemRepository
from ..services.request_parser import RequestParsingService
from ..services.user_item import UserItemService


def handle_list_items(
    app: APIGatewayHttpResolver,
    record_store: RecordStore,
    logger: Logger,
) -> ItemListResponse:
    """Handle GET /users requests.

    Args:
        app: The API Gateway resolver instance
        record_store: The process-wide record store
        logger: Logger instance

    Returns:
        ItemListResponse with the matching items in query order

    Raises:
        BadRequestError: If a sort-key query has no prefix
        ValidationError: If the query parameters are invalid
    """
    # Initialize services
    parser_service = RequestParsingService(app, logger)
    item_service = UserItemService(
        StoreUserItemRepository(record_store), clock=record_store.now
    )

    # 1. Work out which read the caller asked for
    query = parser_service.parse_list_query()
    parameters = query.model_dump(by_alias=True, exclude_none=True)

    # 2. Read from the store
    if query.query_type == "bySort":
        logger.info("Querying by sort key prefix", extra=parameters)
        records = item_service.query_by_sort(QueryBySortRequest(sk_prefix=query.sk_prefix))
        return ItemListResponse.from_records(
            records,
            operation="QueryBySortPrefix",
            explanation="The secondary index finds items of every user whose sort key has the prefix",
            parameters=parameters,
        )

    if query.user_id:
        logger.info("Querying user partition", extra=parameters)
        records = item_service.query_user(
            QueryUserRequest(user_id=query.user_id, sk_prefix=query.sk_prefix)
        )
        return ItemListResponse.from_records(
            records,
            operation="QueryByPartition",
            explanation="Query reads one partition in sort key order, optionally narrowed by a sort key prefix",
            parameters=parameters,
        )

    logger.info("Scanning all items")
    records = item_service.list_items()
    return ItemListResponse.from_records(
        records,
        operation="Scan",
        explanation="Scan returns every live item in the table",
        note="Scan operations read every item in the table - use sparingly in production",
    )
