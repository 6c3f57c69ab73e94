"""
DynamoDB-backed paging capability.

DynamoDB has no native offset: pages are produced by scanning forward from
the start of the table (or index) and skipping (page - 1) * page_size items.
"""

import asyncio
from collections.abc import Callable
from decimal import Decimal
from typing import Any, Generic, TypeVar

from boto3.dynamodb.types import TypeDeserializer
from pydantic import BaseModel

from .._logging import describe_filter, logger
from ..capability import QueryFilter, SupportsPagination
from ..pagination import PageRequest, PageResult

M = TypeVar("M", bound=BaseModel)

# Filters for this source receive the Scan request kwargs and return them,
# e.g. with a FilterExpression and its attribute names/values added.
ScanFilter = Callable[[dict[str, Any]], dict[str, Any]]


def _restore_numbers(value: Any) -> Any:
    """Decimal -> int (if whole number) or float, recursively."""
    if isinstance(value, Decimal):
        if value % 1 == 0:
            return int(value)
        return float(value)
    if isinstance(value, list):
        return [_restore_numbers(v) for v in value]
    if isinstance(value, (set, frozenset)):
        # NS attributes come back as sets of Decimal
        return {_restore_numbers(v) for v in value}
    if isinstance(value, dict):
        return {k: _restore_numbers(v) for k, v in value.items()}
    return value


class DynamoTableSource(SupportsPagination[Any], Generic[M]):
    """
    Paging-capable source over a DynamoDB table or GSI, using Scan.

    Each Scan call runs in a worker thread; a cancelled fetch stops before
    the next call is issued and never returns the items gathered so far.

    Args:
        client: boto3 low-level DynamoDB client
        table_name: Table to scan
        model_cls: Optional Pydantic model each item is validated into
        index_name: Optional GSI to scan instead of the base table
        batch_size: Optional Limit passed to every Scan call

    Usage:
        source = DynamoTableSource(boto3.client("dynamodb"), "users", model_cls=User)

        def active_only(kwargs):
            return {
                **kwargs,
                "FilterExpression": "#s = :active",
                "ExpressionAttributeNames": {"#s": "status"},
                "ExpressionAttributeValues": {":active": {"S": "active"}},
            }

        page = await source.get_page(PageRequest(3, 25), filter=active_only)
    """

    def __init__(
        self,
        client: Any,
        table_name: str,
        model_cls: type[M] | None = None,
        index_name: str | None = None,
        batch_size: int | None = None,
    ) -> None:
        self.client = client
        self.table_name = table_name
        self.model_cls = model_cls
        self.index_name = index_name
        self.batch_size = batch_size
        self.entity_type = model_cls if model_cls is not None else table_name
        self._deserializer = TypeDeserializer()

    def _scan_kwargs(self, filter: QueryFilter | None) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"TableName": self.table_name}
        if self.index_name:
            kwargs["IndexName"] = self.index_name
        if self.batch_size:
            kwargs["Limit"] = self.batch_size
        if filter is not None:
            kwargs = filter(kwargs)
        return kwargs

    async def _scan(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        response: dict[str, Any] = await asyncio.to_thread(self.client.scan, **kwargs)
        return response

    def _deserialize(self, item: dict[str, Any]) -> Any:
        # DynamoDB JSON -> Python dict -> Pydantic model
        raw_data = _restore_numbers(
            {k: self._deserializer.deserialize(v) for k, v in item.items()}
        )
        if self.model_cls is None:
            return raw_data
        return self.model_cls.model_validate(raw_data)

    async def count(self, filter: QueryFilter | None = None) -> int:
        kwargs = self._scan_kwargs(filter)
        kwargs["Select"] = "COUNT"

        logger.info(
            "Counting items",
            extra={
                "table": self.table_name,
                "index": self.index_name,
                "operation": "count",
                "filter": describe_filter(filter),
            },
        )

        total = 0
        while True:
            response = await self._scan(kwargs)
            total += response.get("Count", 0)
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return total
            kwargs["ExclusiveStartKey"] = last_key

    async def get_page(
        self, page_request: PageRequest, filter: QueryFilter | None = None
    ) -> PageResult[Any]:
        kwargs = self._scan_kwargs(filter)
        to_skip = page_request.offset
        items: list[Any] = []
        calls = 0

        logger.info(
            "Scanning for page",
            extra={
                "table": self.table_name,
                "index": self.index_name,
                "operation": "get_page",
                "page": page_request.page,
                "page_size": page_request.page_size,
                "filter": describe_filter(filter),
            },
        )

        while len(items) < page_request.page_size:
            response = await self._scan(kwargs)
            calls += 1
            batch = response.get("Items", [])

            if to_skip >= len(batch):
                to_skip -= len(batch)
            else:
                wanted = page_request.page_size - len(items)
                items.extend(self._deserialize(raw) for raw in batch[to_skip : to_skip + wanted])
                to_skip = 0

            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            kwargs["ExclusiveStartKey"] = last_key

        logger.debug(
            "Page scan complete",
            extra={"table": self.table_name, "scan_calls": calls, "returned": len(items)},
        )
        return PageResult(request=page_request, results=items)
