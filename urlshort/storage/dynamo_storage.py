"""
DynamoStorage – DynamoDB-backed storage for urlshort
===================================================

Single-table layout:

    short_url (S, partition key)  id (N)  original_url (S)
    "1"                           1       "https://example.com"
    "url-counter"                 -       -                      counter_value (N)

The counter shares the mapping table under the reserved key "url-counter".
"-" is not a Base62 symbol, so no issued token can collide with it.

Key Design Points
-----------------
- **Atomic counter**: `UpdateItem` with
  `SET counter_value = if_not_exists(counter_value, :floor) + :inc` and
  `ReturnValues=UPDATED_NEW` is a single read-modify-write on the server.
- **Insert-if-absent**: `PutItem` with `attribute_not_exists(short_url)`.
- **Read-your-writes**: `GetItem` and `Scan` use `ConsistentRead=True`, so a
  redirect or resubmit right after a write sees the new item.
- **Dedupe lookup**: `find_by_url` is a filtered, paginated `Scan`. A GSI on
  `original_url` would make it a `Query`; the table schema is out of our hands.
- **Errors**: botocore `ClientError` / `BotoCoreError` become `StoreError`.
  Retries and throttling back-off are left to botocore's own retry config.
"""

import contextlib
import logging
from decimal import Decimal
from typing import Any, Dict, Iterator, Optional

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from ..config import settings
from ..errors import StoreError
from ..models import UrlMapping
from .base import BaseStorage

log = logging.getLogger("urlshort.storage")

SHORT_URL = "short_url"
ID = "id"
ORIGINAL_URL = "original_url"
COUNTER_KEY = "url-counter"
COUNTER_VALUE = "counter_value"


@contextlib.contextmanager
def _aws_call(operation: str) -> Iterator[None]:
    try:
        yield
    except ClientError as exc:
        code = exc.response.get("Error", {}).get("Code", "Unknown")
        raise StoreError(f"DynamoDB {operation} failed ({code})") from exc
    except BotoCoreError as exc:
        raise StoreError(f"DynamoDB {operation} failed: {exc}") from exc


def _item_to_mapping(item: Dict[str, Any]) -> UrlMapping:
    token = item.get(SHORT_URL)
    raw_id = item.get(ID)
    if not isinstance(token, str) or not isinstance(raw_id, (int, Decimal)):
        raise StoreError(f"malformed mapping item: {item!r}")
    original_url = item.get(ORIGINAL_URL)
    if original_url is not None and not isinstance(original_url, str):
        raise StoreError(f"malformed original_url in item {token!r}")
    return UrlMapping(id=int(raw_id), token=token, original_url=original_url)


class DynamoStorage(BaseStorage):
    """DynamoDB implementation of the urlshort storage contract.

    Parameters
    ----------
    table_name : str, optional
        Defaults to settings.DYNAMO_TABLE ("url-mapping").
    region : str, optional
        Defaults to settings.DYNAMO_REGION ("us-east-1").
    table : optional
        A ready `boto3` Table resource (or a test double). Skips resource creation.
    start : int, optional
        First id issued when the counter item does not exist yet.
    """

    def __init__(
        self,
        table_name: Optional[str] = None,
        region: Optional[str] = None,
        table: Any = None,
        start: Optional[int] = None,
    ) -> None:
        if table is None:
            resource = boto3.resource("dynamodb", region_name=region or settings.DYNAMO_REGION)
            table = resource.Table(table_name or settings.DYNAMO_TABLE)
        self.table = table
        self.start = max(1, settings.COUNTER_START if start is None else start)

    def find_by_url(self, original_url: str) -> Optional[UrlMapping]:
        """Scan (all pages) for an item whose original_url equals `original_url`."""
        kwargs: Dict[str, Any] = {
            "FilterExpression": Attr(ORIGINAL_URL).eq(original_url),
            "ConsistentRead": True,
        }
        while True:
            with _aws_call("Scan"):
                resp = self.table.scan(**kwargs)
            items = resp.get("Items", [])
            if items:
                return _item_to_mapping(items[0])
            last_key = resp.get("LastEvaluatedKey")
            if not last_key:
                return None
            kwargs["ExclusiveStartKey"] = last_key

    def find_by_token(self, token: str) -> Optional[UrlMapping]:
        if token == COUNTER_KEY:
            return None
        with _aws_call("GetItem"):
            resp = self.table.get_item(Key={SHORT_URL: token}, ConsistentRead=True)
        item = resp.get("Item")
        log.debug("GetItem %s -> %s", token, "hit" if item else "miss")
        return _item_to_mapping(item) if item else None

    def next_id(self) -> int:
        with _aws_call("UpdateItem"):
            resp = self.table.update_item(
                Key={SHORT_URL: COUNTER_KEY},
                UpdateExpression=f"SET {COUNTER_VALUE} = if_not_exists({COUNTER_VALUE}, :floor) + :inc",
                ExpressionAttributeValues={":floor": self.start - 1, ":inc": 1},
                ReturnValues="UPDATED_NEW",
            )
        value = resp.get("Attributes", {}).get(COUNTER_VALUE)
        if not isinstance(value, (int, Decimal)):
            raise StoreError("failed to retrieve updated counter value")
        return int(value)

    def insert(self, ident: int, token: str, original_url: str) -> None:
        try:
            self.table.put_item(
                Item={SHORT_URL: token, ID: ident, ORIGINAL_URL: original_url},
                ConditionExpression=Attr(SHORT_URL).not_exists(),
            )
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                raise StoreError(f"token {token!r} already exists") from exc
            raise StoreError(f"DynamoDB PutItem failed: {exc}") from exc
        except BotoCoreError as exc:
            raise StoreError(f"DynamoDB PutItem failed: {exc}") from exc
        log.info("stored mapping id=%d token=%s url=%s", ident, token, original_url)
