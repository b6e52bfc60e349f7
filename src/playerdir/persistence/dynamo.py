"""DynamoDB-backed player table built on boto3."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import BotoCoreError, ClientError

from playerdir.errors import ConditionFailed, StorageError
from playerdir.persistence import PRIMARY_KEY


logger = logging.getLogger("uvicorn.error")

_CONDITION_FAILED = "ConditionalCheckFailedException"


def _translate(exc: ClientError | BotoCoreError) -> StorageError:
    if isinstance(exc, ClientError):
        code = exc.response.get("Error", {}).get("Code")
        if code == _CONDITION_FAILED:
            return ConditionFailed(str(exc))
    return StorageError(str(exc))


class DynamoPlayerTable:
    """Adapter over a boto3 ``Table`` resource.

    A single DynamoDB put cannot check another item's email, so guarded puts
    behave like plain upserts here.
    """

    def __init__(self, table: Any):
        self._table = table

    @classmethod
    def from_name(cls, table_name: str, region: str | None = None) -> "DynamoPlayerTable":
        resource = boto3.resource("dynamodb", region_name=region)
        return cls(resource.Table(table_name))

    def put(self, item: Mapping[str, Any], *, unique_email: bool = False) -> None:
        if unique_email:
            logger.debug("DynamoDB table cannot guard email uniqueness; writing %s", item.get(PRIMARY_KEY))
        try:
            self._table.put_item(Item=dict(item))
        except (ClientError, BotoCoreError) as exc:
            raise _translate(exc) from exc

    def update_set(self, key: str, attribute: str, value: Any) -> dict:
        try:
            response = self._table.update_item(
                Key={PRIMARY_KEY: key},
                UpdateExpression="SET #attr = :value",
                ExpressionAttributeNames={"#attr": attribute},
                ExpressionAttributeValues={":value": value},
                ConditionExpression=Attr(PRIMARY_KEY).exists(),
                ReturnValues="ALL_NEW",
            )
        except (ClientError, BotoCoreError) as exc:
            raise _translate(exc) from exc
        return dict(response.get("Attributes", {}))

    def scan_all(self) -> List[dict]:
        return self._paginate(self._table.scan)

    def query_index(self, index_name: str, key_name: str, key_value: Any) -> List[dict]:
        return self._paginate(
            self._table.query,
            IndexName=index_name,
            KeyConditionExpression=Key(key_name).eq(key_value),
        )

    def _paginate(self, operation, **kwargs: Any) -> List[dict]:
        items: List[dict] = []
        try:
            while True:
                response = operation(**kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as exc:
            raise _translate(exc) from exc
        return items
