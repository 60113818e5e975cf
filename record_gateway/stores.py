import copy
import json
import logging
from decimal import Decimal
from typing import Any, Dict, Optional, Protocol
from urllib.parse import quote

import boto3
import requests
from botocore.exceptions import ClientError

from .config import DEFAULT_KEY_FIELD, Settings
from .errors import RecordExistsError, RecordNotFoundError
from .shard_manager import HashRing
from .update_expression import UpdateSpec, apply_set_expression

log = logging.getLogger(__name__)

Record = Dict[str, Any]


class RecordStore(Protocol):
    key_field: str

    def put(self, record: Record) -> None: ...

    def put_if_absent(self, record: Record) -> None: ...

    def get(self, key: str) -> Optional[Record]: ...

    def update_existing(self, key: str, spec: UpdateSpec) -> Record: ...

    def delete(self, key: str) -> None: ...


class InMemoryRecordStore:
    def __init__(self, key_field: str = DEFAULT_KEY_FIELD):
        self.key_field = key_field
        self._records: Dict[str, Record] = {}

    def __len__(self):
        return len(self._records)

    def put(self, record: Record) -> None:
        self._records[record[self.key_field]] = copy.deepcopy(record)

    def put_if_absent(self, record: Record) -> None:
        if record[self.key_field] in self._records:
            raise RecordExistsError()
        self.put(record)

    def get(self, key: str) -> Optional[Record]:
        record = self._records.get(key)
        return copy.deepcopy(record) if record is not None else None

    def update_existing(self, key: str, spec: UpdateSpec) -> Record:
        if key not in self._records:
            raise RecordNotFoundError()
        updated = apply_set_expression(
            copy.deepcopy(self._records[key]),
            spec.expression,
            spec.attribute_names,
            spec.attribute_values,
        )
        self._records[key] = updated
        return copy.deepcopy(updated)

    def delete(self, key: str) -> None:
        self._records.pop(key, None)


def _is_conditional_failure(exc: ClientError) -> bool:
    return exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


def _to_dynamo(value: Any) -> Any:
    # boto3 rejects float; route numbers through Decimal
    return json.loads(json.dumps(value), parse_float=Decimal)


class DynamoDBRecordStore:
    def __init__(self, table_name: str, key_field: str = DEFAULT_KEY_FIELD,
                 region_name: Optional[str] = None, table: Any = None):
        self.table_name = table_name
        self.key_field = key_field
        self.region_name = region_name
        self._table = table

    @property
    def table(self):
        if self._table is None:
            log.info("Opening DynamoDB table %s", self.table_name)
            self._table = boto3.resource("dynamodb", region_name=self.region_name).Table(self.table_name)
        return self._table

    def _key(self, key: str) -> Dict[str, Any]:
        return {self.key_field: key}

    def put(self, record: Record) -> None:
        self.table.put_item(Item=_to_dynamo(record))

    def put_if_absent(self, record: Record) -> None:
        try:
            self.table.put_item(
                Item=_to_dynamo(record),
                ConditionExpression="attribute_not_exists(#pk)",
                ExpressionAttributeNames={"#pk": self.key_field},
            )
        except ClientError as exc:
            if _is_conditional_failure(exc):
                raise RecordExistsError() from exc
            raise

    def get(self, key: str) -> Optional[Record]:
        return self.table.get_item(Key=self._key(key)).get("Item")

    def update_existing(self, key: str, spec: UpdateSpec) -> Record:
        params = spec.as_params()
        params["ExpressionAttributeNames"] = {**params["ExpressionAttributeNames"], "#pk": self.key_field}
        params["ExpressionAttributeValues"] = _to_dynamo(params["ExpressionAttributeValues"])
        try:
            out = self.table.update_item(
                Key=self._key(key),
                ConditionExpression="attribute_exists(#pk)",
                ReturnValues="ALL_NEW",
                **params,
            )
        except ClientError as exc:
            if _is_conditional_failure(exc):
                raise RecordNotFoundError() from exc
            raise
        return out["Attributes"]

    def delete(self, key: str) -> None:
        self.table.delete_item(Key=self._key(key))


class ShardedRecordStore:
    """Spreads records over ``record_shard`` nodes using a consistent-hash ring."""

    def __init__(self, shard_urls, key_field: str = DEFAULT_KEY_FIELD,
                 session=None, timeout: float = 5.0):
        self.key_field = key_field
        self.ring = HashRing(shard_urls)
        self.session = session or requests.Session()
        self.timeout = timeout

    def _record_url(self, key: str) -> str:
        return f"{self.ring.node_for(key)}/records/{quote(key, safe='')}"

    def _create(self, record: Record, if_absent: bool):
        key = record[self.key_field]
        shard_url = self.ring.node_for(key)
        return self.session.post(
            f"{shard_url}/records",
            json={"key": key, "data": record, "if_absent": if_absent},
            timeout=self.timeout,
        )

    def put(self, record: Record) -> None:
        self._create(record, if_absent=False).raise_for_status()

    def put_if_absent(self, record: Record) -> None:
        resp = self._create(record, if_absent=True)
        if resp.status_code == 409:
            raise RecordExistsError()
        resp.raise_for_status()

    def get(self, key: str) -> Optional[Record]:
        resp = self.session.get(self._record_url(key), timeout=self.timeout)
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return resp.json()

    def update_existing(self, key: str, spec: UpdateSpec) -> Record:
        resp = self.session.patch(
            self._record_url(key),
            json={
                "update_expression": spec.expression,
                "attribute_names": spec.attribute_names,
                "attribute_values": spec.attribute_values,
            },
            timeout=self.timeout,
        )
        if resp.status_code == 404:
            raise RecordNotFoundError()
        resp.raise_for_status()
        return resp.json()

    def delete(self, key: str) -> None:
        self.session.delete(self._record_url(key), timeout=self.timeout).raise_for_status()


def build_store(settings: Settings) -> RecordStore:
    if settings.store_backend == "memory":
        return InMemoryRecordStore(settings.key_field)
    if settings.store_backend == "shards":
        return ShardedRecordStore(settings.shard_urls, settings.key_field, timeout=settings.request_timeout)
    return DynamoDBRecordStore(settings.table_name, settings.key_field, region_name=settings.aws_region)
