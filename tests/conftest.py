"""
Pytest configuration and fixtures for cache tests.
"""

from __future__ import annotations

import copy
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Generator
from unittest.mock import patch

import pytest
from botocore.exceptions import ClientError

from dyncache.cache.pool import DynamoDbCache
from dyncache.config import Settings, clear_settings_cache

TABLE = "cache"


def client_error(code: str = "ProvisionedThroughputExceededException", operation: str = "PutItem") -> ClientError:
    """Build a botocore ClientError like the ones boto3 raises."""
    return ClientError({"Error": {"Code": code, "Message": "simulated failure"}}, operation)


class FakeClock:
    """Controllable clock returning aware UTC datetimes."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeDynamoDbClient:
    """In-memory stand-in for the boto3 low-level DynamoDB client.

    Records every call. Failures and unprocessed keys are scripted through
    the public attributes.
    """

    def __init__(self, table: str = TABLE, primary_field: str = "id") -> None:
        self.table = table
        self.primary_field = primary_field
        self.records: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []

        self.unprocessed_keys: set[str] = set()
        self.unprocessed_deletes: set[str] = set()
        self.failing_operations: set[str] = set()
        self.failing_put_keys: set[str] = set()
        self.put_status_code = 200

    def _pk(self, key: dict[str, Any]) -> str:
        return key[self.primary_field]["S"]

    def _call(self, operation: str, kwargs: dict[str, Any]) -> None:
        self.calls.append((operation, copy.deepcopy(kwargs)))
        if operation in self.failing_operations:
            raise client_error(operation=operation)

    def calls_to(self, operation: str) -> list[dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == operation]

    def get_item(self, **kwargs: Any) -> dict[str, Any]:
        self._call("GetItem", kwargs)
        record = self.records.get(self._pk(kwargs["Key"]))
        if record is None:
            return {}
        return {"Item": copy.deepcopy(record)}

    def batch_get_item(self, **kwargs: Any) -> dict[str, Any]:
        self._call("BatchGetItem", kwargs)
        request = kwargs["RequestItems"][self.table]
        served = []
        unprocessed = []
        for key in request["Keys"]:
            pk = self._pk(key)
            if pk in self.unprocessed_keys:
                unprocessed.append(copy.deepcopy(key))
            elif pk in self.records:
                served.append(copy.deepcopy(self.records[pk]))

        response: dict[str, Any] = {"Responses": {self.table: served}, "UnprocessedKeys": {}}
        if unprocessed:
            response["UnprocessedKeys"] = {self.table: {"Keys": unprocessed}}
        return response

    def put_item(self, **kwargs: Any) -> dict[str, Any]:
        self._call("PutItem", kwargs)
        item = kwargs["Item"]
        pk = self._pk(item)
        if pk in self.failing_put_keys:
            raise client_error(operation="PutItem")
        if self.put_status_code == 200:
            self.records[pk] = copy.deepcopy(item)
        return {"ResponseMetadata": {"HTTPStatusCode": self.put_status_code}}

    def delete_item(self, **kwargs: Any) -> dict[str, Any]:
        self._call("DeleteItem", kwargs)
        old = self.records.pop(self._pk(kwargs["Key"]), None)
        if old is None:
            return {}
        return {"Attributes": old}

    def batch_write_item(self, **kwargs: Any) -> dict[str, Any]:
        self._call("BatchWriteItem", kwargs)
        unprocessed = []
        for request in kwargs["RequestItems"][self.table]:
            pk = self._pk(request["DeleteRequest"]["Key"])
            if pk in self.unprocessed_deletes:
                unprocessed.append(copy.deepcopy(request))
                continue
            self.records.pop(pk, None)

        response: dict[str, Any] = {"UnprocessedItems": {}}
        if unprocessed:
            response["UnprocessedItems"] = {self.table: unprocessed}
        return response


class ForeignItem:
    """Third-party cache item exposing only key, get() and is_hit()."""

    def __init__(self, key: str, value: Any, hit: bool = True) -> None:
        self.key = key
        self._value = value
        self._hit = hit

    def get(self) -> Any:
        return self._value

    def is_hit(self) -> bool:
        return self._hit


@pytest.fixture
def clock() -> FakeClock:
    """Provide a fixed, controllable clock."""
    return FakeClock()


@pytest.fixture
def fake_client() -> FakeDynamoDbClient:
    """Provide an empty in-memory DynamoDB client."""
    return FakeDynamoDbClient()


@pytest.fixture
def cache(fake_client: FakeDynamoDbClient, clock: FakeClock) -> DynamoDbCache:
    """Provide a cache pool over the fake client."""
    return DynamoDbCache(TABLE, fake_client, clock=clock)


@pytest.fixture
def mock_env_vars() -> Generator[dict[str, str], None, None]:
    """Provide environment variables for a complete configuration."""
    env_vars = {
        "DYNCACHE_TABLE_NAME": "app-cache",
        "DYNCACHE_PRIMARY_FIELD": "pk",
        "DYNCACHE_VALUE_FIELD": "payload",
        "DYNCACHE_TTL_FIELD": "expires",
        "DYNCACHE_KEY_PREFIX": "app-",
        "DYNCACHE_CODEC": "json",
        "DYNCACHE_AWS_REGION": "eu-west-1",
        "DYNCACHE_BATCH_GET_SIZE": "50",
        "DYNCACHE_LOG_LEVEL": "DEBUG",
    }

    with patch.dict(os.environ, env_vars, clear=False):
        clear_settings_cache()
        yield env_vars


@pytest.fixture
def mock_settings(mock_env_vars: dict[str, str]) -> Settings:
    """Provide a Settings instance built from mock_env_vars."""
    return Settings(_env_file=None)


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Automatically reset settings cache before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
