"""
DynamoDB access layer for cache items.

CacheStoreClient translates CacheItems to and from DynamoDB low-level
attribute maps and performs the single and batched reads, writes and
deletes. Keys are validated (and prefixed) before any request goes out.

Failure policy:
- Reads raise StoreUnavailableError wrapping the botocore error.
- Writes and deletes log a warning and return False.
- Partial batch reads never raise; unserved keys come back as misses.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Protocol, Sequence

from botocore.exceptions import BotoCoreError, ClientError

from dyncache.cache.codec import PickleCodec, ValueCodec
from dyncache.cache.converter import CacheItemConverterRegistry, DefaultCacheItemConverter
from dyncache.cache.item import CacheItem
from dyncache.cache.reconcile import KeyStatus, dedupe_keys, reconcile_batch_get
from dyncache.cache.schema import TableSchema
from dyncache.exceptions import InvalidArgumentError, StoreUnavailableError
from dyncache.logging import get_logger, log_context
from dyncache.types import RESERVED_CHARACTERS, AttributeMap, Clock, utc_now

logger = get_logger(__name__)

STORE_ERRORS = (ClientError, BotoCoreError)

# DynamoDB request limits
MAX_BATCH_GET_SIZE = 100
MAX_BATCH_WRITE_SIZE = 25


class DynamoDbClient(Protocol):
    """Subset of the boto3 low-level DynamoDB client used by the cache."""

    def get_item(self, **kwargs: Any) -> dict[str, Any]: ...

    def batch_get_item(self, **kwargs: Any) -> dict[str, Any]: ...

    def put_item(self, **kwargs: Any) -> dict[str, Any]: ...

    def delete_item(self, **kwargs: Any) -> dict[str, Any]: ...

    def batch_write_item(self, **kwargs: Any) -> dict[str, Any]: ...


def _chunks(values: Sequence[str], size: int) -> Iterator[Sequence[str]]:
    for start in range(0, len(values), size):
        yield values[start:start + size]


def _error_code(error: Exception) -> str:
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code", "Unknown")
    return type(error).__name__


def _acknowledged(response: dict[str, Any]) -> bool:
    status = response.get("ResponseMetadata", {}).get("HTTPStatusCode", 200)
    return 200 <= status < 300


class CacheStoreClient:
    """Reads and writes CacheItems against one DynamoDB table."""

    def __init__(
        self,
        client: DynamoDbClient,
        schema: TableSchema,
        codec: ValueCodec | None = None,
        converters: CacheItemConverterRegistry | None = None,
        key_prefix: str | None = None,
        clock: Clock | None = None,
        batch_get_size: int = MAX_BATCH_GET_SIZE,
        batch_write_size: int = MAX_BATCH_WRITE_SIZE,
    ) -> None:
        """Initialize the store client.

        Args:
            client: boto3 DynamoDB client (or compatible object).
            schema: Table name and attribute names.
            codec: Codec used for items built from store records.
            converters: Registry normalizing items passed to save().
            key_prefix: Prepended to every key sent to the store.
            clock: Time source handed to created items.
            batch_get_size: Keys per BatchGetItem request (max 100).
            batch_write_size: Keys per BatchWriteItem request (max 25).
        """
        if not 1 <= batch_get_size <= MAX_BATCH_GET_SIZE:
            raise ValueError(f"batch_get_size must be within 1..{MAX_BATCH_GET_SIZE}")
        if not 1 <= batch_write_size <= MAX_BATCH_WRITE_SIZE:
            raise ValueError(f"batch_write_size must be within 1..{MAX_BATCH_WRITE_SIZE}")

        self.client = client
        self.schema = schema
        self.codec = codec or PickleCodec()
        self.clock = clock or utc_now
        self.converters = converters or CacheItemConverterRegistry(
            DefaultCacheItemConverter(self.codec, self.clock)
        )
        self.key_prefix = key_prefix or None
        self.batch_get_size = batch_get_size
        self.batch_write_size = batch_write_size

    @property
    def table_name(self) -> str:
        return self.schema.table_name

    # Keys

    def stored_key(self, key: Any) -> str:
        """Prefix and validate a caller key.

        Returns:
            The key as stored in the table.

        Raises:
            InvalidArgumentError: If the key is not a non-empty string or
                contains a reserved character once prefixed.
        """
        if not isinstance(key, str):
            raise InvalidArgumentError(
                "The key must be a string",
                context={"type": type(key).__name__},
            )
        if key == "":
            raise InvalidArgumentError("The key must not be empty")

        stored = f"{self.key_prefix}{key}" if self.key_prefix else key
        if any(ch in RESERVED_CHARACTERS for ch in stored):
            raise InvalidArgumentError(
                f"The key '{stored}' cannot contain any of the reserved characters: "
                f"'{RESERVED_CHARACTERS}'",
                context={"key": stored},
            )
        return stored

    def caller_key(self, stored: str) -> str:
        """Strip the prefix from a key read back from the store."""
        if self.key_prefix and stored.startswith(self.key_prefix):
            return stored[len(self.key_prefix):]
        return stored

    # Items

    def convert(self, item: Any) -> CacheItem:
        """Normalize any cache item to a CacheItem."""
        return self.converters.convert(item)

    def new_item(self, key: str) -> CacheItem:
        """Blank miss item for a caller key."""
        return CacheItem(key, False, None, None, self.codec, self.clock)

    def _item_from_record(self, key: str, record: AttributeMap) -> CacheItem:
        raw = self.schema.record_value(record)
        if raw is None:
            return self.new_item(key)
        return CacheItem.from_raw(
            key,
            raw,
            self.schema.record_expiration(record),
            self.codec,
            self.clock,
        )

    # Reads

    def get(self, key: str) -> CacheItem:
        """Strongly consistent read of one key.

        Raises:
            InvalidArgumentError: On an invalid key.
            StoreUnavailableError: If the store call fails.
        """
        stored = self.stored_key(key)

        with log_context(table=self.table_name, operation="GetItem"):
            try:
                response = self.client.get_item(
                    TableName=self.table_name,
                    Key=self.schema.key_attributes(stored),
                    ConsistentRead=True,
                )
            except STORE_ERRORS as e:
                raise StoreUnavailableError(
                    f"Failed to read cache key {key!r}",
                    context={
                        "table": self.table_name,
                        "operation": "GetItem",
                        "error_code": _error_code(e),
                    },
                ) from e

            record = response.get("Item") or {}
            logger.debug("Read cache key", key=stored, found=bool(record))

        return self._item_from_record(key, record)

    def get_many(self, keys: Iterable[str]) -> list[CacheItem]:
        """Batch read; one item per unique key, in first-occurrence order.

        Every key is validated before any request. Keys the store leaves
        unprocessed come back as misses and are not retried here.

        Raises:
            InvalidArgumentError: If any key is invalid.
            StoreUnavailableError: If a store call fails.
        """
        stored_keys = dedupe_keys([self.stored_key(key) for key in keys])

        items: list[CacheItem] = []
        for chunk in _chunks(stored_keys, self.batch_get_size):
            items.extend(self._get_chunk(chunk))
        return items

    def _get_chunk(self, stored_keys: Sequence[str]) -> list[CacheItem]:
        with log_context(table=self.table_name, operation="BatchGetItem"):
            try:
                response = self.client.batch_get_item(
                    RequestItems={
                        self.table_name: {
                            "Keys": [self.schema.key_attributes(k) for k in stored_keys],
                        }
                    }
                )
            except STORE_ERRORS as e:
                raise StoreUnavailableError(
                    "Failed to batch read cache keys",
                    context={
                        "table": self.table_name,
                        "operation": "BatchGetItem",
                        "keys": len(stored_keys),
                        "error_code": _error_code(e),
                    },
                ) from e

            served: dict[str, AttributeMap] = {}
            for record in response.get("Responses", {}).get(self.table_name, []):
                record_key = self.schema.record_key(record)
                if record_key is not None:
                    served[record_key] = record

            unprocessed_entry = response.get("UnprocessedKeys", {}).get(self.table_name, {})
            unprocessed = [
                record_key
                for record_key in (
                    self.schema.record_key(k) for k in unprocessed_entry.get("Keys", [])
                )
                if record_key is not None
            ]

            outcomes = reconcile_batch_get(stored_keys, served, unprocessed)

            if unprocessed:
                logger.warning(
                    "Store left keys unprocessed, returning them as misses",
                    unprocessed=len(unprocessed),
                    requested=len(stored_keys),
                )
            logger.debug("Batch read cache keys", requested=len(stored_keys), served=len(served))

        items: list[CacheItem] = []
        for outcome in outcomes:
            key = self.caller_key(outcome.key)
            if outcome.status is KeyStatus.SERVED and outcome.record is not None:
                items.append(self._item_from_record(key, outcome.record))
            else:
                items.append(self.new_item(key))
        return items

    # Writes

    def save(self, item: Any) -> bool:
        """Write one item; True if the store acknowledged the write.

        Raises:
            InvalidArgumentError: On an invalid key.
            ConfigurationError: If no converter supports the item.
        """
        item = self.convert(item)
        stored = self.stored_key(item.key)
        record = self.schema.to_record(stored, item.raw_value, item.expiration)

        with log_context(table=self.table_name, operation="PutItem"):
            try:
                response = self.client.put_item(TableName=self.table_name, Item=record)
            except STORE_ERRORS as e:
                logger.warning("Failed to write cache key", key=stored, error_code=_error_code(e))
                return False

            ok = _acknowledged(response)
            logger.debug("Wrote cache key", key=stored, ok=ok, ttl=self.schema.ttl_field in record)
        return ok

    def delete(self, key: str) -> bool:
        """Delete one key; True only if a record existed.

        A failed call also returns False.
        """
        stored = self.stored_key(key)

        with log_context(table=self.table_name, operation="DeleteItem"):
            try:
                response = self.client.delete_item(
                    TableName=self.table_name,
                    Key=self.schema.key_attributes(stored),
                    ReturnValues="ALL_OLD",
                )
            except STORE_ERRORS as e:
                logger.warning("Failed to delete cache key", key=stored, error_code=_error_code(e))
                return False

            existed = bool(response.get("Attributes"))
            logger.debug("Deleted cache key", key=stored, existed=existed)
        return existed

    def delete_many(self, keys: Iterable[str]) -> bool:
        """Batch delete; True if every request completed.

        Whether individual keys existed does not affect the result, and
        deletes left unprocessed by the store are only logged.
        """
        stored_keys = dedupe_keys([self.stored_key(key) for key in keys])

        with log_context(table=self.table_name, operation="BatchWriteItem"):
            for chunk in _chunks(stored_keys, self.batch_write_size):
                try:
                    response = self.client.batch_write_item(
                        RequestItems={
                            self.table_name: [
                                {"DeleteRequest": {"Key": self.schema.key_attributes(k)}}
                                for k in chunk
                            ]
                        }
                    )
                except STORE_ERRORS as e:
                    logger.warning(
                        "Failed to batch delete cache keys",
                        keys=len(chunk),
                        error_code=_error_code(e),
                    )
                    return False

                unprocessed = response.get("UnprocessedItems", {}).get(self.table_name, [])
                if unprocessed:
                    logger.warning(
                        "Store left deletes unprocessed",
                        unprocessed=len(unprocessed),
                        requested=len(chunk),
                    )
                logger.debug("Batch deleted cache keys", keys=len(chunk))
        return True
