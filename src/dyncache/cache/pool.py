"""
DynamoDB-backed cache pool.

DynamoDbCache exposes two surfaces over the same table:

- an item surface (get_item, get_items, save, save_deferred, commit, ...)
  working with CacheItem objects;
- a simple key/value surface (get, set, delete, get_multiple, ...)
  working with plain values.

Every read goes to the store; nothing is cached locally. Expiry is
enforced by the item's hit check and, eventually, by DynamoDB's own TTL
sweeper.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Iterable, Mapping

from dyncache.cache.client import create_dynamodb_client
from dyncache.cache.codec import PickleCodec, ValueCodec, get_codec
from dyncache.cache.converter import CacheItemConverterRegistry, DefaultCacheItemConverter
from dyncache.cache.deferred import DeferredWriteBuffer
from dyncache.cache.item import CacheItem
from dyncache.cache.schema import TableSchema
from dyncache.cache.store import (
    MAX_BATCH_GET_SIZE,
    MAX_BATCH_WRITE_SIZE,
    CacheStoreClient,
    DynamoDbClient,
)
from dyncache.config import Settings, get_settings
from dyncache.logging import setup_logging
from dyncache.types import Clock, utc_now


class DynamoDbCache:
    """Cache pool over one DynamoDB table.

    The deferred buffer is per instance; share an instance between threads
    or give each caller its own, both are safe.
    """

    def __init__(
        self,
        table_name: str,
        client: DynamoDbClient,
        primary_field: str = "id",
        ttl_field: str = "ttl",
        value_field: str = "value",
        converter: CacheItemConverterRegistry | None = None,
        codec: ValueCodec | None = None,
        prefix: str | None = None,
        clock: Clock | None = None,
        batch_get_size: int = MAX_BATCH_GET_SIZE,
        batch_write_size: int = MAX_BATCH_WRITE_SIZE,
    ) -> None:
        """Initialize the cache pool.

        Args:
            table_name: DynamoDB table holding the cache records.
            client: boto3 DynamoDB client (or compatible object).
            primary_field: Partition key attribute name.
            ttl_field: TTL attribute name (Unix seconds).
            value_field: Encoded value attribute name.
            converter: Registry used to normalize saved items.
            codec: Value codec, pickle by default.
            prefix: Prepended to every key in the table.
            clock: Time source for expiration checks.
            batch_get_size: Keys per BatchGetItem request.
            batch_write_size: Keys per BatchWriteItem request.
        """
        self.codec = codec or PickleCodec()
        self.clock = clock or utc_now
        if converter is None:
            converter = CacheItemConverterRegistry(
                DefaultCacheItemConverter(self.codec, self.clock)
            )

        self.store = CacheStoreClient(
            client,
            TableSchema(table_name, primary_field, value_field, ttl_field),
            codec=self.codec,
            converters=converter,
            key_prefix=prefix,
            clock=self.clock,
            batch_get_size=batch_get_size,
            batch_write_size=batch_write_size,
        )
        self._deferred = DeferredWriteBuffer()

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        client: DynamoDbClient | None = None,
        configure_logging: bool = False,
    ) -> DynamoDbCache:
        """Build a pool from settings.

        Args:
            settings: Cache settings; loaded from the environment if None.
            client: DynamoDB client; created with boto3 if None.
            configure_logging: Apply LOG_LEVEL / LOG_FILE from settings.

        Returns:
            A configured DynamoDbCache.
        """
        settings = settings or get_settings()
        if configure_logging:
            setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)
        if client is None:
            client = create_dynamodb_client(settings)

        return cls(
            settings.table_name,
            client,
            primary_field=settings.PRIMARY_FIELD,
            ttl_field=settings.TTL_FIELD,
            value_field=settings.VALUE_FIELD,
            codec=get_codec(settings.CODEC),
            prefix=settings.key_prefix,
            batch_get_size=settings.BATCH_GET_SIZE,
            batch_write_size=settings.BATCH_WRITE_SIZE,
        )

    # Item surface

    def create_item(self, key: str) -> CacheItem:
        """Blank miss item for key, ready to be filled and saved.

        No store call is made.

        Raises:
            InvalidArgumentError: On an invalid key.
        """
        self.store.stored_key(key)
        return self.store.new_item(key)

    def get_item(self, key: str) -> CacheItem:
        """Load one item; a miss if absent or expired."""
        return self.store.get(key)

    def get_items(self, keys: Iterable[str] = ()) -> list[CacheItem]:
        """Load one item per unique key."""
        return self.store.get_many(keys)

    def has_item(self, key: str) -> bool:
        return self.get_item(key).is_hit()

    def clear(self) -> bool:
        """Not supported; DynamoDB has no cheap way to empty a table."""
        return False

    def delete_item(self, key: str | CacheItem) -> bool:
        """Delete one key (or the key of an item); True if it existed."""
        if isinstance(key, CacheItem):
            key = key.key
        return self.store.delete(key)

    def delete_items(self, keys: Iterable[str]) -> bool:
        return self.store.delete_many(keys)

    def save(self, item: Any) -> bool:
        """Persist an item immediately."""
        return self.store.save(item)

    def save_deferred(self, item: Any) -> bool:
        """Queue an item for the next commit.

        Raises:
            ConfigurationError: If no converter supports the item.
            InvalidArgumentError: On an invalid key, before anything is queued.
        """
        converted = self.store.convert(item)
        self.store.stored_key(converted.key)
        self._deferred.append(converted)
        return True

    def commit(self) -> bool:
        """Save every deferred item; failures stay queued for the next commit."""
        return self._deferred.flush(self.store.save)

    @property
    def deferred_count(self) -> int:
        """Number of items waiting for commit."""
        return len(self._deferred)

    # Simple key/value surface

    def get(self, key: str, default: Any = None) -> Any:
        item = self.get_item(key)
        if not item.is_hit():
            return default
        return item.get()

    def set(self, key: str, value: Any, ttl: timedelta | int | None = None) -> bool:
        """Store value under key, optionally expiring after ttl."""
        item = self.create_item(key).set(value)
        if ttl is not None:
            item.expires_after(ttl)
        return self.save(item)

    def delete(self, key: str) -> bool:
        return self.delete_item(key)

    def get_multiple(self, keys: Iterable[str], default: Any = None) -> dict[str, Any]:
        """Map each unique key to its value, or default on a miss."""
        return {
            item.key: item.get() if item.is_hit() else default
            for item in self.get_items(list(keys))
        }

    def set_multiple(
        self,
        values: Mapping[str, Any],
        ttl: timedelta | int | None = None,
    ) -> bool:
        """Defer every entry, then commit.

        The commit also flushes items deferred earlier on this pool.
        """
        items = []
        for key, value in values.items():
            item = self.create_item(key).set(value)
            if ttl is not None:
                item.expires_after(ttl)
            items.append(item)

        for item in items:
            self.save_deferred(item)
        return self.commit()

    def delete_multiple(self, keys: Iterable[str]) -> bool:
        return self.delete_items(list(keys))

    def has(self, key: str) -> bool:
        return self.has_item(key)
