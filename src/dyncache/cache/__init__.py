"""
Cache package for the DynamoDB-backed cache.

This package provides:
- Value codecs (codec.py): pickle (default) and orjson string encodings
- Cache items (item.py): key, hit flag, encoded value and expiration
- Converters (converter.py): normalize foreign items to CacheItem
- Store client (store.py): single and batched DynamoDB reads, writes, deletes
- Deferred buffer (deferred.py): queued writes flushed by commit
- Cache pool (pool.py): item and simple key/value surfaces
"""

from dyncache.cache.codec import JsonCodec, PickleCodec, ValueCodec, get_codec
from dyncache.cache.converter import (
    CacheItemConverter,
    CacheItemConverterRegistry,
    DefaultCacheItemConverter,
)
from dyncache.cache.deferred import DeferredWriteBuffer
from dyncache.cache.item import CacheItem, CacheItemLike
from dyncache.cache.pool import DynamoDbCache
from dyncache.cache.reconcile import KeyOutcome, KeyStatus, reconcile_batch_get
from dyncache.cache.schema import TableSchema
from dyncache.cache.store import CacheStoreClient, DynamoDbClient

__all__ = [
    "CacheItem",
    "CacheItemConverter",
    "CacheItemConverterRegistry",
    "CacheItemLike",
    "CacheStoreClient",
    "DefaultCacheItemConverter",
    "DeferredWriteBuffer",
    "DynamoDbCache",
    "DynamoDbClient",
    "JsonCodec",
    "KeyOutcome",
    "KeyStatus",
    "PickleCodec",
    "TableSchema",
    "ValueCodec",
    "get_codec",
    "reconcile_batch_get",
]
