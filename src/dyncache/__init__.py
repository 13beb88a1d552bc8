"""
DynamoDB-backed cache with an item pool and a simple key/value surface.
"""

from dyncache.cache import (
    CacheItem,
    CacheItemConverter,
    CacheItemConverterRegistry,
    DefaultCacheItemConverter,
    DynamoDbCache,
    JsonCodec,
    PickleCodec,
    ValueCodec,
)
from dyncache.exceptions import (
    ConfigurationError,
    DynCacheError,
    InvalidArgumentError,
    StoreUnavailableError,
)

__version__ = "0.1.0"

__all__ = [
    "CacheItem",
    "CacheItemConverter",
    "CacheItemConverterRegistry",
    "ConfigurationError",
    "DefaultCacheItemConverter",
    "DynCacheError",
    "DynamoDbCache",
    "InvalidArgumentError",
    "JsonCodec",
    "PickleCodec",
    "StoreUnavailableError",
    "ValueCodec",
]
