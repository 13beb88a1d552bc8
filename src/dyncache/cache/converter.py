"""
Converters from arbitrary cache items to the canonical CacheItem.

The registry tries converters in registration order; the first one whose
``supports`` returns True performs the conversion.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from threading import Lock
from typing import Any

from dyncache.cache.codec import PickleCodec, ValueCodec
from dyncache.cache.item import CacheItem, CacheItemLike
from dyncache.exceptions import ConfigurationError
from dyncache.logging import get_logger
from dyncache.types import Clock

logger = get_logger(__name__)


class CacheItemConverter(ABC):
    """Adapts one family of item implementations to CacheItem."""

    @abstractmethod
    def supports(self, item: Any) -> bool:
        """Whether this converter can convert the given item."""
        ...

    @abstractmethod
    def convert(self, item: Any) -> CacheItem:
        """Convert the item to a CacheItem."""
        ...


class DefaultCacheItemConverter(CacheItemConverter):
    """Fallback converter for anything shaped like a cache item.

    CacheItem instances are returned unchanged. Foreign items are rebuilt
    from their key, hit flag and decoded value. Their expiration is not
    reachable through the generic item shape, so the converted item never
    expires; save a CacheItem directly to keep a TTL.
    """

    def __init__(self, codec: ValueCodec | None = None, clock: Clock | None = None) -> None:
        self.codec = codec or PickleCodec()
        self.clock = clock

    def supports(self, item: Any) -> bool:
        return isinstance(item, CacheItemLike)

    def convert(self, item: Any) -> CacheItem:
        if isinstance(item, CacheItem):
            return item

        logger.debug(
            "Converting foreign cache item, expiration is dropped",
            key=item.key,
            item_type=type(item).__name__,
        )
        return CacheItem(
            item.key,
            item.is_hit(),
            item.get(),
            None,
            self.codec,
            self.clock,
        )


class CacheItemConverterRegistry:
    """Ordered collection of converters."""

    def __init__(self, *converters: CacheItemConverter) -> None:
        self._converters: list[CacheItemConverter] = list(converters)
        self._lock = Lock()

    def register(self, converter: CacheItemConverter) -> None:
        """Append a converter; it is tried after the existing ones."""
        with self._lock:
            self._converters.append(converter)

    def convert(self, item: Any) -> CacheItem:
        """Convert with the first converter that supports the item.

        Raises:
            ConfigurationError: If no registered converter supports the item.
        """
        with self._lock:
            converters = list(self._converters)

        for converter in converters:
            if converter.supports(item):
                return converter.convert(item)

        raise ConfigurationError(
            "No converter supports this cache item",
            context={
                "item_type": type(item).__name__,
                "converters": [type(c).__name__ for c in converters],
            },
        )

    def __len__(self) -> int:
        return len(self._converters)
