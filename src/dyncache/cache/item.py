"""
Cache item model.

A CacheItem is one key/value/expiration unit. The value is held in encoded
form and decoded on demand; hit/miss is recomputed against the clock on
every call so that an item loaded as a hit turns into a miss once its
expiration passes.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Protocol, runtime_checkable

from dyncache.cache.codec import PickleCodec, ValueCodec
from dyncache.exceptions import InvalidArgumentError
from dyncache.types import Clock, ensure_utc, utc_now


@runtime_checkable
class CacheItemLike(Protocol):
    """Minimal shape of any cache item, including third-party ones."""

    key: str

    def get(self) -> Any: ...

    def is_hit(self) -> bool: ...


class CacheItem:
    """One cache entry: key, hit flag, encoded value and expiration.

    Instances are created by the store client when loading from the store,
    by ``DynamoDbCache.create_item`` for fresh writes, and by converters
    adapting foreign items. Application code should not construct them
    directly.
    """

    __slots__ = ("_key", "_found", "_raw", "_expires_at", "_codec", "_clock")

    def __init__(
        self,
        key: str,
        is_hit: bool,
        value: Any = None,
        expires_at: datetime | None = None,
        codec: ValueCodec | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._key = key
        self._found = is_hit
        self._codec = codec or PickleCodec()
        self._clock = clock or utc_now
        self._expires_at: datetime | None = None
        self._raw = ""
        self.expires_at(expires_at)
        self.set(value)

    @classmethod
    def from_raw(
        cls,
        key: str,
        raw: str,
        expires_at: datetime | None,
        codec: ValueCodec,
        clock: Clock | None = None,
    ) -> CacheItem:
        """Build a hit item around an already-encoded payload."""
        item = cls(key, True, None, expires_at, codec, clock)
        item._raw = raw
        return item

    @property
    def key(self) -> str:
        """The un-prefixed cache key."""
        return self._key

    def get(self) -> Any:
        """Decode and return the current value, hit or not."""
        return self._codec.decode(self._raw)

    def is_hit(self) -> bool:
        """True if the value was found and has not expired yet."""
        if not self._found:
            return False
        if self._expires_at is None:
            return True
        return self._clock() < self._expires_at

    def set(self, value: Any) -> CacheItem:
        """Replace the value."""
        self._raw = self._codec.encode(value)
        return self

    def expires_at(self, expiration: datetime | None) -> CacheItem:
        """Set an absolute expiration instant, or clear it with None.

        Raises:
            InvalidArgumentError: If expiration is neither a datetime nor None.
        """
        if expiration is None:
            self._expires_at = None
        elif isinstance(expiration, datetime):
            self._expires_at = ensure_utc(expiration)
        else:
            raise InvalidArgumentError(
                "The expiration must be None or a datetime",
                context={"key": self._key, "type": type(expiration).__name__},
            )
        return self

    def expires_after(self, ttl: timedelta | int | None) -> CacheItem:
        """Set the expiration relative to now.

        Args:
            ttl: A timedelta, a number of seconds, or None to clear.

        Raises:
            InvalidArgumentError: For any other type (including bool).
        """
        if ttl is None:
            self._expires_at = None
            return self

        if isinstance(ttl, int) and not isinstance(ttl, bool):
            ttl = timedelta(seconds=ttl)
        if not isinstance(ttl, timedelta):
            raise InvalidArgumentError(
                "The TTL must be an int, a timedelta or None",
                context={"key": self._key, "type": type(ttl).__name__},
            )

        self._expires_at = self._clock() + ttl
        return self

    # Internal accessors for the store client

    @property
    def raw_value(self) -> str:
        """Encoded payload as written to the value attribute. Internal."""
        return self._raw

    @property
    def expiration(self) -> datetime | None:
        """Absolute expiration in UTC, if any. Internal."""
        return self._expires_at

    def __repr__(self) -> str:
        return (
            f"CacheItem(key={self._key!r}, found={self._found!r}, "
            f"expires_at={self._expires_at!r})"
        )
