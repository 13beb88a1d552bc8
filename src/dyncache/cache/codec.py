"""
Value codecs for cache payloads.

The store's value attribute is a string, so every codec maps arbitrary
values to text and back. Decoding data that was not produced by the same
codec is a caller error and is not validated here.
"""

from __future__ import annotations

import base64
import pickle
from abc import ABC, abstractmethod
from typing import Any

import orjson

from dyncache.exceptions import ConfigurationError


class ValueCodec(ABC):
    """Reversible string encoding for cache values."""

    name: str = ""

    @abstractmethod
    def encode(self, value: Any) -> str:
        """Encode a value to its stored string form."""
        ...

    @abstractmethod
    def decode(self, raw: str) -> Any:
        """Decode a stored string back to the original value."""
        ...


class PickleCodec(ValueCodec):
    """Default codec: pickle, then base64 so the payload is plain ASCII.

    Round-trips anything picklable. Only decode data written by a trusted
    cache; unpickling attacker-controlled bytes executes code.
    """

    name = "pickle"

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL) -> None:
        self.protocol = protocol

    def encode(self, value: Any) -> str:
        return base64.b64encode(pickle.dumps(value, protocol=self.protocol)).decode("ascii")

    def decode(self, raw: str) -> Any:
        return pickle.loads(base64.b64decode(raw))


class JsonCodec(ValueCodec):
    """JSON codec backed by orjson.

    Only values orjson can serialize round-trip; tuples come back as lists.
    """

    name = "json"

    def encode(self, value: Any) -> str:
        return orjson.dumps(value).decode("utf-8")

    def decode(self, raw: str) -> Any:
        return orjson.loads(raw)


_CODECS: dict[str, type[ValueCodec]] = {
    PickleCodec.name: PickleCodec,
    JsonCodec.name: JsonCodec,
}


def get_codec(name: str) -> ValueCodec:
    """Resolve a codec instance by name.

    Args:
        name: Codec name ("pickle" or "json").

    Returns:
        A new codec instance.

    Raises:
        ConfigurationError: If the name is unknown.
    """
    codec_cls = _CODECS.get(name.strip().lower())
    if codec_cls is None:
        raise ConfigurationError(
            f"Unknown codec '{name}'",
            context={"available": sorted(_CODECS)},
        )
    return codec_cls()
