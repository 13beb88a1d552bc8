"""
Reconciliation of partial BatchGetItem results.

A batch read answers each requested key in one of three ways: the record
was returned, the store declined to serve the key this time (unprocessed),
or the key simply does not exist. ``reconcile_batch_get`` folds the raw
response into exactly one outcome per requested key.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping

from dyncache.types import AttributeMap


class KeyStatus(str, Enum):
    """How the store answered one key of a batch read."""

    SERVED = "served"
    UNPROCESSED = "unprocessed"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class KeyOutcome:
    """Result for one requested key."""

    key: str
    status: KeyStatus
    record: AttributeMap | None = None


def dedupe_keys(keys: Iterable[str]) -> list[str]:
    """Drop repeated keys, keeping first-occurrence order."""
    return list(dict.fromkeys(keys))


def reconcile_batch_get(
    requested: Iterable[str],
    served: Mapping[str, AttributeMap],
    unprocessed: Iterable[str],
) -> list[KeyOutcome]:
    """Produce one outcome per unique requested key, in request order.

    Args:
        requested: Keys sent in the request (duplicates allowed).
        served: Returned records keyed by their primary key.
        unprocessed: Keys the store reported as unprocessed.

    Returns:
        Outcomes for exactly the deduplicated requested keys. A key both
        served and unprocessed counts as served; served or unprocessed
        keys that were never requested are ignored.
    """
    pending = set(unprocessed)
    outcomes: list[KeyOutcome] = []

    for key in dedupe_keys(requested):
        record = served.get(key)
        if record is not None:
            outcomes.append(KeyOutcome(key, KeyStatus.SERVED, record))
        elif key in pending:
            outcomes.append(KeyOutcome(key, KeyStatus.UNPROCESSED))
        else:
            outcomes.append(KeyOutcome(key, KeyStatus.NOT_FOUND))

    return outcomes
