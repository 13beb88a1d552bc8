"""
Table schema and attribute translation.

Maps CacheItems to DynamoDB low-level attribute maps and back. The three
attribute names are configurable; only the partition key is required to
exist on the table.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from dyncache.exceptions import ConfigurationError
from dyncache.types import AttributeMap, from_unix_seconds, to_unix_seconds


@dataclass(frozen=True)
class TableSchema:
    """Attribute layout of the cache table."""

    table_name: str
    primary_field: str = "id"
    value_field: str = "value"
    ttl_field: str = "ttl"

    def __post_init__(self) -> None:
        if not self.table_name:
            raise ConfigurationError("Table name must be non-empty")
        fields = (self.primary_field, self.value_field, self.ttl_field)
        if not all(fields):
            raise ConfigurationError(
                "Attribute names must be non-empty",
                context={"fields": fields},
            )
        if len(set(fields)) != len(fields):
            raise ConfigurationError(
                "Attribute names must be distinct",
                context={"fields": fields},
            )

    def key_attributes(self, stored_key: str) -> AttributeMap:
        """Primary key map for GetItem/DeleteItem/BatchGetItem."""
        return {self.primary_field: {"S": stored_key}}

    def to_record(
        self,
        stored_key: str,
        raw_value: str,
        expires_at: datetime | None,
    ) -> AttributeMap:
        """Full attribute map for PutItem."""
        record: AttributeMap = {
            self.primary_field: {"S": stored_key},
            self.value_field: {"S": raw_value},
        }
        if expires_at is not None:
            record[self.ttl_field] = {"N": str(to_unix_seconds(expires_at))}
        return record

    def record_key(self, record: AttributeMap) -> str | None:
        """Primary key of a returned record, if present."""
        return record.get(self.primary_field, {}).get("S")

    def record_value(self, record: AttributeMap) -> str | None:
        """Encoded value of a record; missing or empty counts as absent."""
        return record.get(self.value_field, {}).get("S") or None

    def record_expiration(self, record: AttributeMap) -> datetime | None:
        """Expiration of a record; a missing TTL attribute means none."""
        ttl = record.get(self.ttl_field, {}).get("N")
        if not ttl:
            return None
        return from_unix_seconds(ttl)
