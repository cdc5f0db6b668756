"""Local implementations of repositories for development and tests."""

import os
import re
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from ..entities import IRecordStore, RecordNotFoundError, StoreRecord
from ..entities.interfaces import SortSpec
from .base import BaseSecretRepository

_EQUALS_FORMULA = re.compile(r"^\{(?P<field>[^}]+)\}\s*=\s*'(?P<value>(?:[^'\\]|\\.)*)'$")


class LocalSecretRepository(BaseSecretRepository):
    """Reads secrets from the environment, e.g. ``openai-api-key`` from ``OPENAI_API_KEY``."""

    def access_secret(self, secret_suffix: str) -> str:
        return os.environ.get(secret_suffix.upper().replace("-", "_"), f"local-{secret_suffix}")


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000Z")


class LocalRecordStore(IRecordStore):
    """In-memory record store.

    Understands ``{Field} = 'value'`` formulas only. Linked fields hold record ids;
    when the linked table has a primary field registered in ``primary_fields`` the
    comparison is made against that field, as Airtable does.
    """

    def __init__(
        self,
        autonumber_fields: Optional[Mapping[str, str]] = None,
        created_time_fields: Optional[Mapping[str, str]] = None,
        primary_fields: Optional[Mapping[str, str]] = None,
    ):
        self.tables: dict[str, list[StoreRecord]] = {}
        self._autonumber_fields = dict(autonumber_fields or {})
        self._created_time_fields = dict(created_time_fields or {})
        self._primary_fields = dict(primary_fields or {})
        self._counters: dict[str, int] = {}
        self._next_id = 0

    def _find(self, record_id: str) -> Optional[tuple[str, StoreRecord]]:
        for table, records in self.tables.items():
            for record in records:
                if record.id == record_id:
                    return table, record
        return None

    def _display(self, value: Any) -> str:
        if isinstance(value, str) and value.startswith("rec"):
            found = self._find(value)
            if found is not None and found[0] in self._primary_fields:
                table, record = found
                return str(record.fields.get(self._primary_fields[table], value))
        return str(value)

    def _matches(self, record: StoreRecord, field: str, expected: str) -> bool:
        if field == "RECORD_ID()":
            return record.id == expected
        value = record.fields.get(field)
        if value is None:
            return expected == ""
        if isinstance(value, list):
            return any(self._display(item) == expected for item in value)
        return self._display(value) == expected

    def _filter(self, records: list[StoreRecord], formula: Optional[str]) -> list[StoreRecord]:
        if not formula:
            return list(records)
        match = _EQUALS_FORMULA.match(formula.strip())
        if match is None:
            raise ValueError(f"Unsupported formula: {formula}")
        field = match.group("field")
        expected = re.sub(r"\\(.)", r"\1", match.group("value"))
        return [record for record in records if self._matches(record, field, expected)]

    async def select(
        self,
        table: str,
        formula: Optional[str] = None,
        sort: Optional[SortSpec] = None,
        max_records: Optional[int] = None,
        all_pages: bool = False,
    ) -> list[StoreRecord]:
        records = self._filter(self.tables.get(table, []), formula)
        for field, direction in reversed(list(sort or ())):
            present = [record for record in records if record.fields.get(field) is not None]
            missing = [record for record in records if record.fields.get(field) is None]
            present.sort(key=lambda record: record.fields[field], reverse=direction == "desc")
            records = present + missing
        if max_records is not None:
            records = records[:max_records]
        return [record.model_copy(deep=True) for record in records]

    async def create(self, table: str, fields: dict[str, Any]) -> StoreRecord:
        self._next_id += 1
        created_time = _now()
        stored = {key: value for key, value in fields.items() if value is not None}
        if table in self._autonumber_fields:
            self._counters[table] = self._counters.get(table, 0) + 1
            stored[self._autonumber_fields[table]] = self._counters[table]
        if table in self._created_time_fields:
            stored[self._created_time_fields[table]] = created_time
        record = StoreRecord(id=f"rec{self._next_id:014d}", created_time=created_time, fields=stored)
        self.tables.setdefault(table, []).append(record)
        return record.model_copy(deep=True)

    async def update(self, table: str, record_id: str, fields: dict[str, Any]) -> StoreRecord:
        for record in self.tables.get(table, []):
            if record.id == record_id:
                record.fields.update({key: value for key, value in fields.items() if value is not None})
                return record.model_copy(deep=True)
        raise RecordNotFoundError(f"Record {record_id} not found in {table}")

    def seed(self, table: str, fields: dict[str, Any]) -> StoreRecord:
        """Insert a row synchronously, for fixtures and development data."""
        self._next_id += 1
        record = StoreRecord(id=f"rec{self._next_id:014d}", created_time=_now(), fields=dict(fields))
        self.tables.setdefault(table, []).append(record)
        return record
