"""Airtable implementation of the record store over its REST API."""

from typing import Any, Optional
from urllib.parse import quote

import httpx

from ..entities import ExternalServiceError, IRecordStore, StoreRecord
from ..entities.interfaces import SortSpec
from ..structured_logging import get_logger

logger = get_logger("AIRTABLE")


def equals_formula(field: str, value: Any) -> str:
    """Build ``{field} = 'value'`` with the value escaped for Airtable's formula language."""
    escaped = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"{{{field}}} = '{escaped}'"


def drop_empty(fields: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in fields.items() if value is not None}


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return f"{error.get('type', 'ERROR')}: {error.get('message', '')}".rstrip(": ")
    if error:
        return str(error)
    return f"HTTP {response.status_code}"


class AirtableRecordStore(IRecordStore):
    """Record store backed by one Airtable base."""

    def __init__(
        self,
        api_key: str,
        base_id: str,
        api_url: str = "https://api.airtable.com/v0",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_id = base_id
        self._client = client or httpx.AsyncClient(
            base_url=f"{api_url.rstrip('/')}/{base_id}",
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        params: Optional[list[tuple[str, str]]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path, params=params, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as err:
            detail = _error_detail(err.response)
            logger.error(
                f"Airtable {operation} failed",
                status_code=err.response.status_code,
                error=detail,
                base_id=self.base_id,
            )
            raise ExternalServiceError("airtable", operation, detail) from err
        except httpx.HTTPError as err:
            logger.error(
                f"Airtable {operation} failed",
                error_type=type(err).__name__,
                error=str(err),
                base_id=self.base_id,
            )
            raise ExternalServiceError("airtable", operation, str(err)) from err
        return response.json()  # type: ignore[no-any-return]

    async def select(
        self,
        table: str,
        formula: Optional[str] = None,
        sort: Optional[SortSpec] = None,
        max_records: Optional[int] = None,
        all_pages: bool = False,
    ) -> list[StoreRecord]:
        params: list[tuple[str, str]] = []
        if formula:
            params.append(("filterByFormula", formula))
        if max_records is not None:
            params.append(("maxRecords", str(max_records)))
        for index, (field, direction) in enumerate(sort or ()):
            params.append((f"sort[{index}][field]", field))
            params.append((f"sort[{index}][direction]", direction))

        records: list[StoreRecord] = []
        offset: Optional[str] = None
        while True:
            page_params = params + [("offset", offset)] if offset else params
            payload = await self._request("GET", f"/{quote(table, safe='')}", f"select from {table}", params=page_params)
            records.extend(StoreRecord.model_validate(record) for record in payload.get("records", []))
            offset = payload.get("offset")
            if not all_pages or not offset:
                break
            if max_records is not None and len(records) >= max_records:
                break

        logger.debug("Airtable select", table=table, formula=formula, record_count=len(records))
        return records[:max_records] if max_records is not None else records

    async def create(self, table: str, fields: dict[str, Any]) -> StoreRecord:
        payload = await self._request(
            "POST", f"/{quote(table, safe='')}", f"create record in {table}", json={"fields": drop_empty(fields)}
        )
        record = StoreRecord.model_validate(payload)
        logger.info("Airtable record created", table=table, record_id=record.id)
        return record

    async def update(self, table: str, record_id: str, fields: dict[str, Any]) -> StoreRecord:
        payload = await self._request(
            "PATCH",
            f"/{quote(table, safe='')}/{record_id}",
            f"update record in {table}",
            json={"fields": drop_empty(fields)},
        )
        record = StoreRecord.model_validate(payload)
        logger.info("Airtable record updated", table=table, record_id=record.id)
        return record
