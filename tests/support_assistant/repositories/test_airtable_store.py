import json

import httpx
import pytest

from support_assistant.entities import ExternalServiceError
from support_assistant.repositories import AirtableRecordStore, equals_formula

BASE_URL = "https://api.airtable.com/v0/appTEST"


def make_store(handler) -> tuple[AirtableRecordStore, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def recording_handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(recording_handler))
    return AirtableRecordStore(api_key="key", base_id="appTEST", client=client), seen


def record(record_id: str, **fields) -> dict:
    return {"id": record_id, "createdTime": "2024-05-01T10:00:00.000Z", "fields": fields}


@pytest.mark.unit
def test__equals_formula__escapes_quotes_and_backslashes() -> None:
    assert equals_formula("locationId", "abc") == "{locationId} = 'abc'"
    assert equals_formula("Nombre", "O'Brien") == "{Nombre} = 'O\\'Brien'"
    assert equals_formula("Ruta", "a\\b") == "{Ruta} = 'a\\\\b'"
    assert equals_formula("MsgId", 42) == "{MsgId} = '42'"


@pytest.mark.unit
@pytest.mark.asyncio
async def test__select__sends_formula_sort_and_limit() -> None:
    store, seen = make_store(lambda request: httpx.Response(200, json={"records": [record("rec1", ConvId=7)]}))

    records = await store.select(
        "Conversaciones", formula="{locationId} = 'loc'", sort=[("FechaInicio", "desc")], max_records=1
    )

    assert [r.id for r in records] == ["rec1"]
    assert records[0].fields == {"ConvId": 7}
    assert records[0].created_time == "2024-05-01T10:00:00.000Z"

    request = seen[0]
    assert request.method == "GET"
    assert request.url.path == "/v0/appTEST/Conversaciones"
    assert request.url.params["filterByFormula"] == "{locationId} = 'loc'"
    assert request.url.params["maxRecords"] == "1"
    assert request.url.params["sort[0][field]"] == "FechaInicio"
    assert request.url.params["sort[0][direction]"] == "desc"


@pytest.mark.unit
@pytest.mark.asyncio
async def test__select__follows_offsets_when_all_pages() -> None:
    pages = {
        None: {"records": [record("rec1")], "offset": "page2"},
        "page2": {"records": [record("rec2")], "offset": "page3"},
        "page3": {"records": [record("rec3")]},
    }
    store, seen = make_store(lambda request: httpx.Response(200, json=pages[request.url.params.get("offset")]))

    records = await store.select("Mensajes", formula="{ConvId} = '7'", all_pages=True)

    assert [r.id for r in records] == ["rec1", "rec2", "rec3"]
    assert len(seen) == 3
    assert all(request.url.params["filterByFormula"] == "{ConvId} = '7'" for request in seen)


@pytest.mark.unit
@pytest.mark.asyncio
async def test__select__returns_first_page_only_by_default() -> None:
    store, seen = make_store(lambda request: httpx.Response(200, json={"records": [record("rec1")], "offset": "next"}))

    records = await store.select("Mensajes")

    assert [r.id for r in records] == ["rec1"]
    assert len(seen) == 1
    assert "filterByFormula" not in seen[0].url.params


@pytest.mark.unit
@pytest.mark.asyncio
async def test__create__posts_fields_without_none_values() -> None:
    store, seen = make_store(lambda request: httpx.Response(200, json=record("recNew", Autor="user")))

    created = await store.create("Mensajes", {"Autor": "user", "Contenido": None})

    assert created.id == "recNew"
    assert seen[0].method == "POST"
    assert json.loads(seen[0].content) == {"fields": {"Autor": "user"}}


@pytest.mark.unit
@pytest.mark.asyncio
async def test__update__patches_the_record() -> None:
    store, seen = make_store(lambda request: httpx.Response(200, json=record("rec9", Recontactos=3)))

    updated = await store.update("ConfiguracionAvanzada", "rec9", {"Recontactos": 3})

    assert updated.fields == {"Recontactos": 3}
    assert seen[0].method == "PATCH"
    assert seen[0].url.path == "/v0/appTEST/ConfiguracionAvanzada/rec9"
    assert json.loads(seen[0].content) == {"fields": {"Recontactos": 3}}


@pytest.mark.unit
@pytest.mark.asyncio
async def test__http_errors_become_external_service_errors() -> None:
    store, _ = make_store(
        lambda request: httpx.Response(
            422, json={"error": {"type": "INVALID_FILTER_BY_FORMULA", "message": "The formula is invalid"}}
        )
    )

    with pytest.raises(ExternalServiceError) as exc_info:
        await store.select("Mensajes", formula="{broken")

    assert exc_info.value.service == "airtable"
    assert exc_info.value.details == "INVALID_FILTER_BY_FORMULA: The formula is invalid"


@pytest.mark.unit
@pytest.mark.asyncio
async def test__transport_errors_become_external_service_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    store, _ = make_store(handler)

    with pytest.raises(ExternalServiceError) as exc_info:
        await store.create("Feedback", {"mensaje": "hola"})
    assert exc_info.value.operation == "create record in Feedback"


@pytest.mark.unit
@pytest.mark.asyncio
async def test__default_client_sends_bearer_token() -> None:
    store = AirtableRecordStore(api_key="pat123", base_id="appX", api_url="https://airtable.test/v0/")

    assert store._client.headers["Authorization"] == "Bearer pat123"
    assert str(store._client.base_url) == "https://airtable.test/v0/appX/"
    await store.aclose()
