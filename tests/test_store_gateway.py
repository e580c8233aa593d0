# tests/test_store_gateway.py
"""Unit tests for the remote store gateway, against a mocked REST transport."""

import json

import httpx
import pytest
from app.services.store_gateway import StoreError, StoreGateway, utc_now_iso
from conftest import make_entry

NOW = "2026-10-19T09:30:00.000Z"


def make_gateway(handler):
    return StoreGateway(
        "https://fila-test.supabase.co/",
        "anon-key",
        transport=httpx.MockTransport(handler),
        clock=lambda: NOW,
    )


def row(id, plate, arrived, status="Na fila"):
    return {"id": id, "placa_cavalo": plate, "placa_carreta": "", "motorista": "", "origem": "",
            "destino": "", "tipo": "", "prioridade": "", "observacoes": "",
            "status": status, "chegada_at": arrived, "chamado_at": None}


class TestConstruction:
    def test_missing_url_rejected(self):
        with pytest.raises(ValueError):
            StoreGateway("", "key")

    def test_missing_key_rejected(self):
        with pytest.raises(ValueError):
            StoreGateway("https://fila-test.supabase.co", "")

    def test_clock_format(self):
        now = utc_now_iso()
        assert now.endswith("Z")
        assert len(now) == len("2026-10-19T09:30:00.000Z")


class TestFetchQueue:
    @pytest.mark.asyncio
    async def test_filters_and_orders(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[row(1, "AAA1A11", "2026-10-19T08:00:00Z"),
                                             row(2, "BBB2B22", "2026-10-19T08:05:00Z")])

        gw = make_gateway(handler)
        result = await gw.fetch_queue()
        await gw.aclose()

        assert result.error is None
        assert [e.id for e in result.data] == [1, 2]
        request = seen[0]
        assert request.method == "GET"
        assert request.url.path == "/rest/v1/fila"
        assert request.url.params["status"] == "eq.Na fila"
        assert request.url.params["order"] == "chegada_at.asc"
        assert request.url.params["select"] == "*"
        assert request.headers["apikey"] == "anon-key"
        assert request.headers["authorization"] == "Bearer anon-key"

    @pytest.mark.asyncio
    async def test_http_error_returned_not_raised(self):
        def handler(request):
            return httpx.Response(401, json={"message": "Invalid API key", "code": "PGRST301"})

        gw = make_gateway(handler)
        result = await gw.fetch_queue()

        assert result.data == []
        assert result.error == StoreError("Invalid API key", code="PGRST301", status_code=401)

    @pytest.mark.asyncio
    async def test_network_error_returned_not_raised(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        gw = make_gateway(handler)
        result = await gw.fetch_queue()

        assert result.data == []
        assert "connection refused" in result.error.message

    @pytest.mark.asyncio
    async def test_non_json_error_body(self):
        gw = make_gateway(lambda request: httpx.Response(502, text="Bad Gateway"))
        result = await gw.fetch_queue()
        assert result.error.status_code == 502
        assert "Bad Gateway" in result.error.message

    @pytest.mark.asyncio
    async def test_row_without_plate_still_loads(self):
        missing = row(2, None, "2026-10-19T08:05:00Z")

        def handler(request):
            return httpx.Response(200, json=[row(1, "AAA1A11", "2026-10-19T08:00:00Z"), missing])

        gw = make_gateway(handler)
        result = await gw.fetch_queue()

        assert result.error is None
        assert [e.id for e in result.data] == [1, 2]
        assert result.data[1].placa_cavalo is None

    @pytest.mark.asyncio
    async def test_object_body_is_an_error(self):
        gw = make_gateway(lambda request: httpx.Response(200, json={"id": 1, "status": "Na fila"}))
        result = await gw.fetch_queue()
        assert result.data == []
        assert result.error.message == "unexpected queue response"


class TestEnqueue:
    @pytest.mark.asyncio
    async def test_inserts_draft_with_forced_status(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(201, json=[row(7, "ABC1D23", "2026-10-19T09:00:00Z")])

        draft = {"placa_cavalo": "ABC1D23", "placa_carreta": "", "motorista": "", "origem": "",
                 "destino": "", "tipo": "", "prioridade": "", "observacoes": "", "status": "Chamado"}
        gw = make_gateway(handler)
        result = await gw.enqueue(draft)

        assert result.error is None
        assert result.data.id == 7
        request = seen[0]
        assert request.method == "POST"
        assert request.url.path == "/rest/v1/fila"
        assert request.headers["prefer"] == "return=representation"
        body = json.loads(request.content)
        assert body == [{**draft, "status": "Na fila"}]
        # empty optional fields are sent, not omitted
        assert body[0]["placa_carreta"] == ""

    @pytest.mark.asyncio
    async def test_insert_failure(self):
        gw = make_gateway(lambda request: httpx.Response(400, json={"message": "null value in column"}))
        result = await gw.enqueue({"placa_cavalo": "ABC1D23"})
        assert result.data is None
        assert result.error.message == "null value in column"

    @pytest.mark.asyncio
    async def test_empty_representation_is_an_error(self):
        gw = make_gateway(lambda request: httpx.Response(201, json=[]))
        result = await gw.enqueue({"placa_cavalo": "ABC1D23"})
        assert result.data is None
        assert result.error is not None

    @pytest.mark.asyncio
    async def test_single_object_representation_is_an_error(self):
        gw = make_gateway(lambda request: httpx.Response(201, json=row(7, "ABC1D23", "2026-10-19T09:00:00Z")))
        result = await gw.enqueue({"placa_cavalo": "ABC1D23"})
        assert result.data is None
        assert result.error.message == "unexpected insert response"


class TestAdvance:
    @pytest.mark.asyncio
    async def test_update_then_history(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(204)

        entry = make_entry(id=42, plate="AAA1A11")
        gw = make_gateway(handler)
        result = await gw.advance(entry)

        assert result.update_error is None
        assert result.history_error is None
        update, history = seen
        assert update.method == "PATCH"
        assert update.url.path == "/rest/v1/fila"
        assert update.url.params["id"] == "eq.42"
        assert json.loads(update.content) == {"status": "Chamado", "chamado_at": NOW}

        assert history.method == "POST"
        assert history.url.path == "/rest/v1/historico"
        record = json.loads(history.content)[0]
        assert record["veiculo_id"] == 42
        assert record["acao"] == "Chamado"
        assert record["at"] == NOW
        assert record["payload"] == entry.model_dump()
        assert record["payload"]["status"] == "Na fila"

    @pytest.mark.asyncio
    async def test_history_attempted_when_update_fails(self):
        seen = []

        def handler(request):
            seen.append(request.method)
            if request.method == "PATCH":
                return httpx.Response(500, json={"message": "update failed"})
            return httpx.Response(201)

        gw = make_gateway(handler)
        result = await gw.advance(make_entry())

        assert seen == ["PATCH", "POST"]
        assert result.update_error.message == "update failed"
        assert result.history_error is None

    @pytest.mark.asyncio
    async def test_history_failure_reported_separately(self):
        def handler(request):
            if request.url.path.endswith("/historico"):
                raise httpx.ReadTimeout("timed out", request=request)
            return httpx.Response(204)

        gw = make_gateway(handler)
        result = await gw.advance(make_entry())

        assert result.update_error is None
        assert "timed out" in result.history_error.message

    @pytest.mark.asyncio
    async def test_payload_keeps_extra_columns(self):
        bodies = []

        def handler(request):
            if request.method == "POST":
                bodies.append(json.loads(request.content))
            return httpx.Response(204)

        gw = make_gateway(handler)
        await gw.advance(make_entry(doca="3"))

        assert bodies[0][0]["payload"]["doca"] == "3"
