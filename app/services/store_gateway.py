# app/services/store_gateway.py
"""
Remote store gateway: thin async wrapper over the hosted REST tables.

Tables:
  fila       queue rows, filtered to status "Na fila" when read
  historico  append-only audit rows written by advance()

The gateway never raises for remote failures and never touches shared state.
Every call returns its data together with a StoreError (or None), and the
caller decides what to do with local state.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Mapping, NamedTuple, Optional

import httpx

from app.schemas.vehicle_entry import (
    STATUS_CHAMADO,
    STATUS_NA_FILA,
    HistoryRecord,
    VehicleEntry,
)
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StoreError:
    message: str
    code: Optional[str] = None
    status_code: Optional[int] = None

    def __str__(self):
        return self.message


class FetchResult(NamedTuple):
    data: list[VehicleEntry]
    error: Optional[StoreError]


class InsertResult(NamedTuple):
    data: Optional[VehicleEntry]
    error: Optional[StoreError]


class AdvanceResult(NamedTuple):
    update_error: Optional[StoreError]
    history_error: Optional[StoreError]


def utc_now_iso() -> str:
    """Current UTC instant as ISO-8601 with milliseconds and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _error_from_response(response: httpx.Response) -> StoreError:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return StoreError(body["message"], code=body.get("code"), status_code=response.status_code)
    text = response.text.strip() or response.reason_phrase
    return StoreError(f"HTTP {response.status_code}: {text}", status_code=response.status_code)


class StoreGateway:
    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        queue_table: str = "fila",
        history_table: str = "historico",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], str] = utc_now_iso,
    ):
        if not base_url or not api_key:
            raise ValueError("remote store URL and access key are required")
        self.queue_table = queue_table
        self.history_table = history_table
        self._clock = clock
        self._client = httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}/rest/v1",
            headers={"apikey": api_key, "Authorization": f"Bearer {api_key}"},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings, **kwargs) -> "StoreGateway":
        return cls(
            settings.SUPABASE_URL,
            settings.SUPABASE_ANON_KEY,
            queue_table=settings.QUEUE_TABLE,
            history_table=settings.HISTORY_TABLE,
            timeout=settings.STORE_TIMEOUT_SECONDS,
            **kwargs,
        )

    async def aclose(self):
        await self._client.aclose()

    async def _request(self, method: str, table: str, **kwargs):
        """Returns (parsed JSON body or None, StoreError or None)."""
        try:
            response = await self._client.request(method, f"/{table}", **kwargs)
        except httpx.HTTPError as e:
            return None, StoreError(str(e) or e.__class__.__name__)

        if response.status_code >= 400:
            return None, _error_from_response(response)
        if not response.content:
            return None, None
        try:
            return response.json(), None
        except ValueError:
            return None, StoreError(f"invalid JSON from {table}", status_code=response.status_code)

    async def fetch_queue(self) -> FetchResult:
        """All rows still waiting, oldest arrival first."""
        body, error = await self._request(
            "GET",
            self.queue_table,
            params={"select": "*", "status": f"eq.{STATUS_NA_FILA}", "order": "chegada_at.asc"},
        )
        if error:
            return FetchResult([], error)
        if body is not None and not isinstance(body, list):
            return FetchResult([], StoreError("unexpected queue response"))
        try:
            rows = [VehicleEntry.model_validate(row) for row in body or []]
        except ValueError as e:
            return FetchResult([], StoreError(f"unexpected row shape: {e}"))
        logger.debug(f"Fetched {len(rows)} queued vehicles")
        return FetchResult(rows, None)

    async def enqueue(self, draft: Mapping[str, str]) -> InsertResult:
        """
        Insert one queue row from the draft. Status is forced to "Na fila";
        id and chegada_at come back from the store.
        """
        row = {**draft, "status": STATUS_NA_FILA}
        body, error = await self._request(
            "POST",
            self.queue_table,
            json=[row],
            headers={"Prefer": "return=representation"},
        )
        if error:
            return InsertResult(None, error)
        if body is not None and not isinstance(body, list):
            return InsertResult(None, StoreError("unexpected insert response"))
        if not body:
            return InsertResult(None, StoreError("insert returned no rows"))
        try:
            return InsertResult(VehicleEntry.model_validate(body[0]), None)
        except ValueError as e:
            return InsertResult(None, StoreError(f"unexpected row shape: {e}"))

    async def advance(self, entry: VehicleEntry) -> AdvanceResult:
        """
        Mark the row as called and append a history row. Both writes are
        always attempted and share one timestamp; there is no transaction.
        """
        now = self._clock()
        snapshot = entry.model_dump()

        _, update_error = await self._request(
            "PATCH",
            self.queue_table,
            params={"id": f"eq.{entry.id}"},
            json={"status": STATUS_CHAMADO, "chamado_at": now},
            headers={"Prefer": "return=minimal"},
        )

        record = HistoryRecord(veiculo_id=entry.id, acao=STATUS_CHAMADO, at=now, payload=snapshot)
        _, history_error = await self._request(
            "POST",
            self.history_table,
            json=[record.model_dump()],
            headers={"Prefer": "return=minimal"},
        )
        return AdvanceResult(update_error, history_error)
