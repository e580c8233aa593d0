# app/services/queue_controller.py
"""
Queue state controller. Owns the visible queue, the form draft and the busy flag.

Use cases:
  load       fetch the waiting queue once, at startup
  refresh    explicit reload, same reconciliation as load
  submit     insert the draft, append the new row locally
  call_next  mark the head as called, write history, drop the head locally

The local queue is a read-through / write-through cache of the remote rows
with status "Na fila". It is patched from gateway responses only and is
allowed to drift from the store until the next load or refresh:
  - a failed load/refresh keeps the previous queue
  - a failed insert leaves the queue and the draft untouched
  - call_next drops the head even if both remote writes failed
The head chosen by call_next comes from local state, so another client may
already have called that row. Nothing here coordinates across clients.
"""

from typing import Mapping, Optional

from app.schemas.vehicle_entry import (
    DRAFT_FIELDS,
    REQUIRED_FIELD,
    QueueState,
    VehicleDraft,
    VehicleEntry,
    empty_draft,
)
from app.services.store_gateway import StoreGateway
from app.utils.logger import get_logger

logger = get_logger(__name__)


class MissingRequiredField(ValueError):
    def __init__(self, field: str):
        super().__init__(f"{field} é obrigatório")
        self.field = field


class QueueController:
    def __init__(self, gateway: StoreGateway):
        self.gateway = gateway
        self.queue: list[VehicleEntry] = []
        self.draft: dict[str, str] = empty_draft()
        self.busy = False
        self._loaded = False

    # ── Draft ─────────────────────────────────────────────────────────────
    def update_field(self, name: str, value: str):
        if name not in self.draft:
            raise KeyError(name)
        self.draft[name] = value

    def set_draft(self, values: Mapping[str, str]):
        unknown = set(values) - set(DRAFT_FIELDS)
        if unknown:
            raise KeyError(", ".join(sorted(unknown)))
        for name, value in values.items():
            self.draft[name] = value

    def snapshot(self) -> QueueState:
        return QueueState(fila=list(self.queue), draft=VehicleDraft(**self.draft), loading=self.busy)

    # ── Load / refresh ────────────────────────────────────────────────────
    async def load(self):
        """Initial fetch. Runs once per controller; later calls do nothing."""
        if self._loaded:
            return
        self._loaded = True
        await self._reload()

    async def refresh(self) -> bool:
        """Re-fetch the queue. Returns False when another operation is running."""
        if self.busy:
            return False
        await self._reload()
        return True

    async def _reload(self):
        self.busy = True
        try:
            result = await self.gateway.fetch_queue()
            if result.error is None:
                self.queue = list(result.data)
                logger.info(f"Fila carregada: {len(self.queue)} veículo(s)")
            else:
                logger.error(f"Erro ao buscar fila: {result.error.message}")
        finally:
            self.busy = False

    # ── Submit ────────────────────────────────────────────────────────────
    async def submit(self) -> Optional[VehicleEntry]:
        """
        Insert the current draft. Returns the stored entry, or None when the
        controller was busy or the insert failed. The draft is only cleared
        on success.
        """
        if self.busy:
            return None
        if not self.draft.get(REQUIRED_FIELD, "").strip():
            raise MissingRequiredField(REQUIRED_FIELD)

        self.busy = True
        try:
            result = await self.gateway.enqueue(dict(self.draft))
            if result.error is None and result.data is not None:
                self.queue.append(result.data)
                self.draft = empty_draft()
                logger.info(f"Veículo {result.data.placa_cavalo} adicionado à fila (id={result.data.id})")
                return result.data
            logger.error(f"Erro ao inserir veículo: {result.error.message if result.error else 'sem dados'}")
            return None
        finally:
            self.busy = False

    # ── Call next ─────────────────────────────────────────────────────────
    async def call_next(self) -> Optional[VehicleEntry]:
        """
        Call the head of the local queue. Returns the removed entry, or None
        when the queue is empty or another operation is running.
        """
        if not self.queue or self.busy:
            return None

        self.busy = True
        try:
            candidate = self.queue[0]
            result = await self.gateway.advance(candidate)
            if result.update_error:
                logger.error(f"Erro ao chamar veículo: {result.update_error.message}")
            if result.history_error:
                logger.error(f"Erro ao registrar histórico: {result.history_error.message}")
            # Removed regardless of the remote outcome; no rollback
            self.queue = self.queue[1:]
            logger.info(f"Veículo {candidate.placa_cavalo} chamado (id={candidate.id})")
            return candidate
        finally:
            self.busy = False
