# app/schemas/vehicle_entry.py
"""
Queue rows, history rows and the form draft.
Field names are the remote column names, so rows pass through unchanged.
"""

from pydantic import BaseModel
from typing import Any, Optional, Union

STATUS_NA_FILA = "Na fila"
STATUS_CHAMADO = "Chamado"

# Form order of the draft fields
DRAFT_FIELDS = (
    "placa_cavalo",
    "placa_carreta",
    "motorista",
    "origem",
    "destino",
    "tipo",
    "prioridade",
    "observacoes",
)
REQUIRED_FIELD = "placa_cavalo"


class VehicleEntry(BaseModel):
    id: Union[int, str]
    placa_cavalo: Optional[str] = None   # required only when submitting the form
    placa_carreta: Optional[str] = None
    motorista: Optional[str] = None
    origem: Optional[str] = None
    destino: Optional[str] = None
    tipo: Optional[str] = None
    prioridade: Optional[str] = None
    observacoes: Optional[str] = None
    status: str                          # opaque: "Na fila" | "Chamado" | ...
    chegada_at: Optional[str] = None     # set by the store on insert
    chamado_at: Optional[str] = None

    class Config:
        extra = "allow"   # keep unknown columns for the history snapshot


class VehicleDraft(BaseModel):
    placa_cavalo: str = ""
    placa_carreta: str = ""
    motorista: str = ""
    origem: str = ""
    destino: str = ""
    tipo: str = ""
    prioridade: str = ""
    observacoes: str = ""


class HistoryRecord(BaseModel):
    veiculo_id: Union[int, str]
    acao: str
    at: str
    payload: dict[str, Any]


class QueueState(BaseModel):
    fila: list[VehicleEntry]
    draft: VehicleDraft
    loading: bool


def empty_draft() -> dict[str, str]:
    return {field: "" for field in DRAFT_FIELDS}
