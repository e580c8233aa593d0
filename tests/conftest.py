# tests/conftest.py
"""Shared fixtures. The remote store credentials are required at import time."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

os.environ.setdefault("SUPABASE_URL", "https://fila-test.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")

import pytest
from unittest.mock import AsyncMock
from app.schemas.vehicle_entry import VehicleEntry
from app.services.store_gateway import AdvanceResult, FetchResult, InsertResult


def make_entry(id=1, plate="ABC1D23", arrived="2026-10-19T08:00:00.000Z", **extra):
    return VehicleEntry(
        id=id,
        placa_cavalo=plate,
        placa_carreta="",
        motorista="João",
        origem="Santos",
        destino="Campinas",
        tipo="",
        prioridade="",
        observacoes="",
        status="Na fila",
        chegada_at=arrived,
        chamado_at=None,
        **extra,
    )


@pytest.fixture
def gateway():
    gw = AsyncMock()
    gw.fetch_queue.return_value = FetchResult([], None)
    gw.enqueue.return_value = InsertResult(None, None)
    gw.advance.return_value = AdvanceResult(None, None)
    return gw
