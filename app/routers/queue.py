# app/routers/queue.py
"""
Vehicle queue endpoints.
Every endpoint answers with the current QueueState. Remote failures are only
logged; the caller sees them as a queue that did not change.
"""

from fastapi import APIRouter, Body, Depends, HTTPException, status
from app.schemas.vehicle_entry import QueueState, VehicleDraft
from app.services.queue_controller import MissingRequiredField, QueueController
from app.store import get_controller

router = APIRouter()

BUSY_DETAIL = "Operação em andamento"


def _ensure_idle(controller: QueueController):
    if controller.busy:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=BUSY_DETAIL)


def _apply_draft(controller: QueueController, values: dict):
    try:
        controller.set_draft(values)
    except KeyError as e:
        raise HTTPException(status_code=422, detail=f"Campo desconhecido: {e.args[0]}")


async def _submit(controller: QueueController) -> QueueState:
    _ensure_idle(controller)
    try:
        await controller.submit()
    except MissingRequiredField as e:
        raise HTTPException(status_code=422, detail=str(e))
    return controller.snapshot()


@router.get("/queue", response_model=QueueState, summary="Current queue, draft and loading flag")
def get_queue(controller: QueueController = Depends(get_controller)):
    return controller.snapshot()


@router.patch("/queue/draft", response_model=QueueState, summary="Edit draft fields")
def edit_draft(values: dict[str, str] = Body(...), controller: QueueController = Depends(get_controller)):
    _apply_draft(controller, values)
    return controller.snapshot()


@router.post("/queue/submit", response_model=QueueState, summary="Add the current draft to the queue")
async def submit_draft(controller: QueueController = Depends(get_controller)):
    return await _submit(controller)


@router.post("/queue", response_model=QueueState, summary="Add a vehicle to the queue")
async def add_vehicle(body: VehicleDraft, controller: QueueController = Depends(get_controller)):
    """Replaces the draft with the body, then submits it. Empty fields are sent as empty strings."""
    _ensure_idle(controller)
    _apply_draft(controller, body.model_dump())
    return await _submit(controller)


@router.post("/queue/call-next", response_model=QueueState, summary="Call the next vehicle")
async def call_next(controller: QueueController = Depends(get_controller)):
    _ensure_idle(controller)
    await controller.call_next()
    return controller.snapshot()


@router.post("/queue/refresh", response_model=QueueState, summary="Reload the queue from the store")
async def refresh_queue(controller: QueueController = Depends(get_controller)):
    _ensure_idle(controller)
    await controller.refresh()
    return controller.snapshot()
