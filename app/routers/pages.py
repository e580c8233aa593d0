# app/routers/pages.py
"""
Single-page form for the vehicle queue.
GET  /                form + queue list
POST /fila            submit the form as the draft
POST /fila/chamar     call the next vehicle
POST /fila/atualizar  reload the queue
Every POST redirects back to the page; failures only show up as an unchanged list.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from app.schemas.vehicle_entry import DRAFT_FIELDS, REQUIRED_FIELD
from app.services.queue_controller import MissingRequiredField, QueueController
from app.store import get_controller
from app.templates_config import templates
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


def _back_to_page() -> RedirectResponse:
    return RedirectResponse(url="/", status_code=303)


@router.get("/", include_in_schema=False)
def queue_page(request: Request, controller: QueueController = Depends(get_controller)):
    return templates.TemplateResponse(
        request,
        "index.html",
        {"state": controller.snapshot(), "required_field": REQUIRED_FIELD},
    )


@router.post("/fila", include_in_schema=False)
async def submit_form(request: Request, controller: QueueController = Depends(get_controller)):
    form = await request.form()
    if not controller.busy:
        # Missing inputs are sent as empty strings, never dropped
        controller.set_draft({name: str(form.get(name, "")) for name in DRAFT_FIELDS})
        try:
            await controller.submit()
        except MissingRequiredField as e:
            logger.warning(f"Formulário rejeitado: {e}")
    return _back_to_page()


@router.post("/fila/chamar", include_in_schema=False)
async def call_next_form(controller: QueueController = Depends(get_controller)):
    await controller.call_next()
    return _back_to_page()


@router.post("/fila/atualizar", include_in_schema=False)
async def refresh_form(controller: QueueController = Depends(get_controller)):
    await controller.refresh()
    return _back_to_page()
