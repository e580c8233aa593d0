# app/store.py
"""
Remote store handle and the queue controller that sits on top of it.
One gateway and one controller per process, created on startup and kept on
app.state. Routers get them through the FastAPI dependencies below.
"""

from fastapi import FastAPI, Request

from app.config import settings
from app.services.queue_controller import QueueController
from app.services.store_gateway import StoreGateway


def init_store(app: FastAPI) -> QueueController:
    """Build the gateway from settings and attach a fresh controller to the app."""
    gateway = StoreGateway.from_settings(settings)
    controller = QueueController(gateway)
    app.state.gateway = gateway
    app.state.controller = controller
    return controller


async def close_store(app: FastAPI):
    gateway = getattr(app.state, "gateway", None)
    if gateway is not None:
        await gateway.aclose()


def get_controller(request: Request) -> QueueController:
    """FastAPI dependency: the process-wide queue controller."""
    return request.app.state.controller
