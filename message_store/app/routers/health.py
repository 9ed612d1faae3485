from typing import Any

from fastapi import APIRouter, Request, Response
from loguru import logger

from message_store.app.core import SERVICE_NAME

health_router = APIRouter(tags=["Health"])


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


@health_router.get(
    "/health/live",
    summary="Liveness probe",
    description="Returns 200 if the process is running.",
    responses={200: {"description": "Service is alive."}},
)
async def live() -> dict:
    return {"status": "ok"}


@health_router.get(
    "/health/ready",
    summary="Readiness probe",
    description="Returns 200 only when the store holds a broker connection.",
    responses={
        200: {"description": "Store is ready."},
        503: {"description": "Store missing or disconnected."},
    },
)
async def ready(request: Request) -> Response:
    store = getattr(request.app.state, "store", None)
    if store is None:
        _log("store_not_initialized")
        return Response(status_code=503, content="Not ready")
    if not store.ready:
        _log("store_not_ready", store=store.name)
        return Response(status_code=503, content="Store not ready")
    return Response(status_code=200, content="OK")
