from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from message_store.app.composition import create_store_dependencies
from message_store.app.core import SERVICE_NAME
from message_store.app.routers.health import health_router
from message_store.app.routers.messages import messages_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.bind(service_name=SERVICE_NAME, event="service_starting").info("")
    dependencies = create_store_dependencies()
    try:
        await dependencies.connect()
    except Exception as e:
        logger.exception("store connect failed: {}", e)
        raise
    app.state.settings = dependencies.settings
    app.state.store = dependencies.store
    try:
        yield
    finally:
        logger.bind(service_name=SERVICE_NAME, event="service_stopping").info("")
        await dependencies.close()


app = FastAPI(
    title="Durable Message Store",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(messages_router)
