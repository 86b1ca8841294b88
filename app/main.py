from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from logging_config import configure_logging
from services.supervisor import build_default_supervisor

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    supervisor = build_default_supervisor()
    supervisor.start()
    logger.info("Tailing sensor log", extra={"path": str(supervisor.path)})
    # The tail thread is a daemon and lives until the process exits.
    yield


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Sensor Tail Exporter",
        description="Follows an SDR sensor log and exports the latest reading per sensor.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app

app = create_app()
