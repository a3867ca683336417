"""MarocStats — FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from marocstats.api.routes import router
from marocstats.config import get_settings
from marocstats.pipeline import load_context
from marocstats.scheduler import start_scheduler

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info("Loading regional datasets ...")
    app.state.settings = settings
    app.state.context = await load_context(settings)

    def _swap(context):
        app.state.context = context

    scheduler = start_scheduler(settings.reload_interval_hours, _swap)
    logger.info("MarocStats API is ready.")
    yield
    if scheduler is not None:
        scheduler.shutdown(wait=False)
    logger.info("Shutting down MarocStats API.")


app = FastAPI(
    title="MarocStats",
    description=(
        "Statistiques regionales du Maroc : retraites par region et taux de chomage "
        "par region, sexe et milieu, avec reconciliation des noms de regions."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/", tags=["Root"])
def root():
    return {
        "name": "MarocStats",
        "version": "1.0.0",
        "docs": "/docs",
        "description": "Moroccan regional statistics for maps and charts",
    }
