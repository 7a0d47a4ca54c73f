from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from loguru import logger

from helpdesk.api.routes import router as api_router
from helpdesk.core.config import get_settings
from helpdesk.core.errors import register_exception_handlers
from helpdesk.core.logging import setup_logging
from helpdesk.services.db import init_db
from helpdesk.services.media import MEDIA_URL_PREFIX

settings = get_settings()
setup_logging(settings.logging.level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting helpdesk backend env={env}", env=settings.env)
    settings.media_root.mkdir(parents=True, exist_ok=True)
    init_db()
    yield
    logger.info("Shutting down helpdesk backend")


app = FastAPI(title="Helpdesk Ticketing Backend", version="0.1.0", lifespan=lifespan)

app.include_router(api_router)
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount(MEDIA_URL_PREFIX, StaticFiles(directory=settings.media_root, check_dir=False), name="media")
