"""FastAPI application entrypoint. No business logic; only wiring, logging and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from edusite.api import router as api_router
from edusite.api.errors import register_exception_handlers
from edusite.core.config import settings
from edusite.core.database import SessionLocal
from edusite.services.bootstrap import bootstrap_from_settings
from edusite.services.users import UserRepository

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Seed the admin account (when configured) before serving requests."""
    db = SessionLocal()
    try:
        if bootstrap_from_settings(UserRepository(db), settings):
            logger.info("Admin bootstrap completed")
    finally:
        db.close()
    yield


app = FastAPI(
    title="Edusite API",
    version="0.1.0",
    docs_url="/docs" if settings.APP_ENV == "dev" else None,
    redoc_url="/redoc" if settings.APP_ENV == "dev" else None,
    lifespan=lifespan,
)

# Cookie auth needs credentials, so origins must be listed explicitly.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)
app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "Edusite API"}
