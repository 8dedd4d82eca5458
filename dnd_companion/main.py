"""FastAPI application entry point."""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from dnd_companion.api import auth, campaigns, users
from dnd_companion.api.errors import register_exception_handlers
from dnd_companion.config import get_settings

settings = get_settings()


def configure_logging(level: str) -> None:
    """Attach a stdout handler to the root logger once."""
    root = logging.getLogger()
    if not root.handlers:  # don't double-add in reloads
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        root.addHandler(handler)
    root.setLevel(level.upper())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    configure_logging(settings.log_level)
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
    logging.getLogger(__name__).info(f"Starting in {settings.environment} mode")
    yield


app = FastAPI(
    title="D&D Companion API",
    description="Users, campaigns and monster lists for a tabletop campaign companion",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Register routers (auth first: its fixed paths must win over /users/{user_id})
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(campaigns.router)

app.mount(
    "/uploads",
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="uploads",
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
