"""
main.py — FastAPI Application Entrypoint

Purpose:
- Initialize application services (logging, config, DB schema).
- Register API routers and exception handlers.
- Define root-level health/status endpoint.
- Provide `app` object used by ASGI server (uvicorn).

This file should stay clean — no business logic here.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskapi import __version__
from taskapi.api.handlers import register_exception_handlers
from taskapi.api.v1 import tasks, users
from taskapi.core.config import settings
from taskapi.core.database import init_db
from taskapi.core.logging import configure_logging

# -----------------------------------------------------------------------------
# App Initialization
# -----------------------------------------------------------------------------

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title="Task Manager API",
    description="Multi-tenant task management: accounts, sessions, avatars and personal tasks",
    version=__version__,
    lifespan=lifespan,
)

# -----------------------------------------------------------------------------
# CORS
# -----------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------------------------------------------------------------
# Errors + Router Registration
# -----------------------------------------------------------------------------

register_exception_handlers(app)

app.include_router(users.router)
app.include_router(tasks.router)

# -----------------------------------------------------------------------------
# Health Check
# -----------------------------------------------------------------------------

@app.get("/")
def root():
    return {"status": "ok", "message": "Task manager backend running"}
