"""
FitTrack Client
===============
FastAPI application entry point for the local view server. Mount routers
here.

The session controller's timer is a background task, so it is released on
shutdown rather than left for the loop to destroy.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fittrack.config import get_settings
from fittrack.routers import auth, student, trainer
from fittrack.services.session_controller import get_session_controller

settings = get_settings()

logging.basicConfig(level=settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await get_session_controller().close()


app = FastAPI(
    title="FitTrack Client",
    description="Student and trainer screens over the fitness backend",
    version="0.1.0",
    docs_url="/api/docs" if settings.environment != "production" else None,
    redoc_url="/api/redoc" if settings.environment != "production" else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(student.router)
app.include_router(trainer.router)


@app.get("/api/v1/health")
async def health_check() -> dict:
    return {"status": "ok", "service": "fittrack-client", "backend": settings.api_base_url}
