# backend/app/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute
from pydantic import BaseModel

from .core.config import is_running_tests, settings
from .core.constants import API_DESCRIPTION, API_TITLE, API_VERSION, BRAND_NAME
from .errors import register_error_handlers
from .middleware.prometheus_middleware import PrometheusMiddleware
from .routes import health, prometheus
from .routes.v1 import (
    chat_rooms as chat_rooms_v1,
    event_matches as event_matches_v1,
    offers as offers_v1,
    posts as posts_v1,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


class RootResponse(BaseModel):
    message: str
    version: str
    docs: str
    environment: str


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown without deprecated events."""
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(f"Environment: {settings.environment}")
    if is_running_tests():
        logger.info("Running under pytest (test mode active)")

    yield

    logger.info(f"{BRAND_NAME} API shutting down...")


def _unique_operation_id(route: APIRoute) -> str:
    methods = "_".join(sorted(m.lower() for m in route.methods or []))
    path = route.path_format.replace("/", "_").replace("{", "").replace("}", "").strip("_")
    name = (route.name or "operation").lower().replace(" ", "_")
    return f"{methods}__{path}__{name}".strip("_")


app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
    generate_unique_id_function=_unique_operation_id,
)

# Register unified error envelope handlers
register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)
logger.info("CORS allow_origins=%s", settings.cors_allowed_origins)

app.add_middleware(PrometheusMiddleware)

# Create API v1 router
api_v1 = APIRouter(prefix="/api/v1")

# Mount v1 routes
# Note: posts router registers /posts/my before /posts/{post_id}
api_v1.include_router(posts_v1.router)
api_v1.include_router(offers_v1.router)
api_v1.include_router(chat_rooms_v1.router, prefix="/chat-rooms")
api_v1.include_router(event_matches_v1.router, prefix="/event-matches")

# Mount API v1 first
app.include_router(api_v1)

# Infrastructure routes keep fixed unversioned paths
app.include_router(health.router)
app.include_router(prometheus.router)


@app.get("/", response_model=RootResponse)
def read_root() -> RootResponse:
    """Root endpoint - API information"""
    return RootResponse(
        message=f"Welcome to the {BRAND_NAME} API!",
        version=API_VERSION,
        docs="/docs",
        environment=settings.environment,
    )
