"""Main application entry point for the Luminous substrate."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .cognition.backends import BackendNotConfiguredError
from .cognition.orchestrator import (
    EmptyInputError,
    SubstrateNotReadyError,
    ThoughtInFlightError,
)
from .core.config import settings
from .core.domain import IdentityState, SubstrateStatus, Thought
from .session import LuminousSession

VERSION = "0.1.0"


class BroadcastRequest(BaseModel):
    content: str = Field(..., description="Partner message")


class ConfigUpdate(BaseModel):
    """Credential and endpoint changes; omitted fields keep their value."""

    firebase_api_key: str | None = None
    firebase_database_url: str | None = None
    firebase_project_id: str | None = None
    upstash_url: str | None = None
    upstash_token: str | None = None
    pinecone_api_key: str | None = None
    pinecone_host: str | None = None
    gemini_api_key: str | None = None
    openai_api_key: str | None = None


# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# The single session served by this process
session: LuminousSession | None = None


def get_session() -> LuminousSession:
    if session is None:
        raise HTTPException(status_code=503, detail="Session not initialized")
    return session


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager with startup logging."""
    global session

    logger.info("🚀 ===== LUMINOUS SUBSTRATE STARTUP =====")
    logger.info(f"⚙️  Environment: {settings.environment}")
    logger.info("🔌 Substrate configuration:")
    logger.info(f"   • Document store: {'configured' if settings.document_store_configured else 'offline'}")
    logger.info(f"   • List cache: {'configured' if settings.list_cache_configured else 'offline'}")
    logger.info(f"   • Vector index: {'configured' if settings.vector_index_configured else 'offline'}")

    try:
        session = LuminousSession(settings)
        await session.initialize()
    except Exception as e:
        logger.error(f"❌ Luminous startup failed: {e}")
        logger.exception("🔍 Startup failure details:")
        raise

    yield

    if session is not None:
        await session.shutdown()
        session = None
    logger.info("✅ Luminous shutdown completed")


app = FastAPI(
    title="Luminous Substrate",
    description="Dual-model orchestration over a persistent identity substrate",
    version=VERSION,
    debug=settings.debug,
    lifespan=lifespan,
)

# Add CORS middleware for development
if settings.is_development():
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint for health checks."""
    return {
        "message": "Luminous Substrate",
        "status": "operational",
        "version": VERSION,
        "environment": settings.environment,
    }


@app.get("/health")
async def health_check(current: LuminousSession = Depends(get_session)) -> dict[str, Any]:
    status = current.status()
    return {
        "status": "healthy" if status.ready else "synchronizing",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.environment,
        "stores": {kind.value: health.value for kind, health in status.stores.items()},
    }


@app.get("/substrate", response_model=SubstrateStatus)
async def substrate_status(current: LuminousSession = Depends(get_session)) -> SubstrateStatus:
    return current.status()


@app.post("/broadcast", response_model=Thought)
async def broadcast(
    request: BroadcastRequest,
    current: LuminousSession = Depends(get_session),
) -> Thought:
    """Submit a partner message and return the resulting Thought."""
    try:
        return await current.handle_input(request.content)
    except EmptyInputError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except ThoughtInFlightError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except (SubstrateNotReadyError, BackendNotConfiguredError) as e:
        raise HTTPException(status_code=503, detail=str(e)) from e


@app.get("/thoughts", response_model=list[Thought])
async def thoughts(current: LuminousSession = Depends(get_session)) -> list[Thought]:
    return await current.recent_thoughts()


@app.get("/identity", response_model=IdentityState)
async def identity(current: LuminousSession = Depends(get_session)) -> IdentityState:
    return current.identity


@app.post("/config", response_model=SubstrateStatus)
async def update_config(
    update: ConfigUpdate,
    current: LuminousSession = Depends(get_session),
) -> SubstrateStatus:
    """Apply new credentials and re-arm substrate probing."""
    overrides = update.model_dump(exclude_none=True)
    try:
        await current.reconfigure(current.config.with_overrides(**overrides))
    except ThoughtInFlightError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return current.status()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "luminous.main:app",
        host=settings.fastapi_host,
        port=settings.fastapi_port,
        reload=settings.fastapi_reload and settings.is_development(),
        log_level=settings.log_level.lower(),
    )
