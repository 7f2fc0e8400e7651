from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from fastapi import FastAPI
from fastapi.routing import APIRouter
from loguru import logger

from taskdeck.service.db.engine import create_engine, create_session_factory
from taskdeck.service.identity.ledger import EventLedger, MemoryEventLedger, RedisEventLedger
from taskdeck.service.identity.pipeline import IdentitySyncPipeline
from taskdeck.service.identity.store import SqlIdentityStore
from taskdeck.service.log import setup_logging
from taskdeck.service.settings import TaskdeckSettings, get_settings


def _create_ledger(settings: TaskdeckSettings, redis: aioredis.Redis | None) -> EventLedger:
    """Shared Redis ledger when Redis is configured, per-process memory otherwise."""
    if redis is not None:
        return RedisEventLedger(redis, ttl=settings.event_ledger_ttl)
    return MemoryEventLedger(max_size=settings.event_ledger_size)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    # -- Startup ---------------------------------------------------------------
    settings = get_settings()
    setup_logging(settings.log_level, json=settings.log_json)

    auth_token = settings.resolve_auth_token()
    if not settings.auth_token:
        logger.warning("No TASKDECK_AUTH_TOKEN set -- generated token: {}", auth_token)
    _app.state.auth_token = auth_token

    logger.info("Taskdeck service starting (host={}, port={})", settings.host, settings.port)

    _app.state.db_engine = None
    _app.state.db_session_factory = None
    _app.state.redis = None
    _app.state.identity_pipeline = None

    # -- Database --------------------------------------------------------------
    if settings.database_url:
        engine = create_engine(settings.database_url)
        _app.state.db_engine = engine
        _app.state.db_session_factory = create_session_factory(engine)
        logger.info("PostgreSQL: connected (pool_size=5, max_overflow=10)")
    else:
        logger.warning("TASKDECK_DATABASE_URL not set -- database features disabled")

    # -- Redis -----------------------------------------------------------------
    if settings.redis_url:
        _app.state.redis = aioredis.from_url(
            settings.redis_url,
            decode_responses=False,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
        )
        logger.info("Redis: connected")
    else:
        logger.warning("TASKDECK_REDIS_URL not set -- webhook de-duplication is per-process")

    # -- Identity sync ---------------------------------------------------------
    if _app.state.db_session_factory is not None:
        ledger = _create_ledger(settings, _app.state.redis)
        _app.state.identity_pipeline = IdentitySyncPipeline(SqlIdentityStore(_app.state.db_session_factory), ledger)
        logger.info("Identity sync: ready (ledger={})", type(ledger).__name__)

    yield

    # -- Shutdown --------------------------------------------------------------
    logger.info("Taskdeck service shutting down")

    if _app.state.redis is not None:
        await _app.state.redis.aclose()
        logger.info("Redis: closed")

    if _app.state.db_engine is not None:
        await _app.state.db_engine.dispose()
        logger.info("PostgreSQL: disposed")


app = FastAPI(title="Taskdeck", lifespan=lifespan)

# ---------------------------------------------------------------------------
# API router -- all endpoints live under /api
# ---------------------------------------------------------------------------
api = APIRouter(prefix="/api")


@api.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


from taskdeck.service.routers.webhooks import router as webhooks_router  # noqa: E402
from taskdeck.service.routers.workspaces import router as workspaces_router  # noqa: E402

api.include_router(workspaces_router)
api.include_router(webhooks_router)

app.include_router(api)
