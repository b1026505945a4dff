import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.routing import APIRouter
from loguru import logger

from bu_agent.agent_runtime.log import setup_logging
from bu_agent.agent_runtime.routers.agents import router as agents_router
from bu_agent.agent_runtime.routers.events import router as events_router
from bu_agent.agent_runtime.service import start_agent
from bu_agent.agent_runtime.settings import UniverseSettings, get_settings
from bu_agent.ledger.store.memory import InMemoryEventStore


def create_app(settings: UniverseSettings | None = None) -> FastAPI:
    """Build the read-only ledger API.

    When ``llm.api_endpoint`` is configured the lifespan also starts an agent
    and runs its decision loop in the background for as long as the server
    is up.  Without it the API serves an empty ledger and ``/api/agent/stats``
    answers 503.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # -- Startup -----------------------------------------------------------
        cfg = settings or get_settings()
        setup_logging(cfg.log_level)
        logger.info("Agent API starting (host={}, port={})", cfg.host, cfg.port)

        app.state.settings = cfg
        app.state.store = InMemoryEventStore()
        app.state.agent = None

        service = None
        loop_task = None
        if cfg.llm.api_endpoint:
            service = start_agent(cfg, store=app.state.store)
            app.state.agent = service.agent
            loop_task = asyncio.create_task(service.loop.run(), name="decision-loop")
        else:
            logger.warning("BU_LLM__API_ENDPOINT not set -- agent disabled, serving ledger only")

        yield

        # -- Shutdown ----------------------------------------------------------
        if service is not None and loop_task is not None:
            service.loop.stop()
            loop_task.cancel()
            with suppress(asyncio.CancelledError):
                await loop_task
            await service.aclose()
        logger.info("Agent API stopped")

    app = FastAPI(title="Blockchain Universe Agent", lifespan=lifespan)

    # -------------------------------------------------------------------------
    # API router -- all endpoints live under /api
    # -------------------------------------------------------------------------
    api = APIRouter(prefix="/api")

    @api.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    api.include_router(events_router)
    api.include_router(agents_router)
    app.include_router(api)
    return app


app = create_app()
