"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.dashboard import Settings, WebSocketServer, create_dashboard_router, create_hub, create_sources

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app. The hub, WebSocket server and sources live for the app's lifespan."""
    settings = settings or Settings.from_env()
    sources = create_sources(settings)
    hub = create_hub(settings, sources)
    ws_server = WebSocketServer(hub.connections, host=settings.host, port=settings.ws_port)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await ws_server.start()
        await hub.start()
        logger.info("Hub started (HTTP %d, WebSocket %d)", settings.port, settings.ws_port)
        yield
        logger.info("Shutting down...")
        await hub.shutdown()
        await ws_server.stop()
        for source in sources.values():
            await source.aclose()

    app = FastAPI(title="Living Art Hub", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(create_dashboard_router(hub))
    app.state.hub = hub
    return app


def run() -> None:
    import uvicorn

    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
