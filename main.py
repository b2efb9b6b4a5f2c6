import asyncio
import inspect
import logging
import os
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request

from routes.chat_route import router as chat_router
from routes.model_route import router as model_router
from services.dispatcher import Dispatcher, build_dispatcher
from services.upload_store import LocalUploadStore
from utils.settings import GatewaySettings
from utils.upload_cleaner import UploadCleaner
from utils.upload_dir import UploadDirectory

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file if present

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
LOGGER = logging.getLogger(__name__)


async def _close_adapter_clients(dispatcher: Dispatcher) -> None:
    """Close every SDK client held by the provider adapters."""
    for adapter in dispatcher.adapters.values():
        client = getattr(adapter, "client", None)
        if client is None:
            continue
        aclose = getattr(client, "aclose", None) or getattr(client, "close", None)
        if aclose is None:
            continue
        try:
            result = aclose()
            if inspect.isawaitable(result):
                await result
        except Exception as exc:  # pylint: disable=broad-exception-caught
            # Shutdown errors must not mask the reason the app is stopping.
            LOGGER.warning("Failed to close %s client: %s", adapter.provider_name, exc)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - settings from the environment (unless preset on `app.state`)
      - the upload directory and the store that stages uploads in it
      - the dispatcher and its provider adapters
      - a background task pruning stale uploads
    and attach them to `app.state`.
    """
    settings: GatewaySettings = getattr(app.state, "settings", None) or GatewaySettings.from_env()
    app.state.settings = settings

    upload_dir = UploadDirectory(settings.upload_dir).ensure()
    store = getattr(app.state, "upload_store", None) or LocalUploadStore(upload_dir)
    app.state.upload_store = store

    dispatcher: Optional[Dispatcher] = getattr(app.state, "dispatcher", None)
    if dispatcher is None:
        dispatcher = build_dispatcher(settings, store)
    elif dispatcher.lifecycle.store is None:
        dispatcher.lifecycle.store = store
    app.state.dispatcher = dispatcher
    app.state.started_at = time.time()

    LOGGER.info("Available models: %s", ", ".join(dispatcher.registry.model_ids()))
    LOGGER.info("Environment: %s, uploads staged in %s", settings.environment, upload_dir)

    cleaner = UploadCleaner(upload_dir, settings.upload_retention_seconds)
    cleanup_task = asyncio.create_task(cleaner.run_periodic_cleanup(settings.upload_retention_seconds))

    try:
        yield
    finally:
        cleanup_task.cancel()
        try:
            await cleanup_task
        except asyncio.CancelledError:
            pass
        await _close_adapter_clients(dispatcher)


def create_app(
    settings: Optional[GatewaySettings] = None,
    dispatcher: Optional[Dispatcher] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application instance.

    `settings` and `dispatcher` may be supplied to bypass environment loading.
    """
    app = FastAPI(title="FusionAI Gateway", lifespan=lifespan)
    if settings is not None:
        app.state.settings = settings
    if dispatcher is not None:
        app.state.dispatcher = dispatcher

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check reporting uptime and version.
        """
        settings_: GatewaySettings = request.app.state.settings
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": time.time() - request.app.state.started_at,
            "version": settings_.version,
        }

    # Register application routers
    app.include_router(chat_router)
    app.include_router(model_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=GatewaySettings.from_env().port)
