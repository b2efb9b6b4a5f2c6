"""Read-only model and system information for clients."""

import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import HTTPException, Request

from models.errors import UnknownModel
from services.dispatcher import Dispatcher
from utils.settings import GatewaySettings


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def uptime_seconds(request: Request) -> float:
    return time.time() - request.app.state.started_at


async def models_status(request: Request) -> Dict[str, Any]:
    """Return whether each model currently has a configured, live backend."""
    dispatcher: Dispatcher = request.app.state.dispatcher
    return {"status": dispatcher.availability(), "timestamp": _now()}


async def model_file_types(request: Request, model: str) -> Dict[str, Any]:
    """Return the attachment extensions and size ceiling accepted by a model.

    Raises:
        HTTPException(400) if the model id is unknown.
    """
    dispatcher: Dispatcher = request.app.state.dispatcher
    try:
        supported = dispatcher.registry.supported_file_types(model)
    except UnknownModel as exc:
        raise HTTPException(status_code=400, detail={"error": "Invalid model specified", "model": model}) from exc
    return {"model": model, "supportedTypes": supported, "timestamp": _now()}


async def model_profile(request: Request, model: str) -> Dict[str, Any]:
    """Return display metadata and limits for a model.

    Raises:
        HTTPException(404) if the model id is unknown.
    """
    dispatcher: Dispatcher = request.app.state.dispatcher
    try:
        capability = dispatcher.registry.lookup(model)
        profile = dispatcher.registry.profile(model)
    except UnknownModel as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return {
        "id": model,
        "name": profile.name if profile else model,
        "provider": profile.provider if profile else None,
        "description": profile.description if profile else None,
        "capabilities": list(profile.features) if profile else [],
        "maxTokens": capability.max_tokens,
        "available": dispatcher.availability()[model],
    }


async def config_check(request: Request) -> Dict[str, Any]:
    """Report which provider credentials are present, without revealing them."""
    settings: GatewaySettings = request.app.state.settings
    return {
        "configured": {
            "azure_openai": bool(settings.azure.api_key),
            "deepseek": bool(settings.deepseek.api_key),
            "grok": bool(settings.grok_api_key),
            "port": settings.port,
            "environment": settings.environment,
        },
        "timestamp": _now(),
    }


async def system_info(request: Request) -> Dict[str, Any]:
    settings: GatewaySettings = request.app.state.settings
    return {
        "version": settings.version,
        "environment": settings.environment,
        "uptime": uptime_seconds(request),
        "timestamp": _now(),
    }
