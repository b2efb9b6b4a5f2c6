import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, Request, UploadFile

from models.attachment import Attachment
from models.conversation import ConversationTurn, ResponseEnvelope, history_from_payload
from models.errors import GatewayError
from services.dispatcher import Dispatcher
from utils.http_errors import to_http_exception
from utils.settings import GatewaySettings

DEFAULT_SCREENSHOT_PROMPT = "Analyze this screenshot"
MAX_MESSAGE_CHARS = 5000


def _clean_message(message: str) -> str:
    """Trim the message, then require 1 to `MAX_MESSAGE_CHARS` characters."""
    text = (message or "").strip()
    if not text or len(text) > MAX_MESSAGE_CHARS:
        raise HTTPException(
            status_code=400,
            detail={"success": False, "error": f"Message must be between 1 and {MAX_MESSAGE_CHARS} characters"},
        )
    return text


def _parse_history(raw: Optional[str]) -> List[ConversationTurn]:
    """Decode the JSON-encoded conversation history sent with a form post."""
    if not raw:
        return []
    try:
        items = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=400, detail="Conversation history must be valid JSON") from exc
    if not isinstance(items, list):
        raise HTTPException(status_code=400, detail="Conversation history must be an array")
    try:
        return history_from_payload(items)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _success(model: str, response: ResponseEnvelope) -> Dict[str, Any]:
    return {
        "success": True,
        "response": response.to_dict(),
        "model": model,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


async def send_message(
    request: Request,
    model: str,
    message: str,
    conversation_history: Optional[str] = None,
    file: Optional[UploadFile] = None,
) -> Dict[str, Any]:
    """Handle a chat message with an optional file upload.

    The model id is checked before the upload is staged so an unknown model
    never leaves a file behind. Once staged, the dispatcher owns the file and
    deletes it whatever the outcome.

    Args:
        request: FastAPI Request object (used to access app.state for shared services).
        model: Routing model id from the URL.
        message: User message; trimmed, then checked against `MAX_MESSAGE_CHARS`.
        conversation_history: Optional JSON array of `{role, content}` objects.
        file: Optional uploaded attachment.

    Returns:
        A dict containing: success, response, model, timestamp
    """
    dispatcher: Dispatcher = request.app.state.dispatcher
    settings: GatewaySettings = request.app.state.settings
    text = _clean_message(message)
    history = _parse_history(conversation_history)

    try:
        dispatcher.registry.lookup(model)
    except GatewayError as exc:
        raise to_http_exception(exc, expose_details=settings.is_development) from exc

    attachment: Optional[Attachment] = None
    if file is not None and file.filename:
        data = await file.read()
        if len(data) > settings.max_file_size:
            raise HTTPException(status_code=413, detail="File exceeds the maximum upload size")
        path = await request.app.state.upload_store.save(file.filename, data)
        attachment = Attachment.from_upload(path, file.filename, file.content_type, len(data))

    try:
        response = await dispatcher.handle(model, text, attachment, history)
    except GatewayError as exc:
        raise to_http_exception(exc, expose_details=settings.is_development) from exc

    return _success(model, response)


async def upload_screenshot(request: Request, model: str, image_data: str, message: str = "") -> Dict[str, Any]:
    """Handle a pasted screenshot sent as a base64 data URL."""
    dispatcher: Dispatcher = request.app.state.dispatcher
    settings: GatewaySettings = request.app.state.settings

    attachment = Attachment.from_base64(image_data)
    try:
        response = await dispatcher.handle(model, message.strip() or DEFAULT_SCREENSHOT_PROMPT, attachment)
    except GatewayError as exc:
        raise to_http_exception(
            exc, expose_details=settings.is_development, error="Failed to process screenshot"
        ) from exc

    return _success(model, response)
