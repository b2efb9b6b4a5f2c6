"""FastAPI routes for chat messages and pasted screenshots."""

from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from pydantic import BaseModel, Field, field_validator

from controllers.chat_controller import send_message, upload_screenshot

router = APIRouter(prefix="/chat", tags=["chat"])


class ScreenshotPayload(BaseModel):
    image_data: str = Field(..., min_length=1)
    message: str = Field("", max_length=1000)

    @field_validator("message", mode="before")
    @classmethod
    def _strip_message(cls, value):
        return value.strip() if isinstance(value, str) else value


@router.post("/{model}/send")
async def send_message_route(
    request: Request,
    model: str,
    message: str = Form(...),
    conversation_history: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
):
    """Send a chat message, optionally with one attached file."""
    try:
        return await send_message(request, model, message, conversation_history, file)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail="Failed to process message") from exc


@router.post("/{model}/screenshot")
async def screenshot_route(request: Request, model: str, payload: ScreenshotPayload):
    """Send a pasted screenshot (base64 data URL) to the model."""
    try:
        return await upload_screenshot(request, model, payload.image_data, payload.message)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail="Failed to process screenshot") from exc
