"""
AI generation routes.

Lets a browser client run edits and text generation without holding the
Gemini API keys itself. Each call is independent; nothing is cached.
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool
from typing import Optional
import structlog

from services.gemini_service import GeminiService, Hotspot, get_gemini_service
from routes.products import handle_error
from exceptions import InvalidInputError

logger = structlog.get_logger(__name__)

router = APIRouter()


async def _read_image(image: Optional[UploadFile]) -> tuple[bytes, str]:
    if image is None:
        raise InvalidInputError("No image selected.")
    data = await image.read()
    if not data:
        raise InvalidInputError("Uploaded image is empty.")
    return data, image.content_type or "image/png"


def _require_prompt(prompt: Optional[str], message: str) -> str:
    if not prompt or not prompt.strip():
        raise InvalidInputError(message)
    return prompt.strip()


@router.post("/edit")
async def generate_edit(
    image: Optional[UploadFile] = File(None),
    prompt: Optional[str] = Form(None),
    x: Optional[int] = Form(None, ge=0),
    y: Optional[int] = Form(None, ge=0),
    service: GeminiService = Depends(get_gemini_service)
):
    """Localized edit around the pixel (x, y)."""
    try:
        data, mime_type = await _read_image(image)
        text = _require_prompt(prompt, "Please enter a description for your edit.")
        if x is None or y is None:
            raise InvalidInputError("Please click on the image to select an area to edit.")

        result = await run_in_threadpool(service.generate_edited_image, data, mime_type, text, Hotspot(x=x, y=y))
        return {"success": True, "image": result.data_url}

    except Exception as e:
        return handle_error(e)


@router.post("/filter")
async def generate_filter(
    image: Optional[UploadFile] = File(None),
    prompt: Optional[str] = Form(None),
    service: GeminiService = Depends(get_gemini_service)
):
    try:
        data, mime_type = await _read_image(image)
        text = _require_prompt(prompt, "Please choose a filter.")
        result = await run_in_threadpool(service.generate_filtered_image, data, mime_type, text)
        return {"success": True, "image": result.data_url}

    except Exception as e:
        return handle_error(e)


@router.post("/adjust")
async def generate_adjustment(
    image: Optional[UploadFile] = File(None),
    prompt: Optional[str] = Form(None),
    service: GeminiService = Depends(get_gemini_service)
):
    try:
        data, mime_type = await _read_image(image)
        text = _require_prompt(prompt, "Please describe the adjustment.")
        result = await run_in_threadpool(service.generate_adjusted_image, data, mime_type, text)
        return {"success": True, "image": result.data_url}

    except Exception as e:
        return handle_error(e)


@router.post("/description")
async def generate_description(
    image: Optional[UploadFile] = File(None),
    prompt: Optional[str] = Form(None),
    service: GeminiService = Depends(get_gemini_service)
):
    """Product description, alt text or meta text for an image."""
    try:
        data, mime_type = await _read_image(image)
        text = _require_prompt(prompt, "Please enter instructions for the text.")
        description = await run_in_threadpool(service.generate_description, data, mime_type, text)
        return {"success": True, "text": description}

    except Exception as e:
        return handle_error(e)
