"""
Gemini service for AI image edits and product text.

Sends the current image plus an instruction to Gemini and turns the response
into either an image or text. Every failure shape (blocked prompt, abnormal
stop, empty answer) becomes a GenerationError with a user-facing message.

The content policy lives in the prompts only; the model is asked to refuse
identity-altering edits but nothing here can enforce it.
"""

import base64
from dataclasses import dataclass
from typing import Any, Optional
from fastapi import Request
import structlog

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from config.settings import Settings
from exceptions import (
    EmptyGenerationError,
    ExternalServiceError,
    GenerationBlockedError,
    GenerationStoppedError,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Hotspot:
    """Pixel coordinate on the image where a localized edit should land."""
    x: int
    y: int


@dataclass(frozen=True)
class GeneratedImage:
    """Image bytes returned by the model."""
    data: bytes
    mime_type: str

    @property
    def data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("utf-8")
        return f"data:{self.mime_type};base64,{encoded}"


def _reason_name(reason: Any) -> Optional[str]:
    """SDK enums and plain strings both come back; normalise to the name."""
    if reason is None:
        return None
    value = getattr(reason, "value", reason)
    return str(value)


class GeminiService:
    """
    Generate edited images and text with Gemini.

    Image and text calls go through separate clients so they can use
    separate API keys and quotas.
    """

    EDIT_PROMPT = """You are an expert photo editor AI. Perform a natural, localized edit.
User Request: "{prompt}"
Edit Location: Focus on pixel coordinates (x: {x}, y: {y}).

Safety & Ethics Policy:
- You MUST REFUSE any request to change a person's fundamental race or ethnicity.

Output: Return ONLY the final edited image. High quality."""

    FILTER_PROMPT = """You are an expert photo editor AI. Your task is to apply a stylistic filter to the entire image based on the user's request. Do not change the composition or content, only apply the style.
Filter Request: "{prompt}"

Safety & Ethics Policy:
- Filters may subtly shift colors, but you MUST ensure they do not alter a person's fundamental race or ethnicity.
- You MUST REFUSE any request that explicitly asks to change a person's race.

Output: Return ONLY the final filtered image. Ensure the output is a high-quality 1:1 square image (1024x1024)."""

    ADJUSTMENT_PROMPT = """You are an expert photo editor AI. Your task is to perform a natural, global adjustment to the entire image based on the user's request.
User Request: "{prompt}"

Editing Guidelines:
- The adjustment must be applied across the entire image.
- The result must be photorealistic.

Safety & Ethics Policy:
- You MUST fulfill requests to adjust skin tone, such as 'give me a tan' or 'make my skin lighter'. These are standard photo enhancements.
- You MUST REFUSE any request to change a person's fundamental race or ethnicity. If the request is ambiguous, do not change racial characteristics.

Output: Return ONLY the final adjusted image. Ensure the output is a high-quality 1:1 square image (1024x1024)."""

    DESCRIPTION_PROMPT = """You are a creative assistant for a fine jewelry studio. Based on the provided image and the user's request, generate a concise and compelling description.
User Request: "{prompt}"

Output: Return ONLY the text description. Do not add any extra formatting or introductory phrases."""

    def __init__(
        self,
        image_client: Any,
        text_client: Any,
        image_model: str = "gemini-2.5-flash-image",
        text_model: str = "gemini-2.5-flash"
    ):
        self.image_client = image_client
        self.text_client = text_client
        self.image_model = image_model
        self.text_model = text_model

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiService":
        if not settings.gemini_configured:
            raise ExternalServiceError(
                "gemini",
                "GEMINI_IMAGE_API_KEY and GEMINI_TEXT_API_KEY must both be set"
            )

        logger.info(
            "gemini_clients_created",
            image_model=settings.gemini_image_model,
            text_model=settings.gemini_text_model
        )

        return cls(
            image_client=genai.Client(api_key=settings.gemini_image_api_key),
            text_client=genai.Client(api_key=settings.gemini_text_api_key),
            image_model=settings.gemini_image_model,
            text_model=settings.gemini_text_model
        )

    def close(self) -> None:
        for client in (self.image_client, self.text_client):
            close = getattr(client, "close", None)
            if close is not None:
                close()

    # ===================
    # IMAGE GENERATION
    # ===================

    def generate_edited_image(
        self,
        image: bytes,
        mime_type: str,
        prompt: str,
        hotspot: Hotspot
    ) -> GeneratedImage:
        """
        Apply a localized edit around a hotspot.

        Args:
            image: Current image bytes
            mime_type: MIME type of the image
            prompt: What to change (e.g. "change shirt to blue")
            hotspot: Pixel coordinates to focus on

        Returns:
            GeneratedImage

        Raises:
            GenerationBlockedError, GenerationStoppedError, EmptyGenerationError
        """
        logger.info("generative_edit_started", x=hotspot.x, y=hotspot.y)
        text = self.EDIT_PROMPT.format(prompt=prompt, x=hotspot.x, y=hotspot.y)
        response = self._generate(self.image_client, self.image_model, image, mime_type, text)
        return self._extract_image(response, "edit")

    def generate_filtered_image(self, image: bytes, mime_type: str, prompt: str) -> GeneratedImage:
        logger.info("filter_generation_started", prompt=prompt)
        text = self.FILTER_PROMPT.format(prompt=prompt)
        response = self._generate(self.image_client, self.image_model, image, mime_type, text)
        return self._extract_image(response, "filter")

    def generate_adjusted_image(self, image: bytes, mime_type: str, prompt: str) -> GeneratedImage:
        logger.info("adjustment_generation_started", prompt=prompt)
        text = self.ADJUSTMENT_PROMPT.format(prompt=prompt)
        response = self._generate(self.image_client, self.image_model, image, mime_type, text)
        return self._extract_image(response, "adjustment")

    # ===================
    # TEXT GENERATION
    # ===================

    def generate_description(self, image: bytes, mime_type: str, prompt: str) -> str:
        """
        Write product text for an image.

        Args:
            image: Image bytes
            mime_type: MIME type of the image
            prompt: Kind of text wanted (description, alt text, meta...)

        Returns:
            Generated text, stripped

        Raises:
            GenerationBlockedError, GenerationStoppedError, EmptyGenerationError
        """
        logger.info("description_generation_started", prompt=prompt)
        text = self.DESCRIPTION_PROMPT.format(prompt=prompt)
        response = self._generate(self.text_client, self.text_model, image, mime_type, text)

        self._raise_if_blocked(response)

        generated = self._response_text(response)
        if generated:
            logger.info("description_generated", length=len(generated))
            return generated

        self._raise_if_stopped(response, "description")

        logger.error("description_missing_text")
        raise EmptyGenerationError(
            "The AI model did not return a text description. This can happen due to "
            "safety filters or if the request is unclear. Please try rephrasing your prompt."
        )

    # ===================
    # HELPERS
    # ===================

    def _generate(self, client: Any, model: str, image: bytes, mime_type: str, prompt: str) -> Any:
        contents = [
            types.Part.from_bytes(data=image, mime_type=mime_type),
            types.Part.from_text(text=prompt),
        ]

        try:
            response = client.models.generate_content(model=model, contents=contents)
        except genai_errors.APIError as e:
            logger.error("gemini_api_error", model=model, error=str(e))
            raise ExternalServiceError("gemini", f"Gemini API error: {e}") from e

        logger.debug("gemini_response_received", model=model)
        return response

    def _extract_image(self, response: Any, context: str) -> GeneratedImage:
        self._raise_if_blocked(response)

        for part in self._parts(response):
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                mime_type = inline.mime_type or "image/png"
                logger.info("image_received", context=context, mime_type=mime_type)
                return GeneratedImage(data=inline.data, mime_type=mime_type)

        self._raise_if_stopped(response, context)

        feedback = self._response_text(response)
        message = f"The AI model did not return an image for the {context}. "
        if feedback:
            message += f'The model responded with text: "{feedback}"'
        else:
            message += (
                "This can happen due to safety filters or if the request is too complex. "
                "Please try rephrasing your prompt to be more direct."
            )

        logger.error("image_missing_from_response", context=context, has_text=bool(feedback))
        raise EmptyGenerationError(message, text=feedback)

    def _raise_if_blocked(self, response: Any) -> None:
        feedback = getattr(response, "prompt_feedback", None)
        reason = _reason_name(getattr(feedback, "block_reason", None))
        if reason:
            reason_message = getattr(feedback, "block_reason_message", None)
            logger.error("generation_blocked", reason=reason)
            raise GenerationBlockedError(reason, reason_message)

    def _raise_if_stopped(self, response: Any, context: str) -> None:
        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            return
        reason = _reason_name(getattr(candidates[0], "finish_reason", None))
        if reason and reason != "STOP":
            logger.error("generation_stopped", context=context, reason=reason)
            raise GenerationStoppedError(context, reason)

    def _parts(self, response: Any) -> list:
        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            return []
        content = getattr(candidates[0], "content", None)
        return list(getattr(content, "parts", None) or [])

    def _response_text(self, response: Any) -> Optional[str]:
        texts = [
            part.text for part in self._parts(response)
            if getattr(part, "text", None)
        ]
        joined = "".join(texts).strip()
        return joined or None


def get_gemini_service(request: Request) -> GeminiService:
    """FastAPI dependency: the GeminiService created at startup."""
    service = getattr(request.app.state, "gemini", None)
    if service is None:
        raise ExternalServiceError("gemini", "AI generation is not configured")
    return service
