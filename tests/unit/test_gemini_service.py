"""
Unit tests for GeminiService response handling.

Response shapes are checked in a fixed order: blocked prompt, returned
image (or text), abnormal finish reason, then empty result.
"""

import pytest
from types import SimpleNamespace
from google.genai import errors as genai_errors

from config.settings import Settings
from exceptions import (
    EmptyGenerationError,
    ExternalServiceError,
    GenerationBlockedError,
    GenerationError,
    GenerationStoppedError,
)
from services.gemini_service import GeminiService, GeneratedImage, Hotspot, get_gemini_service

from tests.factories import GeminiResponseFactory


class TestEditedImage:

    def test_returns_image(self, gemini_service, image_client):
        # Arrange
        image_client.queue(GeminiResponseFactory.image(b"new-pixels", "image/png"))

        # Act
        result = gemini_service.generate_edited_image(
            b"source", "image/png", "change shirt to blue", Hotspot(x=120, y=80)
        )

        # Assert
        assert result == GeneratedImage(data=b"new-pixels", mime_type="image/png")
        assert result.data_url.startswith("data:image/png;base64,")

    def test_prompt_includes_request_and_hotspot(self, gemini_service, image_client, text_client):
        image_client.queue(GeminiResponseFactory.image())

        gemini_service.generate_edited_image(
            b"source", "image/png", "change shirt to blue", Hotspot(x=120, y=80)
        )

        call = image_client.calls[0]
        assert call["model"] == "image-model"
        image_part, text_part = call["contents"]
        assert image_part.inline_data.data == b"source"
        assert image_part.inline_data.mime_type == "image/png"
        assert '"change shirt to blue"' in text_part.text
        assert "x: 120, y: 80" in text_part.text
        assert text_client.calls == []

    def test_blocked_wins_over_returned_image(self, gemini_service, image_client):
        image_client.queue(GeminiResponseFactory.blocked("SAFETY", with_image=True))

        with pytest.raises(GenerationBlockedError) as exc_info:
            gemini_service.generate_edited_image(b"s", "image/png", "p", Hotspot(1, 1))

        assert exc_info.value.reason == "SAFETY"
        assert exc_info.value.code == "GENERATION_BLOCKED"
        assert exc_info.value.status_code == 502
        assert "Reason: SAFETY" in exc_info.value.message

    def test_enum_block_reason_reported_by_value(self, gemini_service, image_client):
        response = GeminiResponseFactory.blocked()
        response.prompt_feedback.block_reason = SimpleNamespace(value="PROHIBITED_CONTENT")
        image_client.queue(response)

        with pytest.raises(GenerationBlockedError) as exc_info:
            gemini_service.generate_edited_image(b"s", "image/png", "p", Hotspot(1, 1))

        assert exc_info.value.reason == "PROHIBITED_CONTENT"

    def test_image_wins_over_finish_reason(self, gemini_service, image_client):
        image_client.queue(GeminiResponseFactory.image(b"ok", finish_reason="MAX_TOKENS"))

        result = gemini_service.generate_edited_image(b"s", "image/png", "p", Hotspot(1, 1))

        assert result.data == b"ok"

    def test_abnormal_finish_without_image(self, gemini_service, image_client):
        image_client.queue(GeminiResponseFactory.stopped("IMAGE_SAFETY"))

        with pytest.raises(GenerationStoppedError) as exc_info:
            gemini_service.generate_edited_image(b"s", "image/png", "p", Hotspot(1, 1))

        assert exc_info.value.finish_reason == "IMAGE_SAFETY"
        assert exc_info.value.code == "GENERATION_STOPPED"
        assert "edit" in exc_info.value.message

    def test_text_only_answer_is_empty_result(self, gemini_service, image_client):
        image_client.queue(GeminiResponseFactory.text("I cannot edit this photo."))

        with pytest.raises(EmptyGenerationError) as exc_info:
            gemini_service.generate_edited_image(b"s", "image/png", "p", Hotspot(1, 1))

        assert exc_info.value.text == "I cannot edit this photo."
        assert "I cannot edit this photo." in exc_info.value.message
        assert exc_info.value.code == "EMPTY_RESULT"

    def test_no_candidates_is_empty_result(self, gemini_service, image_client):
        image_client.queue(GeminiResponseFactory.empty())

        with pytest.raises(EmptyGenerationError) as exc_info:
            gemini_service.generate_edited_image(b"s", "image/png", "p", Hotspot(1, 1))

        assert exc_info.value.text is None

    def test_api_error_becomes_external_service_error(self, gemini_service, image_client):
        image_client.error = genai_errors.APIError(
            429,
            {"error": {"code": 429, "message": "Quota exceeded", "status": "RESOURCE_EXHAUSTED"}}
        )

        with pytest.raises(ExternalServiceError) as exc_info:
            gemini_service.generate_edited_image(b"s", "image/png", "p", Hotspot(1, 1))

        assert exc_info.value.code == "GEMINI_ERROR"
        assert not isinstance(exc_info.value, GenerationError)


class TestFilterAndAdjustment:

    def test_filter_prompt(self, gemini_service, image_client):
        image_client.queue(GeminiResponseFactory.image(b"filtered"))

        result = gemini_service.generate_filtered_image(b"s", "image/png", "Apply a vintage film look")

        assert result.data == b"filtered"
        assert '"Apply a vintage film look"' in image_client.calls[0]["contents"][1].text

    def test_adjustment_prompt(self, gemini_service, image_client):
        image_client.queue(GeminiResponseFactory.image(b"adjusted"))

        result = gemini_service.generate_adjusted_image(b"s", "image/png", "Blur the background")

        assert result.data == b"adjusted"
        assert "entire image" in image_client.calls[0]["contents"][1].text

    def test_filter_stopped_names_context(self, gemini_service, image_client):
        image_client.queue(GeminiResponseFactory.stopped("SAFETY"))

        with pytest.raises(GenerationStoppedError) as exc_info:
            gemini_service.generate_filtered_image(b"s", "image/png", "p")

        assert "filter" in exc_info.value.message


class TestDescription:

    def test_returns_stripped_text(self, gemini_service, text_client, image_client):
        # Arrange
        text_client.queue(GeminiResponseFactory.text("  An 18k gold band.  "))

        # Act
        text = gemini_service.generate_description(b"s", "image/png", "Write a description")

        # Assert
        assert text == "An 18k gold band."
        assert text_client.calls[0]["model"] == "text-model"
        assert image_client.calls == []

    def test_blocked(self, gemini_service, text_client):
        text_client.queue(GeminiResponseFactory.blocked("OTHER"))

        with pytest.raises(GenerationBlockedError):
            gemini_service.generate_description(b"s", "image/png", "p")

    def test_stopped_without_text(self, gemini_service, text_client):
        text_client.queue(GeminiResponseFactory.stopped("MAX_TOKENS"))

        with pytest.raises(GenerationStoppedError):
            gemini_service.generate_description(b"s", "image/png", "p")

    def test_empty_text(self, gemini_service, text_client):
        text_client.queue(GeminiResponseFactory.text("   "))

        with pytest.raises(EmptyGenerationError) as exc_info:
            gemini_service.generate_description(b"s", "image/png", "p")

        assert "did not return a text description" in exc_info.value.message


class TestConstruction:

    def test_from_settings_requires_both_keys(self):
        with pytest.raises(ExternalServiceError):
            GeminiService.from_settings(
                Settings(gemini_image_api_key="image-key", gemini_text_api_key=None)
            )

    def test_dependency_without_service(self):
        request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(gemini=None)))

        with pytest.raises(ExternalServiceError) as exc_info:
            get_gemini_service(request)

        assert exc_info.value.status_code == 503

    def test_dependency_returns_service(self, gemini_service):
        request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(gemini=gemini_service)))

        assert get_gemini_service(request) is gemini_service
