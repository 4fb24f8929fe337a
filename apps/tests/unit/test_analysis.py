# apps/tests/unit/test_analysis.py

"""
Unit tests for the media analysis service.

Provider payloads are faked at the CloudinaryStorageService.get_resource
seam and the vision model at requests.post.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from apps.media.exceptions import StorageError
from apps.media.services.analysis import (
    ASSUMED_SAFE,
    DEMO_TAGS,
    NO_ISSUES,
    NO_SPEECH_DETECTED,
    NO_TEXT_DETECTED,
    SIMULATED_VISION_RESPONSES,
    MediaAnalysisService,
)

GET_RESOURCE = "apps.media.services.analysis.CloudinaryStorageService.get_resource"


def storage_down(*args, **kwargs):
    raise StorageError("resource", "x", "add-on missing")


class TestVision:

    def test_simulated_without_key(self):
        answer = MediaAnalysisService.answer_question("image-uploads/a", "Please describe it")

        assert answer.is_placeholder is True
        assert answer.response == SIMULATED_VISION_RESPONSES["describe"]

    def test_default_simulated_answer(self):
        answer = MediaAnalysisService.answer_question("image-uploads/a", "What is this?")

        assert answer.response == SIMULATED_VISION_RESPONSES["default"]

    @patch("apps.media.services.analysis.requests.post")
    def test_calls_model_with_delivery_url(self, mock_post, settings):
        settings.GROQ_API_KEY = "gsk-test"
        mock_post.return_value = MagicMock(
            json=MagicMock(return_value={"choices": [{"message": {"content": "A dog on a beach."}}]})
        )

        answer = MediaAnalysisService.answer_question("image-uploads/dog", "What is this?")

        assert answer.response == "A dog on a beach."
        assert answer.is_placeholder is False
        payload = mock_post.call_args[1]["json"]
        image_part = payload["messages"][0]["content"][1]
        assert "image-uploads/dog" in image_part["image_url"]["url"]
        assert mock_post.call_args[1]["headers"]["Authorization"] == "Bearer gsk-test"

    @patch("apps.media.services.analysis.requests.post")
    def test_upstream_failure_falls_back(self, mock_post, settings):
        settings.GROQ_API_KEY = "gsk-test"
        mock_post.side_effect = requests.ConnectionError("down")

        answer = MediaAnalysisService.answer_question("image-uploads/a", "Is it safe?")

        assert answer.is_placeholder is True
        assert answer.response == SIMULATED_VISION_RESPONSES["safe"]


class TestTags:

    @patch(GET_RESOURCE, return_value={"tags": ["dog", "beach"]})
    def test_provider_tags(self, mock_resource):
        assert MediaAnalysisService.suggest_tags("image-uploads/a").tags == ["dog", "beach"]

    @patch(GET_RESOURCE, return_value={"tags": ["uploader-7", "dog"]})
    def test_uploader_tags_are_hidden(self, mock_resource):
        assert MediaAnalysisService.suggest_tags("image-uploads/a").tags == ["dog"]

    @patch(GET_RESOURCE, return_value={
        "tags": [],
        "colors": [["Blue", 40.1], ["White", 20.0]],
        "format": "jpg",
        "width": 1200,
        "height": 800,
    })
    def test_inferred_tags(self, mock_resource):
        result = MediaAnalysisService.suggest_tags("image-uploads/a")

        assert result.tags == ["blue tones", "JPG", "Landscape", "Photo", "Digital"]
        assert result.is_placeholder is False

    @patch(GET_RESOURCE, side_effect=storage_down)
    def test_demo_tags_on_error(self, mock_resource):
        result = MediaAnalysisService.suggest_tags("image-uploads/a")

        assert result.tags == DEMO_TAGS
        assert result.is_placeholder is True


class TestOcr:

    @patch(GET_RESOURCE, return_value={
        "info": {"ocr": {"adv_ocr": {"data": [
            {"textAnnotations": [{"description": "Hello"}, {"description": "World"}]},
        ]}}},
    })
    def test_joins_annotations(self, mock_resource):
        assert MediaAnalysisService.extract_text("image-uploads/a").text == "Hello World"

    @patch(GET_RESOURCE, return_value={"info": {}})
    def test_no_text(self, mock_resource):
        assert MediaAnalysisService.extract_text("image-uploads/a").text == NO_TEXT_DETECTED

    @patch(GET_RESOURCE, side_effect=storage_down)
    def test_placeholder_on_error(self, mock_resource):
        assert MediaAnalysisService.extract_text("image-uploads/a").is_placeholder is True


class TestModeration:

    @patch(GET_RESOURCE, return_value={"moderation": [
        {"kind": "aws_rek", "status": "rejected"},
        {"kind": "webpurify", "status": "approved"},
    ]})
    def test_rejected_entry_flags(self, mock_resource):
        report = MediaAnalysisService.moderate("image-uploads/a")

        assert report.safe is False
        assert report.status == "flagged"
        assert report.categories == ["aws_rek"]

    @patch(GET_RESOURCE, return_value={"moderation": []})
    def test_clean_asset(self, mock_resource):
        report = MediaAnalysisService.moderate("video-uploads/a", "video")

        assert report.safe is True
        assert report.categories == [NO_ISSUES]
        assert mock_resource.call_args[1]["resource_type"] == "video"

    @patch(GET_RESOURCE, side_effect=storage_down)
    def test_unavailable_counts_as_approved(self, mock_resource):
        report = MediaAnalysisService.moderate("image-uploads/a")

        assert report.to_dict() == {
            "safe": True,
            "categories": [ASSUMED_SAFE],
            "status": "approved",
            "is_placeholder": True,
        }


class TestTranscription:

    @patch(GET_RESOURCE, return_value={"info": {"raw_convert": {"google_speech": {"data": [
        {"transcript": "Hello there"},
        {"transcript": "general"},
    ]}}}})
    def test_joins_segments(self, mock_resource):
        assert MediaAnalysisService.transcribe("video-uploads/a").transcript == "Hello there general"

    @patch(GET_RESOURCE, return_value={})
    def test_no_speech(self, mock_resource):
        assert MediaAnalysisService.transcribe("video-uploads/a").transcript == NO_SPEECH_DETECTED

    @pytest.mark.parametrize("tool", ["suggest_tags", "extract_text", "transcribe"])
    def test_never_raises_on_provider_error(self, tool):
        with patch(GET_RESOURCE, side_effect=storage_down):
            result = getattr(MediaAnalysisService, tool)("any")

        assert result.is_placeholder is True


class TestUnconfiguredProvider:

    @pytest.mark.parametrize("tool", ["suggest_tags", "extract_text", "moderate", "transcribe"])
    def test_placeholder_without_credentials(self, tool, settings):
        settings.CLOUDINARY_CLOUD_NAME = ""
        settings.CLOUDINARY_API_KEY = ""

        with patch(GET_RESOURCE) as mock_resource:
            result = getattr(MediaAnalysisService, tool)("image-uploads/a")

        assert result.is_placeholder is True
        mock_resource.assert_not_called()


class TestVisionResponseShape:

    @pytest.mark.parametrize("body", [["not", "an", "object"], "plain text", {"choices": {"0": {}}}])
    @patch("apps.media.services.analysis.requests.post")
    def test_unexpected_body_is_handled(self, mock_post, body, settings):
        settings.GROQ_API_KEY = "gsk-test"
        mock_post.return_value = MagicMock(json=MagicMock(return_value=body))

        answer = MediaAnalysisService.answer_question("image-uploads/a", "Describe this")

        assert isinstance(answer.response, str)
        assert answer.response

    @patch("apps.media.services.analysis.requests.post")
    def test_list_body_falls_back_to_simulated(self, mock_post, settings):
        settings.GROQ_API_KEY = "gsk-test"
        mock_post.return_value = MagicMock(json=MagicMock(return_value=[]))

        answer = MediaAnalysisService.answer_question("image-uploads/a", "Describe this")

        assert answer.is_placeholder is True
        assert answer.response == SIMULATED_VISION_RESPONSES["describe"]
