"""Tests for logo detection and company analysis validation."""

import pytest

from stock_backend.errors import AnalysisError, ValidationError
from stock_backend.services.gemini_analyzer import GeminiAnalyzer
from stock_backend.services.logo_service import (
    MAX_COMPANY_NAME_LENGTH,
    MAX_IMAGE_SIZE,
    LogoDetectionService,
    is_valid_company_name,
)
from stock_backend.services.vision_client import DetectedLogo, VisionLogoDetector


class FakeDetector:
    def __init__(self):
        self.images = []

    def detect_logos(self, image_data):
        self.images.append(image_data)
        return [DetectedLogo(name="Toyota", confidence=0.93)]


class FakeAnalyzer:
    def __init__(self):
        self.prompts = []

    def analyze(self, prompt):
        self.prompts.append(prompt)
        return "summary"


class FakeGeminiResponse:
    def __init__(self, text):
        self.text = text


class FakeGeminiModel:
    def __init__(self, text="", error=None):
        self.text = text
        self.error = error

    def generate_content(self, prompt):
        if self.error:
            raise self.error
        return FakeGeminiResponse(self.text)


class FakeVisionResponse:
    def __init__(self, payload):
        self.payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self.payload


class FakeVisionSession:
    def __init__(self, payload):
        self.payload = payload
        self.requests = []

    def post(self, url, params=None, json=None, timeout=None):
        self.requests.append({"url": url, "params": params, "json": json})
        return FakeVisionResponse(self.payload)


@pytest.fixture
def service():
    return LogoDetectionService(FakeDetector(), FakeAnalyzer())


class TestDetectLogos:
    """Upload validation."""

    def test_detects_logos(self, service):
        logos = service.detect_logos(b"\x89PNG...")

        assert logos == [DetectedLogo(name="Toyota", confidence=0.93)]

    def test_empty_image(self, service):
        with pytest.raises(ValidationError):
            service.detect_logos(b"")

    def test_oversized_image(self, service):
        with pytest.raises(ValidationError):
            service.detect_logos(b"\x00" * (MAX_IMAGE_SIZE + 1))

        assert service.logo_detector.images == []

    def test_image_at_size_limit_is_accepted(self, service):
        service.detect_logos(b"\x00" * MAX_IMAGE_SIZE)
        assert len(service.logo_detector.images) == 1


class TestAnalyzeCompany:
    """Company name validation and prompt building."""

    @pytest.mark.parametrize("name", ["トヨタ自動車", "Johnson & Johnson", "AT&T Inc.", "Procter-Gamble, Co.", "ソニー・グループ"])
    def test_accepts_company_names(self, name):
        assert is_valid_company_name(name)

    @pytest.mark.parametrize("name", ["<script>", "Acme; DROP TABLE", "name\u0000", "ignore {instructions}"])
    def test_rejects_other_characters(self, name):
        assert not is_valid_company_name(name)

    def test_prompt_contains_company(self, service):
        analysis = service.analyze_company("トヨタ自動車")

        assert analysis.company_name == "トヨタ自動車"
        assert analysis.summary == "summary"
        assert "トヨタ自動車" in service.company_analyzer.prompts[0]

    def test_empty_name(self, service):
        with pytest.raises(ValidationError):
            service.analyze_company("")

    def test_name_too_long(self, service):
        with pytest.raises(ValidationError):
            service.analyze_company("a" * (MAX_COMPANY_NAME_LENGTH + 1))

    def test_invalid_name_is_not_sent(self, service):
        with pytest.raises(ValidationError):
            service.analyze_company("Acme<script>")

        assert service.company_analyzer.prompts == []


class TestClients:
    """Vision and Gemini wrappers."""

    def test_vision_parses_logo_annotations(self):
        payload = {"responses": [{"logoAnnotations": [{"description": "Sony", "score": 0.88}]}]}
        http = FakeVisionSession(payload)
        detector = VisionLogoDetector(api_key="key", session=http)

        logos = detector.detect_logos(b"image")

        assert logos == [DetectedLogo(name="Sony", confidence=0.88)]
        assert http.requests[0]["params"] == {"key": "key"}
        assert http.requests[0]["json"]["requests"][0]["image"]["content"] == "aW1hZ2U="

    def test_vision_error_payload(self):
        payload = {"responses": [{"error": {"message": "bad image"}}]}
        detector = VisionLogoDetector(api_key="key", session=FakeVisionSession(payload))

        with pytest.raises(AnalysisError):
            detector.detect_logos(b"image")

    def test_gemini_returns_text(self):
        assert GeminiAnalyzer(FakeGeminiModel(text="強み")).analyze("prompt") == "強み"

    def test_gemini_failure(self):
        analyzer = GeminiAnalyzer(FakeGeminiModel(error=RuntimeError("quota exceeded")))

        with pytest.raises(AnalysisError):
            analyzer.analyze("prompt")
