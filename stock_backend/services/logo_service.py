"""
Logo Detection Service

Validates uploads and company names before calling the Vision and Gemini
clients.
"""

from dataclasses import dataclass
from typing import List

from stock_backend.errors import ValidationError
from stock_backend.services.vision_client import DetectedLogo

MAX_IMAGE_SIZE = 10 * 1024 * 1024  # 10 MiB
MAX_COMPANY_NAME_LENGTH = 100
ANALYSIS_PROMPT_TEMPLATE = "日本語で、企業分析の観点から{company}の強みを3つ挙げて。"


@dataclass
class CompanyAnalysis:
    company_name: str
    summary: str


def is_valid_company_name(name: str) -> bool:
    # Letters, digits, whitespace and ・-.&,
    return all(ch.isalnum() or ch.isspace() or ch in "・-.&," for ch in name)


class LogoDetectionService:
    """Logo detection and company analysis use cases."""

    def __init__(self, logo_detector, company_analyzer):
        """
        Initialize logo detection service.

        Args:
            logo_detector: Client exposing detect_logos(image_data)
            company_analyzer: Client exposing analyze(prompt)
        """
        self.logo_detector = logo_detector
        self.company_analyzer = company_analyzer

    def detect_logos(self, image_data: bytes) -> List[DetectedLogo]:
        if not image_data:
            raise ValidationError("image data is empty")
        if len(image_data) > MAX_IMAGE_SIZE:
            raise ValidationError(f"image size exceeds maximum of {MAX_IMAGE_SIZE} bytes")
        return self.logo_detector.detect_logos(image_data)

    def analyze_company(self, company_name: str) -> CompanyAnalysis:
        """
        Generate an analysis summary for a company.

        Raises:
            ValidationError: If the name is empty, too long or has invalid characters
            AnalysisError: If the analyzer fails
        """
        if not company_name:
            raise ValidationError("company name is required")
        if len(company_name) > MAX_COMPANY_NAME_LENGTH:
            raise ValidationError(
                f"company name exceeds maximum length of {MAX_COMPANY_NAME_LENGTH} characters"
            )
        if not is_valid_company_name(company_name):
            raise ValidationError("company name contains invalid characters")

        prompt = ANALYSIS_PROMPT_TEMPLATE.format(company=company_name)
        summary = self.company_analyzer.analyze(prompt)
        return CompanyAnalysis(company_name=company_name, summary=summary)
