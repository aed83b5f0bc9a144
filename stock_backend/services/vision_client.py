"""
Google Vision Logo Detector

Detects company logos in an image with the Cloud Vision REST API
(images:annotate, LOGO_DETECTION).
"""

import base64
from dataclasses import dataclass
from typing import List
import requests

from stock_backend.config import GOOGLE_VISION_API_KEY
from stock_backend.errors import AnalysisError
from stock_backend.utils.logger import create_logger

logger = create_logger(__name__)

VISION_ANNOTATE_URL = "https://vision.googleapis.com/v1/images:annotate"


@dataclass
class DetectedLogo:
    name: str
    confidence: float  # 0.0 - 1.0


class VisionLogoDetector:
    """Logo detection client for Google Cloud Vision."""

    def __init__(self, api_key: str = GOOGLE_VISION_API_KEY, timeout: int = 15, session: requests.Session = None):
        self.api_key = api_key
        self.timeout = timeout
        self.http = session or requests.Session()

    def detect_logos(self, image_data: bytes) -> List[DetectedLogo]:
        """
        Detect logos in raw image bytes.

        Raises:
            AnalysisError: If the request fails or the API reports an error
        """
        payload = {
            "requests": [
                {
                    "image": {"content": base64.b64encode(image_data).decode("ascii")},
                    "features": [{"type": "LOGO_DETECTION"}],
                }
            ]
        }

        try:
            response = self.http.post(
                VISION_ANNOTATE_URL,
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            raise AnalysisError(f"vision API request failed: {e}") from e

        responses = body.get("responses") or []
        if not responses:
            return []

        first = responses[0]
        if first.get("error"):
            raise AnalysisError(f"vision API error: {first['error'].get('message')}")

        logos = [
            DetectedLogo(name=logo.get("description", ""), confidence=float(logo.get("score", 0.0)))
            for logo in first.get("logoAnnotations", [])
        ]
        logger.info(f"Vision detected {len(logos)} logo(s)")
        return logos
