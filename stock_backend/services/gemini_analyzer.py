"""
Gemini Company Analyzer

Generates short company analyses with Google Gemini.
"""

import google.generativeai as genai

from stock_backend.errors import AnalysisError
from stock_backend.utils.logger import create_logger

logger = create_logger(__name__)


class GeminiAnalyzer:
    """Text analysis client wrapping a Gemini model."""

    def __init__(self, model: genai.GenerativeModel):
        """
        Initialize analyzer.

        Args:
            model: Configured Gemini model (see dependencies.get_gemini_model)
        """
        self.model = model

    def analyze(self, prompt: str) -> str:
        """
        Generate an analysis for the prompt.

        Raises:
            AnalysisError: If the Gemini request fails
        """
        try:
            logger.info("Generating company analysis with Gemini model...")
            response = self.model.generate_content(prompt)
            return response.text
        except Exception as e:
            raise AnalysisError(f"gemini API request failed: {e}") from e
