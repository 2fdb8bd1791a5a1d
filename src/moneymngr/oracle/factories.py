"""Factory functions for creating the extraction oracle."""

from typing import Optional

from moneymngr.config import Settings, get_settings
from moneymngr.oracle.adapter import ExtractionOracle
from moneymngr.oracle.gemini import GeminiExtractionClient


def create_gemini_oracle(settings: Optional[Settings] = None) -> Optional[ExtractionOracle]:
    """Create an ExtractionOracle backed by Gemini.

    Args:
        settings: Settings to read the API key and model from. If None, the
            cached application settings are used.

    Returns:
        ExtractionOracle, or None when no API key is configured
    """
    if settings is None:
        settings = get_settings()

    if not settings.gemini_api_key:
        return None

    client = GeminiExtractionClient(
        api_key=settings.gemini_api_key,
        model_name=settings.gemini_model,
        timeout_seconds=settings.oracle_timeout_seconds,
    )
    return ExtractionOracle(client)
