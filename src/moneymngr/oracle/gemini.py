"""Gemini-backed extraction client."""

import asyncio
import json
from typing import Any

import google.generativeai as genai

from moneymngr.domain.errors import ExtractionFailure
from moneymngr.oracle.base import ExtractionClient
from moneymngr.utils.log import get_logger

log = get_logger(__name__)

PROMPT_TEMPLATE = """Analyze this bank SMS and extract transaction details.
Use type EXPENSE for money leaving the account and INCOME for money arriving.
Give confidence as a number from 0 to 100.
SMS: "{text}"
"""


class GeminiExtractionClient(ExtractionClient):
    """Extraction client calling a Gemini model with a JSON response schema."""

    def __init__(
        self,
        api_key: str,
        model_name: str = "gemini-1.5-flash",
        timeout_seconds: float = 20.0,
        temperature: float = 0.1,
    ):
        """Initialize the client.

        Args:
            api_key: Gemini API key
            model_name: Model to call
            timeout_seconds: Upper bound for one request
            temperature: Sampling temperature
        """
        genai.configure(api_key=api_key)
        self.model_name = model_name
        self.timeout_seconds = timeout_seconds
        self.temperature = temperature

    def _build_model(self, schema: dict[str, Any]) -> "genai.GenerativeModel":
        return genai.GenerativeModel(
            model_name=self.model_name,
            generation_config={
                "temperature": self.temperature,
                "response_mime_type": "application/json",
                "response_schema": schema,
            },
        )

    async def extract(self, text: str, schema: dict[str, Any]) -> dict[str, Any]:
        model = self._build_model(schema)
        prompt = PROMPT_TEMPLATE.format(text=text)
        log.debug("oracle_request", model=self.model_name, text_length=len(text))

        try:
            response = await asyncio.wait_for(
                model.generate_content_async(prompt), timeout=self.timeout_seconds
            )
            raw = (response.text or "").strip() or "{}"
        except asyncio.TimeoutError as e:
            raise ExtractionFailure(
                f"Extraction service timed out after {self.timeout_seconds}s"
            ) from e
        except Exception as e:
            raise ExtractionFailure(f"Extraction service request failed: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ExtractionFailure(f"Extraction service returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ExtractionFailure("Extraction service returned a non-object payload")
        return data
