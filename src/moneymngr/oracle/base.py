"""Abstract extraction client interface."""

from abc import ABC, abstractmethod
from typing import Any


class ExtractionClient(ABC):
    """Transport to an external text-understanding service.

    Implementations send the raw text with a response schema and return the
    decoded JSON object. They raise ``ExtractionFailure`` on transport or
    decoding problems and never retry.
    """

    @abstractmethod
    async def extract(self, text: str, schema: dict[str, Any]) -> dict[str, Any]:
        """Return the structured extraction for ``text``."""
        pass
