"""Extraction oracle: adapter, transport interface and Gemini client."""

from moneymngr.oracle.adapter import DEFAULT_ORACLE_CONFIDENCE, EXTRACTION_SCHEMA, ExtractionOracle
from moneymngr.oracle.base import ExtractionClient

__all__ = [
    "DEFAULT_ORACLE_CONFIDENCE",
    "EXTRACTION_SCHEMA",
    "ExtractionClient",
    "ExtractionOracle",
]
