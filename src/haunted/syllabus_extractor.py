# extracts course units and topics from a syllabus image
import asyncio
import base64
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .config import get_settings
from .exceptions import ExtractionError
from .llm_service import OllamaLLMService, get_llm_service
from .models import RetryOptions, SyllabusData, SyllabusUnit
from .retry import call_with_retry

logger = logging.getLogger(__name__)

SYLLABUS_PROMPT = """You are an expert academic assistant. Analyze the provided syllabus image.
Identify and extract every distinct unit or section. For each unit extract:
1. The full title, including the unit number (e.g. "Unit 1: Introduction"). Correct any spelling mistakes.
2. A list of all sub-topics, keywords or concepts listed under that title.
Ignore page numbers and any other metadata not related to topics.
Respond with JSON only, in this shape:
{"units": [{"id": "unit1", "title": "Unit 1: ...", "topics": ["...", "..."]}]}"""


class SyllabusExtractor:
    """Turns a syllabus image into structured units through the vision model"""

    def __init__(self, llm_service: Optional[OllamaLLMService] = None, retry_options: Optional[RetryOptions] = None):
        self.llm_service = llm_service or get_llm_service()
        self.retry_options = retry_options or get_settings().retry_options()

    async def extract(self, image_bytes: bytes) -> SyllabusData:
        """Send the image to the model and validate the units it returns"""
        encoded = base64.b64encode(image_bytes).decode("ascii")

        async def ask_model() -> Dict[str, Any]:
            return await asyncio.to_thread(self.llm_service.generate_json, SYLLABUS_PROMPT, [encoded])

        result = await call_with_retry(ask_model, self.retry_options)
        syllabus = self._parse_units(result)

        if not syllabus.units:
            raise ExtractionError(
                "Could not identify course units in the syllabus. "
                "Please ensure the image contains a clear syllabus structure."
            )

        logger.info(f"✓ Extracted {len(syllabus.units)} units from syllabus")
        return syllabus

    # validate the raw model output, tolerating missing ids and stray fields
    def _parse_units(self, result: Any) -> SyllabusData:
        if not isinstance(result, dict) or not isinstance(result.get("units"), list):
            return SyllabusData(units=[])

        units = []
        for position, raw in enumerate(result["units"], start=1):
            if not isinstance(raw, dict):
                continue
            raw["id"] = str(raw.get("id") or f"unit{position}")
            try:
                unit = SyllabusUnit(**raw)
            except ValidationError as e:
                logger.warning(f"Skipping malformed unit {position}: {e}")
                continue
            unit.title = unit.title.strip()
            unit.topics = [topic.strip() for topic in unit.topics if topic and topic.strip()]
            if unit.title:
                units.append(unit)

        return SyllabusData(units=units)
