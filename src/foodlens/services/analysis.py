"""Nutrition analysis service backed by a multimodal model."""

import base64
import binascii
import json
import logging
import re
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from foodlens.domain.analysis import AnalysisEnvelope, FoodAnalysis, InlineImage
from foodlens.domain.errors import (
    AnalysisFormatError,
    ConfigurationError,
    InvalidImageError,
)

logger = logging.getLogger(__name__)

ANALYSIS_PROMPT = """Analyze this food image and provide detailed nutritional information in the following JSON format:
{
  "foodAnalysis": {
    "identifiedFood": "Name of what you see in the image",
    "portionSize": "Estimated portion size in grams",
    "recognizedServingSize": "Estimated serving size in grams",
    "nutritionFactsPerPortion": {
      "calories": "Estimated calories",
      "protein": "Estimated protein in grams",
      "carbs": "Estimated carbs in grams",
      "fat": "Estimated fat in grams",
      "fiber": "Estimated fiber in grams",
      "sugar": "Estimated sugar in grams",
      "sodium": "Estimated sodium in mg",
      "cholesterol": "Estimated cholesterol in mg"
    },
    "additionalNotes": [
      "Any notable nutritional characteristics",
      "Presence of allergens",
      "Whether it's vegetarian/vegan/gluten-free if applicable"
    ]
  }
}

If the image does not show food you can identify, set "identifiedFood" to "unknown".
Ensure the response is in valid JSON format exactly as specified above, without any markdown formatting.
Provide realistic estimates based on typical portion sizes and nutritional databases.
Be as specific and accurate as possible in identifying the food and its components."""

_FENCE_PATTERN = re.compile(r"```(?:json)?\n?|\n?```")
_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)


class VisionClient(Protocol):
    """Interface for a hosted multimodal model."""

    async def complete(self, *, prompt: str, image_data_url: str) -> str:
        """Return the raw text the model produced for the prompt and image."""


@dataclass
class AnalysisService:
    """Validates images, prompts the model and parses its answer."""

    client: VisionClient | None

    async def analyze(self, image: InlineImage) -> FoodAnalysis:
        """Return a nutrition estimate for an inline image."""
        if self.client is None:
            raise ConfigurationError(
                "API key not configured. Please set OPENAI_API_KEY."
            )
        data_url = to_data_url(image)
        raw = await self.client.complete(
            prompt=ANALYSIS_PROMPT, image_data_url=data_url
        )
        analysis = parse_analysis(raw)
        logger.info(
            "Analysis finished",
            extra={"identified_food": analysis.identified_food},
        )
        return analysis


def to_data_url(image: InlineImage) -> str:
    """Validate an inline image and convert it to a base64 data URL."""
    if not image.data:
        raise InvalidImageError(
            "Invalid image data. Please ensure image is properly encoded."
        )
    try:
        decoded = base64.b64decode(image.data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidImageError("Image data is not valid base64.") from exc
    if not decoded:
        raise InvalidImageError("Image data is empty.")
    mime_type = image.mime_type or _detect_mime_type(decoded)
    if not mime_type.startswith("image/"):
        raise InvalidImageError(f"Unsupported MIME type: {mime_type}")
    return f"data:{mime_type};base64,{image.data}"


def parse_analysis(text: str) -> FoodAnalysis:
    """Parse model output into a validated analysis."""
    payload = extract_json(text)
    try:
        return AnalysisEnvelope.model_validate(payload).food_analysis
    except ValidationError as exc:
        logger.warning("Model output did not match the analysis shape")
        raise AnalysisFormatError() from exc


def extract_json(text: str) -> object:
    """Strip markdown fences and parse JSON, falling back to the outer object."""
    if not text:
        raise AnalysisFormatError("Empty response from AI service. Please try again.")
    cleaned = _FENCE_PATTERN.sub("", text).strip()
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass
    match = _OBJECT_PATTERN.search(text)
    if match:
        try:
            return json.loads(match.group(0))
        except json.JSONDecodeError:
            pass
    logger.error("Failed to parse model response as JSON: %r", text[:1000])
    raise AnalysisFormatError()


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
