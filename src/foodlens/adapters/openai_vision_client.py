"""OpenAI Responses API client for meal analysis."""

import logging
from dataclasses import dataclass

import openai
from openai import AsyncOpenAI

from foodlens.domain.errors import (
    AnalysisFormatError,
    RateLimitedError,
    UpstreamAuthError,
)
from foodlens.services.analysis import VisionClient

logger = logging.getLogger(__name__)


@dataclass
class OpenAIVisionClient(VisionClient):
    """Vision client backed by OpenAI Responses API."""

    client: AsyncOpenAI
    model: str
    reasoning_effort: str | None = None
    store: bool = False

    @classmethod
    def create(
        cls,
        api_key: str,
        model: str,
        reasoning_effort: str | None = None,
        store: bool = False,
    ) -> "OpenAIVisionClient":
        """Create an OpenAI vision client."""
        return cls(
            client=AsyncOpenAI(api_key=api_key),
            model=model,
            reasoning_effort=reasoning_effort,
            store=store,
        )

    async def complete(self, *, prompt: str, image_data_url: str) -> str:
        """Send the prompt and image and return the output text."""
        request_payload: dict[str, object] = {
            "model": self.model,
            "input": [
                {
                    "role": "user",
                    "content": [
                        {"type": "input_text", "text": prompt},
                        {"type": "input_image", "image_url": image_data_url},
                    ],
                }
            ],
            "store": self.store,
        }
        if self.reasoning_effort:
            request_payload["reasoning"] = {"effort": self.reasoning_effort}

        try:
            response = await self.client.responses.create(**request_payload)
        except openai.RateLimitError as exc:
            logger.warning("OpenAI rate limit or quota reached")
            raise RateLimitedError() from exc
        except openai.AuthenticationError as exc:
            logger.error("OpenAI rejected the configured API key")
            raise UpstreamAuthError() from exc
        output_text = response.output_text
        if not output_text:
            raise AnalysisFormatError("OpenAI returned an empty response")
        return output_text

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.close()
