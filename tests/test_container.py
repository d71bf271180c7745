"""Tests for container wiring."""

import asyncio

import pytest

from foodlens.config import Settings
from foodlens.containers import build_container
from foodlens.domain.analysis import InlineImage
from foodlens.domain.errors import ConfigurationError
from tests.conftest import JPEG_BASE64


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)
    assert container.analysis_service.client is not None
    assert container.auth_service.default_redirect_uri == "foodlens://auth/callback"
    assert container.food_service is not None
    asyncio.run(container.close_resources())


def test_missing_openai_key_reported_at_analysis_time(settings: Settings) -> None:
    container = build_container(settings.model_copy(update={"openai_api_key": None}))

    assert container.analysis_service.client is None
    with pytest.raises(ConfigurationError):
        asyncio.run(
            container.analysis_service.analyze(
                InlineImage(data=JPEG_BASE64, mime_type="image/jpeg")
            )
        )
    asyncio.run(container.close_resources())
