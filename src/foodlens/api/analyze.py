"""Meal photo analysis endpoint."""

from fastapi import APIRouter, Depends

from foodlens.api.deps import get_container
from foodlens.api.models import AnalyzeData, AnalyzeRequest, AnalyzeResponse
from foodlens.containers import AppContainer
from foodlens.domain.errors import InvalidImageError

router = APIRouter(prefix="/api", tags=["analysis"])


@router.post("/analyze")
async def analyze(
    body: AnalyzeRequest, container: AppContainer = Depends(get_container)
) -> AnalyzeResponse:
    """Estimate nutrition for an inline image."""
    if body.image is None or body.image.inline_data is None:
        raise InvalidImageError(
            "Invalid image data. Please ensure image is properly encoded."
        )
    analysis = await container.analysis_service.analyze(body.image.inline_data)
    return AnalyzeResponse(data=AnalyzeData(food_analysis=analysis))
