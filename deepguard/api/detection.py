"""
Detection route: /detect

Accepts JSON `{ "mediaUrl": "https://...", "modelId": "..." }`.
Caller and configuration errors propagate as DetectionError and are
rendered by the app-level handler; provider failures come back as a
fallback verdict with `isFallback: true`.
"""

import logging

from fastapi import APIRouter, Depends

from deepguard.core.dependencies import get_pipeline
from deepguard.detection.pipeline import DetectionPipeline
from deepguard.schemas.detection import DetectionResponse, DetectRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Detection"])


@router.post("/detect", response_model=DetectionResponse)
async def detect(body: DetectRequest, pipeline: DetectionPipeline = Depends(get_pipeline)):
    response = await pipeline.detect(body.media_url, body.model_id)

    if response.result.is_fallback:
        logger.warning(f"[ROUTE] Served fallback verdict for {body.model_id or pipeline.registry.default_id}")
    return response
