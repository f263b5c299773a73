"""
Wiring for the detection pipeline.

`build_pipeline` assembles the pipeline from settings once, inside the
FastAPI lifespan; route handlers receive it through `get_pipeline`, which
tests override via `app.dependency_overrides`.
"""

from typing import Optional

from fastapi import Depends, Request

from deepguard.config import Settings, settings as default_settings
from deepguard.detection.mock import MockResultGenerator
from deepguard.detection.normalizer import ResultNormalizer
from deepguard.detection.pipeline import DetectionPipeline
from deepguard.detection.registry import ProviderRegistry, build_default_registry
from deepguard.integrations.replicate import PredictionClient


def build_pipeline(
    config: Optional[Settings] = None,
    registry: Optional[ProviderRegistry] = None,
) -> DetectionPipeline:
    config = config or default_settings
    registry = registry or build_default_registry(default_id=config.default_model_id)
    return DetectionPipeline(
        registry=registry,
        client=PredictionClient(
            api_url=config.replicate_api_url,
            poll_interval_ms=config.poll_interval_ms,
            max_attempts=config.max_poll_attempts,
            submit_timeout_sec=config.submit_timeout_sec,
            poll_timeout_sec=config.poll_timeout_sec,
        ),
        normalizer=ResultNormalizer(threshold=config.fake_threshold),
        mock_generator=MockResultGenerator(
            default_model_id=registry.default_id,
            threshold=config.fake_threshold,
            confidence_min=config.mock_confidence_min,
            confidence_max=config.mock_confidence_max,
        ),
        credential=config.replicate_api_token,
    )


def get_pipeline(request: Request) -> DetectionPipeline:
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        pipeline = build_pipeline()
        request.app.state.pipeline = pipeline
    return pipeline


def get_registry(pipeline: DetectionPipeline = Depends(get_pipeline)) -> ProviderRegistry:
    return pipeline.registry
