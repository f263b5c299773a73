from deepguard.schemas.detection import (
    CanonicalVerdict,
    DetectionResponse,
    DetectRequest,
    ModelInfo,
    ModelsResponse,
    PredictionJob,
    PredictionStatus,
    ProviderDescriptor,
)

__all__ = [
    "CanonicalVerdict",
    "DetectionResponse",
    "DetectRequest",
    "ModelInfo",
    "ModelsResponse",
    "PredictionJob",
    "PredictionStatus",
    "ProviderDescriptor",
]
