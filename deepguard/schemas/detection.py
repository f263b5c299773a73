from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_serializer
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProviderDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    version_token: str


class PredictionStatus(str, Enum):
    STARTING = "starting"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (PredictionStatus.SUCCEEDED, PredictionStatus.FAILED)

    @property
    def rank(self) -> int:
        # Both terminal states share a rank: neither may follow the other.
        return {"starting": 0, "processing": 1, "succeeded": 2, "failed": 2}[self.value]


class PredictionJob(BaseModel):
    id: str
    status: PredictionStatus = PredictionStatus.STARTING
    raw_output: Any = None
    error_message: Optional[str] = None


class CanonicalVerdict(CamelModel):
    is_fake: Optional[bool] = None
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0)
    label: Optional[str] = None     # "fake" | "real"; absent for passthrough verdicts
    media_url: str
    model_id: str
    is_fallback: bool = False

    @classmethod
    def from_confidence(
        cls,
        confidence: float,
        threshold: float,
        media_url: str,
        model_id: str,
        is_fallback: bool = False,
    ) -> "CanonicalVerdict":
        label = "fake" if confidence > threshold else "real"
        return cls(
            is_fake=label == "fake",
            confidence=confidence,
            label=label,
            media_url=media_url,
            model_id=model_id,
            is_fallback=is_fallback,
        )

    @property
    def is_determined(self) -> bool:
        return self.confidence is not None

    @model_serializer(mode="wrap")
    def _drop_undetermined(self, handler) -> dict[str, Any]:
        data = handler(self)
        return {key: value for key, value in data.items() if value is not None}


class DetectRequest(CamelModel):
    # Untyped so missing or mistyped fields reach the pipeline's own validation (400, not 422).
    media_url: Any = None
    model_id: Any = None


class DetectionResponse(BaseModel):
    result: CanonicalVerdict
    raw: Any = None


class ModelInfo(BaseModel):
    id: str


class ModelsResponse(BaseModel):
    models: List[ModelInfo]
