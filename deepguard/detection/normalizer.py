"""
Provider output → CanonicalVerdict.

Each provider has its own output schema, so decoding goes through a table
of decoder functions keyed by provider id. Providers without a decoder get
a passthrough verdict (media URL and model id only, no score).
"""

import logging
import math
from typing import Any, Callable, Dict, Optional

from deepguard.config import settings
from deepguard.core.errors import MalformedOutputError
from deepguard.detection.registry import DEEPFAKE_DETECTION, FAKE_IMAGE_DETECTION
from deepguard.schemas.detection import (
    CanonicalVerdict,
    PredictionJob,
    PredictionStatus,
    ProviderDescriptor,
)

logger = logging.getLogger(__name__)

# raw_output -> confidence in [0, 1]
Decoder = Callable[[Any], float]

# The categorical provider has no continuous score; these stand in for one.
CATEGORICAL_FAKE_CONFIDENCE = 0.85
CATEGORICAL_REAL_CONFIDENCE = 0.15
FAKE_TOKEN = "fake"


def decode_probability(output: Any) -> float:
    """Output is a fake-probability, usually as a decimal string ("0.83")."""
    if isinstance(output, bool) or not isinstance(output, (str, int, float)):
        raise MalformedOutputError(f"Expected a numeric probability, got {type(output).__name__}")
    try:
        value = float(output)
    except ValueError:
        raise MalformedOutputError(f"Expected a numeric probability, got {output!r}")

    if not math.isfinite(value) or not 0.0 <= value <= 1.0:
        raise MalformedOutputError(f"Probability out of range: {output!r}")
    return value


def decode_categorical(output: Any) -> float:
    """Output is free text; a 'fake' token anywhere marks the image as fake."""
    if not isinstance(output, str):
        raise MalformedOutputError(f"Expected text output, got {type(output).__name__}")
    if FAKE_TOKEN in output.lower():
        return CATEGORICAL_FAKE_CONFIDENCE
    return CATEGORICAL_REAL_CONFIDENCE


DEFAULT_DECODERS: Dict[str, Decoder] = {
    FAKE_IMAGE_DETECTION: decode_probability,
    DEEPFAKE_DETECTION: decode_categorical,
}


class ResultNormalizer:
    def __init__(
        self,
        decoders: Optional[Dict[str, Decoder]] = None,
        threshold: float = settings.fake_threshold,
    ):
        self._decoders: Dict[str, Decoder] = dict(DEFAULT_DECODERS if decoders is None else decoders)
        self.threshold = threshold

    def register(self, provider_id: str, decoder: Decoder) -> None:
        self._decoders[provider_id] = decoder

    def supports(self, provider_id: str) -> bool:
        return provider_id in self._decoders

    def normalize(self, job: PredictionJob, descriptor: ProviderDescriptor, media_url: str) -> CanonicalVerdict:
        if job.status is not PredictionStatus.SUCCEEDED:
            raise MalformedOutputError(f"Prediction {job.id} has no result (status={job.status.value})")

        decoder = self._decoders.get(descriptor.id)
        if decoder is None:
            logger.info(f"[NORMALIZE] No decoder for {descriptor.id}, returning passthrough verdict")
            return CanonicalVerdict(media_url=media_url, model_id=descriptor.id)

        if job.raw_output is None:
            raise MalformedOutputError(f"Prediction {job.id} succeeded with empty output")

        try:
            confidence = float(decoder(job.raw_output))
        except MalformedOutputError:
            raise
        except Exception as e:
            raise MalformedOutputError(f"{descriptor.id} output could not be decoded: {e!r}") from e
        if not math.isfinite(confidence) or not 0.0 <= confidence <= 1.0:
            raise MalformedOutputError(f"{descriptor.id} decoded confidence out of range: {confidence!r}")

        verdict = CanonicalVerdict.from_confidence(
            confidence, self.threshold, media_url=media_url, model_id=descriptor.id
        )
        logger.info(
            f"[NORMALIZE] {descriptor.id}: confidence={confidence:.4f}, label={verdict.label}"
        )
        return verdict
