"""
Synthetic verdicts for when real inference cannot be completed.

The shape matches a genuine result from the default provider so that the
UI keeps working; `is_fallback` is the only schema-level marker, and every
generated verdict is logged at WARNING.
"""

import logging
import random
from typing import Optional, Tuple

from deepguard.config import settings
from deepguard.schemas.detection import CanonicalVerdict

logger = logging.getLogger(__name__)


class MockResultGenerator:
    def __init__(
        self,
        default_model_id: str = settings.default_model_id,
        threshold: float = settings.fake_threshold,
        confidence_min: float = settings.mock_confidence_min,
        confidence_max: float = settings.mock_confidence_max,
        rng: Optional[random.Random] = None,
    ):
        if not 0.0 <= confidence_min <= confidence_max <= 1.0:
            raise ValueError("mock confidence range must satisfy 0 <= min <= max <= 1")
        self.default_model_id = default_model_id
        self.threshold = threshold
        self.confidence_min = confidence_min
        self.confidence_max = confidence_max
        self._rng = rng or random.Random()

    def generate(self, media_url: str, reason: str = "unspecified") -> Tuple[CanonicalVerdict, str]:
        """Returns (verdict, raw) where raw mirrors the decimal-string output of the default provider."""
        # Kept away from 0 and 1 so the fake score looks plausible.
        confidence = self._rng.uniform(self.confidence_min, self.confidence_max)
        confidence = min(max(confidence, self.confidence_min), self.confidence_max)

        verdict = CanonicalVerdict.from_confidence(
            confidence,
            self.threshold,
            media_url=media_url,
            model_id=self.default_model_id,
            is_fallback=True,
        )
        logger.warning(
            f"[FALLBACK] Returning synthetic verdict ({reason}): "
            f"confidence={confidence:.4f}, label={verdict.label}"
        )
        return verdict, str(confidence)
