"""
Top-level detection pipeline — public entry point for the /detect route.

`DetectionPipeline.detect` runs:
  1. Media reference validation        → ValidationError (surfaced)
  2. Provider resolution               → UnknownProviderError (surfaced)
  3. Credential check                  → ConfigurationError (surfaced)
  4. Submit → poll → normalize         → any provider-side failure is
                                         demoted to a synthetic verdict

Steps 1–3 are caller or operator mistakes and are never hidden. Step 4
always yields a verdict: the caller cannot tell a provider outage from a
genuine result except through `isFallback` and the WARNING log.
"""

import asyncio
import logging
from typing import Any, Optional, Tuple

import aiohttp

from deepguard.core.errors import ConfigurationError, ProviderError, ProviderJobFailedError
from deepguard.core.result import Err, Ok, Result
from deepguard.detection.media import MediaKind, classify_media_reference
from deepguard.detection.mock import MockResultGenerator
from deepguard.detection.normalizer import ResultNormalizer
from deepguard.detection.registry import ProviderRegistry
from deepguard.integrations.replicate import PredictionClient
from deepguard.schemas.detection import (
    CanonicalVerdict,
    DetectionResponse,
    PredictionStatus,
    ProviderDescriptor,
)

logger = logging.getLogger(__name__)

# Raised by the transport layer outside the client's own error wrapping.
_TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)

Inference = Tuple[CanonicalVerdict, Any]


class DetectionPipeline:
    def __init__(
        self,
        registry: ProviderRegistry,
        client: PredictionClient,
        normalizer: ResultNormalizer,
        mock_generator: MockResultGenerator,
        credential: Optional[str],
    ):
        self.registry = registry
        self.client = client
        self.normalizer = normalizer
        self.mock_generator = mock_generator
        self.credential = credential

    async def detect(self, media_ref: Optional[str], provider_id: Optional[str] = None) -> DetectionResponse:
        kind = classify_media_reference(media_ref)
        descriptor = self.registry.resolve(provider_id)
        if not self.credential:
            logger.error("[PIPELINE] Replicate API token not configured")
            raise ConfigurationError("Replicate API token not configured")

        if kind is MediaKind.EMBEDDED:
            return self._fallback(media_ref, "embedded payloads are not forwarded to providers")

        logger.info(f"[PIPELINE] Processing detection for media: {media_ref} using model: {descriptor.id}")

        outcome = await self._infer(media_ref, descriptor)
        if isinstance(outcome, Err):
            return self._fallback(media_ref, f"{type(outcome.error).__name__}: {outcome.error}")

        verdict, raw = outcome.value
        return DetectionResponse(result=verdict, raw=raw)

    async def _infer(self, media_url: str, descriptor: ProviderDescriptor) -> Result[Inference, Exception]:
        try:
            job_id = await self.client.submit(media_url, descriptor, self.credential)
            job = await self.client.await_terminal(job_id, self.credential)
            if job.status is PredictionStatus.FAILED:
                raise ProviderJobFailedError(job.id, job.error_message)
            verdict = self.normalizer.normalize(job, descriptor, media_url)
        except (ProviderError, *_TRANSPORT_ERRORS) as e:
            return Err(e)
        return Ok((verdict, job.raw_output))

    def _fallback(self, media_url: str, reason: str) -> DetectionResponse:
        verdict, raw = self.mock_generator.generate(media_url, reason=reason)
        return DetectionResponse(result=verdict, raw=raw)
