"""
Prediction API client (Replicate-style wire protocol).

    POST /v1/predictions        {version, input: {image}}   → {id, status}
    GET  /v1/predictions/{id}                               → {status, output, error}

`submit` starts a job, `await_terminal` polls it until `succeeded`/`failed`
or until the attempt budget runs out. Every network call carries its own
short timeout, so one hung call cannot stall the whole budget.

Transport errors are not retried here: the attempt budget is the only
retry mechanism, and a failed poll ends the wait immediately.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import aiohttp

from deepguard.config import settings
from deepguard.core.cancellation import CancellationToken
from deepguard.core.errors import (
    ConfigurationError,
    ProviderPollError,
    ProviderSubmitError,
    ProviderTimeoutError,
)
from deepguard.integrations import http_client as http_module
from deepguard.schemas.detection import PredictionJob, PredictionStatus, ProviderDescriptor

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[Any]]

# Wire statuses that map onto the four-state job model.
_WIRE_STATUSES = {
    "starting": PredictionStatus.STARTING,
    "processing": PredictionStatus.PROCESSING,
    "succeeded": PredictionStatus.SUCCEEDED,
    "failed": PredictionStatus.FAILED,
    "canceled": PredictionStatus.FAILED,
}


def _headers(credential: str) -> dict:
    return {
        "Authorization": f"Bearer {credential}",
        "Content-Type": "application/json",
    }


def _require_credential(credential: Optional[str]) -> None:
    if not credential:
        raise ConfigurationError("Replicate API token not configured")


class PredictionClient:
    def __init__(
        self,
        api_url: str = settings.replicate_api_url,
        poll_interval_ms: int = settings.poll_interval_ms,
        max_attempts: int = settings.max_poll_attempts,
        submit_timeout_sec: float = settings.submit_timeout_sec,
        poll_timeout_sec: float = settings.poll_timeout_sec,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.api_url = api_url.rstrip("/")
        self.poll_interval_ms = poll_interval_ms
        self.max_attempts = max_attempts
        self.submit_timeout_sec = submit_timeout_sec
        self.poll_timeout_sec = poll_timeout_sec
        self._sleep = sleep

    async def submit(self, media_ref: str, descriptor: ProviderDescriptor, credential: Optional[str]) -> str:
        """Starts a prediction and returns its job id."""
        _require_credential(credential)

        url = f"{self.api_url}/v1/predictions"
        payload = {"version": descriptor.version_token, "input": {"image": media_ref}}
        timeout = aiohttp.ClientTimeout(total=self.submit_timeout_sec)

        logger.info(f"[SUBMIT] Starting prediction with {descriptor.id}")

        try:
            async with http_module.request_session() as sess:
                async with sess.post(url, json=payload, headers=_headers(credential), timeout=timeout) as response:
                    if not 200 <= response.status < 300:
                        error_text = await response.text()
                        logger.error(f"[SUBMIT] Prediction API error: {response.status} - {error_text}")
                        raise ProviderSubmitError(f"Failed to start prediction: HTTP {response.status}")
                    body = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"[SUBMIT] Request failed: {e!r}")
            raise ProviderSubmitError(f"Failed to start prediction: {e!r}") from e

        job_id = body.get("id") if isinstance(body, dict) else None
        if not isinstance(job_id, str) or not job_id:
            logger.error(f"[SUBMIT] No usable prediction id returned: {job_id!r}")
            raise ProviderSubmitError("Failed to start prediction: no prediction id returned")

        logger.info(f"[SUBMIT] Prediction started with ID: {job_id}")
        return job_id

    async def await_terminal(
        self,
        job_id: str,
        credential: Optional[str],
        poll_interval_ms: Optional[int] = None,
        max_attempts: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> PredictionJob:
        """
        Polls `job_id` until it reaches a terminal status.

        Makes at most `max_attempts` status calls with `poll_interval_ms` between
        them (no sleep after the last one). Raises ProviderTimeoutError when the
        token trips first; the job is abandoned as-is, not marked failed.
        """
        _require_credential(credential)

        interval_sec = (poll_interval_ms if poll_interval_ms is not None else self.poll_interval_ms) / 1000.0
        token = cancel_token or CancellationToken(max_attempts or self.max_attempts)
        job = PredictionJob(id=job_id)

        while token.consume():
            body = await self._fetch_status(job_id, credential)
            self._advance(job, body)

            if job.status.is_terminal:
                logger.info(f"[POLL] Prediction {job_id} {job.status.value} after {token.attempts} attempts")
                return job

            logger.info(f"[POLL] Waiting for prediction {job_id}... ({token.attempts}/{token.max_attempts})")
            if not token.cancelled:
                await self._sleep(interval_sec)

        logger.error(f"[POLL] Prediction {job_id} abandoned: {token.reason} after {token.attempts} attempts")
        raise ProviderTimeoutError(
            f"Prediction {job_id} timed out ({token.reason})", attempts=token.attempts
        )

    async def run(self, media_ref: str, descriptor: ProviderDescriptor, credential: Optional[str]) -> PredictionJob:
        job_id = await self.submit(media_ref, descriptor, credential)
        return await self.await_terminal(job_id, credential)

    async def _fetch_status(self, job_id: str, credential: str) -> dict:
        url = f"{self.api_url}/v1/predictions/{job_id}"
        timeout = aiohttp.ClientTimeout(total=self.poll_timeout_sec)

        try:
            async with http_module.request_session() as sess:
                async with sess.get(url, headers=_headers(credential), timeout=timeout) as response:
                    if not 200 <= response.status < 300:
                        error_text = await response.text()
                        logger.error(f"[POLL] Prediction API error: {response.status} - {error_text}")
                        raise ProviderPollError(f"Failed to poll for results: HTTP {response.status}")
                    body = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"[POLL] Request failed for {job_id}: {e!r}")
            raise ProviderPollError(f"Failed to poll for results: {e!r}") from e

        if not isinstance(body, dict):
            raise ProviderPollError(f"Failed to poll for results: unexpected body {type(body).__name__}")
        return body

    @staticmethod
    def _advance(job: PredictionJob, body: dict) -> None:
        wire_status = body.get("status")
        status = _WIRE_STATUSES.get(wire_status) if isinstance(wire_status, str) else None
        if status is None:
            raise ProviderPollError(f"Unrecognised prediction status: {wire_status!r}")

        # Transitions only move forward; a stale report is ignored.
        if status.rank < job.status.rank:
            logger.debug(f"[POLL] Ignoring backward transition {job.status.value} -> {status.value} for {job.id}")
            return

        job.status = status
        if status.is_terminal:
            job.raw_output = body.get("output")
            job.error_message = body.get("error")
