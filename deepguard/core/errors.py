"""
Detection error taxonomy.

Caller/config errors (`ValidationError`, `UnknownProviderError`,
`ConfigurationError`) are surfaced to the HTTP client as-is.
Everything under `ProviderError` is provider-side and is absorbed by the
pipeline into a fallback verdict; its status code is only used if one
ever escapes.
"""

from typing import Iterable, Optional


class DetectionError(Exception):
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict:
        return {"detail": self.message}


class ValidationError(DetectionError):
    """Bad caller input (missing or malformed media reference)."""

    status_code = 400


class UnknownProviderError(DetectionError):
    status_code = 400

    def __init__(self, provider_id: str, available: Iterable[str]):
        self.provider_id = provider_id
        self.available = list(available)
        super().__init__(f"Invalid model ID: {provider_id}")

    def to_payload(self) -> dict:
        return {"detail": self.message, "availableModels": self.available}


class ConfigurationError(DetectionError):
    """Server misconfiguration; the operator must fix credentials."""

    status_code = 500


class ProviderError(DetectionError):
    status_code = 502


class ProviderSubmitError(ProviderError):
    pass


class ProviderPollError(ProviderError):
    pass


class ProviderTimeoutError(ProviderError):
    def __init__(self, message: str, attempts: int = 0):
        super().__init__(message)
        self.attempts = attempts


class ProviderJobFailedError(ProviderError):
    def __init__(self, job_id: str, error_message: Optional[str] = None):
        self.job_id = job_id
        self.error_message = error_message
        super().__init__(f"Prediction {job_id} failed: {error_message or 'unknown error'}")


class MalformedOutputError(ProviderError):
    pass
