"""
Central application configuration.

Every tunable value lives here as a typed, documented field.
Any field can be overridden at runtime via an environment variable of the
same name (case-insensitive), e.g.:

    REPLICATE_API_TOKEN=r8_xxx uvicorn deepguard.main:app
    export MAX_POLL_ATTEMPTS=60                  # slow cold starts

A `.env` file at the project root is loaded automatically.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,   # REPLICATE_API_TOKEN == replicate_api_token
        extra="ignore",         # silently drop unknown env vars
    )

    # ------------------------------------------------------------------ #
    # Provider credentials & endpoint                                     #
    # ------------------------------------------------------------------ #
    replicate_api_token: Optional[str] = Field(
        None, description="Bearer token for the prediction API. Absent → 500 on /detect"
    )
    replicate_api_url: str = Field(
        "https://api.replicate.com", description="Prediction API base URL (no trailing slash)"
    )
    default_model_id: str = Field(
        "bcmi/fake-image-detection", description="Provider used when the caller names none"
    )

    # ------------------------------------------------------------------ #
    # Decision threshold                                                  #
    # ------------------------------------------------------------------ #
    fake_threshold: float = Field(
        0.75, description="Confidence above this → labelled fake (0.5 gave too many false positives)"
    )

    # ------------------------------------------------------------------ #
    # Polling                                                             #
    # ------------------------------------------------------------------ #
    poll_interval_ms: int = Field(
        1_000, description="Spacing between status polls (ms)"
    )
    max_poll_attempts: int = Field(
        30, description="Status polls before the job is abandoned"
    )
    submit_timeout_sec: float = Field(
        10.0, description="Per-call timeout for the submit request"
    )
    poll_timeout_sec: float = Field(
        10.0, description="Per-call timeout for each status poll"
    )

    # ------------------------------------------------------------------ #
    # Availability probe                                                  #
    # ------------------------------------------------------------------ #
    probe_timeout_ms: int = Field(
        2_000, description="Liveness check timeout (ms)"
    )

    # ------------------------------------------------------------------ #
    # Fallback (mock) verdicts                                            #
    # ------------------------------------------------------------------ #
    mock_confidence_min: float = Field(
        0.2, description="Lower bound of the synthetic confidence range"
    )
    mock_confidence_max: float = Field(
        0.9, description="Upper bound of the synthetic confidence range"
    )

    # ------------------------------------------------------------------ #
    # HTTP server / client                                                #
    # ------------------------------------------------------------------ #
    http_session_timeout_sec: float = Field(
        30.0, description="Default total timeout on the shared aiohttp session"
    )
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["*"], description="Origins allowed by the CORS middleware"
    )
    log_level: str = Field(
        "INFO", description="Root logging level"
    )
    deepguard_api_url: str = Field(
        "http://localhost:8000", description="Service URL used by smoke_check.py"
    )


# Single shared instance — import this everywhere.
settings = Settings()
