"""
Unit tests for deepguard/detection/pipeline.py — DetectionPipeline.detect().

Provider traffic goes through the scripted MockSession; caller and
configuration errors must surface, every provider-side failure must come
back as a well-formed fallback verdict.
"""

import asyncio

import aiohttp
import pytest

from deepguard.core.errors import ConfigurationError, UnknownProviderError, ValidationError
from deepguard.detection.normalizer import ResultNormalizer
from deepguard.detection.pipeline import DetectionPipeline
from deepguard.detection.registry import DEEPFAKE_DETECTION, FAKE_IMAGE_DETECTION
from tests.conftest import DATA_URI, IMAGE_URL
from tests.mocks.http_mock import MockResponse, prediction


def _assert_fallback(response, media_url=IMAGE_URL):
    verdict = response.result
    assert verdict.is_fallback is True
    assert verdict.model_id == FAKE_IMAGE_DETECTION
    assert verdict.media_url == media_url
    assert 0.2 <= verdict.confidence <= 0.9
    assert verdict.label == ("fake" if verdict.confidence > 0.75 else "real")
    assert verdict.is_fake == (verdict.label == "fake")


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


async def test_low_score_is_real(pipeline, http_session):
    http_session.add_post(MockResponse(201, prediction("job-1", "starting")))
    http_session.add_get(
        MockResponse(200, prediction("job-1", "processing")),
        MockResponse(200, prediction("job-1", "succeeded", output="0.2")),
    )

    response = await pipeline.detect(IMAGE_URL)

    assert response.result.is_fake is False
    assert response.result.confidence == pytest.approx(0.2)
    assert response.result.label == "real"
    assert response.result.is_fallback is False
    assert response.raw == "0.2"


async def test_high_score_is_fake(pipeline, http_session):
    http_session.add_post(MockResponse(201, prediction("job-1", "starting")))
    http_session.add_get(MockResponse(200, prediction("job-1", "succeeded", output="0.95")))

    response = await pipeline.detect(IMAGE_URL, FAKE_IMAGE_DETECTION)

    assert response.result.is_fake is True
    assert response.result.confidence == pytest.approx(0.95)
    assert response.result.label == "fake"


async def test_categorical_provider(pipeline, http_session):
    http_session.add_post(MockResponse(201, prediction("job-2", "starting")))
    http_session.add_get(MockResponse(200, prediction("job-2", "succeeded", output="fake")))

    response = await pipeline.detect(IMAGE_URL, DEEPFAKE_DETECTION)

    assert response.result.model_id == DEEPFAKE_DETECTION
    assert response.result.confidence == pytest.approx(0.85)
    assert response.result.label == "fake"


async def test_provider_without_decoder_passthrough(registry, prediction_client, mock_generator, http_session):
    pipeline = DetectionPipeline(
        registry=registry,
        client=prediction_client,
        normalizer=ResultNormalizer(decoders={}),
        mock_generator=mock_generator,
        credential="tok",
    )
    http_session.add_post(MockResponse(201, prediction("job-3", "starting")))
    http_session.add_get(MockResponse(200, prediction("job-3", "succeeded", output={"x": 1})))

    response = await pipeline.detect(IMAGE_URL)

    assert response.result.confidence is None
    assert response.result.is_fallback is False
    assert response.raw == {"x": 1}


# ---------------------------------------------------------------------------
# Surfaced errors, zero network calls
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("media_ref", [None, "", "   ", "ftp://example.com/a.jpg", "example.com/a.jpg"])
async def test_invalid_media_reference(pipeline, http_session, media_ref):
    with pytest.raises(ValidationError):
        await pipeline.detect(media_ref)
    assert http_session.call_count == 0


async def test_unknown_model_rejected_before_network(pipeline, http_session):
    with pytest.raises(UnknownProviderError) as exc:
        await pipeline.detect(IMAGE_URL, "not-a-real-model")

    assert http_session.call_count == 0
    assert FAKE_IMAGE_DETECTION in exc.value.available
    assert DEEPFAKE_DETECTION in exc.value.available


async def test_missing_credential_is_configuration_error(pipeline, http_session):
    pipeline.credential = None

    with pytest.raises(ConfigurationError):
        await pipeline.detect(IMAGE_URL)
    assert http_session.call_count == 0


# ---------------------------------------------------------------------------
# Fallbacks
# ---------------------------------------------------------------------------


async def test_embedded_payload_never_forwarded(pipeline, http_session):
    response = await pipeline.detect(DATA_URI)

    _assert_fallback(response, media_url=DATA_URI)
    assert http_session.call_count == 0


async def test_submit_network_error_falls_back(pipeline, http_session):
    http_session.add_post(aiohttp.ClientConnectionError("connection reset"))

    response = await pipeline.detect(IMAGE_URL)

    _assert_fallback(response)


async def test_submit_rejected_falls_back(pipeline, http_session):
    http_session.add_post(MockResponse(401, {"detail": "Unauthenticated"}))

    _assert_fallback(await pipeline.detect(IMAGE_URL))


async def test_processing_forever_falls_back(pipeline, http_session, sleeper):
    http_session.add_post(MockResponse(201, prediction("job-1", "starting")))
    http_session.add_get(MockResponse(200, prediction("job-1", "processing")))

    response = await pipeline.detect(IMAGE_URL)

    _assert_fallback(response)
    assert len(http_session.calls_for("GET")) == 30
    assert sleeper.total <= 30 * 1.0


async def test_poll_error_falls_back(pipeline, http_session):
    http_session.add_post(MockResponse(201, prediction("job-1", "starting")))
    http_session.add_get(asyncio.TimeoutError())

    _assert_fallback(await pipeline.detect(IMAGE_URL))


async def test_failed_job_falls_back(pipeline, http_session):
    http_session.add_post(MockResponse(201, prediction("job-1", "starting")))
    http_session.add_get(MockResponse(200, prediction("job-1", "failed", error="model crashed")))

    _assert_fallback(await pipeline.detect(IMAGE_URL))


async def test_malformed_output_falls_back(pipeline, http_session):
    http_session.add_post(MockResponse(201, prediction("job-1", "starting")))
    http_session.add_get(MockResponse(200, prediction("job-1", "succeeded", output="definitely")))

    _assert_fallback(await pipeline.detect(IMAGE_URL))


async def test_fallback_is_flagged_in_logs(pipeline, http_session, caplog):
    http_session.add_post(aiohttp.ClientConnectionError("connection reset"))

    with caplog.at_level("WARNING"):
        await pipeline.detect(IMAGE_URL)

    assert "[FALLBACK]" in caplog.text
    assert "ProviderSubmitError" in caplog.text


async def test_non_string_job_id_falls_back(pipeline, http_session):
    http_session.add_post(MockResponse(201, {"id": 12345, "status": "starting"}))

    _assert_fallback(await pipeline.detect(IMAGE_URL))
    assert len(http_session.calls_for("GET")) == 0


async def test_non_string_status_falls_back(pipeline, http_session):
    http_session.add_post(MockResponse(201, prediction("job-1", "starting")))
    http_session.add_get(MockResponse(200, {"id": "job-1", "status": ["processing"]}))

    _assert_fallback(await pipeline.detect(IMAGE_URL))


async def test_broken_registered_decoder_falls_back(pipeline, http_session):
    pipeline.normalizer.register(FAKE_IMAGE_DETECTION, lambda output: output["p"])
    http_session.add_post(MockResponse(201, prediction("job-1", "starting")))
    http_session.add_get(MockResponse(200, prediction("job-1", "succeeded", output={"q": 1})))

    _assert_fallback(await pipeline.detect(IMAGE_URL))
