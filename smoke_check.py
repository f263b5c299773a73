"""
End-to-end smoke check against a running DeepGuard service.

    python smoke_check.py                          # uses DEEPGUARD_API_URL
    python smoke_check.py https://img.example/x.jpg

Probes the service first; when it is down, prints a locally generated
fallback verdict instead, the same way the web client degrades.
"""

import asyncio
import json
import sys
import time

from deepguard.config import settings
from deepguard.detection.mock import MockResultGenerator
from deepguard.integrations import http_client
from deepguard.integrations.availability import AvailabilityProbe

SAMPLE_IMAGE = (
    "https://replicate.delivery/pbxt/Ar9CXM6nnQK1v7rmwvCvAXwXrM2zHyZKKbGfuJvWnpv874cE/"
    "pexels-sora-shimazaki-5668484.jpg"
)


async def run(media_url: str) -> int:
    api_url = settings.deepguard_api_url.rstrip("/")

    if not await AvailabilityProbe().check(api_url):
        print(f"Service at {api_url} is unavailable, using local fallback verdict")
        verdict, raw = MockResultGenerator().generate(media_url, reason="service unavailable")
        print(json.dumps({"result": verdict.model_dump(by_alias=True), "raw": raw}, indent=2))
        return 1

    async with http_client.request_session() as sess:
        async with sess.get(f"{api_url}/health") as response:
            print(f"Health check: {response.status} {await response.json()}")

        async with sess.get(f"{api_url}/models") as response:
            print(f"Models: {json.dumps(await response.json())}")

        print(f"Detecting: {media_url}")
        start = time.perf_counter()
        async with sess.post(f"{api_url}/detect", json={"mediaUrl": media_url}) as response:
            body = await response.json()
        elapsed = time.perf_counter() - start

    print(json.dumps(body, indent=2))
    print(f"Latency: {elapsed:.2f}s")
    if body.get("result", {}).get("isFallback"):
        print("WARNING: service answered with a fallback verdict")
    return 0 if response.status == 200 else 1


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else SAMPLE_IMAGE
    sys.exit(asyncio.run(run(target)))
