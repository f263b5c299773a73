"""
Process-wide aiohttp session for provider and probe traffic.

The FastAPI lifespan opens it at startup and closes it at shutdown, so the
submit call and every status poll of a detection share pooled connections.
Code running outside the app (tests, smoke_check.py) gets a throwaway
session from `request_session()` instead.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import aiohttp

from deepguard.config import settings

logger = logging.getLogger(__name__)

session: aiohttp.ClientSession | None = None


def _open() -> aiohttp.ClientSession:
    # Per-call timeouts in the clients are tighter; this is only the ceiling.
    return aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=settings.http_session_timeout_sec)
    )


def _usable(candidate: aiohttp.ClientSession | None) -> bool:
    return candidate is not None and not candidate.closed


async def initialize() -> None:
    global session
    if _usable(session):
        return
    session = _open()
    logger.info(f"[STARTUP] Provider HTTP session open (ceiling {settings.http_session_timeout_sec}s)")


async def close() -> None:
    global session
    current, session = session, None
    if _usable(current):
        await current.close()
        logger.info("[SHUTDOWN] Provider HTTP session closed")


@asynccontextmanager
async def request_session() -> AsyncIterator[aiohttp.ClientSession]:
    """Borrow the lifespan session, or a one-off session closed on exit."""
    if _usable(session):
        yield session
        return

    one_off = _open()
    try:
        yield one_off
    finally:
        await one_off.close()
