import logging
import time
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load environment variables at the very beginning
load_dotenv()

from deepguard.config import settings  # noqa: E402

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

from deepguard.api import detection, system  # noqa: E402
from deepguard.core.dependencies import build_pipeline  # noqa: E402
from deepguard.core.errors import DetectionError  # noqa: E402
from deepguard.integrations import http_client  # noqa: E402


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    await http_client.initialize()

    app.state.pipeline = build_pipeline(settings)
    if not settings.replicate_api_token:
        logger.warning("[STARTUP] REPLICATE_API_TOKEN not set, /detect will answer 500")
    logger.info(f"[STARTUP] Models available: {', '.join(app.state.pipeline.registry.ids())}")

    yield

    await http_client.close()


app = FastAPI(title="DeepGuard Detection API", lifespan=lifespan)


@app.exception_handler(DetectionError)
async def detection_error_handler(request: Request, exc: DetectionError):
    logger.info(f"[ERROR HANDLER] Returning {exc.status_code} for {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(f"[REQUEST] {request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)")
    return response


# ---- CORS ----
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(system.router)
app.include_router(detection.router)
