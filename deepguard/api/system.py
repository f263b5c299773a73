"""
System / health routes.
"""

from fastapi import APIRouter, Depends

from deepguard.core.dependencies import get_registry
from deepguard.detection.registry import ProviderRegistry
from deepguard.schemas.detection import ModelInfo, ModelsResponse

router = APIRouter(tags=["System"])


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/models", response_model=ModelsResponse)
async def models(registry: ProviderRegistry = Depends(get_registry)):
    return ModelsResponse(models=[ModelInfo(id=pid) for pid in registry.ids()])

