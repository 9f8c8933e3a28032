"""
Signing account routes.

Endpoints:
  GET /api/address   - Service account descriptor
  GET /api/test-sign - Signature over sha256("testing")
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from claimledger.core.logger import get_logger
from claimledger.routers.deps import get_services
from claimledger.services.container import ServiceContainer

logger = get_logger(__name__)

router = APIRouter()


@router.get("/api/address")
async def get_address(services: ServiceContainer = Depends(get_services)) -> Dict[str, Any]:
    logger.info("[Agent] Fetching agent account")
    return services.signer.describe()


@router.get("/api/test-sign")
async def test_sign(services: ServiceContainer = Depends(get_services)) -> Dict[str, Any]:
    logger.info("[Agent] Testing signature")
    return services.signer.test_sign()
