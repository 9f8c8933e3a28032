from typing import Any, Dict

from fastapi import APIRouter, Depends, Response

from claimledger.core.observability import metrics_payload
from claimledger.routers.deps import get_services
from claimledger.services.container import ServiceContainer

router = APIRouter()


@router.get("/health")
async def health(services: ServiceContainer = Depends(get_services)) -> Dict[str, Any]:
    return {
        "status": "ok",
        "provider": services.source.name,
        "ledger": services.ledger_name,
        "refutation_mode": services.refutation_mode.value,
    }


@router.get("/metrics")
async def metrics() -> Response:
    payload, content_type = metrics_payload()
    return Response(content=payload, media_type=content_type)
