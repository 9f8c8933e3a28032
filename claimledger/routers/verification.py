"""
Claim verification routes.

Endpoints:
  POST /api/evaluate       - Evaluate a yes/no question and commit the verdict to the ledger
  POST /api/evaluate-local - Evaluate and hash without touching the ledger
  POST /api/refute         - Refute a prior verdict (strict by default) and commit the refutation
  POST /api/refute-local   - Refute without a ledger write (lenient by default)

A prior verdict is supplied inline as `originalEvaluation` or by ledger
reference as `transactionHash`.
"""

from typing import Any, Dict, Optional, Tuple

from fastapi import APIRouter, Depends

from claimledger.core.logger import get_logger
from claimledger.core.schemas import (
    EvaluateRequest,
    EvaluationResponse,
    LedgerEvaluationResponse,
    LedgerRefutationResponse,
    RefutationResponse,
    RefuteRequest,
)
from claimledger.routers.deps import get_services
from claimledger.services.container import ServiceContainer
from claimledger.services.ledger.hasher import commit, commit_refutation
from claimledger.services.verdict.models import Commitment, Refutation, RefutationMode
from claimledger.services.verdict.refuter import resolve_prior

logger = get_logger(__name__)

router = APIRouter()

LedgerFields = Tuple[Optional[str], Optional[str], Optional[str]]


async def _submit(services: ServiceContainer, payload: Dict[str, Any]) -> LedgerFields:
    """Write to the ledger if one is configured; returns (tx_hash, explorer_url, error)."""
    if services.submitter is None:
        return None, None, None

    result = await services.submitter.submit(payload)
    if not result.success:
        logger.warning(f"[Verification] Ledger submission not verified: {result.error}")
        return None, None, result.error
    return result.identifier, result.explorer_url, None


async def _evaluate(services: ServiceContainer, body: EvaluateRequest) -> Commitment:
    logger.info(f"[Verification] Question received: {body.question!r}")
    verdict = await services.evaluator.evaluate(body.question or "")
    commitment = commit(verdict)
    logger.info(f"[Verification] Generated hash: {commitment.hash}")
    return commitment


async def _refute(services: ServiceContainer, body: RefuteRequest, mode: RefutationMode) -> Refutation:
    prior = await resolve_prior(body.model_dump(), services.prior_resolvers())
    return await services.refuter.refute(prior, mode)


def _refutation_fields(refutation: Refutation) -> Dict[str, Any]:
    fields = refutation.to_dict()
    fields["accepted"] = refutation.accepted
    return fields


@router.post("/api/evaluate", response_model=LedgerEvaluationResponse)
async def evaluate(
    body: EvaluateRequest, services: ServiceContainer = Depends(get_services)
) -> LedgerEvaluationResponse:
    commitment = await _evaluate(services, body)
    tx_hash, explorer_url, ledger_error = await _submit(services, commitment.ledger_payload())

    return LedgerEvaluationResponse(
        **commitment.verdict.to_dict(),
        hash=commitment.hash,
        status="evaluated",
        tx_hash=tx_hash,
        explorer_url=explorer_url,
        ledger_error=ledger_error,
    )


@router.post("/api/evaluate-local", response_model=EvaluationResponse)
async def evaluate_local(
    body: EvaluateRequest, services: ServiceContainer = Depends(get_services)
) -> EvaluationResponse:
    commitment = await _evaluate(services, body)
    return EvaluationResponse(**commitment.verdict.to_dict(), hash=commitment.hash, status="evaluated")


@router.post("/api/refute", response_model=LedgerRefutationResponse)
async def refute(body: RefuteRequest, services: ServiceContainer = Depends(get_services)) -> LedgerRefutationResponse:
    refutation = await _refute(services, body, services.refutation_mode)
    tx_hash, explorer_url, ledger_error = await _submit(services, commit_refutation(refutation))

    return LedgerRefutationResponse(
        **_refutation_fields(refutation),
        status="refuted",
        refutation_tx_hash=tx_hash,
        refutation_explorer_url=explorer_url,
        ledger_error=ledger_error,
    )


@router.post("/api/refute-local", response_model=RefutationResponse)
async def refute_local(body: RefuteRequest, services: ServiceContainer = Depends(get_services)) -> RefutationResponse:
    refutation = await _refute(services, body, services.local_refutation_mode)
    return RefutationResponse(**_refutation_fields(refutation), status="refuted-local")
