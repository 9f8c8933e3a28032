from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Literal, Mapping, Optional

from claimledger.core.errors import (
    EvidenceUnavailable,
    InsufficientRefutationEvidence,
    InvalidInput,
    PriorRecordNotFound,
    RefutationFailed,
)
from claimledger.core.logger import get_logger
from claimledger.core.observability import evidence_fetch_total, refutations_total, stage_timer
from claimledger.services.evidence.base import EvidenceSource, RefuteContext, Stance
from claimledger.services.extraction.citations import CitationExtractor
from claimledger.services.ledger.submitter import LedgerSubmitter
from claimledger.services.verdict.models import EvidenceItem, Refutation, RefutationMode, Verdict

logger = get_logger(__name__)

EvidencePolicy = Literal["degrade", "propagate"]


# ----------------------------------------------------------------------------
# Prior verdict resolution
# ----------------------------------------------------------------------------


def _coerce_answer(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "yes"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("false", "no"):
        return False
    raise InvalidInput(f"Original evaluation answer must be a boolean, got {value!r}")


def verdict_from_record(record: Mapping[str, Any]) -> Verdict:
    """Build a Verdict from an evaluation payload (API body or decoded ledger record)."""
    question = record.get("question")
    if not isinstance(question, str) or not question.strip():
        raise InvalidInput("Original evaluation data (question, answer, sources) is required")
    if "answer" not in record or record["answer"] is None:
        raise InvalidInput("Original evaluation answer is required")

    sources = record.get("sources") or []
    if not isinstance(sources, list):
        raise InvalidInput("Original evaluation sources must be a list")

    return Verdict(
        question=question.strip(),
        sources=[EvidenceItem.from_dict(s) for s in sources if isinstance(s, Mapping)],
        answer=_coerce_answer(record["answer"]),
    )


class PriorResolver(ABC):
    @abstractmethod
    def accepts(self, payload: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def resolve(self, payload: Mapping[str, Any]) -> Verdict:
        raise NotImplementedError


class InlinePriorResolver(PriorResolver):
    """`{"originalEvaluation": {question, answer, sources}}`"""

    def accepts(self, payload: Mapping[str, Any]) -> bool:
        return payload.get("originalEvaluation") is not None

    async def resolve(self, payload: Mapping[str, Any]) -> Verdict:
        original = payload.get("originalEvaluation")
        if not isinstance(original, Mapping):
            raise InvalidInput("Original evaluation data (question, answer, sources) is required")
        return verdict_from_record(original)


class LedgerPriorResolver(PriorResolver):
    """`{"transactionHash": "0x..."}` resolved through the ledger read path."""

    def __init__(self, submitter: Optional[LedgerSubmitter]) -> None:
        self.submitter = submitter

    def accepts(self, payload: Mapping[str, Any]) -> bool:
        return bool(payload.get("transactionHash"))

    async def resolve(self, payload: Mapping[str, Any]) -> Verdict:
        tx_hash = str(payload["transactionHash"]).strip()
        if self.submitter is None:
            raise PriorRecordNotFound(f"No ledger configured to resolve {tx_hash}")

        record = await self.submitter.read(tx_hash)
        try:
            return verdict_from_record(record)
        except InvalidInput as e:
            raise PriorRecordNotFound(f"Ledger record {tx_hash} is not an evaluation: {e}", cause=e) from e


async def resolve_prior(payload: Mapping[str, Any], resolvers: List[PriorResolver]) -> Verdict:
    for resolver in resolvers:
        if resolver.accepts(payload):
            return await resolver.resolve(payload)
    raise InvalidInput("Original evaluation data (question, answer, sources) or transactionHash is required")


# ----------------------------------------------------------------------------
# Refutation
# ----------------------------------------------------------------------------


class RefutationOrchestrator:
    """
    Searches for evidence for the opposite verdict and accepts it only if it
    out-cites the original: refuteSourceCount > originalSourceCount.

    An accepted refutation always answers the negation of the original.
    In STRICT mode an insufficient refutation raises; in LENIENT mode it is
    returned with accepted=False and refuteAnswer=False.
    """

    def __init__(
        self,
        source: EvidenceSource,
        extractor: CitationExtractor,
        unavailable_policy: EvidencePolicy = "propagate",
    ) -> None:
        self.source = source
        self.extractor = extractor
        self.unavailable_policy = unavailable_policy

    async def _gather_sources(self, prior: Verdict, context: RefuteContext) -> List[EvidenceItem]:
        with stage_timer("refute_evidence_fetch"):
            try:
                raw = await self.source.fetch_evidence(prior.question, Stance.REFUTE, context)
            except EvidenceUnavailable as e:
                evidence_fetch_total.labels(provider=self.source.name, stance="refute", status="unavailable").inc()
                if self.unavailable_policy == "degrade":
                    logger.warning(f"[Refuter] Evidence unavailable, counting zero sources: {e}")
                    return []
                raise RefutationFailed(e) from e
            except Exception as e:
                evidence_fetch_total.labels(provider=self.source.name, stance="refute", status="error").inc()
                logger.error(f"[Refuter] Evidence provider failed for '{prior.question}': {e}")
                raise RefutationFailed(e) from e

        evidence_fetch_total.labels(provider=self.source.name, stance="refute", status="ok").inc()
        return self.extractor.extract(raw, allow_placeholder=False)

    async def refute(self, prior: Verdict, mode: RefutationMode = RefutationMode.STRICT) -> Refutation:
        original_count = len(prior.sources)
        context = RefuteContext(original_answer=prior.answer, minimum_sources=original_count + 1)

        logger.info(
            f"[Refuter] Refuting '{prior.question}' (original={prior.answer}, "
            f"needs {context.minimum_sources}+ sources, mode={mode.value})"
        )

        sources = await self._gather_sources(prior, context)
        refute_count = len(sources)
        accepted = refute_count > original_count

        if not accepted:
            refutations_total.labels(outcome="insufficient").inc()
            logger.info(f"[Refuter] Insufficient evidence: {refute_count} <= {original_count}")
            if mode == RefutationMode.STRICT:
                raise InsufficientRefutationEvidence(required=context.minimum_sources, found=refute_count)
        else:
            refutations_total.labels(outcome="accepted").inc()
            logger.info(f"[Refuter] Accepted: {refute_count} > {original_count}, answer flips to {not prior.answer}")

        return Refutation(
            original_question=prior.question,
            original_answer=prior.answer,
            refute_answer=context.target_answer if accepted else False,
            sources=sources,
            original_source_count=original_count,
            refute_source_count=refute_count,
            accepted=accepted,
            minimum_required_sources=context.minimum_sources,
        )
