from typing import Literal

from claimledger.core.errors import EvaluationFailed, EvidenceUnavailable, InvalidInput
from claimledger.core.logger import get_logger
from claimledger.core.observability import evaluations_total, evidence_fetch_total, stage_timer
from claimledger.services.evidence.base import EvidenceSource, RawEvidence, Stance
from claimledger.services.extraction.citations import CitationExtractor, placeholder_citation
from claimledger.services.extraction.polarity import PolarityClassifier
from claimledger.services.verdict.models import Verdict

logger = get_logger(__name__)

EvidencePolicy = Literal["degrade", "propagate"]


class EvaluationOrchestrator:
    """
    Evidence → citations + polarity → Verdict.

    Citation extraction and polarity classification read the same evidence
    text independently; the verdict never depends on which sources were found.
    No retries happen here.
    """

    def __init__(
        self,
        source: EvidenceSource,
        extractor: CitationExtractor,
        classifier: PolarityClassifier,
        unavailable_policy: EvidencePolicy = "propagate",
    ) -> None:
        self.source = source
        self.extractor = extractor
        self.classifier = classifier
        self.unavailable_policy = unavailable_policy

    async def _gather(self, question: str) -> RawEvidence:
        with stage_timer("evidence_fetch"):
            try:
                raw = await self.source.fetch_evidence(question, Stance.SUPPORT)
            except Exception:
                evidence_fetch_total.labels(provider=self.source.name, stance="support", status="error").inc()
                raise
        evidence_fetch_total.labels(provider=self.source.name, stance="support", status="ok").inc()
        return raw

    def _degraded_verdict(self, question: str, reason: EvidenceUnavailable) -> Verdict:
        logger.warning(f"[Evaluator] Evidence unavailable for '{question}', returning degraded verdict: {reason}")
        evaluations_total.labels(status="degraded").inc()
        return Verdict(
            question=question,
            sources=[placeholder_citation(question)],
            answer=False,
            provider=self.source.name,
            degraded=True,
        )

    async def evaluate(self, question: str) -> Verdict:
        question = (question or "").strip()
        if not question:
            raise InvalidInput("Question is required")

        logger.info(f"[Evaluator] Evaluating '{question}' with provider={self.source.name}")

        try:
            raw = await self._gather(question)
        except EvidenceUnavailable as e:
            if self.unavailable_policy == "degrade":
                return self._degraded_verdict(question, e)
            evaluations_total.labels(status="failed").inc()
            raise EvaluationFailed(e) from e
        except Exception as e:
            logger.error(f"[Evaluator] Evidence provider failed for '{question}': {e}")
            evaluations_total.labels(status="failed").inc()
            raise EvaluationFailed(e) from e

        with stage_timer("extraction"):
            sources = self.extractor.extract(raw, question=question, allow_placeholder=True)
            answer, rule = self.classifier.explain(raw.text)

        logger.info(f"[Evaluator] answer={answer} (rule={rule}) sources={len(sources)} for '{question}'")
        evaluations_total.labels(status="evaluated").inc()
        return Verdict(question=question, sources=sources, answer=answer, provider=raw.provider or self.source.name)
