"""
Service wiring.

Everything a request needs is built once at startup and handed to the
routers through `app.state.services`; nothing is created per request.
"""

from dataclasses import dataclass
from typing import List, Optional

from claimledger.core.config import Settings
from claimledger.core.logger import get_logger
from claimledger.services.evidence.base import EvidenceSource
from claimledger.services.evidence.factory import build_evidence_source
from claimledger.services.extraction.citations import CitationExtractor
from claimledger.services.extraction.polarity import PolarityClassifier
from claimledger.services.ledger.base import LedgerClient
from claimledger.services.ledger.ethereum import EthereumLedger
from claimledger.services.ledger.memory import InMemoryLedger
from claimledger.services.ledger.retry import RetryPolicy
from claimledger.services.ledger.submitter import LedgerSubmitter
from claimledger.services.signing import AgentSigner, load_account
from claimledger.services.verdict.evaluator import EvaluationOrchestrator
from claimledger.services.verdict.models import RefutationMode
from claimledger.services.verdict.refuter import (
    InlinePriorResolver,
    LedgerPriorResolver,
    PriorResolver,
    RefutationOrchestrator,
)

logger = get_logger(__name__)


@dataclass
class ServiceContainer:
    source: EvidenceSource
    evaluator: EvaluationOrchestrator
    refuter: RefutationOrchestrator
    submitter: Optional[LedgerSubmitter]
    signer: AgentSigner
    refutation_mode: RefutationMode = RefutationMode.STRICT
    local_refutation_mode: RefutationMode = RefutationMode.LENIENT

    @property
    def ledger_name(self) -> str:
        return self.submitter.client.name if self.submitter else "none"

    def prior_resolvers(self) -> List[PriorResolver]:
        return [InlinePriorResolver(), LedgerPriorResolver(self.submitter)]

    async def aclose(self) -> None:
        await self.source.aclose()
        if self.submitter:
            await self.submitter.client.aclose()


def build_ledger(settings: Settings) -> Optional[LedgerClient]:
    if settings.LEDGER_BACKEND == "none":
        return None
    if settings.LEDGER_BACKEND == "memory":
        return InMemoryLedger()

    account = load_account(settings.LEDGER_PRIVATE_KEY, settings.LEDGER_MNEMONIC)
    logger.info(f"[Services] Ethereum ledger at {settings.LEDGER_RPC_URL} as {account.address}")
    return EthereumLedger(
        rpc_url=settings.LEDGER_RPC_URL,
        account=account,
        gas_limit=settings.LEDGER_GAS_LIMIT,
        chain_id=settings.LEDGER_CHAIN_ID,
        explorer_template=settings.LEDGER_EXPLORER_URL,
    )


def build_services(
    settings: Settings,
    source: Optional[EvidenceSource] = None,
    ledger: Optional[LedgerClient] = None,
) -> ServiceContainer:
    """
    Build the service graph. Raises ConfigurationError when a required
    credential is missing, which aborts application startup.
    """
    if source is None:
        source = build_evidence_source(settings)
    extractor = CitationExtractor(dedupe=settings.CITATION_DEDUPE)
    classifier = PolarityClassifier(price_threshold=settings.PRICE_THRESHOLD)

    if ledger is None:
        ledger = build_ledger(settings)
    submitter = None
    if ledger is not None:
        submitter = LedgerSubmitter(
            ledger,
            write_policy=RetryPolicy(max_attempts=settings.LEDGER_MAX_ATTEMPTS, backoff=settings.LEDGER_RETRY_BACKOFF),
        )

    account = None
    if settings.LEDGER_PRIVATE_KEY or settings.LEDGER_MNEMONIC:
        account = load_account(settings.LEDGER_PRIVATE_KEY, settings.LEDGER_MNEMONIC)

    services = ServiceContainer(
        source=source,
        evaluator=EvaluationOrchestrator(
            source, extractor, classifier, unavailable_policy=settings.EVIDENCE_UNAVAILABLE_POLICY
        ),
        refuter=RefutationOrchestrator(source, extractor, unavailable_policy=settings.EVIDENCE_UNAVAILABLE_POLICY),
        submitter=submitter,
        signer=AgentSigner(account, chain_id=settings.LEDGER_CHAIN_ID),
        refutation_mode=RefutationMode(settings.REFUTATION_MODE),
        local_refutation_mode=RefutationMode(settings.REFUTATION_LOCAL_MODE),
    )
    logger.info(
        f"[Services] provider={source.name} ledger={services.ledger_name} "
        f"refutation_mode={services.refutation_mode.value} local_mode={services.local_refutation_mode.value}"
    )
    return services
