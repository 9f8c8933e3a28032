"""
Evidence Source Factory

Builds the configured provider once at startup. Missing credentials raise
ConfigurationError so the process refuses to start.
"""

from claimledger.core.config import Settings
from claimledger.core.errors import ConfigurationError
from claimledger.core.logger import get_logger
from claimledger.services.evidence.base import EvidenceSource
from claimledger.services.evidence.news import NewsAPIClient, NewsEvidenceSource
from claimledger.services.evidence.web_search import WebSearchEvidenceSource
from claimledger.services.llms.groq_service import GroqService

logger = get_logger(__name__)


def build_evidence_source(settings: Settings) -> EvidenceSource:
    provider = settings.EVIDENCE_PROVIDER

    if provider == "web_search":
        source: EvidenceSource = WebSearchEvidenceSource(
            api_key=settings.OPENAI_API_KEY,
            model=settings.OPENAI_MODEL,
            min_citations=settings.MIN_CITATIONS,
        )
    elif provider == "news":
        source = NewsEvidenceSource(
            news_client=NewsAPIClient(settings.NEWS_API_KEY),
            llm=GroqService(settings.GROQ_API_KEY),
            min_citations=settings.MIN_CITATIONS,
        )
    else:
        raise ConfigurationError(f"Unknown EVIDENCE_PROVIDER: {provider}. Must be one of: 'web_search', 'news'")

    logger.info(f"[EvidenceFactory] Using evidence provider={source.name}")
    return source
