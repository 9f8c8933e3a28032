import asyncio
from typing import Any, Dict, List, Optional

import aiohttp
import groq

from claimledger.constants.config import (
    NEWS_API_BASE_URL,
    NEWS_API_TIMEOUT,
    NEWS_MAX_PAGE_SIZE,
    NEWS_PAGE_SIZE,
    NEWS_RATE_LIMIT_CALLS,
    NEWS_RATE_LIMIT_PERIOD,
)
from claimledger.constants.llm_prompts import (
    NEWS_ANALYSIS_PROMPT,
    NEWS_REFUTE_RULE,
    NEWS_SEARCH_TERMS_PROMPT,
    NEWS_SUPPORT_RULE,
    PRICE_RULE,
)
from claimledger.core.errors import ConfigurationError, EvidenceUnavailable, MalformedUpstreamResponse
from claimledger.core.logger import get_logger
from claimledger.core.rate_limit import throttled
from claimledger.services.evidence.base import (
    EvidenceSource,
    RawEvidence,
    RefuteContext,
    Stance,
    answer_label,
    is_price_question,
)
from claimledger.services.llms.groq_service import GroqService
from claimledger.services.verdict.models import EvidenceItem

logger = get_logger(__name__)


class NewsAPIClient:
    """
    Minimal async client for the NewsAPI `/everything` endpoint.
    """

    BASE_URL = NEWS_API_BASE_URL

    def __init__(self, api_key: Optional[str]) -> None:
        if not api_key:
            raise ConfigurationError("Missing NEWS_API_KEY")
        self.api_key = api_key

    @throttled(limit=NEWS_RATE_LIMIT_CALLS, period=NEWS_RATE_LIMIT_PERIOD, name="newsapi")
    async def get_everything(
        self,
        q: str,
        language: str = "en",
        sort_by: str = "publishedAt",
        page_size: int = NEWS_PAGE_SIZE,
    ) -> Dict[str, Any]:
        """
        Fetch news articles matching `q`.

        Returns the decoded NewsAPI payload (`status`, `totalResults`, `articles`).
        """
        params = {
            "q": q,
            "language": language,
            "sortBy": sort_by,
            "pageSize": page_size,
        }
        headers = {"X-Api-Key": self.api_key}
        timeout = aiohttp.ClientTimeout(total=NEWS_API_TIMEOUT)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(f"{self.BASE_URL}/everything", params=params, headers=headers) as resp:
                    try:
                        data = await resp.json(content_type=None)
                    except ValueError as e:
                        raise MalformedUpstreamResponse(f"NewsAPI returned non-JSON body (HTTP {resp.status})") from e

                    if resp.status >= 400:
                        message = data.get("message", "Unknown error") if isinstance(data, dict) else "Unknown error"
                        raise EvidenceUnavailable(f"NewsAPI Error ({resp.status}): {message}")
                    return data

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"[NewsAPI] Request failed: {e}")
            raise EvidenceUnavailable("No response received from NewsAPI", cause=e) from e


class NewsEvidenceSource(EvidenceSource):
    """
    News-backed evidence: LLM search terms → NewsAPI articles → LLM synthesis.

    Articles that the synthesis cites are returned as structured citations.
    """

    name = "news"

    def __init__(
        self,
        news_client: NewsAPIClient,
        llm: GroqService,
        min_citations: int = 3,
        page_size: int = NEWS_PAGE_SIZE,
    ) -> None:
        self.news_client = news_client
        self.llm = llm
        self.min_citations = min_citations
        self.page_size = page_size

    async def _ask(self, prompt: str) -> Dict[str, Any]:
        try:
            return await self.llm.ainvoke(prompt)
        except groq.APIError as e:
            raise EvidenceUnavailable(f"News synthesis LLM unavailable: {e}", cause=e) from e

    async def _search_terms(self, query: str) -> str:
        result = await self._ask(NEWS_SEARCH_TERMS_PROMPT.format(question=query))
        terms = (result.get("text") or "").strip().strip('"')
        if not terms:
            raise MalformedUpstreamResponse("Invalid response from LLM while extracting search terms")
        return terms

    @staticmethod
    def _format_articles(articles: List[Dict[str, Any]]) -> str:
        blocks = []
        for article in articles:
            source = (article.get("source") or {}).get("name") or "Unknown"
            blocks.append(
                f"Title: {article.get('title')}\n"
                f"Description: {article.get('description')}\n"
                f"Source: {source}\n"
                f"Published: {article.get('publishedAt')}\n"
                f"URL: {article.get('url')}\n"
            )
        return "\n".join(blocks)

    @staticmethod
    def _cited_articles(text: str, articles: List[Dict[str, Any]]) -> List[EvidenceItem]:
        cited = []
        for article in articles:
            url = article.get("url")
            if url and url in text:
                cited.append(EvidenceItem(title=article.get("title") or url, url=url))
        return cited

    def _page_size(self, stance: Stance, context: Optional[RefuteContext]) -> int:
        """Refutations fetch at least `minimum_sources` articles, up to the NewsAPI cap."""
        if stance == Stance.REFUTE and context is not None:
            return min(max(self.page_size, context.minimum_sources), NEWS_MAX_PAGE_SIZE)
        return self.page_size

    async def fetch_evidence(
        self,
        query: str,
        stance: Stance = Stance.SUPPORT,
        context: Optional[RefuteContext] = None,
    ) -> RawEvidence:
        if stance == Stance.REFUTE and context is None:
            raise ValueError("REFUTE stance requires a RefuteContext")

        terms = await self._search_terms(query)
        logger.info(f"[NewsEvidence] Search terms for '{query}': {terms}")

        payload = await self.news_client.get_everything(
            q=terms, language="en", sort_by="publishedAt", page_size=self._page_size(stance, context)
        )
        if "articles" not in payload:
            raise MalformedUpstreamResponse("NewsAPI response has no 'articles' field")

        articles = [a for a in payload["articles"] if isinstance(a, dict)]
        if not articles:
            raise EvidenceUnavailable("No relevant news articles found to evaluate the question.")

        min_citations = self.min_citations
        if stance == Stance.REFUTE:
            stance_rule = NEWS_REFUTE_RULE.format(
                original_label=answer_label(context.original_answer),
                target_label=answer_label(context.target_answer),
                minimum_sources=context.minimum_sources,
            )
            min_citations = max(min_citations, context.minimum_sources)
        else:
            stance_rule = NEWS_SUPPORT_RULE

        prompt = NEWS_ANALYSIS_PROMPT.format(
            question=query,
            articles=self._format_articles(articles),
            stance_rule=stance_rule,
            price_rule=PRICE_RULE if is_price_question(query) else "",
            min_citations=min_citations,
        )
        result = await self._ask(prompt)
        text = result.get("text")
        if not text or not text.strip():
            raise MalformedUpstreamResponse("Invalid response from LLM while analysing articles")

        citations = self._cited_articles(text, articles)
        logger.info(
            f"[NewsEvidence] stance={stance.value} articles={len(articles)} cited={len(citations)} for '{query}'"
        )
        return RawEvidence(text=text, citations=citations, provider=self.name)

    async def aclose(self) -> None:
        await self.llm.aclose()
