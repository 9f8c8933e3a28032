from typing import Any, List, Optional

import openai
from openai import AsyncOpenAI

from claimledger.constants.config import WEB_SEARCH_TOOL
from claimledger.constants.llm_prompts import EVALUATE_PROMPT, PRICE_RULE, REFUTE_PROMPT
from claimledger.core.errors import ConfigurationError, EvidenceUnavailable, MalformedUpstreamResponse
from claimledger.core.logger import get_logger
from claimledger.services.evidence.base import (
    EvidenceSource,
    RawEvidence,
    RefuteContext,
    Stance,
    answer_label,
    is_price_question,
)
from claimledger.services.verdict.models import EvidenceItem

logger = get_logger(__name__)


class WebSearchEvidenceSource(EvidenceSource):
    """
    Web-search-augmented completion via the OpenAI Responses API.

    The model runs the hosted web search tool and answers in prose; the
    `url_citation` annotations on the output message are returned as
    structured citations.
    """

    name = "web_search"

    def __init__(
        self,
        api_key: Optional[str],
        model: str,
        min_citations: int = 3,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        if client is None:
            if not api_key:
                raise ConfigurationError("Missing OPENAI_API_KEY")
            client = AsyncOpenAI(api_key=api_key)

        self.client = client
        self.model = model
        self.min_citations = min_citations

    # ---------------------------------------------------------------------
    # Prompting
    # ---------------------------------------------------------------------
    def build_prompt(self, query: str, stance: Stance, context: Optional[RefuteContext] = None) -> str:
        price_rule = PRICE_RULE if is_price_question(query) else ""

        if stance == Stance.REFUTE:
            if context is None:
                raise ValueError("REFUTE stance requires a RefuteContext")
            return REFUTE_PROMPT.format(
                question=query,
                original_label=answer_label(context.original_answer),
                target_label=answer_label(context.target_answer),
                minimum_sources=context.minimum_sources,
                price_rule=price_rule,
            )

        return EVALUATE_PROMPT.format(question=query, min_citations=self.min_citations, price_rule=price_rule)

    # ---------------------------------------------------------------------
    # Fetch
    # ---------------------------------------------------------------------
    async def fetch_evidence(
        self,
        query: str,
        stance: Stance = Stance.SUPPORT,
        context: Optional[RefuteContext] = None,
    ) -> RawEvidence:
        prompt = self.build_prompt(query, stance, context)

        try:
            response = await self.client.responses.create(
                model=self.model,
                tools=[{"type": WEB_SEARCH_TOOL}],
                input=prompt,
            )
        except openai.APIConnectionError as e:
            logger.error(f"[WebSearch] Provider unreachable: {e}")
            raise EvidenceUnavailable(f"Web search provider unreachable: {e}", cause=e) from e
        except openai.APIStatusError as e:
            logger.error(f"[WebSearch] Provider returned HTTP {e.status_code}: {e.message}")
            raise EvidenceUnavailable(f"Web search provider error ({e.status_code}): {e.message}", cause=e) from e

        text = getattr(response, "output_text", None)
        if text is None:
            raise MalformedUpstreamResponse("Web search response has no output text")
        if not text.strip():
            raise EvidenceUnavailable("Web search provider returned empty content")

        citations = self._collect_citations(getattr(response, "output", None) or [])
        logger.info(
            f"[WebSearch] stance={stance.value} chars={len(text)} annotations={len(citations)} for '{query}'"
        )
        return RawEvidence(text=text, citations=citations, provider=self.name)

    @staticmethod
    def _collect_citations(output: List[Any]) -> List[EvidenceItem]:
        citations: List[EvidenceItem] = []
        for item in output:
            if getattr(item, "type", None) != "message":
                continue
            for part in getattr(item, "content", None) or []:
                for ann in getattr(part, "annotations", None) or []:
                    if getattr(ann, "type", None) != "url_citation":
                        continue
                    url = (getattr(ann, "url", "") or "").strip()
                    if not url:
                        continue
                    title = (getattr(ann, "title", "") or "").strip() or url
                    citations.append(EvidenceItem(title=title, url=url))
        return citations

    async def aclose(self) -> None:
        await self.client.close()
