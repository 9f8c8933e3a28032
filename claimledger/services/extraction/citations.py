"""
Citation extraction from raw evidence.

Tiers are tried in order and the first non-empty result wins:

    1. structured citations handed back by the provider
    2. markdown links `[title](url)`, in order of appearance
    3. bare URLs, titled with a generic placeholder

When every tier comes back empty on the evaluate path, a single synthetic
web-search citation built from the question is returned instead.
"""

import re
from typing import Callable, List, Optional, Sequence, Tuple
from urllib.parse import quote_plus

from claimledger.constants.config import BARE_URL_TITLE, PLACEHOLDER_SEARCH_URL, PLACEHOLDER_TITLE
from claimledger.core.logger import get_logger
from claimledger.services.evidence.base import RawEvidence
from claimledger.services.verdict.models import EvidenceItem

logger = get_logger(__name__)

# URLs may carry one level of balanced parentheses, e.g. /wiki/Bitcoin_(currency)
MARKDOWN_LINK = re.compile(r"\[([^\]\n]+)\]\((https?://(?:[^\s()]|\([^\s()]*\))+)\)")
BARE_URL = re.compile(r"https?://(?:[^\s<>\"'()\[\]]|\([^\s<>\"'()]*\))+")

_TRAILING_PUNCTUATION = ".,;:!?"

Strategy = Callable[[RawEvidence], List[EvidenceItem]]


def from_provider_citations(raw: RawEvidence) -> List[EvidenceItem]:
    return [c for c in raw.citations if c.url]


def from_markdown_links(raw: RawEvidence) -> List[EvidenceItem]:
    return [
        EvidenceItem(title=title.strip(), url=url.rstrip(_TRAILING_PUNCTUATION))
        for title, url in MARKDOWN_LINK.findall(raw.text or "")
    ]


def from_bare_urls(raw: RawEvidence) -> List[EvidenceItem]:
    items = []
    for match in BARE_URL.finditer(raw.text or ""):
        url = match.group(0).rstrip(_TRAILING_PUNCTUATION)
        if url:
            items.append(EvidenceItem(title=BARE_URL_TITLE, url=url))
    return items


def placeholder_citation(question: str) -> EvidenceItem:
    """Deterministic web-search link for `question`."""
    return EvidenceItem(title=PLACEHOLDER_TITLE, url=PLACEHOLDER_SEARCH_URL.format(query=quote_plus(question)))


def dedupe_by_url(items: Sequence[EvidenceItem]) -> List[EvidenceItem]:
    seen = set()
    unique = []
    for item in items:
        key = item.url.rstrip("/").lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(item)
    return unique


class CitationExtractor:
    DEFAULT_STRATEGIES: Tuple[Tuple[str, Strategy], ...] = (
        ("provider", from_provider_citations),
        ("markdown", from_markdown_links),
        ("bare_url", from_bare_urls),
    )

    def __init__(
        self,
        dedupe: bool = False,
        strategies: Optional[Sequence[Tuple[str, Strategy]]] = None,
    ) -> None:
        self.dedupe = dedupe
        self.strategies = tuple(strategies) if strategies is not None else self.DEFAULT_STRATEGIES

    def extract(
        self,
        raw: RawEvidence | str,
        question: Optional[str] = None,
        allow_placeholder: bool = True,
    ) -> List[EvidenceItem]:
        """
        Parse evidence into `{title, url}` items.

        `allow_placeholder` is the evaluate-path behaviour; refutation passes
        False so that finding nothing counts as finding nothing.
        """
        if isinstance(raw, str):
            raw = RawEvidence(text=raw)

        for name, strategy in self.strategies:
            items = strategy(raw)
            if items:
                if self.dedupe:
                    items = dedupe_by_url(items)
                logger.debug(f"[CitationExtractor] tier={name} found {len(items)} sources")
                return items

        if allow_placeholder and question is not None:
            logger.info(f"[CitationExtractor] No sources found, using search placeholder for '{question}'")
            return [placeholder_citation(question)]

        return []
