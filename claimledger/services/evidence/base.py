from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from claimledger.constants.config import PRICE_KEYWORDS
from claimledger.services.verdict.models import EvidenceItem


class Stance(str, Enum):
    SUPPORT = "support"
    REFUTE = "refute"


@dataclass(frozen=True)
class RefuteContext:
    """What the provider is asked to argue against, and how many sources it must beat."""

    original_answer: bool
    minimum_sources: int

    @property
    def target_answer(self) -> bool:
        return not self.original_answer


@dataclass
class RawEvidence:
    text: str
    citations: List[EvidenceItem] = field(default_factory=list)
    provider: str = ""


_PRICE_NUMBER = re.compile(r"\$\s?\d|\d+\s?(k|usd|dollars)\b", re.IGNORECASE)


def is_price_question(query: str) -> bool:
    lowered = query.lower()
    return any(k in lowered for k in PRICE_KEYWORDS) or bool(_PRICE_NUMBER.search(query))


def answer_label(answer: bool) -> str:
    return "Yes" if answer else "No"


class EvidenceSource(ABC):
    """
    Uniform interface over pluggable evidence providers.

    Implementations return unstructured prose plus any structured citations
    the provider hands back out-of-band. They raise EvidenceUnavailable when
    the provider is unreachable or answers with nothing usable, and
    MalformedUpstreamResponse when the payload is missing expected fields.
    """

    name: str = "evidence"

    @abstractmethod
    async def fetch_evidence(
        self,
        query: str,
        stance: Stance = Stance.SUPPORT,
        context: Optional[RefuteContext] = None,
    ) -> RawEvidence:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None
