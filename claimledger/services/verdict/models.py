from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping


class RefutationMode(str, Enum):
    """How a refutation that fails to out-cite the original is reported."""

    STRICT = "strict"
    LENIENT = "lenient"


@dataclass(frozen=True)
class EvidenceItem:
    title: str
    url: str

    def to_dict(self) -> Dict[str, str]:
        return {"title": self.title, "url": self.url}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EvidenceItem":
        return cls(title=str(data.get("title") or ""), url=str(data.get("url") or ""))


@dataclass
class Verdict:
    question: str
    sources: List[EvidenceItem]
    answer: bool
    provider: str = ""
    degraded: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.question,
            "sources": [s.to_dict() for s in self.sources],
            "answer": self.answer,
        }


@dataclass
class Commitment:
    verdict: Verdict
    hash: str

    def ledger_payload(self) -> Dict[str, Any]:
        """Record written to the ledger: the hashed content plus its fingerprint."""
        return {
            "question": self.verdict.question,
            "answer": self.verdict.answer,
            "sources": [s.to_dict() for s in self.verdict.sources],
            "hash": self.hash,
        }


@dataclass
class Refutation:
    original_question: str
    original_answer: bool
    refute_answer: bool
    sources: List[EvidenceItem]
    original_source_count: int
    refute_source_count: int
    accepted: bool
    minimum_required_sources: int = field(default=0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "originalQuestion": self.original_question,
            "originalAnswer": self.original_answer,
            "refuteAnswer": self.refute_answer,
            "sources": [s.to_dict() for s in self.sources],
            "originalSourceCount": self.original_source_count,
            "refuteSourceCount": self.refute_source_count,
        }
