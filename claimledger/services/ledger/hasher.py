"""
Commitment hashing.

The hashed content of a verdict is, in this exact order:

    {"question": str, "answer": bool, "sources": [{"title": str, "url": str}, ...]}

serialized as compact JSON (no whitespace, non-ASCII kept as UTF-8) and
digested with SHA-256. The hex digest is lowercase.
"""

import hashlib
import json
from typing import Any, Mapping

from claimledger.services.verdict.models import Commitment, Refutation, Verdict


def canonical_json(payload: Mapping[str, Any]) -> str:
    """Serialize preserving key order; the same mapping always yields the same text."""
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def fingerprint(payload: Mapping[str, Any]) -> str:
    return hashlib.sha256(canonical_json(payload).encode("utf-8")).hexdigest()


def verdict_content(verdict: Verdict) -> dict:
    return {
        "question": verdict.question,
        "answer": verdict.answer,
        "sources": [{"title": s.title, "url": s.url} for s in verdict.sources],
    }


def commit(verdict: Verdict) -> Commitment:
    return Commitment(verdict=verdict, hash=fingerprint(verdict_content(verdict)))


def commit_refutation(refutation: Refutation) -> dict:
    """Ledger payload for a refutation: its public fields plus their fingerprint."""
    payload = refutation.to_dict()
    payload["hash"] = fingerprint(payload)
    return payload
