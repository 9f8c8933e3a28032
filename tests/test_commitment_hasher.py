import hashlib
import json

from claimledger.services.ledger.hasher import canonical_json, commit, commit_refutation, fingerprint, verdict_content
from claimledger.services.verdict.models import EvidenceItem, Refutation, Verdict


def _verdict(**overrides):
    fields = dict(
        question="Is Bitcoin above $50,000?",
        sources=[EvidenceItem(title="CoinDesk", url="https://coindesk.com/x")],
        answer=True,
    )
    fields.update(overrides)
    return Verdict(**fields)


def test_hash_matches_sha256_of_compact_json():
    verdict = _verdict()
    expected_text = (
        '{"question":"Is Bitcoin above $50,000?","answer":true,'
        '"sources":[{"title":"CoinDesk","url":"https://coindesk.com/x"}]}'
    )

    commitment = commit(verdict)

    assert canonical_json(verdict_content(verdict)) == expected_text
    assert commitment.hash == hashlib.sha256(expected_text.encode("utf-8")).hexdigest()
    assert commitment.hash == commitment.hash.lower()
    assert len(commitment.hash) == 64


def test_hash_is_deterministic():
    assert commit(_verdict()).hash == commit(_verdict()).hash


def test_hash_changes_with_any_field():
    base = commit(_verdict()).hash

    assert commit(_verdict(answer=False)).hash != base
    assert commit(_verdict(question="Is Ether above $5,000?")).hash != base
    assert commit(_verdict(sources=[])).hash != base


def test_provider_metadata_is_not_hashed():
    assert commit(_verdict(provider="news", degraded=True)).hash == commit(_verdict()).hash


def test_non_ascii_is_kept_as_utf8():
    verdict = _verdict(question="¿Está el Bitcoin por encima de 50.000 €?")

    text = canonical_json(verdict_content(verdict))

    assert "¿Está" in text
    assert commit(verdict).hash == hashlib.sha256(text.encode("utf-8")).hexdigest()


def test_ledger_payload_carries_content_and_hash():
    commitment = commit(_verdict())
    payload = commitment.ledger_payload()

    assert list(payload) == ["question", "answer", "sources", "hash"]
    content = {k: v for k, v in payload.items() if k != "hash"}
    assert fingerprint(content) == payload["hash"]


def test_refutation_payload_hash_covers_public_fields():
    refutation = Refutation(
        original_question="q",
        original_answer=True,
        refute_answer=False,
        sources=[EvidenceItem(title="a", url="https://a"), EvidenceItem(title="b", url="https://b")],
        original_source_count=1,
        refute_source_count=2,
        accepted=True,
    )

    payload = commit_refutation(refutation)

    assert payload["originalQuestion"] == "q"
    assert payload["refuteSourceCount"] == 2
    content = {k: v for k, v in payload.items() if k != "hash"}
    assert payload["hash"] == hashlib.sha256(
        json.dumps(content, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    ).hexdigest()
