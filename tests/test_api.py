import pytest
from conftest import FakeEvidenceSource
from fastapi.testclient import TestClient

from claimledger.core.errors import EvidenceUnavailable, LedgerTransientError
from claimledger.main import create_app
from claimledger.services.container import build_services
from claimledger.services.evidence.base import RawEvidence
from claimledger.services.ledger.memory import InMemoryLedger
from claimledger.services.verdict.models import EvidenceItem

DEV_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
QUESTION = "Is Bitcoin above $50,000?"

SUPPORT = RawEvidence(
    text="Yes, Bitcoin is trading above $50,000. The price is 67,120 USD.",
    citations=[EvidenceItem(title="CoinDesk", url="https://www.coindesk.com/price/bitcoin")],
)
REFUTE = RawEvidence(
    text="No.\n- [Reuters](https://reuters.com/a)\n- [Bloomberg](https://bloomberg.com/b)",
)


class DownLedger(InMemoryLedger):
    async def write(self, data):
        raise LedgerTransientError("rpc timeout")


def _client(settings, source=None, ledger=None, **kwargs):
    source = source or FakeEvidenceSource(support=SUPPORT, refute=REFUTE)
    services = build_services(settings, source=source, ledger=ledger)
    return TestClient(create_app(services=services, config=settings), **kwargs)


# ----------------------------------------------------------------------------
# Evaluate
# ----------------------------------------------------------------------------


def test_evaluate_local(test_settings):
    with _client(test_settings) as client:
        res = client.post("/api/evaluate-local", json={"question": QUESTION})

    assert res.status_code == 200
    body = res.json()
    assert body["question"] == QUESTION
    assert body["answer"] is True
    assert body["sources"] == [{"title": "CoinDesk", "url": "https://www.coindesk.com/price/bitcoin"}]
    assert body["status"] == "evaluated"
    assert len(body["hash"]) == 64
    assert "tx_hash" not in body


def test_evaluate_writes_to_ledger(test_settings, memory_ledger):
    with _client(test_settings, ledger=memory_ledger) as client:
        local = client.post("/api/evaluate-local", json={"question": QUESTION}).json()
        res = client.post("/api/evaluate", json={"question": QUESTION})

    body = res.json()
    assert res.status_code == 200
    assert body["status"] == "evaluated"
    assert body["hash"] == local["hash"]
    assert body["tx_hash"].startswith("0x")
    assert body["ledger_error"] is None
    assert len(memory_ledger) == 1


def test_evaluate_without_ledger_has_null_ledger_fields(test_settings):
    with _client(test_settings) as client:
        body = client.post("/api/evaluate", json={"question": QUESTION}).json()

    assert body["tx_hash"] is None
    assert body["explorer_url"] is None


def test_evaluate_reports_exhausted_ledger(test_settings):
    with _client(test_settings, ledger=DownLedger()) as client:
        res = client.post("/api/evaluate", json={"question": QUESTION})

    assert res.status_code == 200
    body = res.json()
    assert body["tx_hash"] is None
    assert body["ledger_error"] == "rpc timeout"


@pytest.mark.parametrize("payload", [{}, {"question": ""}, {"question": "   "}])
def test_evaluate_requires_question(test_settings, payload):
    with _client(test_settings) as client:
        res = client.post("/api/evaluate", json=payload)

    assert res.status_code == 400
    assert res.json() == {"error": "Question is required"}


def test_malformed_json_is_400(test_settings):
    with _client(test_settings) as client:
        res = client.post("/api/evaluate", content=b"{not json", headers={"Content-Type": "application/json"})

    assert res.status_code == 400
    assert "error" in res.json()


def test_provider_failure_is_500(test_settings):
    source = FakeEvidenceSource(error=EvidenceUnavailable("provider down"))
    with _client(test_settings, source=source) as client:
        res = client.post("/api/evaluate-local", json={"question": QUESTION})

    assert res.status_code == 500
    assert res.json() == {"error": "Failed to evaluate question: provider down"}


# ----------------------------------------------------------------------------
# Refute
# ----------------------------------------------------------------------------


def _original(n_sources):
    return {
        "question": QUESTION,
        "answer": True,
        "sources": [{"title": f"S{i}", "url": f"https://s{i}.example"} for i in range(n_sources)],
    }


def test_refute_local_inline(test_settings):
    with _client(test_settings) as client:
        res = client.post("/api/refute-local", json={"originalEvaluation": _original(1)})

    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "refuted-local"
    assert body["originalQuestion"] == QUESTION
    assert body["originalAnswer"] is True
    assert body["refuteAnswer"] is False
    assert body["accepted"] is True
    assert body["originalSourceCount"] == 1
    assert body["refuteSourceCount"] == 2
    assert [s["title"] for s in body["sources"]] == ["Reuters", "Bloomberg"]


def test_refute_local_is_lenient_when_out_cited(test_settings):
    with _client(test_settings) as client:
        res = client.post("/api/refute-local", json={"originalEvaluation": _original(5)})

    assert res.status_code == 200
    assert res.json()["accepted"] is False
    assert res.json()["refuteAnswer"] is False


def test_refute_is_strict_when_out_cited(test_settings):
    with _client(test_settings) as client:
        res = client.post("/api/refute", json={"originalEvaluation": _original(2)})

    assert res.status_code == 500
    assert "at least 3 sources" in res.json()["error"]


def test_refute_by_transaction_hash(test_settings, memory_ledger):
    with _client(test_settings, ledger=memory_ledger) as client:
        evaluated = client.post("/api/evaluate", json={"question": QUESTION}).json()
        res = client.post("/api/refute", json={"transactionHash": evaluated["tx_hash"]})

    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "refuted"
    assert body["originalSourceCount"] == 1
    assert body["refuteAnswer"] is False
    assert body["refutation_tx_hash"].startswith("0x")
    assert body["refutation_tx_hash"] != evaluated["tx_hash"]
    assert len(memory_ledger) == 2


def test_refute_unknown_transaction_is_500(test_settings, memory_ledger):
    with _client(test_settings, ledger=memory_ledger) as client:
        res = client.post("/api/refute-local", json={"transactionHash": "0x" + "00" * 32})

    assert res.status_code == 500
    assert "error" in res.json()


@pytest.mark.parametrize(
    "payload",
    [{}, {"originalEvaluation": {"answer": True}}, {"originalEvaluation": {"question": "q"}}],
)
def test_refute_requires_original(test_settings, payload):
    with _client(test_settings) as client:
        res = client.post("/api/refute", json=payload)

    assert res.status_code == 400
    assert "error" in res.json()


# ----------------------------------------------------------------------------
# Agent / system
# ----------------------------------------------------------------------------


def test_address_and_test_sign(test_settings):
    settings = test_settings.model_copy(update={"LEDGER_PRIVATE_KEY": DEV_KEY})
    with _client(settings) as client:
        address = client.get("/api/address").json()
        signed = client.get("/api/test-sign").json()

    assert address == {"address": "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266", "chain_id": 11155111}
    assert signed["address"] == address["address"]
    assert signed["signature"].startswith("0x")


def test_address_without_account_is_500(test_settings):
    with _client(test_settings) as client:
        res = client.get("/api/address")

    assert res.status_code == 500
    assert res.json() == {"error": "Signing account is not configured"}


def test_health_and_metrics(test_settings, memory_ledger):
    with _client(test_settings, ledger=memory_ledger) as client:
        health = client.get("/health").json()
        client.post("/api/evaluate-local", json={"question": QUESTION})
        metrics = client.get("/metrics")

    assert health == {"status": "ok", "provider": "fake", "ledger": "memory", "refutation_mode": "strict"}
    assert metrics.status_code == 200
    assert "claimledger_evaluations_total" in metrics.text


def test_unexpected_error_is_500(test_settings):
    source = FakeEvidenceSource(support=SUPPORT)
    with _client(test_settings, source=source, raise_server_exceptions=False) as client:
        client.app.state.services.evaluator = None
        res = client.post("/api/evaluate-local", json={"question": QUESTION})

    assert res.status_code == 500
    assert "error" in res.json()


def test_shutdown_closes_services(test_settings):
    source = FakeEvidenceSource(support=SUPPORT)
    with _client(test_settings, source=source):
        pass

    assert source.closed is True
