"""
Pytest configuration and fixtures for test suite.

This module:
- Detects CI environment and skips tests requiring external services
- Provides fake evidence sources and ledgers shared by the unit tests
"""

import os
from typing import List, Optional

import pytest

from claimledger.core.config import Settings
from claimledger.services.evidence.base import EvidenceSource, RawEvidence, RefuteContext, Stance
from claimledger.services.ledger.memory import InMemoryLedger

# Detect CI environment
IS_CI = os.environ.get("CI") or os.environ.get("GITHUB_ACTIONS") or os.environ.get("GITLAB_CI")


def is_openai_available():
    """Check if an OpenAI API key is configured."""
    return bool(os.environ.get("OPENAI_API_KEY"))


def is_news_available():
    """Check if NewsAPI and Groq keys are configured."""
    return bool(os.environ.get("NEWS_API_KEY")) and bool(os.environ.get("GROQ_API_KEY"))


def is_ledger_available():
    """Check if an Ethereum RPC endpoint and signing key are configured."""
    return bool(os.environ.get("LEDGER_RPC_URL")) and bool(
        os.environ.get("LEDGER_PRIVATE_KEY") or os.environ.get("LEDGER_MNEMONIC")
    )


# Pytest markers for skipping
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "openai_required: mark test as requiring the OpenAI API")
    config.addinivalue_line("markers", "news_required: mark test as requiring NewsAPI and Groq")
    config.addinivalue_line("markers", "ledger_required: mark test as requiring an Ethereum RPC and key")
    config.addinivalue_line("markers", "integration: mark test as integration test")


def pytest_collection_modifyitems(config, items):
    """Automatically skip tests based on environment."""
    for item in items:
        if "openai_required" in item.keywords and not is_openai_available():
            item.add_marker(pytest.mark.skip(reason="OpenAI API key not configured"))

        if "news_required" in item.keywords and not is_news_available():
            item.add_marker(pytest.mark.skip(reason="NewsAPI / Groq keys not configured"))

        if "ledger_required" in item.keywords and not is_ledger_available():
            item.add_marker(pytest.mark.skip(reason="Ledger RPC / signing key not configured"))

        # Skip integration tests in CI by default (unless explicitly enabled)
        if IS_CI and "integration" in item.keywords and not os.environ.get("RUN_INTEGRATION_TESTS"):
            item.add_marker(pytest.mark.skip(reason="Integration tests skipped in CI by default"))


class FakeEvidenceSource(EvidenceSource):
    """Returns canned evidence per stance and records every call."""

    name = "fake"

    def __init__(
        self,
        support: Optional[RawEvidence] = None,
        refute: Optional[RawEvidence] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.support = support or RawEvidence(text="No.")
        self.refute = refute or RawEvidence(text="")
        self.error = error
        self.calls: List[tuple] = []
        self.closed = False

    async def fetch_evidence(
        self,
        query: str,
        stance: Stance = Stance.SUPPORT,
        context: Optional[RefuteContext] = None,
    ) -> RawEvidence:
        self.calls.append((query, stance, context))
        if self.error is not None:
            raise self.error
        return self.refute if stance == Stance.REFUTE else self.support

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_source():
    return FakeEvidenceSource()


@pytest.fixture
def memory_ledger():
    return InMemoryLedger()


@pytest.fixture
def test_settings():
    """Settings that never touch the environment's .env or real providers."""
    return Settings(
        _env_file=None,
        EVIDENCE_PROVIDER="web_search",
        OPENAI_API_KEY="test-key",
        LEDGER_BACKEND="none",
        LEDGER_PRIVATE_KEY=None,
        LEDGER_MNEMONIC=None,
        LEDGER_RETRY_BACKOFF=0.0,
    )


@pytest.fixture
def openai_available():
    """Fixture indicating if the OpenAI API is available."""
    return is_openai_available()
