from typing import ClassVar, List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Evidence providers
    EVIDENCE_PROVIDER: Literal["web_search", "news"] = Field(
        default="web_search", description="Evidence source: 'web_search' (OpenAI) or 'news' (NewsAPI + Groq)"
    )
    OPENAI_API_KEY: Optional[str] = Field(default=None)
    OPENAI_MODEL: str = Field(default="gpt-4.1-mini", description="Model used for web-search completions")
    NEWS_API_KEY: Optional[str] = Field(default=None)
    GROQ_API_KEY: Optional[str] = Field(default=None)

    EVIDENCE_UNAVAILABLE_POLICY: Literal["degrade", "propagate"] = Field(
        default="propagate",
        description="'degrade' returns a false verdict with a placeholder source, 'propagate' fails the request",
    )
    MIN_CITATIONS: int = Field(default=3, description="Minimum citations requested from the evidence provider")

    # Verdict extraction
    PRICE_THRESHOLD: float = Field(default=50000.0, description="Threshold for the 'the price is N' rule")
    CITATION_DEDUPE: bool = Field(default=False, description="Drop repeated citation URLs")

    # Refutation
    REFUTATION_MODE: Literal["strict", "lenient"] = Field(default="strict", description="Mode for /api/refute")
    REFUTATION_LOCAL_MODE: Literal["strict", "lenient"] = Field(
        default="lenient", description="Mode for /api/refute-local"
    )

    # Ledger
    LEDGER_BACKEND: Literal["none", "memory", "ethereum"] = Field(
        default="none", description="Where commitments are written"
    )
    LEDGER_RPC_URL: str = Field(default="https://sepolia.drpc.org", description="Ethereum JSON-RPC endpoint")
    LEDGER_CHAIN_ID: Optional[int] = Field(default=11155111, description="Chain id; fetched from the node when unset")
    LEDGER_PRIVATE_KEY: Optional[str] = Field(default=None)
    LEDGER_MNEMONIC: Optional[str] = Field(default=None)
    LEDGER_GAS_LIMIT: int = Field(default=100000, description="Gas limit for commitment transactions")
    LEDGER_MAX_ATTEMPTS: int = Field(default=3, description="Write attempts on transient ledger errors")
    LEDGER_RETRY_BACKOFF: float = Field(default=2.0, description="Fixed seconds between ledger attempts")
    LEDGER_EXPLORER_URL: str = Field(
        default="https://sepolia.etherscan.io/tx/{tx_hash}", description="Explorer link template"
    )

    # Server
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3000)
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])
    ENABLE_TRACING: bool = Field(default=False, description="Export OpenTelemetry spans")

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
