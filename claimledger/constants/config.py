"""
Application configuration constants.
Centralized settings for models, provider endpoints, extraction rules and ledger encoding.
"""

# ============================================================================
# LLM MODEL SETTINGS
# ============================================================================

# Groq model used by the news provider for search terms and synthesis
LLM_MODEL_NAME = "llama-3.3-70b-versatile"

# Temperature for LLM calls (lower = more deterministic)
LLM_TEMPERATURE = 0.3

# Rate-limit retry budget for Groq calls
LLM_MAX_RETRIES = 5
LLM_BASE_BACKOFF = 1.0
LLM_MAX_BACKOFF = 60.0

# OpenAI hosted tool used for web-search-augmented completions
WEB_SEARCH_TOOL = "web_search_preview"

# ============================================================================
# NEWSAPI SETTINGS
# ============================================================================

NEWS_API_BASE_URL = "https://newsapi.org/v2"

NEWS_API_TIMEOUT = 15

# Articles fetched per question
NEWS_PAGE_SIZE = 5

# NewsAPI upper bound for pageSize
NEWS_MAX_PAGE_SIZE = 100

# Free tier allows roughly one request per second
NEWS_RATE_LIMIT_CALLS = 1
NEWS_RATE_LIMIT_PERIOD = 1.0

# ============================================================================
# CITATION EXTRACTION
# ============================================================================

# Title given to URLs found without link text
BARE_URL_TITLE = "Source"

# Synthetic citation used when no source could be extracted
PLACEHOLDER_TITLE = "Web search results"
PLACEHOLDER_SEARCH_URL = "https://www.google.com/search?q={query}"

# ============================================================================
# POLARITY CLASSIFICATION
# ============================================================================

# Fallback threshold for "the price is N" answers (BTC/USD)
DEFAULT_PRICE_THRESHOLD = 50000.0

# Keywords that make a question price-related
PRICE_KEYWORDS = ("price", "trading", "worth", "cost", "value", "$", "usd", "market cap")

# ============================================================================
# LEDGER
# ============================================================================

LEDGER_RPC_TIMEOUT = 30

# Fixed retry schedule for ledger writes (attempts, seconds between attempts)
LEDGER_MAX_ATTEMPTS = 3
LEDGER_RETRY_BACKOFF = 2.0

# Read-back after a write: node may not index the transaction immediately
LEDGER_READBACK_ATTEMPTS = 3
LEDGER_READBACK_BACKOFF = 1.0
