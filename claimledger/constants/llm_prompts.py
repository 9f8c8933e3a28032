"""
LLM prompts for evidence gathering, news synthesis and refutation.
Centralized prompt definitions used by the evidence providers.
"""

# ============================================================================
# WEB SEARCH PROMPTS
# ============================================================================

EVALUATE_PROMPT = """Answer the following yes/no question using the most recent information available on the web.

Question: "{question}"

Rules:
- Start your answer with "Yes" or "No" as the first word of the first sentence.
- Prefer sources published in the last few days; state the date of the data you rely on.
{price_rule}- Cite at least {min_citations} distinct sources.
- End with a "Sources:" section listing every source as a markdown link: - [Title](https://url)
"""

REFUTE_PROMPT = """A previous evaluation answered the following yes/no question with "{original_label}".

Question: "{question}"

Your task is to find evidence that the correct answer is "{target_label}".

Rules:
- Start your answer with "{target_label}" as the first word of the first sentence.
- Argue only for "{target_label}"; do not restate the case for "{original_label}".
- Prefer sources published in the last few days; state the date of the data you rely on.
{price_rule}- You must cite at least {minimum_sources} distinct sources, more than the original evaluation used.
- End with a "Sources:" section listing every source as a markdown link: - [Title](https://url)
"""

PRICE_RULE = """- The question is about a price: report the exact current figure as "The price is <number>" in USD.
"""

# ============================================================================
# NEWS PROMPTS
# ============================================================================

NEWS_SEARCH_TERMS_PROMPT = """Extract 2-3 key search terms from this yes/no question for searching news articles: "{question}"

Return ONLY the search terms separated by spaces, no punctuation or explanation."""

NEWS_ANALYSIS_PROMPT = """Question: "{question}"

Recent news articles (newest first):
{articles}

Based only on these news articles, answer the question.
{stance_rule}
Rules:
- Start your answer with "Yes" or "No".
{price_rule}- Cite at least {min_citations} of the articles above.
- End with a "Sources:" section listing the cited articles as markdown links: - [Title](https://url)
"""

NEWS_SUPPORT_RULE = "Weigh the articles fairly and answer with the verdict they best support."

NEWS_REFUTE_RULE = """A previous evaluation answered "{original_label}". Look for articles that support "{target_label}" and argue for it.
Cite at least {minimum_sources} articles."""
