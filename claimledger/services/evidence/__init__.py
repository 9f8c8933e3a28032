"""
Evidence providers behind one `EvidenceSource` interface.

Modules:
    - base: Stance, RawEvidence and the EvidenceSource contract
    - web_search: OpenAI web-search-augmented completions
    - news: NewsAPI articles synthesized by a Groq model
    - factory: provider selection from settings
"""
