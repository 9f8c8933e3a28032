"""
Structured signals extracted from unstructured evidence text.

Modules:
    - citations: tiered `{title, url}` extraction
    - polarity: tiered yes/no classification
"""
