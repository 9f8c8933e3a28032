"""
Yes/no polarity from raw evidence text.

Rules are tried in order; the first one that returns a bool decides:

    explicit "yes"/"no" in the first sentence
    > "the price is N" compared against the price threshold
    > fixed comparative phrases ("above $X", "over $X", "trading above $X")
    > "trading above" in the first sentence
    > False
"""

import re
from typing import Callable, List, Optional, Tuple

from claimledger.constants.config import DEFAULT_PRICE_THRESHOLD
from claimledger.core.logger import get_logger

logger = get_logger(__name__)

_SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+|\n+")
_YES_NO = re.compile(r"\b(yes|no)\b")
_PRICE_IS = re.compile(r"the price is\s*(?:about|around|approximately)?\s*\$?\s*(\d[\d,]*(?:\.\d+)?)")

Rule = Callable[[str], Optional[bool]]


def first_sentence(text: str) -> str:
    for chunk in _SENTENCE_BREAK.split(text.strip()):
        if chunk.strip():
            return chunk.strip()
    return ""


class PolarityClassifier:
    def __init__(self, price_threshold: float = DEFAULT_PRICE_THRESHOLD) -> None:
        self.price_threshold = price_threshold
        amounts = dict.fromkeys((f"{price_threshold:,.0f}", f"{price_threshold:.0f}"))
        self.comparative_phrases = tuple(
            f"{prefix} ${amount}" for amount in amounts for prefix in ("trading above", "above", "over")
        )
        self.rules: List[Tuple[str, Rule]] = [
            ("explicit_cue", self._explicit_cue),
            ("price_threshold", self._price_threshold),
            ("comparative_phrase", self._comparative_phrase),
            ("trading_above", self._trading_above),
        ]

    # ---------------------------------------------------------------------
    # Rules (text is already lower-cased)
    # ---------------------------------------------------------------------
    def _explicit_cue(self, text: str) -> Optional[bool]:
        match = _YES_NO.search(first_sentence(text))
        if match:
            return match.group(1) == "yes"
        return None

    def _price_threshold(self, text: str) -> Optional[bool]:
        match = _PRICE_IS.search(text)
        if not match:
            return None
        try:
            price = float(match.group(1).replace(",", ""))
        except ValueError:
            return None
        return price > self.price_threshold

    def _comparative_phrase(self, text: str) -> Optional[bool]:
        if any(phrase in text for phrase in self.comparative_phrases):
            return True
        return None

    def _trading_above(self, text: str) -> Optional[bool]:
        if "trading above" in first_sentence(text):
            return True
        return None

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------
    def explain(self, text: str) -> Tuple[bool, str]:
        """Return the verdict and the name of the rule that produced it."""
        lowered = (text or "").lower()
        for name, rule in self.rules:
            result = rule(lowered)
            if result is not None:
                return result, name
        return False, "default"

    def classify(self, text: str) -> bool:
        answer, rule = self.explain(text)
        logger.debug(f"[PolarityClassifier] answer={answer} via rule={rule}")
        return answer
