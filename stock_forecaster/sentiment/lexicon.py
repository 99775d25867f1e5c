"""
Finance-domain sentiment lexicons.

Matching is exact on lowercased whitespace tokens.  Punctuation is NOT
stripped, so ``"surge,"`` does not count as ``"surge"``.  Keep entries
lowercase and single-word.
"""

from __future__ import annotations

POSITIVE_WORDS: frozenset[str] = frozenset({
    "buy", "bull", "bullish", "gain", "gains", "growth", "increase",
    "profit", "profits", "rise", "rising", "strong", "up", "upgrade",
    "positive", "beat", "beats", "outperform", "rally", "surge", "soar",
    "breakthrough", "success", "excellent", "outstanding", "boost",
    "momentum", "optimistic", "confident", "expansion", "record",
    "milestone", "innovation", "partnership", "acquisition", "merger",
    "dividend",
})

NEGATIVE_WORDS: frozenset[str] = frozenset({
    "sell", "bear", "bearish", "loss", "losses", "decline", "decrease",
    "fall", "falling", "weak", "down", "downgrade", "negative", "miss",
    "misses", "underperform", "crash", "plunge", "drop", "concern",
    "worry", "risk", "threat", "disappointing", "warning", "cut", "reduce",
    "layoff", "bankruptcy", "debt", "lawsuit", "investigation", "scandal",
})
