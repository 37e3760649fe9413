from __future__ import annotations

import re
from typing import Callable, Dict, List, Pattern, Tuple

# Ordered: the first context with a keyword hit wins.
KEYWORDS: List[Tuple[str, List[str]]] = [
    ("exercise", [
        "exercise", "exercises", "drill", "drills", "joint sword", "strait thunder",
        "live-fire", "live fire", "war games", "wargame", "military maneuvers",
    ]),
    ("election", [
        "election", "elections", "vote", "voting", "ballot", "referendum",
        "recall", "primary", "polls",
    ]),
    ("congress", [
        "party congress", "congress", "plenum", "plenary", "two sessions",
        "npc", "cppcc", "central committee", "politburo",
    ]),
    ("inauguration", [
        "inauguration", "inaugural", "sworn in", "national day", "double ten",
        "founding", "anniversary",
    ]),
    ("holiday", [
        "lunar new year", "chinese new year", "spring festival", "new year",
        "mid-autumn", "holiday", "festival",
    ]),
]

UNMATCHED = "unmatched"

# Reactive score per context. Exercises tend to follow provocations;
# scheduled political milestones point to pre-planning.
CONTEXT_SCORES: Dict[str, float] = {
    "exercise": 0.7,
    "election": 0.2,
    "congress": 0.25,
    "inauguration": 0.2,
    "holiday": 0.3,
    UNMATCHED: 0.4,
}

PoliticalContextClassifier = Callable[[str], str]


def _compile(keys: List[str]) -> Pattern[str]:
    alts = "|".join(re.escape(k) for k in sorted(keys, key=len, reverse=True))
    return re.compile(rf"\b(?:{alts})\b", re.IGNORECASE)


_PATTERNS: List[Tuple[str, Pattern[str]]] = [(ctx, _compile(keys)) for ctx, keys in KEYWORDS]


def classify_political_context(text: str) -> str:
    """
    Return the context tag for a political event's text, or 'unmatched'.
    Case-insensitive whole-word matching.
    """
    if not text:
        return UNMATCHED
    for ctx, pattern in _PATTERNS:
        if pattern.search(text):
            return ctx
    return UNMATCHED


def context_score(context: str) -> float:
    return CONTEXT_SCORES.get(context, CONTEXT_SCORES[UNMATCHED])


__all__ = [
    "KEYWORDS",
    "CONTEXT_SCORES",
    "UNMATCHED",
    "PoliticalContextClassifier",
    "classify_political_context",
    "context_score",
]
