"""
ICE score derivation.

Responsibilities:
- Combine Impact, Confidence and Ease into a single score.
- Map a score onto Todoist's four priority levels.

Non-Responsibilities:
- No label parsing or eligibility checks.
- No I/O.

Invariant:
Given identical inputs, these functions always return the same result.
"""

# (lower bound, tier), checked from the highest tier down
PRIORITY_THRESHOLDS = ((70, 4), (50, 3), (30, 2))
LOWEST_PRIORITY = 1


def derive_score(impact: int, confidence: int, ease: int) -> float:
    return (impact * confidence * ease) / 10


def priority_tier(score: float) -> int:
    """Todoist priority for a score: 4 is the most urgent, 1 the least."""
    for lower_bound, tier in PRIORITY_THRESHOLDS:
        if score >= lower_bound:
            return tier
    return LOWEST_PRIORITY
