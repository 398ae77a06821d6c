"""
Metric extraction from task labels.

A metric is written as a label in one of two forms:
- long:  "Impact-7", "confidence-5"
- short: "I-7", "c-5"

Only the text before the first hyphen is compared (case-insensitively);
the value is the leading base-10 integer of the text between the first
and second hyphen. A label with no leading digits has no value.
"""

import re
from typing import Iterable, NamedTuple, Optional, Sequence

METRIC_NAMES = ("Impact", "Confidence", "Ease")
_LEADING_INT = re.compile(r"\s*\+?([0-9]+)")


class Metrics(NamedTuple):
    impact: int
    confidence: int
    ease: int


def _split(label: str):
    head, sep, value = label.partition("-")
    if not sep:
        return None, None
    return head.lower(), value


def _parse_value(value: str) -> Optional[int]:
    # leading integer of the segment up to the next hyphen: "7a" and "7-2" read as 7
    match = _LEADING_INT.match(value.split("-", 1)[0])
    if match is None:
        return None
    return int(match.group(1), 10)


def extract(labels: Iterable[str], metric_name: str) -> Optional[int]:
    """Return the metric's value from the labels, or None if absent.

    A long-form label beats a short-form one even when its value is
    malformed; in that case the metric is absent.
    """
    long_key = metric_name.lower()
    short_key = metric_name[:1].lower()
    long_value = short_value = None
    found_long = found_short = False

    for label in labels:
        head, value = _split(label)
        if head is None:
            continue
        if head == long_key and not found_long:
            long_value, found_long = value, True
        elif head == short_key and not found_short:
            short_value, found_short = value, True

    if found_long:
        return _parse_value(long_value)
    if found_short:
        return _parse_value(short_value)
    return None


def extract_metrics(labels: Sequence[str]) -> Optional[Metrics]:
    """Extract Impact, Confidence and Ease; None unless all three are present."""
    values = [extract(labels, name) for name in METRIC_NAMES]
    if any(v is None for v in values):
        return None
    return Metrics(*values)
