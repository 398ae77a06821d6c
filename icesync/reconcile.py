"""
Score prefix encoding and the rewrite decision.

A scored task title looks like "ICE-S 036.0: Ship feature". ScoreFormat is
the only place that knows this layout: detecting an existing score,
stripping it and writing a new one all go through the same pattern, so a
title never collects more than one prefix.
"""

import math
import re
from dataclasses import dataclass
from typing import Optional

from .config import DEFAULT_PREFIX
from .schema import Task
from .scoring import priority_tier

NOOP = "noop"
REWRITE = "rewrite"


class ScoreFormat:
    def __init__(self, tag: str = DEFAULT_PREFIX, width: int = 5, precision: int = 1):
        if not tag or tag != tag.strip():
            raise ValueError("Score tag must be non-empty and have no surrounding whitespace")
        self.tag = tag
        self.width = width
        self.precision = precision
        self.pattern = re.compile(rf"^{re.escape(tag)} (\d+(?:\.\d+)?): ?")

    def render(self, score: float) -> str:
        """The prefix for a score, e.g. "ICE-S 045.6: "."""
        number = f"{score:.{self.precision}f}".zfill(self.width)
        return f"{self.tag} {number}: "

    def parse(self, content: str) -> Optional[float]:
        match = self.pattern.match(content)
        return float(match.group(1)) if match else None

    def strip(self, content: str) -> str:
        """Remove one leading score prefix; other leading text is left alone."""
        return self.pattern.sub("", content, count=1)

    def apply(self, content: str, score: float) -> str:
        return self.render(score) + self.strip(content)

    def same_score(self, existing: Optional[float], score: float) -> bool:
        return existing is not None and round(score, self.precision) == existing


@dataclass(frozen=True)
class Action:
    kind: str
    score: Optional[float] = None
    content: Optional[str] = None
    priority: Optional[int] = None

    @property
    def is_rewrite(self) -> bool:
        return self.kind == REWRITE


def _is_valid_score(score: Optional[float]) -> bool:
    return score is not None and not math.isnan(score) and score != 0


def reconcile(task: Task, new_score: Optional[float], fmt: ScoreFormat) -> Action:
    """Decide whether a task needs rewriting for a freshly computed score."""
    if not _is_valid_score(new_score):
        return Action(NOOP, score=new_score)
    existing = fmt.parse(task.content)
    if fmt.same_score(existing, new_score):
        return Action(NOOP, score=new_score)
    return Action(
        REWRITE,
        score=new_score,
        content=fmt.apply(task.content, new_score),
        priority=priority_tier(new_score),
    )


def write_back(client, task: Task, action: Action) -> None:
    """Submit a rewrite as a single update request. Errors propagate."""
    if not action.is_rewrite:
        return
    client.update_task(task.id, action.content, action.priority)
