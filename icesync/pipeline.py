"""
One reconciliation run: fetch the filtered task list once, score every
task and write back the ones whose score changed.

Blocking HTTP calls are pushed to a worker thread so the event loop keeps
serving webhooks while a run is in progress.
"""

import asyncio
from dataclasses import dataclass, field
from typing import List, Optional

from .labels import extract_metrics
from .logger import StructuredLogger, get_logger
from .reconcile import ScoreFormat, reconcile, write_back
from .schema import Task
from .scoring import derive_score
from .todoist import TodoistError


@dataclass
class TaskOutcome:
    task_id: str
    content: str
    status: str
    score: Optional[float] = None
    priority: Optional[int] = None
    new_content: Optional[str] = None
    error: Optional[str] = None


@dataclass
class RunSummary:
    fetched: int = 0
    invalid: int = 0
    outcomes: List[TaskOutcome] = field(default_factory=list)

    def count(self, status: str) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def failures(self) -> List[TaskOutcome]:
        return [o for o in self.outcomes if o.status == "failed"]

    def as_dict(self) -> dict:
        return {
            "fetched": self.fetched,
            "invalid": self.invalid,
            "updated": self.count("updated"),
            "unchanged": self.count("unchanged"),
            "ineligible": self.count("ineligible"),
            "failed": self.count("failed"),
        }


def score_task(task: Task) -> Optional[float]:
    """ICE score from the task's labels, or None if a metric is missing."""
    metrics = extract_metrics(task.labels)
    if metrics is None:
        return None
    return derive_score(*metrics)


async def reconcile_task(client, task: Task, fmt: ScoreFormat, logger: StructuredLogger) -> TaskOutcome:
    score = score_task(task)
    if score is None:
        logger.info("Skipping task due to missing labels", id=task.id, content=task.content)
        return TaskOutcome(task.id, task.content, "ineligible")

    action = reconcile(task, score, fmt)
    if not action.is_rewrite:
        logger.info("Skipping task due to unchanged score", id=task.id, content=task.content)
        return TaskOutcome(task.id, task.content, "unchanged", score=score)

    outcome = TaskOutcome(
        task.id, task.content, "updated",
        score=score, priority=action.priority, new_content=action.content,
    )
    try:
        await asyncio.to_thread(write_back, client, task, action)
    except TodoistError as e:
        logger.record_error(f"UpdateError_{e.status or 'transport'}")
        logger.error("Error updating task", id=task.id, error=str(e))
        outcome.status = "failed"
        outcome.error = str(e)
        return outcome

    logger.info(f"Task updated: {action.content} with {action.priority}", id=task.id)
    return outcome


async def process_tasks(
    client,
    filter_expr: str = "",
    fmt: Optional[ScoreFormat] = None,
    logger: Optional[StructuredLogger] = None,
) -> RunSummary:
    """Run one full reconciliation pass and return its summary.

    ``client.list_tasks`` returns a TaskList. Tasks are handled in the
    order Todoist returned them. A failed update
    is recorded on that task's outcome and the run continues.
    """
    fmt = fmt or ScoreFormat()
    logger = logger or get_logger()

    tasks = await asyncio.to_thread(client.list_tasks, filter_expr)
    summary = RunSummary(fetched=len(tasks), invalid=tasks.invalid)
    for task in tasks:
        outcome = await reconcile_task(client, task, fmt, logger)
        logger.record_task(outcome.status)
        summary.outcomes.append(outcome)

    logger.info("Run finished", **summary.as_dict())
    return summary
