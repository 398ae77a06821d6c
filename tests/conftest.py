"""
Pytest configuration and shared fixtures.
"""

import pytest
from typing import Any, Dict, List

from icesync.logger import StructuredLogger
from icesync.reconcile import ScoreFormat
from icesync.schema import Task, TaskList
from icesync.todoist import TodoistError


class FakeTodoist:
    """In-memory stand-in for TodoistClient."""

    def __init__(self, tasks: List[Task] = None, fail_ids=(), invalid: int = 0):
        self.tasks = list(tasks or [])
        self.invalid = invalid
        self.fail_ids = set(fail_ids)
        self.list_calls: List[str] = []
        self.updates: List[tuple] = []

    def list_tasks(self, filter_expr: str = "") -> TaskList:
        self.list_calls.append(filter_expr)
        return TaskList(self.tasks, invalid=self.invalid)

    def update_task(self, task_id: str, content: str, priority: int) -> Dict[str, Any]:
        if task_id in self.fail_ids:
            raise TodoistError(f"Todoist request failed (500): /tasks/{task_id}", 500)
        self.updates.append((task_id, content, priority))
        return {"id": task_id, "content": content, "priority": priority}


@pytest.fixture
def quiet_logger() -> StructuredLogger:
    """Logger with no handlers attached, metrics only."""
    return StructuredLogger(name="icesync-test", enable_console=False, enable_file=False)


@pytest.fixture
def tag_format() -> ScoreFormat:
    return ScoreFormat("TAG")


@pytest.fixture
def todoist_record() -> Dict[str, Any]:
    """A task record as returned by GET /tasks."""
    return {
        "id": "2995104339",
        "content": "Ship feature",
        "labels": ["Impact-8", "Confidence-5", "Ease-9"],
        "priority": 1,
        "project_id": "2203306141",
        "is_completed": False,
    }


@pytest.fixture
def scored_task() -> Task:
    return Task(id="1", content="Ship feature", labels=["Impact-8", "Confidence-5", "Ease-9"])


@pytest.fixture
def make_todoist():
    """Factory for FakeTodoist clients."""
    return FakeTodoist
