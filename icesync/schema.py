from dataclasses import dataclass, field
from typing import Any, Dict, List

REQUIRED_STR_FIELDS = ["id", "content"]
PRIORITY_RANGE = (1, 4)


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def validate_task(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    Only the fields the reconciliation reads are checked.
    """
    errors: List[str] = []
    if not isinstance(data, dict):
        return ["Task record must be an object"]

    for f in REQUIRED_STR_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif f == "id" and isinstance(data[f], int) and not isinstance(data[f], bool):
            continue  # older API versions return numeric ids
        elif f == "content" and isinstance(data[f], str):
            continue  # empty titles are legal
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    labels = data.get("labels") or []
    if not isinstance(labels, list) or not all(isinstance(l, str) for l in labels):
        errors.append("Field 'labels' must be a list of strings if provided")

    if "priority" in data:
        p = data["priority"]
        lo, hi = PRIORITY_RANGE
        if not isinstance(p, int) or isinstance(p, bool) or not lo <= p <= hi:
            errors.append(f"Field 'priority' must be an integer between {lo} and {hi}")

    return errors


@dataclass
class Task:
    id: str
    content: str
    labels: List[str] = field(default_factory=list)
    priority: int = 1

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Task":
        """Build a Task from a REST API record. Raises ValueError if invalid."""
        errors = validate_task(data)
        if errors:
            raise ValueError("; ".join(errors))
        return cls(
            id=str(data["id"]),
            content=data["content"],
            labels=list(data.get("labels") or []),
            priority=data.get("priority", 1),
        )


class TaskList(list):
    """Tasks from one fetch, plus how many records failed validation."""

    def __init__(self, tasks=(), invalid: int = 0):
        super().__init__(tasks)
        self.invalid = invalid
