"""Todoist REST client: the one list query and the per-task update."""

from typing import Any, Dict, Optional

import requests

from .config import DEFAULT_BASE_URL
from .logger import StructuredLogger, get_logger
from .schema import Task, TaskList, validate_task


class TodoistError(Exception):
    """Raised when a Todoist request fails (transport, auth or HTTP status)."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class TodoistClient:
    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 15,
        session: Optional[requests.Session] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        })
        self._logger = logger

    @property
    def logger(self) -> StructuredLogger:
        return self._logger or get_logger()

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        """Send one request and normalize every failure into TodoistError."""
        url = f"{self.base_url}{path}"
        self.logger.record_api_call()
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
            resp.raise_for_status()
            return resp
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status in (401, 403):
                raise TodoistError(f"Todoist rejected the API token ({status}): {url}", status)
            if status == 404:
                raise TodoistError(f"Todoist resource not found (404): {url}", status)
            raise TodoistError(f"Todoist request failed ({status}): {url}", status)
        except requests.exceptions.Timeout:
            raise TodoistError(f"Todoist request timed out: {url}")
        except requests.exceptions.RequestException as e:
            raise TodoistError(f"Todoist request error: {e}")

    def list_tasks(self, filter_expr: str = "") -> TaskList:
        """Fetch the tasks matching a Todoist filter.

        Never raises: any failure is logged and yields an empty list.
        Records that fail validation are skipped and counted in
        ``TaskList.invalid``.
        """
        params = {"filter": filter_expr} if filter_expr else {}
        try:
            records = self._request("GET", "/tasks", params=params).json()
        except TodoistError as e:
            self.logger.record_error(f"FetchError_{e.status or 'transport'}")
            self.logger.error("Error fetching tasks", error=str(e), filter=filter_expr)
            return TaskList()
        except ValueError as e:
            self.logger.record_error("FetchError_json")
            self.logger.error("Todoist returned a non-JSON body", error=str(e))
            return TaskList()

        if not isinstance(records, list):
            self.logger.error("Unexpected task list payload", type=type(records).__name__)
            return TaskList()

        tasks = TaskList()
        for record in records:
            errors = validate_task(record)
            if errors:
                self.logger.warning(
                    "Skipping invalid task record",
                    id=record.get("id") if isinstance(record, dict) else None,
                    errors=errors,
                )
                tasks.invalid += 1
                self.logger.record_invalid_record()
                continue
            tasks.append(Task.from_api(record))
        self.logger.debug("Fetched tasks", count=len(tasks), filter=filter_expr)
        return tasks

    def update_task(self, task_id: str, content: str, priority: int) -> Dict[str, Any]:
        """Rewrite a task's title and priority in one request.

        Raises:
            TodoistError: On any HTTP error, timeout, or request failure
        """
        resp = self._request(
            "POST",
            f"/tasks/{task_id}",
            json={"content": content, "priority": priority},
        )
        try:
            return resp.json()
        except ValueError:
            return {}

    def close(self):
        self.session.close()
