"""Covenant REST API adapter - HTTP client for the hosted backend."""

import logging

import requests

from covenant.config import Config, load_config
from covenant.core.balance import Goal
from covenant.core.tasks import Task, TaskEntry

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15


class ApiError(Exception):
    """Raised when the backend answers with a non-2xx status."""

    def __init__(self, message: str, status: int | None = None, detail=None):
        super().__init__(message)
        self.status = status
        self.detail = detail


class AuthenticationError(ApiError):
    """Raised when the backend rejects the bearer token."""

    pass


class CovenantApiAdapter:
    """
    Covenant backend adapter.

    Implements TaskRepository and GoalRepository protocols over the REST API.
    Recurrence on toggle is computed server-side. No business logic - just I/O.
    """

    def __init__(self, config: Config | None = None, session: requests.Session | None = None):
        self.config = config or load_config()
        self.base_url = self.config.api_base_url.rstrip("/")
        self._session = session or requests.Session()

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.config.api_token:
            headers["Authorization"] = f"Bearer {self.config.api_token}"
        return headers

    def _request(self, method: str, path: str, body: dict | None = None) -> dict | None:
        """Make an authenticated API request and decode the JSON body."""
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {url}")
        resp = self._session.request(
            method,
            url,
            headers=self._headers(),
            json=body,
            timeout=DEFAULT_TIMEOUT,
        )

        if not resp.ok:
            try:
                detail = resp.json()
            except ValueError:
                detail = None
            message = None
            if isinstance(detail, dict):
                message = detail.get("error") or detail.get("message")
            message = message or resp.reason or f"HTTP {resp.status_code}"
            error_cls = AuthenticationError if resp.status_code == 401 else ApiError
            raise error_cls(message, status=resp.status_code, detail=detail)

        if resp.status_code == 204:
            return None
        return resp.json()

    @staticmethod
    def _task_body(task: Task) -> dict:
        body = task.to_dict()
        body.pop("id")
        body.pop("done")
        return body

    # ---- TaskRepository ----

    def list_entries(self) -> list[TaskEntry]:
        data = self._request("GET", "/api/tasks") or {}
        tasks = [Task.from_dict(t) for t in data.get("tasks", [])]
        return [TaskEntry(category=t.category, task=t) for t in tasks]

    def get(self, task_id: str) -> TaskEntry | None:
        return next((e for e in self.list_entries() if e.task.id == task_id), None)

    def add(self, category: str, task: Task) -> Task:
        body = self._task_body(task)
        body["category"] = category
        data = self._request("POST", "/api/tasks", body)
        return Task.from_dict(data["task"])

    def update(self, task: Task) -> Task:
        """The backend only supports toggling, not editing."""
        raise ApiError(f"Editing task {task.id} is not supported by the backend")

    def delete(self, task_id: str) -> bool:
        raise ApiError(f"Deleting task {task_id} is not supported by the backend")

    def toggle(self, task_id: str) -> Task | None:
        try:
            data = self._request("POST", f"/api/tasks/{task_id}/toggle")
        except ApiError as e:
            if e.status == 404:
                return None
            raise
        return Task.from_dict(data["task"])

    # ---- GoalRepository ----

    def list_goals(self) -> list[Goal]:
        data = self._request("GET", "/api/goals") or {}
        return [Goal.from_dict(g) for g in data.get("goals", [])]

    def get_goal(self, goal_id: str) -> Goal | None:
        return next((g for g in self.list_goals() if g.id == goal_id), None)

    def add_goal(self, goal: Goal) -> Goal:
        body = goal.to_dict()
        body.pop("id")
        body.pop("done")
        data = self._request("POST", "/api/goals", body)
        return Goal.from_dict(data["goal"])

    def update_goal(self, goal: Goal) -> Goal:
        """Only completion is supported by the backend."""
        if not goal.done:
            raise ApiError("Backend cannot reopen a completed goal")
        data = self._request("POST", f"/api/goals/{goal.id}/complete")
        return Goal.from_dict(data["goal"])

    def delete_goal(self, goal_id: str) -> bool:
        raise ApiError(f"Deleting goal {goal_id} is not supported by the backend")

    def check_health(self) -> bool:
        """True if the backend's /health endpoint answers ok."""
        try:
            data = self._request("GET", "/health") or {}
        except (ApiError, requests.RequestException) as e:
            logger.warning(f"Health check failed: {e}")
            return False
        return bool(data.get("ok"))
