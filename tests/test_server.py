"""
Tests for the webhook endpoint.
"""

from fastapi.testclient import TestClient

from icesync.config import Settings
from icesync.debounce import RunController, TriggerDebouncer
from icesync.server import ADMITTED_TEXT, ERROR_TEXT, REJECTED_TEXT, build_debouncer, create_app


def make_app(quiet_logger, calls, min_interval=0.2):
    async def job():
        calls.append(1)

    debouncer = TriggerDebouncer(RunController(min_interval), job, quiet_logger)
    return create_app(debouncer, quiet_logger), debouncer


class TestWebhook:

    def test_admitted_then_rejected(self, quiet_logger):
        """Both outcomes answer 200; only the body differs."""
        calls = []
        app, debouncer = make_app(quiet_logger, calls)
        with TestClient(app) as client:
            first = client.post("/webhook", json={"event_name": "item:updated"})
            second = client.post("/webhook")

        assert first.status_code == 200
        assert first.text == ADMITTED_TEXT
        assert second.status_code == 200
        assert second.text == REJECTED_TEXT
        # shutdown waits for the admitted run
        assert calls == [1]
        assert not debouncer.controller.is_processing

    def test_admission_failure_returns_500(self, quiet_logger):
        calls = []
        app, debouncer = make_app(quiet_logger, calls)

        def boom():
            raise RuntimeError("clock broke")

        debouncer.controller.try_admit = boom
        with TestClient(app) as client:
            resp = client.post("/webhook")

        assert resp.status_code == 500
        assert resp.text == ERROR_TEXT
        assert calls == []
        assert not debouncer.controller.is_processing
        assert quiet_logger.metrics["errors_by_type"]["RuntimeError"] == 1

    def test_get_is_not_allowed(self, quiet_logger):
        app, _ = make_app(quiet_logger, [])
        with TestClient(app) as client:
            assert client.get("/webhook").status_code == 405

    def test_health(self, quiet_logger):
        app, _ = make_app(quiet_logger, [])
        with TestClient(app) as client:
            body = client.get("/health").json()
        assert body["status"] == "ok"
        assert body["processing"] is False
        assert body["metrics"]["triggers_admitted"] == 0


class TestBuildDebouncer:

    def test_run_reconciles_configured_filter(self, quiet_logger, make_todoist, scored_task):
        settings = Settings(api_token="t", task_filter="#Work", min_interval=0.01, prefix="TAG")
        todoist = make_todoist([scored_task])
        debouncer = build_debouncer(settings, client=todoist, logger=quiet_logger)
        app = create_app(debouncer, quiet_logger)

        with TestClient(app) as client:
            assert client.post("/webhook").text == ADMITTED_TEXT

        assert todoist.list_calls == ["#Work"]
        assert todoist.updates == [("1", "TAG 036.0: Ship feature", 2)]
        assert debouncer.controller.min_interval == 0.01
