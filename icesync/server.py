"""
HTTP boundary: POST /webhook feeds the debouncer, GET /health reports state.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from .config import Settings
from .debounce import RunController, TriggerDebouncer
from .logger import StructuredLogger, get_logger
from .pipeline import process_tasks
from .reconcile import ScoreFormat
from .todoist import TodoistClient

ADMITTED_TEXT = "Processing Tasks."
REJECTED_TEXT = "Already processing webhooks. Please wait."
ERROR_TEXT = "Error processing tasks."


def build_debouncer(
    settings: Settings,
    client: Optional[TodoistClient] = None,
    logger: Optional[StructuredLogger] = None,
) -> TriggerDebouncer:
    """Wire a debouncer whose run reconciles the configured Todoist filter."""
    logger = logger or get_logger()
    client = client or TodoistClient(settings.api_token, settings.base_url, logger=logger)
    fmt = ScoreFormat(settings.prefix)

    async def run():
        return await process_tasks(client, settings.task_filter, fmt, logger)

    return TriggerDebouncer(RunController(settings.min_interval), run, logger)


def create_app(debouncer: TriggerDebouncer, logger: Optional[StructuredLogger] = None) -> FastAPI:
    log = logger or get_logger()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # admitted runs are never cancelled; let the pending one finish
        if debouncer.pending:
            log.info("Waiting for the scheduled run before shutdown")
        await debouncer.drain()
        log.log_metrics_summary()

    app = FastAPI(title="icesync", lifespan=lifespan)
    app.state.debouncer = debouncer

    @app.post("/webhook", response_class=PlainTextResponse)
    async def webhook():
        try:
            result = debouncer.on_trigger()
        except Exception as e:
            log.record_error(type(e).__name__)
            log.error("Error processing tasks", error=str(e), type=type(e).__name__)
            return PlainTextResponse(ERROR_TEXT, status_code=500)
        return PlainTextResponse(ADMITTED_TEXT if result.admitted else REJECTED_TEXT)

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "processing": debouncer.controller.is_processing,
            "metrics": log.get_metrics(),
        }

    return app
