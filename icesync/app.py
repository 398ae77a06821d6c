import argparse
import asyncio

from . import __version__
from .config import ConfigError, Settings
from .env import load_env
from .logger import get_logger
from .pipeline import process_tasks
from .reconcile import ScoreFormat
from .todoist import TodoistClient


def _settings() -> Settings:
    try:
        return Settings.from_env()
    except ConfigError as e:
        raise SystemExit(str(e))


def cmd_serve(args: argparse.Namespace) -> None:
    import uvicorn
    from .server import build_debouncer, create_app

    settings = _settings()
    logger = get_logger(level=settings.log_level, log_dir=settings.log_dir)
    app = create_app(build_debouncer(settings, logger=logger), logger)
    port = args.port or settings.port
    logger.info(f"Server is running on http://{args.host}:{port}")
    uvicorn.run(app, host=args.host, port=port, log_level=settings.log_level.lower())


def cmd_sync(args: argparse.Namespace) -> None:
    settings = _settings()
    logger = get_logger(level=settings.log_level, log_dir=settings.log_dir)
    client = TodoistClient(settings.api_token, settings.base_url, logger=logger)
    task_filter = args.filter if args.filter is not None else settings.task_filter
    try:
        summary = asyncio.run(
            process_tasks(client, task_filter, ScoreFormat(settings.prefix), logger)
        )
    finally:
        client.close()

    for outcome in summary.outcomes:
        if outcome.status == "updated":
            print(f"[updated] {outcome.new_content} (priority {outcome.priority})")
        elif outcome.status == "failed":
            print(f"[failed] {outcome.task_id} -> {outcome.error}")
        else:
            print(f"[{outcome.status}] {outcome.content}")
    counts = summary.as_dict()
    print(
        f"Done. fetched={counts['fetched']} invalid={counts['invalid']} updated={counts['updated']} "
        f"no-change={counts['unchanged']} skipped={counts['ineligible']} failed={counts['failed']}"
    )
    if summary.failures:
        raise SystemExit(1)


def main():
    # Load .env if present (TODOIST_API_TOKEN, TODOIST_FILTER, etc.)
    load_env()
    parser = argparse.ArgumentParser(prog="icesync", description="Keep Todoist task titles and priorities in line with ICE labels")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    srv = subparsers.add_parser("serve", help="Run the webhook server")
    srv.add_argument("--host", default="0.0.0.0", help="Interface to bind (default: 0.0.0.0)")
    srv.add_argument("--port", type=int, help="Port to listen on (default: PORT or 3000)")
    srv.set_defaults(func=cmd_serve)

    syn = subparsers.add_parser("sync", help="Reconcile tasks once, right now, without debouncing")
    syn.add_argument("--filter", help="Todoist filter (default: TODOIST_FILTER)")
    syn.set_defaults(func=cmd_sync)

    args = parser.parse_args()

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
