"""Application entry point — runs scheduler + web server in a single process."""

from __future__ import annotations

import json
import logging
import sys
import threading
from contextlib import asynccontextmanager

import uvicorn
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from newshub.config import load_config
from newshub.jobs import run_ingestion
from newshub.storage import init_db
from newshub.web.app import create_app
from newshub.web.config import load_web_config

logger = logging.getLogger("newshub")


def setup_logging(log_level: str, log_format: str) -> None:
    """Configure root logger based on config."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    if log_format == "json":
        formatter = logging.Formatter(
            json.dumps(
                {
                    "time": "%(asctime)s",
                    "level": "%(levelname)s",
                    "logger": "%(name)s",
                    "message": "%(message)s",
                }
            )
        )
    else:
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def build_scheduler(config) -> BackgroundScheduler:
    """Create a BackgroundScheduler with the recurring ingestion job."""
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        run_ingestion,
        trigger=IntervalTrigger(minutes=config.fetch_interval_minutes),
        args=[config],
        id="ingestion",
        name="News ingestion cycle",
        max_instances=1,
        coalesce=True,
    )
    return scheduler


def main() -> None:
    """Load config, set up logging, and start scheduler + web server."""
    config = load_config()
    web_config = load_web_config()

    setup_logging(config.log_level, config.log_format)

    logger.info(
        "newshub starting (env=%s, db=%s, sources=%s)",
        config.app_env,
        config.database_path,
        ",".join(config.ingestion_sources),
    )

    init_db(config.database_path)

    scheduler = build_scheduler(config)

    def _initial_ingestion():
        """Run one cycle at startup in a background thread."""
        logger.info("Running initial ingestion cycle")
        run_ingestion(config)

    @asynccontextmanager
    async def lifespan(app):
        logger.info("Scheduler starting")
        scheduler.start()
        # Run initial cycle in background so web server is available immediately
        threading.Thread(target=_initial_ingestion, daemon=True).start()
        yield
        logger.info("Scheduler shutting down")
        scheduler.shutdown(wait=False)

    app = create_app(web_config, lifespan=lifespan)

    uvicorn.run(app, host=web_config.web_host, port=web_config.web_port)


if __name__ == "__main__":
    main()
