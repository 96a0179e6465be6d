import logging
import os
import sys
from contextlib import asynccontextmanager
from datetime import timedelta
from importlib.metadata import metadata, PackageNotFoundError
from typing import List

import gconf
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .db import migrate, make_and_open_connection_pool, close_connection_pool
from .service.container import Services, build_services
from .util.async_util import BackgroundTask, CronTask, PeriodicTask
from .web import admin, public
from .web.errors import register_exception_handlers

log = logging.getLogger(__name__)


def create_app(services: Services = None):
    gconf.set_env_prefix("REDEEM")
    # Only load config if not already loaded (e.g., by test fixtures)
    try:
        gconf.get("db.dbname")
        log.debug("Config already loaded, skipping config file load")
    except KeyError:
        if "CONFIG" in os.environ:
            for c in os.environ["CONFIG"].split(","):
                gconf.load(c)
        else:
            gconf.load("config.yml")
    configure_logging()

    app = FastAPI(
        title="Redeem Core",
        description=_app_summary(),
        version=_app_version(),
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.services = services or build_services()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=gconf.get("web.cors_origins", default=[]),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(public.router)
    app.include_router(admin.router)

    return app


def configure_logging():
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for module, level in gconf.get("log.levels").items():  # type: str, str
        logger = logging.getLogger() if module == "root" else logging.getLogger(module)
        logger.setLevel(getattr(logging, level.upper()))
        log.info(f"set logger for {module} to {level.upper()}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    services: Services = app.state.services
    migrate()
    await make_and_open_connection_pool()
    await services.admin_auth.seed_admins()

    background_tasks = _make_background_tasks(services)
    for t in background_tasks:
        t.start()

    log.info("Startup complete")
    yield  # === run app ===
    log.info("Shutting down")

    for t in background_tasks:
        t.stop()
    for t in background_tasks:
        await t.wait()
    await services.imports.wait()
    await close_connection_pool()


def _make_background_tasks(services: Services) -> List[BackgroundTask]:
    retention = timedelta(hours=gconf.get("redeem.brute_force.retention_hours", default=24))

    async def sweep_brute_force_records():
        await services.guard.sweep_stale(retention)

    return [
        PeriodicTask(
            sweep_brute_force_records,
            gconf.get("redeem.brute_force.sweep_interval_seconds", default=600),
        ),
        CronTask(
            services.admin_auth.cleanup_expired_codes,
            gconf.get("admin.login_code.cleanup_schedule"),
            name="cleanup_expired_codes",
        ),
    ]


def _app_summary() -> str:
    try:
        return metadata("redeem_core")["summary"]
    except PackageNotFoundError:
        return ""


def _app_version() -> str:
    try:
        return metadata("redeem_core")["version"]
    except PackageNotFoundError:
        return "0.0.0"
