"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from zipo.api import ops
from zipo.api.errors import install_error_handlers
from zipo.api.graphql import router as graphql_router
from zipo.infra import postgres
from zipo.infra.scheduler import build_maintenance_scheduler
from zipo.obs import init as obs_init
from zipo.settings import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
	await postgres.init_pool()
	await postgres.ensure_schema()
	scheduler = None
	if settings.jobs_enabled:
		scheduler = build_maintenance_scheduler()
		scheduler.start()
		app.state.scheduler = scheduler
	logger.info("startup_complete", extra={"environment": settings.environment})
	try:
		yield
	finally:
		if scheduler is not None:
			scheduler.shutdown(wait=False)
		await postgres.close_pool()


app = FastAPI(title="Zipo API", lifespan=lifespan)
install_error_handlers(app)
obs_init(app)

app.add_middleware(
	CORSMiddleware,
	allow_origins=list(settings.cors_allow_origins),
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

app.include_router(graphql_router)
app.include_router(ops.router, tags=["ops"])
