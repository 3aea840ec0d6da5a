"""Budget Agent API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map BudgetAgentError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized and tables created on startup via lifespan
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from budget_agent.api.error_handlers import register_error_handlers
from budget_agent.api.routes import chat, health
from budget_agent.config import get_settings
from budget_agent.infrastructure.database import init_db
from budget_agent.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(settings.database_url)
    await manager.create_tables()
    logger.info("Budget Agent API started")
    yield
    await manager.dispose()
    logger.info("Budget Agent API shutting down")


app = FastAPI(
    title="Budget Agent API", version="0.1.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(chat.router)

register_error_handlers(app)
