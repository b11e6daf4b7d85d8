from typing import Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import logging
from settings.config import settings
from settings.db import init_db, close_db
from settings.logging_config import configure_logging
from common.errors import register_exception_handlers
from auth.routes import router as auth_router
from budgets.budget_routes import router as budget_router
from expenses.expense_routes import router as expense_router
from categories.category_routes import router as category_router
from notifications.notification_routes import router as notification_router
from ai.routes import router as ai_router
from analysis_service.analysis_routes import router as analytics_router

logger = logging.getLogger(__name__)


def get_app() -> FastAPI:
    configure_logging(settings.LOG_LEVEL)
    logger.info("Starting Expense Tracker API")
    app = FastAPI(title="Expense Tracker API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With", "Accept"],
        expose_headers=["Authorization"],
    )
    register_exception_handlers(app)

    # DB lifecycle
    @app.on_event("startup")
    async def on_startup() -> None:
        logger.info("Initializing database")
        await init_db()

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        logger.info("Closing database")
        await close_db()

    # Routers
    app.include_router(auth_router)
    app.include_router(expense_router)
    app.include_router(budget_router)
    app.include_router(category_router)
    app.include_router(notification_router)
    app.include_router(ai_router)
    app.include_router(analytics_router)
    logger.info("Routers initialized successfully")

    # Health
    @app.get("/health")
    async def health_check() -> Dict[str, str]:
        return {"status": "ok"}

    return app


# ASGI app instance
app = get_app()
