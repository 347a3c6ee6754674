import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.settings import settings
from controllers.auth_controller import auth_router
from controllers.chatbot_controller import chatbot_router
from controllers.engineers_controller import engineers_router
from controllers.import_controller import import_router
from controllers.notifications_controller import notifications_router
from controllers.reminder_controller import reminder_router
from controllers.services_controller import services_router
from controllers.tasks_controller import tasks_router
from controllers.users_controller import users_router
from services.errors import TrackerError
from services.reminder_scheduler import ReminderScheduler
from services.user_service import UserService
from storage.database import Database, get_db

logger = logging.getLogger(__name__)


# =====================================================
# LOGGING
# =====================================================
def configure_logging() -> None:
    handlers = [logging.StreamHandler()]
    if settings.LOG_FILE:
        handlers.append(logging.FileHandler(settings.LOG_FILE))
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        handlers=handlers,
    )


# =====================================================
# APP FACTORY
# =====================================================
def create_app(database: Optional[Database] = None, start_scheduler: Optional[bool] = None) -> FastAPI:
    """
    Build the API.

    Args:
        database: storage handle to serve from; the process-wide database
            from settings is opened on startup when omitted
        start_scheduler: run the reminder timer (defaults to settings)
    """
    app = FastAPI(title="SecOps Task Tracker")
    app.state.db = database
    app.state.scheduler = None

    if start_scheduler is None:
        start_scheduler = settings.REMINDER_SCHEDULER_ENABLED

    # =====================================================
    # CORS
    # =====================================================
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =====================================================
    # ERROR HANDLERS
    # =====================================================
    @app.exception_handler(TrackerError)
    async def tracker_error_handler(request: Request, exc: TrackerError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(exc.to_dict(), status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse({"error": "Internal server error"}, status_code=500)

    # =====================================================
    # STARTUP / SHUTDOWN
    # =====================================================
    @app.on_event("startup")
    def startup_event() -> None:
        if app.state.db is None:
            app.state.db = get_db()
        UserService(app.state.db).ensure_admin(settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)

        if start_scheduler:
            app.state.scheduler = ReminderScheduler(app.state.db)
            app.state.scheduler.start()
        logger.info("Task tracker ready")

    @app.on_event("shutdown")
    def shutdown_event() -> None:
        if app.state.scheduler is not None:
            app.state.scheduler.stop()

    # =====================================================
    # ROUTERS - ALL UNDER /api PREFIX
    # =====================================================
    app.include_router(auth_router, prefix="/api/auth")
    app.include_router(tasks_router, prefix="/api/tasks")
    app.include_router(engineers_router, prefix="/api/engineers")
    app.include_router(services_router, prefix="/api/services")
    app.include_router(users_router, prefix="/api/users")
    app.include_router(notifications_router, prefix="/api/notifications")
    app.include_router(import_router, prefix="/api/import")
    app.include_router(reminder_router, prefix="/api/reminder")
    app.include_router(chatbot_router, prefix="/api/chatbot")

    # =====================================================
    # HEALTH CHECK ENDPOINT
    # =====================================================
    @app.get("/health")
    def health_check():
        scheduler = app.state.scheduler
        return {
            "status": "ok",
            "database": app.state.db is not None,
            "reminder_scheduler": bool(scheduler and scheduler.running),
        }

    return app


def main() -> None:
    configure_logging()
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
