# Imports from standard library or third-party packages
import asyncio
import logging
from datetime import timedelta
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

# Imports from this project
from config import ALERT_INTERVAL_SECONDS, CORS_ORIGINS, REMINDER_IDLE_MINUTES
from database import create_indexes, get_mongo_db
from errors import ValidationFailure
from repositories.clients import ClientStore
from services.alerts import ReminderScheduler, ReminderService
from routers import (
    users,
    clients,
    notes,
    activity,
    auth,
    alerts,
    dashboard,
    seeding,
)

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def register_exception_handlers(app: FastAPI):
    """Toutes les erreurs sont renvoyées sous la forme {"error": "..."}, sans détail interne."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            logger.warning("%s %s: %s", request.method, request.url.path, exc.detail)
        return _error(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # Seuls les noms des champs en cause sont renvoyés
        fields = sorted({
            str(error["loc"][-1])
            for error in exc.errors()
            if error.get("loc") and error.get("type") != "json_invalid"
        })
        message = "Invalid request"
        if fields:
            message += ": " + ", ".join(fields)
        return _error(400, message)

    @app.exception_handler(ValidationFailure)
    async def validation_failure_handler(request: Request, exc: ValidationFailure):
        return _error(400, exc.message)

    @app.exception_handler(PyMongoError)
    async def persistence_failure_handler(request: Request, exc: PyMongoError):
        logger.error("Erreur MongoDB sur %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
        return _error(500, "Database error")

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error("Erreur inattendue sur %s %s", request.method, request.url.path, exc_info=exc)
        return _error(500, "Internal server error")


def create_app(get_db: Callable[[], Database] = get_mongo_db):
    """Crée et configure l'instance de l'application FastAPI."""
    app = FastAPI(
        title="CRM API",
        description="API de suivi des clients, réunions, notes et utilisateurs",
        version="1.0.0"
    )

    # Base de données injectée (mongomock dans les tests)
    if get_db is not get_mongo_db:
        app.dependency_overrides[get_mongo_db] = get_db

    app.state.reminders = ReminderService(
        lambda: ClientStore(get_db()).list_with_meetings(),
        idle_timeout=timedelta(minutes=REMINDER_IDLE_MINUTES),
    )

    # Événements de démarrage et d'arrêt
    @app.on_event("startup")
    async def on_startup():
        try:
            await asyncio.to_thread(create_indexes, get_db())
        except PyMongoError as e:
            logger.error("Impossible de créer les index MongoDB: %s", e)

        app.state.shutdown_event = asyncio.Event()
        scheduler = ReminderScheduler(app.state.reminders, ALERT_INTERVAL_SECONDS)
        app.state.scheduler_task = asyncio.create_task(scheduler.start(app.state.shutdown_event))

    @app.on_event("shutdown")
    async def on_shutdown():
        app.state.shutdown_event.set()
        await app.state.scheduler_task

    # Configuration CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Inclusion des routeurs
    app.include_router(users.router, prefix="/users", tags=["Users"])
    app.include_router(clients.router, prefix="/clients", tags=["Clients"])
    app.include_router(notes.router, prefix="/notes", tags=["Notes"])
    app.include_router(activity.router, prefix="/activity", tags=["Activity"])
    app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
    app.include_router(alerts.router, prefix="/alerts", tags=["Alerts"])
    app.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
    app.include_router(seeding.router, prefix="/seed", tags=["Seed"])

    @app.get("/", tags=["Root"])
    def read_root():
        return {"message": "Welcome to the CRM backend!"}

    return app
