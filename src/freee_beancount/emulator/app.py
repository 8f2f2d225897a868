"""FastAPI application emulating the freee accounting API."""

from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from freee_beancount.domain.errors import DomainError, NotFoundError, ValidationError
from freee_beancount.emulator.auth import bearer_token_middleware, error_response
from freee_beancount.emulator.config import EmulatorSettings
from freee_beancount.emulator.routers import deals, journals, oauth, receipts, reference, wallet_txns
from freee_beancount.emulator.store import EmulatorStore


def create_store(settings: EmulatorSettings) -> EmulatorStore:
    db_path = Path(settings.db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return EmulatorStore(f"sqlite:///{db_path}", upload_dir=settings.upload_dir)


def create_app(
    settings: Optional[EmulatorSettings] = None, store: Optional[EmulatorStore] = None
) -> FastAPI:
    """Build the emulator app. Tests pass an in-memory store."""
    settings = settings or EmulatorSettings()
    app = FastAPI(title=settings.app_name)
    app.state.settings = settings
    app.state.store = store or create_store(settings)

    app.middleware("http")(bearer_token_middleware)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return error_response(404, "not_found", str(exc))

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        return error_response(400, "invalid_parameter", str(exc))

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        return error_response(400, "invalid_request", str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return error_response(400, "invalid_request", "Failed to parse request")

    @app.get("/health")
    async def health():
        return {"status": "ok", "service": settings.app_name}

    # Routers
    app.include_router(oauth.router)
    app.include_router(deals.router)
    app.include_router(journals.router)
    app.include_router(wallet_txns.router)
    app.include_router(receipts.router)
    app.include_router(reference.router)
    return app
