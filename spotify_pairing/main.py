"""
FastAPI application entrypoint for the Spotify pairing service.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse

from spotify_pairing.api.routes import router as api_router
from spotify_pairing.core.config import get_settings
from spotify_pairing.core.errors import PairingError
from spotify_pairing.core.logging import configure_logging
from spotify_pairing.dependencies import build_json_store
from spotify_pairing.services import PairingStore

logger = logging.getLogger(__name__)


async def _pairing_error_handler(_: Request, exc: PairingError) -> PlainTextResponse:
    return PlainTextResponse(exc.message, status_code=exc.status_code)


async def _validation_error_handler(
    _: Request, exc: RequestValidationError
) -> PlainTextResponse:
    # Error bodies are always plain text and bad input is always a 400.
    problems = "; ".join(
        f"{error['loc'][-1]}: {error['msg']}" for error in exc.errors()
    )
    return PlainTextResponse(
        f"Invalid request parameters ({problems})", status_code=HTTPStatus.BAD_REQUEST
    )


def create_app(store: Optional[PairingStore] = None) -> FastAPI:
    """
    Factory for the FastAPI application.

    Without an explicit ``store`` the configured store file is loaded; a load
    failure propagates so the process never starts serving.
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    if store is None:
        store = PairingStore.open(
            build_json_store(settings),
            create_if_missing=settings.storage.create_if_missing,
        )

    app = FastAPI(
        title="Spotify Pairing Service",
        version="0.1.0",
        description="Pairs devices with Spotify accounts and hands out access tokens.",
    )
    app.state.pairing_store = store
    app.add_exception_handler(PairingError, _pairing_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.include_router(api_router)
    return app


def run() -> None:
    """Serve the application with uvicorn using the configured bind address."""
    settings = get_settings()
    try:
        app = create_app()
    except PairingError as exc:
        logger.critical("Cannot load pairing store: %s", exc.message)
        raise SystemExit(1) from exc
    logger.info("Serving pairing service on %s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


__all__ = ["create_app", "run"]


if __name__ == "__main__":  # pragma: no cover - script entry point
    run()
