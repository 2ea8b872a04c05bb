"""
FastAPI routes for the Spotify pairing service.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse, RedirectResponse

from spotify_pairing.core.errors import (
    AlreadyRegisteredError,
    NotFoundError,
    ProviderDeniedError,
    ProviderError,
)
from spotify_pairing.core.logging import mask_token
from spotify_pairing.dependencies import (
    get_pairing_store,
    get_registration_manager,
    get_user_token_service,
)
from spotify_pairing.services import (
    PairingStore,
    RegistrationManager,
    UserTokenService,
)

router = APIRouter()
logger = logging.getLogger(__name__)

ACCESS_DENIED = "access_denied"


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/", status_code=HTTPStatus.FOUND)
async def start_pairing(
    store: Annotated[PairingStore, Depends(get_pairing_store)],
    registrations: Annotated[RegistrationManager, Depends(get_registration_manager)],
) -> RedirectResponse:
    """Issue a pairing token and send the browser to the Spotify consent page."""
    async with store.session() as document:
        _, authorization_url = registrations.create_pairing(document)
        store.save()

    return RedirectResponse(url=authorization_url, status_code=HTTPStatus.FOUND)


@router.get("/callback", response_class=PlainTextResponse)
async def handle_spotify_callback(
    store: Annotated[PairingStore, Depends(get_pairing_store)],
    registrations: Annotated[RegistrationManager, Depends(get_registration_manager)],
    tokens: Annotated[UserTokenService, Depends(get_user_token_service)],
    state: str = Query(..., description="Pairing token issued when starting OAuth."),
    code: str | None = Query(default=None, description="Authorization code from Spotify."),
    error: str | None = Query(default=None, description="Error reported by Spotify."),
) -> PlainTextResponse:
    """Complete or abandon the registration identified by ``state``."""
    if code is not None:
        return await _complete_registration(store, registrations, tokens, state, code)
    if error is not None:
        return await _abandon_registration(store, state, error)
    return PlainTextResponse(
        "Missing code or error parameter", status_code=HTTPStatus.BAD_REQUEST
    )


async def _complete_registration(
    store: PairingStore,
    registrations: RegistrationManager,
    tokens: UserTokenService,
    state: str,
    code: str,
) -> PlainTextResponse:
    async with store.session() as document:
        user = document.users.get(state)
        if user is None:
            raise NotFoundError("No user matched the token provided")
        if user.is_registered():
            raise AlreadyRegisteredError()

        await tokens.register(user, code)
        canonical = registrations.deduplicate(document, state)
        store.save()

    return PlainTextResponse(f"Your token: {canonical}")


async def _abandon_registration(
    store: PairingStore, state: str, error: str
) -> PlainTextResponse:
    if error != ACCESS_DENIED:
        logger.warning("Spotify reported an authorization error: %s", error)
        raise ProviderError(f"Spotify error: {error}")

    async with store.session() as document:
        user = document.users.get(state)
        if user is not None and not user.is_registered():
            del document.users[state]
            store.save()
            logger.info("User declined consent, dropped pending token %s", mask_token(state))

    raise ProviderDeniedError()


@router.get("/spotify_token", response_class=PlainTextResponse)
async def get_spotify_token(
    store: Annotated[PairingStore, Depends(get_pairing_store)],
    tokens: Annotated[UserTokenService, Depends(get_user_token_service)],
    token: str = Query(..., description="Pairing token returned after registration."),
) -> PlainTextResponse:
    """Return a currently valid Spotify access token for a paired device."""
    async with store.session() as document:
        user = document.users.get(token)
        if user is None:
            raise NotFoundError()

        access_token = await tokens.get_valid_token(user)
        store.save()

    return PlainTextResponse(access_token)


__all__ = ["router"]
