try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import logging
from datetime import datetime, timedelta, timezone
from string import ascii_letters, digits
from urllib.parse import parse_qs, urlsplit

import pytest

from spotify_pairing.clients import SpotifyOAuthClient
from spotify_pairing.core.config import PairingSettings, SpotifySettings
from spotify_pairing.models import StoreDocument, UserRecord
from spotify_pairing.services import RegistrationManager
from spotify_pairing.services import registration

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def _registered(spotify_id: str, access: str = "access") -> UserRecord:
    return UserRecord(
        refresh_token=f"refresh-{spotify_id}",
        current_token=access,
        token_expiry=NOW + timedelta(hours=1),
        spotify_id=spotify_id,
    )


@pytest.fixture()
def manager() -> RegistrationManager:
    spotify = SpotifySettings(
        SPOTIFY_CLIENT_ID="client",
        SPOTIFY_CLIENT_SECRET="secret",
        SPOTIFY_REDIRECT_URI="https://example.com/callback",
    )
    return RegistrationManager(PairingSettings(), SpotifyOAuthClient(spotify))


def test_generated_tokens_use_configured_length_and_alphabet(manager) -> None:
    alphabet = set(ascii_letters + digits)
    for _ in range(200):
        token = manager.generate_token(set())
        assert len(token) == 16
        assert set(token) <= alphabet


def test_generate_token_skips_existing_keys(monkeypatch) -> None:
    spotify = SpotifySettings(SPOTIFY_CLIENT_ID="client", SPOTIFY_CLIENT_SECRET="secret")
    manager = RegistrationManager(
        PairingSettings(PAIRING_TOKEN_LENGTH=4), SpotifyOAuthClient(spotify)
    )
    draws = iter("aaaa" "aaaa" "bbbb")
    monkeypatch.setattr(registration.secrets, "choice", lambda _alphabet: next(draws))

    assert manager.generate_token({"aaaa"}) == "bbbb"


def test_create_pairing_inserts_pending_record_and_builds_url(manager) -> None:
    document = StoreDocument()

    token, url = manager.create_pairing(document, now=NOW)

    assert list(document.users) == [token]
    record = document.users[token]
    assert not record.is_registered()
    assert record.current_token is None
    assert record.spotify_id is None
    assert record.token_expiry == NOW

    parts = urlsplit(url)
    assert f"{parts.scheme}://{parts.netloc}{parts.path}" == SpotifyOAuthClient.AUTH_BASE_URL
    query = parse_qs(parts.query)
    assert query["state"] == [token]
    assert query["client_id"] == ["client"]
    assert query["response_type"] == ["code"]
    assert query["redirect_uri"] == ["https://example.com/callback"]
    assert query["show_dialog"] == ["false"]
    assert (
        "scope=user-read-playback-state%20user-read-currently-playing"
        "%20user-modify-playback-state" in url
    )


def test_create_pairing_never_reuses_existing_token(manager) -> None:
    document = StoreDocument()
    issued = {manager.create_pairing(document, now=NOW)[0] for _ in range(50)}

    assert len(issued) == 50
    assert set(document.users) == issued


def test_prune_only_removes_pending_records_past_the_window(manager) -> None:
    document = StoreDocument(
        users={
            "stale": UserRecord(token_expiry=NOW - timedelta(seconds=31)),
            "edge": UserRecord(token_expiry=NOW - timedelta(seconds=30)),
            "fresh": UserRecord(token_expiry=NOW - timedelta(seconds=5)),
            "registered": UserRecord(
                refresh_token="refresh",
                current_token="access",
                token_expiry=NOW - timedelta(days=3),
                spotify_id="someone",
            ),
        }
    )

    removed = manager.prune_timed_out(document, now=NOW)

    assert removed == ["stale"]
    assert set(document.users) == {"edge", "fresh", "registered"}


def test_create_pairing_prunes_abandoned_registrations(manager) -> None:
    document = StoreDocument(
        users={"abandoned": UserRecord(token_expiry=NOW - timedelta(minutes=2))}
    )

    token, _ = manager.create_pairing(document, now=NOW)

    assert set(document.users) == {token}


def test_deduplicate_keeps_the_earlier_token(manager) -> None:
    newer = _registered("spotify-user", access="new-access")
    document = StoreDocument(
        users={"A" * 16: _registered("spotify-user"), "B" * 16: newer}
    )

    canonical = manager.deduplicate(document, "B" * 16)

    assert canonical == "A" * 16
    assert set(document.users) == {"A" * 16}
    assert document.users["A" * 16] is newer


def test_deduplicate_returns_new_token_when_account_is_unseen(manager) -> None:
    document = StoreDocument(
        users={
            "A" * 16: _registered("other-user"),
            "B" * 16: _registered("spotify-user"),
            "C" * 16: UserRecord(token_expiry=NOW),
        }
    )

    assert manager.deduplicate(document, "B" * 16) == "B" * 16
    assert set(document.users) == {"A" * 16, "B" * 16, "C" * 16}


def test_log_lines_only_show_token_prefix(manager, caplog) -> None:
    document = StoreDocument(users={"A" * 16: _registered("spotify-user")})

    with caplog.at_level(logging.INFO, logger=registration.__name__):
        token, _ = manager.create_pairing(document, now=NOW)
        document.users[token] = _registered("spotify-user", access="new-access")
        manager.deduplicate(document, token)

    assert caplog.records
    assert token not in caplog.text
    assert "A" * 16 not in caplog.text
    assert f"{token[:4]}..." in caplog.text
