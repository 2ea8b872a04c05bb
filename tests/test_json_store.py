try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from spotify_pairing.clients import JSONFileStore
from spotify_pairing.core.errors import StoreFormatError, StoreIOError
from spotify_pairing.models import StoreDocument, UserRecord
from spotify_pairing.services import PairingStore, TokenCipherService

EXPIRY = datetime(2024, 5, 1, 8, 30, tzinfo=timezone.utc)


def _document() -> StoreDocument:
    return StoreDocument(
        users={
            "registeredToken1": UserRecord(
                refresh_token="refresh",
                current_token="access",
                token_expiry=EXPIRY,
                spotify_id="spotify-user",
            ),
            "pendingTokenAbcd": UserRecord(token_expiry=EXPIRY),
        }
    )


def test_load_missing_file_raises_io_error(tmp_path: Path) -> None:
    with pytest.raises(StoreIOError):
        JSONFileStore(tmp_path / "missing.json").load()


@pytest.mark.parametrize(
    "contents",
    [
        "not json at all",
        json.dumps({"users": []}),
        json.dumps({"users": {"tok": {"token_expiry": "yesterday"}}}),
    ],
)
def test_load_rejects_malformed_documents(tmp_path: Path, contents: str) -> None:
    path = tmp_path / "store.json"
    path.write_text(contents, encoding="utf-8")

    with pytest.raises(StoreFormatError):
        JSONFileStore(path).load()


def test_save_writes_documented_layout(tmp_path: Path) -> None:
    path = tmp_path / "store.json"

    JSONFileStore(path).save(_document())

    data = json.loads(path.read_text(encoding="utf-8"))
    registered = data["users"]["registeredToken1"]
    assert registered == {
        "refresh_token": "refresh",
        "current_token": "access",
        "token_expiry": "2024-05-01T08:30:00Z",
        "spotify_id": "spotify-user",
    }
    pending = data["users"]["pendingTokenAbcd"]
    assert pending["refresh_token"] is None
    assert pending["spotify_id"] is None
    assert list(tmp_path.iterdir()) == [path]


def test_load_reads_existing_store_file(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_text(
        json.dumps(
            {
                "users": {
                    "abc": {
                        "refresh_token": "refresh",
                        "current_token": "access",
                        "token_expiry": "2024-05-01T08:30:00.123456Z",
                        "spotify_id": "spotify-user",
                    }
                }
            }
        ),
        encoding="utf-8",
    )

    document = JSONFileStore(path).load()

    user = document.users["abc"]
    assert user.is_registered()
    assert user.spotify_id == "spotify-user"
    assert user.token_expiry.tzinfo is not None


def test_save_to_unwritable_location_raises_io_error(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(StoreIOError):
        JSONFileStore(blocker / "store.json").save(StoreDocument())


def test_encrypted_store_hides_tokens_on_disk(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    store = JSONFileStore(path, cipher=TokenCipherService(secret="at-rest-secret"))

    store.save(_document())

    raw = path.read_text(encoding="utf-8")
    assert '"refresh"' not in raw
    assert '"access"' not in raw

    loaded = store.load()
    assert loaded.users["registeredToken1"].refresh_token == "refresh"
    assert loaded.users["registeredToken1"].current_token == "access"
    assert loaded.users["pendingTokenAbcd"].refresh_token is None


def test_encrypted_store_rejects_wrong_secret(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    JSONFileStore(path, cipher=TokenCipherService(secret="first")).save(_document())

    with pytest.raises(StoreFormatError):
        JSONFileStore(path, cipher=TokenCipherService(secret="second")).load()


def test_pairing_store_creates_missing_file_when_asked(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "store.json"

    store = PairingStore.open(JSONFileStore(path), create_if_missing=True)

    assert store.document.users == {}
    assert json.loads(path.read_text(encoding="utf-8")) == {"users": {}}


def test_pairing_store_open_propagates_load_failure(tmp_path: Path) -> None:
    with pytest.raises(StoreIOError):
        PairingStore.open(JSONFileStore(tmp_path / "missing.json"))


def test_save_syncs_temp_file_before_replacing_store(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    from spotify_pairing.clients import json_store

    events: list[str] = []
    real_fsync = json_store.os.fsync
    real_replace = json_store.os.replace

    def fsync(fd: int) -> None:
        events.append("fsync")
        real_fsync(fd)

    def replace(src, dst) -> None:
        events.append("replace")
        real_replace(src, dst)

    monkeypatch.setattr(json_store.os, "fsync", fsync)
    monkeypatch.setattr(json_store.os, "replace", replace)

    JSONFileStore(tmp_path / "store.json").save(_document())

    assert events == ["fsync", "replace"]
