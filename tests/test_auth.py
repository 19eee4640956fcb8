from pathlib import Path

from core.converthub.auth import authenticate, register_user
from core.converthub.store import ConversionStore


def test_register_and_authenticate(tmp_path: Path) -> None:
    store = ConversionStore(f"sqlite:///{tmp_path / 'auth.db'}")
    store.initialize()
    user_id = register_user(store, "user@example.com", "s3cret")
    assert authenticate(store, "user@example.com", "s3cret") == user_id
    assert authenticate(store, "user@example.com", "wrong") is None
    assert authenticate(store, "nobody@example.com", "s3cret") is None
