import pytest


@pytest.fixture(autouse=True)
def test_clear_env(monkeypatch):
    monkeypatch.delenv("REQENUM_TIMEOUT_SECONDS", raising=False)
    monkeypatch.delenv("REQENUM_CHUNK_SIZE", raising=False)
