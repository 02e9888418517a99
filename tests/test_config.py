import pytest

from reqenum.config import (
    CHUNK_SIZE_ENV_VAR,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_TIMEOUT_SECONDS,
    TIMEOUT_ENV_VAR,
    resolve_chunk_size,
    resolve_timeout,
)


def test_resolve_timeout_default():
    assert resolve_timeout() == DEFAULT_TIMEOUT_SECONDS


def test_resolve_timeout_explicit_wins(monkeypatch):
    monkeypatch.setenv(TIMEOUT_ENV_VAR, "5")

    assert resolve_timeout(timeout=1.5) == 1.5


def test_resolve_timeout_from_env(monkeypatch):
    monkeypatch.setenv(TIMEOUT_ENV_VAR, "2.5")

    assert resolve_timeout() == 2.5


@pytest.mark.parametrize("value", ["soon", "0", "-3"])
def test_resolve_timeout_rejects_invalid_env(monkeypatch, value: str):
    monkeypatch.setenv(TIMEOUT_ENV_VAR, value)

    with pytest.raises(ValueError, match=TIMEOUT_ENV_VAR):
        resolve_timeout()


def test_resolve_chunk_size_default():
    assert resolve_chunk_size() == DEFAULT_CHUNK_SIZE


def test_resolve_chunk_size_from_env(monkeypatch):
    monkeypatch.setenv(CHUNK_SIZE_ENV_VAR, "25")

    assert resolve_chunk_size() == 25
    assert resolve_chunk_size(chunk_size=3) == 3


@pytest.mark.parametrize("value", ["many", "0", "2.5"])
def test_resolve_chunk_size_rejects_invalid_env(monkeypatch, value: str):
    monkeypatch.setenv(CHUNK_SIZE_ENV_VAR, value)

    with pytest.raises(ValueError, match=CHUNK_SIZE_ENV_VAR):
        resolve_chunk_size()
