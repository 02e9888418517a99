"""
Environment-driven defaults.

Explicit arguments always win over environment variables, which win over
the built-in defaults.
"""

from __future__ import annotations

import os

TIMEOUT_ENV_VAR = "REQENUM_TIMEOUT_SECONDS"
CHUNK_SIZE_ENV_VAR = "REQENUM_CHUNK_SIZE"

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_CHUNK_SIZE = 100


def resolve_timeout(*, timeout: float | None = None) -> float:
    """
    Resolve the per-exchange timeout used by providers.

    Parameters
    ----------
    timeout : float | None, optional
        Explicit timeout in seconds.

    Returns
    -------
    float
        Timeout in seconds.

    Raises
    ------
    ValueError
        If the environment value is not a positive number.
    """
    if timeout is not None:
        return timeout

    env_value = os.getenv(TIMEOUT_ENV_VAR)
    if not env_value:
        return DEFAULT_TIMEOUT_SECONDS

    try:
        resolved = float(env_value)
    except ValueError as error:
        raise ValueError(f"{TIMEOUT_ENV_VAR} must be a number, got {env_value!r}") from error
    if resolved <= 0:
        raise ValueError(f"{TIMEOUT_ENV_VAR} must be positive, got {env_value!r}")
    return resolved


def resolve_chunk_size(*, chunk_size: int | None = None) -> int:
    """
    Resolve the default chunk size for chunked batches.

    Parameters
    ----------
    chunk_size : int | None, optional
        Explicit chunk size.

    Returns
    -------
    int
        Chunk size. Explicit values are returned unchecked; the dispatcher
        rejects sizes below one.

    Raises
    ------
    ValueError
        If the environment value is not a positive integer.
    """
    if chunk_size is not None:
        return chunk_size

    env_value = os.getenv(CHUNK_SIZE_ENV_VAR)
    if not env_value:
        return DEFAULT_CHUNK_SIZE

    try:
        resolved = int(env_value)
    except ValueError as error:
        raise ValueError(f"{CHUNK_SIZE_ENV_VAR} must be an integer, got {env_value!r}") from error
    if resolved < 1:
        raise ValueError(f"{CHUNK_SIZE_ENV_VAR} must be at least 1, got {env_value!r}")
    return resolved
