"""
Reqenum runtime exceptions.
"""

from __future__ import annotations

INVALID_REQUEST_CODE = -32600
INVALID_REQUEST_MESSAGE = "Invalid Request"


class ReqEnumError(Exception):
    """
    Base class for every error raised by reqenum.
    """


class InvalidRequestError(ReqEnumError, ValueError):
    """
    Raised before any exchange when a dispatch call cannot be planned.

    Parameters
    ----------
    reason : str
        Human readable detail appended to the JSON-RPC message.

    Attributes
    ----------
    code : int
        JSON-RPC ``Invalid Request`` error code.
    message : str
        JSON-RPC ``Invalid Request`` error message.
    """

    code: int = INVALID_REQUEST_CODE
    message: str = INVALID_REQUEST_MESSAGE

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"{INVALID_REQUEST_MESSAGE}: {reason}")


class SerializationError(ReqEnumError):
    """
    Raised when a body or envelope cannot be encoded to JSON.
    """


class TransportError(ReqEnumError):
    """
    Raised when an HTTP exchange fails or returns a non-success status.

    Parameters
    ----------
    message : str
        Error summary.
    status_code : int | None, optional
        HTTP status code when the server answered.
    chunk_index : int | None, optional
        Index of the batch chunk whose exchange failed.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        chunk_index: int | None = None,
    ) -> None:
        self.status_code = status_code
        self.chunk_index = chunk_index
        super().__init__(message)


class DecodeError(ReqEnumError):
    """
    Raised when a response body does not match the expected envelope shape.

    Parameters
    ----------
    message : str
        Error summary.
    chunk_index : int | None, optional
        Index of the batch chunk whose response could not be decoded.
    """

    def __init__(self, message: str, *, chunk_index: int | None = None) -> None:
        self.chunk_index = chunk_index
        super().__init__(message)
