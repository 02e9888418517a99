"""
HTTP value objects shared by targets and the provider: verbs, bodies and
authentication methods.
"""

from __future__ import annotations

import base64
import typing as t
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import StrEnum

import httpx
from pydantic_core import PydanticSerializationError, to_json

from reqenum.exceptions import SerializationError


class HTTPMethod(StrEnum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    OPTIONS = "OPTIONS"
    HEAD = "HEAD"
    CONNECT = "CONNECT"


@dataclass(frozen=True)
class HTTPBody:
    """
    Encoded request body.

    Parameters
    ----------
    content : bytes
        Raw body bytes. Empty for body-less requests.
    """

    content: bytes = b""

    @classmethod
    def from_value(cls, value: t.Any) -> HTTPBody:
        """
        Encode a JSON-serializable value (dicts, lists, pydantic models,
        dataclasses) into a body.

        Parameters
        ----------
        value : typing.Any
            Value to encode.

        Returns
        -------
        HTTPBody
            JSON encoded body.

        Raises
        ------
        SerializationError
            If the value cannot be represented as JSON.
        """
        try:
            return cls(content=to_json(value))
        except PydanticSerializationError as error:
            raise SerializationError(f"Cannot encode request body: {error}") from error

    @classmethod
    def from_array(cls, array: t.Sequence[t.Any]) -> HTTPBody:
        """
        Encode a sequence of values as a JSON array body.

        Parameters
        ----------
        array : typing.Sequence[typing.Any]
            Items to encode, in order.

        Returns
        -------
        HTTPBody
            JSON array body.
        """
        return cls.from_value(list(array))

    def to_bytes(self) -> bytes:
        return self.content

    @property
    def is_empty(self) -> bool:
        return not self.content


class AuthMethod(ABC):
    """
    Authentication attached to an outgoing request.

    Authentication is resolved onto the built ``httpx.Request`` right before
    it is sent; targets are never modified.
    """

    @abstractmethod
    def apply(self, *, request: httpx.Request) -> httpx.Request:
        """
        Attach credentials to a request.

        Parameters
        ----------
        request : httpx.Request
            Request about to be sent.

        Returns
        -------
        httpx.Request
            Request carrying the credentials.
        """

    @staticmethod
    def header_api_key(header_name: str, api_key: str) -> CustomAuth:
        """
        Build a custom authentication that sends an API key in a header.

        Parameters
        ----------
        header_name : str
            Header carrying the key, e.g. ``"X-API-Key"``.
        api_key : str
            Secret value.

        Returns
        -------
        CustomAuth
            Authentication setting ``header_name: api_key``.
        """

        def _set_header(request: httpx.Request) -> httpx.Request:
            request.headers[header_name] = api_key
            return request

        return CustomAuth(apply_fn=_set_header)


@dataclass(frozen=True)
class BasicAuth(AuthMethod):
    """HTTP Basic authentication. A missing password is sent as empty."""

    username: str
    password: str | None = None

    def apply(self, *, request: httpx.Request) -> httpx.Request:
        credentials = f"{self.username}:{self.password or ''}".encode(encoding="utf-8")
        token = base64.b64encode(credentials).decode(encoding="ascii")
        request.headers["Authorization"] = f"Basic {token}"
        return request

    def __repr__(self) -> str:
        return f"BasicAuth(username={self.username!r}, password=***)"


@dataclass(frozen=True)
class BearerAuth(AuthMethod):
    """HTTP Bearer token authentication."""

    token: str

    def apply(self, *, request: httpx.Request) -> httpx.Request:
        request.headers["Authorization"] = f"Bearer {self.token}"
        return request

    def __repr__(self) -> str:
        return "BearerAuth(token=***)"


@dataclass(frozen=True)
class CustomAuth(AuthMethod):
    """Authentication delegated to a request-rewriting callable."""

    apply_fn: t.Callable[[httpx.Request], httpx.Request]

    def apply(self, *, request: httpx.Request) -> httpx.Request:
        return self.apply_fn(request)

    def __repr__(self) -> str:
        return "CustomAuth(<function>)"
