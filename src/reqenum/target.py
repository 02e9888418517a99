"""
Request descriptors.

A target describes one logical API call: where it goes, how it is sent and
what it carries. Targets are plain immutable values; the provider turns them
into HTTP exchanges.
"""

from __future__ import annotations

import typing as t
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from reqenum.http import AuthMethod, HTTPBody, HTTPMethod
from reqenum.jsonrpc import JsonRpcRequest

JSON_HEADERS: t.Mapping[str, str] = {"Content-Type": "application/json"}


class Target(ABC):
    """
    HTTP target contract.

    Subclasses implement ``base_url``, ``method``, ``path`` and ``body``;
    query parameters, headers and authentication default to empty.
    """

    @property
    @abstractmethod
    def base_url(self) -> str: ...

    @property
    @abstractmethod
    def method(self) -> HTTPMethod: ...

    @property
    @abstractmethod
    def path(self) -> str: ...

    @property
    def query(self) -> t.Mapping[str, str]:
        return {}

    @property
    def headers(self) -> t.Mapping[str, str]:
        return {}

    @property
    def authentication(self) -> AuthMethod | None:
        return None

    @abstractmethod
    def body(self) -> HTTPBody:
        """
        Build the request body.

        Raises
        ------
        SerializationError
            If the payload cannot be encoded.
        """

    def query_string(self) -> str:
        """
        Join query parameters as ``key=value`` pairs, in mapping order.

        Values are not percent-encoded; the provider hands ``query`` to httpx
        which encodes them on the wire.
        """
        return "&".join(f"{key}={value}" for key, value in self.query.items())

    def absolute_url(self) -> str:
        url = f"{self.base_url}{self.path}"
        query_string = self.query_string()
        if query_string:
            url = f"{url}?{query_string}"
        return url


class JsonRpcTarget(Target):
    """
    Target for a JSON-RPC 2.0 endpoint.

    Subclasses provide ``base_url``, ``method_name`` and ``params``. Calls are
    POSTed as JSON to ``base_url + path``. The body of a single call is the
    request envelope with id ``1``; batches build their own envelopes from
    ``method_name`` and ``params``.
    """

    @property
    @abstractmethod
    def method_name(self) -> str: ...

    @abstractmethod
    def params(self) -> list[t.Any]: ...

    @property
    def method(self) -> HTTPMethod:
        return HTTPMethod.POST

    @property
    def path(self) -> str:
        return ""

    @property
    def headers(self) -> t.Mapping[str, str]:
        return JSON_HEADERS

    def to_request(self, *, id: int | str = 1) -> JsonRpcRequest:
        return JsonRpcRequest.new(method=self.method_name, params=self.params(), id=id)

    def body(self) -> HTTPBody:
        return self.to_request().to_body()


@dataclass(frozen=True)
class JsonRpcCall(JsonRpcTarget):
    """
    Ready-made JSON-RPC target built from plain values.

    Parameters
    ----------
    url : str
        Endpoint URL.
    name : str
        Remote method name.
    args : tuple[typing.Any, ...]
        Positional parameters.
    extra_headers : dict[str, str]
        Headers sent in addition to ``Content-Type: application/json``.
    auth : AuthMethod | None
        Optional authentication.
    """

    url: str
    name: str
    args: tuple[t.Any, ...] = ()
    extra_headers: dict[str, str] = field(default_factory=dict)
    auth: AuthMethod | None = None

    @property
    def base_url(self) -> str:
        return self.url

    @property
    def method_name(self) -> str:
        return self.name

    def params(self) -> list[t.Any]:
        return list(self.args)

    @property
    def headers(self) -> t.Mapping[str, str]:
        return {**JSON_HEADERS, **self.extra_headers}

    @property
    def authentication(self) -> AuthMethod | None:
        return self.auth
