"""
JSON-RPC 2.0 envelopes and batch response decoding.
"""

from __future__ import annotations

import functools
import typing as t

import structlog
from pydantic import BaseModel, ConfigDict, Discriminator, Tag, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from reqenum.exceptions import DecodeError, SerializationError
from reqenum.http import HTTPBody

log = structlog.get_logger(__name__)

JSONRPC_VERSION = "2.0"

CorrelationId = int | str
T = t.TypeVar("T")


class JsonRpcRequest(BaseModel):
    """
    Request envelope sent on the wire.

    The field order matches the wire layout:
    ``{"jsonrpc", "id", "method", "params"}``.
    """

    model_config = ConfigDict(frozen=True)

    jsonrpc: t.Literal["2.0"] = JSONRPC_VERSION
    id: CorrelationId
    method: str
    params: list[t.Any] = []

    @classmethod
    def new(cls, *, method: str, params: t.Sequence[t.Any], id: CorrelationId) -> JsonRpcRequest:
        return cls(id=id, method=method, params=list(params))

    def to_body(self) -> HTTPBody:
        return encode_requests(requests=[self], as_array=False)


class JsonRpcResponse(BaseModel, t.Generic[T]):
    """Successful result envelope."""

    model_config = ConfigDict(extra="allow")

    id: CorrelationId
    jsonrpc: str
    result: T


class JsonRpcErrorObject(BaseModel):
    model_config = ConfigDict(extra="allow")

    code: int
    message: str
    data: t.Any = None


class JsonRpcErrorResponse(BaseModel):
    """
    Per-item error envelope.

    Notes
    -----
    A server may answer ``"id": null`` when it could not read the request id.
    """

    model_config = ConfigDict(extra="allow")

    jsonrpc: str
    id: CorrelationId | None
    error: JsonRpcErrorObject


JsonRpcResult = t.Union[JsonRpcResponse[t.Any], JsonRpcErrorResponse]


def _envelope_tag(value: t.Any) -> str:
    """
    Discriminate response envelopes structurally.

    Parameters
    ----------
    value : typing.Any
        Raw JSON object or already-built envelope.

    Returns
    -------
    str
        ``"error"`` when a non-null ``error`` member is present, ``"result"``
        otherwise.
    """
    if isinstance(value, dict):
        return "error" if value.get("error") is not None else "result"
    return "error" if isinstance(value, JsonRpcErrorResponse) else "result"


@functools.cache
def result_list_adapter(result_type: t.Any = t.Any) -> TypeAdapter[t.Any]:
    """
    Build (once per result type) the adapter decoding a batch response body.

    Parameters
    ----------
    result_type : typing.Any, optional
        Type of the ``result`` member of success envelopes.

    Returns
    -------
    pydantic.TypeAdapter
        Adapter for ``list[JsonRpcResponse[result_type] | JsonRpcErrorResponse]``.
    """
    envelope = t.Annotated[
        t.Union[
            t.Annotated[JsonRpcResponse[result_type], Tag("result")],
            t.Annotated[JsonRpcErrorResponse, Tag("error")],
        ],
        Discriminator(_envelope_tag),
    ]
    return TypeAdapter(list[envelope])


_request_list_adapter = TypeAdapter(list[JsonRpcRequest])


def encode_requests(*, requests: t.Sequence[JsonRpcRequest], as_array: bool = True) -> HTTPBody:
    """
    Encode request envelopes into a body.

    Parameters
    ----------
    requests : typing.Sequence[JsonRpcRequest]
        Envelopes in chunk-local order.
    as_array : bool, optional
        If ``False``, encode the single envelope as a bare object.

    Returns
    -------
    HTTPBody
        JSON body.

    Raises
    ------
    SerializationError
        If a parameter value is not JSON serializable.
    """
    try:
        if as_array:
            content = _request_list_adapter.dump_json(list(requests))
        else:
            (request,) = requests
            content = request.model_dump_json().encode()
    except PydanticSerializationError as error:
        raise SerializationError(f"Cannot encode JSON-RPC request: {error}") from error
    return HTTPBody(content=content)


def decode_results(
    *,
    content: bytes,
    result_type: t.Any = t.Any,
    chunk_index: int | None = None,
) -> list[JsonRpcResult]:
    """
    Decode a batch response body into ordered result envelopes.

    Parameters
    ----------
    content : bytes
        Raw response body.
    result_type : typing.Any, optional
        Type of success ``result`` members.
    chunk_index : int | None, optional
        Chunk the body belongs to, carried on errors.

    Returns
    -------
    list[JsonRpcResult]
        Envelopes in response order.

    Raises
    ------
    DecodeError
        If the body is not a JSON array of response envelopes.
    """
    try:
        results = result_list_adapter(result_type).validate_json(content)
    except ValidationError as error:
        log.debug(
            event="Batch response decode failed",
            chunk_index=chunk_index,
            error_count=error.error_count(),
            body_bytes=len(content),
        )
        raise DecodeError(
            f"Response is not a JSON-RPC batch: {error}",
            chunk_index=chunk_index,
        ) from error
    return results
