"""
Provider: turns targets into HTTP exchanges.

Single calls go through ``request`` / ``request_json``. JSON-RPC targets can
also be sent as batches: ``batch`` sends every target in one exchange, while
``batch_chunk_by`` splits them into chunks that are exchanged concurrently
and merged back in the caller's order.
"""

from __future__ import annotations

import asyncio
import functools
import time
import typing as t
import uuid

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from reqenum.batching.aggregator import ChunkOutcome, aggregate_chunks
from reqenum.batching.planner import Chunk, plan_chunks
from reqenum.config import resolve_timeout
from reqenum.exceptions import DecodeError, InvalidRequestError, ReqEnumError, TransportError
from reqenum.http import HTTPBody
from reqenum.jsonrpc import (
    JsonRpcErrorResponse,
    JsonRpcResult,
    decode_results,
    encode_requests,
)
from reqenum.target import JsonRpcTarget, Target
from reqenum.utils.logging import logging_context

log = structlog.get_logger(__name__)

TargetT = t.TypeVar("TargetT", bound=Target)
RpcTargetT = t.TypeVar("RpcTargetT", bound=JsonRpcTarget)

EndpointFn = t.Callable[[TargetT], str]
RequestFn = t.Callable[[TargetT, httpx.Request], httpx.Request]


@functools.cache
def _type_adapter(response_type: t.Any) -> TypeAdapter[t.Any]:
    return TypeAdapter(response_type)


class Provider(t.Generic[TargetT]):
    """
    Send targets over a shared ``httpx`` client configuration.

    Parameters
    ----------
    endpoint_fn : typing.Callable[[TargetT], str] | None, optional
        Overrides URL construction; receives the target and returns the full
        URL. Query parameters from the target are still appended.
    request_fn : typing.Callable[[TargetT, httpx.Request], httpx.Request] | None, optional
        Last customization step before sending; receives the target and the
        built request (auth already applied) and returns the request to send.
    timeout : float | None, optional
        Per-exchange timeout in seconds. Falls back to
        ``REQENUM_TIMEOUT_SECONDS``, then 30 seconds.
    client_factory : typing.Callable[[], httpx.AsyncClient] | None, optional
        Factory for the async client used by one dispatch call. Every chunk
        of a chunked batch shares the same client.
    """

    def __init__(
        self,
        *,
        endpoint_fn: EndpointFn[TargetT] | None = None,
        request_fn: RequestFn[TargetT] | None = None,
        timeout: float | None = None,
        client_factory: t.Callable[[], httpx.AsyncClient] | None = None,
    ) -> None:
        self._endpoint_fn = endpoint_fn
        self._request_fn = request_fn
        self._timeout = resolve_timeout(timeout=timeout)
        self._client_factory: t.Callable[[], httpx.AsyncClient] = client_factory or (
            lambda: httpx.AsyncClient(timeout=self._timeout)
        )
        log.debug(
            event="Initialized Provider",
            timeout=self._timeout,
            has_endpoint_fn=endpoint_fn is not None,
            has_request_fn=request_fn is not None,
            custom_client_factory=client_factory is not None,
        )

    @property
    def timeout(self) -> float:
        return self._timeout

    def request_url(self, target: TargetT) -> str:
        """
        Resolve the URL a target is sent to, without query parameters.

        Parameters
        ----------
        target : TargetT
            Target to resolve.

        Returns
        -------
        str
            ``endpoint_fn(target)`` if configured, else ``base_url + path``.
        """
        if self._endpoint_fn is not None:
            return self._endpoint_fn(target)
        return f"{target.base_url}{target.path}"

    def build_request(
        self,
        *,
        client: httpx.AsyncClient,
        target: TargetT,
        body: HTTPBody,
    ) -> httpx.Request:
        """
        Build the HTTP request for a target.

        Parameters
        ----------
        client : httpx.AsyncClient
            Client the request will be sent with.
        target : TargetT
            Target providing verb, URL, query, headers and authentication.
        body : HTTPBody
            Already encoded body.

        Returns
        -------
        httpx.Request
            Request ready to send.
        """
        query = dict(target.query)
        request = client.build_request(
            method=str(target.method),
            url=self.request_url(target),
            params=query or None,
            headers=dict(target.headers),
            content=None if body.is_empty else body.to_bytes(),
        )
        auth = target.authentication
        if auth is not None:
            request = auth.apply(request=request)
        if self._request_fn is not None:
            request = self._request_fn(target, request)
        return request

    async def _send(
        self,
        *,
        client: httpx.AsyncClient,
        request: httpx.Request,
        chunk_index: int | None = None,
    ) -> httpx.Response:
        try:
            return await client.send(request)
        except httpx.HTTPError as error:
            log.debug(
                event="HTTP exchange failed",
                method=request.method,
                url=str(request.url),
                chunk_index=chunk_index,
                error=str(object=error),
            )
            raise TransportError(
                f"{request.method} {request.url} failed: {error}",
                chunk_index=chunk_index,
            ) from error

    @staticmethod
    def _raise_for_status(
        *,
        response: httpx.Response,
        chunk_index: int | None = None,
    ) -> None:
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as error:
            raise TransportError(
                f"{response.request.method} {response.request.url} "
                f"returned HTTP {response.status_code}",
                status_code=response.status_code,
                chunk_index=chunk_index,
            ) from error

    async def request(self, target: TargetT) -> httpx.Response:
        """
        Send one target and return the raw response.

        Parameters
        ----------
        target : TargetT
            Target to send.

        Returns
        -------
        httpx.Response
            Response with its body already read. The status is not checked.

        Raises
        ------
        SerializationError
            If the target body cannot be encoded.
        TransportError
            If the exchange fails.
        """
        body = target.body()
        async with self._client_factory() as client:
            request = self.build_request(client=client, target=target, body=body)
            log.debug(
                event="Sending request",
                method=request.method,
                url=str(request.url),
                header_keys=list(request.headers.keys()),
                body_bytes=len(body.content),
            )
            response = await self._send(client=client, request=request)
        log.debug(
            event="Received response",
            method=request.method,
            url=str(request.url),
            status_code=response.status_code,
        )
        return response

    async def request_json(self, target: TargetT, *, response_type: t.Any = t.Any) -> t.Any:
        """
        Send one target and decode its JSON response.

        Parameters
        ----------
        target : TargetT
            Target to send.
        response_type : typing.Any, optional
            Type the body is validated into, e.g. ``JsonRpcResponse[str]``.

        Returns
        -------
        typing.Any
            Decoded body.

        Raises
        ------
        TransportError
            If the exchange fails or the status is not a success.
        DecodeError
            If the body does not validate as ``response_type``.
        """
        response = await self.request(target)
        self._raise_for_status(response=response)
        try:
            return _type_adapter(response_type).validate_json(response.content)
        except ValidationError as error:
            raise DecodeError(f"Unexpected response body: {error}") from error

    def _encode_chunk(self, *, chunk: Chunk[RpcTargetT]) -> HTTPBody:
        envelopes = [
            target.to_request(id=request_id) for request_id, target in chunk.correlated()
        ]
        return encode_requests(requests=envelopes)

    async def _exchange_chunk(
        self,
        *,
        client: httpx.AsyncClient,
        chunk: Chunk[RpcTargetT],
        request: httpx.Request,
        result_type: t.Any,
    ) -> list[JsonRpcResult]:
        started = time.perf_counter()
        log.debug(
            event="Chunk in flight",
            chunk_index=chunk.index,
            request_count=len(chunk),
            first_id=chunk.start_offset + 1,
        )
        response = await self._send(client=client, request=request, chunk_index=chunk.index)
        self._raise_for_status(response=response, chunk_index=chunk.index)
        results = decode_results(
            content=response.content,
            result_type=result_type,
            chunk_index=chunk.index,
        )
        log.debug(
            event="Chunk completed",
            chunk_index=chunk.index,
            status_code=response.status_code,
            result_count=len(results),
            item_error_count=sum(isinstance(item, JsonRpcErrorResponse) for item in results),
            elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return results

    async def _run_chunk(
        self,
        *,
        client: httpx.AsyncClient,
        chunk: Chunk[RpcTargetT],
        request: httpx.Request,
        result_type: t.Any,
    ) -> ChunkOutcome[JsonRpcResult]:
        try:
            results = await self._exchange_chunk(
                client=client,
                chunk=chunk,
                request=request,
                result_type=result_type,
            )
        except ReqEnumError as error:
            log.debug(
                event="Chunk failed",
                chunk_index=chunk.index,
                error_type=type(error).__name__,
                error=str(object=error),
            )
            return ChunkOutcome(chunk=chunk, error=error)
        return ChunkOutcome(chunk=chunk, results=results)

    async def batch(
        self,
        targets: t.Sequence[RpcTargetT],
        *,
        result_type: t.Any = t.Any,
    ) -> list[JsonRpcResult]:
        """
        Send every target in one JSON-RPC batch exchange.

        Parameters
        ----------
        targets : typing.Sequence[RpcTargetT]
            Targets in order. URL, headers and authentication are taken from
            the first target.
        result_type : typing.Any, optional
            Type of success ``result`` members.

        Returns
        -------
        list[JsonRpcResult]
            Result envelopes exactly as returned by the server. Requests carry
            ids ``1..len(targets)``; no re-ordering by id is performed.

        Raises
        ------
        InvalidRequestError
            If ``targets`` is empty.
        SerializationError
            If a parameter cannot be encoded.
        TransportError
            If the exchange fails or the status is not a success.
        DecodeError
            If the body is not a JSON-RPC batch response.
        """
        if not targets:
            raise InvalidRequestError("no targets to dispatch")

        (chunk,) = plan_chunks(targets, chunk_size=len(targets))
        body = self._encode_chunk(chunk=chunk)
        async with self._client_factory() as client:
            request = self.build_request(client=client, target=chunk.targets[0], body=body)
            log.info(
                event="Dispatching batch",
                url=str(request.url),
                request_count=len(chunk),
            )
            return await self._exchange_chunk(
                client=client,
                chunk=chunk,
                request=request,
                result_type=result_type,
            )

    async def batch_chunk_by(
        self,
        targets: t.Sequence[RpcTargetT],
        chunk_size: int,
        *,
        result_type: t.Any = t.Any,
    ) -> list[JsonRpcResult]:
        """
        Send targets as concurrent JSON-RPC batches of at most ``chunk_size``.

        Parameters
        ----------
        targets : typing.Sequence[RpcTargetT]
            Targets in order. Each chunk takes URL, headers and
            authentication from its first target.
        chunk_size : int
            Maximum number of targets per exchange.
        result_type : typing.Any, optional
            Type of success ``result`` members.

        Returns
        -------
        list[JsonRpcResult]
            Results of every chunk concatenated in chunk order. Ids run
            ``1..len(targets)`` across chunks.

        Raises
        ------
        InvalidRequestError
            If ``targets`` is empty or ``chunk_size`` is below one.
        SerializationError
            If a parameter cannot be encoded; raised before any exchange.
        TransportError, DecodeError
            If any chunk fails. Every chunk is awaited first, and the error
            of the lowest-indexed failed chunk is raised; results of the
            other chunks are discarded.
        """
        chunks = plan_chunks(targets, chunk_size=chunk_size)
        bodies = [self._encode_chunk(chunk=chunk) for chunk in chunks]

        with logging_context(dispatch_id=uuid.uuid4().hex[:12]):
            async with self._client_factory() as client:
                requests = [
                    self.build_request(client=client, target=chunk.targets[0], body=body)
                    for chunk, body in zip(chunks, bodies)
                ]
                log.info(
                    event="Dispatching chunked batch",
                    url=str(requests[0].url),
                    request_count=len(targets),
                    chunk_size=chunk_size,
                    chunk_count=len(chunks),
                )
                gathered = await asyncio.gather(
                    *(
                        self._run_chunk(
                            client=client,
                            chunk=chunk,
                            request=request,
                            result_type=result_type,
                        )
                        for chunk, request in zip(chunks, requests)
                    ),
                    return_exceptions=True,
                )

            outcomes: list[ChunkOutcome[JsonRpcResult]] = []
            for chunk, outcome in zip(chunks, gathered):
                if isinstance(outcome, ChunkOutcome):
                    outcomes.append(outcome)
                elif isinstance(outcome, Exception):
                    outcomes.append(ChunkOutcome(chunk=chunk, error=outcome))
                else:
                    raise outcome

            results = aggregate_chunks(outcomes)
            log.info(
                event="Chunked batch completed",
                result_count=len(results),
                chunk_count=len(chunks),
            )
            return results
