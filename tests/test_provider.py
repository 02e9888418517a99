"""
Tests for single-request dispatch through Provider.
"""

import json
import typing as t

import httpx
import pytest
import respx

from reqenum.exceptions import DecodeError, SerializationError, TransportError
from reqenum.http import BasicAuth, BearerAuth, HTTPMethod
from reqenum.jsonrpc import JsonRpcResponse
from reqenum.provider import Provider
from reqenum.target import JsonRpcCall
from tests.mocks.targets import ChainId, GetBalance, HttpBin


class CapturingTransport:
    """Record outgoing requests and answer with a fixed JSON payload."""

    def __init__(self, *, status_code: int = 200, payload: t.Any = None) -> None:
        self.requests: list[httpx.Request] = []
        self._status_code = status_code
        self._payload = {"ok": True} if payload is None else payload

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(status_code=self._status_code, json=self._payload)

    def client_factory(self) -> t.Callable[[], httpx.AsyncClient]:
        transport = httpx.MockTransport(self.handler)
        return lambda: httpx.AsyncClient(transport=transport)


@pytest.fixture
def capture() -> CapturingTransport:
    return CapturingTransport()


def test_request_url_defaults_to_base_url_and_path():
    provider: Provider[HttpBin] = Provider()

    assert provider.request_url(HttpBin()) == "https://httpbin.example.org/get"


def test_request_url_uses_endpoint_fn():
    provider: Provider[HttpBin] = Provider(endpoint_fn=lambda target: "http://httpbin.example.org")

    assert provider.request_url(HttpBin(verb=HTTPMethod.POST, route="/post")) == (
        "http://httpbin.example.org"
    )


def test_provider_timeout_from_env(monkeypatch):
    monkeypatch.setenv("REQENUM_TIMEOUT_SECONDS", "4")

    assert Provider().timeout == 4.0
    assert Provider(timeout=1.0).timeout == 1.0


@pytest.mark.asyncio
async def test_request_sends_verb_query_headers_and_body(capture: CapturingTransport):
    provider: Provider[HttpBin] = Provider(client_factory=capture.client_factory())
    target = HttpBin(
        verb=HTTPMethod.POST,
        route="/post",
        query_params={"page": "2"},
        extra_headers={"X-Client": "tests"},
        payload={"name": "test"},
    )

    response = await provider.request(target)

    assert response.status_code == 200
    (sent,) = capture.requests
    assert sent.method == "POST"
    assert sent.url.path == "/post"
    assert sent.url.params["page"] == "2"
    assert sent.headers["X-Client"] == "tests"
    assert json.loads(sent.content) == {"name": "test"}


@pytest.mark.asyncio
async def test_request_get_without_body(capture: CapturingTransport):
    provider: Provider[HttpBin] = Provider(client_factory=capture.client_factory())

    await provider.request(HttpBin())

    (sent,) = capture.requests
    assert sent.method == "GET"
    assert sent.content == b""


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("auth", "expected_prefix"),
    [
        (BasicAuth(username="alice", password="pw"), "Basic "),
        (BearerAuth(token="abc"), "Bearer abc"),
    ],
)
async def test_request_applies_authentication(
    capture: CapturingTransport, auth: t.Any, expected_prefix: str
):
    provider: Provider[HttpBin] = Provider(client_factory=capture.client_factory())
    target = HttpBin(auth=auth)

    await provider.request(target)

    assert capture.requests[0].headers["Authorization"].startswith(expected_prefix)
    assert target.authentication is auth


@pytest.mark.asyncio
async def test_request_fn_runs_after_auth(capture: CapturingTransport):
    seen: list[str | None] = []

    def add_trace(target: HttpBin, request: httpx.Request) -> httpx.Request:
        seen.append(request.headers.get("Authorization"))
        request.headers["X-Trace"] = target.route
        return request

    provider: Provider[HttpBin] = Provider(
        request_fn=add_trace,
        client_factory=capture.client_factory(),
    )

    await provider.request(HttpBin(route="/anything", auth=BearerAuth(token="abc")))

    assert seen == ["Bearer abc"]
    assert capture.requests[0].headers["X-Trace"] == "/anything"


@pytest.mark.asyncio
async def test_client_factory_event_hooks_wrap_exchanges(capture: CapturingTransport):
    transport = httpx.MockTransport(capture.handler)
    seen: list[tuple[str, int]] = []

    async def tag_request(request: httpx.Request) -> None:
        request.headers["X-Middleware"] = "on"

    async def record_response(response: httpx.Response) -> None:
        seen.append((response.request.method, response.status_code))

    provider: Provider[HttpBin] = Provider(
        client_factory=lambda: httpx.AsyncClient(
            transport=transport,
            event_hooks={"request": [tag_request], "response": [record_response]},
        )
    )

    await provider.request(HttpBin())

    assert capture.requests[0].headers["X-Middleware"] == "on"
    assert seen == [("GET", 200)]


@pytest.mark.asyncio
async def test_endpoint_fn_keeps_target_query(capture: CapturingTransport):
    provider: Provider[HttpBin] = Provider(
        endpoint_fn=lambda target: "https://mirror.example.org/v2/get",
        client_factory=capture.client_factory(),
    )

    await provider.request(HttpBin(query_params={"q": "x"}))

    sent = capture.requests[0]
    assert sent.url.host == "mirror.example.org"
    assert sent.url.path == "/v2/get"
    assert sent.url.params["q"] == "x"


@pytest.mark.asyncio
async def test_request_returns_error_status_without_raising():
    provider: Provider[HttpBin] = Provider(
        client_factory=CapturingTransport(status_code=500).client_factory()
    )

    response = await provider.request(HttpBin())

    assert response.status_code == 500


@pytest.mark.asyncio
async def test_request_serialization_error_before_exchange(capture: CapturingTransport):
    provider: Provider[HttpBin] = Provider(client_factory=capture.client_factory())

    with pytest.raises(SerializationError):
        await provider.request(HttpBin(verb=HTTPMethod.POST, payload={"bad": object()}))

    assert capture.requests == []


@pytest.mark.asyncio
async def test_request_json_decodes_jsonrpc_response():
    provider: Provider[ChainId] = Provider()

    with respx.mock:
        route = respx.post("https://rpc.example.com/eth").mock(
            return_value=httpx.Response(200, json={"id": 1, "jsonrpc": "2.0", "result": "0x1"})
        )
        response = await provider.request_json(ChainId(), response_type=JsonRpcResponse[str])

    assert response.result == "0x1"
    sent = route.calls.last.request
    assert sent.headers["Content-Type"] == "application/json"
    assert json.loads(sent.content) == {
        "jsonrpc": "2.0",
        "id": 1,
        "method": "eth_chainId",
        "params": [],
    }


@pytest.mark.asyncio
async def test_request_json_without_type_returns_plain_json():
    provider: Provider[GetBalance] = Provider()

    with respx.mock:
        respx.post("https://rpc.example.com/eth").mock(
            return_value=httpx.Response(200, json={"id": 1, "jsonrpc": "2.0", "result": "0x0"})
        )
        response = await provider.request_json(GetBalance(address="0xabc"))

    assert response == {"id": 1, "jsonrpc": "2.0", "result": "0x0"}


@pytest.mark.asyncio
async def test_request_json_raises_transport_error_on_status():
    provider: Provider[ChainId] = Provider()

    with respx.mock:
        respx.post("https://rpc.example.com/eth").mock(
            return_value=httpx.Response(502, text="bad gateway")
        )
        with pytest.raises(TransportError) as excinfo:
            await provider.request_json(ChainId())

    assert excinfo.value.status_code == 502
    assert isinstance(excinfo.value.__cause__, httpx.HTTPStatusError)


@pytest.mark.asyncio
async def test_request_raises_transport_error_on_connection_failure():
    provider: Provider[ChainId] = Provider()

    with respx.mock:
        respx.post("https://rpc.example.com/eth").mock(
            side_effect=httpx.ConnectError("connection refused")
        )
        with pytest.raises(TransportError) as excinfo:
            await provider.request(ChainId())

    assert excinfo.value.status_code is None
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "content",
    [b"not json", b'{"id": 1, "jsonrpc": "2.0", "result": "0x1"}'],
)
async def test_request_json_raises_decode_error(content: bytes):
    provider: Provider[JsonRpcCall] = Provider()
    target = JsonRpcCall(url="https://rpc.example.com/eth", name="eth_blockNumber")

    with respx.mock:
        respx.post("https://rpc.example.com/eth").mock(
            return_value=httpx.Response(200, content=content)
        )
        with pytest.raises(DecodeError):
            await provider.request_json(target, response_type=JsonRpcResponse[int])
