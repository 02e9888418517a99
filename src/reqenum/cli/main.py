import asyncio
import json
import logging
import typing as t
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich import print_json
from rich.console import Console
from rich.table import Table

from reqenum.cli.callbacks import chunk_size_callback, header_callback
from reqenum.config import resolve_chunk_size
from reqenum.exceptions import ReqEnumError
from reqenum.http import AuthMethod, BearerAuth
from reqenum.jsonrpc import JsonRpcErrorResponse, JsonRpcResult
from reqenum.provider import Provider
from reqenum.target import JsonRpcCall
from reqenum.utils.logging import setup_logging

app = typer.Typer(no_args_is_help=True)
console = Console()
error_console = Console(stderr=True)

BearerOption = Annotated[
    str | None,
    typer.Option("--bearer", help="Bearer token sent in the Authorization header"),
]
HeaderOption = Annotated[
    list[str] | None,
    typer.Option(
        "-H",
        "--header",
        help="Extra header as 'Name: value', repeatable",
        callback=header_callback,
    ),
]
TimeoutOption = Annotated[
    float | None,
    typer.Option("--timeout", help="Per-exchange timeout in seconds"),
]


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("-v", "--verbose", help="Log dispatch events to stderr")
    ] = False,
):
    """Send JSON-RPC calls and batches from the command line."""
    load_dotenv()
    setup_logging(level=logging.DEBUG if verbose else logging.WARNING)


def parse_param(value: str) -> t.Any:
    """Decode a CLI parameter as JSON, keeping it as a string when it is not."""
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def parse_headers(headers: list[str] | None) -> dict[str, str]:
    parsed: dict[str, str] = {}
    for header in headers or []:
        name, _, value = header.partition(":")
        parsed[name.strip()] = value.strip()
    return parsed


def build_auth(bearer: str | None) -> AuthMethod | None:
    return BearerAuth(token=bearer) if bearer else None


def print_results(methods: list[str], results: list[JsonRpcResult]) -> None:
    table = Table(title=f"{len(results)} result(s)")
    table.add_column("id", justify="right")
    table.add_column("method")
    table.add_column("result / error")
    for item in results:
        method = "?"
        if isinstance(item.id, int) and 1 <= item.id <= len(methods):
            method = methods[item.id - 1]
        if isinstance(item, JsonRpcErrorResponse):
            outcome = f"[red]{item.error.code}: {item.error.message}[/red]"
        else:
            outcome = json.dumps(item.result)
        table.add_row(str(item.id), method, outcome)
    console.print(table)


@app.command()
def call(
    url: Annotated[str, typer.Argument(help="JSON-RPC endpoint URL")],
    method: Annotated[str, typer.Argument(help="Remote method name")],
    params: Annotated[
        list[str] | None,
        typer.Argument(help="Positional parameters, decoded as JSON when possible"),
    ] = None,
    bearer: BearerOption = None,
    header: HeaderOption = None,
    timeout: TimeoutOption = None,
):
    """Send a single JSON-RPC call and print the response."""
    target = JsonRpcCall(
        url=url,
        name=method,
        args=tuple(parse_param(value) for value in params or []),
        extra_headers=parse_headers(header),
        auth=build_auth(bearer),
    )
    provider: Provider[JsonRpcCall] = Provider(timeout=timeout)
    try:
        response = asyncio.run(provider.request_json(target))
    except ReqEnumError as error:
        error_console.print(f"[red]{type(error).__name__}: {error}[/red]")
        raise typer.Exit(code=1)
    print_json(data=response)


@app.command()
def batch(
    url: Annotated[str, typer.Argument(help="JSON-RPC endpoint URL")],
    methods: Annotated[list[str], typer.Argument(help="Parameterless methods to call, in order")],
    chunk_size: Annotated[
        int | None,
        typer.Option(
            "-c",
            "--chunk-size",
            help="Calls per exchange, defaults to REQENUM_CHUNK_SIZE or 100",
            callback=chunk_size_callback,
        ),
    ] = None,
    bearer: BearerOption = None,
    header: HeaderOption = None,
    timeout: TimeoutOption = None,
):
    """Send parameterless calls as concurrent JSON-RPC batches."""
    extra_headers = parse_headers(header)
    auth = build_auth(bearer)
    targets = [
        JsonRpcCall(url=url, name=method, extra_headers=extra_headers, auth=auth)
        for method in methods
    ]
    provider: Provider[JsonRpcCall] = Provider(timeout=timeout)
    try:
        results = asyncio.run(
            provider.batch_chunk_by(targets, resolve_chunk_size(chunk_size=chunk_size))
        )
    except ReqEnumError as error:
        error_console.print(f"[red]{type(error).__name__}: {error}[/red]")
        raise typer.Exit(code=1)
    print_results(methods=methods, results=results)
