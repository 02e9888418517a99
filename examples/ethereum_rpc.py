#!/usr/bin/env python3
"""
Ethereum JSON-RPC descriptors and a small tour of the provider.

Set ``ETHEREUM_RPC_URL`` (or put it in a ``.env`` file) to use another node.
"""

import asyncio
import os
import typing as t
from dataclasses import dataclass
from enum import StrEnum

from dotenv import load_dotenv

from reqenum import JsonRpcErrorResponse, JsonRpcResponse, JsonRpcTarget, Provider

load_dotenv()

DEFAULT_RPC_URL = "https://rpc.ankr.com/eth"


class BlockParameter(StrEnum):
    LATEST = "latest"
    EARLIEST = "earliest"
    PENDING = "pending"


class EthereumRPC(JsonRpcTarget):
    """Base of the closed set of Ethereum calls below."""

    rpc_method: t.ClassVar[str]

    @property
    def base_url(self) -> str:
        return os.getenv(key="ETHEREUM_RPC_URL", default=DEFAULT_RPC_URL)

    @property
    def method_name(self) -> str:
        return self.rpc_method

    def params(self) -> list[t.Any]:
        return []


@dataclass(frozen=True)
class ChainId(EthereumRPC):
    rpc_method = "eth_chainId"


@dataclass(frozen=True)
class GasPrice(EthereumRPC):
    rpc_method = "eth_gasPrice"


@dataclass(frozen=True)
class BlockNumber(EthereumRPC):
    rpc_method = "eth_blockNumber"


@dataclass(frozen=True)
class GetBalance(EthereumRPC):
    rpc_method = "eth_getBalance"

    address: str
    block: BlockParameter = BlockParameter.LATEST

    def params(self) -> list[t.Any]:
        return [self.address, str(self.block)]


@dataclass(frozen=True)
class GetTransactionCount(EthereumRPC):
    rpc_method = "eth_getTransactionCount"

    address: str
    block: BlockParameter = BlockParameter.LATEST

    def params(self) -> list[t.Any]:
        return [self.address, str(self.block)]


@dataclass(frozen=True)
class SendRawTransaction(EthereumRPC):
    rpc_method = "eth_sendRawTransaction"

    raw_transaction: str

    def params(self) -> list[t.Any]:
        return [self.raw_transaction]


async def main() -> None:
    """Query a node one call at a time, then as chunked batches."""
    provider: Provider[EthereumRPC] = Provider(timeout=10.0)

    chain_id = await provider.request_json(ChainId(), response_type=JsonRpcResponse[str])
    print(f"chainId: {chain_id.result}")

    address = "0xee5f5c53ce2159fc6dd4b0571e86a4a390d04846"
    targets: list[EthereumRPC] = [
        ChainId(),
        GasPrice(),
        BlockNumber(),
        GetBalance(address=address),
        GetTransactionCount(address=address),
    ]
    results = await provider.batch_chunk_by(targets, 2, result_type=str)
    for target, item in zip(targets, results):
        if isinstance(item, JsonRpcErrorResponse):
            print(f"{target.method_name} (id={item.id}) failed: {item.error.message}")
        else:
            print(f"{target.method_name} (id={item.id}): {item.result}")


if __name__ == "__main__":
    asyncio.run(main())
