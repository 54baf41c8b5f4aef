# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/adapters/chain_source.py

Fuente de transferencias ERC-20 observadas on-chain.

JsonRpcTransferSource consulta un nodo Ethereum por JSON-RPC:
- eth_blockNumber para la cabeza de la cadena
- eth_getLogs con el topic Transfer(address,address,uint256) del token
- eth_getTransactionByHash para leer la referencia de sesión, que el
  checkout agrega como bytes UTF-8 al final del calldata de
  transfer(address,uint256)

Autor: PyLinks
Fecha: 2026-10-05
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

import httpx

logger = logging.getLogger(__name__)

# keccak256("Transfer(address,address,uint256)")
TRANSFER_TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
# transfer(address,uint256)
TRANSFER_SELECTOR = "a9059cbb"
_ARGS_HEX_LEN = 128  # dos palabras de 32 bytes


class ChainSourceError(Exception):
    """El nodo RPC no respondió o respondió con error."""
    pass


@dataclass(frozen=True)
class ChainTransfer:
    tx_hash: str
    log_index: int
    sender: str
    recipient: str
    amount: int
    block_number: int
    reference: Optional[str] = None

    @property
    def key(self) -> tuple[str, int]:
        return (self.tx_hash, self.log_index)


class TransferSource(Protocol):
    async def get_block_number(self) -> int:
        ...

    async def get_transfers(self, from_block: int, to_block: int) -> List[ChainTransfer]:
        ...


def decode_reference(calldata: Optional[str]) -> Optional[str]:
    """
    Extrae la referencia agregada tras los argumentos de transfer().

    Examples:
        >>> args = "00" * 64
        >>> decode_reference("0xa9059cbb" + args + "pay-1".encode().hex())
        'pay-1'
        >>> decode_reference("0xa9059cbb" + args) is None
        True
    """
    if not calldata:
        return None
    data = calldata[2:] if calldata.startswith("0x") else calldata
    if not data.lower().startswith(TRANSFER_SELECTOR):
        return None
    extra = data[len(TRANSFER_SELECTOR) + _ARGS_HEX_LEN:]
    if not extra:
        return None
    try:
        text = bytes.fromhex(extra).rstrip(b"\x00").decode("utf-8")
    except ValueError:
        return None
    return text or None


def _topic_to_address(topic: str) -> str:
    return "0x" + topic[-40:].lower()


class JsonRpcTransferSource:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        rpc_url: str,
        token_contract: str,
        timeout_seconds: float,
    ):
        self.http_client = http_client
        self.rpc_url = rpc_url
        self.token_contract = token_contract.lower()
        self.timeout_seconds = timeout_seconds
        self._ids = itertools.count(1)

    async def _call(self, method: str, params: list) -> Any:
        request = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            response = await self.http_client.post(
                self.rpc_url,
                json=request,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"[RPC] {method} falló: {e!r}")
            raise ChainSourceError(f"{method} falló") from e

        if body.get("error"):
            logger.warning(f"[RPC] {method} devolvió error: {body['error']}")
            raise ChainSourceError(f"{method} devolvió error")
        return body.get("result")

    async def get_block_number(self) -> int:
        return int(await self._call("eth_blockNumber", []), 16)

    async def _get_reference(self, tx_hash: str) -> Optional[str]:
        tx = await self._call("eth_getTransactionByHash", [tx_hash])
        if not tx:
            return None
        return decode_reference(tx.get("input"))

    async def get_transfers(self, from_block: int, to_block: int) -> List[ChainTransfer]:
        logs = await self._call(
            "eth_getLogs",
            [{
                "address": self.token_contract,
                "fromBlock": hex(from_block),
                "toBlock": hex(to_block),
                "topics": [TRANSFER_TOPIC],
            }],
        ) or []

        references: Dict[str, Optional[str]] = {}
        transfers: List[ChainTransfer] = []
        for log in logs:
            if log.get("removed"):
                continue
            topics = log.get("topics") or []
            if len(topics) < 3:
                continue
            tx_hash = log["transactionHash"].lower()
            if tx_hash not in references:
                references[tx_hash] = await self._get_reference(tx_hash)
            transfers.append(
                ChainTransfer(
                    tx_hash=tx_hash,
                    log_index=int(log["logIndex"], 16),
                    sender=_topic_to_address(topics[1]),
                    recipient=_topic_to_address(topics[2]),
                    amount=int(log["data"], 16),
                    block_number=int(log["blockNumber"], 16),
                    reference=references[tx_hash],
                )
            )
        return transfers


__all__ = [
    "TRANSFER_TOPIC",
    "ChainSourceError",
    "ChainTransfer",
    "TransferSource",
    "JsonRpcTransferSource",
    "decode_reference",
]

# Fin del archivo pylinks/modules/payments/adapters/chain_source.py
