# -*- coding: utf-8 -*-
"""
tests/modules/payments/adapters/test_chain_source.py

Fuente JSON-RPC: cabeza de cadena, decodificación de logs Transfer y de la
referencia de sesión agregada al calldata.
"""

import json

import httpx
import pytest

from pylinks.modules.payments.adapters import (
    TRANSFER_TOPIC,
    ChainSourceError,
    JsonRpcTransferSource,
    decode_reference,
)
from tests.fakes import CUSTOMER, MERCHANT

RPC_URL = "https://rpc.example"
TOKEN = "0x6c3ea9036406852006290770BEdFcAbA0e23A0e8"
TX_A = "0x" + "a1" * 32
TX_B = "0x" + "b2" * 32


def _topic(address: str) -> str:
    return "0x" + "0" * 24 + address[2:]


def _calldata(reference: str = "") -> str:
    args = _topic(MERCHANT)[2:] + format(25_000_000, "064x")
    return "0xa9059cbb" + args + reference.encode("utf-8").hex()


def _log(tx_hash: str, log_index: int, amount: int, block: int, **extra) -> dict:
    log = {
        "address": TOKEN.lower(),
        "topics": [TRANSFER_TOPIC, _topic(CUSTOMER), _topic(MERCHANT)],
        "data": "0x" + format(amount, "064x"),
        "blockNumber": hex(block),
        "transactionHash": tx_hash,
        "logIndex": hex(log_index),
        "removed": False,
    }
    log.update(extra)
    return log


class FakeNode:
    """Nodo JSON-RPC simulado que despacha por método."""

    def __init__(self):
        self.head = 0x64
        self.logs = []
        self.inputs = {}
        self.calls = []
        self.fail_with = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.calls.append(body)
        if self.fail_with is not None:
            return self.fail_with
        method, params = body["method"], body["params"]
        if method == "eth_blockNumber":
            result = hex(self.head)
        elif method == "eth_getLogs":
            result = self.logs
        elif method == "eth_getTransactionByHash":
            tx_input = self.inputs.get(params[0])
            result = {"hash": params[0], "input": tx_input} if tx_input is not None else None
        else:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": -32601}})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})


@pytest.fixture
async def node_source():
    node = FakeNode()
    async with httpx.AsyncClient(transport=httpx.MockTransport(node)) as client:
        yield node, JsonRpcTransferSource(client, rpc_url=RPC_URL, token_contract=TOKEN, timeout_seconds=5.0)


class TestDecodeReference:
    @pytest.mark.parametrize(
        "calldata, expected",
        [
            (_calldata("order-1"), "order-1"),
            (_calldata("sesión-ñ"), "sesión-ñ"),
            (_calldata(), None),
            (_calldata("pay-1")[2:], "pay-1"),
            ("0x095ea7b3" + "00" * 64 + "6f7264", None),
            ("0xa9059cbb" + "00" * 64 + "ff", None),
            (None, None),
            ("", None),
        ],
    )
    def test_decode(self, calldata, expected):
        assert decode_reference(calldata) == expected


class TestJsonRpcTransferSource:
    @pytest.mark.asyncio
    async def test_block_number(self, node_source):
        node, source = node_source
        node.head = 19_000_000
        assert await source.get_block_number() == 19_000_000
        assert node.calls[0]["method"] == "eth_blockNumber"
        assert node.calls[0]["jsonrpc"] == "2.0"

    @pytest.mark.asyncio
    async def test_transfers_with_references(self, node_source):
        node, source = node_source
        node.logs = [
            _log(TX_A.upper().replace("0X", "0x"), 0, 25_000_000, 100),
            _log(TX_A, 1, 1_000, 100),
            _log(TX_B, 3, 5_000_000, 101),
            _log(TX_B, 4, 7, 101, removed=True),
        ]
        node.inputs = {TX_A: _calldata("order-1"), TX_B: _calldata()}

        transfers = await source.get_transfers(100, 102)

        assert [(t.tx_hash, t.log_index, t.amount, t.block_number) for t in transfers] == [
            (TX_A, 0, 25_000_000, 100),
            (TX_A, 1, 1_000, 100),
            (TX_B, 3, 5_000_000, 101),
        ]
        assert transfers[0].sender == CUSTOMER
        assert transfers[0].recipient == MERCHANT
        assert [t.reference for t in transfers] == ["order-1", "order-1", None]

        [get_logs] = [c for c in node.calls if c["method"] == "eth_getLogs"]
        assert get_logs["params"][0] == {
            "address": TOKEN.lower(),
            "fromBlock": "0x64",
            "toBlock": "0x66",
            "topics": [TRANSFER_TOPIC],
        }
        # una sola consulta de calldata por transacción
        assert sum(c["method"] == "eth_getTransactionByHash" for c in node.calls) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(502, text="bad gateway"),
            httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "boom"}}),
            httpx.Response(200, text="not json"),
        ],
    )
    async def test_node_errors_raise_chain_source_error(self, node_source, response):
        node, source = node_source
        node.fail_with = response
        with pytest.raises(ChainSourceError):
            await source.get_block_number()
