from __future__ import annotations

import base64
import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
from pytoniq_core import Address, Cell, begin_cell

from ton_verify.const import SOURCES_REGISTRY
from ton_verify.tvm import format_address

SEQNO = 31337
ITEM_ADDRESS = Address("0:" + "ab" * 32)
CODE_HASH_B64 = "/rX/aCDi/w2Ug+fg1iyBfYRniftK5YDIeIZtlZ2r1cA="
MANIFEST_URI = "ipfs://Qmabc"
NODE_HOST = "node.test"
NODE_ENDPOINT = f"https://{NODE_HOST}"


def boc_b64(cell: Cell) -> str:
    return base64.b64encode(cell.to_boc(has_idx=False, hash_crc32=False)).decode("ascii")


def content_cell(uri: str = MANIFEST_URI, version: int = 1) -> Cell:
    return begin_cell().store_uint(version, 8).store_snake_string(uri).end_cell()


def item_data(content: Cell) -> List[Dict[str, Any]]:
    return [
        {"type": "int", "value": "123"},
        {"type": "int", "value": "456"},
        {"type": "slice", "cell": boc_b64(begin_cell().store_address(Address(SOURCES_REGISTRY)).end_cell())},
        {"type": "cell", "cell": boc_b64(content)},
    ]


@dataclass
class FakeNode:
    """Minimal TON HTTP API v4 node plus an IPFS gateway, served over MockTransport."""

    deployed: bool = True
    content: Cell = field(default_factory=content_cell)
    files: Dict[str, Any] = field(default_factory=dict)
    registry: str = SOURCES_REGISTRY
    requests: List[str] = field(default_factory=list)
    run_args: List[str] = field(default_factory=list)
    on_file: Optional[Callable[[httpx.Request], Optional[httpx.Response]]] = None

    def _node(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        registry = format_address(Address(self.registry))
        item = format_address(ITEM_ADDRESS)

        if path == "/block/latest":
            return httpx.Response(200, json={"last": {"seqno": SEQNO, "workchain": -1}})

        prefix = f"/block/{SEQNO}/{registry}/run/get_source_item_address/"
        if path.startswith(prefix):
            self.run_args.append(path[len(prefix):])
            addr = begin_cell().store_address(ITEM_ADDRESS).end_cell()
            return httpx.Response(200, json={"exitCode": 0, "result": [{"type": "slice", "cell": boc_b64(addr)}]})

        if path == f"/block/{SEQNO}/{item}/lite":
            state = "active" if self.deployed else "uninit"
            return httpx.Response(200, json={"account": {"state": {"type": state}, "balance": {"coins": "0"}}})

        if path == f"/block/{SEQNO}/{item}/run/get_source_item_data":
            return httpx.Response(200, json={"exitCode": 0, "result": item_data(self.content)})

        return httpx.Response(404, json={"error": f"unexpected path {path}"})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(str(request.url))
        if request.url.host == NODE_HOST:
            return self._node(request)

        if self.on_file is not None:
            override = self.on_file(request)
            if override is not None:
                return override

        body = self.files.get(str(request.url))
        if body is None:
            return httpx.Response(404, text="not pinned")
        if isinstance(body, (dict, list)):
            return httpx.Response(200, text=json.dumps(body))
        return httpx.Response(200, text=body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


def gateway(cid: str, testnet: bool = False) -> str:
    host = "tonsource-testnet" if testnet else "tonsource"
    return f"https://{host}.infura-ipfs.io/ipfs/{cid}"


def manifest_doc(sources: List[Dict[str, Any]], compiler: str = "func") -> Dict[str, Any]:
    return {
        "sources": sources,
        "compiler": compiler,
        "compilerSettings": {"funcVersion": "0.4.4", "commandLine": "-SPA stdlib.fc main.fc"},
        "verificationDate": "2023-05-10T12:34:56.000Z",
        "knownContractHash": CODE_HASH_B64,
        "knownContractAddress": "EQ-unused",
    }


@pytest.fixture
def fake_node() -> FakeNode:
    return FakeNode()


@pytest.fixture
def abc_manifest() -> Dict[str, Any]:
    """Manifest with sources [A(entry=false), B(entry=true), C(no flag)]."""
    return manifest_doc(
        [
            {"url": "ipfs://QmA", "filename": "a.fc", "isEntrypoint": False},
            {"url": "ipfs://QmB", "filename": "b.fc", "isEntrypoint": True},
            {"url": "ipfs://QmC", "filename": "c.fc"},
        ]
    )


@pytest.fixture
def pinned(fake_node: FakeNode, abc_manifest: Dict[str, Any]) -> FakeNode:
    fake_node.files = {
        gateway("Qmabc"): abc_manifest,
        gateway("QmA"): "() a() { }",
        gateway("QmB"): "() recv_internal() { }",
        gateway("QmC"): "() c() { }",
    }
    return fake_node
