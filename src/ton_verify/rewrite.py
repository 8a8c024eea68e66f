from __future__ import annotations

from typing import Callable

from .const import IPFS_SCHEME
from .network import resolve_network

# (uri, testnet) -> fetchable http(s) uri
UriRewriter = Callable[[str, bool], str]


def default_ipfs_rewriter(uri: str, testnet: bool) -> str:
    return uri.replace(IPFS_SCHEME, resolve_network(testnet).ipfs_gateway, 1)


def gateway_rewriter(gateway: str) -> UriRewriter:
    """Rewriter that maps ipfs:// onto a fixed gateway regardless of network."""
    base = gateway if gateway.endswith("/") else gateway + "/"

    def rewrite(uri: str, testnet: bool) -> str:
        return uri.replace(IPFS_SCHEME, base, 1)

    return rewrite
