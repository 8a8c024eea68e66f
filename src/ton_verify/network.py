from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from pytoniq_core import Address

from .const import (
    IPFS_GATEWAY,
    IPFS_GATEWAY_TESTNET,
    MAINNET_ENDPOINT,
    SOURCES_REGISTRY,
    SOURCES_REGISTRY_TESTNET,
    TESTNET_ENDPOINT,
)


@dataclass(frozen=True)
class NetworkConfig:
    """Everything that differs between mainnet and testnet."""

    registry_address: str
    endpoint: str
    ipfs_gateway: str

    @property
    def registry(self) -> Address:
        return Address(self.registry_address)


class Network(Enum):
    MAINNET = NetworkConfig(SOURCES_REGISTRY, MAINNET_ENDPOINT, IPFS_GATEWAY)
    TESTNET = NetworkConfig(SOURCES_REGISTRY_TESTNET, TESTNET_ENDPOINT, IPFS_GATEWAY_TESTNET)

    @property
    def config(self) -> NetworkConfig:
        return self.value


def resolve_network(testnet: bool = False, endpoint: Optional[str] = None) -> NetworkConfig:
    config = (Network.TESTNET if testnet else Network.MAINNET).config
    if endpoint:
        config = replace(config, endpoint=endpoint.rstrip("/"))
    return config
