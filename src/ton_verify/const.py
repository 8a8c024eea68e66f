from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    E_NETWORK = "E_NETWORK"
    E_PROTOCOL = "E_PROTOCOL"
    E_DECODE = "E_DECODE"
    E_NOT_FOUND = "E_NOT_FOUND"
    E_MANIFEST = "E_MANIFEST"
    E_FETCH = "E_FETCH"


# Sources registry (ton-verifier), one per network
SOURCES_REGISTRY = "EQD-BJSVUJviud_Qv7Ymfd3qzXdrmV525e3YDzWQoHIAiInL"
SOURCES_REGISTRY_TESTNET = "EQCsdKYwUaXkgJkz2l0ol6qT_WxeRbE_wBCwnEybmR0u5TO8"

# TON HTTP API v4
MAINNET_ENDPOINT = "https://mainnet-v4.tonhubapi.com"
TESTNET_ENDPOINT = "https://testnet-v4.tonhubapi.com"

IPFS_SCHEME = "ipfs://"
IPFS_GATEWAY = "https://tonsource.infura-ipfs.io/ipfs/"
IPFS_GATEWAY_TESTNET = "https://tonsource-testnet.infura-ipfs.io/ipfs/"

DEFAULT_VERIFIER = "orbs.com"

GET_SOURCE_ITEM_ADDRESS = "get_source_item_address"
GET_SOURCE_ITEM_DATA = "get_source_item_data"

# get_source_item_data: (verifier_id, code_hash, registry, content)
SKIPPED_PAYLOAD_FIELDS = 3
CONTENT_VERSION = 1

VALID_COMPILERS = {"func", "tact", "fift"}

# compiler kind -> version key inside compilerSettings
COMPILER_VERSION_KEYS = {
    "func": "funcVersion",
    "fift": "fiftVersion",
    "tact": "tactVersion",
}

CODE_HASH_LEN = 32
