from __future__ import annotations

import base64
import binascii
import hashlib
from typing import Tuple, Union

from .const import CODE_HASH_LEN

LookupKey = Tuple[int, int]


def parse_code_hash(code_hash: Union[bytes, str]) -> bytes:
    """Normalize a code cell hash to its 32 raw bytes.

    Strings are read as base64 (standard or url-safe alphabet), or as hex
    when they are exactly 64 hex chars.
    """
    if isinstance(code_hash, (bytes, bytearray)):
        raw = bytes(code_hash)
    else:
        text = code_hash.strip()
        if len(text) == CODE_HASH_LEN * 2 and all(c in "0123456789abcdefABCDEF" for c in text):
            raw = bytes.fromhex(text)
        else:
            try:
                raw = base64.b64decode(text.replace("-", "+").replace("_", "/"), validate=True)
            except binascii.Error as e:
                raise ValueError(f"Code hash is neither base64 nor hex: {code_hash!r}") from e

    if len(raw) != CODE_HASH_LEN:
        raise ValueError(f"Code hash must be {CODE_HASH_LEN} bytes, got {len(raw)}")
    return raw


def verifier_id(verifier: str) -> int:
    digest = hashlib.sha256(verifier.encode("utf-8")).digest()
    return int.from_bytes(digest, "big")


def derive_lookup_key(verifier: str, code_hash: Union[bytes, str]) -> LookupKey:
    """Return (sha256(verifier), code_hash) as big-endian unsigned ints.

    The pair is passed, in this order, to the registry's
    get_source_item_address get-method.
    """
    return verifier_id(verifier), int.from_bytes(parse_code_hash(code_hash), "big")
