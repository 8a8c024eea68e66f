"""TVM stack codec for the TON HTTP API v4.

Get-method arguments travel in the URL as a base64url BOC of a serialized
VmStack; results come back as a JSON list of typed items.
"""

from __future__ import annotations

import base64
import binascii
from typing import Any, Dict, List, Sequence, Union

from pytoniq_core import Address, AddressError, Builder, Cell, begin_cell
from pytoniq_core.boc.slice import SliceError

from .errors import ProtocolError

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

# Uninterpreted kinds stay as their raw JSON dict
StackItem = Union[int, Cell, None, Dict[str, Any]]


def _store_item(value: int, builder: Builder) -> None:
    if INT64_MIN <= value <= INT64_MAX:
        builder.store_uint(0x01, 8)  # vm_stk_tinyint
        builder.store_int(value, 64)
    else:
        builder.store_uint(0x0100, 15)  # vm_stk_int
        builder.store_int(value, 257)


def _store_tail(items: Sequence[int], builder: Builder) -> None:
    if not items:
        return
    rest = begin_cell()
    _store_tail(items[:-1], rest)
    builder.store_ref(rest.end_cell())
    _store_item(items[-1], builder)


def serialize_tuple(items: Sequence[int]) -> Cell:
    builder = begin_cell().store_uint(len(items), 24)
    _store_tail(list(items), builder)
    return builder.end_cell()


def encode_args(items: Sequence[int]) -> str:
    """Base64url (unpadded) BOC of the argument tuple, as placed in the URL."""
    boc = serialize_tuple(items).to_boc(has_idx=False, hash_crc32=False)
    return base64.urlsafe_b64encode(boc).decode("ascii").rstrip("=")


def format_address(address: Address) -> str:
    return address.to_str(is_user_friendly=True, is_url_safe=True, is_bounceable=True)


def _cell_from_b64(data: Any) -> Cell:
    if not isinstance(data, str):
        raise ProtocolError("Stack cell item has no base64 'cell' field")
    try:
        raw = base64.b64decode(data)
    except binascii.Error as e:
        raise ProtocolError(f"Stack cell is not base64: {e}") from e
    try:
        return Cell.one_from_boc(raw)
    except Exception as e:  # Boc deserialization raises bare Exception
        raise ProtocolError(f"Stack cell is not a valid BOC: {e}") from e


def parse_stack(items: Any) -> List[StackItem]:
    """Turn the JSON `result` list into ints, cells and Nones.

    Item kinds we do not interpret (tuples, continuations) are kept as their
    raw JSON dict so positional reads past them still line up.
    """
    if not isinstance(items, list):
        raise ProtocolError("Get-method result must be a list")

    out: List[StackItem] = []
    for item in items:
        if not isinstance(item, dict):
            raise ProtocolError(f"Unexpected stack item: {item!r}")
        kind = item.get("type")
        if kind == "int":
            try:
                out.append(int(item["value"]))
            except (KeyError, TypeError, ValueError) as e:
                raise ProtocolError(f"Bad int stack item: {item!r}") from e
        elif kind in ("cell", "slice", "builder"):
            out.append(_cell_from_b64(item.get("cell")))
        elif kind in ("null", "nan"):
            out.append(None)
        else:
            out.append(item)
    return out


def read_address(item: StackItem) -> Address:
    if not isinstance(item, Cell):
        raise ProtocolError("Expected a slice holding an address")
    try:
        address = item.begin_parse().load_address()
    except (SliceError, AddressError, ValueError) as e:
        raise ProtocolError(f"Cannot read address from slice: {e}") from e
    if address is None:
        raise ProtocolError("Registry returned an empty address")
    if not isinstance(address, Address) or len(address.hash_part) != 32:
        raise ProtocolError(f"Registry returned a non-internal address: {address!r}")
    return address
