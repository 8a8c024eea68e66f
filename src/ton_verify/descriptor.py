from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from pytoniq_core import Cell

from .const import CONTENT_VERSION, SKIPPED_PAYLOAD_FIELDS
from .errors import DecodeError
from .tvm import StackItem


@dataclass(frozen=True)
class ContentDescriptor:
    version: int
    manifest_uri: str


def decode_content_descriptor(payload: Sequence[StackItem]) -> ContentDescriptor:
    """Decode the content cell of a source item.

    Layout: uint8 version, then a snake-encoded UTF-8 string tail.
    Only version 1 is defined; anything else is rejected outright.
    """
    if len(payload) <= SKIPPED_PAYLOAD_FIELDS:
        raise DecodeError(f"Source item data has {len(payload)} fields, expected at least {SKIPPED_PAYLOAD_FIELDS + 1}")

    content = payload[SKIPPED_PAYLOAD_FIELDS]
    if not isinstance(content, Cell):
        raise DecodeError("Source item content is not a cell")

    try:
        cs = content.begin_parse()
        version = cs.load_uint(8)
    except Exception as e:
        raise DecodeError(f"Cannot read content version: {e}") from e

    if version != CONTENT_VERSION:
        raise DecodeError(f"Unsupported version: {version}")

    try:
        raw = cs.load_snake_bytes()
    except Exception as e:
        raise DecodeError(f"Cannot read manifest URI: {e}") from e
    try:
        uri = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError("Manifest URI is not valid UTF-8") from e

    return ContentDescriptor(version=version, manifest_uri=uri)
