"""Resolve TON code hashes to their verified source files."""

from .errors import (
    DecodeError,
    FetchError,
    ManifestError,
    NetworkError,
    NotFoundError,
    ProtocolError,
    SourceVerifyError,
)
from .logic import get_sources_data, get_sources_json_url, resolve_sources
from .rewrite import default_ipfs_rewriter
from .types import ResolvedSource, SourcesData

__all__ = [
    "DecodeError",
    "FetchError",
    "ManifestError",
    "NetworkError",
    "NotFoundError",
    "ProtocolError",
    "SourceVerifyError",
    "ResolvedSource",
    "SourcesData",
    "default_ipfs_rewriter",
    "get_sources_data",
    "get_sources_json_url",
    "resolve_sources",
]
