from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from .const import COMPILER_VERSION_KEYS

Compiler = Literal["func", "tact", "fift"]


@dataclass(frozen=True)
class ManifestSource:
    url: str
    filename: str
    is_entrypoint: bool = False


@dataclass(frozen=True)
class Manifest:
    sources: List[ManifestSource]
    compiler: Compiler
    # Passed through verbatim (funcVersion/commandLine, tactVersion, ...)
    compiler_settings: Dict[str, Any]
    verification_date: datetime


@dataclass(frozen=True)
class ResolvedSource:
    name: str
    content: str
    is_entrypoint: bool

    def to_json(self) -> Dict[str, object]:
        return {"name": self.name, "content": self.content, "isEntrypoint": self.is_entrypoint}


@dataclass(frozen=True)
class SourcesData:
    """Verified sources of one contract, entrypoints first."""

    files: List[ResolvedSource]
    compiler: Compiler
    compiler_settings: Dict[str, Any]
    verification_date: datetime
    ipfs_http_link: str

    @property
    def compiler_version(self) -> Optional[str]:
        key = COMPILER_VERSION_KEYS.get(self.compiler)
        value = self.compiler_settings.get(key) if key else None
        return value if isinstance(value, str) else None

    def to_json(self) -> Dict[str, object]:
        return {
            "files": [f.to_json() for f in self.files],
            "compiler": self.compiler,
            "compilerSettings": self.compiler_settings,
            "verificationDate": self.verification_date.isoformat(),
            "ipfsHttpLink": self.ipfs_http_link,
        }
