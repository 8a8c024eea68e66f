from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

from .const import VALID_COMPILERS
from .errors import ManifestError
from .types import Manifest, ManifestSource


def _parse_date(value: Any) -> datetime:
    if not isinstance(value, str) or not value:
        raise ManifestError("manifest.verificationDate must be an ISO-8601 string")
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise ManifestError(f"manifest.verificationDate is not ISO-8601: {value!r}") from e


def _parse_source(i: int, entry: Any) -> ManifestSource:
    if not isinstance(entry, dict):
        raise ManifestError(f"manifest.sources[{i}] must be an object")
    url = entry.get("url")
    filename = entry.get("filename")
    if not isinstance(url, str) or not url:
        raise ManifestError(f"manifest.sources[{i}].url must be a non-empty string")
    if not isinstance(filename, str):
        raise ManifestError(f"manifest.sources[{i}].filename must be a string")
    # Tact manifests omit the flag; anything falsy counts as false
    return ManifestSource(url=url, filename=filename, is_entrypoint=bool(entry.get("isEntrypoint")))


def parse_manifest(data: Any) -> Manifest:
    """Validate a fetched manifest document.

    Only shape is checked. Nothing here ties the manifest back to the code
    hash it was looked up by.
    """
    if not isinstance(data, dict):
        raise ManifestError("Manifest must be a JSON object")

    raw_sources = data.get("sources")
    if not isinstance(raw_sources, list):
        raise ManifestError("manifest.sources must be a list")
    sources: List[ManifestSource] = [_parse_source(i, s) for i, s in enumerate(raw_sources)]

    compiler = data.get("compiler")
    if compiler not in VALID_COMPILERS:
        raise ManifestError(f"Invalid compiler: {compiler!r}")

    settings: Dict[str, Any] = data.get("compilerSettings")
    if not isinstance(settings, dict):
        raise ManifestError("manifest.compilerSettings must be an object")

    return Manifest(
        sources=sources,
        compiler=compiler,
        compiler_settings=settings,
        verification_date=_parse_date(data.get("verificationDate")),
    )
