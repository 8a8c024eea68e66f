from __future__ import annotations

from datetime import datetime, timezone

import pytest

from ton_verify.errors import ManifestError
from ton_verify.manifest import parse_manifest

from conftest import manifest_doc


def test_parses_manifest() -> None:
    manifest = parse_manifest(
        manifest_doc(
            [
                {"url": "ipfs://QmA", "filename": "a.fc", "isEntrypoint": True},
                {"url": "ipfs://QmB", "filename": "b.fc"},
            ]
        )
    )
    assert [s.filename for s in manifest.sources] == ["a.fc", "b.fc"]
    assert [s.is_entrypoint for s in manifest.sources] == [True, False]
    assert manifest.compiler == "func"
    assert manifest.compiler_settings["funcVersion"] == "0.4.4"
    assert manifest.verification_date == datetime(2023, 5, 10, 12, 34, 56, tzinfo=timezone.utc)


def test_falsy_entrypoint_flags_are_false() -> None:
    sources = [
        {"url": "ipfs://Qm1", "filename": "x.tact", "isEntrypoint": None},
        {"url": "ipfs://Qm2", "filename": "y.tact", "isEntrypoint": 0},
        {"url": "ipfs://Qm3", "filename": "z.tact"},
    ]
    manifest = parse_manifest(manifest_doc(sources, compiler="tact"))
    assert not any(s.is_entrypoint for s in manifest.sources)


def _broken(**changes):
    doc = manifest_doc([{"url": "ipfs://QmA", "filename": "a.fc"}])
    for key, value in changes.items():
        if value is None:
            doc.pop(key)
        else:
            doc[key] = value
    return doc


@pytest.mark.parametrize(
    "doc",
    [
        [],
        _broken(sources=None),
        _broken(sources={"a": 1}),
        _broken(sources=["ipfs://QmA"]),
        _broken(sources=[{"filename": "a.fc"}]),
        _broken(sources=[{"url": "ipfs://QmA"}]),
        _broken(compiler=None),
        _broken(compiler="solc"),
        _broken(compilerSettings=None),
        _broken(compilerSettings="-O2"),
        _broken(verificationDate=None),
        _broken(verificationDate="yesterday"),
        _broken(verificationDate=1683722096000),
    ],
)
def test_rejects_malformed_manifest(doc) -> None:
    with pytest.raises(ManifestError):
        parse_manifest(doc)
