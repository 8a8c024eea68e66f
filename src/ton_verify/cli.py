from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import click
import httpx

from .const import DEFAULT_VERIFIER
from .errors import NotFoundError, SourceVerifyError
from .logic import get_sources_data, get_sources_json_url, resolve_sources
from .rewrite import UriRewriter, default_ipfs_rewriter, gateway_rewriter


def _make_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=30.0, follow_redirects=True)


def _rewriter(gateway: Optional[str]) -> UriRewriter:
    return gateway_rewriter(gateway) if gateway else default_ipfs_rewriter


def _emit(result: Dict[str, Any]) -> None:
    click.echo(json.dumps(result, ensure_ascii=False))
    status = result.get("status")
    if status == "NOT_FOUND":
        raise SystemExit(2)
    if status != "PASS":
        raise SystemExit(1)


def _fail(subject: Dict[str, Any], err: SourceVerifyError) -> Dict[str, Any]:
    status = "NOT_FOUND" if isinstance(err, NotFoundError) else "FAIL"
    return {**subject, "status": status, "error_count": 1, "errors": [err.to_json()]}


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log every RPC call and fetch to stderr.")
def main(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


network_options = [
    click.option("--testnet", is_flag=True, envvar="TON_VERIFY_TESTNET", help="Use the testnet registry."),
    click.option("--endpoint", envvar="TON_VERIFY_ENDPOINT", default=None, help="TON HTTP API v4 endpoint override."),
    click.option("--verifier", envvar="TON_VERIFY_VERIFIER", default=DEFAULT_VERIFIER, show_default=True),
]


def _with_network_options(fn):
    for option in reversed(network_options):
        fn = option(fn)
    return fn


@main.command("url")
@click.argument("code_hash")
@_with_network_options
def url_cmd(code_hash: str, testnet: bool, endpoint: Optional[str], verifier: str) -> None:
    """Print the manifest URI registered for CODE_HASH (base64 or hex)."""
    subject = {"code_hash": code_hash}

    async def run() -> Optional[str]:
        async with _make_client() as client:
            return await get_sources_json_url(
                code_hash, verifier=verifier, testnet=testnet, endpoint=endpoint, client=client
            )

    try:
        url = asyncio.run(run())
        if url is None:
            raise NotFoundError(f"No verified sources for {code_hash}")
    except SourceVerifyError as e:
        _emit(_fail(subject, e))
        return
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="CODE_HASH") from e

    _emit({**subject, "status": "PASS", "url": url})


@main.command("sources")
@click.argument("code_hash")
@_with_network_options
@click.option("--gateway", envvar="TON_VERIFY_IPFS_GATEWAY", default=None, help="HTTP gateway base for ipfs:// links.")
def sources_cmd(code_hash: str, testnet: bool, endpoint: Optional[str], verifier: str, gateway: Optional[str]) -> None:
    """Resolve CODE_HASH to its verified source files."""
    subject = {"code_hash": code_hash}

    async def run():
        async with _make_client() as client:
            return await resolve_sources(
                code_hash,
                verifier=verifier,
                testnet=testnet,
                endpoint=endpoint,
                rewrite=_rewriter(gateway),
                client=client,
            )

    try:
        data = asyncio.run(run())
        if data is None:
            raise NotFoundError(f"No verified sources for {code_hash}")
    except SourceVerifyError as e:
        _emit(_fail(subject, e))
        return
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="CODE_HASH") from e

    _emit({**subject, "status": "PASS", **data.to_json()})


@main.command("manifest")
@click.argument("url")
@click.option("--testnet", is_flag=True, envvar="TON_VERIFY_TESTNET")
@click.option("--gateway", envvar="TON_VERIFY_IPFS_GATEWAY", default=None, help="HTTP gateway base for ipfs:// links.")
def manifest_cmd(url: str, testnet: bool, gateway: Optional[str]) -> None:
    """Fetch the sources listed by an already known manifest URL."""
    subject = {"url": url}

    async def run():
        async with _make_client() as client:
            return await get_sources_data(url, rewrite=_rewriter(gateway), testnet=testnet, client=client)

    try:
        data = asyncio.run(run())
    except SourceVerifyError as e:
        _emit(_fail(subject, e))
        return

    _emit({**subject, "status": "PASS", **data.to_json()})


if __name__ == "__main__":
    main()
