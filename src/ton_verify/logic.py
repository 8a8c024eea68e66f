from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Tuple, Union

import httpx

from .const import DEFAULT_VERIFIER
from .descriptor import decode_content_descriptor
from .errors import FetchError
from .identity import derive_lookup_key
from .manifest import parse_manifest
from .network import resolve_network
from .registry import RegistryClient
from .rewrite import UriRewriter, default_ipfs_rewriter
from .types import Manifest, ResolvedSource, SourcesData

logger = logging.getLogger(__name__)


async def get_sources_json_url(
    code_hash: Union[bytes, str],
    *,
    verifier: str = DEFAULT_VERIFIER,
    testnet: bool = False,
    endpoint: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[str]:
    """Look up the manifest URI registered for a code cell hash.

    Returns None when no source item is deployed for (verifier, code_hash).
    """
    network = resolve_network(testnet, endpoint)
    lookup_key = derive_lookup_key(verifier, code_hash)

    async with RegistryClient(network.endpoint, client=client) as registry:
        height = await registry.get_snapshot_height()
        item = await registry.resolve_record_address(height, network.registry, lookup_key)

        if not await registry.is_deployed(height, item):
            logger.info("no verified sources for %s (verifier %s)", code_hash, verifier)
            return None

        payload = await registry.fetch_record_payload(height, item)

    descriptor = decode_content_descriptor(payload)
    logger.info("sources manifest for %s: %s", code_hash, descriptor.manifest_uri)
    return descriptor.manifest_uri


async def _fetch(client: httpx.AsyncClient, url: str) -> httpx.Response:
    logger.debug("GET %s", url)
    try:
        response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise FetchError(f"HTTP {e.response.status_code} from {url}") from e
    except httpx.HTTPError as e:
        raise FetchError(f"Cannot fetch {url}: {e}") from e
    return response


async def _fetch_manifest(client: httpx.AsyncClient, url: str) -> Manifest:
    response = await _fetch(client, url)
    try:
        data = response.json()
    except ValueError as e:
        raise FetchError(f"Invalid JSON in manifest at {url}") from e
    return parse_manifest(data)


async def _fetch_all(client: httpx.AsyncClient, urls: List[str]) -> Dict[int, str]:
    """Fetch every url concurrently; fail as a whole if any one fails."""

    async def fetch_one(i: int, url: str) -> Tuple[int, str]:
        response = await _fetch(client, url)
        return i, response.text

    tasks = [asyncio.ensure_future(fetch_one(i, url)) for i, url in enumerate(urls)]
    try:
        results = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        # let every task unwind before the caller closes the client
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    return dict(results)


def order_sources(files: List[ResolvedSource]) -> List[ResolvedSource]:
    """Reverse manifest order, then move entrypoints to the front (stable)."""
    return sorted(reversed(files), key=lambda f: not f.is_entrypoint)


async def get_sources_data(
    sources_json_url: str,
    *,
    rewrite: UriRewriter = default_ipfs_rewriter,
    testnet: bool = False,
    client: Optional[httpx.AsyncClient] = None,
) -> SourcesData:
    """Fetch the manifest and every source file it lists."""
    ipfs_http_link = rewrite(sources_json_url, testnet)

    owned = client is None
    http = client if client is not None else httpx.AsyncClient(follow_redirects=True)
    try:
        manifest = await _fetch_manifest(http, ipfs_http_link)
        contents = await _fetch_all(http, [rewrite(s.url, testnet) for s in manifest.sources])
    finally:
        if owned:
            await http.aclose()

    files = [
        ResolvedSource(name=source.filename, content=contents[i], is_entrypoint=source.is_entrypoint)
        for i, source in enumerate(manifest.sources)
    ]
    logger.info("resolved %d source files from %s", len(files), ipfs_http_link)

    return SourcesData(
        files=order_sources(files),
        compiler=manifest.compiler,
        compiler_settings=manifest.compiler_settings,
        verification_date=manifest.verification_date,
        ipfs_http_link=ipfs_http_link,
    )


async def resolve_sources(
    code_hash: Union[bytes, str],
    *,
    verifier: str = DEFAULT_VERIFIER,
    testnet: bool = False,
    endpoint: Optional[str] = None,
    rewrite: UriRewriter = default_ipfs_rewriter,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[SourcesData]:
    url = await get_sources_json_url(
        code_hash, verifier=verifier, testnet=testnet, endpoint=endpoint, client=client
    )
    if url is None:
        return None
    return await get_sources_data(url, rewrite=rewrite, testnet=testnet, client=client)
