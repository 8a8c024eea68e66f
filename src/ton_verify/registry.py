"""Read-only access to the sources registry over the TON HTTP API v4.

Every read is pinned to one masterchain seqno so that the address lookup,
the deployment check and the payload read all observe the same state.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pytoniq_core import Address

from .const import GET_SOURCE_ITEM_ADDRESS, GET_SOURCE_ITEM_DATA
from .errors import NetworkError, ProtocolError
from .identity import LookupKey
from .tvm import StackItem, encode_args, format_address, parse_stack, read_address

logger = logging.getLogger(__name__)


class RegistryClient:
    """Thin async client for the v4 endpoints the resolver needs.

    Pass an existing httpx.AsyncClient to share a connection pool; otherwise
    the client owns one and closes it on `aclose()` / `async with` exit.
    """

    def __init__(self, endpoint: str, client: Optional[httpx.AsyncClient] = None) -> None:
        self.endpoint = endpoint.rstrip("/")
        self._client = client if client is not None else httpx.AsyncClient()
        self._owns_client = client is None

    async def __aenter__(self) -> "RegistryClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_json(self, path: str) -> Dict[str, Any]:
        url = self.endpoint + path
        logger.debug("GET %s", url)
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NetworkError(f"HTTP {e.response.status_code} from {url}") from e
        except httpx.RequestError as e:
            raise NetworkError(f"Network error fetching {url}: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise ProtocolError(f"Invalid JSON response from {url}") from e
        if not isinstance(data, dict):
            raise ProtocolError(f"Expected a JSON object from {url}")
        return data

    async def get_snapshot_height(self) -> int:
        data = await self._get_json("/block/latest")
        try:
            seqno = int(data["last"]["seqno"])
        except (KeyError, TypeError, ValueError) as e:
            raise ProtocolError("Latest block response has no last.seqno") from e
        logger.debug("pinned reads to seqno %d", seqno)
        return seqno

    async def run_method(
        self,
        height: int,
        address: Address,
        method: str,
        args: Sequence[int] = (),
    ) -> List[StackItem]:
        path = f"/block/{height}/{format_address(address)}/run/{method}"
        if args:
            path += "/" + encode_args(args)
        data = await self._get_json(path)

        exit_code = data.get("exitCode")
        if exit_code not in (0, 1):
            raise ProtocolError(f"{method} exited with code {exit_code!r}")
        return parse_stack(data.get("result"))

    async def resolve_record_address(self, height: int, registry_address: Address, lookup_key: LookupKey) -> Address:
        result = await self.run_method(height, registry_address, GET_SOURCE_ITEM_ADDRESS, lookup_key)
        if not result:
            raise ProtocolError(f"{GET_SOURCE_ITEM_ADDRESS} returned an empty stack")
        address = read_address(result[0])
        logger.debug("source item address: %s", format_address(address))
        return address

    async def is_deployed(self, height: int, address: Address) -> bool:
        data = await self._get_json(f"/block/{height}/{format_address(address)}/lite")
        try:
            state = data["account"]["state"]["type"]
        except (KeyError, TypeError) as e:
            raise ProtocolError("Account response has no account.state.type") from e
        return state == "active"

    async def fetch_record_payload(self, height: int, address: Address) -> List[StackItem]:
        """Read the source item data. Only meaningful once is_deployed() is true."""
        return await self.run_method(height, address, GET_SOURCE_ITEM_DATA)
