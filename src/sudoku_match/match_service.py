"""Client for the external match service (match creation and results).

Each call opens its own HTTP session and performs exactly one attempt; any
failure is raised as :class:`MatchServiceError` for the caller to handle.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional, Protocol, Sequence

import aiohttp

from . import contracts
from .errors import ContractViolation, MatchServiceError
from .project_config import ServiceConfig
from .records import MatchRecord

_LOGGER = logging.getLogger(__name__)


class MatchService(Protocol):
    """What a session needs from the match service."""

    async def create_match(self, player_ids: Sequence[int | str], session_id: str) -> Any:
        """Register a match and return the service handle (falsy on failure)."""

    async def finish_match(self, session_id: str, record: MatchRecord) -> Any:
        """Report the final result (falsy on failure)."""


class MatchServiceClient:
    """aiohttp implementation of :class:`MatchService`."""

    def __init__(self, config: ServiceConfig) -> None:
        self.config = config

    def _timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=self.config.request_timeout_s or None)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, str]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        try:
            async with aiohttp.ClientSession(timeout=self._timeout(), headers=self.config.headers()) as http:
                async with http.request(method, url, params=params, json=body) as response:
                    if not response.ok:
                        detail = await response.text()
                        raise MatchServiceError(
                            f"{method} {url} returned {response.status}: {detail[:200]}",
                            status=response.status,
                        )
                    try:
                        return await response.json(content_type=None)
                    except ValueError as exc:
                        raise MatchServiceError(
                            f"{method} {url} returned a non-JSON body", status=response.status
                        ) from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise MatchServiceError(f"{method} {url} failed: {exc!r}") from exc

    async def get_match_type_id(self) -> int | str:
        url = self.config.url(self.config.match_type_path)
        payload = await self._request("GET", url, params={"name": self.config.match_type_name})
        if not isinstance(payload, dict) or payload.get("id") is None:
            raise MatchServiceError(f"match type {self.config.match_type_name!r} lookup returned no id")
        return payload["id"]

    async def create_match(self, player_ids: Sequence[int | str], session_id: str) -> Any:
        match_type = await self.get_match_type_id()
        body = {"players": list(player_ids), "uuid": session_id, "match_type": match_type}
        try:
            contracts.assert_valid(body, "match_create")
        except ContractViolation as exc:
            raise MatchServiceError(str(exc)) from exc

        url = self.config.url(self.config.match_create_path)
        handle = await self._request("POST", url, body=body)
        _LOGGER.info("match %s created for players %s", session_id, body["players"])
        return handle

    async def finish_match(self, session_id: str, record: MatchRecord) -> bool:
        body = record.to_payload()
        try:
            contracts.assert_valid(body, "match_finish")
        except ContractViolation as exc:
            raise MatchServiceError(str(exc)) from exc

        url = self.config.url(self.config.match_finish_path.format(uuid=session_id))
        await self._request("POST", url, body=body)
        _LOGGER.info("match %s finished, winner %s", session_id, record.winner)
        return True


__all__ = ["MatchService", "MatchServiceClient"]
