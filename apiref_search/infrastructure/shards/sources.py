"""Shard asset sources: a local directory or an HTTP base URL."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path

import httpx

from apiref_search.domain.exceptions import ShardFetchFailure

logger = logging.getLogger(__name__)


class ShardSource(ABC):
    """Abstract interface for retrieving raw shard assets."""

    @abstractmethod
    async def read(self, asset_name: str) -> str:
        """Return the asset text or raise the transport's own error."""

    async def fetch(self, bucket_key: str, asset_name: str) -> str:
        """Read one shard asset, reporting any failure as ShardFetchFailure."""
        try:
            return await self.read(asset_name)
        except (OSError, UnicodeDecodeError, httpx.HTTPError) as exc:
            raise ShardFetchFailure(bucket_key, f"{asset_name}: {exc}") from exc

    async def aclose(self) -> None:
        pass


class DirectoryShardSource(ShardSource):
    """Reads shard assets from a directory, off the event loop."""

    def __init__(self, root: Path) -> None:
        self._root = root

    async def read(self, asset_name: str) -> str:
        path = self._root / asset_name
        logger.debug("Reading shard asset %s", path)
        return await asyncio.to_thread(path.read_text, encoding="utf-8")


class HttpShardSource(ShardSource):
    """Fetches shard assets relative to a base URL with httpx."""

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    def url_for(self, asset_name: str) -> str:
        return f"{self._base_url}/{asset_name.lstrip('/')}"

    async def read(self, asset_name: str) -> str:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        url = self.url_for(asset_name)
        logger.debug("Fetching shard asset %s", url)
        response = await self._client.get(url)
        response.raise_for_status()
        return response.text

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
