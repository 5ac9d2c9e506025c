"""FastMCP server with API-reference search tools."""

from __future__ import annotations

import logging
from pathlib import Path

import httpx

from apiref_search.config import AppConfig, ShardsConfig
from apiref_search.domain.exceptions import DomainException, ManifestLoadException
from apiref_search.domain.services import SymbolSearchService
from apiref_search.infrastructure.search.engine import SearchEngine
from apiref_search.infrastructure.shards.buckets import (
    BucketScheme,
    ManifestBucketScheme,
    PatternBucketScheme,
)
from apiref_search.infrastructure.shards.parser import ShardParser
from apiref_search.infrastructure.shards.sources import (
    DirectoryShardSource,
    HttpShardSource,
    ShardSource,
)
from apiref_search.presentation.formatter import MarkdownFormatter

logger = logging.getLogger(__name__)


def create_engine(config: AppConfig) -> SearchEngine:
    """Wire source, bucket scheme and parser from the ``shards`` config section."""
    shards = config.shards
    try:
        parser = ShardParser(shards.format)
    except ValueError as exc:
        raise ManifestLoadException(str(exc)) from exc

    source = _create_source(shards)
    scheme = _create_scheme(shards)
    logger.info(
        "Search engine ready: source=%s, %s buckets",
        shards.source,
        len(scheme.buckets) or "unknown",
    )
    return SearchEngine(
        source,
        scheme,
        parser,
        load_timeout=shards.load_timeout,
        preload=shards.preload,
    )


def create_service(config: AppConfig, engine: SearchEngine) -> SymbolSearchService:
    return SymbolSearchService(
        engine,
        default_limit=config.search.default_limit,
        max_limit=config.search.max_limit,
    )


def create_server(config: AppConfig, engine: SearchEngine | None = None):
    """Create and configure the MCP server.

    Args:
        config: Application configuration (YAML + env + CLI merged).
        engine: Pre-built engine; built from ``config`` when omitted.
    """
    from fastmcp import FastMCP

    mcp = FastMCP("apiref-search")

    engine = engine or create_engine(config)
    service = create_service(config, engine)
    formatter = MarkdownFormatter()

    @mcp.tool()
    async def search(query: str, limit: int | None = None) -> str:
        """Incremental search over the API reference symbol index.

        Matches symbol names (classes, functions, members, files, groups) by
        prefix or substring, case-insensitively. Overloads sharing a name are
        grouped with every definition they resolve to.

        Args:
            query: Partial symbol name (e.g., 'radius', 'PainterBrush', 'range_type<float>')
            limit: Maximum groups to return (default from config)
        """
        try:
            outcome = await service.search(query, limit)
            return formatter.format_query(query) + formatter.format_search_results(outcome)
        except DomainException as e:
            return formatter.format_error(e)

    @mcp.tool()
    async def lookup(name: str) -> str:
        """List every definition of a symbol with exactly this name.

        Args:
            name: Symbol name (e.g., 'radius')
        """
        try:
            groups = await service.lookup(name)
            return formatter.format_lookup(groups)
        except DomainException as e:
            return formatter.format_error(e)

    @mcp.tool()
    def index_status() -> str:
        """Show which index shards are loaded and which failed to load."""
        return formatter.format_status(service.status())

    return mcp


def _create_source(shards: ShardsConfig) -> ShardSource:
    if shards.source == "http":
        if not shards.base_url:
            raise ManifestLoadException("shards.base_url is required for the http source")
        return HttpShardSource(shards.base_url, timeout=shards.load_timeout)
    if shards.source == "file":
        if not shards.path:
            raise ManifestLoadException("shards.path is required for the file source")
        return DirectoryShardSource(Path(shards.path))
    raise ManifestLoadException(f"Unknown shard source: {shards.source}")


def _create_scheme(shards: ShardsConfig) -> BucketScheme:
    if not shards.manifest:
        try:
            return PatternBucketScheme(shards.pattern)
        except ValueError as exc:
            raise ManifestLoadException(str(exc)) from exc

    content = _read_manifest(shards)
    try:
        if shards.manifest.endswith(".js"):
            return ManifestBucketScheme.from_searchdata(content, shards.section)
        return ManifestBucketScheme.from_json(content)
    except ValueError as exc:
        raise ManifestLoadException(f"Invalid manifest '{shards.manifest}': {exc}") from exc


def _read_manifest(shards: ShardsConfig) -> str:
    """Read the manifest synchronously; it is needed before any query runs."""
    try:
        if shards.source == "http":
            url = f"{(shards.base_url or '').rstrip('/')}/{shards.manifest}"
            response = httpx.get(url, timeout=shards.load_timeout)
            response.raise_for_status()
            return response.text
        return (Path(shards.path) / shards.manifest).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError, httpx.HTTPError) as exc:
        raise ManifestLoadException(f"Cannot read manifest '{shards.manifest}': {exc}") from exc
