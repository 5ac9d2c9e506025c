"""Tests for engine wiring, the MCP server factory and the CLI."""

import asyncio
import io
import json

import pytest
from click.testing import CliRunner
from fastmcp import Client

from apiref_search.__main__ import cli
from apiref_search.config import AppConfig
from apiref_search.domain.exceptions import ManifestLoadException
from apiref_search.domain.services import SymbolSearchService
from apiref_search.domain.value_objects import SearchQuery
from apiref_search.infrastructure.shards.sources import DirectoryShardSource, HttpShardSource
from apiref_search.presentation.console import run_console, run_query
from apiref_search.server import create_engine, create_server

SEARCHDATA_JS = """var indexSectionsWithContent =
{
  0: "_abcdefghijklmnopqrstuvwxyz~"
};

var indexSectionNames =
{
  0: "all"
};
"""


@pytest.fixture
def docs_dir(tmp_path, r_searchdata):
    (tmp_path / "searchdata.js").write_text(SEARCHDATA_JS, encoding="utf-8")
    (tmp_path / "all_12.js").write_text(r_searchdata, encoding="utf-8")
    return tmp_path


def _config(**shards):
    config = AppConfig()
    for name, value in shards.items():
        setattr(config.shards, name, value)
    return config


class TestCreateEngine:
    def test_searchdata_manifest(self, docs_dir):
        engine = create_engine(_config(path=str(docs_dir), manifest="searchdata.js"))
        outcome = asyncio.run(engine.search(SearchQuery("radius")))
        assert [g.display_name for g in outcome.groups] == ["radius"]
        assert len(engine.status().known_buckets) == 28

    def test_json_manifest(self, tmp_path, g_shard_json):
        (tmp_path / "manifest.json").write_text(
            json.dumps({"buckets": {"g": "shard-g.json"}}), encoding="utf-8"
        )
        (tmp_path / "shard-g.json").write_text(g_shard_json, encoding="utf-8")
        engine = create_engine(_config(path=str(tmp_path), manifest="manifest.json"))
        outcome = asyncio.run(engine.search(SearchQuery("grad")))
        assert [g.display_name for g in outcome.groups] == ["Gradient"]

    def test_pattern_without_manifest(self, tmp_path, g_shard_json):
        (tmp_path / "g.json").write_text(g_shard_json, encoding="utf-8")
        engine = create_engine(_config(path=str(tmp_path)))
        assert engine.status().known_buckets == ()
        assert len(asyncio.run(engine.search(SearchQuery("gradient"))).groups) == 1

    def test_http_source(self):
        engine = create_engine(_config(source="http", base_url="https://example.org/search"))
        assert isinstance(engine._source, HttpShardSource)

    def test_file_source(self, tmp_path):
        engine = create_engine(_config(path=str(tmp_path)))
        assert isinstance(engine._source, DirectoryShardSource)

    @pytest.mark.parametrize(
        "shards",
        [
            {},
            {"source": "ftp", "path": "/tmp"},
            {"source": "http"},
            {"path": "/tmp", "format": "xml"},
            {"path": "/tmp", "pattern": "shard.json"},
        ],
    )
    def test_invalid_settings(self, shards):
        with pytest.raises(ManifestLoadException):
            create_engine(_config(**shards))

    def test_missing_manifest(self, tmp_path):
        with pytest.raises(ManifestLoadException, match="Cannot read manifest"):
            create_engine(_config(path=str(tmp_path), manifest="searchdata.js"))

    def test_invalid_manifest(self, tmp_path):
        (tmp_path / "manifest.json").write_text('{"buckets": []}', encoding="utf-8")
        with pytest.raises(ManifestLoadException, match="Invalid manifest"):
            create_engine(_config(path=str(tmp_path), manifest="manifest.json"))


class TestCreateServer:
    def test_server_name(self, docs_dir):
        config = _config(path=str(docs_dir), manifest="searchdata.js")
        server = create_server(config)
        assert server.name == "apiref-search"


def _call_tool(server, name, arguments):
    async def scenario():
        async with Client(server) as client:
            return await client.call_tool(name, arguments)

    result = asyncio.run(scenario())
    content = getattr(result, "content", result)
    return content[0].text


class TestServerTools:
    @pytest.fixture
    def server(self, docs_dir):
        return create_server(_config(path=str(docs_dir), manifest="searchdata.js"))

    def test_search(self, server):
        text = _call_tool(server, "search", {"query": "radius"})
        assert text.startswith("**Search:** `radius`")
        assert "**radius**" in text

    def test_search_empty_query_renders_error(self, server):
        text = _call_tool(server, "search", {"query": "   "})
        assert text.startswith("**Error:**")
        assert "cannot be empty" in text

    def test_lookup(self, server):
        text = _call_tool(server, "lookup", {"name": "range_type"})
        assert "## range_type" in text

    def test_lookup_missing_renders_error(self, server):
        text = _call_tool(server, "lookup", {"name": "rad"})
        assert text.startswith("**Error:**")
        assert "not found" in text

    def test_index_status(self, server):
        _call_tool(server, "search", {"query": "radius"})
        text = _call_tool(server, "index_status", {})
        assert "**Loaded shards:**" in text


class TestConsole:
    def test_run_query(self, docs_dir):
        engine = create_engine(_config(path=str(docs_dir), manifest="searchdata.js"))
        output = asyncio.run(run_query(SymbolSearchService(engine), engine, "radius"))
        assert output.startswith("**Search:** `radius`")
        assert "**radius**" in output

    def test_run_console(self, make_engine, r_searchdata):
        engine, source = make_engine({"r.shard": r_searchdata})
        echoed = []
        stream = io.StringIO("radius\n")
        asyncio.run(run_console(engine, stream, echoed.append, debounce_ms=0, limit=10))
        assert len(echoed) == 1
        assert "**radius**" in echoed[0]
        assert source.closed


class TestCli:
    def test_single_query(self, docs_dir):
        result = CliRunner().invoke(
            cli, ["--shards-path", str(docs_dir), "--manifest", "searchdata.js", "-q", "range"]
        )
        assert result.exit_code == 0, result.output
        assert "**range_type**" in result.output

    def test_console_mode(self, docs_dir):
        result = CliRunner().invoke(
            cli,
            ["-p", str(docs_dir), "--manifest", "searchdata.js", "--mode", "console"],
            input="radius\n",
            env={"APIREF_SEARCH_DEBOUNCE_MS": "0"},
        )
        assert result.exit_code == 0, result.output
        assert "Found 1 results" in result.output

    def test_configuration_error(self, tmp_path):
        result = CliRunner().invoke(cli, ["-p", str(tmp_path), "--manifest", "missing.js", "-q", "x"])
        assert result.exit_code == 1
        assert "Cannot read manifest" in result.output

    def test_empty_query_error(self, docs_dir):
        result = CliRunner().invoke(cli, ["-p", str(docs_dir), "-q", "  "])
        assert result.exit_code == 1
        assert "cannot be empty" in result.output
