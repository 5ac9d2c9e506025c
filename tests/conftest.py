"""Shared test fixtures for apiref_search tests."""

from __future__ import annotations

import asyncio
import json

import pytest

from apiref_search.domain.entities import EntryRecord, Shard, TargetRef
from apiref_search.domain.enums import EntryKind
from apiref_search.infrastructure.search.engine import SearchEngine
from apiref_search.infrastructure.shards.buckets import PatternBucketScheme
from apiref_search.infrastructure.shards.parser import ShardParser
from apiref_search.infrastructure.shards.sources import ShardSource

R_SEARCHDATA = """var searchData=
[
  ['radial_5fgradient',['radial_gradient',['../d9/d57/classfastuidraw_1_1_painter_brush.html#a2db2',1,'fastuidraw::PainterBrush::radial_gradient(const vec2 &amp;start_p, float start_r)'],['../d9/d57/classfastuidraw_1_1_painter_brush.html#aef27',1,'fastuidraw::PainterBrush::radial_gradient(const vec2 &amp;p, float r)']]],
  ['radius',['radius',['../d3/daa/classfastuidraw_1_1_arc_stroked_point.html#a9ab0',1,'fastuidraw::ArcStrokedPoint::radius(void) const'],['../d3/daa/classfastuidraw_1_1_arc_stroked_point.html#a8283',1,'fastuidraw::ArcStrokedPoint::radius(void)']]],
  ['range_5ftype',['range_type',['../d6/dee/classfastuidraw_1_1range__type.html',1,'fastuidraw::range_type&lt; T &gt;'],['../d6/dee/classfastuidraw_1_1range__type.html#a36f5',1,'fastuidraw::range_type::range_type(T b, T e)']]],
  ['range_5ftype_3c_20float_20_3e',['range_type&lt; float &gt;',['../d6/dee/classfastuidraw_1_1range__type.html',1,'fastuidraw']]],
  ['reference_5fcounted_2ehpp',['reference_counted.hpp',['../d3/dd6/reference__counted_8hpp.html',1,'']]],
  ['routine_5ffail',['routine_fail',['../d4/d4c/namespacefastuidraw.html#a63b4',1,'fastuidraw']]]
];
"""

G_SHARD = {
    "bucket": "g",
    "entries": [
        {
            "key": "gradient",
            "display_name": "Gradient",
            "kind": "class",
            "targets": [
                {"location_id": "classGradient.html", "anchor": "", "scope_label": "paint"}
            ],
        },
        {
            "key": "radius",
            "display_name": "radius",
            "kind": "function",
            "targets": [
                {
                    "location_id": "classGlyphRadius.html",
                    "anchor": "a77",
                    "scope_label": "glyph::Circle",
                    "kind_hint": "(void)",
                    "generator_note": "ignored",
                }
            ],
        },
    ],
}


class FakeShardSource(ShardSource):
    """In-memory assets; a gate holds a read until its event is set."""

    def __init__(
        self,
        assets: dict[str, str | Exception],
        gates: dict[str, asyncio.Event] | None = None,
    ) -> None:
        self.assets = assets
        self.gates = gates or {}
        self.reads: list[str] = []
        self.closed = False

    async def read(self, asset_name: str) -> str:
        self.reads.append(asset_name)
        gate = self.gates.get(asset_name)
        if gate is not None:
            await gate.wait()
        value = self.assets.get(asset_name)
        if value is None:
            raise FileNotFoundError(asset_name)
        if isinstance(value, Exception):
            raise value
        return value

    async def aclose(self) -> None:
        self.closed = True


class RecordingRenderer:
    def __init__(self) -> None:
        self.events: list[tuple] = []

    def present(self, rows, partial) -> None:
        self.events.append(("present", rows, partial))

    def clear(self) -> None:
        self.events.append(("clear",))

    @property
    def presentations(self) -> list[tuple]:
        return [e for e in self.events if e[0] == "present"]


@pytest.fixture
def r_searchdata() -> str:
    return R_SEARCHDATA


@pytest.fixture
def g_shard_json() -> str:
    return json.dumps(G_SHARD)


@pytest.fixture
def make_source():
    return FakeShardSource


@pytest.fixture
def make_engine():
    """Engine over in-memory assets named ``<bucket>.shard``, format detected from content."""

    def _make(assets, gates=None, pattern="{bucket}.shard", load_timeout=5.0):
        source = FakeShardSource(assets, gates)
        engine = SearchEngine(
            source,
            PatternBucketScheme(pattern),
            ShardParser(),
            load_timeout=load_timeout,
        )
        return engine, source

    return _make


@pytest.fixture
def recording_renderer() -> RecordingRenderer:
    return RecordingRenderer()


def make_entry(key, display_name=None, targets=("page.html",), kind=EntryKind.MEMBER) -> EntryRecord:
    return EntryRecord(
        key=key,
        display_name=display_name if display_name is not None else key,
        targets=tuple(
            t if isinstance(t, TargetRef) else TargetRef(location_id=t) for t in targets
        ),
        kind=kind,
    )


@pytest.fixture
def entry():
    return make_entry


@pytest.fixture
def shard():
    def _make(bucket_key, *entries):
        return Shard(bucket_key=bucket_key, entries=tuple(entries))

    return _make
