"""Tests for QuerySessionController."""

import asyncio

from apiref_search.controller import QuerySessionController
from apiref_search.domain.enums import SessionState


async def _yield(times=5):
    for _ in range(times):
        await asyncio.sleep(0)


class TestQuerySessionController:
    def test_presents_result(self, make_engine, r_searchdata, recording_renderer):
        engine, _ = make_engine({"r.shard": r_searchdata})
        controller = QuerySessionController(engine, recording_renderer, debounce_ms=0)

        async def scenario():
            controller.submit("radius")
            await controller.settle()

        asyncio.run(scenario())
        (event,) = recording_renderer.presentations
        _, rows, partial = event
        assert [row.display_name for row in rows] == ["radius"]
        assert rows[0].scope_label == "fastuidraw::ArcStrokedPoint"
        assert not partial
        assert controller.state is SessionState.PRESENTING

    def test_only_latest_query_presented(self, make_engine, r_searchdata, recording_renderer):
        gate = asyncio.Event()
        engine, source = make_engine({"r.shard": r_searchdata}, gates={"r.shard": gate})
        controller = QuerySessionController(engine, recording_renderer, debounce_ms=0)

        async def scenario():
            controller.submit("ra")
            await _yield()
            controller.submit("rad")
            await _yield()
            gate.set()
            await controller.settle()

        asyncio.run(scenario())
        (event,) = recording_renderer.presentations
        assert [row.display_name for row in event[1]] == ["radius", "radial_gradient"]
        assert source.reads == ["r.shard"]
        assert controller.state is SessionState.PRESENTING

    def test_debounced_keystrokes(self, make_engine, r_searchdata, recording_renderer):
        engine, source = make_engine({"r.shard": r_searchdata})
        controller = QuerySessionController(engine, recording_renderer, debounce_ms=20)

        async def scenario():
            for text in ("r", "ra", "ran"):
                controller.submit(text)
                await asyncio.sleep(0)
            await controller.settle()

        asyncio.run(scenario())
        (event,) = recording_renderer.presentations
        assert [row.display_name for row in event[1]] == ["range_type", "range_type< float >"]
        assert source.reads == ["r.shard"]

    def test_partial_flag_reaches_renderer(self, make_engine, recording_renderer):
        engine, _ = make_engine({})
        controller = QuerySessionController(engine, recording_renderer, debounce_ms=0)

        async def scenario():
            controller.submit("radius")
            await controller.settle()

        asyncio.run(scenario())
        (event,) = recording_renderer.presentations
        assert event[1] == []
        assert event[2] is True

    def test_clear(self, make_engine, r_searchdata, recording_renderer):
        engine, _ = make_engine({"r.shard": r_searchdata})
        controller = QuerySessionController(engine, recording_renderer, debounce_ms=0)

        async def scenario():
            controller.submit("radius")
            await controller.settle()
            controller.submit("")
            await controller.settle()

        asyncio.run(scenario())
        assert recording_renderer.events[-1] == ("clear",)
        assert controller.state is SessionState.IDLE

    def test_close_cancels_in_flight_match(self, make_engine, r_searchdata, recording_renderer):
        gate = asyncio.Event()
        engine, _ = make_engine({"r.shard": r_searchdata}, gates={"r.shard": gate})
        controller = QuerySessionController(engine, recording_renderer, debounce_ms=0)

        async def scenario():
            controller.submit("radius")
            await _yield()
            await controller.close()

        asyncio.run(scenario())
        assert recording_renderer.presentations == []

    def test_malformed_shard_still_presents(self, make_engine, recording_renderer):
        nested = "var searchData=" + "[" * 5000 + "]" * 5000 + ";"
        engine, _ = make_engine({"r.shard": nested})
        controller = QuerySessionController(engine, recording_renderer, debounce_ms=0)

        async def scenario():
            controller.submit("radius")
            await controller.settle()

        asyncio.run(scenario())
        (event,) = recording_renderer.presentations
        assert event[1] == []
        assert event[2] is True
        assert controller.state is SessionState.PRESENTING
