import asyncio

import requests

from conftest import FakeGeocoder, FakeHttp, run
from pinmap.lifecycle import LifecycleState, PinLifecycleController
from pinmap.models import ADDRESS_ERROR, PinIdAllocator
from pinmap.services import GeocoderConfig, MemoryKeyValueStore, NominatimGeocoder, PersistenceError
from pinmap.store import PinStore


def _controller(store, geocoder):
    return PinLifecycleController(store, geocoder, ids=PinIdAllocator(clock=lambda: 1.0))


def test_click_creates_draft(store, geocoder):
    ctl = _controller(store, geocoder)
    assert ctl.state is LifecycleState.IDLE
    draft = ctl.on_map_click(12.34, 56.78)
    assert ctl.state is LifecycleState.DRAFTING
    assert (draft.lat, draft.lng, draft.remarks) == (12.34, 56.78, "")


def test_at_most_one_draft_equal_to_latest_click(store, geocoder):
    ctl = _controller(store, geocoder)
    clicks = [(1.0, 2.0), (3.0, 4.0), (-5.5, 120.25)]
    for lat, lng in clicks:
        ctl.on_map_click(lat, lng)
    assert (ctl.draft.lat, ctl.draft.lng) == clicks[-1]


def test_submit_commits_pin_with_address(store, geocoder):
    ctl = _controller(store, geocoder)
    ctl.on_map_click(12.34, 56.78)
    ctl.set_remarks("Coffee shop")
    pin = run(ctl.submit())
    assert pin.address == "Main St Cafe"
    assert pin.remarks == "Coffee shop"
    assert (pin.lat, pin.lng) == (12.34, 56.78)
    assert store.pins == [pin]
    assert ctl.draft is None
    assert ctl.state is LifecycleState.IDLE


def test_geocoder_network_error_still_creates_pin(store):
    geo = NominatimGeocoder(GeocoderConfig(), session=FakeHttp(requests.ConnectionError("offline")))
    ctl = _controller(store, geo)
    ctl.on_map_click(12.34, 56.78)
    pin = run(ctl.submit())
    assert pin.address == ADDRESS_ERROR
    assert store.pins == [pin]


def test_second_click_discards_first_draft(store, geocoder):
    ctl = _controller(store, geocoder)
    ctl.on_map_click(1.0, 1.0)
    ctl.on_map_click(2.0, 2.0)
    pin = run(ctl.submit())
    assert (pin.lat, pin.lng) == (2.0, 2.0)
    assert geocoder.calls == [(2.0, 2.0)]
    assert run(ctl.submit()) is None
    assert len(store.pins) == 1


def test_submit_without_draft_is_noop(store, geocoder):
    ctl = _controller(store, geocoder)
    assert run(ctl.submit()) is None
    assert store.pins == []
    assert geocoder.calls == []


def test_submit_with_missing_coordinates_keeps_draft(store, geocoder):
    ctl = _controller(store, geocoder)
    ctl.on_map_click(float("nan"), 10.0)
    assert run(ctl.submit()) is None
    assert ctl.state is LifecycleState.DRAFTING
    assert store.pins == []


def test_equator_and_meridian_are_submittable(store, geocoder):
    ctl = _controller(store, geocoder)
    ctl.on_map_click(0.0, 0.0)
    assert run(ctl.submit()) is not None


def test_remarks_ignored_without_draft(store, geocoder):
    ctl = _controller(store, geocoder)
    assert ctl.set_remarks("nothing to edit") is None


def test_double_submit_appends_once(store, geocoder):
    ctl = _controller(store, geocoder)
    async def scenario():
        geocoder.gate = asyncio.Event()
        ctl.on_map_click(12.34, 56.78)
        first = asyncio.ensure_future(ctl.submit())
        await asyncio.sleep(0)
        assert ctl.state is LifecycleState.COMMITTING
        assert await ctl.submit() is None
        assert ctl.set_remarks("too late") is None
        geocoder.gate.set()
        return await first

    pin = run(scenario())
    assert store.pins == [pin]
    assert pin.remarks == ""
    assert len(geocoder.calls) == 1


def test_click_during_commit_starts_independent_draft(store, geocoder):
    ctl = _controller(store, geocoder)

    async def scenario():
        geocoder.gate = asyncio.Event()
        ctl.on_map_click(1.0, 1.0)
        first = asyncio.ensure_future(ctl.submit())
        await asyncio.sleep(0)
        ctl.on_map_click(2.0, 2.0)
        assert ctl.state is LifecycleState.DRAFTING
        second = asyncio.ensure_future(ctl.submit())
        await asyncio.sleep(0)
        geocoder.gate.set()
        return await first, await second

    first, second = run(scenario())
    assert [p.id for p in store.pins] == [first.id, second.id]
    assert first.id != second.id
    assert ctl.draft is None


def test_pending_commit_survives_new_draft(store, geocoder):
    ctl = _controller(store, geocoder)

    async def scenario():
        geocoder.gate = asyncio.Event()
        ctl.on_map_click(1.0, 1.0)
        pending = asyncio.ensure_future(ctl.submit())
        await asyncio.sleep(0)
        ctl.on_map_click(2.0, 2.0)
        geocoder.gate.set()
        return await pending

    pin = run(scenario())
    assert (pin.lat, pin.lng) == (1.0, 1.0)
    assert store.pins == [pin]
    assert (ctl.draft.lat, ctl.draft.lng) == (2.0, 2.0)
    assert ctl.state is LifecycleState.DRAFTING


def test_persistence_failure_keeps_pin_in_session():
    class FailingKV(MemoryKeyValueStore):
        def set(self, key, value):
            raise PersistenceError("read-only")

    store = PinStore(FailingKV())
    ctl = _controller(store, FakeGeocoder())
    ctl.on_map_click(3.0, 4.0)
    pin = run(ctl.submit())
    assert store.pins == [pin]
    assert ctl.draft is None


def test_ids_unique_within_same_tick(store, geocoder):
    ctl = _controller(store, geocoder)
    ids = []
    for i in range(3):
        ctl.on_map_click(float(i), float(i))
        ids.append(run(ctl.submit()).id)
    assert len(set(ids)) == 3
