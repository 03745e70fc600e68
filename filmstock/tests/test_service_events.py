import pytest

from filmstock.domain.errors import CapacityExceeded
from filmstock.events.Event_Bus import EventBus
from filmstock.infra.Record_Store import InMemoryRecordStore
from filmstock.logic.inventory_service import InventoryService
from filmstock.utilities.constants import LEDGER_CHANGED, LOADED_FILMS_CHANGED


@pytest.fixture
def events(service):
    received = []

    def listener(name, payload):
        received.append((name, payload))

    service.bus.subscribe(LEDGER_CHANGED, listener)
    service.bus.subscribe(LOADED_FILMS_CHANGED, listener)
    return received


def test_add_and_merge_publish_their_kind(service, film_payload, events):
    first = service.add_film(film_payload())
    service.add_film(film_payload())
    assert events == [
        (LEDGER_CHANGED, {"action": "created", "film_ids": [first.film_id]}),
        (LEDGER_CHANGED, {"action": "merged", "film_ids": [first.film_id]}),
    ]


def test_roll_load_only_touches_loaded_films(service, film_payload, events):
    film_id = service.add_film(film_payload()).film_id
    events.clear()
    loaded = service.load_film({"film_id": film_id, "format": "35", "camera_name": "FM2"})
    assert [name for name, _ in events] == [LOADED_FILMS_CHANGED]

    events.clear()
    service.unload_film(loaded.id)
    assert [name for name, _ in events] == [LOADED_FILMS_CHANGED, LEDGER_CHANGED]


def test_sheet_load_also_changes_the_ledger(service, film_payload, events):
    film_id = service.add_film(film_payload(format="4x5", quantity=5)).film_id
    events.clear()
    loaded = service.load_film({"film_id": film_id, "format": "4x5", "camera_name": "Chamonix",
                                "quantity": 2})
    assert [name for name, _ in events] == [LOADED_FILMS_CHANGED, LEDGER_CHANGED]

    events.clear()
    service.unload_film(loaded.id)
    assert [name for name, _ in events] == [LOADED_FILMS_CHANGED]


def test_refusals_publish_nothing(service, film_payload, events):
    ids = [service.add_film(film_payload(name=f"Film {i}")).film_id for i in range(6)]
    for film_id in ids[:5]:
        service.load_film({"film_id": film_id, "format": "35", "camera_name": "FM2"})
    events.clear()
    with pytest.raises(CapacityExceeded):
        service.load_film({"film_id": ids[5], "format": "35", "camera_name": "FM2"})
    assert events == []


def test_import_publishes_once(service, events):
    preview = service.preview_import('[{"manufacturer": "Foma", "name": "Pan 100", "iso": 100},'
                                     ' {"manufacturer": "Foma", "name": "Pan 400", "iso": 400}]')
    service.commit_import(preview.rows)
    assert len(events) == 1
    name, payload = events[0]
    assert payload["action"] == "imported"
    assert len(payload["film_ids"]) == 2


def test_failing_subscriber_does_not_break_the_mutation(service, film_payload):
    def broken(name, payload):
        raise RuntimeError("listener bug")

    service.bus.subscribe(LEDGER_CHANGED, broken)
    result = service.add_film(film_payload())
    assert service.get_film(result.film_id).quantity == 1


def test_bus_subscription_bookkeeping():
    bus = EventBus()
    calls = []
    cb = lambda name, payload: calls.append(payload)
    bus.subscribe("x", cb)
    bus.subscribe("x", cb)
    assert bus.subscriber_count("x") == 1
    bus.publish("x", 1)
    bus.unsubscribe("x", cb)
    bus.unsubscribe("x", cb)
    bus.publish("x", 2)
    assert calls == [1]


def test_services_do_not_share_a_bus(service):
    other = InventoryService(InMemoryRecordStore())
    assert other.bus is not service.bus
