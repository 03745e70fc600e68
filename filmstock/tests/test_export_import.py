import csv
import io
import json
from datetime import date

import pytest

from filmstock.domain.FilmUnit import CustomFormat, FilmType
from filmstock.domain.errors import ImportFormatError, ValidationError
from filmstock.infra.Record_Store import InMemoryRecordStore
from filmstock.logic.inventory_service import InventoryService

TODAY = date(2025, 6, 1)


def stock(service, film_payload):
    service.add_film(film_payload(quantity=3))
    service.add_film(film_payload(name="HP5 Plus", manufacturer="Ilford", type="BW",
                                  format="Other", custom_format_name="Half Frame",
                                  quantity=2, is_frozen=True, exposures=72,
                                  expiry_dates=["2020", "05/2028"],
                                  comments="bulk rolled, from the shop"))
    service.add_film(film_payload(name="Tmax 100", type="BW", speed=100, format="4x5", quantity=10,
                                  expiry_dates=[]))


def test_json_export_shape(service, film_payload):
    stock(service, film_payload)
    doc = json.loads(service.export("json", TODAY))
    assert doc["appVersion"]
    assert [(r["manufacturer"], r["name"]) for r in doc["inventory"]] == [
        ("Ilford", "HP5 Plus"), ("Kodak", "Portra 400"), ("Kodak", "Tmax 100"),
    ]
    hp5 = doc["inventory"][0]
    assert hp5["format"] == "Other"
    assert hp5["customFormat"] == "Half Frame"
    assert hp5["iso"] == 400
    assert hp5["isFrozen"] is True
    assert hp5["expiryDates"] == ["2020", "05/2028"]
    assert doc["summary"]["total_rolls"] == 5
    assert doc["summary"]["total_sheets"] == 10
    assert doc["summary"]["expired"] == 1


def test_csv_export_sections(service, film_payload):
    stock(service, film_payload)
    rows = list(csv.reader(io.StringIO(service.export("csv", TODAY))))
    assert rows[0] == ["# INVENTORY"]
    assert rows[1][:3] == ["Manufacturer", "Film", "Type"]
    hp5 = rows[2]
    assert hp5[4:6] == ["Other", "Half Frame"]
    assert hp5[7] == "2020, 05/2028"
    assert hp5[8] == "Yes"
    assert hp5[10] == "bulk rolled, from the shop"
    assert ["# SUMMARY"] in rows
    assert ["total_rolls", "5"] in rows


def test_csv_round_trip_into_an_empty_inventory(service, film_payload, clock):
    stock(service, film_payload)
    exported = service.export("csv", TODAY)

    fresh = InventoryService(InMemoryRecordStore(), clock=clock)
    fresh.manufacturers.seed()
    preview = fresh.preview_import(exported, "inventory.csv")
    assert preview.warnings == []
    assert len(preview.rows) == 3

    results = fresh.commit_import(preview.rows)
    assert [r.kind.value for r in results] == ["created"] * 3
    hp5 = next(u for u in fresh.ledger.all() if u.name == "HP5 Plus")
    assert hp5.format == CustomFormat("Half Frame")
    assert hp5.is_frozen and hp5.exposures == 72
    assert hp5.expiry_dates == ["2020", "05/2028"]
    assert hp5.comments == "bulk rolled, from the shop"
    assert fresh.summary(TODAY)["total_sheets"] == 10


def test_csv_keeps_custom_formats_named_like_builtins(service, film_payload, clock):
    service.add_film(film_payload(format="Other", custom_format_name="120"))
    service.add_film(film_payload(name="Ektar 100", speed=100, format="Other", custom_format_name="Other"))
    exported = service.export("csv", TODAY)

    fresh = InventoryService(InMemoryRecordStore(), clock=clock)
    rows = fresh.preview_import(exported, "inventory.csv").rows
    formats = {u.name: u.format for u in rows}
    assert formats == {"Portra 400": CustomFormat("120"), "Ektar 100": CustomFormat("Other")}


def test_reimporting_an_export_merges(service, film_payload):
    stock(service, film_payload)
    preview = service.preview_import(service.export("json", TODAY), "inventory.json")
    results = service.commit_import(preview.rows)
    assert all(r.merged for r in results)
    assert len(service.ledger) == 3
    assert service.totals().rolls == 10


def test_missing_name_is_skipped_with_warning(service):
    doc = {"inventory": [
        {"manufacturer": "Kodak", "name": "Gold 200", "iso": 200, "format": "35"},
        {"manufacturer": "Kodak", "iso": 400, "format": "35"},
        {"manufacturer": "Ilford", "name": "Delta 3200", "iso": 3200, "format": "120"},
    ]}
    preview = service.preview_import(json.dumps(doc), "films.json")
    assert len(preview.rows) == 2
    assert [str(w) for w in preview.warnings] == ["Row 2: skipped (missing manufacturer or film name)"]


def test_preview_does_not_touch_the_ledger(service):
    before = service.store.snapshot()
    preview = service.preview_import(b'[{"manufacturer": "Foma", "name": "Pan 100", "speed": 100}]')
    assert len(preview.rows) == 1
    assert service.store.snapshot() == before


def test_bare_list_and_legacy_keys(service):
    data = json.dumps([{
        "manufacturer": "Foma", "name": "Pan 100", "ISO": "100", "format": "120",
        "expiryDate": "2027", "frozen": True, "quantity": "",
    }])
    [unit] = service.preview_import(data).rows
    assert unit.speed == 100
    assert unit.expiry_dates == ["2027"]
    assert unit.is_frozen
    assert unit.quantity == 1
    assert unit.type == FilmType.BW


def test_unknown_type_becomes_bw(service):
    data = json.dumps([{"manufacturer": "Foma", "name": "Retropan", "iso": 320, "type": "Sepia"}])
    preview = service.preview_import(data, "f.json")
    assert preview.rows[0].type == FilmType.BW
    assert "unknown type 'Sepia'" in str(preview.warnings[0])


def test_missing_format_becomes_custom(service):
    data = json.dumps([{"manufacturer": "Foma", "name": "Retropan", "iso": 320}])
    assert service.preview_import(data, "f.json").rows[0].format == CustomFormat("Custom")


@pytest.mark.parametrize("record", [
    {"manufacturer": "Kodak", "name": "Gold", "iso": "fast"},
    {"manufacturer": "Kodak", "name": "Gold", "iso": 200, "expiryDates": ["13/2026"]},
    {"manufacturer": "Kodak", "name": "Gold", "iso": 200, "quantity": -2},
])
def test_invalid_rows_are_dropped(service, record):
    preview = service.preview_import(json.dumps([record]), "f.json")
    assert preview.rows == []
    assert str(preview.warnings[0]).startswith("Row 1: skipped")


def test_csv_without_marker(service):
    text = "Manufacturer,Film,Type,ISO,Format,Qty,Expiry,Frozen\nKodak,Tri-X,BW,400,35mm,2,\"2026, 2027\",no\n"
    [unit] = service.preview_import(text, "old.csv").rows
    assert unit.name == "Tri-X"
    assert unit.quantity == 2
    assert unit.expiry_dates == ["2026", "2027"]
    assert not unit.is_frozen


def test_csv_with_only_invalid_rows_gives_empty_preview(service):
    text = "# INVENTORY\nManufacturer,Film,ISO\n,Tri-X,400\n"
    preview = service.preview_import(text, "x.csv")
    assert preview.rows == []
    assert len(preview.warnings) == 1


@pytest.mark.parametrize("data, filename", [
    ("{not json", "bad.json"),
    ('{"films": 3}', "bad.json"),
    ("Manufacturer,ISO\nKodak,400\n", "bad.csv"),
    ("", "empty.json"),
    ("anything", "notes.txt"),
    (b"\xff\xfe\x00bad", "bad.csv"),
])
def test_unreadable_documents(service, data, filename):
    with pytest.raises(ImportFormatError):
        service.preview_import(data, filename)


def test_commit_is_all_or_nothing(service, film_payload):
    service.add_film(film_payload())
    preview = service.preview_import(json.dumps([
        {"manufacturer": "Kodak", "name": "Gold 200", "iso": 200, "format": "35"},
        {"manufacturer": "Kodak", "name": "Ektar 100", "iso": 100, "format": "120"},
    ]))
    rows = preview.rows
    rows[1].speed = 0
    before = service.store.snapshot()
    with pytest.raises(ValidationError):
        service.commit_import(rows)
    assert service.store.snapshot() == before


def test_export_to_file(service, film_payload, tmp_path):
    stock(service, film_payload)
    path = service.exporter.export_to_file(tmp_path / "out.csv", fmt="csv")
    preview = service.importer.preview_file(path)
    assert len(preview.rows) == 3
