from datetime import date

from filmstock.domain.FilmUnit import FilmFormat, FilmType, FilmUnit, ImageReference, ImageSource
from filmstock.logic.grouping.engine import (
    GroupFilter,
    apply_filters,
    facet_values,
    grouped_films,
    inventory_totals,
    speed_range_label,
)


def unit(id, name="Portra 400", manufacturer="Kodak", type=FilmType.COLOR, speed=400,
         fmt="35", quantity=1, expiry=None, frozen=False, **kw):
    return FilmUnit(id=id, name=name, manufacturer=manufacturer, type=type, speed=speed,
                    format=FilmFormat.parse(fmt), quantity=quantity, expiry_dates=expiry or [],
                    is_frozen=frozen, **kw)


def sample():
    return [
        unit("u1", quantity=1, expiry=["12/2026"]),
        unit("u2", quantity=0, expiry=["2020"]),
        unit("u3", fmt="120", quantity=2),
        unit("u4", name="HP5 Plus", manufacturer="Ilford", type=FilmType.BW, quantity=3, frozen=True),
        unit("u5", quantity=2, expiry=["2027"]),
        unit("u6", name="Velvia 50", manufacturer="Fujifilm", type=FilmType.SLIDE, speed=50,
             fmt="4x5", quantity=0),
    ]


def test_grouping_is_pure_and_repeatable():
    units = sample()
    before = [u.to_dict() for u in units]
    first = [g.to_dict(date(2025, 1, 1)) for g in grouped_films(units)]
    second = [g.to_dict(date(2025, 1, 1)) for g in grouped_films(units)]
    assert first == second
    assert [u.to_dict() for u in units] == before


def test_groups_keep_first_seen_order():
    groups = grouped_films(sample())
    assert [g.name for g in groups] == ["Portra 400", "HP5 Plus", "Velvia 50"]
    assert groups[0].id == "u1"
    assert [f.format.display_name for f in groups[0].formats] == ["35mm", "120"]


def test_format_quantity_sums_contributing_rows():
    units = sample()
    for group in grouped_films(units):
        for info in group.formats:
            rows = [u for u in units if u.identity_key == (group.name, group.manufacturer, group.type, group.speed)
                    and u.format_key == info.format.key]
            assert info.quantity == sum(u.quantity for u in rows)
            assert info.roll_ids == [u.id for u in rows]


def test_distinct_batches_stay_visible():
    portra_35 = grouped_films(sample())[0].formats[0]
    assert portra_35.quantity == 3
    assert [(r.film_id, r.quantity, r.expiry_dates) for r in portra_35.rows] == [
        ("u1", 1, ("12/2026",)),
        ("u2", 0, ("2020",)),
        ("u5", 2, ("2027",)),
    ]
    assert portra_35.all_expiry_dates == ["12/2026", "2020", "2027"]


def test_representative_prefers_rows_with_stock():
    units = [unit("a", quantity=0, expiry=["2020"]), unit("b", quantity=4, expiry=["2030"], exposures=24)]
    info = grouped_films(units)[0].formats[0]
    assert info.expiry_dates == ["2030"]
    assert info.exposures == 24

    finished = [unit("a", quantity=0, expiry=["2020"]), unit("b", quantity=0, expiry=["2030"])]
    assert grouped_films(finished)[0].formats[0].expiry_dates == ["2020"]


def test_group_expiry_uses_all_rows():
    portra = grouped_films(sample())[0]
    assert portra.is_expired(date(2025, 1, 1))
    assert portra.closest_expiry(date(2025, 1, 1)).normalized() == "12/2026"


def test_explicit_image_wins_over_detection():
    units = [unit("a"), unit("b", image=ImageReference.custom("Kodak/portra.jpg"))]
    assert grouped_films(units)[0].image.source == ImageSource.CUSTOM


def test_filters():
    groups = grouped_films(sample())
    today = date(2025, 1, 1)
    names = lambda gs: [g.name for g in gs]

    assert names(apply_filters(groups, GroupFilter(manufacturers={"Ilford"}))) == ["HP5 Plus"]
    assert names(apply_filters(groups, GroupFilter(types={FilmType.SLIDE}))) == ["Velvia 50"]
    assert names(apply_filters(groups, GroupFilter(speed_ranges={"400"}))) == ["Portra 400", "HP5 Plus"]
    assert names(apply_filters(groups, GroupFilter(formats={("builtin", "120")}))) == ["Portra 400"]
    assert names(apply_filters(groups, GroupFilter(frozen_only=True))) == ["HP5 Plus"]
    assert names(apply_filters(groups, GroupFilter(hide_empty=True))) == ["Portra 400", "HP5 Plus"]
    assert names(apply_filters(groups, GroupFilter(expired_only=True), today)) == ["Portra 400"]
    assert names(apply_filters(groups, GroupFilter())) == ["Portra 400", "HP5 Plus", "Velvia 50"]


def test_facets_ignore_their_own_category():
    groups = grouped_films(sample())
    filt = GroupFilter(manufacturers={"Ilford"})
    assert facet_values(groups, filt, "manufacturer") == ["Fujifilm", "Ilford", "Kodak"]
    assert facet_values(groups, filt, "type") == [FilmType.BW]
    assert facet_values(groups, GroupFilter(), "speed") == ["<100", "400"]
    assert [f.display_name for f in facet_values(groups, GroupFilter(), "format")] == ["35mm", "120", "4x5"]


def test_speed_ranges():
    assert [speed_range_label(s) for s in (50, 100, 250, 300, 301, 400, 800)] == [
        "<100", "100", "200", "200", "400", "400", ">400",
    ]


def test_totals_exclude_sheets_from_rolls():
    units = sample() + [unit("s1", name="Tmax 100", fmt="4x5", quantity=10)]
    totals = inventory_totals(units)
    assert totals.rolls == 1 + 0 + 2 + 3 + 2
    assert totals.sheets == 10
