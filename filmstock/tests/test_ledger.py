from datetime import datetime, timedelta
import unittest

from filmstock.domain.FilmUnit import FilmFormat, FilmType, FilmUnit
from filmstock.domain.Ledger import FilmLedger
from filmstock.domain.errors import ExpiryDateError, InsufficientStock, UnitNotFound, ValidationError
from filmstock.infra.Record_Store import InMemoryRecordStore


def make_unit(**changes):
    unit = FilmUnit(
        name="Tri-X 400",
        manufacturer="Kodak",
        type=FilmType.BW,
        speed=400,
        format=FilmFormat.parse("35"),
        quantity=2,
        expiry_dates=["2026"],
    )
    return unit.copy(**changes)


class TestFilmLedger(unittest.TestCase):

    def setUp(self):
        self.now = datetime(2025, 5, 1, 12, 0)

        def clock():
            self.now += timedelta(seconds=1)
            return self.now

        self.store = InMemoryRecordStore()
        self.ledger = FilmLedger(self.store, clock)

    def test_create_assigns_id_and_timestamp(self):
        unit = self.ledger.create(make_unit())
        self.assertTrue(unit.id)
        self.assertEqual(unit.created_at, datetime(2025, 5, 1, 12, 0, 1))
        self.assertIsNone(unit.updated_at)
        self.assertEqual(self.ledger.get(unit.id), unit)

    def test_create_never_deduplicates(self):
        self.ledger.create(make_unit())
        self.ledger.create(make_unit())
        self.assertEqual(len(self.ledger), 2)

    def test_create_rejects_invalid_rows(self):
        with self.assertRaises(ValidationError) as ctx:
            self.ledger.create(make_unit(speed=0))
        self.assertEqual(ctx.exception.field, "speed")
        with self.assertRaises(ValidationError):
            self.ledger.create(make_unit(name="  "))
        with self.assertRaises(ExpiryDateError):
            self.ledger.create(make_unit(expiry_dates=["2026", "13/2026"]))
        self.assertEqual(len(self.ledger), 0)

    def test_update_preserves_created_at(self):
        unit = self.ledger.create(make_unit())
        updated = self.ledger.update(unit.copy(comments="bulk loaded", created_at=None))
        self.assertEqual(updated.created_at, unit.created_at)
        self.assertGreater(updated.updated_at, unit.created_at)
        self.assertEqual(self.ledger.get(unit.id).comments, "bulk loaded")

    def test_update_unknown_id(self):
        with self.assertRaises(UnitNotFound):
            self.ledger.update(make_unit(id="missing"))

    def test_delete_is_all_or_nothing(self):
        a = self.ledger.create(make_unit())
        b = self.ledger.create(make_unit())
        with self.assertRaises(UnitNotFound) as ctx:
            self.ledger.delete([a.id, "missing", b.id])
        self.assertEqual(ctx.exception.film_id, "missing")
        self.assertEqual(len(self.ledger), 2)

        removed = self.ledger.delete([a.id, b.id])
        self.assertEqual([u.id for u in removed], [a.id, b.id])
        self.assertEqual(len(self.ledger), 0)

    def test_adjust_quantity(self):
        unit = self.ledger.create(make_unit(quantity=2))
        adjusted = self.ledger.adjust_quantity(unit.id, -2)
        self.assertEqual(adjusted.quantity, 0)
        self.assertIsNotNone(adjusted.updated_at)

        with self.assertRaises(InsufficientStock) as ctx:
            self.ledger.adjust_quantity(unit.id, -1)
        self.assertEqual(ctx.exception.available, 0)
        self.assertEqual(self.ledger.get(unit.id).quantity, 0)

    def test_all_keeps_insertion_order(self):
        ids = [self.ledger.create(make_unit(name=f"Film {i}")).id for i in range(4)]
        self.ledger.adjust_quantity(ids[0], 1)
        self.assertEqual([u.id for u in self.ledger.all()], ids)
        self.assertEqual(len(self.ledger.find(lambda u: u.name == "Film 2")), 1)


if __name__ == '__main__':
    unittest.main()
