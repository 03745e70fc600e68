"""FilmLedger aggregate: the canonical collection of FilmUnit rows."""
import logging
from datetime import datetime
from typing import Callable, Iterable, List

from filmstock.domain.ExpiryDate import validate_expiry_dates
from filmstock.domain.FilmUnit import FilmUnit
from filmstock.domain.errors import DuplicateUnit, InsufficientStock, UnitNotFound, ValidationError
from filmstock.infra.Record_Store import FILMS, RecordStore

logger = logging.getLogger(__name__)


class FilmLedger:
    """Create/update/delete/adjust over the record store's film table.

    The ledger never deduplicates; merging is the reconciler's job. Rows
    with quantity 0 are finished film and stay for history.
    """

    def __init__(self, store: RecordStore, clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self._clock = clock

    @staticmethod
    def check(unit: FilmUnit):
        '''Raises ValidationError if the row breaks a ledger invariant.'''
        if not (unit.name or "").strip():
            raise ValidationError("name", "name is required")
        if not (unit.manufacturer or "").strip():
            raise ValidationError("manufacturer", "manufacturer is required")
        if not isinstance(unit.speed, int) or unit.speed <= 0:
            raise ValidationError("speed", f"speed must be a positive integer, got {unit.speed!r}")
        if not isinstance(unit.quantity, int) or unit.quantity < 0:
            raise ValidationError("quantity", f"quantity cannot be negative: {unit.quantity!r}")
        if unit.exposures is not None and (not isinstance(unit.exposures, int) or unit.exposures <= 0):
            raise ValidationError("exposures", f"exposures must be positive, got {unit.exposures!r}")
        validate_expiry_dates(unit.expiry_dates)

    # --- Queries ----------------------------------------------------------
    def get(self, film_id: str) -> FilmUnit:
        data = self.store.read(FILMS, film_id)
        if data is None:
            raise UnitNotFound(film_id)
        return FilmUnit.from_dict(data)

    def exists(self, film_id: str) -> bool:
        return self.store.read(FILMS, film_id) is not None

    def all(self) -> List[FilmUnit]:
        '''Every row, in insertion order.'''
        return [FilmUnit.from_dict(d) for d in self.store.all(FILMS)]

    def find(self, predicate: Callable[[FilmUnit], bool]) -> List[FilmUnit]:
        return [unit for unit in self.all() if predicate(unit)]

    def referencing_manufacturer(self, name: str) -> List[str]:
        key = (name or "").strip().lower()
        return [u.id for u in self.all() if u.manufacturer.strip().lower() == key]

    # --- Mutations --------------------------------------------------------
    def create(self, unit: FilmUnit) -> FilmUnit:
        self.check(unit)
        created = unit.copy(
            id=unit.id or FilmUnit.new_id(),
            created_at=unit.created_at or self._clock(),
            updated_at=None,
        )
        if self.exists(created.id):
            raise DuplicateUnit(created.id)
        self.store.create(FILMS, created.id, created.to_dict())
        logger.info(f"Created film {created.id}: {created}")
        return created

    def update(self, unit: FilmUnit) -> FilmUnit:
        '''Replaces the row with the same id, keeping created_at and stamping updated_at.'''
        existing = self.get(unit.id)
        self.check(unit)
        replaced = unit.copy(created_at=existing.created_at, updated_at=self._clock())
        self.store.update(FILMS, replaced.id, replaced.to_dict())
        logger.info(f"Updated film {replaced.id}")
        return replaced

    def delete(self, film_ids: Iterable[str]) -> List[FilmUnit]:
        '''Removes every named row, or none of them if one is missing.'''
        ids = list(dict.fromkeys(film_ids))
        removed = []
        for film_id in ids:
            removed.append(self.get(film_id))
        with self.store.transaction():
            self.store.delete(FILMS, ids)
        logger.info(f"Deleted {len(ids)} film(s): {', '.join(ids)}")
        return removed

    def adjust_quantity(self, film_id: str, delta: int) -> FilmUnit:
        unit = self.get(film_id)
        new_quantity = unit.quantity + delta
        if new_quantity < 0:
            raise InsufficientStock(film_id, -delta, unit.quantity)
        adjusted = unit.copy(quantity=new_quantity, updated_at=self._clock())
        self.store.update(FILMS, film_id, adjusted.to_dict())
        logger.info(f"Adjusted film {film_id} quantity {unit.quantity} -> {new_quantity}")
        return adjusted

    def __len__(self) -> int:
        return len(self.store.all(FILMS))
