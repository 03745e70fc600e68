"""Manufacturer registry: the built-in catalog plus user-added makers."""
import logging
from typing import Iterable, List, Optional

from filmstock.domain.Ledger import FilmLedger
from filmstock.domain.Manufacturer import Manufacturer
from filmstock.domain.errors import (
    ManufacturerInUse,
    ManufacturerNotFound,
    ManufacturerProtected,
    ValidationError,
)
from filmstock.infra.Record_Store import MANUFACTURERS, RecordStore
from filmstock.utilities.constants import DEFAULT_MANUFACTURERS

logger = logging.getLogger(__name__)


class ManufacturerRegistry:
    def __init__(self, store: RecordStore, ledger: FilmLedger):
        self.store = store
        self.ledger = ledger

    def seed(self, names: Iterable[str] = DEFAULT_MANUFACTURERS) -> int:
        '''Adds any missing built-in manufacturers. Returns how many were added.'''
        added = 0
        with self.store.transaction():
            for name in names:
                if self.find(name) is None:
                    m = Manufacturer(name=name, is_custom=False)
                    self.store.create(MANUFACTURERS, m.id, m.to_dict())
                    added += 1
        if added:
            logger.info(f"Seeded {added} built-in manufacturer(s)")
        return added

    def all(self) -> List[Manufacturer]:
        '''Every manufacturer, sorted by name.'''
        return sorted((Manufacturer.from_dict(d) for d in self.store.all(MANUFACTURERS)),
                      key=lambda m: m.name.lower())

    def get(self, manufacturer_id: str) -> Manufacturer:
        data = self.store.read(MANUFACTURERS, manufacturer_id)
        if data is None:
            raise ManufacturerNotFound(manufacturer_id)
        return Manufacturer.from_dict(data)

    def find(self, name: str) -> Optional[Manufacturer]:
        candidates = (Manufacturer.from_dict(d) for d in self.store.all(MANUFACTURERS))
        return next((m for m in candidates if m.matches(name)), None)

    def add(self, name: str) -> Manufacturer:
        """Register a custom manufacturer.

        Adding a name that already exists (in any letter case) returns the
        existing record unchanged.
        """
        clean = (name or "").strip()
        if not clean:
            raise ValidationError("manufacturer", "manufacturer name is required")
        existing = self.find(clean)
        if existing is not None:
            return existing
        m = Manufacturer(name=clean, is_custom=True)
        self.store.create(MANUFACTURERS, m.id, m.to_dict())
        logger.info(f"Added manufacturer {m.name}")
        return m

    def delete(self, manufacturer_id: str) -> Manufacturer:
        m = self.get(manufacturer_id)
        in_use = self.ledger.referencing_manufacturer(m.name)
        if in_use:
            logger.warning(f"Refusing to delete manufacturer {m.name}: used by {len(in_use)} film(s)")
            raise ManufacturerInUse(m.name, in_use)
        if not m.is_custom:
            logger.warning(f"Refusing to delete built-in manufacturer {m.name}")
            raise ManufacturerProtected(m.name)
        self.store.delete(MANUFACTURERS, [manufacturer_id])
        logger.info(f"Deleted manufacturer {m.name}")
        return m
