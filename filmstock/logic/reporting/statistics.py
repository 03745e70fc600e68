"""
Statistics for the film inventory.
Counts stock by type and format, expired and frozen rows, and finished film.
"""
from collections import Counter
from datetime import date
from typing import Dict, List, Optional
import logging

from filmstock.domain.ExpiryDate import any_past
from filmstock.domain.FilmUnit import BuiltInFormat, CustomFormat, FilmType, FilmUnit
from filmstock.domain.Ledger import FilmLedger
from filmstock.domain.LoadedFilm import DevelopmentStatus
from filmstock.logic.grouping.engine import grouped_films, inventory_totals
from filmstock.logic.loading.state_machine import FilmLoader

logger = logging.getLogger(__name__)


class InventoryStatistics:
    """Generate statistics from the ledger and the loading history."""

    def __init__(self, ledger: FilmLedger, loader: Optional[FilmLoader] = None):
        self.ledger = ledger
        self.loader = loader

    def _in_stock(self) -> List[FilmUnit]:
        return [u for u in self.ledger.all() if u.quantity > 0]

    def total_rolls(self) -> int:
        """Rolls in inventory; sheet formats are not counted."""
        return inventory_totals(self.ledger.all()).rolls

    def total_sheets(self) -> int:
        return inventory_totals(self.ledger.all()).sheets

    def unique_films(self) -> int:
        """Distinct film stocks with something left in the box."""
        return sum(1 for g in grouped_films(self.ledger.all()) if g.has_stock)

    def expired_rows(self, today: Optional[date] = None) -> int:
        return sum(1 for u in self._in_stock() if any_past(u.expiry_dates, today))

    def frozen_rows(self) -> int:
        return sum(1 for u in self._in_stock() if u.is_frozen)

    def rolls_by_type(self) -> Dict[str, int]:
        counter = Counter()
        for unit in self._in_stock():
            if not unit.is_sheet:
                counter[unit.type.value] += unit.quantity
        return {t.value: counter[t.value] for t in FilmType if counter[t.value]}

    def quantity_by_format(self) -> Dict[str, int]:
        """Quantity per built-in format (display name), sheets included."""
        counter = Counter()
        for unit in self._in_stock():
            if isinstance(unit.format, BuiltInFormat):
                counter[unit.format.display_name] += unit.quantity
        return dict(counter.most_common())

    def custom_format_counts(self) -> Dict[str, int]:
        counter = Counter()
        for unit in self._in_stock():
            if isinstance(unit.format, CustomFormat):
                counter[unit.format.name] += unit.quantity
        return dict(counter.most_common())

    def finished_count(self) -> int:
        if self.loader is None:
            return 0
        return len(self.loader.finished_films())

    def awaiting_development(self) -> int:
        if self.loader is None:
            return 0
        return sum(1 for f in self.loader.finished_films() if f.status != DevelopmentStatus.DEVELOPED)

    def summary(self, today: Optional[date] = None) -> Dict:
        """All counters in one dict, the shape used by exports and the API."""
        stats = {
            "total_rolls": self.total_rolls(),
            "total_sheets": self.total_sheets(),
            "unique_films": self.unique_films(),
            "expired": self.expired_rows(today),
            "frozen": self.frozen_rows(),
            "rolls_by_type": self.rolls_by_type(),
            "by_format": self.quantity_by_format(),
            "custom_formats": self.custom_format_counts(),
            "finished": self.finished_count(),
            "awaiting_development": self.awaiting_development(),
        }
        logger.debug(f"Inventory statistics: {stats}")
        return stats
