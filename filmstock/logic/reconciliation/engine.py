"""Merge-or-create reconciliation of incoming film records.

Manual adds and imports both come through ``Reconciler.reconcile``. A record
merges into an existing row only when it is a true duplicate: same product
identity, same format, same set of expiry dates, same frozen flag and same
exposures. Anything else becomes a new row so distinct batches stay
individually tracked.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional

from filmstock.domain.ExpiryDate import validate_expiry_dates
from filmstock.domain.FilmUnit import FilmFormat, FilmUnit
from filmstock.domain.Ledger import FilmLedger
from filmstock.domain.errors import ExpiryDateError
from filmstock.logic.reconciliation.manufacturers import ManufacturerRegistry

logger = logging.getLogger(__name__)


class ReconcileKind(str, Enum):
    MERGED = "merged"
    CREATED = "created"


@dataclass(frozen=True)
class ReconcileResult:
    kind: ReconcileKind
    film_id: str

    @property
    def merged(self) -> bool:
        return self.kind == ReconcileKind.MERGED


def resolve_format(text: str, custom_name: Optional[str] = None) -> FilmFormat:
    """Map a user or interchange format string onto a FilmFormat.

    Accepts raw values ("35", "4x5"), display names ("35mm"), "Other" plus a
    custom name, and treats any other text as a custom format name.
    """
    return FilmFormat.parse(text, custom_name)


def _expiry_set(unit: FilmUnit) -> FrozenSet[str]:
    return frozenset(validate_expiry_dates(unit.expiry_dates))


def _merge_key(unit: FilmUnit):
    return (unit.identity_key, unit.format_key, _expiry_set(unit), unit.is_frozen, unit.exposures)


class Reconciler:
    def __init__(self, ledger: FilmLedger, manufacturers: ManufacturerRegistry):
        self.ledger = ledger
        self.manufacturers = manufacturers

    def find_duplicate(self, unit: FilmUnit) -> Optional[FilmUnit]:
        key = _merge_key(unit)
        for existing in self.ledger.all():
            try:
                if _merge_key(existing) == key:
                    return existing
            except ExpiryDateError:
                # Stored rows with dates that no longer validate never merge
                continue
        return None

    def reconcile(self, incoming: FilmUnit) -> ReconcileResult:
        '''Merges ``incoming`` into a duplicate row or creates a new row for it.'''
        self.ledger.check(incoming)
        manufacturer = self.manufacturers.find(incoming.manufacturer)
        unit = incoming.copy(
            name=incoming.name.strip(),
            manufacturer=manufacturer.name if manufacturer else incoming.manufacturer.strip(),
        )

        with self.ledger.store.transaction():
            duplicate = self.find_duplicate(unit)
            if duplicate is not None:
                self.ledger.adjust_quantity(duplicate.id, unit.quantity)
                logger.info(f"Merged {unit.quantity} into film {duplicate.id} ({duplicate.name})")
                return ReconcileResult(ReconcileKind.MERGED, duplicate.id)

            if manufacturer is None:
                self.manufacturers.add(unit.manufacturer)
            created = self.ledger.create(unit.copy(id=""))
        return ReconcileResult(ReconcileKind.CREATED, created.id)


__all__ = ["Reconciler", "ReconcileResult", "ReconcileKind", "resolve_format"]
