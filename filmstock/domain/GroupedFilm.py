"""Display aggregates derived from the ledger: GroupedFilm and its per-format FormatInfo."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from filmstock.domain import ExpiryDate as expiry
from filmstock.domain.FilmUnit import FilmFormat, FilmType, ImageReference


@dataclass(frozen=True)
class FormatRow:
    """One contributing ledger row, kept so distinct batches stay visible."""

    film_id: str
    quantity: int
    expiry_dates: tuple = ()
    is_frozen: bool = False
    exposures: Optional[int] = None
    comments: Optional[str] = None

    def is_expired(self, today: Optional[date] = None) -> bool:
        return expiry.any_past(self.expiry_dates, today)


@dataclass
class FormatInfo:
    """Aggregate of every row of one product in one format.

    `quantity` sums all rows; the representative fields come from the first
    row that still has stock (or the first row when all are finished).
    """

    format: FilmFormat
    quantity: int = 0
    roll_ids: List[str] = field(default_factory=list)
    rows: List[FormatRow] = field(default_factory=list)
    expiry_dates: List[str] = field(default_factory=list)
    is_frozen: bool = False
    exposures: Optional[int] = None
    comments: Optional[str] = None

    @property
    def id(self) -> str:
        return self.roll_ids[0] if self.roll_ids else ""

    @property
    def custom_format_name(self) -> Optional[str]:
        return self.format.custom_name

    @property
    def all_expiry_dates(self) -> List[str]:
        seen: List[str] = []
        for row in self.rows:
            for value in row.expiry_dates:
                if value not in seen:
                    seen.append(value)
        return seen

    def to_dict(self) -> dict:
        return {
            "format": self.format.raw_value,
            "custom_format_name": self.format.custom_name,
            "display_name": self.format.display_name,
            "quantity_unit": self.format.quantity_unit,
            "quantity": self.quantity,
            "roll_ids": list(self.roll_ids),
            "expiry_dates": list(self.expiry_dates),
            "is_frozen": self.is_frozen,
            "exposures": self.exposures,
            "comments": self.comments,
            "rows": [
                {
                    "film_id": r.film_id,
                    "quantity": r.quantity,
                    "expiry_dates": list(r.expiry_dates),
                    "is_frozen": r.is_frozen,
                    "exposures": r.exposures,
                    "comments": r.comments,
                }
                for r in self.rows
            ],
        }


@dataclass
class GroupedFilm:
    """All ledger rows sharing one product identity key."""

    id: str
    name: str
    manufacturer: str
    type: FilmType
    speed: int
    image: ImageReference = field(default_factory=ImageReference.auto)
    formats: List[FormatInfo] = field(default_factory=list)

    @property
    def total_quantity(self) -> int:
        return sum(f.quantity for f in self.formats)

    @property
    def has_stock(self) -> bool:
        return any(f.quantity > 0 for f in self.formats)

    @property
    def roll_ids(self) -> List[str]:
        return [rid for f in self.formats for rid in f.roll_ids]

    @property
    def expiry_dates(self) -> List[str]:
        '''Union of every row's dates, first-seen order.'''
        seen: List[str] = []
        for info in self.formats:
            for value in info.all_expiry_dates:
                if value not in seen:
                    seen.append(value)
        return seen

    def is_expired(self, today: Optional[date] = None) -> bool:
        return expiry.any_past(self.expiry_dates, today)

    def closest_expiry(self, today: Optional[date] = None) -> Optional[expiry.ExpiryDate]:
        return expiry.closest_to_today(self.expiry_dates, today)

    def to_dict(self, today: Optional[date] = None) -> dict:
        closest = self.closest_expiry(today)
        return {
            "id": self.id,
            "name": self.name,
            "manufacturer": self.manufacturer,
            "type": self.type.value,
            "speed": self.speed,
            "image": self.image.to_dict(),
            "total_quantity": self.total_quantity,
            "is_expired": self.is_expired(today),
            "closest_expiry": closest.normalized() if closest else None,
            "formats": [f.to_dict() for f in self.formats],
        }
