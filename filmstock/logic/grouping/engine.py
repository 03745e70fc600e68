"""Grouping engine: projects ledger rows into GroupedFilm aggregates.

Everything here is a pure function of its input. Callers regroup after every
ledger write instead of caching aggregates, and apply filters to the returned
groups so several filtered views can share one grouping pass.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Set, Tuple

from filmstock.domain.FilmUnit import FilmType, FilmUnit, ImageSource
from filmstock.domain.GroupedFilm import FormatInfo, FormatRow, GroupedFilm
from filmstock.utilities.constants import SPEED_RANGES

__all__ = [
    "grouped_films", "GroupFilter", "apply_filters", "facet_values",
    "speed_range_label", "InventoryTotals", "inventory_totals",
]

MANUFACTURER = "manufacturer"
TYPE = "type"
SPEED = "speed"
FORMAT = "format"


def _row(unit: FilmUnit) -> FormatRow:
    return FormatRow(
        film_id=unit.id,
        quantity=unit.quantity,
        expiry_dates=tuple(unit.expiry_dates),
        is_frozen=unit.is_frozen,
        exposures=unit.exposures,
        comments=unit.comments,
    )


def _apply_representative(info: FormatInfo) -> None:
    rep = next((r for r in info.rows if r.quantity > 0), info.rows[0])
    info.expiry_dates = list(rep.expiry_dates)
    info.is_frozen = rep.is_frozen
    info.exposures = rep.exposures
    info.comments = rep.comments


def grouped_films(units: Iterable[FilmUnit]) -> List[GroupedFilm]:
    """Partition rows by identity key, then by format.

    Group and format order follow first appearance in the ledger, so lists do
    not jump around when quantities change.
    """
    groups: Dict[tuple, GroupedFilm] = {}
    infos: Dict[Tuple[tuple, Tuple[str, str]], FormatInfo] = {}
    for unit in units:
        key = unit.identity_key
        group = groups.get(key)
        if group is None:
            group = GroupedFilm(
                id=unit.id,
                name=unit.name,
                manufacturer=unit.manufacturer,
                type=unit.type,
                speed=unit.speed,
                image=unit.image,
            )
            groups[key] = group
        elif group.image.source == ImageSource.AUTO_DETECTED and unit.image.source != ImageSource.AUTO_DETECTED:
            # An explicit choice on any row wins over detection
            group.image = unit.image

        info = infos.get((key, unit.format_key))
        if info is None:
            info = FormatInfo(format=unit.format)
            infos[(key, unit.format_key)] = info
            group.formats.append(info)
        info.quantity += unit.quantity
        info.roll_ids.append(unit.id)
        info.rows.append(_row(unit))

    for info in infos.values():
        _apply_representative(info)
    return list(groups.values())


def speed_range_label(speed: int) -> Optional[str]:
    for label, low, high in SPEED_RANGES:
        if low <= speed <= high:
            return label
    return None


@dataclass
class GroupFilter:
    """Caller-side filter over grouped films; empty sets mean "no restriction"."""

    manufacturers: Set[str] = field(default_factory=set)
    types: Set[FilmType] = field(default_factory=set)
    speed_ranges: Set[str] = field(default_factory=set)
    formats: Set[Tuple[str, str]] = field(default_factory=set)
    frozen_only: bool = False
    hide_empty: bool = False
    expired_only: bool = False


def _matches(group: GroupedFilm, filt: GroupFilter, today: Optional[date], excluding: Optional[str]) -> bool:
    if filt.hide_empty and not group.has_stock:
        return False
    if excluding != MANUFACTURER and filt.manufacturers and group.manufacturer not in filt.manufacturers:
        return False
    if excluding != TYPE and filt.types and group.type not in filt.types:
        return False
    if excluding != SPEED and filt.speed_ranges and speed_range_label(group.speed) not in filt.speed_ranges:
        return False
    if excluding != FORMAT and filt.formats and not any(f.format.key in filt.formats for f in group.formats):
        return False
    if filt.frozen_only and not any(r.is_frozen for f in group.formats for r in f.rows):
        return False
    if filt.expired_only and not group.is_expired(today):
        return False
    return True


def apply_filters(groups: Iterable[GroupedFilm], filt: GroupFilter,
                  today: Optional[date] = None, excluding: Optional[str] = None) -> List[GroupedFilm]:
    return [g for g in groups if _matches(g, filt, today, excluding)]


def facet_values(groups: Iterable[GroupedFilm], filt: GroupFilter, category: str,
                 today: Optional[date] = None) -> list:
    """Values of one filter category still reachable under the other filters.

    Lets a filter picker offer only the choices that would return results.
    """
    remaining = apply_filters(groups, filt, today, excluding=category)
    if category == MANUFACTURER:
        return sorted({g.manufacturer for g in remaining})
    if category == TYPE:
        present = {g.type for g in remaining}
        return [t for t in FilmType if t in present]
    if category == SPEED:
        present = {speed_range_label(g.speed) for g in remaining}
        return [label for label, _, _ in SPEED_RANGES if label in present]
    if category == FORMAT:
        seen: Dict[Tuple[str, str], object] = {}
        for g in remaining:
            for f in g.formats:
                seen.setdefault(f.format.key, f.format)
        return list(seen.values())
    raise ValueError(f"Unknown filter category: {category}")


@dataclass(frozen=True)
class InventoryTotals:
    rolls: int
    sheets: int


def inventory_totals(units: Iterable[FilmUnit]) -> InventoryTotals:
    '''Rolls in inventory (sheet formats excluded) and sheets, from live rows.'''
    rolls = sheets = 0
    for unit in units:
        if unit.is_sheet:
            sheets += unit.quantity
        else:
            rolls += unit.quantity
    return InventoryTotals(rolls=rolls, sheets=sheets)
