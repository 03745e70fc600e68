"""Typed exceptions for the inventory engine.

Every error carries a machine-readable ``code`` plus the structured data a
caller needs to highlight the offending input, so nobody has to parse
message strings:

    FilmStockError
    +-- ValidationError          (field, index)
    |   +-- ExpiryDateError      (kind, value, index)
    +-- UnitNotFound / DuplicateUnit
    +-- InsufficientStock        (film_id, requested, available, reason)
    +-- CapacityExceeded         (limit)
    +-- LoadedFilmNotFound / FinishedFilmNotFound / FilmLoaded
    +-- CameraNotFound / CameraInUse
    +-- ManufacturerInUse / ManufacturerNotFound / ManufacturerProtected
    +-- ImportFormatError

Refusals never leave the ledger or the loaded-film set partially updated.
"""
from typing import List, Optional


class FilmStockError(Exception):
    code = "FILMSTOCK_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class ValidationError(FilmStockError):
    code = "VALIDATION_ERROR"

    def __init__(self, field: str, message: str, index: Optional[int] = None):
        self.field = field
        self.index = index
        where = field if index is None else f"{field}[{index}]"
        super().__init__(f"{where}: {message}")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({"field": self.field, "index": self.index})
        return data


class ExpiryDateError(ValidationError):
    code = "INVALID_EXPIRY_DATE"

    # kind is one of: format, year, month, day
    def __init__(self, kind: str, value: str, index: Optional[int] = None):
        self.kind = kind
        self.value = value
        messages = {
            "format": f"'{value}' is not YYYY, MM/YYYY or MM/DD/YYYY",
            "year": f"year in '{value}' is out of range",
            "month": f"month in '{value}' must be between 1 and 12",
            "day": f"day in '{value}' does not exist",
        }
        super().__init__("expiry_dates", messages.get(kind, f"invalid date '{value}'"), index)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({"kind": self.kind, "value": self.value})
        return data


class UnitNotFound(FilmStockError):
    code = "UNIT_NOT_FOUND"

    def __init__(self, film_id: str):
        self.film_id = film_id
        super().__init__(f"Film unit '{film_id}' not found")


class DuplicateUnit(FilmStockError):
    code = "DUPLICATE_UNIT"

    def __init__(self, film_id: str):
        self.film_id = film_id
        super().__init__(f"Film unit '{film_id}' already exists")


class InsufficientStock(FilmStockError):
    code = "INSUFFICIENT_STOCK"

    def __init__(self, film_id: str, requested: int, available: int, reason: str = "quantity"):
        self.film_id = film_id
        self.requested = requested
        self.available = available
        self.reason = reason
        super().__init__(
            f"Cannot take {requested} from film '{film_id}' ({available} available, {reason})"
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            "film_id": self.film_id,
            "requested": self.requested,
            "available": self.available,
            "reason": self.reason,
        })
        return data


class CapacityExceeded(FilmStockError):
    code = "CAPACITY_EXCEEDED"

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"At most {limit} films can be loaded at the same time")


class LoadedFilmNotFound(FilmStockError):
    code = "LOADED_FILM_NOT_FOUND"

    def __init__(self, loaded_id: str):
        self.loaded_id = loaded_id
        super().__init__(f"Loaded film '{loaded_id}' not found")


class FilmLoaded(FilmStockError):
    code = "FILM_LOADED"

    def __init__(self, film_id: str):
        self.film_id = film_id
        super().__init__(f"Film unit '{film_id}' is loaded in a camera")


class CameraNotFound(FilmStockError):
    code = "CAMERA_NOT_FOUND"

    def __init__(self, camera_id: str):
        self.camera_id = camera_id
        super().__init__(f"Camera '{camera_id}' not found")


class CameraInUse(FilmStockError):
    code = "CAMERA_IN_USE"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Camera '{name}' still has film loaded")


class ManufacturerInUse(FilmStockError):
    code = "MANUFACTURER_IN_USE"

    def __init__(self, name: str, film_ids: List[str]):
        self.name = name
        self.film_ids = list(film_ids)
        super().__init__(f"Manufacturer '{name}' is used by {len(self.film_ids)} film(s)")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({"name": self.name, "film_ids": self.film_ids})
        return data


class ManufacturerNotFound(FilmStockError):
    code = "MANUFACTURER_NOT_FOUND"

    def __init__(self, manufacturer_id: str):
        self.manufacturer_id = manufacturer_id
        super().__init__(f"Manufacturer '{manufacturer_id}' not found")


class ManufacturerProtected(FilmStockError):
    code = "MANUFACTURER_PROTECTED"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Manufacturer '{name}' is part of the built-in catalog")


class ImportFormatError(FilmStockError):
    code = "IMPORT_FORMAT_ERROR"


class FinishedFilmNotFound(FilmStockError):
    code = "FINISHED_FILM_NOT_FOUND"

    def __init__(self, finished_id: str):
        self.finished_id = finished_id
        super().__init__(f"Finished film '{finished_id}' not found")
