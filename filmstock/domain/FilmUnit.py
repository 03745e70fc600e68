"""FilmUnit domain entity: one tracked roll or sheet batch, plus its value types."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple
from uuid import uuid4

from filmstock.domain.errors import ValidationError
from filmstock.utilities.constants import FILM_TYPES, OTHER_FORMAT, ROLL_FORMATS, SHEET_FORMATS


class FilmType(str, Enum):
    BW = "BW"
    COLOR = "Color"
    SLIDE = "Slide"
    INSTANT = "Instant"

    @property
    def display_name(self) -> str:
        return FILM_TYPES[self.value]

    @classmethod
    def parse(cls, text: str) -> "FilmType":
        '''Accepts raw values, display names and a few spelled-out aliases.'''
        key = (text or "").strip().lower().replace(" ", "")
        aliases = {"blackandwhite": cls.BW, "b&w": cls.BW, "b/w": cls.BW, "colour": cls.COLOR}
        if key in aliases:
            return aliases[key]
        for member in cls:
            if key in (member.value.lower(), member.display_name.lower()):
                return member
        raise ValidationError("type", f"unknown film type '{text}'")


class FormatKind(str, Enum):
    THIRTY_FIVE = "35"
    ONE_TWENTY = "120"
    ONE_TEN = "110"
    ONE_TWENTY_SEVEN = "127"
    TWO_TWENTY = "220"
    FOUR_BY_FIVE = "4x5"
    FIVE_BY_SEVEN = "5x7"
    EIGHT_BY_TEN = "8x10"

    @property
    def display_name(self) -> str:
        return ROLL_FORMATS.get(self.value) or SHEET_FORMATS[self.value]

    @property
    def is_sheet(self) -> bool:
        return self.value in SHEET_FORMATS


class FilmFormat(ABC):
    """Physical format: either a built-in kind or a user-named custom format.

    Code switches on the variant (``BuiltInFormat`` / ``CustomFormat``), never
    on a raw string.
    """

    @property
    @abstractmethod
    def key(self) -> Tuple[str, str]:
        ...

    @property
    @abstractmethod
    def display_name(self) -> str:
        ...

    @property
    @abstractmethod
    def raw_value(self) -> str:
        ...

    @property
    def custom_name(self) -> Optional[str]:
        return None

    @property
    def is_sheet(self) -> bool:
        return False

    @property
    def quantity_unit(self) -> str:
        return "Sheets" if self.is_sheet else "Rolls"

    @staticmethod
    def parse(text: str, custom_name: Optional[str] = None) -> "FilmFormat":
        """Resolve a stored or typed format string.

        Built-in formats match on raw value or display name, case-insensitively.
        "Other" (or an empty format) takes ``custom_name``; any other unknown
        text becomes a custom format of that name.
        """
        value = (text or "").strip()
        lowered = value.lower()
        for kind in FormatKind:
            if lowered in (kind.value.lower(), kind.display_name.lower()):
                return BuiltInFormat(kind)
        if not value or lowered == OTHER_FORMAT.lower():
            name = (custom_name or "").strip()
            if not name:
                raise ValidationError("format", "custom format needs a name")
            return CustomFormat(name)
        return CustomFormat(value)

    def to_dict(self) -> dict:
        return {"format": self.raw_value, "custom_format_name": self.custom_name}


@dataclass(frozen=True)
class BuiltInFormat(FilmFormat):
    kind: FormatKind

    @property
    def key(self) -> Tuple[str, str]:
        return ("builtin", self.kind.value)

    @property
    def display_name(self) -> str:
        return self.kind.display_name

    @property
    def raw_value(self) -> str:
        return self.kind.value

    @property
    def is_sheet(self) -> bool:
        return self.kind.is_sheet


@dataclass(frozen=True)
class CustomFormat(FilmFormat):
    name: str

    @property
    def key(self) -> Tuple[str, str]:
        return ("custom", self.name)

    @property
    def display_name(self) -> str:
        return self.name

    @property
    def raw_value(self) -> str:
        return OTHER_FORMAT

    @property
    def custom_name(self) -> Optional[str]:
        return self.name


class ImageSource(str, Enum):
    NONE = "none"
    AUTO_DETECTED = "auto"
    CATALOG = "catalog"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ImageReference:
    """How to find a film's reminder photo; the bytes live in the image store.

    ``value`` is the stored path for CUSTOM and the catalog id for CATALOG.
    """
    source: ImageSource = ImageSource.AUTO_DETECTED
    value: Optional[str] = None

    @classmethod
    def none(cls) -> "ImageReference":
        return cls(ImageSource.NONE)

    @classmethod
    def auto(cls) -> "ImageReference":
        return cls(ImageSource.AUTO_DETECTED)

    @classmethod
    def custom(cls, path: str) -> "ImageReference":
        return cls(ImageSource.CUSTOM, path)

    @classmethod
    def catalog(cls, catalog_id: str) -> "ImageReference":
        return cls(ImageSource.CATALOG, catalog_id)

    def resolve_order(self) -> List[Tuple["ImageSource", Optional[str]]]:
        """Sources to try, in order, when showing this image.

        An explicit custom photo or catalog entry comes first and falls back
        to detection when its file is gone. NONE means show no image at all.
        """
        if self.source == ImageSource.NONE:
            return []
        if self.source == ImageSource.AUTO_DETECTED:
            return [(ImageSource.AUTO_DETECTED, None)]
        return [(self.source, self.value), (ImageSource.AUTO_DETECTED, None)]

    def to_dict(self) -> dict:
        return {"source": self.source.value, "value": self.value}

    @staticmethod
    def from_dict(data) -> "ImageReference":
        d = data if isinstance(data, dict) else {}
        try:
            source = ImageSource(d.get("source", ImageSource.AUTO_DETECTED.value))
        except ValueError:
            source = ImageSource.AUTO_DETECTED
        value = d.get("value")
        # A custom or catalog reference without a target falls back to detection
        if source in (ImageSource.CUSTOM, ImageSource.CATALOG) and not value:
            source, value = ImageSource.AUTO_DETECTED, None
        return ImageReference(source, value)


def parse_timestamp(value) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


class FilmUnit:
    def __init__(self, name: str, manufacturer: str, type: FilmType, speed: int,
                 format: FilmFormat, quantity: int = 1, expiry_dates: Optional[List[str]] = None,
                 is_frozen: bool = False, exposures: Optional[int] = None,
                 comments: Optional[str] = None, image: Optional[ImageReference] = None,
                 id: str = "", created_at: Optional[datetime] = None,
                 updated_at: Optional[datetime] = None):
        self.id = id
        self.name = name
        self.manufacturer = manufacturer
        self.type = type
        self.speed = speed
        self.format = format
        self.quantity = quantity
        self.expiry_dates = list(expiry_dates) if expiry_dates else []
        self.is_frozen = is_frozen
        self.exposures = exposures
        self.comments = comments
        self.image = image or ImageReference.auto()
        self.created_at = created_at
        self.updated_at = updated_at

    @staticmethod
    def new_id() -> str:
        return uuid4().hex

    @property
    def identity_key(self) -> Tuple[str, str, FilmType, int]:
        '''(name, manufacturer, type, speed): "the same film stock".'''
        return (self.name, self.manufacturer, self.type, self.speed)

    @property
    def format_key(self) -> Tuple[str, str]:
        return self.format.key

    @property
    def is_sheet(self) -> bool:
        return self.format.is_sheet

    @property
    def is_finished(self) -> bool:
        return self.quantity == 0

    def copy(self, **changes) -> "FilmUnit":
        fields = {
            "id": self.id, "name": self.name, "manufacturer": self.manufacturer,
            "type": self.type, "speed": self.speed, "format": self.format,
            "quantity": self.quantity, "expiry_dates": list(self.expiry_dates),
            "is_frozen": self.is_frozen, "exposures": self.exposures,
            "comments": self.comments, "image": self.image,
            "created_at": self.created_at, "updated_at": self.updated_at,
        }
        fields.update(changes)
        return FilmUnit(**fields)

    def __eq__(self, other) -> bool:
        if not isinstance(other, FilmUnit):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    __hash__ = None

    def __str__(self) -> str:
        parts = [f"{self.manufacturer} {self.name} {self.speed} ({self.type.display_name})",
                 f"{self.quantity}x {self.format.display_name}"]
        if self.expiry_dates:
            parts.append("Exp: " + ", ".join(self.expiry_dates))
        if self.is_frozen:
            parts.append("frozen")
        return " - ".join(parts)

    __repr__ = __str__

    def to_dict(self) -> dict:
        '''Converts the FilmUnit to a plain dictionary for the record store.'''
        return {
            "id": self.id,
            "name": self.name,
            "manufacturer": self.manufacturer,
            "type": self.type.value,
            "speed": self.speed,
            **self.format.to_dict(),
            "quantity": self.quantity,
            "expiry_dates": list(self.expiry_dates),
            "is_frozen": self.is_frozen,
            "exposures": self.exposures,
            "comments": self.comments,
            "image": self.image.to_dict(),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @staticmethod
    def from_dict(data) -> "FilmUnit":
        '''Creates a FilmUnit from a stored dictionary. Ignores unknown keys.'''
        d = dict(data) if isinstance(data, dict) else {}
        expiry = d.get("expiry_dates") or []
        if isinstance(expiry, str):
            expiry = [part.strip() for part in expiry.split(",") if part.strip()]
        return FilmUnit(
            id=d.get("id", ""),
            name=d.get("name", ""),
            manufacturer=d.get("manufacturer", ""),
            type=FilmType.parse(d.get("type", FilmType.BW.value)),
            speed=int(d.get("speed") or 0),
            format=FilmFormat.parse(d.get("format", ""), d.get("custom_format_name")),
            quantity=int(d.get("quantity") or 0),
            expiry_dates=expiry,
            is_frozen=bool(d.get("is_frozen") or False),
            exposures=d.get("exposures"),
            comments=d.get("comments"),
            image=ImageReference.from_dict(d.get("image")),
            created_at=parse_timestamp(d.get("created_at")),
            updated_at=parse_timestamp(d.get("updated_at")),
        )
