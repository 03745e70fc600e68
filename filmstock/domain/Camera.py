"""Camera domain entity: a named body that film gets loaded into."""
from typing import Optional
from uuid import uuid4

from filmstock.domain.FilmUnit import FilmFormat


class Camera:
    def __init__(self, name: str, format: Optional[FilmFormat] = None, id: str = ""):
        self.id = id or uuid4().hex
        self.name = name
        # Only used to rank suggestions, never enforced on load
        self.format = format

    def matches(self, name: str) -> bool:
        return self.name.strip().lower() == (name or "").strip().lower()

    @property
    def format_display_name(self) -> str:
        return self.format.display_name if self.format else ""

    def __str__(self) -> str:
        if self.format:
            return f"{self.name} ({self.format.display_name})"
        return self.name

    __repr__ = __str__

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "format": self.format.raw_value if self.format else "",
            "custom_format_name": self.format.custom_name if self.format else None,
        }

    @staticmethod
    def from_dict(data):
        d = dict(data) if isinstance(data, dict) else {}
        fmt = None
        if d.get("format"):
            fmt = FilmFormat.parse(d["format"], d.get("custom_format_name"))
        return Camera(name=d.get("name", ""), format=fmt, id=d.get("id", ""))
