"""Manufacturer domain entity: a film maker, either from the built-in catalog or user-added."""
from uuid import uuid4


class Manufacturer:
    def __init__(self, name: str, is_custom: bool = True, id: str = ""):
        self.id = id or uuid4().hex
        self.name = name
        self.is_custom = is_custom

    def matches(self, name: str) -> bool:
        '''Case-insensitive name comparison.'''
        return self.name.strip().lower() == (name or "").strip().lower()

    def __str__(self) -> str:
        return self.name if not self.is_custom else f"{self.name} (custom)"

    __repr__ = __str__

    def to_dict(self):
        return {"id": self.id, "name": self.name, "is_custom": self.is_custom}

    @staticmethod
    def from_dict(data):
        d = dict(data) if isinstance(data, dict) else {}
        return Manufacturer(
            name=d.get("name", ""),
            is_custom=bool(d.get("is_custom", True)),
            id=d.get("id", ""),
        )
