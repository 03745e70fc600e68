"""Camera-loading records: active LoadedFilm entries and the FinishedFilm history."""
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from filmstock.domain.FilmUnit import FilmFormat, parse_timestamp


class DevelopmentStatus(str, Enum):
    TO_DEVELOP = "to_develop"
    IN_DEVELOPMENT = "in_development"
    DEVELOPED = "developed"


class LoadedFilm:
    def __init__(self, film_id: str, format: FilmFormat, camera_name: str, quantity: int = 1,
                 loaded_at: Optional[datetime] = None, shot_at_iso: Optional[int] = None,
                 id: str = ""):
        self.id = id or uuid4().hex
        self.film_id = film_id
        self.format = format
        self.camera_name = camera_name
        self.quantity = quantity
        self.loaded_at = loaded_at or datetime.now()
        self.shot_at_iso = shot_at_iso

    def effective_iso(self, box_speed: int) -> int:
        '''ISO the film is exposed at: the override if set, else the box speed.'''
        return self.shot_at_iso if self.shot_at_iso is not None else box_speed

    def __str__(self) -> str:
        return f"{self.quantity}x {self.format.display_name} in {self.camera_name} since {self.loaded_at:%Y-%m-%d}"

    __repr__ = __str__

    def to_dict(self):
        return {
            "id": self.id,
            "film_id": self.film_id,
            **self.format.to_dict(),
            "camera_name": self.camera_name,
            "quantity": self.quantity,
            "loaded_at": self.loaded_at.isoformat(),
            "shot_at_iso": self.shot_at_iso,
        }

    @staticmethod
    def from_dict(data):
        d = dict(data) if isinstance(data, dict) else {}
        return LoadedFilm(
            id=d.get("id", ""),
            film_id=d.get("film_id", ""),
            format=FilmFormat.parse(d.get("format", ""), d.get("custom_format_name")),
            camera_name=d.get("camera_name", ""),
            quantity=int(d.get("quantity") or 1),
            loaded_at=parse_timestamp(d.get("loaded_at")),
            shot_at_iso=d.get("shot_at_iso"),
        )


class FinishedFilm:
    """A loading that ended with the film consumed.

    The camera name is a snapshot so history survives camera renames and deletes.
    """

    def __init__(self, film_id: str, format: FilmFormat, camera_name: str, quantity: int,
                 loaded_at: datetime, finished_at: Optional[datetime] = None,
                 shot_at_iso: Optional[int] = None,
                 status: DevelopmentStatus = DevelopmentStatus.TO_DEVELOP, id: str = ""):
        self.id = id or uuid4().hex
        self.film_id = film_id
        self.format = format
        self.camera_name = camera_name
        self.quantity = quantity
        self.loaded_at = loaded_at
        self.finished_at = finished_at or datetime.now()
        self.shot_at_iso = shot_at_iso
        self.status = status

    @staticmethod
    def from_loaded(loaded: LoadedFilm, quantity: int, finished_at: datetime) -> "FinishedFilm":
        return FinishedFilm(
            film_id=loaded.film_id,
            format=loaded.format,
            camera_name=loaded.camera_name,
            quantity=quantity,
            loaded_at=loaded.loaded_at,
            finished_at=finished_at,
            shot_at_iso=loaded.shot_at_iso,
        )

    def to_dict(self):
        return {
            "id": self.id,
            "film_id": self.film_id,
            **self.format.to_dict(),
            "camera_name": self.camera_name,
            "quantity": self.quantity,
            "loaded_at": self.loaded_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "shot_at_iso": self.shot_at_iso,
            "status": self.status.value,
        }

    @staticmethod
    def from_dict(data):
        d = dict(data) if isinstance(data, dict) else {}
        try:
            status = DevelopmentStatus(d.get("status") or DevelopmentStatus.TO_DEVELOP.value)
        except ValueError:
            status = DevelopmentStatus.TO_DEVELOP
        return FinishedFilm(
            id=d.get("id", ""),
            film_id=d.get("film_id", ""),
            format=FilmFormat.parse(d.get("format", ""), d.get("custom_format_name")),
            camera_name=d.get("camera_name", ""),
            quantity=int(d.get("quantity") or 0),
            loaded_at=parse_timestamp(d.get("loaded_at")) or datetime.now(),
            finished_at=parse_timestamp(d.get("finished_at")),
            shot_at_iso=d.get("shot_at_iso"),
            status=status,
        )
