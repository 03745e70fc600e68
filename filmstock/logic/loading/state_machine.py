"""Load/unload state machine for film units.

A unit is IN_STOCK, LOADED (one active LoadedFilm references it) or
FINISHED (quantity 0, nothing loaded). Rolls keep their quantity while in a
camera and lose one when they come out exposed. Sheets leave the box as
soon as they are loaded and only come back when returned unused.

Every transition updates the ledger and the loaded-film table inside one
store transaction, so a refusal or a failed write leaves both untouched.
"""
import logging
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

from filmstock.domain.FilmUnit import FilmFormat
from filmstock.domain.Ledger import FilmLedger
from filmstock.domain.LoadedFilm import DevelopmentStatus, FinishedFilm, LoadedFilm
from filmstock.domain.errors import (
    CapacityExceeded,
    FilmLoaded,
    FinishedFilmNotFound,
    InsufficientStock,
    LoadedFilmNotFound,
    UnitNotFound,
    ValidationError,
)
from filmstock.infra.Record_Store import FINISHED_FILMS, LOADED_FILMS, RecordStore
from filmstock.logic.loading.cameras import CameraRegistry
from filmstock.utilities import config

logger = logging.getLogger(__name__)


class FilmState(str, Enum):
    IN_STOCK = "in_stock"
    LOADED = "loaded"
    FINISHED = "finished"


class FilmLoader:
    def __init__(self, ledger: FilmLedger, store: RecordStore, cameras: CameraRegistry,
                 clock: Callable[[], datetime] = datetime.now,
                 max_loaded: int = config.MAX_LOADED_FILMS):
        self.ledger = ledger
        self.store = store
        self.cameras = cameras
        self._clock = clock
        self.max_loaded = max_loaded

    # --- Queries ----------------------------------------------------------
    def loaded_films(self) -> List[LoadedFilm]:
        '''Active loads, most recently loaded first.'''
        loaded = [LoadedFilm.from_dict(d) for d in self.store.all(LOADED_FILMS)]
        return sorted(loaded, key=lambda lf: lf.loaded_at, reverse=True)

    def get_loaded(self, loaded_id: str) -> LoadedFilm:
        data = self.store.read(LOADED_FILMS, loaded_id)
        if data is None:
            raise LoadedFilmNotFound(loaded_id)
        return LoadedFilm.from_dict(data)

    def loaded_for(self, film_id: str) -> Optional[LoadedFilm]:
        return next((lf for lf in self.loaded_films() if lf.film_id == film_id), None)

    def is_loaded(self, film_id: str) -> bool:
        return self.loaded_for(film_id) is not None

    def can_load(self) -> bool:
        return len(self.store.all(LOADED_FILMS)) < self.max_loaded

    def state_of(self, film_id: str) -> FilmState:
        unit = self.ledger.get(film_id)
        if self.is_loaded(film_id):
            return FilmState.LOADED
        if unit.quantity == 0:
            return FilmState.FINISHED
        return FilmState.IN_STOCK

    def check_quantity_change(self, film_id: str, new_quantity: int) -> None:
        '''A roll in a camera still counts as one unit until it is unloaded.'''
        loaded = self.loaded_for(film_id)
        if loaded is not None and not loaded.format.is_sheet and new_quantity < 1:
            logger.warning(f"Refusing to set film {film_id} to {new_quantity}: a roll is loaded")
            raise FilmLoaded(film_id)

    def finished_films(self) -> List[FinishedFilm]:
        finished = [FinishedFilm.from_dict(d) for d in self.store.all(FINISHED_FILMS)]
        return sorted(finished, key=lambda ff: ff.finished_at, reverse=True)

    # --- Transitions ------------------------------------------------------
    def load(self, film_id: str, format: FilmFormat, camera_name: str, quantity: int = 1,
             shot_at_iso: Optional[int] = None) -> LoadedFilm:
        """Put film from unit ``film_id`` into the named camera.

        Raises CapacityExceeded when the maximum number of films is already
        loaded; checked before anything else. Other precondition failures
        raise InsufficientStock with ``reason`` set to one of not_found,
        format_mismatch, already_loaded, quantity or roll_quantity.
        """
        if not self.can_load():
            logger.warning(f"Refusing to load film {film_id}: {self.max_loaded} films already loaded")
            raise CapacityExceeded(self.max_loaded)

        try:
            unit = self.ledger.get(film_id)
        except UnitNotFound:
            raise InsufficientStock(film_id, quantity, 0, reason="not_found")

        if format.key != unit.format_key:
            raise InsufficientStock(film_id, quantity, unit.quantity, reason="format_mismatch")
        if self.is_loaded(film_id):
            raise InsufficientStock(film_id, quantity, unit.quantity, reason="already_loaded")
        if not isinstance(quantity, int) or quantity < 1:
            raise InsufficientStock(film_id, quantity, unit.quantity, reason="quantity")
        if not unit.is_sheet and quantity != 1:
            raise InsufficientStock(film_id, quantity, unit.quantity, reason="roll_quantity")
        if quantity > unit.quantity:
            raise InsufficientStock(film_id, quantity, unit.quantity, reason="quantity")
        if not (camera_name or "").strip():
            raise ValidationError("camera_name", "camera name is required")
        if shot_at_iso is not None and (not isinstance(shot_at_iso, int) or shot_at_iso <= 0):
            raise ValidationError("shot_at_iso", f"ISO must be a positive integer, got {shot_at_iso!r}")

        with self.store.transaction():
            camera = self.cameras.find_or_create(camera_name, unit.format)
            if unit.is_sheet:
                self.ledger.adjust_quantity(film_id, -quantity)
            loaded = LoadedFilm(
                film_id=film_id,
                format=unit.format,
                camera_name=camera.name,
                quantity=quantity,
                loaded_at=self._clock(),
                shot_at_iso=shot_at_iso,
            )
            self.store.create(LOADED_FILMS, loaded.id, loaded.to_dict())
        logger.info(f"Loaded {unit.name} ({film_id}): {loaded}")
        return loaded

    def unload(self, loaded_id: str, return_unused: bool = False,
               quantity: Optional[int] = None) -> Optional[FinishedFilm]:
        """Take film out of a camera.

        ``quantity`` unloads only part of a sheet load; the rest stays
        loaded. Returns the FinishedFilm recorded for consumed film, or None
        when the film went back into stock unused.
        """
        loaded = self.get_loaded(loaded_id)
        count = loaded.quantity if quantity is None else quantity
        if not loaded.format.is_sheet and count != loaded.quantity:
            raise ValidationError("quantity", "a roll is always unloaded whole")
        if not isinstance(count, int) or not 1 <= count <= loaded.quantity:
            raise ValidationError("quantity", f"can unload between 1 and {loaded.quantity}, got {count!r}")

        finished = None
        with self.store.transaction():
            if count == loaded.quantity:
                self.store.delete(LOADED_FILMS, [loaded.id])
            else:
                remaining = loaded.to_dict()
                remaining["quantity"] = loaded.quantity - count
                self.store.update(LOADED_FILMS, loaded.id, remaining)

            if loaded.format.is_sheet:
                if return_unused:
                    self.ledger.adjust_quantity(loaded.film_id, count)
            elif not return_unused:
                self.ledger.adjust_quantity(loaded.film_id, -1)

            if not return_unused:
                finished = FinishedFilm.from_loaded(loaded, count, self._clock())
                self.store.create(FINISHED_FILMS, finished.id, finished.to_dict())

        action = "returned unused" if return_unused else "finished"
        logger.info(f"Unloaded {count} from {loaded.camera_name} (film {loaded.film_id}), {action}")
        return finished

    def set_development_status(self, finished_id: str, status: DevelopmentStatus) -> FinishedFilm:
        data = self.store.read(FINISHED_FILMS, finished_id)
        if data is None:
            raise FinishedFilmNotFound(finished_id)
        finished = FinishedFilm.from_dict(data)
        finished.status = DevelopmentStatus(status)
        self.store.update(FINISHED_FILMS, finished_id, finished.to_dict())
        logger.info(f"Finished film {finished_id} marked {finished.status.value}")
        return finished


__all__ = ["FilmLoader", "FilmState"]
