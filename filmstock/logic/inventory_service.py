"""Application service: one explicitly constructed object that owns the store and
every engine built on it.

Hosts (the API, tests, scripts) receive an ``InventoryService`` instead of
reaching for module-level state. Each intent validates its input, runs the
mutation, then publishes a change event on the service's own bus. Callers
regroup with ``grouped()`` after a write; nothing is cached in between.
"""
import logging
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Union

from filmstock.domain.Camera import Camera
from filmstock.domain.FilmUnit import FilmFormat, FilmUnit, ImageReference
from filmstock.domain.GroupedFilm import GroupedFilm
from filmstock.domain.Ledger import FilmLedger
from filmstock.domain.LoadedFilm import DevelopmentStatus, FinishedFilm, LoadedFilm
from filmstock.domain.Manufacturer import Manufacturer
from filmstock.domain.errors import FilmLoaded
from filmstock.events.Event_Bus import EventBus
from filmstock.infra.Image_Store import FileImageStore, ImageStore, resolve_image
from filmstock.infra.Record_Store import JsonRecordStore, RecordStore
from filmstock.infra.paths import INVENTORY_FILE
from filmstock.logic.grouping.engine import (
    FORMAT, MANUFACTURER, SPEED, TYPE,
    GroupFilter, InventoryTotals, apply_filters, facet_values, grouped_films, inventory_totals,
)
from filmstock.logic.loading.cameras import CameraRegistry
from filmstock.logic.loading.state_machine import FilmLoader, FilmState
from filmstock.logic.reconciliation.engine import ReconcileResult, Reconciler
from filmstock.logic.reconciliation.manufacturers import ManufacturerRegistry
from filmstock.logic.reporting.statistics import InventoryStatistics
from filmstock.utilities import config
from filmstock.utilities.constants import LEDGER_CHANGED, LOADED_FILMS_CHANGED
from filmstock.utilities.export_import import ImportPreview, InventoryExporter, InventoryImporter
from filmstock.utilities.validators import (
    CameraInput, FilmInput, LoadFilmInput, ManufacturerInput, UnloadFilmInput, parse_input,
)

logger = logging.getLogger(__name__)


class InventoryService:
    def __init__(self, store: RecordStore, clock: Callable[[], datetime] = datetime.now,
                 image_store: Optional[ImageStore] = None, bus: Optional[EventBus] = None,
                 max_loaded: int = config.MAX_LOADED_FILMS):
        self.store = store
        self.bus = bus or EventBus()
        self.images = image_store
        self.ledger = FilmLedger(store, clock)
        self.cameras = CameraRegistry(store)
        self.loader = FilmLoader(self.ledger, store, self.cameras, clock, max_loaded)
        self.manufacturers = ManufacturerRegistry(store, self.ledger)
        self.reconciler = Reconciler(self.ledger, self.manufacturers)
        self.statistics = InventoryStatistics(self.ledger, self.loader)
        self.exporter = InventoryExporter(self.ledger, self.statistics, clock=clock)
        self.importer = InventoryImporter(self.reconciler)

    def _ledger_changed(self, action: str, film_ids: List[str]) -> None:
        self.bus.publish(LEDGER_CHANGED, {"action": action, "film_ids": list(film_ids)})

    def _loaded_changed(self, action: str, loaded_id: str, film_id: str) -> None:
        self.bus.publish(LOADED_FILMS_CHANGED, {"action": action, "loaded_id": loaded_id, "film_id": film_id})

    # --- Films ------------------------------------------------------------
    def add_film(self, data: Union[dict, FilmInput], image: Optional[ImageReference] = None) -> ReconcileResult:
        film = data if isinstance(data, FilmInput) else parse_input(FilmInput, data)
        result = self.reconciler.reconcile(film.to_unit(image=image))
        self._ledger_changed(result.kind.value, [result.film_id])
        return result

    def update_film(self, film_id: str, data: Union[dict, FilmInput]) -> FilmUnit:
        '''Replaces a row's fields; id, created_at and image stay.'''
        existing = self.ledger.get(film_id)
        film = data if isinstance(data, FilmInput) else parse_input(FilmInput, data)
        unit = film.to_unit(image=existing.image, id=film_id)
        self.loader.check_quantity_change(film_id, unit.quantity)
        with self.store.transaction():
            manufacturer = self.manufacturers.add(unit.manufacturer)
            updated = self.ledger.update(unit.copy(manufacturer=manufacturer.name))
        self._ledger_changed("updated", [film_id])
        return updated

    def delete_films(self, film_ids: List[str]) -> List[FilmUnit]:
        for film_id in film_ids:
            if self.loader.is_loaded(film_id):
                logger.warning(f"Refusing to delete film {film_id}: loaded in a camera")
                raise FilmLoaded(film_id)
        removed = self.ledger.delete(film_ids)
        self._ledger_changed("deleted", [u.id for u in removed])
        return removed

    def adjust_quantity(self, film_id: str, delta: int) -> FilmUnit:
        self.loader.check_quantity_change(film_id, self.ledger.get(film_id).quantity + delta)
        unit = self.ledger.adjust_quantity(film_id, delta)
        self._ledger_changed("adjusted", [film_id])
        return unit

    def get_film(self, film_id: str) -> FilmUnit:
        return self.ledger.get(film_id)

    def film_state(self, film_id: str) -> FilmState:
        return self.loader.state_of(film_id)

    # --- Views ------------------------------------------------------------
    @staticmethod
    def default_filter() -> GroupFilter:
        return GroupFilter(hide_empty=config.HIDE_EMPTY_BY_DEFAULT)

    def grouped(self, filt: Optional[GroupFilter] = None, today: Optional[date] = None) -> List[GroupedFilm]:
        groups = grouped_films(self.ledger.all())
        return apply_filters(groups, filt, today) if filt is not None else groups

    def facets(self, filt: GroupFilter, today: Optional[date] = None) -> Dict[str, list]:
        groups = grouped_films(self.ledger.all())
        return {category: facet_values(groups, filt, category, today)
                for category in (MANUFACTURER, TYPE, SPEED, FORMAT)}

    def totals(self) -> InventoryTotals:
        return inventory_totals(self.ledger.all())

    def summary(self, today: Optional[date] = None) -> Dict:
        return self.statistics.summary(today)

    # --- Loading ----------------------------------------------------------
    def can_load(self) -> bool:
        return self.loader.can_load()

    def load_film(self, data: Union[dict, LoadFilmInput]) -> LoadedFilm:
        req = data if isinstance(data, LoadFilmInput) else parse_input(LoadFilmInput, data)
        loaded = self.loader.load(req.film_id, req.film_format(), req.camera_name,
                                  req.quantity, req.shot_at_iso)
        self._loaded_changed("loaded", loaded.id, loaded.film_id)
        if loaded.format.is_sheet:
            self._ledger_changed("adjusted", [loaded.film_id])
        return loaded

    def unload_film(self, loaded_id: str, data: Union[dict, UnloadFilmInput, None] = None) -> Optional[FinishedFilm]:
        req = data if isinstance(data, UnloadFilmInput) else parse_input(UnloadFilmInput, data or {})
        loaded = self.loader.get_loaded(loaded_id)
        finished = self.loader.unload(loaded_id, req.return_unused, req.quantity)
        self._loaded_changed("unloaded", loaded_id, loaded.film_id)
        if loaded.format.is_sheet == req.return_unused:
            # Sheets returned to the box or a roll used up: the row's quantity moved
            self._ledger_changed("adjusted", [loaded.film_id])
        return finished

    def loaded_films(self) -> List[LoadedFilm]:
        return self.loader.loaded_films()

    def finished_films(self) -> List[FinishedFilm]:
        return self.loader.finished_films()

    def set_development_status(self, finished_id: str, status: Union[str, DevelopmentStatus]) -> FinishedFilm:
        return self.loader.set_development_status(finished_id, DevelopmentStatus(status))

    # --- Cameras ----------------------------------------------------------
    def add_camera(self, data: Union[dict, CameraInput]) -> Camera:
        req = data if isinstance(data, CameraInput) else parse_input(CameraInput, data)
        return self.cameras.add(req.name, req.film_format())

    def camera_suggestions(self, format: Optional[FilmFormat] = None) -> List[Camera]:
        return self.cameras.suggestions(format)

    def delete_camera(self, camera_id: str) -> Camera:
        return self.cameras.delete(camera_id)

    # --- Manufacturers ----------------------------------------------------
    def list_manufacturers(self) -> List[Manufacturer]:
        return self.manufacturers.all()

    def add_manufacturer(self, data: Union[dict, ManufacturerInput]) -> Manufacturer:
        req = data if isinstance(data, ManufacturerInput) else parse_input(ManufacturerInput, data)
        return self.manufacturers.add(req.name)

    def delete_manufacturer(self, manufacturer_id: str) -> Manufacturer:
        return self.manufacturers.delete(manufacturer_id)

    # --- Import / export --------------------------------------------------
    def export(self, fmt: str = "json", today: Optional[date] = None) -> str:
        return self.exporter.export_csv(today) if fmt == "csv" else self.exporter.export_json(today)

    def preview_import(self, data: Union[bytes, str], filename: Optional[str] = None) -> ImportPreview:
        return self.importer.preview(data, filename)

    def commit_import(self, rows: List[FilmUnit]) -> List[ReconcileResult]:
        results = self.importer.commit(rows)
        if results:
            self._ledger_changed("imported", [r.film_id for r in results])
        return results

    # --- Images -----------------------------------------------------------
    def set_custom_image(self, film_id: str, data: bytes) -> FilmUnit:
        if self.images is None:
            raise RuntimeError("No image store configured")
        unit = self.ledger.get(film_id)
        path = self.images.store(data, unit.manufacturer, unit.name)
        updated = self.ledger.update(unit.copy(image=ImageReference.custom(path)))
        self._ledger_changed("updated", [film_id])
        return updated

    def image_for(self, film_id: str) -> Optional[bytes]:
        if self.images is None:
            return None
        unit = self.ledger.get(film_id)
        return resolve_image(self.images, unit.image, unit.manufacturer, unit.name)


def build_service(store: Optional[RecordStore] = None, **kwargs) -> InventoryService:
    """Construct the service for a process.

    Without a store, the inventory lives in the JSON file under the data
    directory. The built-in manufacturer catalog is seeded on every start.
    """
    if store is None:
        store = JsonRecordStore(INVENTORY_FILE)
    kwargs.setdefault("image_store", FileImageStore())
    service = InventoryService(store, **kwargs)
    service.manufacturers.seed()
    logger.info(f"Inventory service ready: {len(service.ledger)} film row(s)")
    return service


__all__ = ["InventoryService", "build_service"]
