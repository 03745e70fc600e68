"""Camera registry: named bodies film is loaded into, unique by case-insensitive name."""
import logging
from typing import List, Optional

from filmstock.domain.Camera import Camera
from filmstock.domain.FilmUnit import FilmFormat
from filmstock.domain.errors import CameraInUse, CameraNotFound, ValidationError
from filmstock.infra.Record_Store import CAMERAS, LOADED_FILMS, RecordStore

logger = logging.getLogger(__name__)


class CameraRegistry:
    def __init__(self, store: RecordStore):
        self.store = store

    def all(self) -> List[Camera]:
        return [Camera.from_dict(d) for d in self.store.all(CAMERAS)]

    def get(self, camera_id: str) -> Camera:
        data = self.store.read(CAMERAS, camera_id)
        if data is None:
            raise CameraNotFound(camera_id)
        return Camera.from_dict(data)

    def find(self, name: str) -> Optional[Camera]:
        return next((c for c in self.all() if c.matches(name)), None)

    def add(self, name: str, format: Optional[FilmFormat] = None) -> Camera:
        clean = (name or "").strip()
        if not clean:
            raise ValidationError("camera_name", "camera name is required")
        if self.find(clean) is not None:
            raise ValidationError("camera_name", f"camera '{clean}' already exists")
        camera = Camera(name=clean, format=format)
        self.store.create(CAMERAS, camera.id, camera.to_dict())
        logger.info(f"Added camera {camera}")
        return camera

    def find_or_create(self, name: str, format: Optional[FilmFormat] = None) -> Camera:
        '''Existing camera with that name (any case), else a new one with the given format affinity.'''
        existing = self.find(name)
        if existing is not None:
            return existing
        return self.add(name, format)

    def suggestions(self, format: Optional[FilmFormat] = None) -> List[Camera]:
        """Cameras ordered for a picker.

        Cameras set up for ``format`` come first, then cameras without a
        format, then the rest; names sort alphabetically inside each band.
        """
        def rank(camera: Camera):
            if format is not None and camera.format is not None and camera.format.key == format.key:
                band = 0
            elif camera.format is None:
                band = 1
            else:
                band = 2
            return (band, camera.name.lower())

        return sorted(self.all(), key=rank)

    def delete(self, camera_id: str) -> Camera:
        camera = self.get(camera_id)
        if any(camera.matches(d.get("camera_name", "")) for d in self.store.all(LOADED_FILMS)):
            logger.warning(f"Refusing to delete camera {camera.name}: film still loaded")
            raise CameraInUse(camera.name)
        self.store.delete(CAMERAS, [camera_id])
        logger.info(f"Deleted camera {camera.name}")
        return camera
