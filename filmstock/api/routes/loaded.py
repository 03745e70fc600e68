from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from filmstock.api.routes.deps import get_service
from filmstock.domain.FilmUnit import FilmFormat
from filmstock.logic.inventory_service import InventoryService

router = APIRouter(prefix="/api")


# -------------------- Loaded films --------------------
@router.get("/loaded")
def list_loaded(service: InventoryService = Depends(get_service)):
    loaded = service.loaded_films()
    return {
        "loaded": [lf.to_dict() for lf in loaded],
        "count": len(loaded),
        "can_load": service.can_load(),
    }


@router.post("/loaded", status_code=201)
def load_film(payload: dict = Body(...), service: InventoryService = Depends(get_service)):
    return service.load_film(payload).to_dict()


@router.post("/loaded/{loaded_id}/unload")
def unload_film(loaded_id: str, payload: Optional[dict] = Body(default=None),
                service: InventoryService = Depends(get_service)):
    finished = service.unload_film(loaded_id, payload)
    return {"finished": finished.to_dict() if finished else None}


# -------------------- Finished films --------------------
@router.get("/finished")
def list_finished(service: InventoryService = Depends(get_service)):
    return [f.to_dict() for f in service.finished_films()]


@router.put("/finished/{finished_id}/status")
def set_status(finished_id: str, status: str = Body(..., embed=True),
               service: InventoryService = Depends(get_service)):
    return service.set_development_status(finished_id, status).to_dict()


# -------------------- Cameras --------------------
@router.get("/cameras")
def list_cameras(format: Optional[str] = Query(default=None), custom_format_name: Optional[str] = Query(default=None),
                 service: InventoryService = Depends(get_service)):
    fmt = FilmFormat.parse(format, custom_format_name) if format else None
    return [c.to_dict() for c in service.camera_suggestions(fmt)]


@router.post("/cameras", status_code=201)
def add_camera(payload: dict = Body(...), service: InventoryService = Depends(get_service)):
    return service.add_camera(payload).to_dict()


@router.delete("/cameras/{camera_id}")
def delete_camera(camera_id: str, service: InventoryService = Depends(get_service)):
    return service.delete_camera(camera_id).to_dict()
