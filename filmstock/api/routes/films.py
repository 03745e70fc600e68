from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, Response

from filmstock.api.routes.deps import get_service
from filmstock.domain.FilmUnit import FilmFormat, FilmType
from filmstock.logic.grouping.engine import GroupFilter
from filmstock.logic.inventory_service import InventoryService

router = APIRouter(prefix="/api")


def _filter_from_query(
    manufacturer: List[str] = Query(default=[]),
    type: List[str] = Query(default=[]),
    speed: List[str] = Query(default=[]),
    format: List[str] = Query(default=[]),
    frozen: bool = Query(default=False),
    expired: bool = Query(default=False),
    hide_empty: Optional[bool] = Query(default=None),
) -> GroupFilter:
    filt = InventoryService.default_filter()
    if hide_empty is not None:
        filt.hide_empty = hide_empty
    filt.manufacturers = set(manufacturer)
    filt.types = {FilmType.parse(t) for t in type}
    filt.speed_ranges = set(speed)
    filt.formats = {FilmFormat.parse(f).key for f in format}
    filt.frozen_only = frozen
    filt.expired_only = expired
    return filt


# -------------------- Films --------------------
@router.get("/films")
def list_films(filt: GroupFilter = Depends(_filter_from_query),
               service: InventoryService = Depends(get_service)):
    today = date.today()
    groups = service.grouped(filt, today)
    totals = service.totals()
    return {
        "films": [g.to_dict(today) for g in groups],
        "count": len(groups),
        "totals": {"rolls": totals.rolls, "sheets": totals.sheets},
    }


@router.get("/films/facets")
def film_facets(filt: GroupFilter = Depends(_filter_from_query),
                service: InventoryService = Depends(get_service)):
    facets = service.facets(filt, date.today())
    facets["type"] = [t.value for t in facets["type"]]
    facets["format"] = [f.to_dict() | {"display_name": f.display_name} for f in facets["format"]]
    return facets


@router.post("/films", status_code=201)
def add_film(payload: dict = Body(...), service: InventoryService = Depends(get_service)):
    result = service.add_film(payload)
    return {"result": result.kind.value, "film_id": result.film_id}


@router.post("/films/delete")
def delete_films(ids: List[str] = Body(..., embed=True), service: InventoryService = Depends(get_service)):
    removed = service.delete_films(ids)
    return {"deleted": [u.id for u in removed]}


@router.get("/films/{film_id}")
def get_film(film_id: str, service: InventoryService = Depends(get_service)):
    unit = service.get_film(film_id)
    data = unit.to_dict()
    data["state"] = service.film_state(film_id).value
    return data


@router.put("/films/{film_id}")
def update_film(film_id: str, payload: dict = Body(...), service: InventoryService = Depends(get_service)):
    return service.update_film(film_id, payload).to_dict()


@router.post("/films/{film_id}/adjust")
def adjust_film(film_id: str, delta: int = Body(..., embed=True),
                service: InventoryService = Depends(get_service)):
    return service.adjust_quantity(film_id, delta).to_dict()


@router.get("/films/{film_id}/image")
def film_image(film_id: str, service: InventoryService = Depends(get_service)):
    data = service.image_for(film_id)
    if data is None:
        return Response(status_code=404)
    return Response(content=data, media_type="image/jpeg")


@router.post("/films/{film_id}/image")
async def upload_film_image(film_id: str, request: Request, service: InventoryService = Depends(get_service)):
    data = await request.body()
    if not data:
        return Response(status_code=400)
    return service.set_custom_image(film_id, data).to_dict()


# -------------------- Manufacturers --------------------
@router.get("/manufacturers")
def list_manufacturers(service: InventoryService = Depends(get_service)):
    return [m.to_dict() for m in service.list_manufacturers()]


@router.post("/manufacturers", status_code=201)
def add_manufacturer(payload: dict = Body(...), service: InventoryService = Depends(get_service)):
    return service.add_manufacturer(payload).to_dict()


@router.delete("/manufacturers/{manufacturer_id}")
def delete_manufacturer(manufacturer_id: str, service: InventoryService = Depends(get_service)):
    return service.delete_manufacturer(manufacturer_id).to_dict()


# -------------------- Statistics --------------------
@router.get("/stats")
def stats(service: InventoryService = Depends(get_service)):
    return service.summary(date.today())
