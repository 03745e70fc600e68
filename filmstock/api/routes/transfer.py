from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, Response

from filmstock.api.routes.deps import get_service
from filmstock.domain.FilmUnit import FilmUnit
from filmstock.logic.inventory_service import InventoryService

router = APIRouter(prefix="/api")

MEDIA_TYPES = {"json": "application/json", "csv": "text/csv"}


@router.get("/export")
def export_inventory(fmt: str = Query(default="json", pattern="^(json|csv)$"),
                     service: InventoryService = Depends(get_service)):
    body = service.export(fmt)
    headers = {"Content-Disposition": f'attachment; filename="FilmStock_Export.{fmt}"'}
    return Response(content=body, media_type=MEDIA_TYPES[fmt], headers=headers)


@router.post("/import/preview")
async def import_preview(request: Request, filename: Optional[str] = Query(default=None),
                         service: InventoryService = Depends(get_service)):
    """Raw file bytes in the body; nothing is written until /import/commit."""
    data = await request.body()
    return service.preview_import(data, filename).to_dict()


@router.post("/import/commit")
def import_commit(rows: List[dict] = Body(..., embed=True), service: InventoryService = Depends(get_service)):
    units = [FilmUnit.from_dict(r) for r in rows]
    results = service.commit_import(units)
    return {
        "results": [{"result": r.kind.value, "film_id": r.film_id} for r in results],
        "created": sum(1 for r in results if not r.merged),
        "merged": sum(1 for r in results if r.merged),
    }
