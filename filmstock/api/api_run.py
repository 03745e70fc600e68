from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging

from filmstock.api.routes import films, loaded, transfer
from filmstock.domain.errors import FilmStockError
from filmstock.logic.inventory_service import InventoryService
from filmstock.utilities import config

# Logging
logger = logging.getLogger(__name__)

# Domain error code -> HTTP status; anything unlisted is a bad request
STATUS_BY_CODE = {
    "UNIT_NOT_FOUND": 404,
    "LOADED_FILM_NOT_FOUND": 404,
    "FINISHED_FILM_NOT_FOUND": 404,
    "CAMERA_NOT_FOUND": 404,
    "MANUFACTURER_NOT_FOUND": 404,
    "DUPLICATE_UNIT": 409,
    "INSUFFICIENT_STOCK": 409,
    "CAPACITY_EXCEEDED": 409,
    "FILM_LOADED": 409,
    "CAMERA_IN_USE": 409,
    "MANUFACTURER_IN_USE": 409,
    "MANUFACTURER_PROTECTED": 409,
}


def create_app(service: InventoryService) -> FastAPI:
    """Build the JSON API around an already constructed service.

    Routes only translate HTTP to service intents; every rule lives in the
    service. Refusals come back as ``{"error": {...}}`` with the error's code
    and structured fields.
    """
    app = FastAPI(title="FilmStock Inventory API", version=config.APP_VERSION)
    app.state.service = service

    @app.exception_handler(FilmStockError)
    async def _film_stock_error(request: Request, exc: FilmStockError):
        status = STATUS_BY_CODE.get(exc.code, 400)
        logger.warning(f"{request.method} {request.url.path} refused ({status}): {exc.message}")
        return JSONResponse(status_code=status, content={"error": exc.to_dict()})

    @app.get("/api/health")
    def health():
        return {"status": "ok", "version": config.APP_VERSION}

    app.include_router(films.router)
    app.include_router(loaded.router)
    app.include_router(transfer.router)
    return app


__all__ = ["create_app", "STATUS_BY_CODE"]
