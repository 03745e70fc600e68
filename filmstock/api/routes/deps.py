from fastapi import Request

from filmstock.logic.inventory_service import InventoryService


def get_service(request: Request) -> InventoryService:
    '''The service the app was created with.'''
    return request.app.state.service
