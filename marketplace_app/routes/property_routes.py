from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi_utils.cbv import cbv

from core.dependencies import get_property_service
from core.safe_handler import safe_handler
from models.enums import AvailabilityStatus, PropertyPurpose, PropertyTypes
from schemas.schema import (
    AvailabilityUpdate,
    MessageOut,
    PropertyCreate,
    PropertyOut,
    PropertyPageOut,
    PropertySummaryOut,
    PropertyUpdate,
    PropertyVerify,
)
from services.property_service import PropertyService

router = APIRouter(tags=["Property Management"])


@cbv(router=router)
class PropertyRoutes:
    service: PropertyService = Depends(get_property_service)

    @router.post("/create", response_model=PropertyOut, status_code=201)
    @safe_handler
    async def create(self, data: PropertyCreate):
        return await self.service.create_property(data)

    @router.get("/list", response_model=PropertyPageOut)
    @safe_handler
    async def list_properties(
        self,
        page: int = Query(1, ge=1),
        per_page: int = Query(20, ge=1, le=100),
    ):
        return await self.service.list_properties(page=page, per_page=per_page)

    @router.get("/search", response_model=PropertyPageOut)
    @safe_handler
    async def search(
        self,
        purpose: Optional[PropertyPurpose] = None,
        property_type: Optional[PropertyTypes] = None,
        city: Optional[str] = None,
        area: Optional[str] = None,
        availability_status: Optional[AvailabilityStatus] = None,
        search: Optional[str] = Query(None, max_length=100),
        page: int = Query(1, ge=1),
        per_page: int = Query(20, ge=1, le=100),
    ):
        return await self.service.search_properties(
            purpose=purpose,
            property_type=property_type,
            city=city,
            area=area,
            availability_status=availability_status,
            search=search,
            page=page,
            per_page=per_page,
        )

    @router.get("/cities", response_model=List[str])
    @safe_handler
    async def cities(self):
        return await self.service.list_cities()

    @router.get("/owner/{owner_id}", response_model=List[PropertySummaryOut])
    @safe_handler
    async def owner_properties(self, owner_id: int):
        return await self.service.list_owner_properties(owner_id)

    @router.get("/{property_id}", response_model=PropertyOut)
    @safe_handler
    async def get_property(self, property_id: int):
        return await self.service.get_property(property_id)

    @router.patch("/{property_id}/update", response_model=PropertyOut)
    @safe_handler
    async def update(self, property_id: int, data: PropertyUpdate):
        return await self.service.update_property(property_id, data)

    @router.patch("/{property_id}/availability", response_model=PropertyOut)
    @safe_handler
    async def update_availability(self, property_id: int, data: AvailabilityUpdate):
        return await self.service.update_availability(
            property_id, data.availability_status
        )

    @router.patch("/{property_id}/verify", response_model=PropertyOut)
    @safe_handler
    async def verify(self, property_id: int, data: PropertyVerify):
        return await self.service.verify_property(property_id, data.is_verified)

    @router.delete("/{property_id}/delete", response_model=MessageOut)
    @safe_handler
    async def delete_property(self, property_id: int):
        await self.service.delete_property(property_id)
        return MessageOut(message="Property deleted successfully")
