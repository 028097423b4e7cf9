from typing import List

from fastapi import APIRouter, Depends, Query
from fastapi_utils.cbv import cbv
from pydantic import EmailStr
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_db import get_db_async
from core.safe_handler import safe_handler
from schemas.schema import RentRequestCreate, RentRequestOut, RentRequestStatusUpdate
from services.rent_request_service import RentRequestService

router = APIRouter(tags=["Rent Requests"])


@cbv(router)
class RentRequestRoutes:
    @router.post("/create", response_model=RentRequestOut, status_code=201)
    @safe_handler
    async def create(
        self,
        data: RentRequestCreate,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await RentRequestService(db).create_request(data)

    @router.get("/owner/{owner_id}", response_model=List[RentRequestOut])
    @safe_handler
    async def owner_requests(
        self,
        owner_id: int,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await RentRequestService(db).list_for_owner(owner_id)

    @router.get("/mine", response_model=List[RentRequestOut])
    @safe_handler
    async def applicant_requests(
        self,
        email: EmailStr = Query(...),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await RentRequestService(db).list_for_email(email)

    @router.patch("/{request_id}/status", response_model=RentRequestOut)
    @safe_handler
    async def update_status(
        self,
        request_id: int,
        data: RentRequestStatusUpdate,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await RentRequestService(db).update_status(request_id, data.status)
