# app/domains/loc/routers.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlmodel import Session

from app.core import dependencies as deps
from app.domains.loc import crud as loc_crud, schemas as loc_schemas
from app.domains.usr.models import User as UsrUser

router = APIRouter(
    tags=["Location Management (위치 관리)"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. loc.locations 엔드포인트
# =============================================================================
@router.post(
    "/locations",
    response_model=loc_schemas.LocationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_location(
    location_create: loc_schemas.LocationCreate,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    """새로운 위치를 생성합니다. 관리자 권한이 필요합니다."""
    return await loc_crud.location.create(db=db, obj_in=location_create)


@router.get("/locations", response_model=List[loc_schemas.LocationResponse])
async def read_locations(
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """모든 위치 목록을 조회합니다. (기본 위치 우선)"""
    return await loc_crud.location.get_all(db)


@router.get("/locations/{location_id}", response_model=loc_schemas.LocationResponse)
async def read_location(
    location_id: int,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """ID로 특정 위치를 조회합니다."""
    db_location = await loc_crud.location.get(db, location_id)
    if db_location is None:
        raise HTTPException(status_code=404, detail="Location not found.")
    return db_location


@router.put("/locations/{location_id}", response_model=loc_schemas.LocationResponse)
async def update_location(
    location_id: int,
    location_update: loc_schemas.LocationUpdate,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    """위치 정보를 업데이트합니다. 관리자 권한이 필요합니다."""
    db_location = await loc_crud.location.get(db, location_id)
    if db_location is None:
        raise HTTPException(status_code=404, detail="Location not found.")
    return await loc_crud.location.update(db=db, db_obj=db_location, obj_in=location_update)


@router.delete("/locations/{location_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_location(
    location_id: int,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    """위치를 삭제합니다. 재고나 이동 이력이 있으면 거부됩니다."""
    await loc_crud.location.remove(db, id=location_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
