# app/domains/prd/routers.py

from fastapi import APIRouter, Depends, Query, Response, status
from sqlmodel import Session

from app.core import dependencies as deps
from app.core.crud_base import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from app.domains.prd import crud as prd_crud, schemas as prd_schemas
from app.domains.usr.models import User as UsrUser

router = APIRouter(
    tags=["Production Management (생산 관리)"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. prd.batches 엔드포인트
# =============================================================================
@router.get("/batches", response_model=prd_schemas.BatchPage)
async def read_batches(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """배치 목록을 생산 일자 최신 순으로 조회합니다."""
    items, pagination = await prd_crud.batch.get_page(db, page=page, limit=limit)
    return {"items": items, "pagination": pagination}


@router.get("/batches/{batch_id}", response_model=prd_schemas.BatchResponse)
async def read_batch(
    batch_id: int,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """배치와 소비/생산 라인을 조회합니다."""
    return await prd_crud.batch.get_with_lines(db, id=batch_id)


@router.post(
    "/batches",
    response_model=prd_schemas.BatchResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_batch(
    batch_create: prd_schemas.BatchCreate,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_factory_user),
):
    """
    배치를 생성합니다. 관리자 또는 공장 권한이 필요합니다.
    재고가 부족하면 400, 코드가 중복되면 409, 잠금 대기 시간을 넘기면 503을 반환합니다.
    """
    db_batch = await prd_crud.batch.create(db, obj_in=batch_create)
    return await prd_crud.batch.get_with_lines(db, id=db_batch.id)


@router.put("/batches/{batch_id}", response_model=prd_schemas.BatchResponse)
async def update_batch(
    batch_id: int,
    batch_update: prd_schemas.BatchUpdate,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_factory_user),
):
    """배치를 수정합니다. 기존 효과를 되돌린 뒤 새 내용을 적용합니다."""
    db_batch = await prd_crud.batch.update(db, id=batch_id, obj_in=batch_update)
    return await prd_crud.batch.get_with_lines(db, id=db_batch.id)


@router.delete("/batches/{batch_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_batch(
    batch_id: int,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_factory_user),
):
    """배치와 그 모든 재고 효과를 삭제합니다."""
    await prd_crud.batch.remove(db, id=batch_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
