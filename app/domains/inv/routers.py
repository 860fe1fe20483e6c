# app/domains/inv/routers.py

from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlmodel import Session

from app.core import dependencies as deps
from app.core.crud_base import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from app.domains.inv import crud as inv_crud, schemas as inv_schemas, tasks as inv_tasks
from app.domains.inv.models import MovementType
from app.domains.usr.models import User as UsrUser

router = APIRouter(
    tags=["Inventory Management (재고 관리)"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. inv.raw_materials 엔드포인트
# =============================================================================
@router.post(
    "/raw_materials",
    response_model=inv_schemas.RawMaterialResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_raw_material(
    material_create: inv_schemas.RawMaterialCreate,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    """새로운 원자재를 생성합니다. 관리자 권한이 필요합니다. (초기 재고는 0)"""
    return await inv_crud.raw_material.create(db=db, obj_in=material_create)


@router.get("/raw_materials", response_model=inv_schemas.RawMaterialPage)
async def read_raw_materials(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """원자재 목록을 페이지 단위로 조회합니다."""
    items, pagination = await inv_crud.raw_material.get_page(db, page=page, limit=limit)
    return {"items": items, "pagination": pagination}


@router.get("/raw_materials/{material_id}", response_model=inv_schemas.RawMaterialResponse)
async def read_raw_material(
    material_id: int,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    db_material = await inv_crud.raw_material.get(db, material_id)
    if db_material is None:
        raise HTTPException(status_code=404, detail="Raw material not found.")
    return db_material


@router.put("/raw_materials/{material_id}", response_model=inv_schemas.RawMaterialResponse)
async def update_raw_material(
    material_id: int,
    material_update: inv_schemas.RawMaterialUpdate,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    """원자재 정보를 업데이트합니다. 종류(kind)와 재고는 변경할 수 없습니다."""
    db_material = await inv_crud.raw_material.get(db, material_id)
    if db_material is None:
        raise HTTPException(status_code=404, detail="Raw material not found.")
    return await inv_crud.raw_material.update(db=db, db_obj=db_material, obj_in=material_update)


@router.delete("/raw_materials/{material_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_raw_material(
    material_id: int,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    """이동 이력이 없는 원자재를 삭제합니다."""
    await inv_crud.raw_material.remove(db, id=material_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/raw_materials/{material_id}/drums", response_model=List[inv_schemas.DrumResponse])
async def read_raw_material_drums(
    material_id: int,
    active_only: bool = False,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """원자재의 드럼 목록을 FIFO 순서로 조회합니다."""
    return await inv_crud.raw_material.get_drums(db, raw_material_id=material_id, active_only=active_only)


# =============================================================================
# 2. inv.finished_goods 엔드포인트
# =============================================================================
@router.post(
    "/finished_goods",
    response_model=inv_schemas.FinishedGoodResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_finished_good(
    good_create: inv_schemas.FinishedGoodCreate,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    """새로운 완제품을 생성합니다. 관리자 권한이 필요합니다."""
    return await inv_crud.finished_good.create(db=db, obj_in=good_create)


@router.get("/finished_goods", response_model=inv_schemas.FinishedGoodPage)
async def read_finished_goods(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    items, pagination = await inv_crud.finished_good.get_page(db, page=page, limit=limit)
    return {"items": items, "pagination": pagination}


@router.get("/finished_goods/{good_id}", response_model=inv_schemas.FinishedGoodResponse)
async def read_finished_good(
    good_id: int,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    db_good = await inv_crud.finished_good.get(db, good_id)
    if db_good is None:
        raise HTTPException(status_code=404, detail="Finished good not found.")
    return db_good


@router.put("/finished_goods/{good_id}", response_model=inv_schemas.FinishedGoodResponse)
async def update_finished_good(
    good_id: int,
    good_update: inv_schemas.FinishedGoodUpdate,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    db_good = await inv_crud.finished_good.get(db, good_id)
    if db_good is None:
        raise HTTPException(status_code=404, detail="Finished good not found.")
    return await inv_crud.finished_good.update(db=db, db_obj=db_good, obj_in=good_update)


@router.delete("/finished_goods/{good_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_finished_good(
    good_id: int,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    await inv_crud.finished_good.remove(db, id=good_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/finished_goods/{good_id}/stocks",
    response_model=List[inv_schemas.FinishedGoodStockResponse],
)
async def read_finished_good_stocks(
    good_id: int,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """완제품의 위치별 재고를 조회합니다."""
    return await inv_crud.finished_good.get_stocks(db, finished_good_id=good_id)


# =============================================================================
# 3. inv.stock_movements 엔드포인트
# =============================================================================
# '/stock_movements/by_date'는 '/stock_movements/{movement_id}'보다 먼저 등록해야 합니다.
@router.get("/stock_movements/by_date", response_model=List[inv_schemas.StockMovementResponse])
async def read_stock_movements_by_date(
    day: date = Query(..., alias="date"),
    type: Optional[MovementType] = None,
    raw_material_id: Optional[int] = None,
    finished_good_id: Optional[int] = None,
    drum_id: Optional[int] = None,
    location_id: Optional[int] = None,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """한 영업일의 이동 내역을 조회합니다."""
    if (raw_material_id is None) == (finished_good_id is None):
        raise HTTPException(status_code=422, detail="Exactly one of raw_material_id or finished_good_id is required")
    return await inv_crud.stock_movement.get_by_date(
        db,
        day=day,
        movement_type=type,
        raw_material_id=raw_material_id,
        finished_good_id=finished_good_id,
        drum_id=drum_id,
        location_id=location_id,
    )


@router.put("/stock_movements/by_date", response_model=inv_schemas.StockMovementByDateResult)
async def update_stock_movements_by_date(
    by_date_update: inv_schemas.StockMovementByDateUpdate,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_factory_user),
):
    """해당 영업일/유형의 수동 이동을 지정 수량으로 맞춥니다. (0이면 삭제)"""
    return await inv_crud.stock_movement.update_by_date(db, obj_in=by_date_update)


@router.delete("/stock_movements/by_date")
async def delete_stock_movements_by_date(
    day: date = Query(..., alias="date"),
    type: MovementType = Query(...),
    raw_material_id: Optional[int] = None,
    finished_good_id: Optional[int] = None,
    drum_id: Optional[int] = None,
    location_id: Optional[int] = None,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_factory_user),
) -> Dict[str, Any]:
    """해당 영업일/유형의 수동 이동을 모두 삭제합니다."""
    deleted = await inv_crud.stock_movement.delete_by_date(
        db,
        day=day,
        movement_type=type,
        raw_material_id=raw_material_id,
        finished_good_id=finished_good_id,
        drum_id=drum_id,
        location_id=location_id,
    )
    return {"deleted_count": deleted}


@router.post(
    "/stock_movements",
    response_model=inv_schemas.StockMovementResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_stock_movement(
    movement_create: inv_schemas.StockMovementCreate,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_factory_user),
):
    """재고 이동(IN/OUT/ADJUSTMENT)을 기록합니다. 관리자 또는 공장 권한이 필요합니다."""
    return await inv_crud.stock_movement.create(db, obj_in=movement_create)


@router.get("/stock_movements/{movement_id}", response_model=inv_schemas.StockMovementResponse)
async def read_stock_movement(
    movement_id: int,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    db_movement = await inv_crud.stock_movement.get(db, movement_id)
    if db_movement is None:
        raise HTTPException(status_code=404, detail="Stock movement not found.")
    return db_movement


@router.put("/stock_movements/{movement_id}", response_model=inv_schemas.StockMovementResponse)
async def update_stock_movement(
    movement_id: int,
    movement_update: inv_schemas.StockMovementUpdate,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_factory_user),
):
    """재고 이동을 정정합니다. (기존 행 삭제 후 재생성)"""
    return await inv_crud.stock_movement.update(db, id=movement_id, obj_in=movement_update)


@router.delete("/stock_movements/{movement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_stock_movement(
    movement_id: int,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_factory_user),
):
    await inv_crud.stock_movement.remove(db, id=movement_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# 4. 드럼 입고 및 정합성 검사
# =============================================================================
@router.post(
    "/drum_stock_in",
    response_model=inv_schemas.DrumStockInResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_drum_stock_in(
    stock_in: inv_schemas.DrumStockInCreate,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_factory_user),
):
    """DRUM 원자재에 새 드럼들을 입고합니다."""
    return await inv_crud.stock_movement.drum_stock_in(db, obj_in=stock_in)


@router.post("/stock_reconciliations", status_code=status.HTTP_202_ACCEPTED)
async def reconcile_stock(
    request: Request,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
) -> Dict[str, Any]:
    """
    집계 재고와 원장의 정합성 검사를 실행합니다.
    ARQ 풀이 있으면 백그라운드 작업으로 등록하고, 없으면 즉시 실행하여 결과를 반환합니다.
    """
    arq_redis_pool = getattr(request.app.state, "redis", None)
    if arq_redis_pool:
        job = await arq_redis_pool.enqueue_job("reconcile_stock_aggregates_task")
        return {"status": "queued", "job_id": job.job_id if job else None}
    return await inv_tasks.reconcile_stock_aggregates_task({"db": db})
