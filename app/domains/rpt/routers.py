# app/domains/rpt/routers.py

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core import dependencies as deps
from app.domains.usr import models as usr_models
from . import crud, schemas

router = APIRouter(
    tags=["Stock Reports (재고 보고서)"],
    responses={404: {"description": "Not found"}},
)


@router.get(
    "/movements/raw_materials/{raw_material_id}",
    response_model=schemas.MovementHistoryResponse,
)
async def read_raw_material_movements(
    raw_material_id: int,
    drum_id: Optional[int] = Query(None, description="특정 드럼의 이동만 조회"),
    limit: Optional[int] = Query(None, ge=1, description="최신 N건만 반환"),
    session: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    """
    원자재의 이동 내역을 누적 잔고와 함께 최신 순으로 조회합니다.
    """
    return await crud.get_movements(
        session, raw_material_id=raw_material_id, drum_id=drum_id, limit=limit
    )


@router.get(
    "/movements/finished_goods/{finished_good_id}",
    response_model=schemas.MovementHistoryResponse,
)
async def read_finished_good_movements(
    finished_good_id: int,
    location_id: Optional[int] = Query(None, description="특정 위치의 이동만 조회"),
    limit: Optional[int] = Query(None, ge=1),
    session: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    return await crud.get_movements(
        session, finished_good_id=finished_good_id, location_id=location_id, limit=limit
    )


@router.get("/stock", response_model=schemas.StockSnapshotResponse)
async def read_stock_snapshot(
    item_type: schemas.ReportItemType,
    period_start: date,
    period_end: date,
    data_type: schemas.SnapshotDataType = schemas.SnapshotDataType.CLOSING,
    granularity: schemas.Granularity = schemas.Granularity.DAILY,
    item_id: Optional[int] = None,
    location_id: Optional[int] = None,
    session: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    """
    기간별(일/월) 기초/입고/출고/기말 재고를 조회합니다.
    오늘 이후의 버킷은 포함되지 않습니다.
    """
    return await crud.get_stock_snapshot(
        session,
        item_type=item_type,
        period_start=period_start,
        period_end=period_end,
        data_type=data_type,
        granularity=granularity,
        item_id=item_id,
        location_id=location_id,
    )


@router.get("/stock/monthly", response_model=schemas.MonthlyReportResponse)
async def read_monthly_stock_report(
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    item_type: schemas.ReportItemType = Query(...),
    data_type: schemas.SnapshotDataType = Query(...),
    location_id: Optional[int] = None,
    session: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    """월간 일별 재고 보고서"""
    return await crud.get_monthly_report(
        session,
        year=year,
        month=month,
        item_type=item_type,
        data_type=data_type,
        location_id=location_id,
    )


@router.get("/available_years", response_model=schemas.AvailableYearsResponse)
async def read_available_years(
    session: AsyncSession = Depends(deps.get_db_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    return await crud.get_available_years(session)
