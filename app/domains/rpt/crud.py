# app/domains/rpt/crud.py

"""
원장(inv.stock_movements)을 재생하여 누적 잔고와 기간별 재고 스냅샷을 계산하는 읽기 전용 모듈입니다.
어떤 함수도 집계 재고나 원장을 변경하지 않습니다.
"""

import logging
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Tuple, Union

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import NotFoundError, ValidationError
from app.domains.inv import models as inv_models
from app.domains.inv.ledger import StockLedger, ledger_order, signed_quantity, signed_quantity_column
from app.domains.loc import models as loc_models
from app.domains.prd import models as prd_models
from app.utils.dates import add_months, business_day_of, business_today, month_bounds, start_of_business_day
from . import schemas

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")


def _round(value: Decimal) -> Decimal:
    return Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)


# =============================================================================
# 1. 이동 내역과 누적 잔고
# =============================================================================
async def get_movements(
    db: AsyncSession,
    *,
    raw_material_id: Optional[int] = None,
    finished_good_id: Optional[int] = None,
    drum_id: Optional[int] = None,
    location_id: Optional[int] = None,
    limit: Optional[int] = None,
) -> schemas.MovementHistoryResponse:
    """
    품목(선택적으로 드럼 또는 위치)의 원장을 처음부터 시간 순으로 재생하여
    각 이동 시점의 누적 잔고를 계산하고, 최신 순으로 반환합니다.
    limit은 재생이 끝난 뒤 최신 N건만 잘라냅니다.
    """
    if (raw_material_id is None) == (finished_good_id is None):
        raise ValidationError("Exactly one of raw_material_id or finished_good_id is required.")
    if drum_id is not None and raw_material_id is None:
        raise ValidationError("drum_id is only valid for raw materials.")
    if location_id is not None and finished_good_id is None:
        raise ValidationError("location_id is only valid for finished goods.")

    if raw_material_id is not None:
        item = await db.get(inv_models.RawMaterial, raw_material_id, populate_existing=True)
        if item is None:
            raise NotFoundError("Raw material not found")
        summary = schemas.MovementItemSummary(
            id=item.id, code=item.code, name=item.name, kind=item.kind, moq=item.moq,
            current_stock=item.current_stock,
        )
    else:
        item = await db.get(inv_models.FinishedGood, finished_good_id, populate_existing=True)
        if item is None:
            raise NotFoundError("Finished good not found")
        summary = schemas.MovementItemSummary(
            id=item.id, code=item.code, name=item.name, current_stock=item.current_stock,
        )

    current_stock = item.current_stock
    if drum_id is not None:
        drum = await db.get(inv_models.Drum, drum_id, populate_existing=True)
        if drum is None or drum.raw_material_id != raw_material_id:
            raise NotFoundError("Drum not found")
        current_stock = drum.current_quantity
    if location_id is not None:
        if await db.get(loc_models.Location, location_id) is None:
            raise NotFoundError("Location not found")
        stock = (await db.execute(
            select(inv_models.FinishedGoodStock)
            .where(
                inv_models.FinishedGoodStock.finished_good_id == finished_good_id,
                inv_models.FinishedGoodStock.location_id == location_id,
            )
            .execution_options(populate_existing=True)
        )).scalar_one_or_none()
        current_stock = stock.quantity if stock else Decimal("0")

    Movement = inv_models.StockMovement
    statement = (
        select(Movement, prd_models.Batch.code, inv_models.Drum.label, loc_models.Location.name)
        .outerjoin(prd_models.Batch, prd_models.Batch.id == Movement.batch_id)
        .outerjoin(inv_models.Drum, inv_models.Drum.id == Movement.drum_id)
        .outerjoin(loc_models.Location, loc_models.Location.id == Movement.location_id)
        .where(*StockLedger.item_filters(
            raw_material_id=raw_material_id,
            finished_good_id=finished_good_id,
            drum_id=drum_id,
            location_id=location_id,
        ))
        .order_by(*ledger_order())
        .execution_options(populate_existing=True)
    )
    result = await db.execute(statement)

    running = Decimal("0")
    entries: List[schemas.MovementHistoryEntry] = []
    for movement, batch_code, drum_label, location_name in result.all():
        running += signed_quantity(movement.type, movement.quantity)
        entries.append(schemas.MovementHistoryEntry(
            id=movement.id,
            type=movement.type,
            quantity=movement.quantity,
            date=movement.date,
            description=movement.description,
            drum_id=movement.drum_id,
            drum_label=drum_label,
            location_id=movement.location_id,
            location_name=location_name,
            batch_id=movement.batch_id,
            batch_code=batch_code,
            running_balance=_round(running),
            created_at=movement.created_at,
        ))
    entries.reverse()
    if limit is not None:
        entries = entries[:limit]

    replayed = _round(running)
    current = _round(current_stock)
    if replayed != current:
        logger.warning(
            "Replayed stock %s differs from aggregate %s for %s (drum=%s, location=%s)",
            replayed, current, item.name, drum_id, location_id,
        )
    return schemas.MovementHistoryResponse(
        item=summary,
        drum_id=drum_id,
        location_id=location_id,
        movements=entries,
        replayed_stock=replayed,
        current_stock=current,
        in_sync=replayed == current,
    )


# =============================================================================
# 2. 기간별 재고 스냅샷
# =============================================================================
def _item_model(item_type: schemas.ReportItemType):
    if item_type == schemas.ReportItemType.RAW_MATERIAL:
        return inv_models.RawMaterial, inv_models.StockMovement.raw_material_id
    return inv_models.FinishedGood, inv_models.StockMovement.finished_good_id


def _buckets(
    start: date, end: date, granularity: schemas.Granularity
) -> List[Tuple[str, date, date]]:
    """[start, end] 구간을 (키, 버킷 시작일, 버킷 종료일) 목록으로 나눕니다."""
    if end < start:
        return []
    buckets: List[Tuple[str, date, date]] = []
    if granularity == schemas.Granularity.DAILY:
        day = start
        while day <= end:
            buckets.append((day.isoformat(), day, day))
            day += timedelta(days=1)
        return buckets

    month_start = start.replace(day=1)
    while month_start <= end:
        _, month_end = month_bounds(month_start.year, month_start.month)
        buckets.append((
            month_start.strftime("%Y-%m"),
            max(month_start, start),
            min(month_end, end),
        ))
        month_start = add_months(month_start, 1)
    return buckets


def _pick(bucket: schemas.StockSnapshotBucket, data_type: schemas.SnapshotDataType) -> Decimal:
    return {
        schemas.SnapshotDataType.OPENING: bucket.opening,
        schemas.SnapshotDataType.IN: bucket.inflow,
        schemas.SnapshotDataType.OUT: bucket.outflow,
        schemas.SnapshotDataType.CLOSING: bucket.closing,
    }[data_type]


async def get_stock_snapshot(
    db: AsyncSession,
    *,
    item_type: Union[schemas.ReportItemType, str],
    period_start: date,
    period_end: date,
    data_type: Union[schemas.SnapshotDataType, str] = schemas.SnapshotDataType.CLOSING,
    granularity: Union[schemas.Granularity, str] = schemas.Granularity.DAILY,
    item_id: Optional[int] = None,
    location_id: Optional[int] = None,
    today: Optional[date] = None,
) -> schemas.StockSnapshotResponse:
    """
    기간 시작 이전의 원장으로 기초 재고를 구한 뒤, 기간 안을 일/월 단위로 걸으며
    opening / inflow / outflow / closing 을 계산합니다.

    - ADJUSTMENT는 양수면 입고, 음수면 출고로 집계합니다.
    - 기간 안에 이동이 없고 기초 재고가 0 이하인 품목은 제외합니다.
    - today 이후의 버킷은 포함하지 않습니다.
    - location_id는 완제품에만 사용할 수 있습니다.
    """
    item_type = schemas.ReportItemType(item_type)
    data_type = schemas.SnapshotDataType(data_type)
    granularity = schemas.Granularity(granularity)

    if period_start > period_end:
        raise ValidationError("period_start must not be after period_end.")
    if location_id is not None:
        if item_type != schemas.ReportItemType.FINISHED_GOOD:
            raise ValidationError("location_id is only valid for finished goods.")
        if await db.get(loc_models.Location, location_id) is None:
            raise NotFoundError("Location not found")
    today = today or business_today()

    model, item_column = _item_model(item_type)
    item_query = select(model).order_by(model.name, model.id)
    if item_id is not None:
        item_query = item_query.where(model.id == item_id)
    items = (await db.execute(item_query)).scalars().all()
    if item_id is not None and not items:
        raise NotFoundError("Item not found")

    Movement = inv_models.StockMovement
    filters = [item_column.is_not(None)]
    if item_id is not None:
        filters.append(item_column == item_id)
    if location_id is not None:
        filters.append(Movement.location_id == location_id)
    range_start = start_of_business_day(period_start)
    range_end = start_of_business_day(period_end + timedelta(days=1))

    opening_rows = await db.execute(
        select(item_column, func.sum(signed_quantity_column()))
        .where(*filters, Movement.date < range_start)
        .group_by(item_column)
    )
    openings: Dict[int, Decimal] = {owner: Decimal(total) for owner, total in opening_rows.all()}

    period_rows = await db.execute(
        select(item_column, Movement.date, Movement.type, Movement.quantity)
        .where(*filters, Movement.date >= range_start, Movement.date < range_end)
    )
    # 품목 -> 영업일 -> [입고, 출고]
    flows: Dict[int, Dict[date, List[Decimal]]] = defaultdict(
        lambda: defaultdict(lambda: [Decimal("0"), Decimal("0")])
    )
    for owner, moved_at, movement_type, quantity in period_rows.all():
        delta = signed_quantity(movement_type, quantity)
        day_flow = flows[owner][business_day_of(moved_at)]
        if delta >= 0:
            day_flow[0] += delta
        else:
            day_flow[1] -= delta

    buckets = _buckets(period_start, min(period_end, today), granularity)
    rows: List[schemas.StockSnapshotRow] = []
    for item in items:
        opening = openings.get(item.id, Decimal("0"))
        item_flows = flows.get(item.id, {})
        if not item_flows and opening <= 0:
            continue

        running = opening
        item_buckets: List[schemas.StockSnapshotBucket] = []
        for key, start, end in buckets:
            inflow = Decimal("0")
            outflow = Decimal("0")
            for day, (day_in, day_out) in item_flows.items():
                if start <= day <= end:
                    inflow += day_in
                    outflow += day_out
            closing = running + inflow - outflow
            item_buckets.append(schemas.StockSnapshotBucket(
                key=key,
                start=start,
                end=end,
                opening=_round(running),
                inflow=_round(inflow),
                outflow=_round(outflow),
                closing=_round(closing),
            ))
            running = closing

        rows.append(schemas.StockSnapshotRow(
            item_id=item.id,
            code=item.code,
            name=item.name,
            buckets=item_buckets,
            values={bucket.key: _pick(bucket, data_type) for bucket in item_buckets},
        ))

    return schemas.StockSnapshotResponse(
        item_type=item_type,
        data_type=data_type,
        granularity=granularity,
        period_start=period_start,
        period_end=period_end,
        location_id=location_id,
        items=rows,
    )


# =============================================================================
# 3. 월간 보고서 / 조회 가능 연도
# =============================================================================
async def get_monthly_report(
    db: AsyncSession,
    *,
    year: int,
    month: int,
    item_type: Union[schemas.ReportItemType, str],
    data_type: Union[schemas.SnapshotDataType, str],
    location_id: Optional[int] = None,
    today: Optional[date] = None,
) -> schemas.MonthlyReportResponse:
    """
    한 달의 일별 매트릭스를 만듭니다.
    current_day는 미래의 달이면 0, 이번 달이면 오늘 날짜, 지난 달이면 그 달의 일수입니다.
    """
    if not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12.")
    today = today or business_today()
    first_day, last_day = month_bounds(year, month)
    days_in_month = last_day.day

    if (year, month) == (today.year, today.month):
        current_day = today.day
    elif first_day > today:
        current_day = 0
    else:
        current_day = days_in_month

    snapshot = await get_stock_snapshot(
        db,
        item_type=item_type,
        period_start=first_day,
        period_end=last_day,
        data_type=data_type,
        granularity=schemas.Granularity.DAILY,
        location_id=location_id,
        today=today,
    )
    data = [
        schemas.MonthlyReportRow(
            item_id=row.item_id,
            code=row.code,
            name=row.name,
            values={str(bucket.start.day): row.values[bucket.key] for bucket in row.buckets},
        )
        for row in snapshot.items
    ]
    return schemas.MonthlyReportResponse(
        data=data,
        meta=schemas.MonthlyReportMeta(
            year=year,
            month=month,
            item_type=snapshot.item_type,
            data_type=snapshot.data_type,
            location_id=location_id,
            days_in_month=days_in_month,
            current_day=current_day,
        ),
    )


async def get_available_years(
    db: AsyncSession, *, today: Optional[date] = None
) -> schemas.AvailableYearsResponse:
    """가장 오래된 이동 연도부터 max(가장 최근 이동 연도, 올해)까지의 연도 목록"""
    today = today or business_today()
    Movement = inv_models.StockMovement
    earliest, latest = (await db.execute(
        select(func.min(Movement.date), func.max(Movement.date))
    )).one()
    if earliest is None:
        return schemas.AvailableYearsResponse(
            years=[today.year], earliest_year=today.year, latest_year=today.year
        )

    earliest_year = business_day_of(earliest).year
    latest_year = max(business_day_of(latest).year, today.year)
    return schemas.AvailableYearsResponse(
        years=list(range(earliest_year, latest_year + 1)),
        earliest_year=earliest_year,
        latest_year=latest_year,
    )
