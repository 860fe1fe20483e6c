# app/domains/rpt/schemas.py

"""
'rpt' 도메인의 응답 스키마를 정의하는 모듈입니다.
'rpt'는 테이블을 갖지 않으며, 원장(inv.stock_movements)을 재생한 읽기 전용 결과만 반환합니다.
"""

from enum import Enum
from typing import Dict, List, Optional
from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, Field

from app.domains.inv.models import MaterialKind, MovementType


class ReportItemType(str, Enum):
    RAW_MATERIAL = "raw_material"
    FINISHED_GOOD = "finished_good"


class SnapshotDataType(str, Enum):
    """values 행에 담을 수치 종류"""
    OPENING = "opening"   # 기초 재고
    IN = "in"             # 입고 (양수 ADJUSTMENT 포함)
    OUT = "out"           # 출고 (음수 ADJUSTMENT 포함)
    CLOSING = "closing"   # 기말 재고


class Granularity(str, Enum):
    DAILY = "daily"
    MONTHLY = "monthly"


# =============================================================================
# 1. 이동 내역 (running balance)
# =============================================================================
class MovementItemSummary(BaseModel):
    id: int
    code: str
    name: str
    kind: Optional[MaterialKind] = None
    moq: Optional[Decimal] = None
    current_stock: Decimal


class MovementHistoryEntry(BaseModel):
    id: int
    type: MovementType
    quantity: Decimal
    date: datetime
    description: Optional[str] = None
    drum_id: Optional[int] = None
    drum_label: Optional[str] = None
    location_id: Optional[int] = None
    location_name: Optional[str] = None
    batch_id: Optional[int] = None
    batch_code: Optional[str] = None
    running_balance: Decimal = Field(..., description="이 이동까지 반영한 누적 잔고")
    created_at: datetime


class MovementHistoryResponse(BaseModel):
    """
    movements는 최신 순입니다. replayed_stock은 원장을 처음부터 재생한 값이고,
    current_stock은 집계 컬럼(또는 드럼/위치 하위 재고) 값입니다.
    """
    item: MovementItemSummary
    drum_id: Optional[int] = None
    location_id: Optional[int] = None
    movements: List[MovementHistoryEntry]
    replayed_stock: Decimal
    current_stock: Decimal
    in_sync: bool


# =============================================================================
# 2. 기간별 재고 스냅샷
# =============================================================================
class StockSnapshotBucket(BaseModel):
    key: str = Field(..., description="일 단위는 YYYY-MM-DD, 월 단위는 YYYY-MM")
    start: date
    end: date
    opening: Decimal
    inflow: Decimal
    outflow: Decimal
    closing: Decimal


class StockSnapshotRow(BaseModel):
    item_id: int
    code: str
    name: str
    buckets: List[StockSnapshotBucket]
    values: Dict[str, Decimal] = Field(..., description="버킷 키별 data_type 값")


class StockSnapshotResponse(BaseModel):
    item_type: ReportItemType
    data_type: SnapshotDataType
    granularity: Granularity
    period_start: date
    period_end: date
    location_id: Optional[int] = None
    items: List[StockSnapshotRow]


# =============================================================================
# 3. 월간 보고서 / 연도 목록
# =============================================================================
class MonthlyReportRow(BaseModel):
    item_id: int
    code: str
    name: str
    values: Dict[str, Decimal] = Field(..., description="일(1~31) 문자열 키별 값")


class MonthlyReportMeta(BaseModel):
    year: int
    month: int
    item_type: ReportItemType
    data_type: SnapshotDataType
    location_id: Optional[int] = None
    days_in_month: int
    current_day: int


class MonthlyReportResponse(BaseModel):
    data: List[MonthlyReportRow]
    meta: MonthlyReportMeta


class AvailableYearsResponse(BaseModel):
    years: List[int]
    earliest_year: int
    latest_year: int
