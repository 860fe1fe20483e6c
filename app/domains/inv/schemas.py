# app/domains/inv/schemas.py

"""
'inv' 도메인 (PostgreSQL 'inv' 스키마)의 Pydantic 스키마를 정의하는 모듈입니다.
"""

from typing import List, Optional, Union
from datetime import datetime, date
from decimal import Decimal
from pydantic import Field, model_validator
from sqlmodel import SQLModel

from .models import MaterialKind, MovementType

# 날짜 또는 일시 입력 (영업일 자정으로 정규화됨)
DateInput = Union[datetime, date]


# =============================================================================
# 1. inv.raw_materials 테이블 스키마
# =============================================================================
class RawMaterialBase(SQLModel):
    code: str = Field(..., min_length=1, max_length=50, description="원자재 코드")
    name: str = Field(..., min_length=1, max_length=100, description="원자재 명칭")
    moq: Decimal = Field(Decimal("0"), ge=0, max_digits=18, decimal_places=2, description="최소 주문 수량")


class RawMaterialCreate(RawMaterialBase):
    kind: MaterialKind = Field(MaterialKind.BULK, description="BULK 또는 DRUM (생성 후 변경 불가)")


class RawMaterialUpdate(SQLModel):
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    moq: Optional[Decimal] = Field(None, ge=0, max_digits=18, decimal_places=2)


class RawMaterialResponse(RawMaterialBase):
    id: int = Field(..., description="원자재 고유 ID")
    kind: MaterialKind
    current_stock: Decimal
    created_at: datetime = Field(..., description="레코드 생성 일시")
    updated_at: datetime = Field(..., description="레코드 마지막 업데이트 일시")

    class Config:
        from_attributes = True


# =============================================================================
# 2. inv.drums 테이블 스키마
# =============================================================================
class DrumResponse(SQLModel):
    id: int
    raw_material_id: int
    label: str
    current_quantity: Decimal
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class DrumStockInLine(SQLModel):
    label: str = Field(..., min_length=1, max_length=100, description="드럼 라벨")
    quantity: Decimal = Field(..., gt=0, max_digits=18, decimal_places=2)


class DrumStockInCreate(SQLModel):
    raw_material_id: int
    date: DateInput = Field(..., description="입고 일자")
    description: Optional[str] = Field(None, max_length=255)
    drums: List[DrumStockInLine] = Field(..., min_length=1)


class DrumStockInResponse(SQLModel):
    raw_material_id: int
    current_stock: Decimal
    drums: List[DrumResponse]
    movement_ids: List[int]


# =============================================================================
# 3. inv.finished_goods 테이블 스키마
# =============================================================================
class FinishedGoodBase(SQLModel):
    code: str = Field(..., min_length=1, max_length=50, description="완제품 코드")
    name: str = Field(..., min_length=1, max_length=100, description="완제품 명칭")


class FinishedGoodCreate(FinishedGoodBase):
    pass


class FinishedGoodUpdate(SQLModel):
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    name: Optional[str] = Field(None, min_length=1, max_length=100)


class FinishedGoodResponse(FinishedGoodBase):
    id: int = Field(..., description="완제품 고유 ID")
    current_stock: Decimal
    created_at: datetime = Field(..., description="레코드 생성 일시")
    updated_at: datetime = Field(..., description="레코드 마지막 업데이트 일시")

    class Config:
        from_attributes = True


class FinishedGoodStockResponse(SQLModel):
    finished_good_id: int
    location_id: int
    quantity: Decimal

    class Config:
        from_attributes = True


# =============================================================================
# 4. inv.stock_movements 테이블 스키마
# =============================================================================
class StockMovementCreate(SQLModel):
    """
    재고 이동 생성 요청.
    IN/OUT은 quantity(> 0)를, ADJUSTMENT는 실사 수량 counted_quantity(>= 0)를 받습니다.
    ADJUSTMENT의 변화량은 서버가 잠긴 현재 재고 기준으로 계산합니다.
    """
    type: MovementType
    date: DateInput = Field(..., description="이동 일자")
    description: Optional[str] = Field(None, max_length=255)
    raw_material_id: Optional[int] = None
    finished_good_id: Optional[int] = None
    drum_id: Optional[int] = None
    location_id: Optional[int] = None
    quantity: Optional[Decimal] = Field(None, gt=0, max_digits=18, decimal_places=2)
    counted_quantity: Optional[Decimal] = Field(None, ge=0, max_digits=18, decimal_places=2)

    @model_validator(mode="after")
    def check_target_and_quantity(self) -> "StockMovementCreate":
        if (self.raw_material_id is None) == (self.finished_good_id is None):
            raise ValueError("Exactly one of raw_material_id or finished_good_id is required")
        if self.drum_id is not None and self.raw_material_id is None:
            raise ValueError("drum_id is only allowed for raw materials")
        if self.location_id is not None and self.finished_good_id is None:
            raise ValueError("location_id is only allowed for finished goods")
        if self.type == MovementType.ADJUSTMENT:
            if self.counted_quantity is None or self.quantity is not None:
                raise ValueError("ADJUSTMENT requires counted_quantity (and no quantity)")
        elif self.quantity is None or self.counted_quantity is not None:
            raise ValueError(f"{self.type.value} requires a positive quantity (and no counted_quantity)")
        return self


class StockMovementUpdate(SQLModel):
    quantity: Optional[Decimal] = Field(None, gt=0, max_digits=18, decimal_places=2)
    counted_quantity: Optional[Decimal] = Field(None, ge=0, max_digits=18, decimal_places=2)
    date: Optional[DateInput] = None
    description: Optional[str] = Field(None, max_length=255)

    @model_validator(mode="after")
    def check_single_quantity(self) -> "StockMovementUpdate":
        if self.quantity is not None and self.counted_quantity is not None:
            raise ValueError("Provide either quantity or counted_quantity, not both")
        return self


class StockMovementByDateUpdate(SQLModel):
    """
    특정 영업일/유형의 수동 이동을 지정 수량으로 맞춥니다.
    quantity=0이면 삭제, 이동이 없으면 생성합니다. ADJUSTMENT의 quantity는 실사 수량입니다.
    """
    type: MovementType
    date: DateInput
    quantity: Decimal = Field(..., ge=0, max_digits=18, decimal_places=2)
    description: Optional[str] = Field(None, max_length=255)
    raw_material_id: Optional[int] = None
    finished_good_id: Optional[int] = None
    drum_id: Optional[int] = None
    location_id: Optional[int] = None

    @model_validator(mode="after")
    def check_target(self) -> "StockMovementByDateUpdate":
        if (self.raw_material_id is None) == (self.finished_good_id is None):
            raise ValueError("Exactly one of raw_material_id or finished_good_id is required")
        if self.drum_id is not None and self.raw_material_id is None:
            raise ValueError("drum_id is only allowed for raw materials")
        if self.location_id is not None and self.finished_good_id is None:
            raise ValueError("location_id is only allowed for finished goods")
        return self


class StockMovementResponse(SQLModel):
    id: int
    type: MovementType
    quantity: Decimal
    date: datetime
    description: Optional[str] = None
    raw_material_id: Optional[int] = None
    finished_good_id: Optional[int] = None
    drum_id: Optional[int] = None
    location_id: Optional[int] = None
    batch_id: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class StockMovementByDateResult(SQLModel):
    movement: Optional[StockMovementResponse] = None
    deleted_count: int = 0


# =============================================================================
# 5. 페이지네이션 응답 스키마
# =============================================================================
class PaginationMeta(SQLModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_more: bool


class RawMaterialPage(SQLModel):
    items: List[RawMaterialResponse]
    pagination: PaginationMeta


class FinishedGoodPage(SQLModel):
    items: List[FinishedGoodResponse]
    pagination: PaginationMeta
