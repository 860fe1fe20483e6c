# app/domains/inv/models.py

"""
'inv' 도메인 (PostgreSQL 'inv' 스키마)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

- 원자재(RawMaterial)와 드럼(Drum), 완제품(FinishedGood)과 위치별 완제품 재고(FinishedGoodStock)
- 재고 이동 원장(StockMovement)

current_stock/current_quantity/quantity 컬럼은 원장(stock_movements)에서 파생되는 집계 값이며,
반드시 StockAggregateMaintainer를 통해서만 변경됩니다.
"""

from enum import Enum
from typing import Optional
from datetime import datetime, UTC
from decimal import Decimal
from sqlmodel import Field, SQLModel, Column
from sqlalchemy import CheckConstraint, Index, Numeric, String, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


class MaterialKind(str, Enum):
    """원자재 추적 방식. 생성 시 고정되며 변경할 수 없습니다."""
    BULK = "BULK"   # 드럼 없이 품목 단위로만 추적
    DRUM = "DRUM"   # 드럼 단위로 추적 (품목 재고 = 드럼 수량 합계)


class MovementType(str, Enum):
    IN = "IN"
    OUT = "OUT"
    ADJUSTMENT = "ADJUSTMENT"


# =============================================================================
# 1. inv.raw_materials 테이블 모델
# =============================================================================
class RawMaterialBase(SQLModel):
    code: str = Field(max_length=50, unique=True, index=True, description="원자재 코드 (사람이 식별하는 용도)")
    name: str = Field(max_length=100, description="원자재 명칭")
    kind: MaterialKind = Field(
        default=MaterialKind.BULK,
        sa_column=Column(String(10), nullable=False, server_default=MaterialKind.BULK.value),
        description="BULK 또는 DRUM",
    )
    moq: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, server_default="0"),
        description="최소 주문 수량",
    )


class RawMaterial(RawMaterialBase, table=True):
    __tablename__ = "raw_materials"
    __table_args__ = {'schema': 'inv'}
    # UPDATE 시 updated_at(onupdate)을 RETURNING으로 즉시 받아와 비동기 지연 로딩을 피합니다.
    __mapper_args__ = {"eager_defaults": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    current_stock: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, server_default="0"),
        description="현재 재고 (원장 집계)",
    )
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )


# =============================================================================
# 2. inv.drums 테이블 모델
# =============================================================================
class Drum(SQLModel, table=True):
    """DRUM 원자재의 드럼 단위 하위 재고. 수량이 0이 되면 비활성화됩니다."""
    __tablename__ = "drums"
    __table_args__ = (
        UniqueConstraint("raw_material_id", "label", name="uq_drums_raw_material_label"),
        {'schema': 'inv'},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    raw_material_id: int = Field(foreign_key="inv.raw_materials.id", index=True)
    label: str = Field(max_length=100, description="드럼 라벨 (원자재별 고유)")
    current_quantity: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, server_default="0"),
    )
    is_active: bool = Field(default=True)
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시 (FIFO 할당 순서)"
    )


# =============================================================================
# 3. inv.finished_goods 테이블 모델
# =============================================================================
class FinishedGoodBase(SQLModel):
    code: str = Field(max_length=50, unique=True, index=True, description="완제품 코드")
    name: str = Field(max_length=100, description="완제품 명칭")


class FinishedGood(FinishedGoodBase, table=True):
    __tablename__ = "finished_goods"
    __table_args__ = {'schema': 'inv'}
    __mapper_args__ = {"eager_defaults": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    current_stock: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, server_default="0"),
        description="현재 재고 (원장 집계)",
    )
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )


# =============================================================================
# 4. inv.finished_good_stocks 테이블 모델
# =============================================================================
class FinishedGoodStock(SQLModel, table=True):
    """완제품의 위치별 하위 재고. 해당 위치로의 첫 이동 시 생성됩니다."""
    __tablename__ = "finished_good_stocks"
    __table_args__ = (
        UniqueConstraint("finished_good_id", "location_id", name="uq_finished_good_stocks_item_location"),
        {'schema': 'inv'},
    )
    __mapper_args__ = {"eager_defaults": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    finished_good_id: int = Field(foreign_key="inv.finished_goods.id", index=True)
    location_id: int = Field(foreign_key="loc.locations.id", index=True)
    quantity: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, server_default="0"),
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
    )


# =============================================================================
# 5. inv.stock_movements 테이블 모델 (원장)
# =============================================================================
class StockMovement(SQLModel, table=True):
    """
    재고 이동 원장.
    IN/OUT의 quantity는 양수, ADJUSTMENT의 quantity는 부호 있는 변화량(0 제외)입니다.
    원장 순서는 (date, created_at, id)이며, 행은 수정하지 않고 삭제 후 재생성합니다.
    """
    __tablename__ = "stock_movements"
    __table_args__ = (
        CheckConstraint(
            "(raw_material_id IS NULL) <> (finished_good_id IS NULL)",
            name="ck_stock_movements_single_item",
        ),
        CheckConstraint("drum_id IS NULL OR raw_material_id IS NOT NULL", name="ck_stock_movements_drum_item"),
        CheckConstraint("location_id IS NULL OR finished_good_id IS NOT NULL", name="ck_stock_movements_location_item"),
        CheckConstraint(
            "(type = 'ADJUSTMENT' AND quantity <> 0) OR (type <> 'ADJUSTMENT' AND quantity > 0)",
            name="ck_stock_movements_quantity",
        ),
        Index("ix_stock_movements_raw_material_date", "raw_material_id", "date"),
        Index("ix_stock_movements_finished_good_date", "finished_good_id", "date"),
        Index("ix_stock_movements_drum_date", "drum_id", "date"),
        {'schema': 'inv'},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    type: MovementType = Field(sa_column=Column(String(20), nullable=False))
    quantity: Decimal = Field(sa_column=Column(Numeric(18, 2), nullable=False))
    date: datetime = Field(
        sa_column=Column(TIMESTAMP(timezone=True), nullable=False),
        description="영업일 자정(현지 시각)으로 정규화된 이동 일자",
    )
    description: Optional[str] = Field(default=None, max_length=255)
    raw_material_id: Optional[int] = Field(default=None, foreign_key="inv.raw_materials.id")
    finished_good_id: Optional[int] = Field(default=None, foreign_key="inv.finished_goods.id")
    drum_id: Optional[int] = Field(default=None, foreign_key="inv.drums.id")
    location_id: Optional[int] = Field(default=None, foreign_key="loc.locations.id")
    batch_id: Optional[int] = Field(default=None, foreign_key="prd.batches.id", index=True)
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now()),
        description="레코드 생성 일시 (같은 날 안의 원장 순서)"
    )
