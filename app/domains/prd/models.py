# app/domains/prd/models.py

"""
'prd' 도메인 (PostgreSQL 'prd' 스키마)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.
"""

from typing import Optional
from datetime import datetime, UTC
from decimal import Decimal
from sqlmodel import Field, SQLModel, Column
from sqlalchemy import Numeric, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


# =============================================================================
# 1. prd.batches 테이블 모델
# =============================================================================
class Batch(SQLModel, table=True):
    __tablename__ = "batches"
    __table_args__ = {'schema': 'prd'}
    __mapper_args__ = {"eager_defaults": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(max_length=50, unique=True, index=True, description="배치 코드")
    date: datetime = Field(
        sa_column=Column(TIMESTAMP(timezone=True), nullable=False),
        description="생산 일자 (영업일 자정으로 정규화)",
    )
    description: Optional[str] = Field(default=None, max_length=255)
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
# 2. prd.batch_usages 테이블 모델
# =============================================================================
class BatchUsage(SQLModel, table=True):
    """배치가 소비한 원자재. 드럼 원자재는 실제로 소비된 드럼마다 한 행입니다."""
    __tablename__ = "batch_usages"
    __table_args__ = (
        UniqueConstraint("batch_id", "raw_material_id", "drum_id", name="uq_batch_usages_line"),
        {'schema': 'prd'},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    batch_id: int = Field(foreign_key="prd.batches.id", index=True)
    raw_material_id: int = Field(foreign_key="inv.raw_materials.id")
    drum_id: Optional[int] = Field(default=None, foreign_key="inv.drums.id")
    quantity: Decimal = Field(sa_column=Column(Numeric(18, 2), nullable=False))


# =============================================================================
# 3. prd.batch_finished_goods 테이블 모델
# =============================================================================
class BatchFinishedGood(SQLModel, table=True):
    """배치가 생산한 완제품."""
    __tablename__ = "batch_finished_goods"
    __table_args__ = (
        UniqueConstraint("batch_id", "finished_good_id", name="uq_batch_finished_goods_line"),
        {'schema': 'prd'},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    batch_id: int = Field(foreign_key="prd.batches.id", index=True)
    finished_good_id: int = Field(foreign_key="inv.finished_goods.id")
    location_id: Optional[int] = Field(default=None, foreign_key="loc.locations.id")
    quantity: Decimal = Field(sa_column=Column(Numeric(18, 2), nullable=False))
