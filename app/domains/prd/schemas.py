# app/domains/prd/schemas.py

"""
'prd' 도메인 (PostgreSQL 'prd' 스키마)의 Pydantic 스키마를 정의하는 모듈입니다.
"""

from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from pydantic import Field
from sqlmodel import SQLModel

from app.domains.inv.schemas import DateInput, PaginationMeta


# =============================================================================
# 1. 배치 라인 스키마
# =============================================================================
class BatchMaterialLine(SQLModel):
    """
    원자재 소비 라인. DRUM 원자재에서 drum_id를 생략하면
    가장 오래된 활성 드럼부터 자동 할당(FIFO)됩니다.
    """
    raw_material_id: int
    drum_id: Optional[int] = None
    quantity: Decimal = Field(..., gt=0, max_digits=18, decimal_places=2)


class BatchFinishedGoodLine(SQLModel):
    finished_good_id: int
    location_id: Optional[int] = None
    quantity: Decimal = Field(..., gt=0, max_digits=18, decimal_places=2)


# =============================================================================
# 2. prd.batches 테이블 스키마
# =============================================================================
class BatchCreate(SQLModel):
    code: str = Field(..., min_length=1, max_length=50, description="배치 코드")
    date: DateInput = Field(..., description="생산 일자")
    description: Optional[str] = Field(None, max_length=255)
    materials: List[BatchMaterialLine] = Field(default_factory=list)
    finished_goods: List[BatchFinishedGoodLine] = Field(default_factory=list)


class BatchUpdate(SQLModel):
    """전달되지 않은 라인 목록(None)은 기존 라인을 그대로 다시 적용합니다."""
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    date: Optional[DateInput] = None
    description: Optional[str] = Field(None, max_length=255)
    materials: Optional[List[BatchMaterialLine]] = None
    finished_goods: Optional[List[BatchFinishedGoodLine]] = None


class BatchUsageResponse(SQLModel):
    id: int
    raw_material_id: int
    raw_material_name: Optional[str] = None
    drum_id: Optional[int] = None
    drum_label: Optional[str] = None
    quantity: Decimal


class BatchFinishedGoodResponse(SQLModel):
    id: int
    finished_good_id: int
    finished_good_name: Optional[str] = None
    location_id: Optional[int] = None
    location_name: Optional[str] = None
    quantity: Decimal


class BatchResponse(SQLModel):
    id: int
    code: str
    date: datetime
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    materials: List[BatchUsageResponse] = []
    finished_goods: List[BatchFinishedGoodResponse] = []


class BatchPage(SQLModel):
    items: List[BatchResponse]
    pagination: PaginationMeta
