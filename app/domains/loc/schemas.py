# app/domains/loc/schemas.py

"""
'loc' 도메인 (PostgreSQL 'loc' 스키마)의 Pydantic 스키마를 정의하는 모듈입니다.
"""

from typing import Optional
from datetime import datetime
from pydantic import Field
from sqlmodel import SQLModel


# =============================================================================
# 1. loc.locations 테이블 스키마
# =============================================================================
class LocationBase(SQLModel):
    name: str = Field(..., min_length=1, max_length=100, description="위치 명칭")
    address: Optional[str] = Field(None, max_length=255, description="주소")
    is_default: bool = Field(False, description="기본 위치 여부")


class LocationCreate(LocationBase):
    pass


class LocationUpdate(SQLModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100, description="위치 명칭")
    address: Optional[str] = Field(None, max_length=255, description="주소")
    is_default: Optional[bool] = Field(None, description="기본 위치 여부")


class LocationResponse(LocationBase):
    id: int = Field(..., description="위치 고유 ID")
    created_at: datetime = Field(..., description="레코드 생성 일시")
    updated_at: datetime = Field(..., description="레코드 마지막 업데이트 일시")

    class Config:
        from_attributes = True
