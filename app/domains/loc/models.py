# app/domains/loc/models.py

"""
'loc' 도메인 (PostgreSQL 'loc' 스키마)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.
"""

from typing import Optional
from datetime import datetime, UTC
from sqlmodel import Field, SQLModel, Column
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


# =============================================================================
# 1. loc.locations 테이블 모델
# =============================================================================
class LocationBase(SQLModel):
    name: str = Field(max_length=100, unique=True, index=True, description="위치 명칭")
    address: Optional[str] = Field(default=None, max_length=255, description="주소")
    is_default: bool = Field(default=False, description="기본 위치 여부 (하나만 허용)")


class Location(LocationBase, table=True):
    __tablename__ = "locations"
    __table_args__ = {'schema': 'loc'}
    __mapper_args__ = {"eager_defaults": True}

    id: Optional[int] = Field(default=None, primary_key=True)
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
