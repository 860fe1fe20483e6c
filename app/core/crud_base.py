# app/core/crud_base.py

"""
공통 CRUD(Create, Read, Update, Delete) 작업을 위한 기본 클래스 모듈입니다.
기준정보(원자재, 완제품, 위치, 사용자)처럼 재고 엔진을 거치지 않는 단순 테이블에 사용합니다.
재고 수량을 변경하는 작업은 이 클래스의 create/update/delete를 사용하지 않고
UnitOfWork 기반의 전용 메서드를 사용해야 합니다.
"""

import math
from typing import Generic, List, Optional, Type, TypeVar, Any, Dict, Tuple

from sqlalchemy import func
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from pydantic import BaseModel

ModelType = TypeVar("ModelType", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)

# 페이지네이션 기본값/상한
DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 100


def build_pagination(page: int, limit: int, total: int, returned: int) -> Dict[str, Any]:
    """응답에 포함할 페이지네이션 메타데이터를 만듭니다."""
    skip = (page - 1) * limit
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": math.ceil(total / limit) if limit else 0,
        "has_more": skip + returned < total,
    }


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    모든 CRUD 작업에 대한 기본 클래스를 정의합니다.
    """
    def __init__(self, model: Type[ModelType]):
        self.model = model

    async def get(self, db: AsyncSession, id: Any) -> Optional[ModelType]:
        """
        ID를 기준으로 단일 레코드를 조회합니다.
        """
        return await db.get(self.model, id)

    async def get_multi(
        self, db: AsyncSession, *, skip: int = 0, limit: int = 100, **kwargs: Any
    ) -> List[ModelType]:
        """
        여러 레코드를 조회합니다. 필터링을 위한 키워드 인자를 지원합니다.
        """
        query = select(self.model)
        for field, value in kwargs.items():
            if hasattr(self.model, field):
                query = query.where(getattr(self.model, field) == value)

        if hasattr(self.model, "id"):
            query = query.order_by(self.model.id)
        query = query.offset(skip).limit(limit)

        result = await db.execute(query)
        return result.scalars().all()

    async def get_page(
        self, db: AsyncSession, *, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT
    ) -> Tuple[List[ModelType], Dict[str, Any]]:
        """
        페이지 번호 기반으로 조회합니다. (최신 생성 순)
        page는 1 이상, limit은 1~100 범위로 보정됩니다.
        """
        page = max(1, page)
        limit = min(MAX_PAGE_LIMIT, max(1, limit))
        skip = (page - 1) * limit

        query = select(self.model)
        if hasattr(self.model, "created_at"):
            query = query.order_by(self.model.created_at.desc(), self.model.id.desc())
        result = await db.execute(query.offset(skip).limit(limit))
        items = result.scalars().all()

        total = (await db.execute(select(func.count()).select_from(self.model))).scalar_one()
        return items, build_pagination(page, limit, total, len(items))

    async def get_by_attribute(
        self, db: AsyncSession, *, attribute: str, value: Any
    ) -> Optional[ModelType]:
        statement = select(self.model).where(getattr(self.model, attribute) == value)
        response = await db.execute(statement)
        return response.scalar_one_or_none()

    async def create(self, db: AsyncSession, *, obj_in: CreateSchemaType) -> ModelType:
        """
        새로운 레코드를 생성합니다.
        """
        db_obj = self.model.model_validate(obj_in)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self, db: AsyncSession, *, db_obj: ModelType, obj_in: UpdateSchemaType
    ) -> ModelType:
        """
        기존 레코드를 업데이트합니다. (전달된 필드만 반영)
        """
        update_data = obj_in.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(db_obj, key, value)

        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def delete(self, db: AsyncSession, *, id: Any) -> Optional[ModelType]:
        """
        ID를 기준으로 레코드를 삭제합니다.
        """
        db_obj = await db.get(self.model, id)
        if db_obj:
            await db.delete(db_obj)
            await db.commit()
        return db_obj
