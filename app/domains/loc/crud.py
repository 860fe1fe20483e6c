# app/domains/loc/crud.py

"""
'loc' 도메인의 CRUD 작업을 담당하는 모듈입니다.
"""

from typing import List, Optional

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.crud_base import CRUDBase
from app.core.exceptions import DuplicateCodeError, NotFoundError, ValidationError
from app.domains.inv import models as inv_models
from . import models as loc_models
from . import schemas as loc_schemas


class LocationCRUD(
    CRUDBase[loc_models.Location, loc_schemas.LocationCreate, loc_schemas.LocationUpdate]
):
    """Location 모델에 특화된 CRUD 작업을 처리합니다."""

    async def get_all(self, db: AsyncSession) -> List[loc_models.Location]:
        """기본 위치를 먼저, 이후 이름 순으로 정렬하여 조회합니다."""
        query = select(self.model).order_by(self.model.is_default.desc(), self.model.name)
        result = await db.execute(query)
        return result.scalars().all()

    async def get_by_name(self, db: AsyncSession, *, name: str) -> Optional[loc_models.Location]:
        return await self.get_by_attribute(db, attribute="name", value=name)

    async def _unset_other_defaults(self, db: AsyncSession, *, exclude_id: Optional[int] = None) -> None:
        query = select(self.model).where(self.model.is_default.is_(True))
        if exclude_id is not None:
            query = query.where(self.model.id != exclude_id)
        result = await db.execute(query)
        for other in result.scalars().all():
            other.is_default = False
            db.add(other)

    async def create(
        self, db: AsyncSession, *, obj_in: loc_schemas.LocationCreate
    ) -> loc_models.Location:
        if await self.get_by_name(db, name=obj_in.name):
            raise DuplicateCodeError(f'Location with name "{obj_in.name}" already exists')
        if obj_in.is_default:
            await self._unset_other_defaults(db)
        return await super().create(db, obj_in=obj_in)

    async def update(
        self, db: AsyncSession, *, db_obj: loc_models.Location, obj_in: loc_schemas.LocationUpdate
    ) -> loc_models.Location:
        if obj_in.name and obj_in.name != db_obj.name:
            existing = await self.get_by_name(db, name=obj_in.name)
            if existing and existing.id != db_obj.id:
                raise DuplicateCodeError(f'Location with name "{obj_in.name}" already exists')
        if obj_in.is_default:
            await self._unset_other_defaults(db, exclude_id=db_obj.id)
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)

    async def remove(self, db: AsyncSession, *, id: int) -> loc_models.Location:
        """
        위치를 삭제합니다.
        재고가 남아 있거나 이동 이력이 있는 위치는 감사 추적을 위해 삭제를 거부합니다.
        """
        location = await self.get(db, id)
        if not location:
            raise NotFoundError("Location not found")

        stock_count = (await db.execute(
            select(func.count()).select_from(inv_models.FinishedGoodStock).where(
                inv_models.FinishedGoodStock.location_id == id,
                inv_models.FinishedGoodStock.quantity > 0,
            )
        )).scalar_one()
        if stock_count > 0:
            raise ValidationError("Cannot delete location with active stock.")

        movement_count = (await db.execute(
            select(func.count()).select_from(inv_models.StockMovement).where(
                inv_models.StockMovement.location_id == id
            )
        )).scalar_one()
        if movement_count > 0:
            raise ValidationError("Cannot delete location with associated movement history.")

        return await super().delete(db, id=id)


location = LocationCRUD(loc_models.Location)
