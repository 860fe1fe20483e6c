# app/domains/inv/crud.py

"""
'inv' 도메인의 CRUD(Create, Read, Update, Delete) 작업을 위한 함수들을 정의하는 모듈입니다.

- 기준정보(원자재, 완제품)는 CRUDBase를 그대로 사용합니다.
- 재고 수량을 바꾸는 모든 작업(이동 생성/수정/삭제, 일자별 수정, 드럼 입고)은
  하나의 UnitOfWork 안에서 잠금 -> 집계 갱신 -> 원장 기록 순서로 처리됩니다.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.crud_base import CRUDBase
from app.core.exceptions import (
    DuplicateCodeError,
    InsufficientStockError,
    NegativeStockError,
    NotFoundError,
    ValidationError,
)
from app.core.unit_of_work import UnitOfWork
from app.domains.loc.models import Location
from app.domains.prd.models import BatchFinishedGood, BatchUsage
from app.utils.dates import start_of_business_day
from . import models as inv_models
from . import schemas as inv_schemas
from .aggregates import StockAggregateMaintainer
from .ledger import StockLedger, signed_quantity

logger = logging.getLogger(__name__)

DRUM_STOCK_IN_DESCRIPTION = "Stock In (Drum)"


def item_of(source: Any) -> Dict[str, Optional[int]]:
    """이동(또는 입력 스키마)에서 품목/드럼/위치 키를 꺼냅니다."""
    return {
        "raw_material_id": source.raw_material_id,
        "finished_good_id": source.finished_good_id,
        "drum_id": source.drum_id,
        "location_id": source.location_id,
    }


def lock_targets(item: Dict[str, Optional[int]]) -> Dict[str, list]:
    """품목 키를 StockAggregateMaintainer.lock()의 인자로 변환합니다."""
    targets: Dict[str, list] = {
        "raw_material_ids": [],
        "drum_ids": [],
        "finished_good_ids": [],
        "finished_good_locations": [],
    }
    if item["raw_material_id"] is not None:
        targets["raw_material_ids"].append(item["raw_material_id"])
        if item["drum_id"] is not None:
            targets["drum_ids"].append(item["drum_id"])
    else:
        targets["finished_good_ids"].append(item["finished_good_id"])
        if item["location_id"] is not None:
            targets["finished_good_locations"].append((item["finished_good_id"], item["location_id"]))
    return targets


# =============================================================================
# 1. 기준정보 CRUD
# =============================================================================
class RawMaterialCRUD(
    CRUDBase[inv_models.RawMaterial, inv_schemas.RawMaterialCreate, inv_schemas.RawMaterialUpdate]
):
    """RawMaterial 모델에 특화된 CRUD 작업을 처리합니다."""

    async def get_by_code(self, db: AsyncSession, *, code: str) -> Optional[inv_models.RawMaterial]:
        return await self.get_by_attribute(db, attribute="code", value=code)

    async def create(
        self, db: AsyncSession, *, obj_in: inv_schemas.RawMaterialCreate
    ) -> inv_models.RawMaterial:
        if await self.get_by_code(db, code=obj_in.code):
            raise DuplicateCodeError(f'Raw material with code "{obj_in.code}" already exists')
        return await super().create(db, obj_in=obj_in)

    async def update(
        self, db: AsyncSession, *, db_obj: inv_models.RawMaterial, obj_in: inv_schemas.RawMaterialUpdate
    ) -> inv_models.RawMaterial:
        if obj_in.code and obj_in.code != db_obj.code:
            if await self.get_by_code(db, code=obj_in.code):
                raise DuplicateCodeError(f'Raw material with code "{obj_in.code}" already exists')
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)

    async def remove(self, db: AsyncSession, *, id: int) -> inv_models.RawMaterial:
        """이동 이력이 있는 원자재는 삭제할 수 없습니다."""
        material = await self.get(db, id)
        if not material:
            raise NotFoundError("Raw material not found")
        movement_count = (await db.execute(
            select(func.count()).select_from(inv_models.StockMovement).where(
                inv_models.StockMovement.raw_material_id == id
            )
        )).scalar_one()
        if movement_count > 0:
            raise ValidationError("Cannot delete raw material with movement history.")
        await db.execute(delete(inv_models.Drum).where(inv_models.Drum.raw_material_id == id))
        return await super().delete(db, id=id)

    async def get_drums(
        self, db: AsyncSession, *, raw_material_id: int, active_only: bool = False
    ) -> List[inv_models.Drum]:
        """원자재의 드럼 목록을 FIFO 순서로 조회합니다."""
        if not await self.get(db, raw_material_id):
            raise NotFoundError("Raw material not found")
        query = select(inv_models.Drum).where(inv_models.Drum.raw_material_id == raw_material_id)
        if active_only:
            query = query.where(inv_models.Drum.is_active.is_(True))
        query = query.order_by(inv_models.Drum.created_at, inv_models.Drum.id)
        result = await db.execute(query)
        return result.scalars().all()


class FinishedGoodCRUD(
    CRUDBase[inv_models.FinishedGood, inv_schemas.FinishedGoodCreate, inv_schemas.FinishedGoodUpdate]
):
    """FinishedGood 모델에 특화된 CRUD 작업을 처리합니다."""

    async def get_by_code(self, db: AsyncSession, *, code: str) -> Optional[inv_models.FinishedGood]:
        return await self.get_by_attribute(db, attribute="code", value=code)

    async def create(
        self, db: AsyncSession, *, obj_in: inv_schemas.FinishedGoodCreate
    ) -> inv_models.FinishedGood:
        if await self.get_by_code(db, code=obj_in.code):
            raise DuplicateCodeError(f'Finished good with code "{obj_in.code}" already exists')
        return await super().create(db, obj_in=obj_in)

    async def update(
        self, db: AsyncSession, *, db_obj: inv_models.FinishedGood, obj_in: inv_schemas.FinishedGoodUpdate
    ) -> inv_models.FinishedGood:
        if obj_in.code and obj_in.code != db_obj.code:
            if await self.get_by_code(db, code=obj_in.code):
                raise DuplicateCodeError(f'Finished good with code "{obj_in.code}" already exists')
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)

    async def remove(self, db: AsyncSession, *, id: int) -> inv_models.FinishedGood:
        finished_good = await self.get(db, id)
        if not finished_good:
            raise NotFoundError("Finished good not found")
        movement_count = (await db.execute(
            select(func.count()).select_from(inv_models.StockMovement).where(
                inv_models.StockMovement.finished_good_id == id
            )
        )).scalar_one()
        if movement_count > 0:
            raise ValidationError("Cannot delete finished good with movement history.")
        await db.execute(
            delete(inv_models.FinishedGoodStock).where(inv_models.FinishedGoodStock.finished_good_id == id)
        )
        return await super().delete(db, id=id)

    async def get_stocks(self, db: AsyncSession, *, finished_good_id: int) -> List[inv_models.FinishedGoodStock]:
        """완제품의 위치별 재고를 조회합니다."""
        if not await self.get(db, finished_good_id):
            raise NotFoundError("Finished good not found")
        query = (
            select(inv_models.FinishedGoodStock)
            .where(inv_models.FinishedGoodStock.finished_good_id == finished_good_id)
            .order_by(inv_models.FinishedGoodStock.location_id)
        )
        result = await db.execute(query)
        return result.scalars().all()


# =============================================================================
# 2. 재고 이동 (직접 입력) CRUD
# =============================================================================
class StockMovementCRUD:
    """
    StockMovement에 대한 직접 입력 작업을 처리합니다.
    이동 행은 수정하지 않으며, 정정은 '기존 행 삭제 + 새 행 생성'으로 한 트랜잭션에서 수행합니다.
    """

    model = inv_models.StockMovement

    async def get(self, db: AsyncSession, id: int) -> Optional[inv_models.StockMovement]:
        return await StockLedger(db).get(id)

    async def _validate_target(
        self,
        db: AsyncSession,
        *,
        raw_material_id: Optional[int],
        finished_good_id: Optional[int],
        drum_id: Optional[int],
        location_id: Optional[int],
    ) -> None:
        """품목 종류(BULK/DRUM)와 드럼/위치 지정이 맞는지 쓰기 전에 검사합니다."""
        if raw_material_id is not None:
            material = await db.get(inv_models.RawMaterial, raw_material_id)
            if material is None:
                raise NotFoundError("Raw material not found")
            if material.kind == inv_models.MaterialKind.DRUM and drum_id is None:
                raise ValidationError(f"A drum must be selected for drum-tracked raw material {material.name}")
            if material.kind == inv_models.MaterialKind.BULK and drum_id is not None:
                raise ValidationError(f"Raw material {material.name} is not drum-tracked")
            if drum_id is not None:
                drum = await db.get(inv_models.Drum, drum_id)
                if drum is None:
                    raise NotFoundError("Drum not found")
                if drum.raw_material_id != raw_material_id:
                    raise ValidationError(f"Drum {drum.label} does not belong to raw material {material.name}")
        else:
            if await db.get(inv_models.FinishedGood, finished_good_id) is None:
                raise NotFoundError("Finished good not found")
            if location_id is not None and await db.get(Location, location_id) is None:
                raise NotFoundError("Location not found")

    @staticmethod
    def _history_scopes(movement: inv_models.StockMovement) -> List[Dict[str, Optional[int]]]:
        """과거 잔고를 검사할 단위. 드럼 이동은 드럼 단위, 위치 이동은 위치와 품목 단위입니다."""
        if movement.raw_material_id is not None:
            if movement.drum_id is not None:
                return [{"raw_material_id": movement.raw_material_id, "drum_id": movement.drum_id}]
            return [{"raw_material_id": movement.raw_material_id}]
        scopes = [{"finished_good_id": movement.finished_good_id}]
        if movement.location_id is not None:
            scopes.insert(0, {"finished_good_id": movement.finished_good_id, "location_id": movement.location_id})
        return scopes

    async def _check_history(
        self,
        ledger: StockLedger,
        stock: StockAggregateMaintainer,
        movement: inv_models.StockMovement,
        *,
        remove_ids=(),
        add=None,
        error_cls=NegativeStockError,
    ) -> None:
        targets = stock.targets_of(movement)
        for scope, target in zip(self._history_scopes(movement), targets):
            await ledger.assert_history_non_negative(
                item_name=stock.describe(target),
                remove_ids=remove_ids,
                add=add,
                error_cls=error_cls,
                **scope,
            )

    async def _sync_batch_line(self, db: AsyncSession, movement: inv_models.StockMovement) -> None:
        """배치 소유 이동의 수량이 바뀌면 BatchUsage/BatchFinishedGood 수량도 맞춥니다."""
        if movement.raw_material_id is not None:
            statement = update(BatchUsage).where(
                BatchUsage.batch_id == movement.batch_id,
                BatchUsage.raw_material_id == movement.raw_material_id,
                BatchUsage.drum_id.is_(None) if movement.drum_id is None else BatchUsage.drum_id == movement.drum_id,
            )
            await db.execute(statement.values(quantity=movement.quantity))
        else:
            statement = update(BatchFinishedGood).where(
                BatchFinishedGood.batch_id == movement.batch_id,
                BatchFinishedGood.finished_good_id == movement.finished_good_id,
            )
            await db.execute(statement.values(quantity=movement.quantity))

    async def _remove_batch_line(self, db: AsyncSession, movement: inv_models.StockMovement) -> None:
        if movement.raw_material_id is not None:
            await db.execute(delete(BatchUsage).where(
                BatchUsage.batch_id == movement.batch_id,
                BatchUsage.raw_material_id == movement.raw_material_id,
                BatchUsage.drum_id.is_(None) if movement.drum_id is None else BatchUsage.drum_id == movement.drum_id,
            ))
        else:
            await db.execute(delete(BatchFinishedGood).where(
                BatchFinishedGood.batch_id == movement.batch_id,
                BatchFinishedGood.finished_good_id == movement.finished_good_id,
            ))

    # -------------------------------------------------------------------------
    # 생성 / 수정 / 삭제
    # -------------------------------------------------------------------------
    async def create(
        self, db: AsyncSession, *, obj_in: inv_schemas.StockMovementCreate
    ) -> inv_models.StockMovement:
        """
        재고 이동을 생성합니다.
        - IN/OUT: quantity만큼 증감합니다.
        - ADJUSTMENT: 잠긴 현재 재고와 실사 수량의 차이를 부호 있는 변화량으로 기록합니다.
        차감은 현재 재고와 과거 원장(이동 일자 이후의 누적 잔고) 모두에 대해 검사합니다.
        """
        item = item_of(obj_in)
        await self._validate_target(db, **item)
        moved_on = start_of_business_day(obj_in.date)

        async with UnitOfWork(db) as uow:
            stock = StockAggregateMaintainer(uow)
            ledger = StockLedger(db, uow)
            await stock.lock(**lock_targets(item))

            if obj_in.type == inv_models.MovementType.ADJUSTMENT:
                quantity = Decimal(obj_in.counted_quantity) - stock.current_of(**item)
                if quantity == 0:
                    raise ValidationError("Counted quantity equals current stock; no adjustment needed.")
            else:
                quantity = Decimal(obj_in.quantity)

            movement = inv_models.StockMovement(
                type=obj_in.type,
                quantity=quantity,
                date=moved_on,
                description=obj_in.description,
                **item,
            )
            stock.apply_movement(movement, 1, InsufficientStockError)
            change = signed_quantity(movement.type, quantity)
            if change < 0:
                await self._check_history(
                    ledger, stock, movement, add=(moved_on, change, None), error_cls=InsufficientStockError
                )
            await ledger.append(movement)
            await stock.check_all_consistency()

        logger.info("Stock movement %s created (%s %s)", movement.id, movement.type, movement.quantity)
        return movement

    async def update(
        self, db: AsyncSession, *, id: int, obj_in: inv_schemas.StockMovementUpdate
    ) -> inv_models.StockMovement:
        """
        이동을 정정합니다. 기존 행을 삭제하고 같은 created_at으로 새 행을 만들어 원장 위치를 유지합니다.
        배치 소유 이동은 일자를 바꿀 수 없으며, 수량 변경 시 배치 라인 수량도 함께 바뀝니다.
        """
        existing = await self.get(db, id)
        if existing is None:
            raise NotFoundError("Stock movement not found")

        is_adjustment = existing.type == inv_models.MovementType.ADJUSTMENT
        if is_adjustment and obj_in.quantity is not None:
            raise ValidationError("Adjustments are corrected with counted_quantity.")
        if not is_adjustment and obj_in.counted_quantity is not None:
            raise ValidationError("counted_quantity is only allowed for adjustments.")
        if obj_in.date is not None and existing.batch_id is not None:
            if start_of_business_day(obj_in.date) != existing.date:
                raise ValidationError("Batch movements follow the batch date; update the batch instead.")

        async with UnitOfWork(db) as uow:
            stock = StockAggregateMaintainer(uow)
            ledger = StockLedger(db, uow)
            await stock.lock_for_movements([existing])
            old = await ledger.get(id)
            if old is None:
                raise NotFoundError("Stock movement not found")

            if is_adjustment:
                quantity = old.quantity
                if obj_in.counted_quantity is not None:
                    # 기존 조정을 제외한 재고 기준으로 다시 계산합니다.
                    base = stock.current_of(**item_of(old)) - Decimal(old.quantity)
                    quantity = Decimal(obj_in.counted_quantity) - base
                    if quantity == 0:
                        raise ValidationError("Counted quantity cancels the adjustment; delete it instead.")
            else:
                quantity = Decimal(obj_in.quantity) if obj_in.quantity is not None else old.quantity

            moved_on = start_of_business_day(obj_in.date) if obj_in.date is not None else old.date
            description = obj_in.description if "description" in obj_in.model_fields_set else old.description
            replacement = inv_models.StockMovement(
                type=old.type,
                quantity=quantity,
                date=moved_on,
                description=description,
                batch_id=old.batch_id,
                created_at=old.created_at,
                **item_of(old),
            )

            stock.apply_replacement([old], [replacement], NegativeStockError)
            await self._check_history(
                ledger,
                stock,
                replacement,
                remove_ids=[old.id],
                add=(moved_on, signed_quantity(replacement.type, quantity), old.created_at),
                error_cls=NegativeStockError,
            )
            await ledger.delete_many([old.id])
            await ledger.append(replacement)
            if replacement.batch_id is not None:
                await self._sync_batch_line(db, replacement)
            await stock.check_all_consistency()

        logger.info("Stock movement %s replaced by %s", id, replacement.id)
        return replacement

    async def remove(self, db: AsyncSession, *, id: int) -> inv_models.StockMovement:
        """이동을 삭제하고 효과를 되돌립니다. 배치 소유 이동이면 해당 배치 라인도 삭제합니다."""
        existing = await self.get(db, id)
        if existing is None:
            raise NotFoundError("Stock movement not found")

        async with UnitOfWork(db) as uow:
            stock = StockAggregateMaintainer(uow)
            ledger = StockLedger(db, uow)
            await stock.lock_for_movements([existing])
            old = await ledger.get(id)
            if old is None:
                raise NotFoundError("Stock movement not found")

            stock.apply_movement(old, -1, NegativeStockError)
            await self._check_history(ledger, stock, old, remove_ids=[old.id], error_cls=NegativeStockError)
            await ledger.delete_many([old.id])
            if old.batch_id is not None:
                await self._remove_batch_line(db, old)
            await stock.check_all_consistency()

        logger.info("Stock movement %s deleted", id)
        return old

    # -------------------------------------------------------------------------
    # 일자별 작업
    # -------------------------------------------------------------------------
    async def get_by_date(
        self,
        db: AsyncSession,
        *,
        day: Any,
        movement_type: Optional[inv_models.MovementType] = None,
        raw_material_id: Optional[int] = None,
        finished_good_id: Optional[int] = None,
        drum_id: Optional[int] = None,
        location_id: Optional[int] = None,
    ) -> List[inv_models.StockMovement]:
        """한 영업일의 이동 내역(배치 소유 포함)을 원장 순서로 조회합니다."""
        return await StockLedger(db).find_by_day(
            day=day,
            movement_type=movement_type,
            raw_material_id=raw_material_id,
            finished_good_id=finished_good_id,
            drum_id=drum_id,
            location_id=location_id,
        )

    async def update_by_date(
        self, db: AsyncSession, *, obj_in: inv_schemas.StockMovementByDateUpdate
    ) -> inv_schemas.StockMovementByDateResult:
        """
        해당 영업일/유형의 수동 이동(배치 소유 제외)을 지정 수량으로 맞춥니다.
        - 수동 이동이 2건 이상이면 거부합니다.
        - quantity=0이면 삭제하고, 이동이 없으면 새로 생성합니다.
        """
        item = item_of(obj_in)
        await self._validate_target(db, **item)
        matches = await StockLedger(db).find_by_day(
            day=obj_in.date, movement_type=obj_in.type, manual_only=True, **item
        )
        if len(matches) > 1:
            raise ValidationError(
                "Multiple movements exist for this date and type; edit them individually."
            )

        is_adjustment = obj_in.type == inv_models.MovementType.ADJUSTMENT
        if obj_in.quantity == 0:
            if not matches:
                return inv_schemas.StockMovementByDateResult()
            await self.remove(db, id=matches[0].id)
            return inv_schemas.StockMovementByDateResult(deleted_count=1)

        if not matches:
            payload: Dict[str, Any] = {
                "type": obj_in.type,
                "date": obj_in.date,
                "description": obj_in.description,
                **item,
            }
            payload["counted_quantity" if is_adjustment else "quantity"] = obj_in.quantity
            movement = await self.create(db, obj_in=inv_schemas.StockMovementCreate(**payload))
        else:
            changes: Dict[str, Any] = {"counted_quantity" if is_adjustment else "quantity": obj_in.quantity}
            if obj_in.description is not None:
                changes["description"] = obj_in.description
            movement = await self.update(
                db, id=matches[0].id, obj_in=inv_schemas.StockMovementUpdate(**changes)
            )
        return inv_schemas.StockMovementByDateResult(
            movement=inv_schemas.StockMovementResponse.model_validate(movement)
        )

    async def delete_by_date(
        self,
        db: AsyncSession,
        *,
        day: Any,
        movement_type: inv_models.MovementType,
        raw_material_id: Optional[int] = None,
        finished_good_id: Optional[int] = None,
        drum_id: Optional[int] = None,
        location_id: Optional[int] = None,
    ) -> int:
        """해당 영업일/유형의 수동 이동을 모두 삭제하고 삭제 건수를 반환합니다."""
        item = {
            "raw_material_id": raw_material_id,
            "finished_good_id": finished_good_id,
            "drum_id": drum_id,
            "location_id": location_id,
        }
        if (raw_material_id is None) == (finished_good_id is None):
            raise ValidationError("Exactly one of raw_material_id or finished_good_id is required")
        await self._validate_target(db, **item)
        found = await StockLedger(db).find_by_day(
            day=day, movement_type=movement_type, manual_only=True, **item
        )
        if not found:
            return 0

        async with UnitOfWork(db) as uow:
            stock = StockAggregateMaintainer(uow)
            ledger = StockLedger(db, uow)
            await stock.lock_for_movements(found, **lock_targets(item))
            matches = await ledger.find_by_day(
                day=day, movement_type=movement_type, manual_only=True, **item
            )
            remove_ids = [m.id for m in matches]
            for movement in matches:
                stock.apply_movement(movement, -1, NegativeStockError)
            scopes: Dict[tuple, tuple] = {}
            for movement in matches:
                for scope, target in zip(self._history_scopes(movement), stock.targets_of(movement)):
                    scopes.setdefault(tuple(sorted(scope.items())), (scope, target))
            for scope, target in scopes.values():
                await ledger.assert_history_non_negative(
                    item_name=stock.describe(target),
                    remove_ids=remove_ids,
                    error_cls=NegativeStockError,
                    **scope,
                )
            await ledger.delete_many(remove_ids)
            await stock.check_all_consistency()

        logger.info("Deleted %s %s movement(s) on %s", len(remove_ids), movement_type, day)
        return len(remove_ids)

    # -------------------------------------------------------------------------
    # 드럼 입고
    # -------------------------------------------------------------------------
    async def drum_stock_in(
        self, db: AsyncSession, *, obj_in: inv_schemas.DrumStockInCreate
    ) -> inv_schemas.DrumStockInResponse:
        """
        DRUM 원자재에 새 드럼들을 입고합니다.
        드럼마다 IN 이동 1건을 기록하고 원자재 집계 재고를 증가시킵니다.
        """
        labels = [line.label.strip() for line in obj_in.drums]
        if len(set(labels)) != len(labels):
            raise DuplicateCodeError("Duplicate drum labels in request")

        material = await db.get(inv_models.RawMaterial, obj_in.raw_material_id)
        if material is None:
            raise NotFoundError("Raw material not found")
        if material.kind != inv_models.MaterialKind.DRUM:
            raise ValidationError(f"Raw material {material.name} is not drum-tracked")

        moved_on = start_of_business_day(obj_in.date)
        description = obj_in.description or DRUM_STOCK_IN_DESCRIPTION

        async with UnitOfWork(db) as uow:
            stock = StockAggregateMaintainer(uow)
            ledger = StockLedger(db, uow)
            await stock.lock(raw_material_ids=[material.id])

            existing = (await db.execute(
                select(inv_models.Drum.label).where(
                    inv_models.Drum.raw_material_id == material.id,
                    inv_models.Drum.label.in_(labels),
                )
            )).scalars().all()
            if existing:
                raise DuplicateCodeError(f"Drum label already exists: {', '.join(sorted(existing))}")

            drums: List[inv_models.Drum] = []
            movement_ids: List[int] = []
            for label, line in zip(labels, obj_in.drums):
                drum = inv_models.Drum(
                    raw_material_id=material.id,
                    label=label,
                    current_quantity=Decimal("0"),
                    is_active=False,
                )
                db.add(drum)
                try:
                    await uow.flush()
                except IntegrityError as e:
                    raise DuplicateCodeError(f"Drum label already exists: {label}") from e
                stock.register_new_drum(drum)

                movement = inv_models.StockMovement(
                    type=inv_models.MovementType.IN,
                    quantity=line.quantity,
                    date=moved_on,
                    description=description,
                    raw_material_id=material.id,
                    drum_id=drum.id,
                )
                stock.apply_movement(movement)
                movement_ids.append(await ledger.append(movement))
                drums.append(drum)
            await stock.check_all_consistency()

        logger.info("Drum stock-in: %s drum(s) for raw material %s", len(drums), material.id)
        return inv_schemas.DrumStockInResponse(
            raw_material_id=material.id,
            current_stock=material.current_stock,
            drums=[inv_schemas.DrumResponse.model_validate(drum) for drum in drums],
            movement_ids=movement_ids,
        )


#  각 CRUD 클래스의 인스턴스 생성
raw_material = RawMaterialCRUD(inv_models.RawMaterial)
finished_good = FinishedGoodCRUD(inv_models.FinishedGood)
stock_movement = StockMovementCRUD()
