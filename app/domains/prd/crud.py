# app/domains/prd/crud.py

"""
'prd' 도메인의 배치 트랜잭션 엔진입니다.

배치 생성/수정/삭제는 각각 하나의 UnitOfWork로 처리되며,
실패 시 원장/집계/배치 행 모두 롤백됩니다.

- 생성: 라인 검증 -> 관련 행 잠금 -> 원자재 OUT / 완제품 IN 기록 -> 배치 라인 저장
- 수정: 배치 행 잠금 -> (1단계) 기존 효과 되돌리기 -> (2단계) 새 라인 적용
- 삭제: 배치 행 잠금 -> 기존 효과 되돌리기 -> 원장/라인/배치 삭제
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import delete, func
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.crud_base import CRUDBase, DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, build_pagination
from app.core.exceptions import (
    DuplicateCodeError,
    InsufficientStockError,
    NegativeStockError,
    NotFoundError,
    ValidationError,
)
from app.core.unit_of_work import UnitOfWork
from app.domains.inv.aggregates import StockAggregateMaintainer
from app.domains.inv.crud import StockMovementCRUD
from app.domains.inv.ledger import StockLedger
from app.domains.inv.models import (
    Drum,
    FinishedGood,
    MaterialKind,
    MovementType,
    RawMaterial,
    StockMovement,
)
from app.domains.loc.models import Location
from app.utils.dates import start_of_business_day
from . import models as prd_models
from . import schemas as prd_schemas

logger = logging.getLogger(__name__)


def production_description(code: str) -> str:
    return f"Batch production: {code}"


class BatchCRUD(CRUDBase[prd_models.Batch, prd_schemas.BatchCreate, prd_schemas.BatchUpdate]):
    """Batch 모델에 특화된 CRUD 작업과 재고 효과를 처리합니다."""

    async def get_by_code(self, db: AsyncSession, *, code: str) -> Optional[prd_models.Batch]:
        return await self.get_by_attribute(db, attribute="code", value=code)

    # -------------------------------------------------------------------------
    # 검증 / 잠금 계획
    # -------------------------------------------------------------------------
    async def _validate_lines(
        self,
        db: AsyncSession,
        materials: Sequence[prd_schemas.BatchMaterialLine],
        finished_goods: Sequence[prd_schemas.BatchFinishedGoodLine],
    ) -> Dict[int, RawMaterial]:
        """
        쓰기 전에 라인 구성을 검사합니다.
        - (raw_material_id, drum_id) 중복, finished_good_id 중복
        - 같은 원자재에 드럼 지정 라인과 자동 할당 라인 혼용
        - BULK 원자재에 드럼 지정, 다른 원자재의 드럼 지정
        """
        seen_materials = set()
        for line in materials:
            key = (line.raw_material_id, line.drum_id)
            if key in seen_materials:
                raise ValidationError(
                    f"Duplicate material line for raw material {line.raw_material_id}"
                    + (f" (drum {line.drum_id})" if line.drum_id is not None else "")
                )
            seen_materials.add(key)

        seen_goods = set()
        for line in finished_goods:
            if line.finished_good_id in seen_goods:
                raise ValidationError(f"Duplicate finished good line for finished good {line.finished_good_id}")
            seen_goods.add(line.finished_good_id)

        auto_lines = {line.raw_material_id for line in materials if line.drum_id is None}
        drum_lines = {line.raw_material_id for line in materials if line.drum_id is not None}
        mixed = auto_lines & drum_lines
        if mixed:
            raise ValidationError(
                f"Raw material {min(mixed)} mixes drum-assigned and auto-allocated lines"
            )

        material_ids = {line.raw_material_id for line in materials}
        found: Dict[int, RawMaterial] = {}
        if material_ids:
            result = await db.execute(select(RawMaterial).where(RawMaterial.id.in_(material_ids)))
            found = {material.id: material for material in result.scalars().all()}
            missing = material_ids - set(found)
            if missing:
                raise NotFoundError(f"Raw material not found: {sorted(missing)}")

        drum_ids = {line.drum_id for line in materials if line.drum_id is not None}
        drums: Dict[int, Drum] = {}
        if drum_ids:
            result = await db.execute(select(Drum).where(Drum.id.in_(drum_ids)))
            drums = {drum.id: drum for drum in result.scalars().all()}
            missing = drum_ids - set(drums)
            if missing:
                raise NotFoundError(f"Drum not found: {sorted(missing)}")

        for line in materials:
            material = found[line.raw_material_id]
            if line.drum_id is None:
                continue
            if material.kind == MaterialKind.BULK:
                raise ValidationError(f"Raw material {material.name} is not drum-tracked")
            if drums[line.drum_id].raw_material_id != material.id:
                raise ValidationError(
                    f"Drum {drums[line.drum_id].label} does not belong to raw material {material.name}"
                )
        return found

    @staticmethod
    def _lock_plan(
        materials_by_id: Dict[int, RawMaterial],
        materials: Sequence[prd_schemas.BatchMaterialLine],
        finished_goods: Sequence[prd_schemas.BatchFinishedGoodLine],
    ) -> Dict[str, Any]:
        return {
            "raw_material_ids": {line.raw_material_id for line in materials},
            "drum_ids": {line.drum_id for line in materials if line.drum_id is not None},
            "drum_material_ids": {
                line.raw_material_id for line in materials
                if line.drum_id is None and materials_by_id[line.raw_material_id].kind == MaterialKind.DRUM
            },
            "finished_good_ids": {line.finished_good_id for line in finished_goods},
            "finished_good_locations": {
                (line.finished_good_id, line.location_id)
                for line in finished_goods if line.location_id is not None
            },
        }

    async def _lock_batch(self, db: AsyncSession, id: int) -> prd_models.Batch:
        statement = (
            select(prd_models.Batch)
            .where(prd_models.Batch.id == id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        batch = (await db.execute(statement)).scalar_one_or_none()
        if batch is None:
            raise NotFoundError("Batch not found")
        return batch

    # -------------------------------------------------------------------------
    # 재고 효과 적용 / 되돌리기
    # -------------------------------------------------------------------------
    @staticmethod
    def _allocate(
        stock: StockAggregateMaintainer, line: prd_schemas.BatchMaterialLine
    ) -> List[Tuple[Optional[int], Decimal]]:
        """
        원자재 라인을 (drum_id, 수량) 할당 목록으로 바꿉니다.
        잠긴 재고보다 많이 요청하면 InsufficientStockError를 발생시킵니다.
        """
        material = stock.material(line.raw_material_id)
        quantity = Decimal(line.quantity)

        if material.kind == MaterialKind.DRUM and line.drum_id is None:
            drums = stock.active_drums(material.id)
            available = sum((drum.current_quantity for drum in drums), Decimal("0"))
            if quantity > available:
                raise InsufficientStockError(material.name, available, quantity)
            allocations: List[Tuple[Optional[int], Decimal]] = []
            remaining = quantity
            for drum in drums:
                if remaining <= 0:
                    break
                take = min(drum.current_quantity, remaining)
                allocations.append((drum.id, take))
                remaining -= take
            return allocations

        if line.drum_id is not None:
            drum = stock.drum(line.drum_id)
            if quantity > drum.current_quantity:
                raise InsufficientStockError(stock.describe(drum), drum.current_quantity, quantity)
        elif quantity > material.current_stock:
            raise InsufficientStockError(material.name, material.current_stock, quantity)
        return [(line.drum_id, quantity)]

    async def _apply_lines(
        self,
        db: AsyncSession,
        stock: StockAggregateMaintainer,
        ledger: StockLedger,
        batch: prd_models.Batch,
        materials: Sequence[prd_schemas.BatchMaterialLine],
        finished_goods: Sequence[prd_schemas.BatchFinishedGoodLine],
    ) -> None:
        description = production_description(batch.code)

        for line in materials:
            for drum_id, quantity in self._allocate(stock, line):
                movement = StockMovement(
                    type=MovementType.OUT,
                    quantity=quantity,
                    date=batch.date,
                    description=description,
                    raw_material_id=line.raw_material_id,
                    drum_id=drum_id,
                    batch_id=batch.id,
                )
                stock.apply_movement(movement, 1, InsufficientStockError)
                await ledger.append(movement)
                db.add(prd_models.BatchUsage(
                    batch_id=batch.id,
                    raw_material_id=line.raw_material_id,
                    drum_id=drum_id,
                    quantity=quantity,
                ))

        for line in finished_goods:
            movement = StockMovement(
                type=MovementType.IN,
                quantity=Decimal(line.quantity),
                date=batch.date,
                description=description,
                finished_good_id=line.finished_good_id,
                location_id=line.location_id,
                batch_id=batch.id,
            )
            stock.apply_movement(movement, 1, InsufficientStockError)
            await ledger.append(movement)
            db.add(prd_models.BatchFinishedGood(
                batch_id=batch.id,
                finished_good_id=line.finished_good_id,
                location_id=line.location_id,
                quantity=Decimal(line.quantity),
            ))

        await stock.check_all_consistency()

    async def _reverse(
        self,
        db: AsyncSession,
        stock: StockAggregateMaintainer,
        ledger: StockLedger,
        batch_id: int,
        movements: Sequence[StockMovement],
    ) -> None:
        """배치의 모든 효과를 되돌리고 원장 행과 배치 라인을 삭제합니다."""
        for movement in movements:
            stock.apply_movement(movement, -1, NegativeStockError)
        await ledger.delete_many([movement.id for movement in movements])
        await db.execute(delete(prd_models.BatchUsage).where(prd_models.BatchUsage.batch_id == batch_id))
        await db.execute(
            delete(prd_models.BatchFinishedGood).where(prd_models.BatchFinishedGood.batch_id == batch_id)
        )

    @staticmethod
    def _history_scopes(
        stock: StockAggregateMaintainer, movements: Sequence[StockMovement]
    ) -> Dict[Tuple, str]:
        """이동들이 닿는 과거 잔고 검사 단위(드럼/위치/품목)와 오류 메시지용 이름."""
        scopes: Dict[Tuple, str] = {}
        for movement in movements:
            targets = stock.targets_of(movement)
            for scope, target in zip(StockMovementCRUD._history_scopes(movement), targets):
                scopes.setdefault(tuple(sorted(scope.items())), stock.describe(target))
        return scopes

    async def _check_history(
        self, ledger: StockLedger, scopes: Dict[Tuple, str], since: Optional[datetime]
    ) -> None:
        """변경이 반영된 원장을 since부터 재생해 과거 잔고가 음수가 되면 NegativeStockError."""
        if since is None:
            return
        for scope, item_name in scopes.items():
            await ledger.assert_history_non_negative(item_name=item_name, since=since, **dict(scope))

    async def _flush_batch(self, uow: UnitOfWork, code: str) -> None:
        try:
            await uow.flush()
        except IntegrityError as e:
            raise DuplicateCodeError(f'Batch with code "{code}" already exists') from e

    # -------------------------------------------------------------------------
    # 생성 / 수정 / 삭제
    # -------------------------------------------------------------------------
    async def create(self, db: AsyncSession, *, obj_in: prd_schemas.BatchCreate) -> prd_models.Batch:
        """배치를 생성하고 원자재 소비/완제품 생산을 원장과 집계에 반영합니다."""
        materials_by_id = await self._validate_lines(db, obj_in.materials, obj_in.finished_goods)
        if await self.get_by_code(db, code=obj_in.code):
            raise DuplicateCodeError(f'Batch with code "{obj_in.code}" already exists')

        async with UnitOfWork(db) as uow:
            stock = StockAggregateMaintainer(uow)
            ledger = StockLedger(db, uow)
            await stock.lock(**self._lock_plan(materials_by_id, obj_in.materials, obj_in.finished_goods))

            batch = prd_models.Batch(
                code=obj_in.code,
                date=start_of_business_day(obj_in.date),
                description=obj_in.description,
            )
            db.add(batch)
            await self._flush_batch(uow, obj_in.code)
            await self._apply_lines(db, stock, ledger, batch, obj_in.materials, obj_in.finished_goods)

        logger.info("Batch %s (%s) created", batch.id, batch.code)
        return batch

    async def update(
        self, db: AsyncSession, *, id: int, obj_in: prd_schemas.BatchUpdate
    ) -> prd_models.Batch:
        """
        배치를 수정합니다. '삭제 후 재생성'과 같은 최종 상태를 하나의 트랜잭션으로 만듭니다.
        같은 데이터로 수정하면 재고와 이동 건수는 변하지 않습니다.
        """
        async with UnitOfWork(db) as uow:
            stock = StockAggregateMaintainer(uow)
            ledger = StockLedger(db, uow)
            batch = await self._lock_batch(db, id)

            code = obj_in.code or batch.code
            if code != batch.code:
                existing = await self.get_by_code(db, code=code)
                if existing and existing.id != batch.id:
                    raise DuplicateCodeError(f'Batch with code "{code}" already exists')

            materials = obj_in.materials
            finished_goods = obj_in.finished_goods
            if materials is None or finished_goods is None:
                old_usages, old_outputs = await self._get_lines(db, [batch.id])
                if materials is None:
                    materials = [
                        prd_schemas.BatchMaterialLine(
                            raw_material_id=usage.raw_material_id, drum_id=usage.drum_id, quantity=usage.quantity
                        )
                        for usage, _, _ in old_usages
                    ]
                if finished_goods is None:
                    finished_goods = [
                        prd_schemas.BatchFinishedGoodLine(
                            finished_good_id=output.finished_good_id,
                            location_id=output.location_id,
                            quantity=output.quantity,
                        )
                        for output, _, _ in old_outputs
                    ]
            materials_by_id = await self._validate_lines(db, materials, finished_goods)

            old_movements = await ledger.find_by_batch(batch.id)
            await stock.lock_for_movements(
                old_movements, **self._lock_plan(materials_by_id, materials, finished_goods)
            )
            old_movements = await ledger.find_by_batch(batch.id)
            scopes = self._history_scopes(stock, old_movements)
            since = min((movement.date for movement in old_movements), default=batch.date)

            # 1단계: 기존 효과 되돌리기
            await self._reverse(db, stock, ledger, batch.id, old_movements)

            # 2단계: 새 내용 적용
            batch.code = code
            if obj_in.date is not None:
                batch.date = start_of_business_day(obj_in.date)
            if "description" in obj_in.model_fields_set:
                batch.description = obj_in.description
            db.add(batch)
            await self._flush_batch(uow, code)
            await self._apply_lines(db, stock, ledger, batch, materials, finished_goods)

            for scope, item_name in self._history_scopes(stock, await ledger.find_by_batch(batch.id)).items():
                scopes.setdefault(scope, item_name)
            await self._check_history(ledger, scopes, min(since, batch.date))

        logger.info("Batch %s (%s) updated", batch.id, batch.code)
        return batch

    async def remove(self, db: AsyncSession, *, id: int) -> prd_models.Batch:
        """배치와 그 모든 재고 효과를 삭제합니다."""
        async with UnitOfWork(db) as uow:
            stock = StockAggregateMaintainer(uow)
            ledger = StockLedger(db, uow)
            batch = await self._lock_batch(db, id)

            movements = await ledger.find_by_batch(batch.id)
            await stock.lock_for_movements(movements)
            movements = await ledger.find_by_batch(batch.id)
            scopes = self._history_scopes(stock, movements)
            since = min((movement.date for movement in movements), default=None)

            await self._reverse(db, stock, ledger, batch.id, movements)
            await self._check_history(ledger, scopes, since)
            await db.delete(batch)
            await stock.check_all_consistency()

        logger.info("Batch %s (%s) deleted", batch.id, batch.code)
        return batch

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------
    async def _get_lines(self, db: AsyncSession, batch_ids: Sequence[int]) -> Tuple[list, list]:
        usages = (await db.execute(
            select(prd_models.BatchUsage, RawMaterial.name, Drum.label)
            .join(RawMaterial, RawMaterial.id == prd_models.BatchUsage.raw_material_id)
            .outerjoin(Drum, Drum.id == prd_models.BatchUsage.drum_id)
            .where(prd_models.BatchUsage.batch_id.in_(batch_ids))
            .order_by(prd_models.BatchUsage.id)
        )).all()
        outputs = (await db.execute(
            select(prd_models.BatchFinishedGood, FinishedGood.name, Location.name)
            .join(FinishedGood, FinishedGood.id == prd_models.BatchFinishedGood.finished_good_id)
            .outerjoin(Location, Location.id == prd_models.BatchFinishedGood.location_id)
            .where(prd_models.BatchFinishedGood.batch_id.in_(batch_ids))
            .order_by(prd_models.BatchFinishedGood.id)
        )).all()
        return usages, outputs

    async def _to_responses(
        self, db: AsyncSession, batches: Sequence[prd_models.Batch]
    ) -> List[prd_schemas.BatchResponse]:
        if not batches:
            return []
        usages, outputs = await self._get_lines(db, [batch.id for batch in batches])
        responses = []
        for batch in batches:
            responses.append(prd_schemas.BatchResponse(
                id=batch.id,
                code=batch.code,
                date=batch.date,
                description=batch.description,
                created_at=batch.created_at,
                updated_at=batch.updated_at,
                materials=[
                    prd_schemas.BatchUsageResponse(
                        id=usage.id,
                        raw_material_id=usage.raw_material_id,
                        raw_material_name=material_name,
                        drum_id=usage.drum_id,
                        drum_label=drum_label,
                        quantity=usage.quantity,
                    )
                    for usage, material_name, drum_label in usages if usage.batch_id == batch.id
                ],
                finished_goods=[
                    prd_schemas.BatchFinishedGoodResponse(
                        id=output.id,
                        finished_good_id=output.finished_good_id,
                        finished_good_name=good_name,
                        location_id=output.location_id,
                        location_name=location_name,
                        quantity=output.quantity,
                    )
                    for output, good_name, location_name in outputs if output.batch_id == batch.id
                ],
            ))
        return responses

    async def get_with_lines(self, db: AsyncSession, *, id: int) -> prd_schemas.BatchResponse:
        batch = await db.get(self.model, id, populate_existing=True)
        if batch is None:
            raise NotFoundError("Batch not found")
        return (await self._to_responses(db, [batch]))[0]

    async def get_page(
        self, db: AsyncSession, *, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT
    ) -> Tuple[List[prd_schemas.BatchResponse], Dict[str, Any]]:
        """생산 일자 최신 순으로 배치를 페이지 단위 조회합니다."""
        page = max(1, page)
        limit = min(MAX_PAGE_LIMIT, max(1, limit))
        statement = (
            select(prd_models.Batch)
            .order_by(prd_models.Batch.date.desc(), prd_models.Batch.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        batches = (await db.execute(statement)).scalars().all()
        total = (await db.execute(select(func.count()).select_from(prd_models.Batch))).scalar_one()
        items = await self._to_responses(db, batches)
        return items, build_pagination(page, limit, total, len(items))


batch = BatchCRUD(prd_models.Batch)
