# app/domains/inv/aggregates.py

"""
집계 재고(원자재/드럼/완제품/위치별 완제품 재고)를 유지하는 모듈입니다.

StockAggregateMaintainer는 하나의 UnitOfWork에 묶여 동작합니다.
1. lock(): 변경할 행을 고정된 전역 순서로 SELECT ... FOR UPDATE 합니다.
   (raw_materials -> drums -> finished_goods -> finished_good_stocks, 각 그룹은 id 오름차순)
2. apply_delta(): 잠금을 획득한 행에만 부호 있는 변화량을 적용합니다.
   결과가 음수가 되면 지정된 예외를 발생시키고, 트랜잭션 전체가 롤백됩니다.
"""

import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Set, Tuple, Type, Union

from sqlalchemy import func, or_
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlmodel import select

from app.core.config import settings
from app.core.exceptions import (
    InsufficientStockError,
    InventoryError,
    NotFoundError,
    StockConsistencyError,
)
from app.core.unit_of_work import UnitOfWork
from app.domains.loc.models import Location
from .ledger import signed_quantity
from .models import Drum, FinishedGood, FinishedGoodStock, MaterialKind, RawMaterial, StockMovement

logger = logging.getLogger(__name__)

StockTarget = Union[RawMaterial, Drum, FinishedGood, FinishedGoodStock]


class StockAggregateMaintainer:
    """하나의 UnitOfWork 안에서 잠긴 집계 재고 행을 관리합니다."""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow
        self.db = uow.session
        self.raw_materials: Dict[int, RawMaterial] = {}
        self.drums: Dict[int, Drum] = {}
        self.finished_goods: Dict[int, FinishedGood] = {}
        self.finished_good_stocks: Dict[Tuple[int, int], FinishedGoodStock] = {}

    # -------------------------------------------------------------------------
    # 잠금
    # -------------------------------------------------------------------------
    async def lock(
        self,
        *,
        raw_material_ids: Iterable[int] = (),
        drum_ids: Iterable[int] = (),
        drum_material_ids: Iterable[int] = (),
        finished_good_ids: Iterable[int] = (),
        finished_good_locations: Iterable[Tuple[int, int]] = (),
    ) -> None:
        """
        관련 행에 행 잠금을 겁니다.
        - drum_ids: 특정 드럼 (소속 원자재도 함께 잠급니다)
        - drum_material_ids: 해당 원자재의 모든 드럼 (FIFO 자동 할당용)
        - finished_good_locations: (finished_good_id, location_id) 쌍. 행이 없으면 0으로 생성합니다.
        존재하지 않는 행이 있으면 NotFoundError를 발생시킵니다.
        """
        self.uow._ensure_active()

        raw_material_ids = set(raw_material_ids) | set(drum_material_ids)
        drum_ids = set(drum_ids)
        drum_material_ids = set(drum_material_ids)
        finished_good_locations = set(finished_good_locations)
        finished_good_ids = set(finished_good_ids) | {fg_id for fg_id, _ in finished_good_locations}

        # 드럼의 소속 원자재는 원자재 잠금 단계에서 먼저 잠가야 하므로 잠금 없이 미리 조회합니다.
        if drum_ids:
            result = await self.db.execute(
                select(Drum.id, Drum.raw_material_id).where(Drum.id.in_(drum_ids))
            )
            owners = dict(result.all())
            missing = drum_ids - set(owners)
            if missing:
                raise NotFoundError(f"Drum not found: {sorted(missing)}")
            raw_material_ids |= set(owners.values())

        if raw_material_ids:
            rows = await self._select_for_update(RawMaterial, RawMaterial.id.in_(raw_material_ids), RawMaterial.id)
            self.raw_materials.update({row.id: row for row in rows})
            missing = raw_material_ids - set(self.raw_materials)
            if missing:
                raise NotFoundError(f"Raw material not found: {sorted(missing)}")

        if drum_ids or drum_material_ids:
            condition = or_(Drum.id.in_(drum_ids), Drum.raw_material_id.in_(drum_material_ids))
            rows = await self._select_for_update(Drum, condition, Drum.id)
            self.drums.update({row.id: row for row in rows})

        if finished_good_ids:
            rows = await self._select_for_update(
                FinishedGood, FinishedGood.id.in_(finished_good_ids), FinishedGood.id
            )
            self.finished_goods.update({row.id: row for row in rows})
            missing = finished_good_ids - set(self.finished_goods)
            if missing:
                raise NotFoundError(f"Finished good not found: {sorted(missing)}")

        if finished_good_locations:
            await self._ensure_finished_good_stocks(finished_good_locations)
            fg_ids = {fg_id for fg_id, _ in finished_good_locations}
            rows = await self._select_for_update(
                FinishedGoodStock,
                FinishedGoodStock.finished_good_id.in_(fg_ids),
                FinishedGoodStock.id,
            )
            for row in rows:
                key = (row.finished_good_id, row.location_id)
                if key in finished_good_locations:
                    self.finished_good_stocks[key] = row

    async def lock_for_movements(self, movements: Iterable[StockMovement], **extra: Iterable) -> None:
        """원장 행이 가리키는 모든 집계 행과 추가 대상(extra)을 한 번에 잠급니다."""
        raw_material_ids: Set[int] = set(extra.pop("raw_material_ids", ()))
        drum_ids: Set[int] = set(extra.pop("drum_ids", ()))
        finished_good_ids: Set[int] = set(extra.pop("finished_good_ids", ()))
        finished_good_locations: Set[Tuple[int, int]] = set(extra.pop("finished_good_locations", ()))
        for movement in movements:
            if movement.raw_material_id is not None:
                raw_material_ids.add(movement.raw_material_id)
                if movement.drum_id is not None:
                    drum_ids.add(movement.drum_id)
            else:
                finished_good_ids.add(movement.finished_good_id)
                if movement.location_id is not None:
                    finished_good_locations.add((movement.finished_good_id, movement.location_id))
        await self.lock(
            raw_material_ids=raw_material_ids,
            drum_ids=drum_ids,
            finished_good_ids=finished_good_ids,
            finished_good_locations=finished_good_locations,
            **extra,
        )

    async def _select_for_update(self, model, condition, order_column) -> List:
        statement = (
            select(model)
            .where(condition)
            .order_by(order_column)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(statement)
        return list(result.scalars().all())

    async def _ensure_finished_good_stocks(self, pairs: Set[Tuple[int, int]]) -> None:
        location_ids = {location_id for _, location_id in pairs}
        result = await self.db.execute(select(Location.id).where(Location.id.in_(location_ids)))
        missing = location_ids - set(result.scalars().all())
        if missing:
            raise NotFoundError(f"Location not found: {sorted(missing)}")

        statement = (
            pg_insert(FinishedGoodStock)
            .values([
                {"finished_good_id": fg_id, "location_id": location_id, "quantity": Decimal("0")}
                for fg_id, location_id in sorted(pairs)
            ])
            .on_conflict_do_nothing(index_elements=["finished_good_id", "location_id"])
        )
        await self.db.execute(statement)

    def register_new_drum(self, drum: Drum) -> None:
        """같은 트랜잭션에서 새로 만든 드럼은 이미 잠긴 것으로 간주합니다."""
        if drum.raw_material_id not in self.raw_materials:
            raise RuntimeError("Owning raw material must be locked before adding drums.")
        self.drums[drum.id] = drum

    # -------------------------------------------------------------------------
    # 조회 (잠긴 행 기준)
    # -------------------------------------------------------------------------
    def material(self, raw_material_id: int) -> RawMaterial:
        return self.raw_materials[raw_material_id]

    def drum(self, drum_id: int) -> Drum:
        return self.drums[drum_id]

    def finished_good(self, finished_good_id: int) -> FinishedGood:
        return self.finished_goods[finished_good_id]

    def finished_good_stock(self, finished_good_id: int, location_id: int) -> FinishedGoodStock:
        return self.finished_good_stocks[(finished_good_id, location_id)]

    def active_drums(self, raw_material_id: int) -> List[Drum]:
        """FIFO 순서(created_at, id)의 재고가 남은 드럼 목록."""
        drums = [
            drum for drum in self.drums.values()
            if drum.raw_material_id == raw_material_id and drum.current_quantity > 0
        ]
        return sorted(drums, key=lambda drum: (drum.created_at, drum.id))

    def current_of(
        self,
        *,
        raw_material_id: Optional[int] = None,
        drum_id: Optional[int] = None,
        finished_good_id: Optional[int] = None,
        location_id: Optional[int] = None,
    ) -> Decimal:
        """이동 대상의 가장 구체적인 단위(드럼/위치/품목)의 잠긴 현재 수량."""
        if raw_material_id is not None:
            if drum_id is not None:
                return self.drum(drum_id).current_quantity
            return self.material(raw_material_id).current_stock
        if location_id is not None:
            return self.finished_good_stock(finished_good_id, location_id).quantity
        return self.finished_good(finished_good_id).current_stock

    def describe(self, target: StockTarget) -> str:
        if isinstance(target, Drum):
            owner = self.raw_materials.get(target.raw_material_id)
            return f"{owner.name if owner else 'raw material'} (drum {target.label})"
        if isinstance(target, FinishedGoodStock):
            owner = self.finished_goods.get(target.finished_good_id)
            return f"{owner.name if owner else 'finished good'} (location {target.location_id})"
        return target.name

    # -------------------------------------------------------------------------
    # 변경
    # -------------------------------------------------------------------------
    def _is_locked(self, target: StockTarget) -> bool:
        if isinstance(target, RawMaterial):
            return self.raw_materials.get(target.id) is target
        if isinstance(target, Drum):
            return self.drums.get(target.id) is target
        if isinstance(target, FinishedGood):
            return self.finished_goods.get(target.id) is target
        if isinstance(target, FinishedGoodStock):
            return self.finished_good_stocks.get((target.finished_good_id, target.location_id)) is target
        return False

    def apply_delta(
        self,
        target: StockTarget,
        signed_quantity: Decimal,
        error_cls: Type[InventoryError] = InsufficientStockError,
    ) -> Decimal:
        """
        잠긴 행에 변화량을 적용하고 새 수량을 반환합니다.
        결과가 음수이면 error_cls를 발생시킵니다.
        """
        self.uow._ensure_active()
        if not self._is_locked(target):
            raise RuntimeError(f"{type(target).__name__} {target.id} was not locked by this unit of work.")

        signed_quantity = Decimal(signed_quantity)
        field = "current_quantity" if isinstance(target, Drum) else (
            "quantity" if isinstance(target, FinishedGoodStock) else "current_stock"
        )
        available = Decimal(getattr(target, field))
        new_value = available + signed_quantity
        if new_value < 0:
            name = self.describe(target)
            if issubclass(error_cls, InsufficientStockError):
                raise error_cls(name, available, -signed_quantity)
            raise error_cls(
                f"Operation would result in negative stock for {name}. "
                f"Available: {available}, Change: {signed_quantity}"
            )

        setattr(target, field, new_value)
        if isinstance(target, Drum):
            target.is_active = new_value > 0
        self.db.add(target)
        return new_value

    def targets_of(self, movement: StockMovement) -> List[StockTarget]:
        """
        원장 행이 영향을 주는 집계 행 목록.
        드럼/위치 하위 재고가 먼저 오므로 오류 메시지가 가장 구체적인 단위를 가리킵니다.
        """
        if movement.raw_material_id is not None:
            targets: List[StockTarget] = []
            if movement.drum_id is not None:
                targets.append(self.drum(movement.drum_id))
            targets.append(self.material(movement.raw_material_id))
            return targets
        targets = []
        if movement.location_id is not None:
            targets.append(self.finished_good_stock(movement.finished_good_id, movement.location_id))
        targets.append(self.finished_good(movement.finished_good_id))
        return targets

    def apply_movement(
        self,
        movement: StockMovement,
        direction: int = 1,
        error_cls: Type[InventoryError] = InsufficientStockError,
    ) -> None:
        """원장 행 하나의 효과를 집계에 적용합니다. direction=-1이면 효과를 되돌립니다."""
        delta = signed_quantity(movement.type, movement.quantity) * direction
        for target in self.targets_of(movement):
            self.apply_delta(target, delta, error_cls)

    def apply_replacement(
        self,
        removed: Iterable[StockMovement],
        added: Iterable[StockMovement],
        error_cls: Type[InventoryError] = InsufficientStockError,
    ) -> None:
        """
        removed의 효과를 되돌리고 added의 효과를 적용한 '순 변화량'만 대상별로 한 번씩 적용합니다.
        중간 단계의 일시적인 음수는 오류로 보지 않습니다.
        """
        deltas: Dict[int, Tuple[StockTarget, Decimal]] = {}
        changes = [(m, -1) for m in removed] + [(m, 1) for m in added]
        for movement, direction in changes:
            delta = signed_quantity(movement.type, movement.quantity) * direction
            for target in self.targets_of(movement):
                _, total = deltas.get(id(target), (target, Decimal("0")))
                deltas[id(target)] = (target, total + delta)
        for target, total in deltas.values():
            if total != 0:
                self.apply_delta(target, total, error_cls)

    # -------------------------------------------------------------------------
    # 정합성 검사
    # -------------------------------------------------------------------------
    async def check_consistency(self, material: RawMaterial) -> None:
        """DRUM 원자재의 집계 재고가 드럼 수량 합계와 일치하는지 검사합니다."""
        if not settings.ENABLE_STOCK_CONSISTENCY_CHECK or material.kind != MaterialKind.DRUM:
            return
        await self.uow.flush()
        result = await self.db.execute(
            select(func.coalesce(func.sum(Drum.current_quantity), 0)).where(
                Drum.raw_material_id == material.id
            )
        )
        drum_total = Decimal(result.scalar_one())
        if abs(drum_total - Decimal(material.current_stock)) > settings.STOCK_CONSISTENCY_TOLERANCE:
            logger.error(
                "Drum total %s does not match stock %s for raw material %s",
                drum_total, material.current_stock, material.id,
            )
            raise StockConsistencyError(
                f"Stock consistency check failed for {material.name}: "
                f"drums total {drum_total}, material stock {material.current_stock}"
            )

    async def check_all_consistency(self) -> None:
        for material in self.raw_materials.values():
            await self.check_consistency(material)
