# app/domains/inv/ledger.py

"""
재고 이동 원장(inv.stock_movements)의 저장/조회를 담당하는 모듈입니다.

StockLedger는 원장 행만 다루며 집계 재고(current_stock 등)는 절대 변경하지 않습니다.
집계 재고는 StockAggregateMaintainer가 같은 UnitOfWork 안에서 함께 갱신합니다.
"""

from datetime import datetime, UTC
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Type

from sqlalchemy import case, delete, func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import InsufficientStockError, InventoryError, NegativeStockError
from app.core.unit_of_work import UnitOfWork
from app.utils.dates import business_day_of, business_day_range
from .models import MovementType, StockMovement

# 과거 재생 시 같은 날짜 안에서 '가장 마지막'에 위치시키기 위한 정렬 키
_END_OF_DAY = datetime.max.replace(tzinfo=UTC)


def signed_quantity(movement_type: str, quantity: Decimal) -> Decimal:
    """원장 행의 부호 있는 재고 변화량. OUT만 음수로 환산합니다."""
    if movement_type == MovementType.OUT:
        return -Decimal(quantity)
    return Decimal(quantity)


def signed_quantity_column():
    return case(
        (StockMovement.type == MovementType.OUT.value, -StockMovement.quantity),
        else_=StockMovement.quantity,
    )


def ledger_order():
    return (StockMovement.date, StockMovement.created_at, StockMovement.id)


class StockLedger:
    """
    원장 저장소.
    읽기는 세션만 있으면 가능하지만, 쓰기(append/delete_many)는 활성 UnitOfWork가 필요합니다.
    """

    def __init__(self, db: AsyncSession, uow: Optional[UnitOfWork] = None):
        self.db = db
        self.uow = uow

    def _ensure_writable(self) -> None:
        if self.uow is None or not self.uow.active:
            raise RuntimeError("Ledger writes must run inside an active UnitOfWork.")

    # -------------------------------------------------------------------------
    # 필터
    # -------------------------------------------------------------------------
    @staticmethod
    def item_filters(
        *,
        raw_material_id: Optional[int] = None,
        finished_good_id: Optional[int] = None,
        drum_id: Optional[int] = None,
        location_id: Optional[int] = None,
    ) -> List[Any]:
        """품목(및 드럼/위치) 단위 WHERE 조건 목록을 만듭니다."""
        if (raw_material_id is None) == (finished_good_id is None):
            raise ValueError("Exactly one of raw_material_id or finished_good_id is required.")
        filters: List[Any] = []
        if raw_material_id is not None:
            filters.append(StockMovement.raw_material_id == raw_material_id)
        else:
            filters.append(StockMovement.finished_good_id == finished_good_id)
        if drum_id is not None:
            filters.append(StockMovement.drum_id == drum_id)
        if location_id is not None:
            filters.append(StockMovement.location_id == location_id)
        return filters

    # -------------------------------------------------------------------------
    # 쓰기
    # -------------------------------------------------------------------------
    async def append(self, movement: StockMovement) -> int:
        """원장 행을 추가하고 flush하여 id를 반환합니다."""
        self._ensure_writable()
        self.db.add(movement)
        await self.db.flush()
        return movement.id

    async def delete_many(self, ids: Iterable[int]) -> int:
        self._ensure_writable()
        ids = list(ids)
        if not ids:
            return 0
        result = await self.db.execute(
            delete(StockMovement)
            .where(StockMovement.id.in_(ids))
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    # -------------------------------------------------------------------------
    # 읽기
    # -------------------------------------------------------------------------
    async def get(self, movement_id: int) -> Optional[StockMovement]:
        statement = (
            select(StockMovement)
            .where(StockMovement.id == movement_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(statement)
        return result.scalar_one_or_none()

    async def find_by_item(
        self,
        *,
        raw_material_id: Optional[int] = None,
        finished_good_id: Optional[int] = None,
        drum_id: Optional[int] = None,
        location_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        types: Optional[Sequence[MovementType]] = None,
    ) -> List[StockMovement]:
        """품목의 원장을 (date, created_at, id) 순서로 조회합니다. end는 미포함입니다."""
        statement = select(StockMovement).where(
            *self.item_filters(
                raw_material_id=raw_material_id,
                finished_good_id=finished_good_id,
                drum_id=drum_id,
                location_id=location_id,
            )
        )
        if start is not None:
            statement = statement.where(StockMovement.date >= start)
        if end is not None:
            statement = statement.where(StockMovement.date < end)
        if types:
            statement = statement.where(StockMovement.type.in_([MovementType(t).value for t in types]))
        statement = statement.order_by(*ledger_order()).execution_options(populate_existing=True)
        result = await self.db.execute(statement)
        return list(result.scalars().all())

    async def find_by_batch(self, batch_id: int) -> List[StockMovement]:
        statement = (
            select(StockMovement)
            .where(StockMovement.batch_id == batch_id)
            .order_by(StockMovement.id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(statement)
        return list(result.scalars().all())

    async def find_by_day(
        self,
        *,
        day: Any,
        movement_type: Optional[MovementType] = None,
        manual_only: bool = False,
        **item: Optional[int],
    ) -> List[StockMovement]:
        """
        한 영업일의 이동 내역을 조회합니다.
        manual_only=True이면 배치가 소유한 이동은 제외합니다.
        """
        start, end = business_day_range(day)
        movements = await self.find_by_item(
            start=start,
            end=end,
            types=[movement_type] if movement_type else None,
            **item,
        )
        if manual_only:
            movements = [m for m in movements if m.batch_id is None]
        return movements

    async def balance_before(self, start: Optional[datetime] = None, **item: Optional[int]) -> Decimal:
        """start 이전(미포함) 이동의 부호 있는 합계. start가 없으면 전체 합계입니다."""
        statement = select(func.coalesce(func.sum(signed_quantity_column()), 0)).where(
            *self.item_filters(**item)
        )
        if start is not None:
            statement = statement.where(StockMovement.date < start)
        result = await self.db.execute(statement)
        return Decimal(result.scalar_one())

    async def balances_by(self, *columns) -> Dict[Any, Decimal]:
        """
        주어진 컬럼(품목/드럼 id 등)별 원장 합계. 정합성 검사 작업에서 사용합니다.
        컬럼이 둘 이상이면 키는 튜플입니다.
        """
        statement = (
            select(*columns, func.sum(signed_quantity_column()))
            .where(*[column.is_not(None) for column in columns])
            .group_by(*columns)
        )
        result = await self.db.execute(statement)
        balances: Dict[Any, Decimal] = {}
        for row in result.all():
            key = row[0] if len(columns) == 1 else tuple(row[:-1])
            balances[key] = Decimal(row[-1])
        return balances

    async def assert_history_non_negative(
        self,
        *,
        item_name: str,
        remove_ids: Iterable[int] = (),
        add: Optional[Tuple[datetime, Decimal, Optional[datetime]]] = None,
        error_cls: Type[InventoryError] = NegativeStockError,
        since: Optional[datetime] = None,
        **item: Optional[int],
    ) -> None:
        """
        품목 원장을 처음부터 재생하면서 remove_ids를 제외하고 add=(date, 부호 있는 수량, created_at)를
        끼워 넣었을 때, 영향받는 시점 이후 어느 시점에서든 누적 잔고가 음수가 되면 error_cls를 발생시킵니다.
        created_at이 없으면 해당 날짜의 마지막 위치에 삽입합니다.
        이미 원장에 반영된 변경은 since로 검사 시작 시점을 지정합니다.
        """
        remove_ids = set(remove_ids)
        movements = await self.find_by_item(**item)

        entries: List[Tuple[Tuple[datetime, datetime, float], Decimal]] = []
        affected_since: Optional[datetime] = since
        for m in movements:
            if m.id in remove_ids:
                affected_since = m.date if affected_since is None else min(affected_since, m.date)
                continue
            entries.append(((m.date, m.created_at, m.id), signed_quantity(m.type, m.quantity)))

        added_quantity = Decimal("0")
        if add is not None:
            add_date, added_quantity, add_created_at = add
            entries.append(((add_date, add_created_at or _END_OF_DAY, float("inf")), added_quantity))
            affected_since = add_date if affected_since is None else min(affected_since, add_date)

        if affected_since is None:
            return

        entries.sort(key=lambda entry: entry[0])
        running = Decimal("0")
        lowest: Optional[Decimal] = None
        lowest_day: Optional[datetime] = None
        for (moved_on, _, _), quantity in entries:
            running += quantity
            if moved_on >= affected_since and (lowest is None or running < lowest):
                lowest, lowest_day = running, moved_on

        if lowest is None or lowest >= 0:
            return

        if issubclass(error_cls, InsufficientStockError):
            requested = abs(added_quantity) if added_quantity < 0 else -lowest
            raise error_cls(item_name, requested + lowest, requested)
        raise error_cls(
            f"Operation would result in negative stock for {item_name} "
            f"on {business_day_of(lowest_day).isoformat()} ({lowest})"
        )

