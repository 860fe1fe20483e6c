# app/domains/inv/tasks.py

import logging
from decimal import Decimal
from typing import Any, Dict, List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.database import get_async_session_context
from app.domains.inv import models as inv_models
from app.domains.inv.ledger import StockLedger

#  로거 설정
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _compare(
    kind: str, key: Any, aggregate: Decimal, replayed: Decimal, mismatches: List[Dict[str, Any]]
) -> None:
    if abs(Decimal(aggregate) - replayed) > settings.STOCK_CONSISTENCY_TOLERANCE:
        logger.warning("%s %s: aggregate %s != ledger %s", kind, key, aggregate, replayed)
        mismatches.append({
            "kind": kind,
            "key": key,
            "aggregate": str(aggregate),
            "ledger": str(replayed),
        })


async def _reconcile(db: AsyncSession) -> Dict[str, Any]:
    ledger = StockLedger(db)
    mismatches: List[Dict[str, Any]] = []

    material_balances = await ledger.balances_by(inv_models.StockMovement.raw_material_id)
    drum_balances = await ledger.balances_by(inv_models.StockMovement.drum_id)
    good_balances = await ledger.balances_by(inv_models.StockMovement.finished_good_id)
    location_balances = await ledger.balances_by(
        inv_models.StockMovement.finished_good_id, inv_models.StockMovement.location_id
    )

    materials = (await db.execute(select(inv_models.RawMaterial))).scalars().all()
    for material in materials:
        _compare("raw_material", material.id, material.current_stock,
                 material_balances.get(material.id, Decimal("0")), mismatches)

    drums = (await db.execute(select(inv_models.Drum))).scalars().all()
    for drum in drums:
        _compare("drum", drum.id, drum.current_quantity, drum_balances.get(drum.id, Decimal("0")), mismatches)

    goods = (await db.execute(select(inv_models.FinishedGood))).scalars().all()
    for good in goods:
        _compare("finished_good", good.id, good.current_stock,
                 good_balances.get(good.id, Decimal("0")), mismatches)

    stocks = (await db.execute(select(inv_models.FinishedGoodStock))).scalars().all()
    for stock in stocks:
        key = (stock.finished_good_id, stock.location_id)
        _compare("finished_good_stock", list(key), stock.quantity,
                 location_balances.get(key, Decimal("0")), mismatches)

    checked = len(materials) + len(drums) + len(goods) + len(stocks)
    return {"checked": checked, "mismatches": mismatches}


async def reconcile_stock_aggregates_task(ctx: Dict[str, Any]) -> Dict[str, Any]:
    """
    모든 원자재/드럼/완제품/위치별 재고의 집계 값을 원장 재생 결과와 비교합니다.
    불일치는 로그로 보고만 하고 자동으로 고치지 않습니다.
    ctx에 'db' 세션이 있으면 그 세션을 사용합니다. (동기 실행 시)
    """
    logger.info("백그라운드 작업 시작: 재고 집계/원장 정합성 검사")
    db = ctx.get("db") if ctx else None
    if db is not None:
        result = await _reconcile(db)
    else:
        async with get_async_session_context() as session:
            result = await _reconcile(session)

    if result["mismatches"]:
        logger.error("재고 정합성 검사: %s건 불일치 발견", len(result["mismatches"]))
        status = "mismatch"
    else:
        logger.info("재고 정합성 검사 완료: %s건 모두 일치", result["checked"])
        status = "success"
    return {"status": status, **result}
