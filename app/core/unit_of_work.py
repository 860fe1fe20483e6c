# app/core/unit_of_work.py

"""
재고 쓰기 작업을 하나의 원자적 트랜잭션으로 묶는 Unit of Work 모듈입니다.

모든 재고 변경(원장 기록 + 집계 재고 갱신)은 반드시 UnitOfWork 안에서 수행됩니다.
- 진입 시 트랜잭션(또는 이미 열린 세션 트랜잭션 안의 SAVEPOINT)을 시작하고
  `SET LOCAL lock_timeout`으로 행 잠금 대기 시간을 제한합니다.
- 정상 종료 시 커밋하고, 예외 발생 시 전체를 롤백한 뒤 예외를 그대로 전파합니다.
- 잠금 대기 시간 초과/교착 상태 등 DB 오류는 재시도 가능한 LockTimeoutError로 변환합니다.

사용 예:
    async with UnitOfWork(db) as uow:
        stock = StockAggregateMaintainer(uow)
        ledger = StockLedger(db, uow)
        ...
"""

import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.exceptions import LockTimeoutError

logger = logging.getLogger(__name__)

# lock_not_available, deadlock_detected, serialization_failure
RETRYABLE_SQLSTATES = {"55P03", "40P01", "40001"}


def _sqlstate(exc: DBAPIError) -> Optional[str]:
    """SQLAlchemy가 감싼 드라이버 예외에서 SQLSTATE 코드를 꺼냅니다."""
    orig = getattr(exc, "orig", None)
    for candidate in (orig, getattr(orig, "__cause__", None)):
        if candidate is None:
            continue
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code:
            return code
    return None


class UnitOfWork:
    """
    하나의 AsyncSession 위에서 동작하는 트랜잭션 컨텍스트.
    StockAggregateMaintainer와 StockLedger는 이 객체가 활성 상태일 때만 쓰기를 허용합니다.
    """

    def __init__(self, session: AsyncSession, *, lock_timeout_ms: Optional[int] = None):
        self.session = session
        self.lock_timeout_ms = settings.STOCK_LOCK_TIMEOUT_MS if lock_timeout_ms is None else lock_timeout_ms
        self._transaction = None
        self._nested = False
        self.active = False

    async def __aenter__(self) -> "UnitOfWork":
        if self.session.in_transaction():
            # 요청 처리 중 이미 시작된 트랜잭션이 있으면 SAVEPOINT를 롤백 경계로 사용합니다.
            self._transaction = await self.session.begin_nested()
            self._nested = True
        else:
            self._transaction = await self.session.begin()
        self.active = True

        if self.lock_timeout_ms:
            # SET 구문은 바인드 파라미터를 받을 수 없으므로 정수로 강제 변환 후 사용합니다.
            await self.session.execute(text(f"SET LOCAL lock_timeout = '{int(self.lock_timeout_ms)}ms'"))
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        self.active = False
        if exc_type is None:
            try:
                await self.session.flush()
                await self._transaction.commit()
                if self._nested:
                    await self.session.commit()
            except DBAPIError as e:
                await self._rollback()
                self._raise_translated(e)
                raise
            return False

        await self._rollback()
        if isinstance(exc, DBAPIError):
            self._raise_translated(exc)
        return False

    async def _rollback(self) -> None:
        if self._transaction is not None and self._transaction.is_active:
            await self._transaction.rollback()

    def _raise_translated(self, exc: DBAPIError) -> None:
        code = _sqlstate(exc)
        if code in RETRYABLE_SQLSTATES:
            logger.warning("Retryable database conflict (SQLSTATE %s): %s", code, exc)
            raise LockTimeoutError() from exc

    async def flush(self) -> None:
        """보류 중인 변경 사항을 DB에 반영합니다 (커밋하지 않음)."""
        self._ensure_active()
        await self.session.flush()

    def _ensure_active(self) -> None:
        if not self.active:
            raise RuntimeError("Stock writes must run inside an active UnitOfWork.")
