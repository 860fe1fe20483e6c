# app/core/exceptions.py

"""
재고/배치 엔진에서 발생하는 도메인 예외를 정의하는 모듈입니다.

모든 예외는 HTTPException을 상속하므로 CRUD 계층에서 그대로 raise하면
FastAPI가 상태 코드와 detail을 응답으로 변환합니다.
트랜잭션(UnitOfWork) 안에서 발생한 예외는 전체 롤백을 유발합니다.
"""

from decimal import Decimal
from typing import Optional, Dict

from fastapi import HTTPException, status


class InventoryError(HTTPException):
    """재고 도메인 예외의 공통 부모 클래스."""

    def __init__(self, status_code: int, detail: str, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=status_code, detail=detail, headers=headers)

    def __str__(self) -> str:
        return str(self.detail)


class ValidationError(InventoryError):
    """잘못된 형식/중복 입력. 쓰기 작업 전에 거부됩니다."""

    def __init__(self, detail: str = "Validation error"):
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class NotFoundError(InventoryError):
    """참조된 품목/드럼/위치/배치/이동 내역이 존재하지 않습니다."""

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class DuplicateCodeError(InventoryError):
    """배치 코드, 품목 코드, 드럼 라벨 등의 중복."""

    def __init__(self, detail: str = "Duplicate code"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class InsufficientStockError(InventoryError):
    """
    잠금 상태에서 읽은 재고보다 많은 수량을 차감하려 할 때 발생합니다.
    품목명과 가용/요청 수량을 함께 보관합니다.
    """

    def __init__(self, item_name: str, available: Decimal, requested: Decimal):
        self.item_name = item_name
        self.available = Decimal(available)
        self.requested = Decimal(requested)
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Insufficient stock for {item_name}. Available: {self.available}, Required: {self.requested}",
        )


class NegativeStockError(InventoryError):
    """삭제/수정으로 인해 과거 시점의 재고가 음수가 되는 경우 (보정 없이 거부)."""

    def __init__(self, detail: str = "Operation would result in negative stock"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class LockTimeoutError(InventoryError):
    """행 잠금 대기 시간 초과 또는 교착 상태. 호출자가 재시도할 수 있습니다."""

    retryable = True

    def __init__(self, detail: str = "Stock rows are locked by another transaction. Please retry."):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
            headers={"Retry-After": "1"},
        )


class StockConsistencyError(InventoryError):
    """드럼 수량 합계와 원자재 집계 재고가 일치하지 않습니다."""

    def __init__(self, detail: str = "Stock consistency check failed"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
