# app/domains/rpt/__init__.py

"""
FastAPI 애플리케이션의 'rpt' (Report) 도메인 패키지입니다.

이 패키지는 자체 테이블을 갖지 않으며, 'inv' 도메인의 재고 이동 원장을 재생하여
누적 잔고(running balance)와 일/월 단위 재고 스냅샷, 월간 보고서를 계산합니다.
모든 조회는 읽기 전용이며 집계 재고를 변경하지 않습니다.

주요 서브모듈:
- `schemas.py`: 보고서 응답용 Pydantic 모델.
- `crud.py`: 원장 재생 로직.
- `routers.py`: 보고서 조회 API 엔드포인트 정의.
"""


from . import schemas, routers, crud  # noqa: F401

# 패키지 메타데이터
__title__ = "FIMS Report Domain"
__description__ = "Read-only projections over the stock movement ledger."
__version__ = "0.1.0"
__all__ = ["schemas", "routers", "crud"]
