# app/domains/inv/__init__.py

"""
FastAPI 애플리케이션의 'inv' 도메인 패키지입니다.

이 패키지는 PostgreSQL의 'inv' 스키마에 해당하는 데이터 모델과
관련된 비즈니스 로직 및 API 엔드포인트를 포함합니다.

'inv' 도메인은 원자재(RawMaterial)와 드럼(Drum), 완제품(FinishedGood)과 위치별 재고
(FinishedGoodStock), 그리고 재고 이동 원장(StockMovement)을 관리합니다.
집계 재고는 원장과 항상 같은 트랜잭션 안에서 함께 갱신됩니다.

주요 서브모듈:
- `models.py`: 'inv' 스키마의 테이블에 매핑되는 SQLModel 정의.
- `schemas.py`: 요청 및 응답 유효성 검사 스키마.
- `ledger.py`: 원장 저장/조회 (StockLedger).
- `aggregates.py`: 행 잠금과 집계 재고 갱신 (StockAggregateMaintainer).
- `crud.py`: 기준정보 CRUD 및 재고 이동 직접 입력/정정/삭제, 드럼 입고.
- `routers.py`: 'inv' 데이터에 접근하기 위한 FastAPI API 엔드포인트 정의.
- `tasks.py`: 집계/원장 정합성 검사 ARQ 작업.
"""

# 패키지 메타데이터 (선택 사항)
__title__ = "FIMS Inventory Domain"
__description__ = "Manages raw materials, drums, finished goods and the stock movement ledger."
__version__ = "0.1.0"  # inv 도메인 패키지의 버전
__all__ = []  # 'from app.domains.inv import *' 시 내보낼 이름 목록. 일반적으로 비워둡니다.
