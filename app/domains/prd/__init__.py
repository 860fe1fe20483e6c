# app/domains/prd/__init__.py

"""
FastAPI 애플리케이션의 'prd' 도메인 패키지입니다.

'prd' 도메인은 생산 배치(Batch)를 관리합니다. 배치는 원자재를 소비(BatchUsage)하고
완제품을 생산(BatchFinishedGood)하며, 그 효과는 inv.stock_movements 원장에 기록됩니다.

주요 서브모듈:
- `models.py`: 'prd' 스키마의 테이블에 매핑되는 SQLModel 정의.
- `schemas.py`: 배치 생성/수정 요청 및 응답 스키마.
- `crud.py`: 배치 트랜잭션 엔진 (생성/수정/삭제를 하나의 UnitOfWork로 처리).
- `routers.py`: 배치 API 엔드포인트.
"""

__title__ = "FIMS Production Domain"
__description__ = "Manages production batches and their stock effects."
__version__ = "0.1.0"
__all__ = []
