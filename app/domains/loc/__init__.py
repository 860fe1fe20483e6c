# app/domains/loc/__init__.py

"""
FastAPI 애플리케이션의 'loc' 도메인 패키지입니다.

'loc' 도메인은 완제품이 보관되는 위치(Location: 창고, 출하장 등)를 관리합니다.
완제품의 위치별 재고(inv.finished_good_stocks)와 재고 이동(inv.stock_movements)이
이 위치를 참조합니다.

주요 서브모듈:
- `models.py`: 'loc' 스키마의 테이블에 매핑되는 SQLModel 정의.
- `schemas.py`: 요청/응답 유효성 검사 스키마.
- `crud.py`: 위치 CRUD (기본 위치 단일화, 사용 중인 위치 삭제 방지).
- `routers.py`: 위치 API 엔드포인트.
"""

__title__ = "FIMS Location Domain"
__description__ = "Manages storage locations for finished goods."
__version__ = "0.1.0"
__all__ = []
