# tests/domains/__init__.py

"""
FastAPI 애플리케이션의 도메인별 테스트 스위트 패키지입니다.

주요 테스트 모듈:
- `test_usr_n.py`: 'usr' 도메인 (사용자, 로그인, 역할) 테스트.
- `test_loc_n.py`: 'loc' 도메인 (보관 위치) 테스트.
- `test_inv_n.py`: 'inv' 도메인 (자재/완제품, 드럼, 재고 이동, 정정) 테스트.
- `test_prd_n.py`: 'prd' 도메인 (생산 배치 생성/수정/삭제) 테스트.
- `test_rpt_n.py`: 'rpt' 도메인 (누적 잔액, 기간별 스냅샷, 월간 보고서) 테스트.
- `test_concurrency_n.py`: 커밋되는 독립 세션을 이용한 동시 쓰기 테스트.
"""

# 패키지 메타데이터 (선택 사항)
__title__ = "FIMS Domain Tests"
__description__ = "Categorized tests for each business domain in FIMS FastAPI application."
__version__ = "0.1.0" # 도메인 테스트 패키지의 내부 버전
__all__ = [] # 이 패키지에서 'from tests.domains import *' 시 내보낼 이름 목록.
