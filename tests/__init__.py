# tests/__init__.py

"""
FastAPI 애플리케이션의 테스트 스위트 패키지입니다.

이 패키지는 API 엔드포인트, 재고 원장 로직, 데이터베이스 상호작용에 대한
통합 테스트 코드를 포함합니다.

주요 구성:
- `domains/`: 각 비즈니스 도메인(usr, loc, inv, prd, rpt)과 동시성 시나리오에 대한
              테스트 파일들을 포함하는 디렉토리입니다.
              예: `domains/test_inv_n.py`
- `conftest.py`: 데이터베이스 세션, 역할별 인증 클라이언트, 마스터 데이터 등
                 테스트 함수가 공유하는 fixtures를 정의합니다.
- `test_main.py`: 애플리케이션 진입점과 워커 설정에 대한 테스트.
"""

# 패키지 메타데이터 (선택 사항)
__title__ = "FIMS API Tests"
__description__ = "Test suite for FIMS FastAPI application."
__version__ = "0.1.0" # 테스트 스위트의 내부 버전
__all__ = [] # 이 패키지에서 'from tests import *' 시 내보낼 이름 목록.
