# app/core/__init__.py

"""
FastAPI 애플리케이션의 핵심 구성 요소 패키지입니다.

이 패키지는 애플리케이션 전반에 걸쳐 사용되는 공통적이고 핵심적인 기능들을 캡슐화합니다.
주요 서브모듈은 다음과 같습니다:

- `config.py`: 애플리케이션의 설정 및 환경 변수 관리 (Pydantic Settings).
- `database.py`: 데이터베이스 연결, 세션 관리 (SQLModel 및 AsyncSQLAlchemy).
- `unit_of_work.py`: 재고 변경을 하나의 트랜잭션으로 묶고 잠금 오류를 변환하는 작업 단위.
- `crud_base.py`: 도메인 CRUD 클래스들이 상속하는 제네릭 CRUD 기반 클래스.
- `exceptions.py`: 도메인 오류 (HTTPException 하위 클래스).
- `security.py`: 사용자 인증, 권한 부여, 비밀번호 해싱 등 보안 관련 유틸리티.
- `dependencies.py`: FastAPI의 의존성 주입 시스템에서 사용될 공통 의존성 함수들.
- `tasks.py`: ARQ 워커 설정 (정기 작업 등록).
"""

# 패키지 메타데이터 (선택 사항)
__title__ = "FIMS Core"
__description__ = "Core components for FIMS FastAPI application."
__version__ = "0.1.0"  # core 패키지의 버전
__all__ = []  # 'from app.core import *' 시 내보낼 이름 목록. 일반적으로 비워둡니다.
