# app/main.py

from typing import AsyncGenerator
from contextlib import asynccontextmanager
from arq.connections import create_pool, RedisSettings
from arq.cron import cron

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select
from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

# 핵심 설정 및 데이터베이스 모듈 임포트
from app.core.config import settings
from app.core.database import engine, get_session

from app import API_PREFIX

# 태스크 모듈 임포트
from app.core import tasks as core_tasks
from app.domains.inv import tasks as inv_tasks

# 도메인 라우터 임포트
from app.domains.usr.routers import router as usr_router
from app.domains.loc.routers import router as loc_router
from app.domains.inv.routers import router as inv_router
from app.domains.prd.routers import router as prd_router
from app.domains.rpt.routers import router as rpt_router

# ARQ 워커가 실행할 태스크 함수 목록
worker_functions = [
    core_tasks.health_check_database_task,
    inv_tasks.reconcile_stock_aggregates_task,
]


# ARQ 워커 설정 클래스 (실행: arq app.main.ArqWorkerSettings)
class ArqWorkerSettings:
    redis_settings = RedisSettings(host=settings.REDIS_HOST, port=settings.REDIS_PORT)
    functions = worker_functions
    cron_jobs = [
        # 매일 00:00 데이터베이스 헬스 체크
        cron(core_tasks.health_check_database_task, hour={0}, minute={0}, timeout=300, keep_result=600),
        # 매일 02:00 집계 재고와 원장 재생 결과 비교
        cron(inv_tasks.reconcile_stock_aggregates_task, hour={2}, minute={0}, timeout=1800, keep_result=3600),
    ]


# -- 애플리케이션 수명 주기 이벤트 핸들러 --
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI 애플리케이션의 수명 주기 이벤트(데이터베이스, ARQ Redis)를 함께 처리합니다.
    """
    print("FastAPI 애플리케이션 시작 중...")
    try:
        # 스키마/테이블은 Alembic 마이그레이션으로 관리합니다.
        print("ARQ Redis 커넥션 풀을 생성합니다...")
        app.state.redis = await create_pool(ArqWorkerSettings.redis_settings)
        print("ARQ Redis 커넥션 풀 생성 완료.")
    except Exception as e:
        print(f"애플리케이션 시작 중 오류 발생: {e}")
        raise

    yield  # 애플리케이션 실행

    print("FastAPI 애플리케이션 종료 중...")
    if getattr(app.state, "redis", None):
        await app.state.redis.close()
        print("ARQ Redis 연결 풀 종료 완료.")
    await engine.dispose()
    print("데이터베이스 연결 풀 종료 완료.")


# -- FastAPI 애플리케이션 인스턴스 생성 --
app = FastAPI(
    title="FIMS API",
    description="Factory Inventory Management System (FIMS) API for raw materials, drums, finished goods, production batches and stock reports.",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# -- CORS 미들웨어 설정 --
# 프로덕션에서는 allow_origins를 실제 프론트엔드 도메인으로 제한합니다.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -- 도메인 라우터 포함 --
app.include_router(usr_router, prefix=f"{API_PREFIX}/usr", tags=["User Management (사용자 관리)"])
app.include_router(loc_router, prefix=f"{API_PREFIX}/loc", tags=["Location Management (위치 관리)"])
app.include_router(inv_router, prefix=f"{API_PREFIX}/inv", tags=["Inventory Management (재고 관리)"])
app.include_router(prd_router, prefix=f"{API_PREFIX}/prd", tags=["Production Management (생산 관리)"])
app.include_router(rpt_router, prefix=f"{API_PREFIX}/rpt", tags=["Stock Reports (재고 보고서)"])


# -- 루트 엔드포인트 --
@app.get("/", summary="API Root", response_description="Welcome message and documentation link.")
async def read_root():
    """
    FIMS API의 루트 엔드포인트입니다.
    """
    return {"message": "Welcome to FIMS API. Visit /docs for interactive API documentation."}


# -- 헬스 체크 엔드포인트 --
@app.get("/health-check", summary="Health Check", response_description="Status of the application and database connection.")
async def health_check(session: Session = Depends(get_session)):
    """
    데이터베이스 연결을 테스트하여 서비스의 정상 작동 여부를 확인합니다.
    """
    try:
        result = await session.exec(select(1))
        value = result.first()
    except SQLAlchemyError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Database connection error during health check: {e}"
        )
    if not value:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database health check failed: No result from test query"
        )
    return {"status": "ok", "database_connection": "successful"}


# -- Uvicorn 서버 직접 실행 (개발용) --
# if __name__ == "__main__":
#     import uvicorn
#     uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
