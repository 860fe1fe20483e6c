# pgsql_scripts/__init__.py
"""
Alembic-utils로 관리하는 PostgreSQL 함수/트리거 정의 패키지입니다.

주요 파일:
- `functions.py`: 집계 재고 음수 거부 함수 (inv.reject_negative_stock)
- `triggers.py`: inv.raw_materials / inv.drums / inv.finished_goods / inv.finished_good_stocks 트리거

migrations/env.py는 이 패키지의 all_db_objects를 register_entities()에 넘겨
autogenerate 비교 대상에 포함시킵니다.
"""

__title__ = "FIMS Pgsql scripts"
__description__ = "Database functions and triggers managed by Alembic-utils."
__version__ = "0.1.0"
__all__ = ["all_db_objects"]

import pkgutil
import importlib
import inspect

from alembic_utils.replaceable_entity import ReplaceableEntity

# Alembic과 Pytest에서 공통으로 사용할 객체 리스트 (아래 자동 탐색으로 채워집니다)
all_db_objects = []

# 패키지 안의 모든 모듈을 순회하며 ReplaceableEntity(PGFunction, PGTrigger 등) 객체를 수집합니다.
for loader, module_name, is_pkg in pkgutil.iter_modules(__path__):
    module = importlib.import_module(f".{module_name}", __package__)
    for name, obj in inspect.getmembers(module):
        if isinstance(obj, ReplaceableEntity):
            all_db_objects.append(obj)
