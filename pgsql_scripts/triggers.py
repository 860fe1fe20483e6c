# pgsql_scripts/triggers.py
from alembic_utils.pg_trigger import PGTrigger
from . import functions as pg_func

db_schema = pg_func.reject_negative_stock_func.schema
db_func = "reject_negative_stock"


def _guard(table: str, column: str) -> PGTrigger:
    """inv.<table>.<column> 의 음수 값을 거부하는 BEFORE INSERT OR UPDATE 트리거"""
    return PGTrigger(
        schema="inv",
        signature=f"before_write_{table}_non_negative",
        on_entity=f"inv.{table}",
        is_constraint=False,
        definition=f"""
        BEFORE INSERT OR UPDATE OF {column}
        ON inv.{table}
        FOR EACH ROW
        EXECUTE FUNCTION {db_schema}.{db_func}('{column}')
        """
    )


trg_raw_materials_non_negative = _guard("raw_materials", "current_stock")
trg_drums_non_negative = _guard("drums", "current_quantity")
trg_finished_goods_non_negative = _guard("finished_goods", "current_stock")
trg_finished_good_stocks_non_negative = _guard("finished_good_stocks", "quantity")
