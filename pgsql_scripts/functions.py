# pgsql_scripts/functions.py
from alembic_utils.pg_function import PGFunction

# 집계 재고 컬럼이 음수가 되는 UPDATE/INSERT를 데이터베이스 수준에서 거부합니다.
# 트리거 인자로 받은 컬럼을 검사하며, 위반 시 check_violation(23514)을 발생시킵니다.
reject_negative_stock_func = PGFunction(
    schema="inv",
    signature="reject_negative_stock()",
    definition="""
    RETURNS TRIGGER AS $$
    DECLARE
        new_value NUMERIC;
    BEGIN
        -- 트리거 인자(TG_ARGV[0])로 검사할 컬럼 이름을 받습니다.
        EXECUTE format('SELECT ($1).%I', TG_ARGV[0]) INTO new_value USING NEW;

        IF new_value < 0 THEN
            RAISE EXCEPTION 'Negative stock rejected on %.% (id=%, %=%)',
                TG_TABLE_SCHEMA, TG_TABLE_NAME, NEW.id, TG_ARGV[0], new_value
                USING ERRCODE = 'check_violation';
        END IF;

        RETURN NEW;
    END;
    $$ LANGUAGE plpgsql;
    """
)
