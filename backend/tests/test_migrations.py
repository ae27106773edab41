import pytest
import sqlalchemy as sa
from sqlalchemy import inspect, text
from sqlalchemy.exc import IntegrityError

from scripts.migrate import main as migrate_main
from storefront.config import settings
from storefront.migrations.manager import SchemaManager, StatementFailure
from storefront.migrations.operations import AddCheckConstraint, AddColumn, Backfill
from storefront.migrations.plans import (
    ORDERS_PLAN,
    PRODUCTS_PLAN,
    ExecutionPolicy,
    MigrationPlan,
    get_plans,
)


def _rows(engine, sql):
    with engine.connect() as conn:
        return [dict(r._mapping) for r in conn.execute(text(sql))]


def test_products_plan_backfills_and_constrains(legacy_engine):
    report = SchemaManager(legacy_engine).run(PRODUCTS_PLAN)
    assert report.ok
    assert report.policy is ExecutionPolicy.FAIL_FAST

    rows = {r["id"]: r for r in _rows(legacy_engine, "SELECT id, status, condition, view_count FROM products")}
    assert rows["p1"]["status"] == "active"
    assert rows["p1"]["condition"] == "new"
    assert rows["p2"]["condition"] == "used"
    assert rows["p3"]["status"] == "inactive"
    assert all(r["view_count"] == 0 for r in rows.values())

    insp = inspect(legacy_engine)
    cols = {c["name"] for c in insp.get_columns("products")}
    assert {"brand", "description", "specifications", "stock", "discount", "featured", "view_count"} <= cols
    checks = {c["name"] for c in insp.get_check_constraints("products")}
    assert {"products_status_check", "products_condition_check"} <= checks


def test_constraints_reject_unknown_values(legacy_engine):
    SchemaManager(legacy_engine).run(PRODUCTS_PLAN)
    with pytest.raises(IntegrityError):
        with legacy_engine.begin() as conn:
            conn.execute(text("INSERT INTO products (id, name, price, status) VALUES ('p9', 'X', 1, 'archived')"))
    with pytest.raises(IntegrityError):
        with legacy_engine.begin() as conn:
            conn.execute(text("INSERT INTO products (id, name, price, condition) VALUES ('p9', 'X', 1, 'broken')"))


def test_new_rows_get_defaults(legacy_engine):
    SchemaManager(legacy_engine).run(PRODUCTS_PLAN)
    with legacy_engine.begin() as conn:
        conn.execute(text("INSERT INTO products (id, name, price) VALUES ('p4', 'New', 1)"))
    row = _rows(legacy_engine, "SELECT status, condition, stock FROM products WHERE id = 'p4'")[0]
    assert row == {"status": "active", "condition": "new", "stock": 0}


def test_second_run_changes_nothing(legacy_engine):
    manager = SchemaManager(legacy_engine)
    first = manager.run(PRODUCTS_PLAN)
    assert first.applied
    second = manager.run(PRODUCTS_PLAN)
    assert second.ok
    assert second.applied == []
    assert len(second.skipped) == len(PRODUCTS_PLAN.operations)


def test_orders_plan(legacy_engine):
    report = SchemaManager(legacy_engine).run(ORDERS_PLAN)
    assert report.ok
    row = _rows(legacy_engine, "SELECT status, payment_method, payment_status FROM orders WHERE id = 1")[0]
    assert row == {"status": "pending", "payment_method": "cod", "payment_status": "pending"}
    assert SchemaManager(legacy_engine).run(ORDERS_PLAN).applied == []


def _plan_with_bad_first_statement():
    return MigrationPlan(
        name="broken",
        operations=[
            AddColumn("no_such_table", "x", sa.Text()),
            AddColumn("products", "brand", sa.Text()),
        ],
    )


def test_fail_fast_stops_at_first_failure(legacy_engine):
    with pytest.raises(StatementFailure) as exc:
        SchemaManager(legacy_engine).run(_plan_with_bad_first_statement(), policy=ExecutionPolicy.FAIL_FAST)
    assert "no_such_table" in exc.value.statement
    cols = {c["name"] for c in inspect(legacy_engine).get_columns("products")}
    assert "brand" not in cols


def test_best_effort_continues_and_reports(legacy_engine):
    report = SchemaManager(legacy_engine).run(_plan_with_bad_first_statement(), policy=ExecutionPolicy.BEST_EFFORT)
    assert not report.ok
    assert len(report.failed) == 1
    assert report.applied == ["ALTER TABLE products ADD COLUMN IF NOT EXISTS brand TEXT"]
    cols = {c["name"] for c in inspect(legacy_engine).get_columns("products")}
    assert "brand" in cols


def test_constraint_before_backfill_is_rejected():
    with pytest.raises(ValueError):
        MigrationPlan(
            name="bad-order",
            operations=[
                AddCheckConstraint("products", "products_status_check", "status", ("active", "inactive")),
                Backfill("products", "status", "active"),
            ],
        )


def test_policy_parse():
    assert ExecutionPolicy.parse("fail-fast") is ExecutionPolicy.FAIL_FAST
    assert ExecutionPolicy.parse("best_effort") is ExecutionPolicy.BEST_EFFORT


def test_get_plans():
    assert get_plans("all") == (PRODUCTS_PLAN, ORDERS_PLAN)
    with pytest.raises(ValueError):
        get_plans("users")


def test_cli_success(legacy_url, capsys):
    assert migrate_main(["all", "--database-url", legacy_url]) == 0
    assert migrate_main(["all", "--database-url", legacy_url]) == 0
    assert "products: applied=0" in capsys.readouterr().out


def test_cli_fail_fast_exit_code(tmp_path):
    # no orders table at all
    url = f"sqlite:///{tmp_path / 'empty.db'}"
    assert migrate_main(["orders", "--database-url", url]) == 1


def test_cli_best_effort_exit_code(tmp_path):
    url = f"sqlite:///{tmp_path / 'empty.db'}"
    assert migrate_main(["products", "--policy", "best-effort", "--database-url", url]) == 1


def test_products_plan_stops_at_first_failure_by_default(tmp_path):
    engine = sa.create_engine(f"sqlite:///{tmp_path / 'empty.db'}")
    with pytest.raises(StatementFailure) as exc:
        SchemaManager(engine).run(PRODUCTS_PLAN)
    assert exc.value.statement == PRODUCTS_PLAN.operations[0].describe()
    assert "products" not in inspect(engine).get_table_names()


def test_best_effort_skips_constraint_after_failed_backfill(legacy_engine):
    plan = MigrationPlan(
        name="ghost",
        operations=[
            Backfill("products", "ghost", "active"),
            AddCheckConstraint("products", "products_ghost_check", "ghost", ("active",)),
        ],
    )
    report = SchemaManager(legacy_engine).run(plan, policy=ExecutionPolicy.BEST_EFFORT)
    assert not report.ok
    assert report.applied == []
    assert [s for s, _ in report.failed] == [op.describe() for op in plan.operations]
    assert report.failed[1][1] == "backfill of products.ghost failed"
    checks = {c["name"] for c in inspect(legacy_engine).get_check_constraints("products")}
    assert "products_ghost_check" not in checks


def test_cli_products_fails_fast_by_default(tmp_path):
    url = f"sqlite:///{tmp_path / 'empty.db'}"
    assert migrate_main(["products", "--database-url", url]) == 1


def test_cli_defaults_to_configured_database(legacy_url, monkeypatch, capsys):
    monkeypatch.setattr(settings, "DATABASE_URL", legacy_url)
    assert migrate_main(["products"]) == 0
    assert "products: applied=" in capsys.readouterr().out
    cols = {c["name"] for c in inspect(sa.create_engine(legacy_url)).get_columns("products")}
    assert "view_count" in cols
