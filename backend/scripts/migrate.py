#!/usr/bin/env python3
"""
Bring the products / orders tables up to the shape the API expects.

Every statement is idempotent, so the script is safe to re-run against a
database in any prior state. By default the first failing statement stops the
run: the failure is logged, the engine is disposed and the exit status is 1.
--policy best-effort (or MIGRATION_POLICY=best_effort) runs the remaining
statements instead and exits 1 at the end; a check constraint whose backfill
failed is never added. The database defaults to the DATABASE_URL setting.

Usage:
    python scripts/migrate.py products
    python scripts/migrate.py all --policy fail-fast --database-url postgresql://...
"""
import argparse
import os
import sys

# allow running from repo/scripts
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from storefront.config import settings
from storefront.db import make_engine
from storefront.migrations.manager import SchemaManager, StatementFailure
from storefront.migrations.plans import PLANS, ExecutionPolicy, get_plans
from storefront.utils.log import get_logger

log = get_logger("migrations")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("plan", choices=sorted(PLANS) + ["all"], help="Which migration plan to run")
    parser.add_argument(
        "--policy",
        choices=[p.value.replace("_", "-") for p in ExecutionPolicy],
        default=settings.MIGRATION_POLICY or None,
        help="Override the plan's failure policy",
    )
    parser.add_argument("--database-url", default=settings.DATABASE_URL, help="Defaults to DATABASE_URL")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    policy = ExecutionPolicy.parse(args.policy) if args.policy else None
    engine = make_engine(args.database_url)
    manager = SchemaManager(engine)
    exit_code = 0
    try:
        for plan in get_plans(args.plan):
            try:
                report = manager.run(plan, policy=policy)
            except StatementFailure as e:
                log.error(f"Migration failed at: {e.statement}")
                return 1
            if not report.ok:
                exit_code = 1
            print(
                f"{plan.name}: applied={len(report.applied)} skipped={len(report.skipped)} failed={len(report.failed)}"
            )
    finally:
        engine.dispose()
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
