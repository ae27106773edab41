from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import sqlalchemy as sa
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy.engine import Engine

from storefront.migrations.operations import AddCheckConstraint, Backfill
from storefront.migrations.plans import ExecutionPolicy, MigrationPlan
from storefront.utils.log import get_logger

log = get_logger("migrations")


class StatementFailure(Exception):
    """Raised (fail-fast) or recorded (best-effort) when a schema statement fails."""

    def __init__(self, statement: str, error: Exception):
        super().__init__(f"{statement}: {error}")
        self.statement = statement
        self.error = error


@dataclass
class MigrationReport:
    plan: str
    policy: ExecutionPolicy
    applied: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class SchemaManager:
    """
    Runs a MigrationPlan against a database, one transaction per operation.

    Operations that are already in place are skipped, so running the same plan
    twice changes nothing the second time. A failure leaves whatever earlier
    operations committed in place; every operation is safe to re-run.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def run(self, plan: MigrationPlan, policy: Optional[ExecutionPolicy] = None) -> MigrationReport:
        policy = policy or plan.policy
        report = MigrationReport(plan=plan.name, policy=policy)
        log.info(f"plan={plan.name} policy={policy.value} operations={len(plan.operations)}")

        failed_backfills = set()
        for op in plan.operations:
            statement = op.describe()
            if isinstance(op, AddCheckConstraint) and (op.table, op.column) in failed_backfills:
                # existing NULL rows would violate it
                log.error(f"Not adding {op.name}: backfill of {op.table}.{op.column} failed")
                report.failed.append((statement, f"backfill of {op.table}.{op.column} failed"))
                continue
            try:
                with self.engine.begin() as conn:
                    if op.is_applied(conn, sa.inspect(conn)):
                        log.debug(f"Skipping (already applied): {statement}")
                        report.skipped.append(statement)
                        continue
                    log.info(f"Running: {statement}")
                    op.apply(Operations(MigrationContext.configure(conn)))
                report.applied.append(statement)
            except Exception as e:
                log.error(f"Migration statement failed: {statement} ({e})")
                report.failed.append((statement, str(e)))
                if isinstance(op, Backfill):
                    failed_backfills.add((op.table, op.column))
                if policy is ExecutionPolicy.FAIL_FAST:
                    raise StatementFailure(statement, e) from e

        if report.ok:
            log.info(f"Schema updated successfully (plan={plan.name}, applied={len(report.applied)}, skipped={len(report.skipped)})")
        else:
            log.error(f"Plan {plan.name} finished with {len(report.failed)} failed statement(s)")
        return report
