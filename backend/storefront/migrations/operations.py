"""
Declarative schema operations.

Every operation is idempotent on its own: `is_applied` inspects the live schema
(or data) and the interpreter skips the operation when it reports True, so a
plan can be re-run against a database in any prior state.
"""
from dataclasses import dataclass
from typing import Any, Optional, Tuple

import sqlalchemy as sa
from alembic.operations import Operations
from sqlalchemy.engine import Connection
from sqlalchemy.engine.reflection import Inspector


def _columns(inspector: Inspector, table: str) -> dict:
    return {c["name"]: c for c in inspector.get_columns(table)}


def _normalize_default(value) -> Optional[str]:
    """
    Reduce a reflected server default to a comparable literal:
    "('active'::text)" and "'active'" both become "active".
    """
    if value is None:
        return None
    v = str(value).strip()
    while v.startswith("(") and v.endswith(")"):
        v = v[1:-1].strip()
    v = v.split("::", 1)[0].strip()
    return v.strip("'\"").lower()


def _type_name(type_: Any) -> str:
    return type(type_).__name__.upper()


@dataclass(frozen=True)
class AddColumn:
    table: str
    column: str
    type_: Any
    default: Optional[str] = None  # SQL literal, e.g. "'active'", "0", "false"

    def describe(self) -> str:
        sql = f"ALTER TABLE {self.table} ADD COLUMN IF NOT EXISTS {self.column} {_type_name(self.type_)}"
        if self.default is not None:
            sql += f" DEFAULT {self.default}"
        return sql

    def is_applied(self, conn: Connection, inspector: Inspector) -> bool:
        return self.column in _columns(inspector, self.table)

    def apply(self, ops: Operations) -> None:
        server_default = sa.text(self.default) if self.default is not None else None
        with ops.batch_alter_table(self.table) as batch:
            batch.add_column(sa.Column(self.column, self.type_, server_default=server_default))


@dataclass(frozen=True)
class SetDefault:
    table: str
    column: str
    default: str

    def describe(self) -> str:
        return f"ALTER TABLE {self.table} ALTER COLUMN {self.column} SET DEFAULT {self.default}"

    def is_applied(self, conn: Connection, inspector: Inspector) -> bool:
        col = _columns(inspector, self.table).get(self.column)
        if col is None:
            return False
        return _normalize_default(col.get("default")) == _normalize_default(self.default)

    def apply(self, ops: Operations) -> None:
        with ops.batch_alter_table(self.table) as batch:
            batch.alter_column(self.column, server_default=sa.text(self.default))


@dataclass(frozen=True)
class Backfill:
    table: str
    column: str
    value: Any

    def describe(self) -> str:
        return f"UPDATE {self.table} SET {self.column} = {self.value!r} WHERE {self.column} IS NULL"

    def _target(self):
        return sa.table(self.table, sa.column(self.column))

    def is_applied(self, conn: Connection, inspector: Inspector) -> bool:
        t = self._target()
        missing = conn.execute(
            sa.select(sa.func.count()).select_from(t).where(t.c[self.column].is_(None))
        ).scalar()
        return not missing

    def apply(self, ops: Operations) -> None:
        t = self._target()
        ops.get_bind().execute(
            sa.update(t).where(t.c[self.column].is_(None)).values({self.column: self.value})
        )


@dataclass(frozen=True)
class AddCheckConstraint:
    table: str
    name: str
    column: str
    allowed: Tuple[str, ...]

    @property
    def condition(self) -> str:
        values = ",".join(f"'{v}'" for v in self.allowed)
        return f"{self.column} IN ({values})"

    def describe(self) -> str:
        return f"ALTER TABLE {self.table} ADD CONSTRAINT {self.name} CHECK ({self.condition}) [if absent]"

    def is_applied(self, conn: Connection, inspector: Inspector) -> bool:
        return any(c.get("name") == self.name for c in inspector.get_check_constraints(self.table))

    def apply(self, ops: Operations) -> None:
        with ops.batch_alter_table(self.table) as batch:
            batch.create_check_constraint(self.name, self.condition)
