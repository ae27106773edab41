import enum
from dataclasses import dataclass
from typing import Dict, List, Tuple, Union

import sqlalchemy as sa

from storefront.migrations.operations import AddCheckConstraint, AddColumn, Backfill, SetDefault
from storefront.models.product import CONDITIONS, STATUSES

Operation = Union[AddColumn, SetDefault, Backfill, AddCheckConstraint]


class ExecutionPolicy(enum.Enum):
    # stop at the first failing statement
    FAIL_FAST = "fail_fast"
    # keep going, report failure once the sequence is done
    BEST_EFFORT = "best_effort"

    @classmethod
    def parse(cls, value: str) -> "ExecutionPolicy":
        return cls(value.strip().lower().replace("-", "_"))


@dataclass
class MigrationPlan:
    name: str
    operations: List[Operation]
    policy: ExecutionPolicy = ExecutionPolicy.FAIL_FAST
    description: str = ""

    def __post_init__(self):
        # a check constraint added before its column is backfilled would reject
        # the existing NULL rows
        backfilled = set()
        for op in self.operations:
            if isinstance(op, Backfill):
                backfilled.add((op.table, op.column))
            elif isinstance(op, AddCheckConstraint) and (op.table, op.column) not in backfilled:
                raise ValueError(
                    f"plan {self.name!r}: constraint {op.name} must follow a backfill of {op.table}.{op.column}"
                )


PRODUCTS_PLAN = MigrationPlan(
    name="products",
    description="Product catalogue columns, defaults and status/condition constraints",
    policy=ExecutionPolicy.FAIL_FAST,
    operations=[
        AddColumn("products", "brand", sa.Text()),
        AddColumn("products", "description", sa.Text()),
        AddColumn("products", "specifications", sa.Text()),
        AddColumn("products", "stock", sa.Integer(), "0"),
        AddColumn("products", "discount", sa.Numeric(), "0"),
        AddColumn("products", "featured", sa.Boolean(), "false"),
        AddColumn("products", "status", sa.Text(), "'active'"),
        AddColumn("products", "condition", sa.Text(), "'new'"),
        AddColumn("products", "view_count", sa.Integer(), "0"),
        SetDefault("products", "status", "'active'"),
        SetDefault("products", "condition", "'new'"),
        Backfill("products", "status", "active"),
        Backfill("products", "condition", "new"),
        Backfill("products", "view_count", 0),
        AddCheckConstraint("products", "products_status_check", "status", STATUSES),
        AddCheckConstraint("products", "products_condition_check", "condition", CONDITIONS),
    ],
)

ORDERS_PLAN = MigrationPlan(
    name="orders",
    description="Checkout columns on orders",
    policy=ExecutionPolicy.FAIL_FAST,
    operations=[
        AddColumn("orders", "user_id", sa.String(36)),
        AddColumn("orders", "order_number", sa.Text()),
        AddColumn("orders", "customer_name", sa.Text()),
        AddColumn("orders", "customer_email", sa.Text()),
        AddColumn("orders", "customer_phone", sa.Text()),
        AddColumn("orders", "shipping_address", sa.Text()),
        AddColumn("orders", "shipping_city", sa.Text()),
        AddColumn("orders", "payment_method", sa.Text(), "'cod'"),
        AddColumn("orders", "payment_status", sa.Text(), "'pending'"),
        AddColumn("orders", "shipping_fee", sa.Numeric(), "0"),
        AddColumn("orders", "notes", sa.Text()),
        AddColumn("orders", "items", sa.JSON()),
        AddColumn("orders", "status", sa.Text(), "'pending'"),
        SetDefault("orders", "status", "'pending'"),
    ],
)

PLANS: Dict[str, MigrationPlan] = {p.name: p for p in (PRODUCTS_PLAN, ORDERS_PLAN)}


def get_plans(name: str) -> Tuple[MigrationPlan, ...]:
    """Resolve a plan name, or "all" for every plan in registration order."""
    if name == "all":
        return tuple(PLANS.values())
    try:
        return (PLANS[name],)
    except KeyError:
        raise ValueError(f"unknown migration plan {name!r}; expected one of {sorted(PLANS)} or 'all'")
