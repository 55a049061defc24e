from dataclasses import dataclass
from decimal import Decimal

DEFAULT_DURATION_DAYS = 30


@dataclass(frozen=True)
class Plan:
    id: str
    name: str
    price: Decimal
    duration_days: int
    duration_label: str


PLANS = (
    Plan("basic", "Basic", Decimal("999"), 30, "1 Month"),
    Plan("premium", "Premium", Decimal("2499"), 90, "3 Months"),
    Plan("enterprise", "Enterprise", Decimal("4999"), 180, "6 Months"),
)

_BY_ID = {p.id: p for p in PLANS}


def get_plan(plan_id):
    return _BY_ID.get(plan_id)


def duration_days(plan_id) -> int:
    """Entitlement length for ``plan_id``; unknown ids get the default."""
    plan = _BY_ID.get(plan_id)
    return plan.duration_days if plan else DEFAULT_DURATION_DAYS
