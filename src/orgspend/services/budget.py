"""Budget projection arithmetic."""

from __future__ import annotations

from collections.abc import Iterable

from orgspend.models.analytics import BudgetOverview, BudgetProjection, DepartmentBudget
from orgspend.models.entities import Department


def project_budget(
    current_spend: float,
    projected_spend: float,
    weekly_budget: float,
) -> BudgetProjection:
    """Compare current and projected spend with a weekly budget.

    Percentages are 0 when there is no budget. A projection is over budget
    only when projected spend strictly exceeds the budget.
    """
    has_budget = weekly_budget > 0
    is_over = projected_spend > weekly_budget
    return BudgetProjection(
        current_spend=current_spend,
        projected_spend=projected_spend,
        weekly_budget=weekly_budget,
        budget_used_percentage=current_spend / weekly_budget * 100 if has_budget else 0.0,
        projected_used_percentage=projected_spend / weekly_budget * 100 if has_budget else 0.0,
        is_over_budget=is_over,
        over_budget_amount=projected_spend - weekly_budget if is_over else 0.0,
        remaining_budget=max(weekly_budget - current_spend, 0.0),
    )


def budget_overview(departments: Iterable[Department]) -> BudgetOverview:
    entries = [
        DepartmentBudget(
            department_id=d.id,
            department_name=d.name,
            projection=project_budget(d.current_spend, d.projected_spend, d.weekly_budget),
        )
        for d in departments
    ]
    organization = project_budget(
        sum(e.projection.current_spend for e in entries),
        sum(e.projection.projected_spend for e in entries),
        sum(e.projection.weekly_budget for e in entries),
    )
    return BudgetOverview(
        organization=organization,
        departments=entries,
        over_budget_count=sum(1 for e in entries if e.projection.is_over_budget),
    )
