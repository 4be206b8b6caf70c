"""
Query — фільтрація списку кампаній, KPI та прогноз бюджету.

Усі функції чисті: приймають послідовність кампаній і нічого не змінюють.
"""

from typing import NamedTuple

from adstats.constants import FILTER_ALL, REVENUE_ELASTICITY, STATUS_ACTIVE
from adstats.models import Campaign, ValidationError


class KpiSummary(NamedTuple):
    """Агреговані показники для панелі KPI."""
    total_budget: float
    avg_roi: float        # середнє арифметичне ROI кампаній, %
    avg_ctr: float        # середнє арифметичне CTR кампаній, % (без ваг)
    total_conversions: int
    active_count: int


class Forecast(NamedTuple):
    """Прогноз при зміні загального бюджету."""
    growth_percent: float
    total_budget: float
    total_revenue: float
    current_roi: float
    projected_budget: float
    projected_revenue: float
    projected_roi: float


def _is_any(value: str | None) -> bool:
    return not value or value.strip().casefold() == FILTER_ALL.casefold()


def _roi(budget: float, revenue: float) -> float:
    if budget <= 0:
        return 0.0
    return (revenue - budget) / budget * 100


# ─── Фільтрація ───

def filter_campaigns(campaigns, search: str = "", channel: str = None,
                     status: str = None) -> list:
    """
    Фільтрує кампанії і сортує за ROI (від більшого до меншого).

    search  — підрядок назви, без урахування регістру
    channel — точний збіг, або None / "" / "All" — без фільтра
    status  — точний збіг, або None / "" / "All" — без фільтра
    """
    text = (search or "").strip().casefold()
    channel = (channel or "").strip()
    status = (status or "").strip()
    result = list(campaigns)

    if text:
        result = [c for c in result if text in c.name.casefold()]
    if not _is_any(channel):
        result = [c for c in result if c.channel == channel]
    if not _is_any(status):
        result = [c for c in result if c.status == status]

    result.sort(key=lambda c: c.roi, reverse=True)
    return result


def has_any_filter(search: str = "", channel: str = None, status: str = None) -> bool:
    return bool((search or "").strip()) or not _is_any(channel) or not _is_any(status)


# ─── KPI ───

def aggregate(campaigns) -> KpiSummary:
    items = list(campaigns)
    count = len(items)
    return KpiSummary(
        total_budget=sum(c.budget for c in items),
        avg_roi=sum(c.roi for c in items) / count if count else 0.0,
        avg_ctr=sum(c.ctr for c in items) / count if count else 0.0,
        total_conversions=sum(c.conversions for c in items),
        active_count=sum(1 for c in items if c.status == STATUS_ACTIVE),
    )


# ─── Прогноз ───

def forecast(campaigns, growth_percent: float) -> Forecast:
    """
    Прогнозує бюджет, виручку та ROI, якщо загальний бюджет зміниться
    на growth_percent відсотків. Виручка росте повільніше за бюджет
    (коефіцієнт REVENUE_ELASTICITY).

    Raises: ValidationError якщо growth_percent < -100
    """
    if growth_percent < -100:
        raise ValidationError("Відсоток зміни бюджету не може бути меншим за -100.",
                              "growth_percent")

    items: list[Campaign] = list(campaigns)
    total_budget = sum(c.budget for c in items)
    total_revenue = sum(c.revenue for c in items)

    projected_budget = total_budget * (1 + growth_percent / 100)
    projected_revenue = total_revenue * (1 + growth_percent / 100 * REVENUE_ELASTICITY)

    return Forecast(
        growth_percent=growth_percent,
        total_budget=total_budget,
        total_revenue=total_revenue,
        current_roi=_roi(total_budget, total_revenue),
        projected_budget=projected_budget,
        projected_revenue=projected_revenue,
        projected_roi=_roi(projected_budget, projected_revenue),
    )


# ─── Форматування для GUI ───

def format_money(value: float) -> str:
    return f"{value:,.0f}".replace(",", " ")


def format_kpis(summary: KpiSummary) -> dict:
    """Повертає тексти для карток KPI."""
    return {
        "total_budget": format_money(summary.total_budget),
        "avg_roi": f"{summary.avg_roi:.2f}%",
        "avg_ctr": f"{summary.avg_ctr:.2f}%",
        "total_conversions": str(summary.total_conversions),
        "active_count": str(summary.active_count),
    }


def format_forecast(fc: Forecast) -> str:
    lines = [
        f"Прогноз при зміні бюджету на {fc.growth_percent:.1f}%:",
        f"  • Новий бюджет: {format_money(fc.projected_budget)}",
        f"  • Прогноз виручки: {format_money(fc.projected_revenue)}",
        f"  • ROI: {fc.current_roi:.2f}% → {fc.projected_roi:.2f}%",
    ]
    return "\n".join(lines)
