# ecovoice/dashboard.py
"""Pure reductions over the activity log for the dashboard.

Every total is recomputed from the records on each call; nothing is
maintained incrementally.
"""
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from .config import DAILY_TARGET_KG
from .schemas import ActivityRecord, Category, DashboardSummary, DayTotal, GoalProgress


def local_day(record: ActivityRecord) -> date:
    return record.timestamp.astimezone().date()


def _today(today):
    return today or datetime.now().astimezone().date()


def _total(records, start: date, end: date):
    return sum(r.co2_kg for r in records if start <= local_day(r) <= end)


def daily_total(records: Iterable[ActivityRecord], today: Optional[date] = None) -> float:
    day = _today(today)
    return _total(records, day, day)


def week_start(today: date) -> date:
    return today - timedelta(days=today.weekday())


def week_total(records: Iterable[ActivityRecord], today: Optional[date] = None) -> float:
    """Monday-to-today total, used as the weekly progress figure."""
    day = _today(today)
    return _total(records, week_start(day), day)


def category_breakdown(records: Iterable[ActivityRecord], since: Optional[date] = None, until: Optional[date] = None):
    totals = {c.value: 0.0 for c in Category}
    for r in records:
        day = local_day(r)
        if since and day < since:
            continue
        if until and day > until:
            continue
        totals[r.category.value] += r.co2_kg
    return totals


def last_seven_days(records: Iterable[ActivityRecord], today: Optional[date] = None) -> List[Tuple[date, float]]:
    day = _today(today)
    records = list(records)
    days = [day - timedelta(days=offset) for offset in range(6, -1, -1)]
    return [(d, _total(records, d, d)) for d in days]


def goal_progress(progress: float, goal: float) -> GoalProgress:
    ratio = progress / goal if goal > 0 else 0.0
    percent_to_go = round((goal - progress) / goal * 100) if goal > 0 else 0
    return GoalProgress(progress=progress, goal=goal, ratio=ratio, percent_to_go=percent_to_go)


def remaining_daily_budget(total_today: float, target: float = DAILY_TARGET_KG) -> float:
    return max(0.0, target - total_today)


def summarize(records: Iterable[ActivityRecord], weekly_goal: float, now: Optional[datetime] = None) -> DashboardSummary:
    records = list(records)
    today = (now or datetime.now()).astimezone().date()
    total_today = daily_total(records, today)
    return DashboardSummary(
        today=today,
        today_total=total_today,
        remaining_today=remaining_daily_budget(total_today),
        activity_count=len(records),
        today_by_category=category_breakdown(records, since=today, until=today),
        week_by_category=category_breakdown(records, since=week_start(today), until=today),
        last_seven_days=[
            DayTotal(day=d, label=d.strftime("%a"), co2_kg=total)
            for d, total in last_seven_days(records, today)
        ],
        weekly=goal_progress(week_total(records, today), weekly_goal),
    )
