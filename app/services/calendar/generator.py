"""
Shift calendar generator - main orchestration layer.

Combines data loading, the timeline manager and rule resolution into the
flows the API exposes.
"""

from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models.weekly_rules import WeeklyRules

from .calendar_time import calculate_abs_week, calculate_weeks_in_month
from .data_loader import build_rule_map, build_staff_roster, load_plan_config
from .repository import CalendarRepository, StoredCalendar
from .resolver import WeekResolver
from .timeline import calculate_partial_shift
from .types import AbsWeek, MonthlyShiftResult, ResolvedWeek, RuleId


class UnknownRuleError(Exception):
    """A submitted week names a rule that is not part of the plan."""

    def __init__(self, plan_id: int, rule_ids: Sequence[RuleId]):
        self.rule_ids = list(rule_ids)
        super().__init__(f"Rule(s) {self.rule_ids} do not belong to plan {plan_id}")


def derive_monthly_shift(
    db: Session,
    plan_id: int,
    year: int,
    month: int,
    resolver: Optional[WeekResolver] = None,
) -> MonthlyShiftResult:
    """
    Resolve the shifts shown on one month's calendar.

    This function:
    1. Loads the plan's calendar header
    2. Builds the staff roster and rule map from the plan configuration
    3. Fetches and resolves only the recorded weeks the month shows
    4. Aligns the result to the month's calendar rows

    Args:
        db: Database session
        plan_id: The plan to derive shifts for
        year: Calendar year
        month: Calendar month, 1-12
        resolver: Rule resolver, RotationResolver if omitted

    Returns:
        MonthlyShiftResult with one entry per calendar row (Monday start).
        Rows before the calendar's base week or past the last generated week
        are None, as are skipped weeks and weeks whose rule was deleted.
        A plan without a calendar gives an empty `weeks` list.

    Raises:
        ValueError: If month is not 1-12 or the month precedes the week epoch
    """
    rows = calculate_weeks_in_month(year, month)
    start_abs_week = calculate_abs_week(year, month, 1)
    if start_abs_week is None:
        raise ValueError(f"{year}-{month:02d} is before the week epoch")

    result = MonthlyShiftResult(year=year, month=month, start_abs_week=start_abs_week)

    repo = CalendarRepository(db)
    header = repo.get_header(plan_id)
    if header is None:
        return result

    config = load_plan_config(db, plan_id)
    if config is None:
        return result

    roster, group_index = build_staff_roster(config)
    rule_map = build_rule_map(config, group_index)

    # nothing is recorded before the base week; pad those rows
    lead = max(header.base_abs_week - start_abs_week, 0)
    weeks: list[Optional[ResolvedWeek]] = [None] * min(lead, rows)
    if lead < rows:
        start_offset = start_abs_week + lead - header.base_abs_week
        statuses = repo.fetch_status_range(header.id, start_offset, rows - lead)
        weeks.extend(calculate_partial_shift(statuses, rule_map, roster, resolver))
    weeks.extend([None] * (rows - len(weeks)))

    result.weeks = weeks
    return result


def generate_weeks(
    db: Session,
    plan_id: int,
    start_abs_week: AbsWeek,
    statuses: Sequence[Optional[RuleId]],
) -> StoredCalendar:
    """
    Record weeks for a plan from `start_abs_week`: a rule id makes the week
    active with that rule, None skips it. Safe to retry with the same input.

    Raises:
        UnknownRuleError: If a rule id is not one of the plan's weekly rules
        CalendarNotFoundError: If the plan has no calendar
        AppendWeekError: If the weeks conflict with what is already recorded
        StaleTimelineError: If another writer changed the timeline meanwhile
    """
    requested = {rule_id for rule_id in statuses if rule_id is not None}
    if requested:
        stmt = select(WeeklyRules.id).where(
            WeeklyRules.plan_id == plan_id,
            WeeklyRules.id.in_(sorted(requested)),
        )
        known = set(db.execute(stmt).scalars().all())
        if requested - known:
            raise UnknownRuleError(plan_id, sorted(requested - known))

    stored = CalendarRepository(db).try_to_append_timeline(plan_id, start_abs_week, statuses)
    db.commit()
    return stored


def truncate_weeks(db: Session, plan_id: int, from_abs_week: AbsWeek) -> int:
    """
    Forget every recorded week from `from_abs_week` onward, e.g. after the
    rules those weeks were generated from changed.
    """
    removed = CalendarRepository(db).truncate_timeline(plan_id, from_abs_week)
    db.commit()
    return removed
