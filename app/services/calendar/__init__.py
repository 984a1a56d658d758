"""
Shift calendar service package.

Usage:
    from app.services.calendar import ShiftTimelineManager

    manager = ShiftTimelineManager(base_abs_week=2000, initial_phase=0)
    manager.apply_weeks(2000, [rule_id, rule_id, None, rule_id])
    weeks = manager.derive_shift(rule_map, roster, 2000, 4)

    # Or against the database
    from app.services.calendar import generate_weeks, derive_monthly_shift

    generate_weeks(db, plan_id=1, start_abs_week=2000, statuses=[1, 1, None, 1])
    result = derive_monthly_shift(db, plan_id=1, year=2008, month=5)
"""

from .types import (
    AbsWeek,
    Phase,
    RuleId,
    ShiftTime,
    Skipped,
    Active,
    WeekStatus,
    ShiftSlot,
    DayRule,
    WeekRule,
    WeekRuleTable,
    StaffGroup,
    StaffRoster,
    ResolvedDay,
    ResolvedWeek,
    MonthlyShiftResult,
)
from .timeline import (
    ShiftTimelineManager,
    calculate_partial_shift,
    AppendWeekError,
    UnderflowError,
    NotConsecutiveShiftsError,
    AttemptedToOverwriteError,
)
from .resolver import WeekResolver, RotationResolver
from .calendar_time import (
    abs_week_of,
    calculate_abs_week,
    calculate_weeks_in_month,
    week_start_of,
)
from .repository import (
    CalendarRepository,
    StoredCalendar,
    CalendarError,
    CalendarNotFoundError,
    CalendarExistsError,
    CorruptTimelineError,
    StaleTimelineError,
)
from .data_loader import load_plan_config, build_staff_roster, build_rule_map
from .generator import UnknownRuleError, derive_monthly_shift, generate_weeks, truncate_weeks

__all__ = [
    # Types
    "AbsWeek",
    "Phase",
    "RuleId",
    "ShiftTime",
    "Skipped",
    "Active",
    "WeekStatus",
    "ShiftSlot",
    "DayRule",
    "WeekRule",
    "WeekRuleTable",
    "StaffGroup",
    "StaffRoster",
    "ResolvedDay",
    "ResolvedWeek",
    "MonthlyShiftResult",
    # Timeline core
    "ShiftTimelineManager",
    "calculate_partial_shift",
    "AppendWeekError",
    "UnderflowError",
    "NotConsecutiveShiftsError",
    "AttemptedToOverwriteError",
    "WeekResolver",
    "RotationResolver",
    # Dates
    "abs_week_of",
    "calculate_abs_week",
    "calculate_weeks_in_month",
    "week_start_of",
    # Storage
    "CalendarRepository",
    "StoredCalendar",
    "CalendarError",
    "CalendarNotFoundError",
    "CalendarExistsError",
    "CorruptTimelineError",
    "StaleTimelineError",
    "load_plan_config",
    "build_staff_roster",
    "build_rule_map",
    # Main entry points
    "UnknownRuleError",
    "derive_monthly_shift",
    "generate_weeks",
    "truncate_weeks",
]
