"""
Internal data types for the shift calendar.
decoupled from SQLAlchemy models for cleaner logic.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


AbsWeek = int  # weeks since the Monday 1969-12-29 epoch
Phase = int
RuleId = int

DAYS_PER_WEEK = 7


class ShiftTime(str, Enum):
    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"


@dataclass(frozen=True)
class Skipped:
    """No shift is generated for this week. Does not consume a phase."""


@dataclass(frozen=True)
class Active:
    """A shift is generated for this week from `rule_id` at rotation `phase`."""
    phase: Phase
    rule_id: RuleId


WeekStatus = Union[Skipped, Active]
Timeline = list[WeekStatus]

SKIPPED = Skipped()


def is_skipped(status: WeekStatus) -> bool:
    return isinstance(status, Skipped)


# --- Rule definitions ---

@dataclass(frozen=True)
class ShiftSlot:
    """Reference to one staff member: (group index, member index) in the roster."""
    group_index: int
    member_index: int


@dataclass
class DayRule:
    morning: list[ShiftSlot] = field(default_factory=list)
    afternoon: list[ShiftSlot] = field(default_factory=list)

    def slots_for(self, shift_time: ShiftTime) -> list[ShiftSlot]:
        if shift_time == ShiftTime.MORNING:
            return self.morning
        return self.afternoon


@dataclass
class WeekRule:
    """One week of day rules, Monday first."""
    days: list[DayRule] = field(
        default_factory=lambda: [DayRule() for _ in range(DAYS_PER_WEEK)]
    )


@dataclass
class WeekRuleTable:
    """
    A weekly rule template: the rotation cycle of week rules.
    Phase `p` uses `weeks[p % len(weeks)]`.
    """
    weeks: list[WeekRule] = field(default_factory=list)

    @property
    def cycle_length(self) -> int:
        return len(self.weeks)


# --- Staff roster ---

@dataclass
class StaffGroup:
    name: str
    members: list[str] = field(default_factory=list)


@dataclass
class StaffRoster:
    groups: list[StaffGroup] = field(default_factory=list)

    def member_name(self, slot: ShiftSlot) -> Optional[str]:
        """Name at `slot`, or None if the slot points outside the roster."""
        if not 0 <= slot.group_index < len(self.groups):
            return None
        members = self.groups[slot.group_index].members
        if not 0 <= slot.member_index < len(members):
            return None
        return members[slot.member_index]


# --- Resolved output ---

@dataclass
class ResolvedDay:
    morning: list[str] = field(default_factory=list)
    afternoon: list[str] = field(default_factory=list)


@dataclass
class ResolvedWeek:
    """Concrete staff names for one week, Monday first."""
    days: list[ResolvedDay] = field(default_factory=list)


@dataclass
class MonthlyShiftResult:
    """
    One entry per calendar row of the month.
    None = skipped week, dangling rule, or week not generated yet.
    """
    year: int
    month: int
    start_abs_week: AbsWeek
    weeks: list[Optional[ResolvedWeek]] = field(default_factory=list)
