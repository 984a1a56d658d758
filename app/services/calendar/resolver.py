"""
Rule resolution: turns (rule, roster, phase) into concrete staff names.

The timeline manager only depends on the `WeekResolver` protocol, so the
rotation algorithm can be swapped without touching timeline bookkeeping.
"""

import logging
from typing import Protocol

from .types import (
    DAYS_PER_WEEK,
    DayRule,
    Phase,
    ResolvedDay,
    ResolvedWeek,
    ShiftSlot,
    StaffRoster,
    WeekRule,
    WeekRuleTable,
)


logger = logging.getLogger(__name__)


class WeekResolver(Protocol):
    def resolve(self, rule: WeekRuleTable, roster: StaffRoster, phase: Phase) -> ResolvedWeek:
        ...


class RotationResolver:
    """
    Default resolver. Picks the rotation week `phase % cycle_length` and
    looks every slot up in the roster.

    Total: an empty rule yields seven empty days, and a slot that points
    outside the roster is dropped from the output.
    """

    def resolve(self, rule: WeekRuleTable, roster: StaffRoster, phase: Phase) -> ResolvedWeek:
        if rule.cycle_length == 0:
            return empty_week()

        week_rule = rule.weeks[phase % rule.cycle_length]
        return ResolvedWeek(days=[
            self._resolve_day(day, roster)
            for day in _padded_days(week_rule)
        ])

    def _resolve_day(self, day: DayRule, roster: StaffRoster) -> ResolvedDay:
        return ResolvedDay(
            morning=self._resolve_slots(day.morning, roster),
            afternoon=self._resolve_slots(day.afternoon, roster),
        )

    def _resolve_slots(self, slots: list[ShiftSlot], roster: StaffRoster) -> list[str]:
        names = []
        for slot in slots:
            name = roster.member_name(slot)
            if name is None:
                logger.warning(
                    f"Slot group={slot.group_index} member={slot.member_index} "
                    f"is outside the roster, dropped"
                )
                continue
            names.append(name)
        return names


def empty_week() -> ResolvedWeek:
    return ResolvedWeek(days=[ResolvedDay() for _ in range(DAYS_PER_WEEK)])


def _padded_days(week_rule: WeekRule) -> list[DayRule]:
    # always seven days out, Monday first
    days = list(week_rule.days[:DAYS_PER_WEEK])
    while len(days) < DAYS_PER_WEEK:
        days.append(DayRule())
    return days


default_resolver = RotationResolver()
