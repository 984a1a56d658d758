"""
Shift timeline manager.

Records, for every absolute week from `base_abs_week` onward, whether a
rule-driven shift is active (and at which rotation phase) or skipped, and
derives resolved shifts for any sub-range on demand.

Anchoring: timeline[i] is absolute week `base_abs_week + i`. The phase is a
separate counter seeded by `initial_phase` and advanced by one per Active week.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Sequence

from .resolver import WeekResolver, default_resolver
from .types import (
    SKIPPED,
    AbsWeek,
    Active,
    Phase,
    ResolvedWeek,
    RuleId,
    Skipped,
    StaffRoster,
    Timeline,
    WeekRuleTable,
    WeekStatus,
    is_skipped,
)


logger = logging.getLogger(__name__)


class AppendWeekError(Exception):
    pass


class UnderflowError(AppendWeekError):
    """The requested week lies before the timeline's base week."""


class NotConsecutiveShiftsError(AppendWeekError):
    """The append would leave a gap after the current end of the timeline."""


class AttemptedToOverwriteError(AppendWeekError):
    """The pattern disagrees with an already recorded skip/active status."""


@dataclass
class ShiftTimelineManager:
    base_abs_week: AbsWeek
    initial_phase: Phase = 0
    timeline: Timeline = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.timeline)

    @property
    def end_abs_week(self) -> AbsWeek:
        """First absolute week not yet recorded."""
        return self.base_abs_week + len(self.timeline)

    # --- indexing ---

    def to_offset(self, abs_week: AbsWeek) -> int:
        if abs_week < self.base_abs_week:
            raise UnderflowError(
                f"Week {abs_week} is before the timeline base {self.base_abs_week}"
            )
        return abs_week - self.base_abs_week

    def to_abs_week(self, index: int) -> AbsWeek:
        return self.base_abs_week + index

    def status_at(self, abs_week: AbsWeek) -> Optional[WeekStatus]:
        """Recorded status of `abs_week`, or None outside the timeline."""
        if abs_week < self.base_abs_week:
            return None
        index = abs_week - self.base_abs_week
        if index >= len(self.timeline):
            return None
        return self.timeline[index]

    # --- append / validate ---

    def check_append(self, target_abs_week: AbsWeek, skip_flags: Iterable[bool]) -> None:
        """
        Check that `skip_flags` can be laid over the timeline starting at
        `target_abs_week`.

        ```
         0  1  2  3  4  5
        [A, S, A, A]            timeline
            [S, A, A, N, N]     target 1: ok, overlap matches
            [S, A, S, N, N]     target 1: AttemptedToOverwrite at 3
                    [S, A]      target 4: ok, starts right at the end
                       [S, A]   target 5: NotConsecutiveShifts
        ```

        Weeks past the current end are new data and are never checked.

        Raises:
            UnderflowError: target week precedes the base week
            NotConsecutiveShiftsError: target week is past the current end
            AttemptedToOverwriteError: a recorded week would change skip/active
        """
        index = self.to_offset(target_abs_week)
        if index > len(self.timeline):
            raise NotConsecutiveShiftsError(
                f"Week {target_abs_week} leaves a gap after week {self.end_abs_week - 1}"
            )

        for offset, (status, skipped) in enumerate(zip(self.timeline[index:], skip_flags)):
            if is_skipped(status) != skipped:
                raise AttemptedToOverwriteError(
                    f"Week {self.to_abs_week(index + offset)} is already recorded as "
                    f"{'skipped' if is_skipped(status) else 'active'}"
                )

    def append_week(self, is_skipped_week: bool, rule_id: Optional[RuleId] = None) -> None:
        """Append one week to the end. No validation: see `apply_weeks`."""
        if is_skipped_week:
            self.timeline.append(SKIPPED)
            return
        if rule_id is None:
            raise ValueError("An active week needs a rule id")
        self.timeline.append(Active(phase=self._next_phase(), rule_id=rule_id))

    def apply_weeks(self, target_abs_week: AbsWeek, pattern: Sequence[Optional[RuleId]]) -> int:
        """
        Check `pattern` against the timeline and append the part that is new.

        `pattern[k]` describes week `target_abs_week + k`: a rule id means
        Active with that rule, None means Skipped. Weeks already recorded are
        left untouched, so resubmitting the same pattern is a no-op.

        Returns:
            Number of weeks appended.
        """
        self.check_append(target_abs_week, (rule_id is None for rule_id in pattern))

        overlap = len(self.timeline) - self.to_offset(target_abs_week)
        new_weeks = pattern[overlap:]
        for rule_id in new_weeks:
            self.append_week(rule_id is None, rule_id)

        if new_weeks:
            logger.info(
                f"Appended {len(new_weeks)} week(s) from week {target_abs_week + overlap}, "
                f"timeline now ends before week {self.end_abs_week}"
            )
        return len(new_weeks)

    def _next_phase(self) -> Phase:
        last_phase = self._find_last_active_phase()
        if last_phase is None:
            return self.initial_phase
        return last_phase + 1

    def _find_last_active_phase(self) -> Optional[Phase]:
        for status in reversed(self.timeline):
            if isinstance(status, Active):
                return status.phase
        return None

    # --- truncation ---

    def truncate_from(self, target_abs_week: AbsWeek) -> int:
        """
        Drop every week from `target_abs_week` onward.
        A target before the base clears everything; a target past the end
        changes nothing.

        Returns:
            Number of weeks removed.
        """
        if target_abs_week < self.base_abs_week:
            keep_len = 0
        else:
            keep_len = target_abs_week - self.base_abs_week

        removed = max(len(self.timeline) - keep_len, 0)
        if removed:
            del self.timeline[keep_len:]
            logger.info(f"Truncated {removed} week(s) from week {self.to_abs_week(keep_len)}")
        return removed

    # --- derivation ---

    def slice(self, start_abs_week: AbsWeek, length: int) -> Timeline:
        """Recorded statuses in [start, start + length), clamped to the timeline."""
        try:
            index = self.to_offset(start_abs_week)
        except UnderflowError:
            return []
        return self.timeline[index:index + max(length, 0)]

    def derive_shift(
        self,
        rule_map: Mapping[RuleId, WeekRuleTable],
        roster: StaffRoster,
        start_abs_week: AbsWeek,
        length: int,
        resolver: Optional[WeekResolver] = None,
    ) -> list[Optional[ResolvedWeek]]:
        """
        Resolve the shifts of `length` weeks starting at `start_abs_week`.

        A start before the base gives an empty list. The range is clamped to
        the recorded timeline, so the result may be shorter than `length`.
        """
        return calculate_partial_shift(
            self.slice(start_abs_week, length), rule_map, roster, resolver
        )


def calculate_partial_shift(
    timeline_slice: Sequence[WeekStatus],
    rule_map: Mapping[RuleId, WeekRuleTable],
    roster: StaffRoster,
    resolver: Optional[WeekResolver] = None,
) -> list[Optional[ResolvedWeek]]:
    """
    Resolve each week of a timeline slice.

    Skipped weeks and weeks whose rule is missing from `rule_map` come out
    as None; nothing here raises.
    """
    resolver = resolver or default_resolver

    weeks: list[Optional[ResolvedWeek]] = []
    for status in timeline_slice:
        if isinstance(status, Skipped):
            weeks.append(None)
            continue

        rule = rule_map.get(status.rule_id)
        if rule is None:
            logger.warning(f"Rule {status.rule_id} not found, week left empty")
            weeks.append(None)
            continue

        weeks.append(resolver.resolve(rule, roster, status.phase))
    return weeks
