"""
Calendar persistence.
Loads and saves the shift timeline of a plan. The timeline is stored one
row per week offset and saved append-only, except for explicit truncation.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from app.db.models.shift_calendars import ShiftCalendars
from app.db.models.weekly_statuses import WeeklyStatuses, WeekStatusType

from .timeline import ShiftTimelineManager
from .types import SKIPPED, AbsWeek, Active, Phase, RuleId, WeekStatus


logger = logging.getLogger(__name__)


class CalendarError(Exception):
    pass


class CalendarNotFoundError(CalendarError):
    pass


class CalendarExistsError(CalendarError):
    pass


class CorruptTimelineError(CalendarError):
    pass


class StaleTimelineError(CalendarError):
    """The stored timeline changed after it was loaded."""


@dataclass
class StoredCalendar:
    id: int
    plan_id: int
    manager: ShiftTimelineManager


def row_to_status(row: WeeklyStatuses) -> WeekStatus:
    """Convert a stored row to a week status. Rejects malformed rows."""
    if row.status_type == WeekStatusType.SKIPPED:
        return SKIPPED
    if row.status_type == WeekStatusType.ACTIVE:
        if row.phase is None:
            raise CorruptTimelineError(f"Active week at offset {row.week_offset} has no phase")
        if row.rule_id is None:
            raise CorruptTimelineError(f"Active week at offset {row.week_offset} has no rule")
        return Active(phase=row.phase, rule_id=row.rule_id)
    raise CorruptTimelineError(f"Unknown status type: {row.status_type}")


def status_to_row(calendar_id: int, week_offset: int, status: WeekStatus) -> WeeklyStatuses:
    if isinstance(status, Active):
        return WeeklyStatuses(
            calendar_id=calendar_id,
            week_offset=week_offset,
            status_type=WeekStatusType.ACTIVE,
            phase=status.phase,
            rule_id=status.rule_id,
        )
    return WeeklyStatuses(
        calendar_id=calendar_id,
        week_offset=week_offset,
        status_type=WeekStatusType.SKIPPED,
    )


class CalendarRepository:
    """
    Calendar storage for one session. Methods flush but never commit;
    committing is left to the caller.
    """

    def __init__(self, db: Session):
        self.db = db

    def _header_for_plan(self, plan_id: int, for_update: bool = False) -> Optional[ShiftCalendars]:
        stmt = select(ShiftCalendars).where(ShiftCalendars.plan_id == plan_id)
        if for_update:
            # row lock on backends that support it; SQLite serializes writers itself
            stmt = stmt.with_for_update()
        return self.db.execute(stmt).scalars().first()

    def _stored_length(self, calendar_id: int) -> int:
        stmt = select(func.count(WeeklyStatuses.id)).where(WeeklyStatuses.calendar_id == calendar_id)
        return self.db.execute(stmt).scalar() or 0

    def get_header(self, plan_id: int) -> Optional[ShiftCalendars]:
        """Calendar header row of a plan, without its timeline."""
        return self._header_for_plan(plan_id)

    def create_calendar(self, plan_id: int, base_abs_week: AbsWeek, initial_phase: Phase) -> int:
        if self._header_for_plan(plan_id) is not None:
            raise CalendarExistsError(f"Plan {plan_id} already has a calendar")

        header = ShiftCalendars(plan_id=plan_id, base_abs_week=base_abs_week, initial_phase=initial_phase)
        self.db.add(header)
        self.db.flush()

        logger.info(
            f"Created calendar {header.id} for plan {plan_id} "
            f"(base week {base_abs_week}, initial phase {initial_phase})"
        )
        return header.id

    def find_by_plan_id(self, plan_id: int, for_update: bool = False) -> Optional[StoredCalendar]:
        """
        Load a plan's calendar with its full timeline.
        `for_update` locks the header row until the transaction ends; the
        mutating paths below load with it.
        """
        header = self._header_for_plan(plan_id, for_update=for_update)
        if header is None:
            return None

        stmt = select(WeeklyStatuses).where(
            WeeklyStatuses.calendar_id == header.id
        ).order_by(WeeklyStatuses.week_offset)
        rows = self.db.execute(stmt).scalars().all()

        for expected, row in enumerate(rows):
            if row.week_offset != expected:
                raise CorruptTimelineError(
                    f"Calendar {header.id} has a gap at offset {expected}"
                )

        manager = ShiftTimelineManager(
            base_abs_week=header.base_abs_week,
            initial_phase=header.initial_phase,
            timeline=[row_to_status(r) for r in rows],
        )
        return StoredCalendar(id=header.id, plan_id=header.plan_id, manager=manager)

    def fetch_status_range(self, calendar_id: int, start_offset: int, count: int) -> list[WeekStatus]:
        """
        Statuses stored at offsets [start_offset, start_offset + count).
        The result stops early at the end of the stored timeline.
        """
        stmt = select(WeeklyStatuses).where(
            WeeklyStatuses.calendar_id == calendar_id,
            WeeklyStatuses.week_offset >= start_offset,
            WeeklyStatuses.week_offset < start_offset + count,
        ).order_by(WeeklyStatuses.week_offset)
        rows = self.db.execute(stmt).scalars().all()

        for expected, row in enumerate(rows, start=start_offset):
            if row.week_offset != expected:
                raise CorruptTimelineError(
                    f"Calendar {calendar_id} has a gap at offset {expected}"
                )
        return [row_to_status(r) for r in rows]

    def save_timeline(self, calendar_id: int, timeline: Sequence[WeekStatus], loaded_length: int) -> int:
        """
        Insert the entries of `timeline` from `loaded_length` on, the number of
        weeks the timeline had when it was loaded. Stored weeks are never
        rewritten here.

        Returns:
            Number of rows inserted.

        Raises:
            StaleTimelineError: the stored timeline no longer has
                `loaded_length` weeks, e.g. another writer truncated or
                appended in between
        """
        stored_length = self._stored_length(calendar_id)
        if stored_length != loaded_length:
            raise StaleTimelineError(
                f"Calendar {calendar_id} has {stored_length} stored week(s), "
                f"expected {loaded_length}"
            )

        inserted = 0
        for offset in range(loaded_length, len(timeline)):
            self.db.add(status_to_row(calendar_id, offset, timeline[offset]))
            inserted += 1
        self.db.flush()
        return inserted

    def save_calendar(self, plan_id: int, manager: ShiftTimelineManager) -> int:
        """Replace the plan's calendar with `manager` wholesale."""
        header = self._header_for_plan(plan_id, for_update=True)
        if header is not None:
            self.db.execute(delete(WeeklyStatuses).where(WeeklyStatuses.calendar_id == header.id))
            self.db.delete(header)
            self.db.flush()

        calendar_id = self.create_calendar(plan_id, manager.base_abs_week, manager.initial_phase)
        self.save_timeline(calendar_id, manager.timeline, 0)
        return calendar_id

    def try_to_append_timeline(
        self,
        plan_id: int,
        start_abs_week: AbsWeek,
        statuses: Sequence[Optional[RuleId]],
    ) -> StoredCalendar:
        """
        Apply `statuses` (rule id = active, None = skipped) from `start_abs_week`
        and store the new weeks.

        Raises:
            CalendarNotFoundError: the plan has no calendar
            AppendWeekError: the pattern does not fit the stored timeline
            StaleTimelineError: the stored timeline changed during the append
        """
        stored = self.find_by_plan_id(plan_id, for_update=True)
        if stored is None:
            raise CalendarNotFoundError(f"Plan {plan_id} has no calendar")

        loaded_length = len(stored.manager)
        appended = stored.manager.apply_weeks(start_abs_week, statuses)
        if appended:
            self.save_timeline(stored.id, stored.manager.timeline, loaded_length)
        return stored

    def truncate_timeline(self, plan_id: int, from_abs_week: AbsWeek) -> int:
        """
        Delete every stored week from `from_abs_week` onward.

        Returns:
            Number of weeks removed.
        """
        stored = self.find_by_plan_id(plan_id, for_update=True)
        if stored is None:
            raise CalendarNotFoundError(f"Plan {plan_id} has no calendar")

        removed = stored.manager.truncate_from(from_abs_week)
        if removed:
            self.db.execute(delete(WeeklyStatuses).where(
                WeeklyStatuses.calendar_id == stored.id,
                WeeklyStatuses.week_offset >= len(stored.manager.timeline),
            ))
            self.db.flush()
        return removed
