import pytest

from app.db.models import WeeklyStatuses, WeekStatusType
from app.services.calendar.types import SKIPPED, Active
from app.services.calendar.timeline import (
    ShiftTimelineManager,
    AttemptedToOverwriteError,
    NotConsecutiveShiftsError,
)
from app.services.calendar.repository import (
    CalendarRepository,
    CalendarExistsError,
    CalendarNotFoundError,
    CorruptTimelineError,
    StaleTimelineError,
    row_to_status,
)

from conftest import BASE_WEEK


@pytest.fixture
def repo(db):
    return CalendarRepository(db)


@pytest.fixture
def calendar_id(repo, seeded_plan):
    return repo.create_calendar(seeded_plan.plan_id, BASE_WEEK, 0)


def stored_offsets(db, calendar_id) -> list[int]:
    rows = db.query(WeeklyStatuses).filter(
        WeeklyStatuses.calendar_id == calendar_id
    ).order_by(WeeklyStatuses.week_offset).all()
    return [r.week_offset for r in rows]


class TestCreateAndFind:

    def test_find_missing(self, repo, seeded_plan):
        assert repo.find_by_plan_id(seeded_plan.plan_id) is None

    def test_create_then_find(self, repo, seeded_plan, calendar_id):
        stored = repo.find_by_plan_id(seeded_plan.plan_id)

        assert stored.id == calendar_id
        assert stored.plan_id == seeded_plan.plan_id
        assert stored.manager.base_abs_week == BASE_WEEK
        assert stored.manager.initial_phase == 0
        assert stored.manager.timeline == []

    def test_one_calendar_per_plan(self, repo, seeded_plan, calendar_id):
        with pytest.raises(CalendarExistsError):
            repo.create_calendar(seeded_plan.plan_id, BASE_WEEK + 1, 0)


class TestAppendTimeline:

    def test_append_and_reload(self, db, repo, seeded_plan, calendar_id):
        a = seeded_plan.rotating_id
        repo.try_to_append_timeline(seeded_plan.plan_id, BASE_WEEK, [a, a, None, a])
        db.commit()

        stored = CalendarRepository(db).find_by_plan_id(seeded_plan.plan_id)
        assert stored.manager.timeline == [
            Active(phase=0, rule_id=a),
            Active(phase=1, rule_id=a),
            SKIPPED,
            Active(phase=2, rule_id=a),
        ]

    def test_overlap_inserts_only_new_rows(self, db, repo, seeded_plan, calendar_id):
        a = seeded_plan.rotating_id
        repo.try_to_append_timeline(seeded_plan.plan_id, BASE_WEEK, [a, a, None, a])
        repo.try_to_append_timeline(seeded_plan.plan_id, BASE_WEEK + 1, [a, None, a, a])

        assert stored_offsets(db, calendar_id) == [0, 1, 2, 3, 4]
        stored = repo.find_by_plan_id(seeded_plan.plan_id)
        assert stored.manager.timeline[4] == Active(phase=3, rule_id=a)

    def test_retry_is_noop(self, db, repo, seeded_plan, calendar_id):
        a = seeded_plan.rotating_id
        repo.try_to_append_timeline(seeded_plan.plan_id, BASE_WEEK, [a, None])
        repo.try_to_append_timeline(seeded_plan.plan_id, BASE_WEEK, [a, None])
        assert stored_offsets(db, calendar_id) == [0, 1]

    def test_conflict_stores_nothing(self, db, repo, seeded_plan, calendar_id):
        a = seeded_plan.rotating_id
        repo.try_to_append_timeline(seeded_plan.plan_id, BASE_WEEK, [a, a])
        with pytest.raises(AttemptedToOverwriteError):
            repo.try_to_append_timeline(seeded_plan.plan_id, BASE_WEEK + 1, [None, a])
        assert stored_offsets(db, calendar_id) == [0, 1]

    def test_gap_rejected(self, repo, seeded_plan, calendar_id):
        with pytest.raises(NotConsecutiveShiftsError):
            repo.try_to_append_timeline(seeded_plan.plan_id, BASE_WEEK + 1, [seeded_plan.rotating_id])

    def test_missing_calendar(self, repo, seeded_plan):
        with pytest.raises(CalendarNotFoundError):
            repo.try_to_append_timeline(seeded_plan.plan_id, BASE_WEEK, [None])


class TestSaveTimeline:

    def test_never_rewrites_stored_rows(self, db, repo, seeded_plan, calendar_id):
        repo.save_timeline(calendar_id, [Active(phase=0, rule_id=1)], 0)
        inserted = repo.save_timeline(calendar_id, [SKIPPED, SKIPPED], 1)

        assert inserted == 1
        stored = repo.find_by_plan_id(seeded_plan.plan_id)
        assert stored.manager.timeline == [Active(phase=0, rule_id=1), SKIPPED]

    def test_rejects_wrong_loaded_length(self, db, repo, seeded_plan, calendar_id):
        repo.save_timeline(calendar_id, [SKIPPED, SKIPPED], 0)
        with pytest.raises(StaleTimelineError):
            repo.save_timeline(calendar_id, [SKIPPED, SKIPPED, SKIPPED], 1)
        assert stored_offsets(db, calendar_id) == [0, 1]

    def test_append_after_concurrent_truncate(self, db, session_factory, seeded_plan, calendar_id):
        a = seeded_plan.rotating_id
        b = seeded_plan.single_id
        CalendarRepository(db).try_to_append_timeline(seeded_plan.plan_id, BASE_WEEK, [a, a, a, a])
        db.commit()

        writer = session_factory()
        try:
            writer_repo = CalendarRepository(writer)
            stale = writer_repo.find_by_plan_id(seeded_plan.plan_id)
            loaded_length = len(stale.manager)
            stale.manager.apply_weeks(BASE_WEEK + 4, [b])

            # truncation commits while the writer still holds its old copy
            assert CalendarRepository(db).truncate_timeline(seeded_plan.plan_id, BASE_WEEK + 2) == 2
            db.commit()

            with pytest.raises(StaleTimelineError):
                writer_repo.save_timeline(stale.id, stale.manager.timeline, loaded_length)
            writer.rollback()
        finally:
            writer.close()

        stored = CalendarRepository(db).find_by_plan_id(seeded_plan.plan_id)
        assert stored.manager.timeline == [Active(phase=0, rule_id=a), Active(phase=1, rule_id=a)]

    def test_save_calendar_replaces(self, db, repo, seeded_plan, calendar_id):
        repo.save_timeline(calendar_id, [SKIPPED, SKIPPED, SKIPPED], 0)

        manager = ShiftTimelineManager(base_abs_week=BASE_WEEK + 10, initial_phase=7)
        manager.apply_weeks(BASE_WEEK + 10, [seeded_plan.single_id])
        repo.save_calendar(seeded_plan.plan_id, manager)

        stored = repo.find_by_plan_id(seeded_plan.plan_id)
        assert stored.manager.base_abs_week == BASE_WEEK + 10
        assert stored.manager.timeline == [Active(phase=7, rule_id=seeded_plan.single_id)]


class TestFetchStatusRange:

    def test_range(self, repo, seeded_plan, calendar_id):
        a = seeded_plan.rotating_id
        repo.try_to_append_timeline(seeded_plan.plan_id, BASE_WEEK, [a, None, a, a])

        assert repo.fetch_status_range(calendar_id, 1, 2) == [SKIPPED, Active(phase=1, rule_id=a)]
        assert repo.fetch_status_range(calendar_id, 3, 10) == [Active(phase=2, rule_id=a)]
        assert repo.fetch_status_range(calendar_id, 8, 2) == []

    def test_gap_in_range(self, db, repo, calendar_id):
        db.add(WeeklyStatuses(calendar_id=calendar_id, week_offset=0, status_type=WeekStatusType.SKIPPED))
        db.add(WeeklyStatuses(calendar_id=calendar_id, week_offset=2, status_type=WeekStatusType.SKIPPED))
        db.flush()
        with pytest.raises(CorruptTimelineError):
            repo.fetch_status_range(calendar_id, 0, 3)


class TestTruncateTimeline:

    def test_truncate_deletes_rows(self, db, repo, seeded_plan, calendar_id):
        a = seeded_plan.rotating_id
        repo.try_to_append_timeline(seeded_plan.plan_id, BASE_WEEK, [a, a, a, a])

        removed = repo.truncate_timeline(seeded_plan.plan_id, BASE_WEEK + 1)
        assert removed == 3
        assert stored_offsets(db, calendar_id) == [0]

    def test_regenerate_after_truncate(self, db, repo, seeded_plan, calendar_id):
        a = seeded_plan.rotating_id
        b = seeded_plan.single_id
        repo.try_to_append_timeline(seeded_plan.plan_id, BASE_WEEK, [a, a, a])
        repo.truncate_timeline(seeded_plan.plan_id, BASE_WEEK + 1)
        repo.try_to_append_timeline(seeded_plan.plan_id, BASE_WEEK + 1, [None, b])

        stored = repo.find_by_plan_id(seeded_plan.plan_id)
        assert stored.manager.timeline == [Active(phase=0, rule_id=a), SKIPPED, Active(phase=1, rule_id=b)]

    def test_truncate_past_end(self, db, repo, seeded_plan, calendar_id):
        repo.try_to_append_timeline(seeded_plan.plan_id, BASE_WEEK, [None])
        assert repo.truncate_timeline(seeded_plan.plan_id, BASE_WEEK + 5) == 0
        assert stored_offsets(db, calendar_id) == [0]

    def test_missing_calendar(self, repo, seeded_plan):
        with pytest.raises(CalendarNotFoundError):
            repo.truncate_timeline(seeded_plan.plan_id, BASE_WEEK)


class TestRowConversion:

    def test_active_without_phase(self):
        row = WeeklyStatuses(calendar_id=1, week_offset=0, status_type=WeekStatusType.ACTIVE, rule_id=1)
        with pytest.raises(CorruptTimelineError):
            row_to_status(row)

    def test_active_without_rule(self):
        row = WeeklyStatuses(calendar_id=1, week_offset=0, status_type=WeekStatusType.ACTIVE, phase=0)
        with pytest.raises(CorruptTimelineError):
            row_to_status(row)

    def test_skipped_ignores_columns(self):
        row = WeeklyStatuses(calendar_id=1, week_offset=0, status_type=WeekStatusType.SKIPPED)
        assert row_to_status(row) == SKIPPED

    def test_gap_in_stored_offsets(self, db, repo, seeded_plan, calendar_id):
        db.add(WeeklyStatuses(calendar_id=calendar_id, week_offset=0, status_type=WeekStatusType.SKIPPED))
        db.add(WeeklyStatuses(calendar_id=calendar_id, week_offset=2, status_type=WeekStatusType.SKIPPED))
        db.flush()
        with pytest.raises(CorruptTimelineError):
            repo.find_by_plan_id(seeded_plan.plan_id)
