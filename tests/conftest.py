import pytest
from types import SimpleNamespace
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.models import (
    Plans, StaffGroups, StaffMembers, WeeklyRules, RuleAssignments, ShiftTimeType,
)
from app.api.deps import get_db
from app.db.database import Base
from app.main import app as fastapi_app
from app.services.calendar.types import (
    DayRule,
    ShiftSlot,
    StaffGroup,
    StaffRoster,
    WeekRule,
    WeekRuleTable,
)


BASE_WEEK = 2000
RULE_A = 1
RULE_B = 2


@pytest.fixture
def engine():
    # one shared in-memory database per test
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    fastapi_app.dependency_overrides[get_db] = override_get_db
    try:
        with TestClient(fastapi_app) as test_client:
            yield test_client
    finally:
        fastapi_app.dependency_overrides.clear()


@pytest.fixture
def roster() -> StaffRoster:
    # group 0: nurses, group 1: doctors
    return StaffRoster(groups=[
        StaffGroup(name="Nurses", members=["Aoki", "Baba", "Chiba"]),
        StaffGroup(name="Doctors", members=["Daimon", "Endo"]),
    ])


@pytest.fixture
def rotating_rule() -> WeekRuleTable:
    # 2-week rotation: Monday morning is Aoki on even phases, Baba on odd phases
    even = WeekRule()
    even.days[0] = DayRule(morning=[ShiftSlot(0, 0)], afternoon=[ShiftSlot(1, 0)])
    odd = WeekRule()
    odd.days[0] = DayRule(morning=[ShiftSlot(0, 1)], afternoon=[ShiftSlot(1, 1)])
    return WeekRuleTable(weeks=[even, odd])


@pytest.fixture
def single_week_rule() -> WeekRuleTable:
    # Friday afternoon is Chiba, every week
    week = WeekRule()
    week.days[4] = DayRule(afternoon=[ShiftSlot(0, 2)])
    return WeekRuleTable(weeks=[week])


@pytest.fixture
def rule_map(rotating_rule, single_week_rule) -> dict[int, WeekRuleTable]:
    return {RULE_A: rotating_rule, RULE_B: single_week_rule}


@pytest.fixture
def seeded_plan(db):
    """
    A stored plan mirroring the `roster` and `rule_map` fixtures:
    Nurses [Aoki, Baba, Chiba], Doctors [Daimon, Endo],
    a 2-week rotating rule and a single-week rule.
    """

    plan = Plans(name="Ward 3")
    db.add(plan)
    db.flush()

    nurses = StaffGroups(plan_id=plan.id, name="Nurses", sort_order=0)
    doctors = StaffGroups(plan_id=plan.id, name="Doctors", sort_order=1)
    db.add_all([nurses, doctors])
    db.flush()

    # inserted out of order to check sort_order is respected
    db.add_all([
        StaffMembers(group_id=nurses.id, name="Chiba", sort_order=2),
        StaffMembers(group_id=nurses.id, name="Aoki", sort_order=0),
        StaffMembers(group_id=nurses.id, name="Baba", sort_order=1),
        StaffMembers(group_id=doctors.id, name="Daimon", sort_order=0),
        StaffMembers(group_id=doctors.id, name="Endo", sort_order=1),
    ])

    rotating = WeeklyRules(plan_id=plan.id, name="Rotating", sort_order=0, cycle_length=2)
    single = WeeklyRules(plan_id=plan.id, name="Fridays", sort_order=1, cycle_length=1)
    db.add_all([rotating, single])
    db.flush()

    db.add_all([
        RuleAssignments(weekly_rule_id=rotating.id, rotation_index=0, weekday=0,
                        shift_time=ShiftTimeType.MORNING, target_group_id=nurses.id, target_member_index=0),
        RuleAssignments(weekly_rule_id=rotating.id, rotation_index=0, weekday=0,
                        shift_time=ShiftTimeType.AFTERNOON, target_group_id=doctors.id, target_member_index=0),
        RuleAssignments(weekly_rule_id=rotating.id, rotation_index=1, weekday=0,
                        shift_time=ShiftTimeType.MORNING, target_group_id=nurses.id, target_member_index=1),
        RuleAssignments(weekly_rule_id=rotating.id, rotation_index=1, weekday=0,
                        shift_time=ShiftTimeType.AFTERNOON, target_group_id=doctors.id, target_member_index=1),
        RuleAssignments(weekly_rule_id=single.id, rotation_index=0, weekday=4,
                        shift_time=ShiftTimeType.AFTERNOON, target_group_id=nurses.id, target_member_index=2),
    ])
    db.commit()

    return SimpleNamespace(
        plan_id=plan.id,
        nurses_id=nurses.id,
        doctors_id=doctors.id,
        rotating_id=rotating.id,
        single_id=single.id,
    )
