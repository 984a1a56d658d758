"""
Seed script for the Shift Calendar development database.

Creates one demo plan:
- 2 staff groups (Nurses: 3 members, Doctors: 2 members)
- "Standard" rule: 2-week rotation, nurses alternate mornings
- "Holiday" rule: single week, reduced staffing
- A calendar starting this week with 8 generated weeks, week 4 skipped

Run with: python -m scripts.seed_demo_plan
"""

import sys
from datetime import date

from app.db.database import Base, SessionLocal, engine
from app.db.models.plans import Plans
from app.db.models.staff_groups import StaffGroups
from app.db.models.staff_members import StaffMembers
from app.db.models.weekly_rules import WeeklyRules
from app.db.models.rule_assignments import RuleAssignments, ShiftTimeType
from app.services.calendar import CalendarRepository, ShiftTimelineManager, abs_week_of


def reset_tables():
    """Drop and recreate every table."""
    print("Recreating tables...")
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    print("Tables recreated.")


def seed_plan(db) -> Plans:
    print("Seeding plan...")
    plan = Plans(name="Ward 3 rota")
    db.add(plan)
    db.flush()
    return plan


def seed_staff(db, plan: Plans) -> dict[str, StaffGroups]:
    """Seed staff groups and members."""
    print("Seeding staff groups and members...")

    roster = {
        "Nurses": ["Aoki", "Baba", "Chiba"],
        "Doctors": ["Daimon", "Endo"],
    }

    groups = {}
    for group_order, (group_name, members) in enumerate(roster.items()):
        group = StaffGroups(plan_id=plan.id, name=group_name, sort_order=group_order)
        db.add(group)
        db.flush()
        for member_order, name in enumerate(members):
            db.add(StaffMembers(group_id=group.id, name=name, sort_order=member_order))
        groups[group_name] = group

    db.flush()
    print(f"Seeded {len(groups)} groups.")
    return groups


def seed_rules(db, plan: Plans, groups: dict[str, StaffGroups]) -> dict[str, WeeklyRules]:
    """Seed weekly rules and their assignments."""
    print("Seeding weekly rules...")

    nurses = groups["Nurses"].id
    doctors = groups["Doctors"].id

    standard = WeeklyRules(plan_id=plan.id, name="Standard", sort_order=0, cycle_length=2)
    holiday = WeeklyRules(plan_id=plan.id, name="Holiday", sort_order=1, cycle_length=1)
    db.add_all([standard, holiday])
    db.flush()

    assignments = []
    for weekday in range(5):  # Mon-Fri
        # rotation week 0: nurse 0 mornings, nurse 1 afternoons; week 1 swaps
        for rotation, (morning_nurse, afternoon_nurse) in enumerate([(0, 1), (1, 0)]):
            assignments += [
                RuleAssignments(weekly_rule_id=standard.id, rotation_index=rotation, weekday=weekday,
                                shift_time=ShiftTimeType.MORNING, target_group_id=nurses,
                                target_member_index=morning_nurse),
                RuleAssignments(weekly_rule_id=standard.id, rotation_index=rotation, weekday=weekday,
                                shift_time=ShiftTimeType.AFTERNOON, target_group_id=nurses,
                                target_member_index=afternoon_nurse),
                RuleAssignments(weekly_rule_id=standard.id, rotation_index=rotation, weekday=weekday,
                                shift_time=ShiftTimeType.MORNING, target_group_id=doctors,
                                target_member_index=weekday % 2),
            ]

    for weekday in (0, 2, 4):  # Mon, Wed, Fri
        assignments.append(
            RuleAssignments(weekly_rule_id=holiday.id, rotation_index=0, weekday=weekday,
                            shift_time=ShiftTimeType.MORNING, target_group_id=nurses,
                            target_member_index=2)
        )

    db.add_all(assignments)
    db.flush()
    print(f"Seeded 2 rules with {len(assignments)} assignments.")
    return {"Standard": standard, "Holiday": holiday}


def seed_calendar(db, plan: Plans, rules: dict[str, WeeklyRules]) -> None:
    """Seed a calendar from this week with 8 weeks generated."""
    print("Seeding calendar...")

    base_week = abs_week_of(date.today())
    standard = rules["Standard"].id
    holiday = rules["Holiday"].id

    manager = ShiftTimelineManager(base_abs_week=base_week, initial_phase=0)
    manager.apply_weeks(
        base_week,
        [standard, standard, standard, None, holiday, standard, standard, standard],
    )
    CalendarRepository(db).save_calendar(plan.id, manager)
    print(f"Seeded {len(manager)} weeks from absolute week {base_week}.")


def main():
    """Main seed function."""
    print("\n" + "="*50)
    print("Shift Calendar Database Seeder")
    print("="*50 + "\n")

    response = input("This will DELETE ALL EXISTING DATA. Continue? (yes/no): ")
    if response.lower() != "yes":
        print("Aborted.")
        sys.exit(0)

    reset_tables()
    db = SessionLocal()

    try:
        plan = seed_plan(db)
        groups = seed_staff(db, plan)
        rules = seed_rules(db, plan, groups)
        seed_calendar(db, plan, rules)
        db.commit()

        print("\n" + "="*50)
        print("Seeding complete!")
        print("="*50)
        print(f"\nPlan id: {plan.id}")
        print("  Nurses:  Aoki, Baba, Chiba")
        print("  Doctors: Daimon, Endo")
        print("  Weeks:   S S S - H S S S (S=Standard, H=Holiday, -=skipped)")
        print("="*50 + "\n")

    except Exception as e:
        db.rollback()
        print(f"\nError during seeding: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
