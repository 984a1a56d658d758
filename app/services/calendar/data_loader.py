"""
Data loader for the shift calendar.
Fetches a plan's staff and rule catalog from the database and converts it
to the internal roster and rule types.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models.plans import Plans
from app.db.models.staff_groups import StaffGroups
from app.db.models.staff_members import StaffMembers
from app.db.models.weekly_rules import WeeklyRules
from app.db.models.rule_assignments import RuleAssignments

from .types import (
    DAYS_PER_WEEK,
    RuleId,
    ShiftSlot,
    ShiftTime,
    StaffGroup,
    StaffRoster,
    WeekRule,
    WeekRuleTable,
)


logger = logging.getLogger(__name__)


@dataclass
class GroupWithMembers:
    group: StaffGroups
    members: list[StaffMembers] = field(default_factory=list)


@dataclass
class RuleWithAssignments:
    rule: WeeklyRules
    assignments: list[RuleAssignments] = field(default_factory=list)


@dataclass
class PlanConfig:
    """Everything configured for one plan, in display order."""
    plan: Plans
    groups: list[GroupWithMembers] = field(default_factory=list)
    rules: list[RuleWithAssignments] = field(default_factory=list)


def load_staff_groups(db: Session, plan_id: int) -> list[GroupWithMembers]:
    """Load a plan's staff groups with their members, both by sort_order."""

    stmt = select(StaffGroups).where(StaffGroups.plan_id == plan_id).order_by(
        StaffGroups.sort_order, StaffGroups.id
    )
    groups = db.execute(stmt).scalars().all()
    if not groups:
        return []

    member_stmt = select(StaffMembers).where(
        StaffMembers.group_id.in_([g.id for g in groups])
    ).order_by(StaffMembers.sort_order, StaffMembers.id)
    members = db.execute(member_stmt).scalars().all()

    by_group: dict[int, list[StaffMembers]] = {g.id: [] for g in groups}
    for m in members:
        by_group[m.group_id].append(m)

    return [GroupWithMembers(group=g, members=by_group[g.id]) for g in groups]


def load_weekly_rules(db: Session, plan_id: int) -> list[RuleWithAssignments]:
    """Load a plan's weekly rules with their assignments."""

    stmt = select(WeeklyRules).where(WeeklyRules.plan_id == plan_id).order_by(
        WeeklyRules.sort_order, WeeklyRules.id
    )
    rules = db.execute(stmt).scalars().all()
    if not rules:
        return []

    assign_stmt = select(RuleAssignments).where(
        RuleAssignments.weekly_rule_id.in_([r.id for r in rules])
    ).order_by(RuleAssignments.id)
    assignments = db.execute(assign_stmt).scalars().all()

    by_rule: dict[int, list[RuleAssignments]] = {r.id: [] for r in rules}
    for a in assignments:
        by_rule[a.weekly_rule_id].append(a)

    return [RuleWithAssignments(rule=r, assignments=by_rule[r.id]) for r in rules]


def load_plan_config(db: Session, plan_id: int) -> Optional[PlanConfig]:
    """Load the full configuration of a plan, or None if the plan does not exist."""

    plan = db.get(Plans, plan_id)
    if plan is None:
        return None

    return PlanConfig(
        plan=plan,
        groups=load_staff_groups(db, plan_id),
        rules=load_weekly_rules(db, plan_id),
    )


def build_staff_roster(config: PlanConfig) -> tuple[StaffRoster, dict[int, int]]:
    """
    Convert staff groups to a roster.

    Returns:
        The roster and a map of staff_groups.id -> group index in the roster,
        needed to translate rule assignments into roster slots.
    """
    roster = StaffRoster()
    group_index: dict[int, int] = {}

    for entry in config.groups:
        group_index[entry.group.id] = len(roster.groups)
        roster.groups.append(StaffGroup(
            name=entry.group.name,
            members=[m.name for m in entry.members],
        ))

    return roster, group_index


def build_rule_map(config: PlanConfig, group_index: dict[int, int]) -> dict[RuleId, WeekRuleTable]:
    """Convert weekly rules to rule tables with `cycle_length` rotation weeks."""

    rule_map: dict[RuleId, WeekRuleTable] = {}

    for entry in config.rules:
        cycle_length = max(entry.rule.cycle_length, 1)
        table = WeekRuleTable(weeks=[WeekRule() for _ in range(cycle_length)])

        for assign in entry.assignments:
            if assign.target_group_id not in group_index:
                logger.warning(
                    f"Rule {entry.rule.id}: assignment {assign.id} targets missing group "
                    f"{assign.target_group_id}, skipped"
                )
                continue
            if not 0 <= assign.rotation_index < cycle_length:
                logger.warning(
                    f"Rule {entry.rule.id}: assignment {assign.id} rotation index "
                    f"{assign.rotation_index} outside cycle of {cycle_length}, skipped"
                )
                continue
            if not 0 <= assign.weekday < DAYS_PER_WEEK:
                logger.warning(
                    f"Rule {entry.rule.id}: assignment {assign.id} has invalid weekday "
                    f"{assign.weekday}, skipped"
                )
                continue

            day = table.weeks[assign.rotation_index].days[assign.weekday]
            slot = ShiftSlot(
                group_index=group_index[assign.target_group_id],
                member_index=assign.target_member_index,
            )
            day.slots_for(ShiftTime(assign.shift_time.value)).append(slot)

        rule_map[entry.rule.id] = table

    return rule_map
