from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_plan_or_404, get_group_or_404, get_rule_or_404, next_sort_order
from app.db.models.weekly_rules import WeeklyRules
from app.db.models.rule_assignments import RuleAssignments
from app.schemas.weekly_rules import (
    WeeklyRuleCreate,
    WeeklyRuleUpdate,
    WeeklyRuleResponse,
    RuleAssignmentCreate,
    RuleAssignmentResponse,
)

router = APIRouter(prefix="/weekly-rules", tags=["weekly-rules"])


@router.post("", response_model=WeeklyRuleResponse, status_code=status.HTTP_201_CREATED)
def create_weekly_rule(
    payload: WeeklyRuleCreate,
    db: Session = Depends(get_db),
):
    get_plan_or_404(db, payload.plan_id)

    rule = WeeklyRules(
        **payload.model_dump(),
        sort_order=next_sort_order(db, WeeklyRules.sort_order, WeeklyRules.plan_id == payload.plan_id),
    )
    db.add(rule)
    db.commit()
    db.refresh(rule)
    return rule


@router.get("/{rule_id}", response_model=WeeklyRuleResponse)
def get_weekly_rule(
    rule_id: int,
    db: Session = Depends(get_db),
):
    return get_rule_or_404(db, rule_id)


@router.put("/{rule_id}", response_model=WeeklyRuleResponse)
def update_weekly_rule(
    rule_id: int,
    payload: WeeklyRuleUpdate,
    db: Session = Depends(get_db),
):
    # already generated weeks keep their phase; truncate the calendar to regenerate them
    rule = get_rule_or_404(db, rule_id)

    update_data = payload.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in update_data.items():
        setattr(rule, field, value)

    db.commit()
    db.refresh(rule)
    return rule


@router.delete("/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_weekly_rule(
    rule_id: int,
    db: Session = Depends(get_db),
):
    # weeks recorded with this rule are kept and show up as empty weeks
    rule = get_rule_or_404(db, rule_id)
    db.delete(rule)
    db.commit()


# ==================== Assignments ====================

@router.post("/{rule_id}/assignments", response_model=RuleAssignmentResponse, status_code=status.HTTP_201_CREATED)
def add_rule_assignment(
    rule_id: int,
    payload: RuleAssignmentCreate,
    db: Session = Depends(get_db),
):
    rule = get_rule_or_404(db, rule_id)
    group = get_group_or_404(db, payload.target_group_id)
    if group.plan_id != rule.plan_id:
        raise HTTPException(status_code=400, detail="Staff group belongs to another plan")
    if payload.rotation_index >= rule.cycle_length:
        raise HTTPException(status_code=400, detail="Rotation index outside the rule's cycle")

    assignment = RuleAssignments(weekly_rule_id=rule_id, **payload.model_dump())
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    return assignment


@router.delete("/{rule_id}/assignments/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_rule_assignment(
    rule_id: int,
    assignment_id: int,
    db: Session = Depends(get_db),
):
    assignment = db.query(RuleAssignments).filter(
        RuleAssignments.id == assignment_id,
        RuleAssignments.weekly_rule_id == rule_id,
    ).first()
    if not assignment:
        raise HTTPException(status_code=404, detail="Assignment not found")

    db.delete(assignment)
    db.commit()
