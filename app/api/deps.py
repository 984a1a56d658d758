from typing import Generator
from fastapi import Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.db.database import SessionLocal
from app.db.models.plans import Plans
from app.db.models.staff_groups import StaffGroups
from app.db.models.weekly_rules import WeeklyRules


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_plan_or_404(db: Session, plan_id: int) -> Plans:
    plan = db.query(Plans).filter(Plans.id == plan_id).first()
    if not plan:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Plan not found")
    return plan


def get_group_or_404(db: Session, group_id: int) -> StaffGroups:
    group = db.query(StaffGroups).filter(StaffGroups.id == group_id).first()
    if not group:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Staff group not found")
    return group


def get_rule_or_404(db: Session, rule_id: int) -> WeeklyRules:
    rule = db.query(WeeklyRules).filter(WeeklyRules.id == rule_id).first()
    if not rule:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Weekly rule not found")
    return rule


def valid_plan(plan_id: int, db: Session = Depends(get_db)) -> Plans:
    """Dependency resolving the `plan_id` path parameter to a plan"""
    return get_plan_or_404(db, plan_id)


def next_sort_order(db: Session, column, *criteria) -> int:
    """Max sort_order + 1 among rows matching `criteria`, 0 when there are none"""
    current = db.query(func.max(column)).filter(*criteria).scalar()
    return 0 if current is None else current + 1
