from pydantic import BaseModel, Field
from typing import List, Optional
from app.db.models.rule_assignments import ShiftTimeType


class WeeklyRuleCreate(BaseModel):
    plan_id: int
    name: str
    cycle_length: int = Field(default=1, ge=1)


class WeeklyRuleUpdate(BaseModel):
    name: Optional[str] = None
    cycle_length: Optional[int] = Field(default=None, ge=1)


class WeeklyRuleResponse(BaseModel):
    id: int
    plan_id: int
    name: str
    sort_order: int
    cycle_length: int

    class Config:
        from_attributes = True


class RuleAssignmentCreate(BaseModel):
    rotation_index: int = Field(default=0, ge=0)
    weekday: int = Field(ge=0, le=6)
    shift_time: ShiftTimeType
    target_group_id: int
    target_member_index: int = Field(ge=0)


class RuleAssignmentResponse(RuleAssignmentCreate):
    id: int
    weekly_rule_id: int

    class Config:
        from_attributes = True


class WeeklyRuleWithAssignments(BaseModel):
    rule: WeeklyRuleResponse
    assignments: List[RuleAssignmentResponse]

    class Config:
        from_attributes = True
