from pydantic import BaseModel
from datetime import datetime
from typing import List

from app.schemas.staff import StaffGroupWithMembers
from app.schemas.weekly_rules import WeeklyRuleWithAssignments


class PlanBase(BaseModel):
    name: str


class PlanCreate(PlanBase):
    pass


class PlanUpdate(BaseModel):
    name: str


class PlanResponse(PlanBase):
    id: int
    created_at: datetime

    class Config:
        from_attributes = True


class PlanConfigResponse(BaseModel):
    plan: PlanResponse
    groups: List[StaffGroupWithMembers]
    rules: List[WeeklyRuleWithAssignments]

    class Config:
        from_attributes = True
