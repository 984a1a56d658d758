from pydantic import BaseModel
from typing import List


class StaffGroupCreate(BaseModel):
    plan_id: int
    name: str


class StaffGroupUpdate(BaseModel):
    name: str


class StaffGroupResponse(BaseModel):
    id: int
    plan_id: int
    name: str
    sort_order: int

    class Config:
        from_attributes = True


class StaffMemberCreate(BaseModel):
    group_id: int
    name: str


class StaffMemberUpdate(BaseModel):
    name: str


class StaffMemberResponse(BaseModel):
    id: int
    group_id: int
    name: str
    sort_order: int

    class Config:
        from_attributes = True


class StaffGroupWithMembers(BaseModel):
    group: StaffGroupResponse
    members: List[StaffMemberResponse]

    class Config:
        from_attributes = True
