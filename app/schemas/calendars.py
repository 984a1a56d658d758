from pydantic import BaseModel, Field
from typing import List, Literal, Optional, Union

from app.core.config import settings


class CalendarCreate(BaseModel):
    base_abs_week: int = Field(ge=0)
    initial_phase: int = Field(default_factory=lambda: settings.DEFAULT_INITIAL_PHASE, ge=0)


class SkippedWeekResponse(BaseModel):
    status: Literal["SKIPPED"] = "SKIPPED"
    abs_week: int


class ActiveWeekResponse(BaseModel):
    status: Literal["ACTIVE"] = "ACTIVE"
    abs_week: int
    phase: int
    rule_id: int


class CalendarResponse(BaseModel):
    id: int
    plan_id: int
    base_abs_week: int
    initial_phase: int
    timeline: List[Union[ActiveWeekResponse, SkippedWeekResponse]]


class TimelineAppend(BaseModel):
    start_abs_week: int = Field(ge=0)
    # rule id = active week with that rule, null = skipped week
    statuses: List[Optional[int]]


class TruncateResponse(BaseModel):
    removed: int


class DailyShiftResponse(BaseModel):
    morning: List[str]
    afternoon: List[str]


class WeeklyShiftResponse(BaseModel):
    days: List[DailyShiftResponse]  # Monday first


class MonthlyShiftResponse(BaseModel):
    year: int
    month: int
    start_abs_week: int
    # one entry per calendar row, null = no shift that week
    weeks: List[Optional[WeeklyShiftResponse]]
