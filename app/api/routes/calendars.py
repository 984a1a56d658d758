from dataclasses import asdict
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.deps import get_db, valid_plan
from app.db.models.plans import Plans
from app.schemas.calendars import (
    CalendarCreate,
    CalendarResponse,
    ActiveWeekResponse,
    SkippedWeekResponse,
    TimelineAppend,
    TruncateResponse,
    MonthlyShiftResponse,
)
from app.services.calendar import (
    Active,
    CalendarRepository,
    CalendarExistsError,
    CalendarNotFoundError,
    StoredCalendar,
    UnderflowError,
    NotConsecutiveShiftsError,
    AttemptedToOverwriteError,
    StaleTimelineError,
    UnknownRuleError,
    derive_monthly_shift,
    generate_weeks,
    truncate_weeks,
)

router = APIRouter(prefix="/plans/{plan_id}/calendar", tags=["calendar"])


def _calendar_response(stored: StoredCalendar) -> CalendarResponse:
    manager = stored.manager
    timeline = []
    for index, week in enumerate(manager.timeline):
        abs_week = manager.to_abs_week(index)
        if isinstance(week, Active):
            timeline.append(ActiveWeekResponse(abs_week=abs_week, phase=week.phase, rule_id=week.rule_id))
        else:
            timeline.append(SkippedWeekResponse(abs_week=abs_week))

    return CalendarResponse(
        id=stored.id,
        plan_id=stored.plan_id,
        base_abs_week=manager.base_abs_week,
        initial_phase=manager.initial_phase,
        timeline=timeline,
    )


@router.post("", response_model=CalendarResponse, status_code=status.HTTP_201_CREATED)
def create_calendar(
    payload: CalendarCreate,
    plan: Plans = Depends(valid_plan),
    db: Session = Depends(get_db),
):
    repo = CalendarRepository(db)
    try:
        repo.create_calendar(plan.id, payload.base_abs_week, payload.initial_phase)
    except CalendarExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    db.commit()

    return _calendar_response(repo.find_by_plan_id(plan.id))


@router.get("", response_model=CalendarResponse)
def get_calendar(
    plan: Plans = Depends(valid_plan),
    db: Session = Depends(get_db),
):
    stored = CalendarRepository(db).find_by_plan_id(plan.id)
    if stored is None:
        raise HTTPException(status_code=404, detail="Calendar not found")
    return _calendar_response(stored)


@router.post("/timeline", response_model=CalendarResponse)
def append_timeline(
    payload: TimelineAppend,
    plan: Plans = Depends(valid_plan),
    db: Session = Depends(get_db),
):
    try:
        stored = generate_weeks(db, plan.id, payload.start_abs_week, payload.statuses)
    except CalendarNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (UnknownRuleError, UnderflowError, NotConsecutiveShiftsError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except AttemptedToOverwriteError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except (StaleTimelineError, IntegrityError):
        # another writer changed the timeline first; the client can retry
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Calendar was modified concurrently, retry the request",
        )

    return _calendar_response(stored)


@router.delete("/timeline", response_model=TruncateResponse)
def truncate_timeline(
    from_abs_week: int = Query(ge=0),
    plan: Plans = Depends(valid_plan),
    db: Session = Depends(get_db),
):
    try:
        removed = truncate_weeks(db, plan.id, from_abs_week)
    except CalendarNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return TruncateResponse(removed=removed)


@router.get("/shifts", response_model=MonthlyShiftResponse)
def get_monthly_shifts(
    year: int = Query(ge=1970, le=9999),
    month: int = Query(ge=1, le=12),
    plan: Plans = Depends(valid_plan),
    db: Session = Depends(get_db),
):
    result = derive_monthly_shift(db, plan.id, year, month)
    return MonthlyShiftResponse.model_validate(asdict(result))
