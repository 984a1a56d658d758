from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_plan_or_404
from app.db.models.plans import Plans
from app.schemas.plans import PlanCreate, PlanUpdate, PlanResponse, PlanConfigResponse
from app.services.calendar.data_loader import load_plan_config

router = APIRouter(prefix="/plans", tags=["plans"])


@router.post("", response_model=PlanResponse, status_code=status.HTTP_201_CREATED)
def create_plan(
    payload: PlanCreate,
    db: Session = Depends(get_db),
):
    plan = Plans(**payload.model_dump())
    db.add(plan)
    db.commit()
    db.refresh(plan)
    return plan


@router.get("", response_model=List[PlanResponse])
def list_plans(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    return db.query(Plans).order_by(Plans.id).offset(skip).limit(limit).all()


@router.get("/{plan_id}", response_model=PlanResponse)
def get_plan(
    plan_id: int,
    db: Session = Depends(get_db),
):
    return get_plan_or_404(db, plan_id)


@router.get("/{plan_id}/config", response_model=PlanConfigResponse)
def get_plan_config(
    plan_id: int,
    db: Session = Depends(get_db),
):
    get_plan_or_404(db, plan_id)
    config = load_plan_config(db, plan_id)
    return PlanConfigResponse.model_validate(config)


@router.put("/{plan_id}", response_model=PlanResponse)
def update_plan(
    plan_id: int,
    payload: PlanUpdate,
    db: Session = Depends(get_db),
):
    plan = get_plan_or_404(db, plan_id)
    plan.name = payload.name
    db.commit()
    db.refresh(plan)
    return plan


@router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_plan(
    plan_id: int,
    db: Session = Depends(get_db),
):
    # groups, members, rules and the calendar go with it (ON DELETE CASCADE)
    plan = get_plan_or_404(db, plan_id)
    db.delete(plan)
    db.commit()
