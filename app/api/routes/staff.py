from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_plan_or_404, get_group_or_404, next_sort_order
from app.db.models.staff_groups import StaffGroups
from app.db.models.staff_members import StaffMembers
from app.schemas.staff import (
    StaffGroupCreate,
    StaffGroupUpdate,
    StaffGroupResponse,
    StaffMemberCreate,
    StaffMemberUpdate,
    StaffMemberResponse,
)

router = APIRouter(tags=["staff"])


# ==================== Groups ====================

@router.post("/staff-groups", response_model=StaffGroupResponse, status_code=status.HTTP_201_CREATED)
def create_staff_group(
    payload: StaffGroupCreate,
    db: Session = Depends(get_db),
):
    get_plan_or_404(db, payload.plan_id)

    group = StaffGroups(
        plan_id=payload.plan_id,
        name=payload.name,
        sort_order=next_sort_order(db, StaffGroups.sort_order, StaffGroups.plan_id == payload.plan_id),
    )
    db.add(group)
    db.commit()
    db.refresh(group)
    return group


@router.put("/staff-groups/{group_id}", response_model=StaffGroupResponse)
def update_staff_group(
    group_id: int,
    payload: StaffGroupUpdate,
    db: Session = Depends(get_db),
):
    group = get_group_or_404(db, group_id)
    group.name = payload.name
    db.commit()
    db.refresh(group)
    return group


@router.delete("/staff-groups/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_staff_group(
    group_id: int,
    db: Session = Depends(get_db),
):
    group = get_group_or_404(db, group_id)
    db.delete(group)
    db.commit()


# ==================== Members ====================

@router.post("/staff-members", response_model=StaffMemberResponse, status_code=status.HTTP_201_CREATED)
def create_staff_member(
    payload: StaffMemberCreate,
    db: Session = Depends(get_db),
):
    get_group_or_404(db, payload.group_id)

    member = StaffMembers(
        group_id=payload.group_id,
        name=payload.name,
        sort_order=next_sort_order(db, StaffMembers.sort_order, StaffMembers.group_id == payload.group_id),
    )
    db.add(member)
    db.commit()
    db.refresh(member)
    return member


@router.put("/staff-members/{member_id}", response_model=StaffMemberResponse)
def update_staff_member(
    member_id: int,
    payload: StaffMemberUpdate,
    db: Session = Depends(get_db),
):
    member = db.query(StaffMembers).filter(StaffMembers.id == member_id).first()
    if not member:
        raise HTTPException(status_code=404, detail="Staff member not found")

    member.name = payload.name
    db.commit()
    db.refresh(member)
    return member


@router.delete("/staff-members/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_staff_member(
    member_id: int,
    db: Session = Depends(get_db),
):
    member = db.query(StaffMembers).filter(StaffMembers.id == member_id).first()
    if not member:
        raise HTTPException(status_code=404, detail="Staff member not found")

    db.delete(member)
    db.commit()
