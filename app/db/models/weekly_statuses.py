from typing import Optional
from enum import Enum
from sqlalchemy import Integer, ForeignKey, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from app.db.database import Base


class WeekStatusType(str, Enum):
    ACTIVE = "ACTIVE"
    SKIPPED = "SKIPPED"


class WeeklyStatuses(Base):
    __tablename__ = "weekly_statuses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    calendar_id: Mapped[int] = mapped_column(Integer, ForeignKey("shift_calendars.id", ondelete="CASCADE"), nullable=False)
    week_offset: Mapped[int] = mapped_column(Integer, nullable=False)
    status_type: Mapped[WeekStatusType] = mapped_column(SQLEnum(WeekStatusType, name="week_status_type_enum"), nullable=False)
    phase: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    # not a foreign key: deleted rules leave dangling ids, shown as empty weeks
    rule_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        UniqueConstraint("calendar_id", "week_offset", name="uq_weekly_statuses_calendar_offset"),
    )
