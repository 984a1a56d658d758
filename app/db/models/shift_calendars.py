from sqlalchemy import Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from app.db.database import Base

class ShiftCalendars(Base):
    __tablename__ = "shift_calendars"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    plan_id: Mapped[int] = mapped_column(Integer, ForeignKey("plans.id", ondelete="CASCADE"), unique=True, nullable=False)
    base_abs_week: Mapped[int] = mapped_column(Integer, nullable=False)
    initial_phase: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
