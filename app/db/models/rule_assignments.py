from enum import Enum
from sqlalchemy import Integer, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from app.db.database import Base


class ShiftTimeType(str, Enum):
    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"


class RuleAssignments(Base):
    __tablename__ = "rule_assignments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    weekly_rule_id: Mapped[int] = mapped_column(Integer, ForeignKey("weekly_rules.id", ondelete="CASCADE"), nullable=False, index=True)
    rotation_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    weekday: Mapped[int] = mapped_column(Integer, nullable=False)  # 0 Mon – 6 Sun
    shift_time: Mapped[ShiftTimeType] = mapped_column(SQLEnum(ShiftTimeType, name="shift_time_type_enum"), nullable=False)
    target_group_id: Mapped[int] = mapped_column(Integer, ForeignKey("staff_groups.id", ondelete="CASCADE"), nullable=False)
    target_member_index: Mapped[int] = mapped_column(Integer, nullable=False)  # position by sort_order
