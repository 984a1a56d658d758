from app.db.database import Base

# Import models
from app.db.models.plans import Plans
from app.db.models.staff_groups import StaffGroups
from app.db.models.staff_members import StaffMembers
from app.db.models.weekly_rules import WeeklyRules
from app.db.models.rule_assignments import RuleAssignments, ShiftTimeType
from app.db.models.shift_calendars import ShiftCalendars
from app.db.models.weekly_statuses import WeeklyStatuses, WeekStatusType

__all__ = [
    "Base",
    # Models
    "Plans",
    "StaffGroups",
    "StaffMembers",
    "WeeklyRules",
    "RuleAssignments",
    "ShiftCalendars",
    "WeeklyStatuses",
    # Enums
    "ShiftTimeType",
    "WeekStatusType",
]
