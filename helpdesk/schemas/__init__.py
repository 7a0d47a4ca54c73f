from .common import (
    AssignmentStatus,
    DELEGATED_STATUSES,
    OPEN_STATUSES,
    Priority,
    Rights,
    TicketStatus,
    UserBrief,
    parse_id_list,
)
from .ticket import (
    CategorizedTickets,
    TicketCreate,
    TicketForward,
    TicketRead,
    TicketStatusUpdate,
    TicketTotals,
    TicketWithPeople,
    TicketWithSender,
    TodayCount,
)
from .assignment import (
    AssigneeReport,
    AssignmentCreate,
    AssignmentQueryResult,
    AssignmentRead,
    AssignmentStatusUpdate,
    AssignmentWithPeople,
    DateCategories,
    DateCategoryResult,
    RoleAssignments,
)
from .proof import ProofCreate, ProofQueryResult, ProofRead, ProofWithDetails, TicketBrief
from .reminder import ReminderCreate, ReminderList, ReminderRead, ReminderWithDetails
from .response import (
    ResponseCreate,
    ResponseRead,
    ResponseStatusUpdate,
    ResponseWithDetails,
    SatisfactionCreate,
    SatisfactionRead,
    SatisfactionUpdate,
    SatisfactionWithDetails,
)
from .user import UserCreate, UserRead

__all__ = [
    "AssigneeReport",
    "AssignmentCreate",
    "AssignmentQueryResult",
    "AssignmentRead",
    "AssignmentStatus",
    "AssignmentStatusUpdate",
    "AssignmentWithPeople",
    "CategorizedTickets",
    "DELEGATED_STATUSES",
    "DateCategories",
    "DateCategoryResult",
    "OPEN_STATUSES",
    "Priority",
    "ProofCreate",
    "ProofQueryResult",
    "ProofRead",
    "ProofWithDetails",
    "ReminderCreate",
    "ReminderList",
    "ReminderRead",
    "ReminderWithDetails",
    "ResponseCreate",
    "ResponseRead",
    "ResponseStatusUpdate",
    "ResponseWithDetails",
    "Rights",
    "RoleAssignments",
    "SatisfactionCreate",
    "SatisfactionRead",
    "SatisfactionUpdate",
    "SatisfactionWithDetails",
    "TicketBrief",
    "TicketCreate",
    "TicketForward",
    "TicketRead",
    "TicketStatus",
    "TicketStatusUpdate",
    "TicketTotals",
    "TicketWithPeople",
    "TicketWithSender",
    "TodayCount",
    "UserBrief",
    "UserCreate",
    "UserRead",
    "parse_id_list",
]
