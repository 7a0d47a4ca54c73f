from .assignment import Assignment, AssignmentAssignee
from .base import Base
from .proof import Proof
from .reminder import Reminder
from .response import Satisfaction, TicketResponse
from .ticket import Ticket, TicketRecipient
from .user import User

__all__ = [
    "Assignment",
    "AssignmentAssignee",
    "Base",
    "Proof",
    "Reminder",
    "Satisfaction",
    "Ticket",
    "TicketRecipient",
    "TicketResponse",
    "User",
]
