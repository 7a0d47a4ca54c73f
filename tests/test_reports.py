"""Aggregation layer joins."""

from datetime import datetime, timedelta, timezone

from helpdesk.core.errors import validate_payload
from helpdesk.schemas import AssignmentCreate
from helpdesk.services.assignments import AssignmentService
from helpdesk.services.reports import ReportService


def _assign(session, ticket_id, user_id="manager", details="Check the uplink"):
    payload = validate_payload(
        AssignmentCreate,
        {"user_id": user_id, "assign_to": ["worker"], "details": details, "priority": "Normal", "ticket_id": ticket_id},
    )
    return AssignmentService(session).create_assignment(payload)


def test_delegated_tickets_report_the_oldest_assignment(session, make_ticket):
    ticket = make_ticket(user_id="boss", recipient_ids=["manager"])
    newer = _assign(session, ticket.id, details="second pass")
    older = _assign(session, ticket.id, details="first pass")
    base = datetime.now(timezone.utc)
    older.created_at = base - timedelta(hours=2)
    newer.created_at = base - timedelta(hours=1)
    session.flush()

    result = ReportService(session).delegated_tickets(manager_id="manager")
    assert [t.id for t in result] == [ticket.id]
    assert result[0].assignment.id == older.id


def test_delegated_tickets_filtered_by_assignee(session, make_ticket):
    ticket = make_ticket(user_id="boss", recipient_ids=["manager"])
    _assign(session, ticket.id)

    reports = ReportService(session)
    assert len(reports.delegated_tickets(user_id="worker")) == 1
    assert reports.delegated_tickets(user_id="nobody") == []


def test_filter_with_assignments_accepts_lowercase_status(session, make_ticket):
    ticket = make_ticket(user_id="boss", recipient_ids=["manager"])
    assignment = _assign(session, ticket.id)

    result = ReportService(session).filter_with_assignments("boss", status="assign")
    assert [t.id for t in result] == [ticket.id]
    assert [a.id for a in result[0].assign_info] == [assignment.id]
