"""Delegation engine: assignment creation, ticket status propagation and reports."""

from datetime import date, datetime, timedelta, timezone

import pytest

from helpdesk.core.errors import NotFoundError, ValidationError, validate_payload
from helpdesk.models.base import new_id
from helpdesk.schemas import AssignmentCreate, AssignmentStatus
from helpdesk.services.assignments import AssignmentService


@pytest.fixture()
def make_assignment(session):
    def _make(user_id="manager", assign_to=("worker",), **overrides):
        data = {
            "user_id": user_id,
            "assign_to": assign_to if isinstance(assign_to, str) else list(assign_to),
            "details": "Replace the switch on floor 2",
            "priority": "Urgent",
        }
        data.update(overrides)
        return AssignmentService(session).create_assignment(validate_payload(AssignmentCreate, data))

    return _make


# ── Creation ─────────────────────────────────────────────────────────────


class TestCreateAssignment:
    def test_linked_ticket_moves_to_assign(self, session, make_ticket, make_assignment):
        ticket = make_ticket(user_id="boss", recipient_ids=["manager"])
        assignment = make_assignment(ticket_id=ticket.id)

        assert assignment.ticket_id == ticket.id
        assert session.get(type(ticket), ticket.id).status == "Assign"

    def test_unknown_ticket_is_left_alone(self, session, make_ticket, make_assignment):
        ticket = make_ticket()
        assignment = make_assignment(ticket_id=new_id())

        assert assignment.id
        assert ticket.status == "pending"

    def test_malformed_ticket_id_is_dropped(self, make_assignment):
        assignment = make_assignment(ticket_id="not-an-id")
        assert assignment.ticket_id is None

    def test_standalone_task(self, session, make_ticket, make_assignment):
        ticket = make_ticket(user_id="boss", recipient_ids=["manager"])
        assignment = make_assignment(status="working")

        assert assignment.ticket_id is None
        assert assignment.status == "Working"
        session.expire_all()
        assert session.get(type(ticket), ticket.id).status == "pending"

    def test_assign_to_as_json_string(self, make_assignment):
        assignment = make_assignment(assign_to='["w1", "w2"]')
        assert assignment.assign_to == ["w1", "w2"]

    @pytest.mark.parametrize("raw", ["w1", "{\"id\": 1}", "[]"])
    def test_assign_to_must_be_a_list(self, raw):
        with pytest.raises(ValidationError) as exc:
            validate_payload(AssignmentCreate, {"user_id": "m", "assign_to": raw, "details": "d", "priority": "Normal"})
        assert exc.value.fields == ["assign_to"]

    def test_missing_details(self):
        with pytest.raises(ValidationError) as exc:
            validate_payload(AssignmentCreate, {"user_id": "m", "assign_to": ["w"], "priority": "Normal"})
        assert exc.value.fields == ["details"]


class TestUpdateStatus:
    def test_update(self, session, make_assignment):
        assignment = make_assignment()
        updated = AssignmentService(session).update_status(assignment.id, AssignmentStatus.COMPLETED)
        assert updated.status == "Completed"

    def test_unknown(self, session):
        with pytest.raises(NotFoundError):
            AssignmentService(session).update_status("missing", AssignmentStatus.WORKING)


# ── Queries ──────────────────────────────────────────────────────────────


class TestQueries:
    def test_query_includes_delegated_tickets(self, session, make_user, make_ticket, make_assignment):
        boss = make_user(role="Admin")
        manager = make_user()
        ticket = make_ticket(user_id=boss.id, recipient_ids=[manager.id])
        make_assignment(user_id=manager.id, ticket_id=ticket.id)
        make_assignment(user_id="someone-else")

        result = AssignmentService(session).query(manager.id)
        assert len(result.assignments) == 1
        assert result.assignments[0].manager.id == manager.id
        assert result.ticket_count == 1
        assert result.tickets[0].creator.id == boss.id
        assert [u.id for u in result.related_users] == [boss.id]

    def test_query_with_recipient(self, session, make_assignment):
        mine = make_assignment(user_id="m1", assign_to=["w9"])
        for_worker = make_assignment(user_id="m2", assign_to=["w1"])
        make_assignment(user_id="m3", assign_to=["w2"])

        ids = {a.id for a in AssignmentService(session).query("m1", recipient_id="w1").assignments}
        assert ids == {mine.id, for_worker.id}

    def test_by_date_category(self, session, make_assignment):
        today = date(2025, 7, 15)
        noon = datetime(2025, 7, 15, 7, 0, tzinfo=timezone.utc)
        due_today = make_assignment(target_date=noon)
        upcoming = make_assignment(target_date=noon + timedelta(days=3))
        late = make_assignment(target_date=noon - timedelta(days=3))
        undated = make_assignment()
        make_assignment(user_id="other")

        result = AssignmentService(session).by_date_category("manager", "worker", today=today)
        cats = result.categorized_assignments
        assert [a.id for a in cats.today_tasks] == [due_today.id]
        assert [a.id for a in cats.weekly_tasks] == [upcoming.id]
        assert {a.id for a in cats.pending_tasks} == {late.id, undated.id}

    def test_status_filters_accept_any_spelling(self, session, make_assignment):
        working = make_assignment(status="working")
        make_assignment(status="pending")
        service = AssignmentService(session)

        for spelling in ("working", "WORKING", "Working"):
            assert [a.id for a in service.for_user("manager", status=spelling)] == [working.id]
            assert [a.id for a in service.for_assignee("worker", status=spelling)] == [working.id]
            assert [a.id for a in service.list_all(status=spelling)] == [working.id]

    def test_unknown_status_filter_rejected(self, session):
        with pytest.raises(ValidationError) as exc:
            AssignmentService(session).for_user("manager", status="archived")
        assert exc.value.fields == ["status"]

    def test_count_tasks_only_counts_standalone(self, session, make_ticket, make_assignment):
        ticket = make_ticket()
        make_assignment(ticket_id=ticket.id)
        make_assignment()
        now = datetime.now(timezone.utc)
        assert AssignmentService(session).count_tasks(now - timedelta(hours=1), now + timedelta(hours=1)) == 1


class TestAssigneeReport:
    def test_total_is_sum_of_buckets(self, session, make_ticket, make_assignment):
        now = datetime.now(timezone.utc)
        make_assignment(status="Completed", target_date=now - timedelta(days=2))
        make_assignment(target_date=now - timedelta(days=1))
        make_assignment(target_date=now + timedelta(days=1))
        make_assignment()
        make_ticket(user_id="worker")

        report = AssignmentService(session).assignee_report("worker", now=now)
        assert (report.completed, report.delayed, report.pending) == (1, 1, 2)
        assert report.requested == 1
        assert report.totalResolved == report.pending + report.completed + report.delayed


class TestRoleAssignments:
    def test_groups_by_user(self, session, make_user, make_assignment):
        admin = make_user(role="Admin")
        other_admin = make_user(role="Admin")
        make_assignment(assign_to=[admin.id], status="Working")
        make_assignment(assign_to=[admin.id], status="pending")

        result = AssignmentService(session).role_assignments("Admin")
        by_id = {r.id: r for r in result}
        assert len(by_id[admin.id].assignments) == 1
        assert by_id[other_admin.id].assignments == []

        lower = {r.id: r for r in AssignmentService(session).role_assignments("Admin", status="working")}
        assert len(lower[admin.id].assignments) == 1

    def test_no_users_with_role(self, session):
        with pytest.raises(NotFoundError):
            AssignmentService(session).role_assignments("Admin")
