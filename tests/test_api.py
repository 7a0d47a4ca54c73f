"""HTTP surface: envelopes, multipart uploads and the full ticket lifecycle."""

import json

import pytest


def _create_ticket(client, **overrides):
    form = {
        "user_id": "boss",
        "recipient_ids": json.dumps(["manager"]),
        "type": "technical",
        "priority": "Urgent",
    }
    form.update(overrides)
    return client.post("/ticket", data=form)


def _create_user(client, **overrides):
    body = {"full_name": "Ayesha Khan", "email": "ayesha@example.com", "username": "ayesha", "role": "Admin"}
    body.update(overrides)
    return client.post("/users", json=body)


class TestEnvelope:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_missing_fields_named(self, client):
        response = client.post("/ticket", data={"type": "technical"})
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "validation_error"
        assert body["fields"] == ["user_id", "recipient_ids", "priority"]

    def test_not_found(self, client):
        response = client.get("/ticket/does-not-exist")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_json_body_validation_is_400(self, client):
        response = client.put("/ticket/forward", json={"ticket_id": "x"})
        assert response.status_code == 400
        assert set(response.json()["fields"]) == {"recipient_id", "rights"}


class TestTicketRoutes:
    def test_create_with_image(self, client, media_store):
        response = client.post(
            "/ticket",
            data={"user_id": "boss", "recipient_ids": '["manager"]', "type": "technical", "priority": "Normal"},
            files={"image": ("photo.png", b"\x89PNG-bytes", "image/png")},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        url = body["data"]["image_url"]
        assert url.startswith("http://media.test/users_data/")
        assert url.endswith("_image.jpg")
        assert body["data"]["voice_note_url"] is None

        filename = url.rsplit("/", 1)[-1]
        assert (media_store.root / filename).read_bytes() == b"\x89PNG-bytes"
        fetched = client.get(f"/ticket/getmedia/{filename}")
        assert fetched.status_code == 200
        assert fetched.content == b"\x89PNG-bytes"

    def test_getmedia_missing(self, client):
        assert client.get("/ticket/getmedia/nothing.jpg").status_code == 404

    def test_without_uploads(self, client):
        response = _create_ticket(client)
        assert response.json()["data"]["image_url"] is None

    def test_deadline_rendered_in_display_zone(self, client):
        response = _create_ticket(client, deadline="2025-07-15T12:00:00Z")
        assert response.json()["data"]["deadline"] == "2025-07-15T17:00:00+05:00"

    def test_forward_and_recipient_listing(self, client):
        ticket_id = _create_ticket(client).json()["data"]["id"]
        response = client.put("/ticket/forward", json={"ticket_id": ticket_id, "recipient_id": "deputy", "rights": "forward"})
        assert response.status_code == 200
        assert response.json()["data"]["recipient_ids"] == ["deputy"]

        assert client.get("/ticket/recipient/manager").json()["count"] == 0
        listed = client.get("/ticket/recipient/deputy").json()
        assert listed["count"] == 1
        assert listed["data"][0]["ticket"]["id"] == ticket_id

    def test_update_status_wrong_pair(self, client):
        ticket_id = _create_ticket(client).json()["data"]["id"]
        response = client.patch(
            "/ticket/update-status",
            json={"ticket_id": ticket_id, "user_id": "boss", "recipient_id": "stranger", "status": "Active"},
        )
        assert response.status_code == 404
        assert client.get(f"/ticket/{ticket_id}").json()["data"]["status"] == "pending"

    def test_summary_rejects_bad_range(self, client):
        response = client.get("/ticket/summary/boss", params={"from": "banana"})
        assert response.status_code == 400
        assert response.json()["fields"] == ["from"]

    def test_summary_counts_open_types(self, client):
        _create_ticket(client)
        _create_ticket(client, type="billing")
        body = client.get("/ticket/summary/boss").json()["data"]
        assert body["total_tickets"] == 2
        assert body["type_counts"] == {"technical": 1, "billing": 1}

    def test_delete_all(self, client):
        _create_ticket(client)
        response = client.delete("/ticket/tickets/delete-all")
        assert response.json()["data"] == {"deleted_count": 1}
        assert client.get("/ticket/tickets", params={"user_id": "boss"}).json()["count"] == 0


class TestAdminSummary:
    def test_admin(self, client):
        admin = _create_user(client).json()["data"]
        _create_ticket(client)
        body = client.get("/ticket/admin-summary", params={"user_id": admin["id"]}).json()["data"]
        assert body["total_tickets"] == 1
        assert body["ticket_status_counts"] == {"pending": 1}

    def test_non_admin_forbidden(self, client):
        user = _create_user(client, role="Incharge").json()["data"]
        response = client.get("/ticket/admin-summary", params={"user_id": user["id"]})
        assert response.status_code == 403

    def test_unknown_user(self, client):
        assert client.get("/ticket/admin-summary", params={"user_id": "ghost"}).status_code == 404


class TestUsers:
    def test_duplicate_email_conflicts(self, client):
        assert _create_user(client).status_code == 201
        response = _create_user(client, username="other")
        assert response.status_code == 409
        assert response.json()["fields"] == ["email"]

    def test_list_by_role(self, client):
        _create_user(client)
        _create_user(client, email="b@example.com", username="b", role="IT")
        body = client.get("/users", params={"role": "IT"}).json()
        assert body["count"] == 1


class TestReminderRoutes:
    def test_lifecycle(self, client):
        body = {"ticket_id": "t1", "user_id": "boss", "recipient_id": "manager"}
        first = client.post("/reminder/reminder", json=body)
        assert first.status_code == 201
        assert first.json()["data"]["count"] == "1"

        client.post("/reminder/reminder", json=body)
        third = client.post("/reminder/reminder", json=body)
        assert third.json()["message"] == "Reminder count updated."
        assert third.json()["data"]["count"] == "3"

        capped = client.post("/reminder/reminder", json=body)
        assert capped.status_code == 200
        assert capped.json()["capped"] is True
        assert capped.json()["data"]["count"] == "3"

        listed = client.get("/reminder/reminders/t1").json()["data"]
        assert len(listed["reminders"]) == 1


class TestLifecycle:
    """Create, delegate, prove and inspect a ticket end to end."""

    def test_full_flow(self, client):
        boss = _create_user(client).json()["data"]
        manager = _create_user(client, email="m@example.com", username="m", role="Incharge").json()["data"]
        worker = _create_user(client, email="w@example.com", username="w", role="IT").json()["data"]

        ticket = _create_ticket(client, user_id=boss["id"], recipient_ids=json.dumps([manager["id"]])).json()["data"]

        assigned = client.post(
            "/assign/assign",
            data={
                "user_id": manager["id"],
                "assign_to": json.dumps([worker["id"]]),
                "details": "Swap the faulty router",
                "priority": "urgent",
                "ticket_id": ticket["id"],
                "status": "Working",
            },
            files={"voice_note": ("note.webm", b"voice", "audio/webm")},
        )
        assert assigned.status_code == 201
        assignment = assigned.json()["data"]
        assert assignment["voice_note_url"].endswith("_voice.mp3")
        assert assignment["priority"] == "Urgent"

        assert client.get(f"/ticket/{ticket['id']}").json()["data"]["status"] == "Assign"

        plate = client.get("/assign/assign", params={"user_id": manager["id"]}).json()["data"]
        assert plate["ticket_count"] == 1
        assert plate["assignments"][0]["assignees"][0]["id"] == worker["id"]

        delegated = client.get("/ticket/filtertwo", params={"manager_id": manager["id"]}).json()["data"]
        assert delegated[0]["id"] == ticket["id"]
        assert delegated[0]["assignment"]["id"] == assignment["id"]

        filtered = client.get("/ticket/filter", params={"user_id": boss["id"], "status": "Assign"}).json()["data"]
        assert filtered[0]["assign_info"][0]["id"] == assignment["id"]

        admins = client.get("/assign/admin-assignments", params={"role": "IT"}).json()["data"]
        assert admins[0]["assignments"][0]["ticket"]["id"] == ticket["id"]

        proof = client.post(
            "/proof",
            data={"ticket_id": ticket["id"], "user_id": worker["id"], "recipient_id": manager["id"], "remarks": "done"},
        )
        assert proof.status_code == 201
        proofs = client.get("/proof", params={"ticket_id": ticket["id"]}).json()
        assert proofs["count"] == 1
        assert proofs["data"][0]["recipient"]["id"] == manager["id"]

        done = client.put(f"/assign/update-status/{assignment['id']}", json={"status": "complete"})
        assert done.json()["data"]["status"] == "Completed"

        report = client.get("/assign/adminreport-count", params={"user_id": worker["id"]}).json()["data"]
        assert report["completed"] == 1
        assert report["totalResolved"] == 1

    def test_assignment_with_unknown_ticket_leaves_tickets_alone(self, client):
        ticket = _create_ticket(client).json()["data"]
        response = client.post(
            "/assign/assign",
            data={
                "user_id": "manager",
                "assign_to": '["worker"]',
                "details": "x",
                "priority": "Normal",
                "ticket_id": "A" * 21,
            },
        )
        assert response.status_code == 201
        assert client.get(f"/ticket/{ticket['id']}").json()["data"]["status"] == "pending"

    @pytest.mark.parametrize("assign_to", ["worker", "[]", ""])
    def test_bad_assign_to(self, client, assign_to):
        response = client.post(
            "/assign/assign",
            data={"user_id": "m", "assign_to": assign_to, "details": "x", "priority": "Normal"},
        )
        assert response.status_code == 400
        assert response.json()["fields"] == ["assign_to"]


class TestStatusFilters:
    def test_ticket_filter_matches_normalised_status(self, client):
        ticket_id = _create_ticket(client).json()["data"]["id"]
        client.patch(
            "/ticket/update-status",
            json={"ticket_id": ticket_id, "user_id": "boss", "recipient_id": "manager", "status": "completed"},
        )
        body = client.get("/ticket/tickets", params={"user_id": "boss", "status": "completed"}).json()
        assert body["count"] == 1
        assert body["data"][0]["status"] == "Completed"

    def test_assignment_filter_matches_normalised_status(self, client):
        client.post(
            "/assign/assign",
            data={"user_id": "m", "assign_to": '["w"]', "details": "x", "priority": "Normal", "status": "working"},
        )
        assert client.get("/assign/assignments/working").json()["count"] == 1
        plate = client.get("/assign/assign", params={"user_id": "m", "status": "working"}).json()["data"]
        assert len(plate["assignments"]) == 1

    def test_unknown_status_filter_is_400(self, client):
        response = client.get("/ticket/tickets", params={"user_id": "boss", "status": "archived"})
        assert response.status_code == 400
        assert response.json()["fields"] == ["status"]


class TestResponseRoutes:
    def test_response_flow(self, client):
        ticket_id = _create_ticket(client).json()["data"]["id"]
        created = client.post(
            "/response",
            data={
                "ticket_id": ticket_id,
                "user_id": "boss",
                "response_person_id": "manager",
                "type": "technical",
                "description": "Router replaced",
                "priority": "Normal",
            },
            files={"image": ("proof.jpg", b"jpeg", "image/jpeg")},
        )
        assert created.status_code == 201
        response = created.json()["data"]
        assert response["status"] == "pending"
        assert response["image_url"].startswith("http://media.test/users_data/")

        listed = client.get("/response", params={"ticket_id": ticket_id, "response_person_id": "manager"}).json()
        assert listed["count"] == 1
        assert listed["data"][0]["ticket"]["id"] == ticket_id

        updated = client.patch(f"/response/{response['id']}/status", json={"status": "resolved"})
        assert updated.json()["data"]["status"] == "resolved"

    def test_response_query_requires_ticket(self, client):
        response = client.get("/response", params={"user_id": "boss"})
        assert response.status_code == 400
        assert response.json()["fields"] == ["ticket_id"]

    def test_satisfaction_flow(self, client):
        ticket_id = _create_ticket(client).json()["data"]["id"]
        form = {
            "ticket_id": ticket_id,
            "user_id": "boss",
            "response_person_id": "manager",
            "type": "technical",
            "description": "All good",
            "priority": "Normal",
        }
        created = client.post("/satisfy", data=form)
        assert created.status_code == 201
        record = created.json()["data"]
        assert record["status"] == "Completed"

        updated = client.put(f"/satisfy/{record['id']}", data={"priority": "urgent"})
        assert updated.json()["data"]["priority"] == "Urgent"
        assert updated.json()["data"]["description"] == "All good"

        assert client.put("/satisfy/missing", data={"priority": "urgent"}).status_code == 404
        assert client.get("/satisfy", params={"ticket_id": ticket_id}).json()["count"] == 1
        assert client.delete("/satisfy/responses/delete-all").json()["data"] == {"deleted_count": 1}
