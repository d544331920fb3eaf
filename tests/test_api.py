"""HTTP-level tests through the FastAPI test client."""

from datetime import timedelta

from database import utcnow


def create_client(api, **fields):
    payload = {"name": "Acme", "organization": "Acme Corp", "status": "New", **fields}
    response = api.post("/clients", json=payload)
    assert response.status_code == 201
    return response.json()


class TestErrors:
    def test_root(self, api):
        assert api.get("/").json() == {"message": "Welcome to the CRM backend!"}

    def test_unknown_resources_return_404_error(self, api):
        for path, message in (("/users/missing", "User not found"), ("/clients/missing", "Client not found"), ("/notes/missing", "Note not found")):
            response = api.get(path)
            assert response.status_code == 404
            assert response.json() == {"error": message}

    def test_delete_unknown(self, api):
        response = api.delete("/clients/missing")
        assert response.status_code == 404
        assert response.json() == {"error": "Client not found"}

    def test_validation_error_is_400(self, api):
        response = api.post("/clients", json={"organization": "No name"})
        assert response.status_code == 400
        assert "name" in response.json()["error"]

    def test_invalid_enum_is_400(self, api):
        response = api.post("/notes", json={"title": "X", "priority": "critical"})
        assert response.status_code == 400
        assert set(response.json()) == {"error"}

    def test_invalid_meeting_filter(self, api):
        assert api.get("/clients", params={"meeting": "yearly"}).status_code == 400


class TestClientsApi:
    def test_create_get_update_delete(self, api):
        created = create_client(api, meeting_date="2030-01-02T10:00:00Z")
        assert created["meeting_date"].startswith("2030-01-02T10:00:00")

        fetched = api.get(f"/clients/{created['id']}").json()
        assert fetched["name"] == "Acme"
        assert fetched["project_stage"] == "Initial Talk"

        updated = api.put(f"/clients/{created['id']}", json={"status": "Closed"})
        assert updated.status_code == 200
        assert updated.json()["status"] == "Closed"
        assert updated.json()["organization"] == "Acme Corp"

        assert api.delete(f"/clients/{created['id']}").json() == {"message": "Client deleted successfully"}
        assert api.get(f"/clients/{created['id']}").status_code == 404

    def test_list_filters(self, api):
        a = create_client(api, name="A", organization="Acme")
        create_client(api, name="B", organization="Acme", status="Closed")
        create_client(api, name="C", organization="Globex")

        response = api.get("/clients", params={"search": "acme", "status": "New"})
        assert [c["id"] for c in response.json()] == [a["id"]]
        assert len(api.get("/clients", params={"status": "all"}).json()) == 3

    def test_creator_from_token(self, api, alice, auth_headers):
        response = api.post("/clients", json={"name": "Acme"}, headers=auth_headers)
        assert response.json()["created_by"] == alice["id"]

        mine = api.get("/clients", params={"created_by": alice["id"]}).json()
        assert [c["name"] for c in mine] == ["Acme"]

    def test_update_unknown(self, api):
        response = api.put("/clients/missing", json={"status": "Closed"})
        assert response.status_code == 404

    def test_null_on_required_field_is_rejected(self, api):
        created = create_client(api)
        for field in ("name", "status", "project_value"):
            response = api.put(f"/clients/{created['id']}", json={field: None})
            assert response.status_code == 400
            assert response.json() == {"error": f"Invalid request: {field}"}

        listed = api.get("/clients")
        assert listed.status_code == 200
        assert [(c["name"], c["status"]) for c in listed.json()] == [("Acme", "New")]

    def test_meeting_date_can_be_cleared(self, api):
        created = create_client(api, meeting_date="2030-01-02T10:00:00")
        response = api.put(f"/clients/{created['id']}", json={"meeting_date": None, "link": None})
        assert response.status_code == 200
        assert response.json()["meeting_date"] is None

    def test_resending_same_meeting_date_is_not_logged(self, api):
        created = create_client(api, meeting_date="2030-01-02T10:00:00.123456")
        assert created["meeting_date"] == "2030-01-02T10:00:00.123000"

        response = api.put(f"/clients/{created['id']}", json={"meeting_date": "2030-01-02T10:00:00.123456"})
        assert response.status_code == 200

        entries = api.get("/activity", params={"entityType": "client", "entityId": created["id"]}).json()
        assert [e["action"] for e in entries] == ["created"]


class TestNotesApi:
    def test_create_and_filter(self, api):
        response = api.post("/notes", json={"title": "Budget", "tags": ["q3", "q3", "finance"], "priority": "high"})
        assert response.status_code == 201
        note = response.json()
        assert note["tags"] == ["q3", "finance"]
        assert note["category"] == "general"

        api.post("/notes", json={"title": "Lunch", "priority": "low"})
        assert [n["title"] for n in api.get("/notes", params={"priority": "high"}).json()] == ["Budget"]
        assert [n["title"] for n in api.get("/notes", params={"search": "FINANCE"}).json()] == ["Budget"]

    def test_null_on_required_field_is_rejected(self, api):
        note = api.post("/notes", json={"title": "Draft", "category": "idea", "tags": ["a"]}).json()
        for field in ("title", "category", "priority", "tags"):
            response = api.put(f"/notes/{note['id']}", json={field: None})
            assert response.status_code == 400
            assert response.json() == {"error": f"Invalid request: {field}"}

        listed = api.get("/notes")
        assert listed.status_code == 200
        assert [(n["title"], n["category"], n["tags"]) for n in listed.json()] == [("Draft", "idea", ["a"])]

    def test_client_link_can_be_cleared(self, api):
        note = api.post("/notes", json={"title": "Draft", "client_id": "c1"}).json()
        response = api.put(f"/notes/{note['id']}", json={"client_id": None})
        assert response.status_code == 200
        assert response.json()["client_id"] is None

    def test_update_records_activity(self, api):
        note = api.post("/notes", json={"title": "Draft", "created_by": "u1"}).json()
        api.put(f"/notes/{note['id']}", json={"title": "Final"})

        entries = api.get("/activity", params={"entityType": "note", "entityId": note["id"]}).json()
        assert [e["action"] for e in entries] == ["updated", "created"]
        assert entries[0]["changes"] == {"title": {"from": "Draft", "to": "Final"}}
        assert entries[0]["performed_by"] == "u1"


class TestUsersApi:
    def test_password_never_returned(self, api):
        created = api.post("/users", json={"name": "Bob", "email": "bob@example.com", "password": "hunter2"})
        assert created.status_code == 201
        assert "password" not in created.json()
        assert all("password" not in user for user in api.get("/users").json())
        assert "password" not in api.get(f"/users/{created.json()['id']}").json()

    def test_invalid_email(self, api):
        response = api.post("/users", json={"name": "Bob", "email": "not-an-email"})
        assert response.status_code == 400

    def test_duplicate_email(self, api, alice):
        response = api.post("/users", json={"name": "Other", "email": "alice@example.com"})
        assert response.status_code == 400
        assert response.json() == {"error": "Email already in use: alice@example.com"}

    def test_update(self, api, alice):
        response = api.put(f"/users/{alice['id']}", json={"name": "Alice Cooper"})
        assert response.json()["name"] == "Alice Cooper"
        assert response.json()["role"] == "admin"

    def test_self_deletion_is_rejected(self, api, alice, auth_headers):
        response = api.delete(f"/users/{alice['id']}", headers=auth_headers)
        assert response.status_code == 400
        assert response.json() == {"error": "You cannot delete your own account"}
        assert api.get(f"/users/{alice['id']}").status_code == 200

    def test_delete_other_user(self, api, auth_headers):
        bob = api.post("/users", json={"name": "Bob", "email": "bob@example.com"}).json()
        response = api.delete(f"/users/{bob['id']}", headers=auth_headers)
        assert response.json() == {"message": "User deleted successfully"}

    def test_null_name_is_rejected(self, api, alice):
        response = api.put(f"/users/{alice['id']}", json={"name": None})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request: name"}
        assert api.get("/users").json()[0]["name"] == "Alice"

        cleared = api.put(f"/users/{alice['id']}", json={"avatar": None})
        assert cleared.status_code == 200

    def test_deleting_user_drops_reminder_board(self, api, app, auth_headers):
        bob = api.post("/users", json={"name": "Bob", "email": "bob@example.com", "password": "pw"}).json()
        token = api.post("/auth/login", json={"email": "bob@example.com", "password": "pw"}).json()["access_token"]
        api.get("/alerts", headers={"Authorization": f"Bearer {token}"})
        assert bob["id"] in app.state.reminders.sessions()

        api.delete(f"/users/{bob['id']}", headers=auth_headers)
        assert bob["id"] not in app.state.reminders.sessions()


class TestAuthApi:
    def test_login(self, api, alice):
        response = api.post("/auth/login", json={"email": "alice@example.com", "password": "s3cret"})
        assert response.status_code == 200
        body = response.json()
        assert body["id"] == alice["id"]
        assert body["token_type"] == "bearer"
        assert body["access_token"]
        assert "password" not in body

    def test_wrong_password_and_unknown_email_are_indistinguishable(self, api, alice):
        wrong_password = api.post("/auth/login", json={"email": "alice@example.com", "password": "nope"})
        unknown_email = api.post("/auth/login", json={"email": "ghost@example.com", "password": "s3cret"})
        assert wrong_password.status_code == unknown_email.status_code == 401
        assert wrong_password.json() == unknown_email.json() == {"error": "Invalid email or password"}

    def test_me(self, api, alice, auth_headers):
        assert api.get("/auth/me", headers=auth_headers).json()["email"] == "alice@example.com"

    def test_me_requires_token(self, api):
        response = api.get("/auth/me")
        assert response.status_code == 401
        assert response.json() == {"error": "Could not validate credentials"}
        assert api.get("/auth/me", headers={"Authorization": "Bearer garbage"}).status_code == 401


class TestAlertsApi:
    def test_list_and_dismiss(self, api):
        client = create_client(api, meeting_date=(utcnow() + timedelta(minutes=30)).isoformat())
        create_client(api, name="Later", meeting_date=(utcnow() + timedelta(days=5)).isoformat())

        alerts = api.get("/alerts").json()
        assert [a["id"] for a in alerts] == [f"meeting-1h-{client['id']}"]
        assert alerts[0]["urgent"] is True

        response = api.post(f"/alerts/meeting-1h-{client['id']}/dismiss")
        assert response.json() == {"message": "Alert dismissed"}
        assert api.get("/alerts").json() == []

    def test_dismiss_unknown(self, api):
        response = api.post("/alerts/meeting-1h-nothing/dismiss")
        assert response.status_code == 404
        assert response.json() == {"error": "Alert not found"}


class TestDashboardApi:
    def test_stats(self, api, alice):
        create_client(api, project_stage="In Progress", project_value=1000)
        create_client(api, project_stage="In Progress", project_value=500, platform="LinkedIn")

        stats = api.get("/dashboard/stats").json()
        assert stats["total_clients"] == 2
        assert stats["total_users"] == 1
        assert stats["total_value"] == 1500
        assert stats["value_by_stage"] == {"In Progress": 1500}
        assert stats["clients_by_platform"] == {"Unknown": 1, "LinkedIn": 1}

    def test_upcoming_and_calendar(self, api):
        soon = create_client(api, name="Soon", meeting_date=(utcnow() + timedelta(hours=3)).isoformat())
        create_client(api, name="Past", meeting_date=(utcnow() - timedelta(days=2)).isoformat())

        upcoming = api.get("/dashboard/upcoming-meetings").json()
        assert [c["id"] for c in upcoming] == [soon["id"]]

        calendar = api.get("/dashboard/calendar", params={"year": 2030, "month": 1}).json()
        assert calendar == []
        assert api.get("/dashboard/calendar", params={"month": 13}).status_code == 400


class TestActivityAndSeedApi:
    def test_activity_unfiltered(self, api):
        create_client(api)
        api.post("/notes", json={"title": "Note"})
        entries = api.get("/activity").json()
        assert {e["entity_type"] for e in entries} == {"client", "note"}

    def test_invalid_entity_type(self, api):
        assert api.get("/activity", params={"entityType": "invoice"}).status_code == 400

    def test_seed_is_idempotent(self, api):
        first = api.post("/seed").json()
        assert first == {"message": "Database seeded successfully", "users": 3, "clients": 6}
        second = api.post("/seed").json()
        assert second["users"] == 0 and second["clients"] == 0

        assert len(api.get("/clients").json()) == 6
        login = api.post("/auth/login", json={"email": "john@company.com", "password": "password123"})
        assert login.status_code == 200
