"""
Tests for families, payments, teachers and the dashboard.
"""
from datetime import date, timedelta

from ticketwise.models import Level, Sheet, Ticket
from ticketwise.services.sheet_generator import generate_sheets

API = "/api/v1"


def family_payload(sheet_ids, **extra):
    payload = {
        "id": "family-1",
        "level": "P",
        "sheet_ids": sheet_ids,
        "students": ["Leo Dupuis", "Ines Dupuis"],
        "parents": {"mother": "Sophie Dupuis"},
        "subjects": [{"name": "Maths", "hours": 12, "student_name": "Leo Dupuis"}],
        "pack_details": {"hourly_rate": 130, "reduction": 0, "total": 1560},
        "contact": {"phone": "+212600000000"},
    }
    payload.update(extra)
    return payload


class TestFamilies:
    """Tests for /families."""

    def test_upsert_assigns_sheets(self, client, db, staff_headers):
        sheets = generate_sheets(db, Level.P, 12, 2)

        response = client.post(f"{API}/families", json=family_payload([sheets[0].id]), headers=staff_headers)

        assert response.status_code == 200
        assert response.json()["display_name"] == "Leo Dupuis (+1)"
        db.expire_all()
        assert db.get(Sheet, sheets[0].id).family_id == "family-1"
        assert db.get(Sheet, sheets[1].id).is_assigned is False

    def test_upsert_releases_dropped_sheets(self, client, db, staff_headers):
        sheets = generate_sheets(db, Level.P, 12, 2)
        client.post(f"{API}/families", json=family_payload([sheets[0].id]), headers=staff_headers)

        client.post(f"{API}/families", json=family_payload([sheets[1].id]), headers=staff_headers)

        db.expire_all()
        assert db.get(Sheet, sheets[0].id).is_assigned is False
        assert db.get(Sheet, sheets[1].id).family_id == "family-1"

    def test_sheet_of_another_family(self, client, db, staff_headers):
        sheet = generate_sheets(db, Level.P, 12, 1)[0]
        client.post(f"{API}/families", json=family_payload([sheet.id]), headers=staff_headers)

        response = client.post(f"{API}/families", json=family_payload([sheet.id], id="family-2"),
                               headers=staff_headers)
        assert response.status_code == 409

    def test_released_sheet_opens_for_its_new_family(self, client, db, staff_headers):
        """A sheet dropped after opening can be materialized again by another family."""
        sheets = generate_sheets(db, Level.P, 12, 2)
        client.post(f"{API}/families", json=family_payload([s.id for s in sheets]), headers=staff_headers)
        assert client.post(f"{API}/tickets/families/family-1/open", headers=staff_headers).json()["total"] == 24

        client.post(f"{API}/families", json=family_payload([sheets[1].id]), headers=staff_headers)
        client.post(f"{API}/families", json=family_payload([sheets[0].id], id="family-2"), headers=staff_headers)
        response = client.post(f"{API}/tickets/families/family-2/open", headers=staff_headers)

        assert response.status_code == 200
        assert response.json()["total"] == 12
        assert {t["sheet_id"] for t in response.json()["tickets"]} == {sheets[0].id}
        first = client.get(f"{API}/tickets", params={"family_id": "family-1"}, headers=staff_headers).json()
        assert first["total"] == 12
        assert {t["sheet_id"] for t in first["tickets"]} == {sheets[1].id}

    def test_sheet_with_used_tickets_cannot_be_released(self, client, db, staff_headers):
        sheets = generate_sheets(db, Level.P, 12, 2)
        client.post(f"{API}/families", json=family_payload([s.id for s in sheets]), headers=staff_headers)
        tickets = client.post(f"{API}/tickets/families/family-1/open", headers=staff_headers).json()["tickets"]
        client.post(f"{API}/tickets/validate", json={
            "family_id": "family-1", "tickets": [{"id": tickets[0]["id"], "is_used": True}]
        }, headers=staff_headers)

        response = client.post(f"{API}/families", json=family_payload([sheets[1].id]), headers=staff_headers)

        assert response.status_code == 409
        db.expire_all()
        assert db.get(Sheet, sheets[0].id).family_id == "family-1"
        assert db.query(Ticket).count() == 24

    def test_delete_removes_tickets_and_releases_sheets(self, client, db, staff_headers):
        sheet = generate_sheets(db, Level.P, 12, 1)[0]
        client.post(f"{API}/families", json=family_payload([sheet.id]), headers=staff_headers)
        client.post(f"{API}/tickets/families/family-1/open", headers=staff_headers)

        assert client.delete(f"{API}/families/family-1", headers=staff_headers).status_code == 204

        db.expire_all()
        assert db.query(Ticket).count() == 0
        assert db.get(Sheet, sheet.id).is_assigned is False
        assert client.get(f"{API}/families/family-1", headers=staff_headers).status_code == 404


class TestPayments:
    """Tests for /payments."""

    def create_family(self, client, headers):
        today = date.today()
        payments = [
            {"method": "cash", "amount": 500, "status": "completed", "date": today.isoformat()},
            {"method": "cheque", "amount": 600, "due_date": (today - timedelta(days=3)).isoformat()},
            {"method": "card", "amount": 460, "due_date": (today + timedelta(days=30)).isoformat()},
        ]
        client.post(f"{API}/families", json=family_payload([], payments=payments), headers=headers)

    def test_derived_status_and_totals(self, client, staff_headers):
        self.create_family(client, staff_headers)

        data = client.get(f"{API}/payments", headers=staff_headers).json()

        assert [p["status"] for p in data["payments"]] == ["completed", "overdue", "pending"]
        assert data["totals"] == {"completed": 500, "overdue": 600, "pending": 460}
        assert data["payments"][0]["family_name"] == "Leo Dupuis (+1)"

    def test_complete(self, client, staff_headers):
        self.create_family(client, staff_headers)

        response = client.post(f"{API}/payments/family-1/1/complete", headers=staff_headers)

        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        assert response.json()["date"] == date.today().isoformat()

    def test_cheque_received(self, client, staff_headers):
        self.create_family(client, staff_headers)

        assert client.post(f"{API}/payments/family-1/1/cheque", headers=staff_headers).json()["cheque_received"] is True
        assert client.post(f"{API}/payments/family-1/2/cheque", headers=staff_headers).status_code == 400

    def test_unknown_payment(self, client, staff_headers):
        self.create_family(client, staff_headers)
        assert client.post(f"{API}/payments/family-1/9/complete", headers=staff_headers).status_code == 404


class TestTeachers:
    """Tests for /teachers."""

    def test_create_splits_name(self, client, staff_headers):
        response = client.post(f"{API}/teachers", json={
            "name": "Nadia Benali", "specializations": ["Maths"]
        }, headers=staff_headers)

        assert response.status_code == 201
        assert response.json()["first_name"] == "Nadia"
        assert response.json()["last_name"] == "Benali"

    def test_requires_specialization(self, client, staff_headers):
        response = client.post(f"{API}/teachers", json={
            "first_name": "Karim", "last_name": "Alaoui", "specializations": []
        }, headers=staff_headers)
        assert response.status_code == 422

    def test_requires_name(self, client, staff_headers):
        response = client.post(f"{API}/teachers", json={"specializations": ["SVT"]}, headers=staff_headers)
        assert response.status_code == 422

    def test_update_and_delete(self, client, staff_headers):
        teacher = client.post(f"{API}/teachers", json={
            "first_name": "Sara", "last_name": "Idrissi", "specializations": ["Anglais"]
        }, headers=staff_headers).json()

        updated = client.put(f"{API}/teachers/{teacher['id']}", json={"phone": "+212622222222"},
                             headers=staff_headers)
        assert updated.json()["phone"] == "+212622222222"
        assert client.delete(f"{API}/teachers/{teacher['id']}", headers=staff_headers).status_code == 204

    def test_update_keeps_required_fields_on_null(self, client, staff_headers):
        """An explicit null for a required column leaves it as stored."""
        teacher = client.post(f"{API}/teachers", json={
            "first_name": "Omar", "last_name": "Tazi", "specializations": ["Physique"]
        }, headers=staff_headers).json()

        updated = client.put(f"{API}/teachers/{teacher['id']}",
                             json={"first_name": None, "notes": "Mardi et jeudi"},
                             headers=staff_headers)

        assert updated.status_code == 200
        assert updated.json()["first_name"] == "Omar"
        assert updated.json()["notes"] == "Mardi et jeudi"


class TestDashboard:
    """Tests for /dashboard."""

    def test_counts(self, client, db, admin_headers, staff_headers):
        sheets = generate_sheets(db, Level.P, 24, 2)
        generate_sheets(db, Level.C, 12, 1)
        client.post(f"{API}/families", json=family_payload([sheets[0].id]), headers=staff_headers)
        client.post(f"{API}/sheets/{sheets[1].id}/download", headers=staff_headers)

        data = client.get(f"{API}/dashboard", headers=admin_headers).json()

        overview = data["overview"]
        assert overview["total_sheets"] == 3
        assert overview["unassigned_sheets"] == 2
        assert overview["total_families"] == 1
        assert overview["total_users"] == 2
        assert overview["recent_sheets"] == 3
        assert overview["total_tickets_generated"] == 60
        assert overview["total_downloads"] == 1

        by_level = {entry["level"]: entry for entry in data["charts"]["sheets_by_level"]}
        assert by_level["P"]["assigned"] == 1 and by_level["P"]["unassigned"] == 1
        assert data["charts"]["top_downloaded_sheets"][0]["display_name"] == sheets[1].start_code

    def test_user_count_is_admin_only(self, client, staff_headers):
        assert client.get(f"{API}/dashboard", headers=staff_headers).json()["overview"]["total_users"] is None
