"""
Tests for the ticket routes and lazy materialization.
"""
from datetime import datetime

from ticketwise.models import Family, Level, Ticket
from ticketwise.services.sheet_generator import generate_sheets

API = "/api/v1/tickets"


def assign_family(db, family_id, sheets):
    family = Family(id=family_id, level=sheets[0].level, sheet_ids=[s.id for s in sheets],
                    students=["Leo Dupuis"])
    for sheet in sheets:
        sheet.is_assigned = True
        sheet.family_id = family_id
    db.add(family)
    db.commit()
    return family


class TestOpenFamilyPack:
    """Tests for POST /tickets/families/{id}/open."""

    def test_end_to_end_scenario(self, client, db, staff_headers):
        """Two 24-packs for P in 2025, family owning the first one."""
        sheets = generate_sheets(db, Level.P, 24, 2, now=datetime(2025, 2, 3, 10, 0))
        assert [(s.start_number, s.end_number) for s in sheets] == [(1, 24), (25, 48)]
        assign_family(db, "family-1", sheets[:1])

        response = client.post(f"{API}/families/family-1/open", headers=staff_headers)

        assert response.status_code == 200
        data = response.json()
        assert [t["id"] for t in data["tickets"]] == [f"P-25{n:04d}" for n in range(1, 25)]
        assert all(t["is_used"] is False for t in data["tickets"])
        assert data["total"] == 24 and data["remaining"] == 24

    def test_opening_twice_does_not_duplicate(self, client, db, staff_headers):
        sheets = generate_sheets(db, Level.C, 12, 1)
        assign_family(db, "family-1", sheets)

        first = client.post(f"{API}/families/family-1/open", headers=staff_headers).json()
        second = client.post(f"{API}/families/family-1/open", headers=staff_headers).json()

        assert first["total"] == second["total"] == 12
        assert db.query(Ticket).count() == 12

    def test_unknown_family(self, client, staff_headers):
        assert client.post(f"{API}/families/nope/open", headers=staff_headers).status_code == 404

    def test_family_without_sheets(self, client, db, staff_headers):
        db.add(Family(id="family-empty", sheet_ids=[]))
        db.commit()
        assert client.post(f"{API}/families/family-empty/open", headers=staff_headers).status_code == 400

    def test_deleted_sheet_is_not_materialized(self, client, db, staff_headers):
        """A soft-deleted sheet still listed by the family yields no ticket."""
        sheets = generate_sheets(db, Level.P, 12, 2)
        assign_family(db, "family-1", sheets)
        sheets[1].is_deleted = True
        db.commit()

        response = client.post(f"{API}/families/family-1/open", headers=staff_headers)

        assert response.status_code == 200
        assert response.json()["total"] == 12
        assert {t["sheet_id"] for t in response.json()["tickets"]} == {sheets[0].id}

    def test_sheet_added_after_first_open(self, client, db, staff_headers):
        sheets = generate_sheets(db, Level.P, 12, 2)
        family = assign_family(db, "family-1", sheets[:1])
        client.post(f"{API}/families/family-1/open", headers=staff_headers)

        family.sheet_ids = [s.id for s in sheets]
        sheets[1].is_assigned = True
        sheets[1].family_id = "family-1"
        db.commit()

        response = client.post(f"{API}/families/family-1/open", headers=staff_headers)
        assert response.json()["total"] == 24
        assert db.query(Ticket).count() == 24

    def test_codes_held_by_another_family(self, client, db, staff_headers):
        """Colliding codes answer 409 instead of an empty pack."""
        sheet = generate_sheets(db, Level.S, 12, 1)[0]
        assign_family(db, "family-1", [sheet])
        db.add(Ticket(id=sheet.start_code, level=Level.S, sheet_id=sheet.id, family_id="family-old"))
        db.commit()

        response = client.post(f"{API}/families/family-1/open", headers=staff_headers)

        assert response.status_code == 409
        assert sheet.start_code in response.json()["detail"]
        assert client.get(API, params={"family_id": "family-1"}, headers=staff_headers).status_code == 404


class TestListAndValidate:
    """Tests for GET /tickets and POST /tickets/validate."""

    def open_pack(self, client, db, headers):
        sheets = generate_sheets(db, Level.L, 12, 1)
        assign_family(db, "family-1", sheets)
        return client.post(f"{API}/families/family-1/open", headers=headers).json()["tickets"]

    def test_list_requires_tickets(self, client, staff_headers):
        response = client.get(API, params={"family_id": "family-1"}, headers=staff_headers)
        assert response.status_code == 404

    def test_overview_is_admin_only(self, client, staff_headers, admin_headers):
        assert client.get(API, headers=staff_headers).status_code == 403
        assert client.get(API, headers=admin_headers).status_code == 200

    def test_validate_marks_used(self, client, db, staff_headers):
        tickets = self.open_pack(client, db, staff_headers)

        response = client.post(f"{API}/validate", json={
            "family_id": "family-1",
            "tickets": [{"id": tickets[0]["id"], "is_used": True}, {"id": tickets[1]["id"], "is_used": True}],
            "validated_by": "reception"
        }, headers=staff_headers)

        assert response.status_code == 200
        assert response.json()["updated"] == 2
        assert response.json()["tickets"][0]["validated_by"] == "reception"

        listing = client.get(API, params={"family_id": "family-1"}, headers=staff_headers).json()
        assert listing["used"] == 2
        assert listing["remaining"] == 10

    def test_validate_never_creates(self, client, db, staff_headers):
        self.open_pack(client, db, staff_headers)

        response = client.post(f"{API}/validate", json={
            "family_id": "family-1",
            "tickets": [{"id": "L-999999", "is_used": True}]
        }, headers=staff_headers)

        assert response.status_code == 404
        assert db.query(Ticket).count() == 12

    def test_validate_other_family(self, client, db, staff_headers):
        tickets = self.open_pack(client, db, staff_headers)

        response = client.post(f"{API}/validate", json={
            "family_id": "family-2",
            "tickets": [{"id": tickets[0]["id"], "is_used": True}]
        }, headers=staff_headers)

        assert response.status_code == 400

    def test_delete_ticket(self, client, db, staff_headers):
        tickets = self.open_pack(client, db, staff_headers)

        assert client.delete(f"{API}/{tickets[0]['id']}", headers=staff_headers).status_code == 204
        assert client.delete(f"{API}/{tickets[0]['id']}", headers=staff_headers).status_code == 404
