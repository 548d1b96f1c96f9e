"""Tests for director invitation codes."""

from datetime import datetime, timedelta

from farewelly.domain.director_invitations.service import CODE_PATTERN, generate_code
from farewelly.models import DirectorClient, DirectorInvitation, Notification


def invitation_body(**overrides):
    body = {
        "family_name": "Familie de Vries",
        "primary_contact": "Anna de Vries",
        "email": "Anna@Example.nl",
        "phone": "06-12345678",
        "municipality": "Utrecht",
    }
    body.update(overrides)
    return body


def invite(client, headers, **overrides):
    return client.post("/api/director/invitations", headers=headers, json=invitation_body(**overrides))


class TestCreateInvitation:
    def test_code_issued(self, client, director, auth_headers):
        response = invite(client, auth_headers(director))

        assert response.status_code == 201
        data = response.json()["data"]
        assert CODE_PATTERN.match(data["code"])
        assert data["status"] == "pending"
        assert data["email"] == "anna@example.nl"
        assert data["phone"] == "+31612345678"
        assert data["is_expired"] is False

    def test_generated_code_carries_year(self):
        assert generate_code(datetime(2031, 4, 1)).startswith("UFV-2031-")

    def test_existing_family_is_notified(self, client, db, director, make_user, auth_headers):
        family = make_user("family", email="anna@example.nl")

        invite(client, auth_headers(director))

        notification = db.query(Notification).filter(Notification.user_id == family.id).one()
        assert notification.title == "Director Invitation"

    def test_invalid_email(self, client, director, auth_headers):
        response = invite(client, auth_headers(director), email="geen-adres")

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid email format"

    def test_missing_phone(self, client, director, auth_headers):
        body = invitation_body()
        del body["phone"]

        response = client.post("/api/director/invitations", headers=auth_headers(director), json=body)

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required fields: phone"

    def test_directors_only(self, client, family, auth_headers):
        response = invite(client, auth_headers(family))

        assert response.status_code == 403


class TestListInvitations:
    def test_counts(self, client, db, director, auth_headers):
        headers = auth_headers(director)
        invite(client, headers)
        invite(client, headers, family_name="Familie Bakker")
        expired_code = invite(client, headers, family_name="Familie Jansen").json()["data"]["code"]
        expired = db.query(DirectorInvitation).filter(DirectorInvitation.code == expired_code).one()
        expired.expires_at = datetime.utcnow() - timedelta(days=1)
        db.commit()

        response = client.get("/api/director/invitations", headers=headers)

        body = response.json()
        assert len(body["data"]) == 3
        assert body["total_pending"] == 2
        assert body["total_connected"] == 0
        assert body["total_expired"] == 1


class TestValidateCode:
    def test_valid_code(self, client, director, auth_headers):
        code = invite(client, auth_headers(director)).json()["data"]["code"]

        response = client.get(f"/api/validate-director-code?code={code.lower()}")

        assert response.json() == {
            "valid": True,
            "director_name": director.name,
            "company_name": director.company_name,
            "code": code,
            "family_name": "Familie de Vries",
        }

    def test_code_required(self, client):
        response = client.get("/api/validate-director-code")

        assert response.status_code == 400
        assert response.json()["error"] == "Director code is required"

    def test_bad_format(self, client):
        response = client.get("/api/validate-director-code?code=VDB-2024-001")

        assert response.json() == {"valid": False, "error": "Invalid code format"}

    def test_unknown_code(self, client):
        response = client.get("/api/validate-director-code?code=UFV-2026-000001")

        assert response.json() == {"valid": False, "error": "Code not found or expired"}

    def test_expired_code(self, client, db, director, auth_headers):
        code = invite(client, auth_headers(director)).json()["data"]["code"]
        invitation = db.query(DirectorInvitation).filter(DirectorInvitation.code == code).one()
        invitation.expires_at = datetime.utcnow() - timedelta(minutes=1)
        db.commit()

        response = client.get(f"/api/validate-director-code?code={code}")

        assert response.json()["valid"] is False


class TestConnect:
    def test_family_connects(self, client, db, director, family, auth_headers):
        code = invite(client, auth_headers(director)).json()["data"]["code"]

        response = client.post("/api/director/invitations/connect", headers=auth_headers(family), json={"code": code})

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "active"
        db.expire_all()
        invitation = db.query(DirectorInvitation).one()
        assert invitation.status == "connected"
        assert invitation.family_id == family.id
        assert db.query(DirectorClient).filter(DirectorClient.family_id == family.id).count() == 1
        titles = [n.title for n in db.query(Notification).filter(Notification.user_id == director.id)]
        assert titles == ["Family Connected"]

        again = client.get(f"/api/validate-director-code?code={code}")
        assert again.json()["valid"] is False

    def test_archived_client_reactivated(self, client, db, director, family, auth_headers):
        db.add(DirectorClient(director_id=director.id, family_id=family.id, status="archived", tags=[]))
        db.commit()
        code = invite(client, auth_headers(director)).json()["data"]["code"]

        client.post("/api/director/invitations/connect", headers=auth_headers(family), json={"code": code})

        db.expire_all()
        assert db.query(DirectorClient).one().status == "active"

    def test_used_code_rejected(self, client, director, family, make_user, auth_headers):
        code = invite(client, auth_headers(director)).json()["data"]["code"]
        client.post("/api/director/invitations/connect", headers=auth_headers(family), json={"code": code})

        response = client.post(
            "/api/director/invitations/connect", headers=auth_headers(make_user("family")), json={"code": code}
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Code not found or expired"

    def test_families_only(self, client, director, auth_headers):
        response = client.post(
            "/api/director/invitations/connect", headers=auth_headers(director), json={"code": "UFV-2026-000001"}
        )

        assert response.status_code == 403
