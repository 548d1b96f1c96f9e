"""Tests for document upload, access control and sharing."""

import json

from farewelly.models import Document, DocumentAccessLog, Notification


def upload(client, headers, content=b"%PDF-1.4 akte", filename="akte.pdf", mime="application/pdf", **form):
    data = {"title": "Overlijdensakte", "type": "death_certificate"}
    data.update(form)
    return client.post("/api/documents", headers=headers, files={"file": (filename, content, mime)}, data=data)


class TestUpload:
    def test_upload_stores_object(self, client, family, auth_headers, fake_r2):
        response = upload(client, auth_headers(family))

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["type"] == "death_certificate"
        assert data["file_size"] == len(b"%PDF-1.4 akte")
        assert list(fake_r2.objects.values()) == [b"%PDF-1.4 akte"]

    def test_encrypted_content_round_trip(self, client, family, auth_headers, fake_r2):
        headers = auth_headers(family)
        document_id = upload(client, headers, encrypt="true").json()["data"]["id"]

        assert list(fake_r2.objects.values())[0] != b"%PDF-1.4 akte"
        response = client.get(f"/api/documents/{document_id}/content", headers=headers)
        assert response.status_code == 200
        assert response.content == b"%PDF-1.4 akte"

    def test_disallowed_mime_type(self, client, family, auth_headers, fake_r2):
        response = upload(client, auth_headers(family), filename="run.sh", mime="application/x-sh")

        assert response.status_code == 400
        assert response.json()["error"] == "File type not allowed"

    def test_dangerous_filename(self, client, family, auth_headers, fake_r2):
        response = upload(client, auth_headers(family), filename="a..pdf")

        assert response.status_code == 400

    def test_storage_failure(self, client, db, family, auth_headers, fake_r2):
        fake_r2.fail_uploads = True

        response = upload(client, auth_headers(family))

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to upload file"
        assert db.query(Document).count() == 0

    def test_share_on_upload_notifies(self, client, db, family, director, auth_headers, fake_r2):
        response = upload(client, auth_headers(family), share_with=json.dumps([director.id]))

        assert response.json()["data"]["shared_with"] == [director.id]
        assert db.query(Notification).filter(Notification.user_id == director.id).one().title == "Document Shared"

    def test_unknown_share_target(self, client, family, auth_headers, fake_r2):
        response = upload(client, auth_headers(family), share_with=json.dumps(["ghost"]))

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid users in share_with list"


class TestAccess:
    def test_stranger_denied(self, client, family, make_user, auth_headers, fake_r2):
        document_id = upload(client, auth_headers(family)).json()["data"]["id"]

        response = client.get(f"/api/documents/{document_id}", headers=auth_headers(make_user("family")))

        assert response.status_code == 403

    def test_booking_party_has_access(self, client, family, director, make_booking, auth_headers, fake_r2):
        booking = make_booking(family, director=director)
        document_id = upload(client, auth_headers(family), booking_id=booking.id).json()["data"]["id"]

        response = client.get(f"/api/documents/{document_id}", headers=auth_headers(director))

        assert response.status_code == 200

    def test_download_url_is_logged(self, client, db, family, auth_headers, fake_r2):
        headers = auth_headers(family)
        document_id = upload(client, headers).json()["data"]["id"]

        data = client.get(f"/api/documents/{document_id}?download=true", headers=headers).json()["data"]

        assert data["expires_in"] == 3600
        assert data["access_url"].startswith("https://r2.example/documents/family/")
        assert db.query(DocumentAccessLog).one().access_type == "download"

    def test_list_counts_owned_and_shared(self, client, family, director, auth_headers, fake_r2):
        upload(client, auth_headers(family), share_with=json.dumps([director.id]))
        upload(client, auth_headers(director))

        stats = client.get("/api/documents", headers=auth_headers(director)).json()["data"]["stats"]

        assert stats == {"total": 2, "owned": 1, "shared": 1}


class TestChanges:
    def test_only_owner_deletes(self, client, family, director, auth_headers, fake_r2):
        document_id = upload(client, auth_headers(family), share_with=json.dumps([director.id])).json()["data"]["id"]

        response = client.delete(f"/api/documents/{document_id}", headers=auth_headers(director))

        assert response.status_code == 403
        assert response.json()["error"] == "Access denied - only owner can delete document"

    def test_delete_is_soft(self, client, db, family, auth_headers, fake_r2):
        headers = auth_headers(family)
        document_id = upload(client, headers).json()["data"]["id"]

        assert client.delete(f"/api/documents/{document_id}", headers=headers).status_code == 200
        assert client.get(f"/api/documents/{document_id}", headers=headers).status_code == 404
        db.expire_all()
        assert db.get(Document, document_id).status == "deleted"
        assert fake_r2.objects == {}

    def test_active_booking_blocks_delete(self, client, family, make_booking, auth_headers, fake_r2):
        headers = auth_headers(family)
        booking = make_booking(family, status="confirmed")
        document_id = upload(client, headers, booking_id=booking.id).json()["data"]["id"]

        response = client.delete(f"/api/documents/{document_id}", headers=headers)

        assert response.status_code == 400

    def test_update_title(self, client, family, auth_headers, fake_r2):
        headers = auth_headers(family)
        document_id = upload(client, headers).json()["data"]["id"]

        response = client.put(f"/api/documents/{document_id}", headers=headers, json={"title": "Akte (kopie)"})

        assert response.json()["data"]["title"] == "Akte (kopie)"


class TestSharing:
    def test_share_then_revoke(self, client, db, family, director, auth_headers, fake_r2):
        headers = auth_headers(family)
        document_id = upload(client, headers).json()["data"]["id"]

        shared = client.post(
            "/api/documents/share", headers=headers, json={"document_id": document_id, "share_with": [director.id]}
        ).json()["data"]
        assert shared["newly_shared_with"] == [director.id]
        assert client.get(f"/api/documents/{document_id}", headers=auth_headers(director)).status_code == 200

        revoked = client.delete(f"/api/documents/share?document_id={document_id}&user_id={director.id}", headers=headers)
        assert revoked.status_code == 200
        assert client.get(f"/api/documents/{document_id}", headers=auth_headers(director)).status_code == 403

    def test_sharing_again_is_a_no_op(self, client, family, director, auth_headers, fake_r2):
        headers = auth_headers(family)
        document_id = upload(client, headers, share_with=json.dumps([director.id])).json()["data"]["id"]

        response = client.post(
            "/api/documents/share", headers=headers, json={"document_id": document_id, "share_with": [director.id]}
        )

        assert response.json()["data"] == {"already_shared": True}

    def test_revoke_without_access(self, client, family, director, auth_headers, fake_r2):
        headers = auth_headers(family)
        document_id = upload(client, headers).json()["data"]["id"]

        response = client.delete(f"/api/documents/share?document_id={document_id}&user_id={director.id}", headers=headers)

        assert response.status_code == 400
