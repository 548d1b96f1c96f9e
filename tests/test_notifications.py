"""Tests for in-app notifications."""

from farewelly.services.notification_service import notify_users, send_notification


class TestNotificationHelpers:
    def test_send_skips_missing_user(self, db):
        assert send_notification(db, None, "system", "Titel", "Bericht") is None

    def test_notify_users_dedupes_and_excludes(self, db, family, director, venue):
        sent = notify_users(
            db, [family.id, director.id, director.id, None, venue.id], "booking", "T", "M", exclude=venue.id
        )

        assert sent == 2


class TestNotificationApi:
    def test_list_with_unread_count(self, client, db, family, auth_headers):
        send_notification(db, family.id, "booking", "Eerste", "Bericht 1")
        send_notification(db, family.id, "booking", "Tweede", "Bericht 2")

        body = client.get("/api/notifications", headers=auth_headers(family)).json()

        assert body["unread_count"] == 2
        assert body["pagination"]["total"] == 2
        assert {n["title"] for n in body["data"]} == {"Eerste", "Tweede"}

    def test_mark_one_read(self, client, db, family, auth_headers):
        headers = auth_headers(family)
        notification = send_notification(db, family.id, "booking", "Eerste", "Bericht 1")
        send_notification(db, family.id, "booking", "Tweede", "Bericht 2")

        response = client.put(f"/api/notifications/{notification.id}/read", headers=headers)

        assert response.json()["data"]["is_read"] is True
        unread = client.get("/api/notifications?unread_only=true", headers=headers).json()
        assert [n["title"] for n in unread["data"]] == ["Tweede"]
        assert unread["unread_count"] == 1

    def test_mark_all_read(self, client, db, family, auth_headers):
        headers = auth_headers(family)
        send_notification(db, family.id, "booking", "Eerste", "Bericht 1")
        send_notification(db, family.id, "booking", "Tweede", "Bericht 2")

        response = client.put("/api/notifications/read-all", headers=headers)

        assert response.json()["data"] == {"updated": 2}
        assert client.get("/api/notifications", headers=headers).json()["unread_count"] == 0

    def test_other_users_notification_not_found(self, client, db, family, director, auth_headers):
        notification = send_notification(db, director.id, "booking", "Privé", "Bericht")

        response = client.put(f"/api/notifications/{notification.id}/read", headers=auth_headers(family))

        assert response.status_code == 404
        assert response.json()["error"] == "Notification not found"
