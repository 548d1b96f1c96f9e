"""Tests for the director calendar."""

from datetime import date, datetime

from farewelly.domain.calendar.service import add_months, occurrence_starts
from farewelly.models import CalendarEvent, Notification


def event_body(title="Intake", start="2030-01-07T10:00:00", end="2030-01-07T11:00:00", type="appointment", **extra):
    body = {"title": title, "start_time": start, "end_time": end, "type": type}
    body.update(extra)
    return body


def create_event(client, headers, **body):
    return client.post("/api/director/calendar", headers=headers, json=event_body(**body))


class TestRecurrence:
    def test_add_months_clamps_to_month_end(self):
        assert add_months(datetime(2030, 1, 31, 10), 1) == datetime(2030, 2, 28, 10)
        assert add_months(datetime(2030, 11, 15), 3) == datetime(2031, 2, 15)

    def test_weekly_until_end_date(self):
        starts = occurrence_starts(datetime(2030, 1, 7, 10), "weekly", date(2030, 1, 28))

        assert [s.day for s in starts] == [14, 21, 28]

    def test_daily_is_capped(self):
        assert len(occurrence_starts(datetime(2030, 1, 1), "daily", date(2040, 1, 1))) == 366


class TestCreateEvent:
    def test_create_appointment(self, client, director, auth_headers):
        response = create_event(client, auth_headers(director), description="Gesprek met familie")

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Calendar event created successfully"
        assert body["data"]["type"] == "appointment"
        assert body["data"]["start_time"] == "2030-01-07T10:00:00"
        assert body["recurring_events_created"] == 0

    def test_offset_times_stored_as_utc(self, client, director, auth_headers):
        response = create_event(
            client, auth_headers(director), start="2030-01-07T10:00:00+01:00", end="2030-01-07T11:00:00+01:00"
        )

        assert response.json()["data"]["start_time"] == "2030-01-07T09:00:00"

    def test_end_before_start(self, client, director, auth_headers):
        response = create_event(client, auth_headers(director), end="2030-01-07T09:00:00")

        assert response.status_code == 400
        assert response.json()["error"] == "End time must be after start time"

    def test_invalid_type(self, client, director, auth_headers):
        response = create_event(client, auth_headers(director), type="holiday")

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid event type")

    def test_blank_title(self, client, director, auth_headers):
        response = create_event(client, auth_headers(director), title="  ")

        assert response.json()["error"] == "Title is required"

    def test_conflict_with_existing_event(self, client, director, auth_headers):
        headers = auth_headers(director)
        create_event(client, headers, title="Geblokkeerd", type="blocked")

        response = create_event(client, headers, start="2030-01-07T10:30:00", end="2030-01-07T12:00:00")

        assert response.status_code == 400
        assert response.json()["error"] == "Time slot conflicts with existing event: Geblokkeerd"

    def test_available_windows_do_not_conflict(self, client, director, auth_headers):
        headers = auth_headers(director)
        create_event(client, headers, title="Beschikbaar", type="available", end="2030-01-07T17:00:00")

        response = create_event(client, headers)

        assert response.status_code == 201

    def test_other_directors_events_do_not_conflict(self, client, director, make_user, auth_headers):
        create_event(client, auth_headers(make_user("director")))

        response = create_event(client, auth_headers(director))

        assert response.status_code == 201

    def test_linked_booking_notifies_family(self, client, db, director, family, make_booking, auth_headers):
        booking = make_booking(family, director=director, status="confirmed")

        response = create_event(client, auth_headers(director), type="booking", booking_id=booking.id)

        assert response.status_code == 201
        assert response.json()["data"]["booking"]["id"] == booking.id
        notification = db.query(Notification).filter(Notification.user_id == family.id).one()
        assert notification.title == "Appointment Scheduled"
        assert notification.message == "Your appointment has been scheduled: Intake"

    def test_booking_of_another_director(self, client, director, family, make_user, make_booking, auth_headers):
        booking = make_booking(family, director=make_user("director"))

        response = create_event(client, auth_headers(director), booking_id=booking.id)

        assert response.status_code == 404
        assert response.json()["error"] == "Booking not found"

    def test_cancelled_booking(self, client, director, family, make_booking, auth_headers):
        booking = make_booking(family, director=director, status="cancelled")

        response = create_event(client, auth_headers(director), booking_id=booking.id)

        assert response.status_code == 400
        assert response.json()["error"] == "Cannot create event for cancelled booking"

    def test_weekly_series_skips_conflicts(self, client, db, director, auth_headers):
        headers = auth_headers(director)
        create_event(client, headers, title="Crematie", start="2030-01-14T10:30:00", end="2030-01-14T11:30:00")

        response = create_event(
            client, headers, title="Spreekuur", recurring={"pattern": "weekly", "end_date": "2030-01-28"}
        )

        assert response.json()["recurring_events_created"] == 2
        parent_id = response.json()["data"]["id"]
        copies = db.query(CalendarEvent).filter(CalendarEvent.recurring_parent_id == parent_id).all()
        assert sorted(c.start_time.day for c in copies) == [21, 28]

    def test_invalid_recurring_pattern(self, client, director, auth_headers):
        response = create_event(
            client, auth_headers(director), recurring={"pattern": "yearly", "end_date": "2030-12-31"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid recurring pattern. Must be 'daily', 'weekly' or 'monthly'"

    def test_directors_only(self, client, family, auth_headers):
        response = create_event(client, auth_headers(family))

        assert response.status_code == 403
        assert response.json()["error"] == "Access denied. Director access required"


class TestListEvents:
    def test_range_type_and_stats(self, client, director, auth_headers):
        headers = auth_headers(director)
        create_event(client, headers, title="Intake")
        create_event(
            client, headers, title="Vrij", type="available", start="2030-01-08T09:00:00", end="2030-01-08T12:00:00"
        )
        create_event(client, headers, title="Later", start="2030-03-01T10:00:00", end="2030-03-01T11:00:00")

        response = client.get("/api/director/calendar?start_date=2030-01-01&end_date=2030-01-31", headers=headers)

        data = response.json()["data"]
        assert [e["title"] for e in data["events"]] == ["Intake", "Vrij"]
        assert data["stats"]["total_events"] == 2
        assert data["stats"]["appointments"] == 1
        assert data["stats"]["available_time"] == 1
        assert data["stats"]["availability_percentage"] == 50.0

        filtered = client.get("/api/director/calendar?type=available", headers=headers).json()["data"]
        assert [e["title"] for e in filtered["events"]] == ["Vrij"]

    def test_bad_date(self, client, director, auth_headers):
        response = client.get("/api/director/calendar?start_date=januari", headers=auth_headers(director))

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid date format"


class TestDeleteEvent:
    def series(self, client, headers):
        return create_event(
            client, headers, title="Spreekuur", recurring={"pattern": "daily", "end_date": "2030-01-09"}
        ).json()["data"]["id"]

    def test_delete_single_keeps_copies(self, client, db, director, auth_headers):
        headers = auth_headers(director)
        parent_id = self.series(client, headers)

        response = client.delete(f"/api/director/calendar/{parent_id}", headers=headers)

        assert response.json()["data"] == {"deleted": 1}
        db.expire_all()
        remaining = db.query(CalendarEvent).all()
        assert len(remaining) == 2
        assert all(e.recurring_parent_id is None for e in remaining)

    def test_delete_series(self, client, db, director, auth_headers):
        headers = auth_headers(director)
        parent_id = self.series(client, headers)

        response = client.delete(f"/api/director/calendar/{parent_id}?series=true", headers=headers)

        assert response.json()["data"] == {"deleted": 3}
        assert db.query(CalendarEvent).count() == 0

    def test_other_directors_event(self, client, director, make_user, auth_headers):
        event_id = create_event(client, auth_headers(make_user("director"))).json()["data"]["id"]

        response = client.delete(f"/api/director/calendar/{event_id}", headers=auth_headers(director))

        assert response.status_code == 404
        assert response.json()["error"] == "Event not found"
