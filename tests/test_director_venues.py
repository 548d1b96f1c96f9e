"""Tests for the venue directory directors browse."""

from datetime import timedelta

from farewelly.domain.director_venues.service import venue_open_on
from farewelly.models import VenueAvailability


def close_day(db, venue, day, blocked=False, booked=False):
    db.add(
        VenueAvailability(
            venue_id=venue.id,
            date=day,
            time_slots=[
                {
                    "start_time": "09:00",
                    "end_time": "17:00",
                    "is_available": not booked,
                    "booking_id": "taken" if booked else None,
                }
            ],
            is_blocked=blocked,
        )
    )
    db.commit()


class TestVenueOpenOn:
    def test_no_row_means_open(self):
        assert venue_open_on(None) is True

    def test_blocked_day(self):
        assert venue_open_on(VenueAvailability(is_blocked=True, time_slots=[])) is False

    def test_needs_a_free_slot(self):
        booked = {"start_time": "09:00", "end_time": "12:00", "is_available": False, "booking_id": "b1"}
        free = {"start_time": "13:00", "end_time": "17:00", "is_available": True, "booking_id": None}

        assert venue_open_on(VenueAvailability(is_blocked=False, time_slots=[booked])) is False
        assert venue_open_on(VenueAvailability(is_blocked=False, time_slots=[booked, free])) is True


class TestBrowseVenues:
    def test_lists_active_venues_with_filters(self, client, director, make_user, auth_headers):
        make_user("venue", name="Aula Noord", city="Utrecht", capacity=80, price_per_hour=120.0)
        make_user("venue", name="Aula Zuid", city="Amsterdam", capacity=200, price_per_hour=90.0)
        make_user("venue", name="Oude Aula", city="Utrecht", status="inactive")

        response = client.get("/api/director/venues", headers=auth_headers(director))

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Venues retrieved successfully"
        assert [v["name"] for v in body["data"]["venues"]] == ["Aula Noord", "Aula Zuid"]
        assert body["pagination"]["total"] == 2
        assert body["data"]["filters"]["cities"] == ["Amsterdam", "Utrecht"]
        assert body["data"]["filters"]["price_range"] == {"min": 90.0, "max": 120.0}
        assert body["data"]["venues"][0]["is_available"] is None

    def test_search_and_bounds(self, client, director, make_user, auth_headers):
        make_user("venue", name="Aula Noord", city="Utrecht", capacity=80, price_per_hour=120.0)
        make_user("venue", name="Aula Zuid", city="Amsterdam", capacity=200, price_per_hour=90.0)
        headers = auth_headers(director)

        by_location = client.get("/api/director/venues?location=amster", headers=headers).json()
        by_capacity = client.get("/api/director/venues?min_capacity=100", headers=headers).json()
        by_price = client.get("/api/director/venues?max_price=100", headers=headers).json()

        assert [v["name"] for v in by_location["data"]["venues"]] == ["Aula Zuid"]
        assert [v["name"] for v in by_capacity["data"]["venues"]] == ["Aula Zuid"]
        assert [v["name"] for v in by_price["data"]["venues"]] == ["Aula Zuid"]

    def test_sorted_by_price_desc(self, client, director, make_user, auth_headers):
        make_user("venue", name="Goedkoop", price_per_hour=50.0)
        make_user("venue", name="Duur", price_per_hour=300.0)

        response = client.get(
            "/api/director/venues?sort_by=price_per_hour&sort_order=desc", headers=auth_headers(director)
        )

        assert [v["name"] for v in response.json()["data"]["venues"]] == ["Duur", "Goedkoop"]

    def test_available_on_date(self, client, db, director, make_user, auth_headers, future_day):
        open_venue = make_user("venue", name="Open")
        blocked = make_user("venue", name="Dicht")
        full = make_user("venue", name="Vol")
        close_day(db, blocked, future_day, blocked=True)
        close_day(db, full, future_day, booked=True)

        response = client.get(
            f"/api/director/venues?available=true&date={future_day.isoformat()}", headers=auth_headers(director)
        )

        venues = response.json()["data"]["venues"]
        assert [v["id"] for v in venues] == [open_venue.id]
        assert venues[0]["is_available"] is True
        assert response.json()["pagination"]["total"] == 1

    def test_date_without_filter_flags_each_venue(self, client, db, director, make_user, auth_headers, future_day):
        blocked = make_user("venue", name="Dicht")
        make_user("venue", name="Open")
        close_day(db, blocked, future_day, blocked=True)

        response = client.get(f"/api/director/venues?date={future_day.isoformat()}", headers=auth_headers(director))

        flags = {v["name"]: v["is_available"] for v in response.json()["data"]["venues"]}
        assert flags == {"Dicht": False, "Open": True}

    def test_booking_stats(self, client, director, family, venue, make_booking, auth_headers):
        make_booking(family, venue=venue, status="confirmed")
        make_booking(family, venue=venue, status="cancelled")

        response = client.get("/api/director/venues", headers=auth_headers(director))

        stats = response.json()["data"]["venues"][0]["stats"]
        assert stats == {"recent_bookings": 2, "completed_bookings": 0, "upcoming_bookings": 1}

    def test_invalid_sort(self, client, director, auth_headers):
        response = client.get("/api/director/venues?sort_by=rating", headers=auth_headers(director))

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid sort_by")

    def test_invalid_date(self, client, director, auth_headers):
        response = client.get("/api/director/venues?date=morgen", headers=auth_headers(director))

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid date format"

    def test_directors_only(self, client, family, auth_headers):
        response = client.get("/api/director/venues", headers=auth_headers(family))

        assert response.status_code == 403
        assert response.json()["error"] == "Access denied. Director access required"


class TestVenueDetail:
    def test_includes_upcoming_availability(self, client, db, director, venue, auth_headers, future_day):
        close_day(db, venue, future_day - timedelta(days=7), booked=True)
        close_day(db, venue, future_day + timedelta(days=30), blocked=True)

        response = client.get(f"/api/director/venues/{venue.id}", headers=auth_headers(director))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["venue"]["id"] == venue.id
        assert [d["date"] for d in data["availability"]] == [(future_day - timedelta(days=7)).isoformat()]

    def test_inactive_venue(self, client, director, make_user, auth_headers):
        venue = make_user("venue", status="inactive")

        response = client.get(f"/api/director/venues/{venue.id}", headers=auth_headers(director))

        assert response.status_code == 404
        assert response.json()["error"] == "Venue not found or inactive"
