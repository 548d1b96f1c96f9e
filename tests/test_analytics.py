"""Tests for venue and director analytics."""

from datetime import date, datetime

import pytest

from farewelly.domain.analytics.service import growth_rate, period_window
from farewelly.models import DirectorClient, Payment, VenueAvailability

MARCH = "period=custom&start_date=2026-03-01&end_date=2026-03-31"


@pytest.fixture
def march_bookings(db, make_user, make_booking):
    """Three bookings in March (two by the same family) and one in February"""

    def _make(**party):
        first, second = make_user("family"), make_user("family")
        completed = make_booking(first, status="completed", created_at=datetime(2026, 3, 5, 12), **party)
        make_booking(first, status="pending", created_at=datetime(2026, 3, 12, 9), service_type="burial", **party)
        make_booking(second, status="cancelled", created_at=datetime(2026, 3, 20, 15), **party)
        make_booking(second, status="completed", created_at=datetime(2026, 2, 15, 10), **party)
        db.add_all(
            [
                Payment(booking_id=completed.id, family_id=first.id, amount=250.0, status="completed"),
                Payment(booking_id=completed.id, family_id=first.id, amount=100.0, status="pending"),
            ]
        )
        db.commit()
        return completed

    return _make


class TestPeriodWindow:
    def test_month_starts_on_the_first(self):
        now = datetime(2026, 5, 17, 8, 30)

        assert period_window("month", now) == (datetime(2026, 5, 1), now)

    def test_quarter(self):
        now = datetime(2026, 8, 2)

        assert period_window("quarter", now)[0] == datetime(2026, 7, 1)

    def test_custom_defaults_to_thirty_days(self):
        now = datetime(2026, 5, 31)

        assert period_window("custom", now)[0] == datetime(2026, 5, 1)

    def test_custom_end_before_start(self):
        with pytest.raises(ValueError, match="End date must be after start date"):
            period_window("custom", datetime(2026, 5, 1), "2026-04-10", "2026-04-01")

    def test_growth_from_nothing(self):
        assert growth_rate(3, 0) == 100.0
        assert growth_rate(0, 0) == 0.0
        assert growth_rate(3, 2) == 50.0


class TestVenueAnalytics:
    def test_metrics_and_comparisons(self, client, db, venue, march_bookings, auth_headers):
        march_bookings(venue=venue)
        db.add(
            VenueAvailability(
                venue_id=venue.id,
                date=date(2026, 3, 10),
                time_slots=[
                    {"start_time": "09:00", "end_time": "12:00", "is_available": False, "booking_id": "b1"},
                    {"start_time": "13:00", "end_time": "17:00", "is_available": True, "booking_id": None},
                ],
                is_blocked=False,
            )
        )
        db.commit()

        response = client.get(f"/api/venue/analytics?{MARCH}", headers=auth_headers(venue))

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Analytics data retrieved successfully"
        metrics = body["data"]["metrics"]
        assert metrics["total_bookings"] == 3
        assert metrics["completed_bookings"] == 1
        assert metrics["total_revenue"] == 250.0
        assert metrics["average_booking_value"] == 83.33
        assert metrics["completion_rate"] == 33
        assert metrics["utilization_rate"] == 50.0
        assert metrics["unique_families"] == 2
        assert metrics["repeat_client_rate"] == 50
        assert body["data"]["comparisons"] == {"bookings_growth": 200.0, "revenue_growth": 100.0}
        titles = [c["title"] for c in body["data"]["charts"]]
        assert "Daily Utilization Rate" in titles
        assert "Client Types" in titles

    def test_single_metric(self, client, venue, march_bookings, auth_headers):
        march_bookings(venue=venue)

        response = client.get(f"/api/venue/analytics?{MARCH}&metric=total_bookings", headers=auth_headers(venue))

        body = response.json()
        assert body["message"] == "total_bookings analytics retrieved successfully"
        assert body["data"]["value"] == 3
        assert body["data"]["growth"] == 200.0
        assert body["data"]["chart"]["title"] == "Bookings Over Time"

    def test_unknown_metric(self, client, venue, auth_headers):
        response = client.get("/api/venue/analytics?metric=reviews", headers=auth_headers(venue))

        assert response.status_code == 400
        assert response.json()["error"] == "Unknown metric: reviews"

    def test_invalid_period(self, client, venue, auth_headers):
        response = client.get("/api/venue/analytics?period=decade", headers=auth_headers(venue))

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid period. Must be one of: week, month, quarter, year, custom"

    def test_bad_custom_date(self, client, venue, auth_headers):
        response = client.get("/api/venue/analytics?period=custom&start_date=maart", headers=auth_headers(venue))

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid date format"

    def test_venues_only(self, client, director, auth_headers):
        response = client.get("/api/venue/analytics", headers=auth_headers(director))

        assert response.status_code == 403
        assert response.json()["error"] == "Access denied. Venue access required"


class TestDirectorAnalytics:
    def test_metrics_and_clients(self, client, db, director, family, march_bookings, auth_headers):
        march_bookings(director=director)
        db.add(
            DirectorClient(
                director_id=director.id, family_id=family.id, status="active", tags=[], created_at=datetime(2026, 3, 2)
            )
        )
        db.commit()

        response = client.get(f"/api/director/analytics?{MARCH}", headers=auth_headers(director))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["metrics"]["total_bookings"] == 3
        assert data["metrics"]["cancellation_rate"] == 33
        assert data["metrics"]["total_clients"] == 1
        assert data["metrics"]["new_clients"] == 1
        assert data["metrics"]["client_retention_rate"] == 50
        service_types = next(c for c in data["charts"] if c["title"] == "Service Types Distribution")
        assert dict(zip(service_types["labels"], service_types["data"])) == {"cremation": 2, "burial": 1}

    def test_only_own_bookings(self, client, director, make_user, march_bookings, auth_headers):
        march_bookings(director=make_user("director"))

        response = client.get(f"/api/director/analytics?{MARCH}", headers=auth_headers(director))

        assert response.json()["data"]["metrics"]["total_bookings"] == 0

    def test_directors_only(self, client, family, auth_headers):
        response = client.get("/api/director/analytics", headers=auth_headers(family))

        assert response.status_code == 403
        assert response.json()["error"] == "Access denied. Director access required"
