"""Tests for the Dutch legal deadline arithmetic."""

from datetime import date, datetime, timedelta

from farewelly.domain.compliance.deadlines import (
    calculate_legal_deadline,
    calculate_working_days,
    compliance_status,
    dashboard_status,
    days_remaining,
    dutch_holidays,
    easter_sunday,
    generate_alerts,
    is_working_day,
    next_action,
)


class TestHolidays:
    def test_easter(self):
        assert easter_sunday(2024) == date(2024, 3, 31)
        assert easter_sunday(2025) == date(2025, 4, 20)
        assert easter_sunday(2026) == date(2026, 4, 5)

    def test_movable_holidays_follow_easter(self):
        holidays = dutch_holidays(2025)

        assert date(2025, 4, 18) in holidays  # Goede Vrijdag
        assert date(2025, 4, 21) in holidays  # Tweede Paasdag
        assert date(2025, 5, 29) in holidays  # Hemelvaartsdag
        assert date(2025, 6, 9) in holidays  # Tweede Pinksterdag

    def test_kings_day_moves_off_sunday(self):
        assert date(2025, 4, 26) in dutch_holidays(2025)
        assert date(2025, 4, 27) not in dutch_holidays(2025)
        assert date(2026, 4, 27) in dutch_holidays(2026)

    def test_working_days(self):
        assert is_working_day(date(2025, 9, 1))
        assert not is_working_day(date(2025, 9, 6))
        assert not is_working_day(date(2025, 12, 25))


class TestLegalDeadline:
    def test_plain_week(self):
        registration = datetime(2025, 9, 1, 14, 30)

        assert calculate_legal_deadline(registration) == datetime(2025, 9, 9, 14, 30)

    def test_skips_easter(self):
        registration = datetime(2025, 4, 14, 10, 0)

        assert calculate_legal_deadline(registration) == datetime(2025, 4, 24, 10, 0)

    def test_skips_whit_monday(self):
        assert calculate_legal_deadline(datetime(2025, 6, 2, 9, 0)) == datetime(2025, 6, 11, 9, 0)

    def test_registration_on_weekend(self):
        assert calculate_legal_deadline(datetime(2025, 9, 6, 12, 0)) == datetime(2025, 9, 15, 12, 0)

    def test_working_day_breakdown(self):
        result = calculate_working_days(datetime(2025, 4, 14, 10, 0), datetime(2025, 4, 24, 10, 0))

        assert result["totalDays"] == 11
        assert result["workingDays"] == 7
        assert result["holidays"] == ["2025-04-18", "2025-04-21"]
        assert result["weekends"] == ["2025-04-19", "2025-04-20"]


class TestStatus:
    def test_days_remaining_rounds_up(self):
        now = datetime(2025, 9, 1, 12, 0)

        assert days_remaining(now + timedelta(hours=36), now) == 2
        assert days_remaining(now + timedelta(hours=1), now) == 1
        assert days_remaining(now - timedelta(hours=12), now) == 0
        assert days_remaining(now - timedelta(days=3), now) == -3

    def test_compliance_status_thresholds(self):
        assert [compliance_status(d) for d in (-2, 0, 1, 2, 3)] == [
            "emergency",
            "emergency",
            "at_risk",
            "in_progress",
            "pending",
        ]

    def test_alerts_per_status(self):
        alert = generate_alerts("at_risk", 1)[0]

        assert alert["alertType"] == "critical"
        assert alert["hoursRemaining"] == 24
        assert "venue" in alert["stakeholders"]
        assert generate_alerts("compliant", 5) == []

    def test_dashboard_status(self):
        assert [dashboard_status(d) for d in (-1, 0, 1, 4)] == ["overdue", "urgent", "warning", "ok"]

    def test_next_action(self):
        assert next_action("overdue", "Utrecht") == ("Gemeente Utrecht voor uitstel vergunning", "Onmiddellijk")
        assert next_action("urgent", "Utrecht") == ("Uitvaart bevestigen bij gemeente Utrecht", "Vandaag voor 17:00")
        assert next_action("ok", None) == ("Reguliere voorbereiding", "Volgens planning")
