"""
Analytics service - booking, revenue and utilization figures for directors
and venues over a reporting period.

Bookings are attributed to the period by their creation time, revenue is the
sum of completed payments for those bookings, and every figure is compared
with the equally long period right before it.
"""

import logging
from collections import Counter
from datetime import datetime, time, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import ApiError
from ...models import Booking, UserProfile
from ...shared.validators import parse_date
from ..venue_availability import slots
from .repository import AnalyticsRepository

logger = logging.getLogger(__name__)

PERIODS = ("week", "month", "quarter", "year", "custom")
CUSTOM_DEFAULT_DAYS = 30

METRIC_GROWTH = {"total_bookings": "bookings_growth", "total_revenue": "revenue_growth"}
METRIC_CHARTS = {
    "total_bookings": "Bookings Over Time",
    "total_revenue": "Revenue by Month",
    "utilization_rate": "Daily Utilization Rate",
}


def period_window(
    period: str, now: datetime, start_date: Optional[str] = None, end_date: Optional[str] = None
) -> tuple[datetime, datetime]:
    """Return the (start, end) datetimes a reporting period covers; raises ValueError"""
    if period == "week":
        return now - timedelta(days=7), now
    if period == "month":
        return datetime(now.year, now.month, 1), now
    if period == "quarter":
        return datetime(now.year, (now.month - 1) // 3 * 3 + 1, 1), now
    if period == "year":
        return datetime(now.year, 1, 1), now
    if period == "custom":
        try:
            start = (
                datetime.combine(parse_date(start_date), time.min)
                if start_date
                else now - timedelta(days=CUSTOM_DEFAULT_DAYS)
            )
            end = datetime.combine(parse_date(end_date), time.max) if end_date else now
        except ValueError as e:
            raise ValueError("Invalid date format") from e
        if end < start:
            raise ValueError("End date must be after start date")
        return start, end
    raise ValueError(f"Invalid period. Must be one of: {', '.join(PERIODS)}")


def growth_rate(current: float, previous: float) -> float:
    """Percentage change; 100 when growing from nothing"""
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return round((current - previous) / previous * 100, 2)


def percentage(part: int, whole: int) -> int:
    return round(part / whole * 100) if whole else 0


def repeat_family_rate(bookings: list[Booking]) -> int:
    """Share of families with more than one booking in the period"""
    per_family = Counter(b.family_id for b in bookings)
    return percentage(sum(1 for count in per_family.values() if count > 1), len(per_family))


def booking_metrics(bookings: list[Booking], revenue: dict) -> dict:
    statuses = Counter(b.status for b in bookings)
    total_revenue = sum(revenue.get(b.id, 0) for b in bookings)
    total = len(bookings)
    return {
        "total_bookings": total,
        "completed_bookings": statuses["completed"],
        "confirmed_bookings": statuses["confirmed"],
        "pending_bookings": statuses["pending"],
        "cancelled_bookings": statuses["cancelled"],
        "total_revenue": round(total_revenue, 2),
        "average_booking_value": round(total_revenue / total, 2) if total else 0,
        "completion_rate": percentage(statuses["completed"], total),
        "cancellation_rate": percentage(statuses["cancelled"], total),
    }


def chart(chart_type: str, title: str, series: dict) -> dict:
    return {"type": chart_type, "title": title, "labels": list(series), "data": list(series.values())}


def common_charts(period: str, bookings: list[Booking], revenue: dict) -> list[dict]:
    by_day = Counter(b.created_at.date().isoformat() for b in bookings if b.created_at)
    charts = [chart("line", "Bookings Over Time", dict(sorted(by_day.items())))]

    if period in ("quarter", "year"):
        by_month: dict = {}
        for b in bookings:
            if b.created_at:
                month = b.created_at.strftime("%b")
                by_month[month] = round(by_month.get(month, 0) + revenue.get(b.id, 0), 2)
        charts.append(chart("bar", "Revenue by Month", by_month))

    statuses = Counter(b.status for b in bookings)
    charts.append(
        chart(
            "doughnut",
            "Booking Status Distribution",
            {status: statuses[status] for status in ("completed", "confirmed", "pending", "cancelled")},
        )
    )
    return charts


class AnalyticsService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = AnalyticsRepository()

    def _window(self, period: str, start_date: Optional[str], end_date: Optional[str]):
        try:
            start, end = period_window(period, datetime.utcnow(), start_date, end_date)
        except ValueError as e:
            raise ApiError(str(e), 400) from e
        return start, end, start - (end - start)

    def _period_bookings(self, user: UserProfile, start: datetime, end: datetime):
        bookings = self.repo.bookings_created_between(self.db, user.user_type, user.id, start, end)
        return bookings, self.repo.completed_revenue(self.db, [b.id for b in bookings])

    def _comparisons(self, user: UserProfile, metrics: dict, previous_start: datetime, start: datetime) -> dict:
        previous, previous_revenue = self._period_bookings(user, previous_start, start)
        return {
            "bookings_growth": growth_rate(metrics["total_bookings"], len(previous)),
            "revenue_growth": growth_rate(metrics["total_revenue"], sum(previous_revenue.values())),
        }

    def venue_analytics(
        self, venue: UserProfile, period: str, start_date: Optional[str] = None, end_date: Optional[str] = None
    ) -> dict:
        start, end, previous_start = self._window(period, start_date, end_date)
        bookings, revenue = self._period_bookings(venue, start, end)
        days = self.repo.availability_days(self.db, venue.id, start.date(), end.date())
        slot_figures = slots.slot_stats(days)

        metrics = booking_metrics(bookings, revenue)
        metrics.update(
            utilization_rate=slot_figures["utilization_rate"],
            total_time_slots=slot_figures["total_slots"],
            available_time_slots=slot_figures["available_slots"],
            booked_time_slots=slot_figures["booked_slots"],
            unique_directors=len({b.director_id for b in bookings if b.director_id}),
            unique_families=len({b.family_id for b in bookings}),
            repeat_client_rate=repeat_family_rate(bookings),
        )

        charts = common_charts(period, bookings, revenue)
        if days:
            charts.append(
                chart(
                    "line",
                    "Daily Utilization Rate",
                    {d.date.isoformat(): slots.slot_stats([d])["utilization_rate"] for d in days},
                )
            )
        via_directors = sum(1 for b in bookings if b.director_id)
        if bookings:
            charts.append(
                chart(
                    "pie",
                    "Client Types",
                    {"Via Directors": via_directors, "Direct Families": len(bookings) - via_directors},
                )
            )

        logger.info(f"📊 Venue analytics for {venue.id}: {metrics['total_bookings']} bookings ({period})")
        return {
            "period": period,
            "range": {"start": start.isoformat(), "end": end.isoformat()},
            "metrics": metrics,
            "comparisons": self._comparisons(venue, metrics, previous_start, start),
            "charts": charts,
        }

    def director_analytics(
        self, director: UserProfile, period: str, start_date: Optional[str] = None, end_date: Optional[str] = None
    ) -> dict:
        start, end, previous_start = self._window(period, start_date, end_date)
        bookings, revenue = self._period_bookings(director, start, end)
        total_clients, new_clients = self.repo.client_counts(self.db, director.id, start, end)

        metrics = booking_metrics(bookings, revenue)
        metrics.update(
            total_clients=total_clients,
            new_clients=new_clients,
            client_retention_rate=repeat_family_rate(bookings),
        )

        charts = common_charts(period, bookings, revenue)
        charts.insert(
            1, chart("doughnut", "Service Types Distribution", dict(Counter(b.service_type for b in bookings)))
        )

        logger.info(f"📊 Director analytics for {director.id}: {metrics['total_bookings']} bookings ({period})")
        return {
            "period": period,
            "range": {"start": start.isoformat(), "end": end.isoformat()},
            "metrics": metrics,
            "comparisons": self._comparisons(director, metrics, previous_start, start),
            "charts": charts,
        }


def single_metric(analytics: dict, metric: str) -> dict:
    """Narrow an analytics result down to one metric"""
    if metric not in analytics["metrics"]:
        raise ApiError(f"Unknown metric: {metric}", 400)
    chart_title = METRIC_CHARTS.get(metric)
    return {
        "period": analytics["period"],
        "metric_name": metric,
        "value": analytics["metrics"][metric],
        "growth": analytics["comparisons"].get(METRIC_GROWTH.get(metric), 0),
        "chart": next((c for c in analytics["charts"] if c["title"] == chart_title), None),
    }
