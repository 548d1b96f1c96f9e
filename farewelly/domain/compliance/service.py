"""
Compliance service - Dutch legal deadline tracking per funeral request.

Every tracking carries the legal deadline (6 working days after the death
registration). The periodic monitor recomputes the days remaining, records
status changes on the timeline and raises alerts to the linked director
and family.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import ApiError
from ...models import ComplianceTracking, UserProfile
from ...services.notification_service import notify_users, send_notification
from ...shared.validators import to_naive_utc
from .deadlines import (
    ALERT_TEMPLATES,
    calculate_legal_deadline,
    calculate_working_days,
    compliance_status,
    dashboard_status,
    days_remaining,
    generate_alerts,
    next_action,
)
from .repository import ComplianceRepository
from .schemas import AlertResponse, ComplianceActionRequest, TimelineEventResponse, TrackingResponse

logger = logging.getLogger(__name__)

MIN_CHECK_INTERVAL = 1
MAX_CHECK_INTERVAL = 1440
NOTIFY_ALERT_TYPES = ("emergency", "critical")
DIGEST_STATUSES = ("overdue", "urgent")


def refresh_status(tracking: ComplianceTracking, now: datetime) -> tuple[str, str, int]:
    """Recompute days remaining and status; returns (previous, new, days)"""
    days = days_remaining(tracking.legal_deadline, now)
    previous = tracking.compliance_status
    new = "emergency" if tracking.emergency_protocol_active else compliance_status(days)
    tracking.working_days_remaining = days
    tracking.compliance_status = new
    return previous, new, days


def monitor_status(db: Session) -> dict:
    state = ComplianceRepository.monitor_state(db)
    return {
        "isRunning": state.is_enabled,
        "config": {"checkIntervalMinutes": state.check_interval_minutes},
        "lastCheckAt": state.last_check_at.isoformat() if state.last_check_at else None,
        "checksPerformed": state.checks_performed,
        "lastAlertsGenerated": state.last_alerts_generated,
    }


def run_monitoring_check(db: Session, now: Optional[datetime] = None) -> dict:
    """
    One pass over all active trackings.

    Status changes get a "compliance_check" timeline event. Alerts are only
    stored when no unacknowledged alert of the same type exists for the
    tracking, so a stuck tracking does not pile up duplicates every run.
    """
    repo = ComplianceRepository
    now = now or datetime.utcnow()
    trackings = repo.active_trackings(db)
    status_changes = 0
    alerts_generated = 0
    notifications_sent = 0

    for tracking in trackings:
        previous, new, days = refresh_status(tracking, now)
        tracking.last_checked_at = now
        if previous != new:
            status_changes += 1
            repo.add_event(
                db,
                tracking.funeral_request_id,
                "compliance_check",
                f"Compliance status changed from {previous} to {new}",
                {"previousStatus": previous, "newStatus": new, "daysRemaining": days},
            )

        for alert in generate_alerts(new, days):
            if repo.has_open_alert(db, tracking.funeral_request_id, alert["alertType"]):
                continue
            repo.add_alert(db, tracking.funeral_request_id, alert)
            alerts_generated += 1
            db.commit()
            if alert["alertType"] in NOTIFY_ALERT_TYPES:
                notifications_sent += notify_users(
                    db,
                    [tracking.director_id, tracking.family_id],
                    "compliance",
                    "Compliance Alert",
                    alert["message"],
                    {"funeral_request_id": tracking.funeral_request_id, "alert_type": alert["alertType"]},
                )

    state = repo.monitor_state(db)
    state.last_check_at = now
    state.checks_performed = (state.checks_performed or 0) + 1
    state.last_alerts_generated = alerts_generated
    db.commit()

    logger.info(
        f"🔍 Compliance check: {len(trackings)} trackings, {status_changes} status changes, "
        f"{alerts_generated} alerts, {notifications_sent} notifications"
    )
    return {
        "checkedAt": now.isoformat(),
        "trackingsChecked": len(trackings),
        "statusChanges": status_changes,
        "alertsGenerated": alerts_generated,
        "notificationsSent": notifications_sent,
    }


def control_monitor(db: Session, action: Optional[str], interval: Optional[int] = None) -> dict:
    """Apply a monitor control action and return the outcome for the API"""
    state = ComplianceRepository.monitor_state(db)
    check = None

    if action in ("start", "restart"):
        state.is_enabled = True
        db.commit()
        check = run_monitoring_check(db)
        message = "Compliance monitor started" if action == "start" else "Compliance monitor restarted"
    elif action == "stop":
        state.is_enabled = False
        db.commit()
        message = "Compliance monitor stopped"
    elif action == "configure":
        if interval is None or not MIN_CHECK_INTERVAL <= interval <= MAX_CHECK_INTERVAL:
            raise ApiError(
                f"checkIntervalMinutes must be between {MIN_CHECK_INTERVAL} and {MAX_CHECK_INTERVAL}", 400
            )
        state.check_interval_minutes = interval
        db.commit()
        message = "Compliance monitor configured"
    elif action in ("manual_check", "check"):
        check = run_monitoring_check(db)
        message = "Compliance check completed"
    else:
        raise ApiError("Invalid action", 400)

    logger.info(f"⚙️ Compliance monitor action '{action}'")
    return {"message": message, "status": monitor_status(db), "check": check}


def deadline_digest(db: Session, now: Optional[datetime] = None) -> int:
    """Notify each director of their overdue and due-today dossiers; returns directors notified"""
    now = now or datetime.utcnow()
    by_director: dict[str, list[ComplianceTracking]] = {}
    for tracking in ComplianceRepository.active_trackings(db):
        if not tracking.director_id:
            continue
        if dashboard_status(days_remaining(tracking.legal_deadline, now)) in DIGEST_STATUSES:
            by_director.setdefault(tracking.director_id, []).append(tracking)

    notified = 0
    for director_id, trackings in by_director.items():
        names = ", ".join(t.family_name or f"Dossier {t.funeral_request_id}" for t in trackings)
        if send_notification(
            db,
            director_id,
            "compliance",
            "Compliance Deadline Digest",
            f"{len(trackings)} dossier(s) need attention today: {names}",
            {"funeral_request_ids": [t.funeral_request_id for t in trackings]},
        ):
            notified += 1
    return notified


class ComplianceService:
    """Service layer for per-request compliance operations"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ComplianceRepository()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_tracking_for(self, funeral_request_id: Optional[str], user: UserProfile) -> ComplianceTracking:
        if not funeral_request_id:
            raise ApiError("Funeral request ID is required", 400)
        tracking = self.repo.get_tracking(self.db, funeral_request_id)
        if not tracking:
            raise ApiError("No compliance tracking found for this funeral request", 404)
        linked = {tracking.director_id, tracking.family_id} - {None}
        if linked and user.id not in linked:
            raise ApiError("Access denied", 403)
        return tracking

    def _linked_user(self, user_id: Optional[str], user_type: str) -> Optional[str]:
        if not user_id:
            return None
        exists = (
            self.db.query(UserProfile.id)
            .filter(UserProfile.id == user_id, UserProfile.user_type == user_type)
            .first()
        )
        if not exists:
            raise ApiError(f"{user_type.capitalize()} not found", 404)
        return user_id

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def handle_action(self, data: ComplianceActionRequest, user: UserProfile) -> tuple[dict, str]:
        """Dispatch a POST action; returns (data, message)"""
        if data.action == "initialize_compliance":
            return self.initialize(data, user), "Dutch legal compliance tracking initialized"
        if data.action == "monitor_compliance":
            tracking = self.get_tracking_for(data.funeral_request_id, user)
            return self.monitor(tracking), "Compliance status updated"
        if data.action == "get_compliance_status":
            tracking = self.get_tracking_for(data.funeral_request_id, user)
            return self.status(tracking), "Compliance status retrieved"
        if data.action == "trigger_emergency":
            tracking = self.get_tracking_for(data.funeral_request_id, user)
            return self.trigger_emergency(tracking, user), "Emergency protocol activated"
        if data.action == "acknowledge_alert":
            return self.acknowledge_alert(data.alert_id, user), "Alert acknowledged"
        raise ApiError("Invalid action", 400)

    def initialize(self, data: ComplianceActionRequest, user: UserProfile) -> dict:
        if not data.funeral_request_id or not data.death_registration_date:
            raise ApiError("Funeral request ID and death registration date are required", 400)
        if self.repo.get_tracking(self.db, data.funeral_request_id):
            raise ApiError("Compliance tracking already initialized for this funeral request", 400)

        director_id = self._linked_user(data.director_id, "director")
        family_id = self._linked_user(data.family_id, "family")
        if user.user_type == "director":
            director_id = director_id or user.id
        elif user.user_type == "family":
            family_id = family_id or user.id

        registration = to_naive_utc(data.death_registration_date)
        deadline = calculate_legal_deadline(registration)
        tracking = ComplianceTracking(
            funeral_request_id=data.funeral_request_id,
            director_id=director_id,
            family_id=family_id,
            family_name=data.family_name,
            death_registration_date=registration,
            legal_deadline=deadline,
            municipality_code=data.municipality_code,
            municipality_name=data.municipality_name,
            planned_funeral_date=data.planned_funeral_date,
            permit_required=bool(data.permit_required),
            compliance_status="pending",
        )
        now = datetime.utcnow()
        _, status, days = refresh_status(tracking, now)
        tracking.last_checked_at = now
        self.db.add(tracking)
        self.repo.add_event(
            self.db,
            tracking.funeral_request_id,
            "registration",
            f"Death registered, legal deadline {deadline:%Y-%m-%d %H:%M}",
            {"legalDeadline": deadline.isoformat(), "municipality": data.municipality_name},
        )
        self.db.commit()
        self.db.refresh(tracking)
        logger.info(f"✅ Compliance tracking {tracking.funeral_request_id} initialized ({status}, {days} days left)")

        if status == "emergency":
            self.trigger_emergency(tracking, user)

        return {
            "complianceContext": TrackingResponse.model_validate(tracking),
            "workingDaysCalculation": calculate_working_days(registration, deadline),
            "alerts": generate_alerts(tracking.compliance_status, days),
        }

    def monitor(self, tracking: ComplianceTracking) -> dict:
        now = datetime.utcnow()
        previous, new, days = refresh_status(tracking, now)
        tracking.last_checked_at = now
        if previous != new:
            self.repo.add_event(
                self.db,
                tracking.funeral_request_id,
                "compliance_check",
                f"Compliance status changed from {previous} to {new}",
                {"previousStatus": previous, "newStatus": new, "daysRemaining": days},
            )
        self.db.commit()
        self.db.refresh(tracking)
        return {
            "complianceContext": TrackingResponse.model_validate(tracking),
            "alerts": generate_alerts(new, days),
        }

    def status(self, tracking: ComplianceTracking) -> dict:
        now = datetime.utcnow()
        days = days_remaining(tracking.legal_deadline, now)
        timeline_status = "emergency" if tracking.emergency_protocol_active else compliance_status(days)
        return {
            "tracking": TrackingResponse.model_validate(tracking),
            "daysRemaining": days,
            "isOverdue": now > tracking.legal_deadline,
            "timelineStatus": timeline_status,
        }

    def trigger_emergency(self, tracking: ComplianceTracking, user: Optional[UserProfile] = None) -> dict:
        now = datetime.utcnow()
        days = days_remaining(tracking.legal_deadline, now)
        tracking.emergency_protocol_active = True
        tracking.compliance_status = "emergency"
        tracking.emergency_triggered_at = now
        tracking.working_days_remaining = days

        self.repo.add_event(
            self.db,
            tracking.funeral_request_id,
            "emergency_triggered",
            "Emergency protocol activated",
            {"days_overdue": max(0, -days), "triggered_by": user.id if user else None},
        )
        alert = {**ALERT_TEMPLATES["emergency"], "hoursRemaining": days * 24}
        self.repo.add_alert(self.db, tracking.funeral_request_id, alert)
        self.db.commit()
        self.db.refresh(tracking)
        logger.warning(f"🚨 Emergency protocol activated for {tracking.funeral_request_id} ({days} days left)")

        notify_users(
            self.db,
            [tracking.director_id, tracking.family_id],
            "compliance",
            "Compliance Emergency",
            alert["message"],
            {"funeral_request_id": tracking.funeral_request_id, "alert_type": "emergency"},
        )
        return {
            "complianceContext": TrackingResponse.model_validate(tracking),
            "emergencyResponse": {
                "triggeredAt": now.isoformat(),
                "daysOverdue": max(0, -days),
                "actions": alert["actionRequired"],
                "stakeholders": alert["stakeholders"],
            },
        }

    def acknowledge_alert(self, alert_id: Optional[str], user: UserProfile) -> AlertResponse:
        if not alert_id:
            raise ApiError("Alert ID is required", 400)
        alert = self.repo.get_alert(self.db, alert_id)
        if not alert:
            raise ApiError("Alert not found", 404)
        self.get_tracking_for(alert.funeral_request_id, user)

        alert.is_acknowledged = True
        alert.acknowledged_by = user.id
        alert.acknowledged_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(alert)
        return AlertResponse.model_validate(alert)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def timeline(self, tracking: ComplianceTracking) -> list[TimelineEventResponse]:
        return [
            TimelineEventResponse.model_validate(e)
            for e in self.repo.timeline(self.db, tracking.funeral_request_id)
        ]

    def alerts(self, tracking: ComplianceTracking) -> list[AlertResponse]:
        return [AlertResponse.model_validate(a) for a in self.repo.alerts(self.db, tracking.funeral_request_id)]

    def dashboard(self, director: UserProfile) -> dict:
        now = datetime.utcnow()
        rows = []
        for tracking in self.repo.active_trackings(self.db, director.id):
            days = days_remaining(tracking.legal_deadline, now)
            status = dashboard_status(days)
            action, action_by = next_action(status, tracking.municipality_name)
            rows.append(
                {
                    "id": tracking.id,
                    "funeralRequestId": tracking.funeral_request_id,
                    "clientName": tracking.family_name or f"Dossier {tracking.funeral_request_id}",
                    "deadline": tracking.legal_deadline.isoformat(),
                    "daysRemaining": days,
                    "status": status,
                    "complianceStatus": tracking.compliance_status,
                    "nextAction": action,
                    "actionBy": action_by,
                    "municipality": tracking.municipality_name or "Onbekend",
                }
            )
        return {
            "deadlines": rows,
            "totalActive": len(rows),
            "overdueCount": sum(1 for r in rows if r["status"] == "overdue"),
            "urgentCount": sum(1 for r in rows if r["status"] == "urgent"),
        }
