"""Compliance repository - trackings, timeline events, alerts and monitor state"""

from typing import Optional

from sqlalchemy.orm import Session

from ...config import COMPLIANCE_CHECK_INTERVAL_MINUTES
from ...models import ComplianceAlert, ComplianceMonitorState, ComplianceTracking, TimelineEvent

MONITOR_STATE_ID = 1


class ComplianceRepository:
    @staticmethod
    def get_tracking(db: Session, funeral_request_id: str) -> Optional[ComplianceTracking]:
        return (
            db.query(ComplianceTracking)
            .filter(ComplianceTracking.funeral_request_id == funeral_request_id)
            .first()
        )

    @staticmethod
    def active_trackings(db: Session, director_id: Optional[str] = None) -> list[ComplianceTracking]:
        """Trackings not yet compliant, nearest deadline first"""
        query = db.query(ComplianceTracking).filter(ComplianceTracking.compliance_status != "compliant")
        if director_id:
            query = query.filter(ComplianceTracking.director_id == director_id)
        return query.order_by(ComplianceTracking.legal_deadline.asc()).all()

    @staticmethod
    def add_event(
        db: Session, funeral_request_id: str, event_type: str, description: str, metadata: Optional[dict] = None
    ) -> TimelineEvent:
        event = TimelineEvent(
            funeral_request_id=funeral_request_id,
            event_type=event_type,
            description=description,
            event_metadata=metadata or {},
        )
        db.add(event)
        return event

    @staticmethod
    def timeline(db: Session, funeral_request_id: str) -> list[TimelineEvent]:
        return (
            db.query(TimelineEvent)
            .filter(TimelineEvent.funeral_request_id == funeral_request_id)
            .order_by(TimelineEvent.created_at.asc())
            .all()
        )

    @staticmethod
    def add_alert(db: Session, funeral_request_id: str, alert: dict) -> ComplianceAlert:
        row = ComplianceAlert(
            funeral_request_id=funeral_request_id,
            alert_type=alert["alertType"],
            hours_remaining=alert.get("hoursRemaining"),
            message=alert["message"],
            action_required=list(alert.get("actionRequired", [])),
            stakeholders=list(alert.get("stakeholders", [])),
        )
        db.add(row)
        return row

    @staticmethod
    def alerts(db: Session, funeral_request_id: str) -> list[ComplianceAlert]:
        return (
            db.query(ComplianceAlert)
            .filter(ComplianceAlert.funeral_request_id == funeral_request_id)
            .order_by(ComplianceAlert.created_at.desc())
            .all()
        )

    @staticmethod
    def get_alert(db: Session, alert_id: str) -> Optional[ComplianceAlert]:
        return db.query(ComplianceAlert).filter(ComplianceAlert.id == alert_id).first()

    @staticmethod
    def has_open_alert(db: Session, funeral_request_id: str, alert_type: str) -> bool:
        return (
            db.query(ComplianceAlert.id)
            .filter(
                ComplianceAlert.funeral_request_id == funeral_request_id,
                ComplianceAlert.alert_type == alert_type,
                ComplianceAlert.is_acknowledged.is_(False),
            )
            .first()
            is not None
        )

    @staticmethod
    def monitor_state(db: Session) -> ComplianceMonitorState:
        """The single monitor state row, created on first use"""
        state = db.query(ComplianceMonitorState).filter(ComplianceMonitorState.id == MONITOR_STATE_ID).first()
        if not state:
            state = ComplianceMonitorState(
                id=MONITOR_STATE_ID,
                is_enabled=True,
                check_interval_minutes=COMPLIANCE_CHECK_INTERVAL_MINUTES,
                checks_performed=0,
                last_alerts_generated=0,
            )
            db.add(state)
            db.commit()
            db.refresh(state)
        return state
