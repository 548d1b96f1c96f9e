"""Dutch compliance router - deadline tracking, director dashboard and monitor control"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_user_type
from ...database import get_db
from ...errors import ApiError
from ...models import UserProfile
from ...shared.responses import success_response
from .schemas import ComplianceActionRequest, MonitorRequest
from .service import ComplianceService, control_monitor, monitor_status

router = APIRouter(prefix="/api/dutch-compliance", tags=["Dutch Compliance"])

director_only = require_user_type("director", message="Access denied. Director access required")


def get_compliance_service(db: Session = Depends(get_db)) -> ComplianceService:
    return ComplianceService(db)


# ============================================================================
# DASHBOARD & MONITOR (declared before the generic routes)
# ============================================================================


@router.get("/dashboard")
async def compliance_dashboard(
    current_user: UserProfile = Depends(director_only),
    service: ComplianceService = Depends(get_compliance_service),
):
    """Director's active dossiers with deadline status and next action"""
    return success_response(service.dashboard(current_user), "Compliance dashboard retrieved")


@router.get("/monitor")
async def get_monitor(
    action: Optional[str] = Query("status"),
    current_user: UserProfile = Depends(director_only),
    db: Session = Depends(get_db),
):
    if action == "check":
        result = control_monitor(db, "manual_check")
        return success_response(result["status"], result["message"], check=result["check"])
    if action != "status":
        raise ApiError("Invalid action", 400)
    return success_response(monitor_status(db), "Compliance monitor status retrieved")


@router.post("/monitor")
async def post_monitor(
    data: MonitorRequest,
    current_user: UserProfile = Depends(director_only),
    db: Session = Depends(get_db),
):
    result = control_monitor(db, data.action, data.check_interval_minutes)
    return success_response(result["status"], result["message"], check=result["check"])


# ============================================================================
# PER FUNERAL REQUEST
# ============================================================================


@router.get("")
async def get_compliance(
    funeral_request_id: Optional[str] = Query(None, alias="funeralRequestId"),
    action: Optional[str] = Query(None),
    current_user: UserProfile = Depends(get_current_user),
    service: ComplianceService = Depends(get_compliance_service),
):
    tracking = service.get_tracking_for(funeral_request_id, current_user)
    if action == "timeline":
        return success_response({"timeline": service.timeline(tracking)})
    if action == "alerts":
        return success_response({"alerts": service.alerts(tracking)})
    return success_response(service.status(tracking))


@router.post("")
async def post_compliance(
    data: ComplianceActionRequest,
    current_user: UserProfile = Depends(get_current_user),
    service: ComplianceService = Depends(get_compliance_service),
):
    result, message = service.handle_action(data, current_user)
    return success_response(result, message)


__all__ = ["router"]
