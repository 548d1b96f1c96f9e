"""Assistant router - AI funeral planning chat and intake reports"""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from ...auth import get_optional_user, require_user_type
from ...config import AI_CHAT_RATE_LIMIT, AI_CHAT_RATE_WINDOW
from ...database import get_db
from ...models import UserProfile
from ...rate_limiter import create_rate_limiter
from ...shared.responses import success_response
from .schemas import AiChatRequest, IntakeReportRequest, IntakeReportResponse
from .service import AssistantService

router = APIRouter(tags=["Assistant"])

ai_chat_limit = create_rate_limiter(AI_CHAT_RATE_LIMIT, AI_CHAT_RATE_WINDOW, "ai_chat")
family_only = require_user_type("family", message="Access denied. Family access required")


def get_assistant_service(db: Session = Depends(get_db)) -> AssistantService:
    return AssistantService(db)


@router.post("/api/ai-chat")
async def ai_chat(
    data: AiChatRequest,
    _: None = Depends(ai_chat_limit),
    current_user: Optional[UserProfile] = Depends(get_optional_user),
    service: AssistantService = Depends(get_assistant_service),
):
    """Answer a funeral planning question; replies with a fallback text when the LLM is down"""
    return await service.chat(data, current_user)


@router.post("/api/intake/report", status_code=201)
async def create_intake_report(
    data: IntakeReportRequest,
    current_user: UserProfile = Depends(family_only),
    service: AssistantService = Depends(get_assistant_service),
):
    report = service.create_report(data, current_user)
    return success_response(IntakeReportResponse.model_validate(report), "Report generated successfully")


@router.get("/api/intake/report/{report_id}/pdf")
async def download_intake_report(
    report_id: str,
    current_user: UserProfile = Depends(family_only),
    service: AssistantService = Depends(get_assistant_service),
):
    pdf_bytes = service.get_report_pdf(report_id, current_user)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="intake-report-{report_id}.pdf"'},
    )


__all__ = ["router"]
