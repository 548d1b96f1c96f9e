"""
Assistant service - funeral planning chat with the LLM and intake reports.

The chat works for anonymous visitors too; only authenticated users with
an intake get their conversation stored, and that storage never fails the
reply.
"""

import logging
import re
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import ApiError
from ...models import IntakeChatHistory, IntakeReport, UserProfile
from ...security_utils import sanitize_text
from ...services import llm_client
from .report import build_report, render_report_pdf
from .schemas import AiChatRequest, IntakeReportRequest

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """Je bent een empathische AI-assistent voor uitvaartplanning in Nederland. Geef korte, praktische antwoorden.

BELANGRIJKSTE REGEL: Houd antwoorden KORT (max 2-3 zinnen).

ANTWOORD FORMAAT:
- 1 zin empathie/begrip
- 1-2 zinnen praktisch advies
- Optioneel: 1 korte vervolgvraag

STIJL:
- Warm maar beknopt
- Verwijs naar eerdere gesprekken indien relevant
- Nederlands

Houd rekening met de wettelijke termijn: een begrafenis of crematie moet binnen 6 werkdagen na de aangifte van overlijden plaatsvinden."""

FALLBACK_REPLY = (
    "Excuses, ik ondervind momenteel technische problemen. Kunt u uw vraag opnieuw stellen? "
    "Als dit probleem aanhoudt, kunt u ook direct contact opnemen met onze klantenservice."
)
FALLBACK_ERROR = "AI service temporarily unavailable"

MAX_HISTORY_TURNS = 10
MAX_REPLY_LENGTH = 300


def shorten_reply(reply: str) -> str:
    """Keep replies short: the first two sentences, or a hard cut when there is only one"""
    if len(reply) <= MAX_REPLY_LENGTH:
        return reply
    sentences = [s.strip() for s in re.split(r"(?<=[.!?])\s+", reply) if s.strip()]
    if len(sentences) > 1:
        return " ".join(sentences[:2])
    return f"{reply[:MAX_REPLY_LENGTH - 3]}..."


def build_messages(data: AiChatRequest, message: str) -> list[dict]:
    context = []
    if data.step_name or data.current_step is not None:
        context.append(f"Huidige stap: {data.step_name or 'Onbekend'} ({data.current_step or 0})")
    if data.form_data:
        filled = ", ".join(f"{k}: {v}" for k, v in data.form_data.items() if v not in (None, "", []))
        if filled:
            context.append(f"Ingevulde gegevens: {filled}")

    system = SYSTEM_PROMPT
    if context:
        system = f"{SYSTEM_PROMPT}\n\nHUIDIGE CONTEXT:\n" + "\n".join(context)

    messages = [{"role": "system", "content": system}]
    for turn in data.history[-MAX_HISTORY_TURNS:]:
        role = "assistant" if turn.role == "assistant" else "user"
        if turn.content:
            messages.append({"role": role, "content": turn.content})
    messages.append({"role": "user", "content": message})
    return messages


class AssistantService:
    def __init__(self, db: Session):
        self.db = db

    async def chat(self, data: AiChatRequest, user: Optional[UserProfile]) -> dict:
        if not isinstance(data.message, str) or not data.message.strip():
            raise ApiError("Message is required", 400)
        message = sanitize_text(data.message)

        try:
            reply = shorten_reply(await llm_client.generate_reply(build_messages(data, message)))
        except Exception as e:
            logger.error(f"❌ AI chat failed, sending fallback reply: {e}")
            return {"success": False, "error": FALLBACK_ERROR, "data": {"response": FALLBACK_REPLY}}

        saved = False
        if user and data.intake_id:
            saved = self._save_history(user, data.intake_id, message, reply)

        return {
            "success": True,
            "data": {"response": reply, "authenticated": user is not None, "savedToDb": saved},
        }

    def _save_history(self, user: UserProfile, intake_id: str, message: str, reply: str) -> bool:
        try:
            self.db.add(IntakeChatHistory(user_id=user.id, intake_id=intake_id, message_type="user", content=message))
            self.db.add(
                IntakeChatHistory(user_id=user.id, intake_id=intake_id, message_type="assistant", content=reply)
            )
            self.db.commit()
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to save chat history for intake {intake_id}: {e}")
            return False

    def create_report(self, data: IntakeReportRequest, user: UserProfile) -> IntakeReport:
        if not data.form_data:
            raise ApiError("Intake data is required", 400)

        history = []
        if data.intake_id:
            history = (
                self.db.query(IntakeChatHistory)
                .filter(IntakeChatHistory.user_id == user.id, IntakeChatHistory.intake_id == data.intake_id)
                .order_by(IntakeChatHistory.created_at.asc())
                .all()
            )

        report = IntakeReport(
            user_id=user.id,
            intake_id=data.intake_id,
            report=build_report(data.form_data, history),
        )
        self.db.add(report)
        self.db.commit()
        self.db.refresh(report)
        logger.info(f"✅ Intake report {report.id} generated for {user.id} ({len(history)} chat messages)")
        return report

    def get_report_pdf(self, report_id: str, user: UserProfile) -> bytes:
        report = self.db.query(IntakeReport).filter(IntakeReport.id == report_id).first()
        if not report:
            raise ApiError("Report not found", 404)
        if report.user_id != user.id:
            raise ApiError("Access denied", 403)
        try:
            return render_report_pdf(report.report, user.name)
        except Exception as e:
            logger.error(f"❌ Failed to render report {report_id}: {e}")
            raise ApiError("Failed to generate PDF", 500) from e
