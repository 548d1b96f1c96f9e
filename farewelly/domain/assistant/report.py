"""
Intake report - structured summary of a family's intake answers and their
conversation with the assistant, plus its PDF rendering.
"""

import io
import logging
from datetime import datetime
from typing import Iterable, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ...models import IntakeChatHistory

logger = logging.getLogger(__name__)

BUDGET_RANGES = {
    "burial": {"min": 5000, "max": 15000},
    "cremation": {"min": 3000, "max": 10000},
    "memorial": {"min": 1000, "max": 5000},
    "unsure": {"min": 3000, "max": 15000},
}

ATTENDEE_MULTIPLIERS = {
    "0-25": 1,
    "25-50": 1.3,
    "50-100": 1.6,
    "100+": 2,
}

# (concern, keywords) matched case-insensitively against the family's messages
CONCERN_KEYWORDS = [
    ("cost_conscious", ("budget", "kosten")),
    ("time_sensitive", ("snel", "urgent")),
    ("cultural_requirements", ("traditie", "cultuur")),
]


def calculate_budget_range(service_type: Optional[str], attendees: Optional[str]) -> dict:
    base = BUDGET_RANGES.get(service_type or "", BUDGET_RANGES["unsure"])
    multiplier = ATTENDEE_MULTIPLIERS.get(attendees or "", 1)
    return {"min": int(round(base["min"] * multiplier)), "max": int(round(base["max"] * multiplier))}


def analyze_conversations(history: Iterable[IntakeChatHistory]) -> dict:
    user_messages = [h.content.lower() for h in history if h.message_type == "user"]
    concerns = [
        concern
        for concern, keywords in CONCERN_KEYWORDS
        if any(k in message for message in user_messages for k in keywords)
    ]
    return {
        "main_concerns": concerns,
        "emotional_state": "processing",
        "questions_asked": len(user_messages),
        "preferred_communication_style": "supportive",
        "additional_notes": [],
    }


def build_report(form: dict, history: list[IntakeChatHistory]) -> dict:
    """Assemble the report from the intake form (camelCase keys) and stored chat history"""
    return {
        "generated_at": datetime.utcnow().isoformat(),
        "family_situation": {
            "deceased_name": form.get("deceasedName"),
            "date_of_death": form.get("dateOfDeath"),
            "relationship": form.get("relationship"),
            "urgency_level": "normal",
        },
        "service_preferences": {
            "type": form.get("serviceType"),
            "location": form.get("location"),
            "expected_attendees": form.get("attendees"),
            "cultural_requirements": form.get("culturalRequirements") or [],
        },
        "financial_situation": {
            "has_insurance": form.get("hasInsurance"),
            "insurance_provider": form.get("insuranceProvider"),
            "needs_financial_help": form.get("needsFinancialHelp"),
            "gemeente": form.get("gemeente"),
            "estimated_budget_range": calculate_budget_range(form.get("serviceType"), form.get("attendees")),
        },
        "special_requests": form.get("specialRequests"),
        "conversation_insights": analyze_conversations(history),
    }


def _display(value) -> str:
    if value is None or value == "":
        return "-"
    if isinstance(value, bool):
        return "Ja" if value else "Nee"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value) or "-"
    return str(value)


def render_report_pdf(report: dict, family_name: str) -> bytes:
    """Render an intake report as an A4 PDF"""
    buffer = io.BytesIO()
    margin = 0.75 * inch
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=margin,
        leftMargin=margin,
        topMargin=margin,
        bottomMargin=margin,
        title=f"Intake rapport - {family_name}",
    )

    dark_gray = colors.HexColor("#1e293b")
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "ReportTitle", parent=styles["Heading1"], fontSize=20, textColor=colors.HexColor("#475569"), spaceAfter=12
    )
    heading_style = ParagraphStyle(
        "ReportHeading", parent=styles["Heading2"], fontSize=14, textColor=dark_gray, spaceBefore=16, spaceAfter=8
    )
    body_style = ParagraphStyle("ReportBody", parent=styles["Normal"], fontSize=10, textColor=dark_gray)

    def section(title: str, rows: list[tuple[str, object]]) -> list:
        table = Table(
            [[Paragraph(escape(label), body_style), Paragraph(escape(_display(value)), body_style)] for label, value in rows],
            colWidths=[2.2 * inch, 4.3 * inch],
        )
        table.setStyle(
            TableStyle(
                [
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("LINEBELOW", (0, 0), (-1, -1), 0.25, colors.HexColor("#e2e8f0")),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
                ]
            )
        )
        return [Paragraph(escape(title), heading_style), table]

    family = report.get("family_situation", {})
    service = report.get("service_preferences", {})
    financial = report.get("financial_situation", {})
    insights = report.get("conversation_insights", {})
    budget = financial.get("estimated_budget_range") or {}

    story = [
        Paragraph("Intake rapport", title_style),
        Paragraph(escape(f"Familie: {family_name}"), body_style),
        Paragraph(escape(f"Gegenereerd: {report.get('generated_at', '-')}"), body_style),
        Spacer(1, 0.2 * inch),
    ]
    story += section(
        "Familiesituatie",
        [
            ("Naam overledene", family.get("deceased_name")),
            ("Datum overlijden", family.get("date_of_death")),
            ("Relatie", family.get("relationship")),
            ("Urgentie", family.get("urgency_level")),
        ],
    )
    story += section(
        "Uitvaartwensen",
        [
            ("Type uitvaart", service.get("type")),
            ("Locatie", service.get("location")),
            ("Verwachte aanwezigen", service.get("expected_attendees")),
            ("Culturele wensen", service.get("cultural_requirements")),
        ],
    )
    story += section(
        "Financiën",
        [
            ("Verzekerd", financial.get("has_insurance")),
            ("Verzekeraar", financial.get("insurance_provider")),
            ("Financiële hulp nodig", financial.get("needs_financial_help")),
            ("Gemeente", financial.get("gemeente")),
            ("Geschat budget", f"€{budget.get('min', 0):,} - €{budget.get('max', 0):,}".replace(",", ".")),
        ],
    )
    story += section(
        "Gesprekinzichten",
        [
            ("Aandachtspunten", insights.get("main_concerns")),
            ("Aantal vragen", insights.get("questions_asked")),
            ("Bijzondere verzoeken", report.get("special_requests")),
        ],
    )

    doc.build(story)
    pdf_bytes = buffer.getvalue()
    buffer.close()
    logger.info(f"📄 Intake report PDF rendered ({len(pdf_bytes)} bytes)")
    return pdf_bytes
