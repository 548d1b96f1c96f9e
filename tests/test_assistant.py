"""Tests for the AI planning chat and intake reports."""

import pytest

from farewelly.domain.assistant.report import analyze_conversations, build_report, calculate_budget_range
from farewelly.domain.assistant.service import FALLBACK_REPLY, shorten_reply
from farewelly.models import IntakeChatHistory, IntakeReport
from farewelly.services import llm_client


@pytest.fixture
def llm_reply(monkeypatch):
    """Replace the LLM call; records the messages it was sent"""
    calls = []

    def _set(reply="Gecondoleerd met uw verlies. Ik help u graag verder."):
        async def fake_generate_reply(messages, temperature=0.7, max_tokens=800):
            calls.append(messages)
            return reply

        monkeypatch.setattr(llm_client, "generate_reply", fake_generate_reply)
        return calls

    return _set


@pytest.fixture
def llm_down(monkeypatch):
    async def failing(messages, temperature=0.7, max_tokens=800):
        raise llm_client.LLMError("LLM_API_KEY not configured")

    monkeypatch.setattr(llm_client, "generate_reply", failing)


class TestAiChat:
    def test_anonymous_chat(self, client, llm_reply):
        calls = llm_reply()

        response = client.post("/api/ai-chat", json={"message": "Wat kost een crematie?"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["authenticated"] is False
        assert body["data"]["savedToDb"] is False
        assert calls[0][0]["role"] == "system"
        assert calls[0][-1] == {"role": "user", "content": "Wat kost een crematie?"}

    def test_history_and_context_are_sent(self, client, llm_reply):
        calls = llm_reply()

        client.post(
            "/api/ai-chat",
            json={
                "message": "En een begrafenis?",
                "chatHistory": [{"type": "user", "message": "Hallo"}, {"type": "assistant", "message": "Welkom"}],
                "stepName": "Uitvaartwensen",
                "currentStep": 2,
                "formData": {"serviceType": "burial", "location": ""},
            },
        )

        messages = calls[0]
        assert "Huidige stap: Uitvaartwensen (2)" in messages[0]["content"]
        assert "serviceType: burial" in messages[0]["content"]
        assert "location" not in messages[0]["content"].split("HUIDIGE CONTEXT")[1]
        assert [m["role"] for m in messages[1:]] == ["user", "assistant", "user"]

    def test_saves_history_for_signed_in_family(self, client, db, family, auth_headers, llm_reply):
        llm_reply()

        body = client.post(
            "/api/ai-chat", headers=auth_headers(family), json={"message": "Hallo", "intakeId": "intake-1"}
        ).json()

        assert body["data"]["authenticated"] is True
        assert body["data"]["savedToDb"] is True
        rows = db.query(IntakeChatHistory).filter(IntakeChatHistory.intake_id == "intake-1").all()
        assert sorted(r.message_type for r in rows) == ["assistant", "user"]

    def test_message_required(self, client, llm_reply):
        llm_reply()

        response = client.post("/api/ai-chat", json={"message": "   "})

        assert response.status_code == 400
        assert response.json()["error"] == "Message is required"

    def test_non_string_message_rejected(self, client, llm_reply):
        llm_reply()

        assert client.post("/api/ai-chat", json={"message": 42}).status_code == 400

    def test_fallback_when_llm_down(self, client, llm_down):
        response = client.post("/api/ai-chat", json={"message": "Hallo"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "AI service temporarily unavailable"
        assert body["data"]["response"] == FALLBACK_REPLY


class TestShortenReply:
    def test_short_reply_untouched(self):
        assert shorten_reply("Kort antwoord.") == "Kort antwoord."

    def test_long_reply_keeps_two_sentences(self):
        reply = "Eerste zin. Tweede zin! Derde zin? " + "x" * 300

        assert shorten_reply(reply) == "Eerste zin. Tweede zin!"

    def test_single_long_sentence_is_cut(self):
        result = shorten_reply("a" * 400)

        assert len(result) == 300
        assert result.endswith("...")


class TestReportBuilding:
    def test_budget_range(self):
        assert calculate_budget_range("burial", "50-100") == {"min": 8000, "max": 24000}
        assert calculate_budget_range("cremation", None) == {"min": 3000, "max": 10000}
        assert calculate_budget_range("space", "100+") == {"min": 6000, "max": 30000}

    def test_conversation_insights(self):
        history = [
            IntakeChatHistory(message_type="user", content="Wat zijn de kosten?"),
            IntakeChatHistory(message_type="assistant", content="Het budget hangt af van..."),
            IntakeChatHistory(message_type="user", content="Het moet snel geregeld worden"),
        ]

        insights = analyze_conversations(history)

        assert insights["main_concerns"] == ["cost_conscious", "time_sensitive"]
        assert insights["questions_asked"] == 2

    def test_report_sections(self):
        report = build_report(
            {"deceasedName": "Jan Visser", "serviceType": "cremation", "attendees": "25-50", "hasInsurance": True},
            [],
        )

        assert report["family_situation"]["deceased_name"] == "Jan Visser"
        assert report["financial_situation"]["estimated_budget_range"] == {"min": 3900, "max": 13000}
        assert report["service_preferences"]["cultural_requirements"] == []


class TestIntakeReportApi:
    def test_generate_and_download(self, client, db, family, auth_headers):
        headers = auth_headers(family)
        db.add(IntakeChatHistory(user_id=family.id, intake_id="intake-1", message_type="user", content="Budget?"))
        db.commit()

        response = client.post(
            "/api/intake/report",
            headers=headers,
            json={"intakeId": "intake-1", "formData": {"deceasedName": "Jan <Visser>", "serviceType": "burial"}},
        )

        assert response.status_code == 201
        report = response.json()["data"]
        assert report["report"]["conversation_insights"]["main_concerns"] == ["cost_conscious"]

        pdf = client.get(f"/api/intake/report/{report['id']}/pdf", headers=headers)
        assert pdf.status_code == 200
        assert pdf.headers["content-type"] == "application/pdf"
        assert pdf.headers["content-disposition"] == f'attachment; filename="intake-report-{report["id"]}.pdf"'
        assert pdf.content.startswith(b"%PDF")

    def test_intake_data_required(self, client, family, auth_headers):
        response = client.post("/api/intake/report", headers=auth_headers(family), json={})

        assert response.status_code == 400
        assert response.json()["error"] == "Intake data is required"

    def test_pdf_is_owner_only(self, client, db, family, make_user, auth_headers):
        report = IntakeReport(user_id=family.id, report=build_report({"serviceType": "memorial"}, []))
        db.add(report)
        db.commit()

        response = client.get(f"/api/intake/report/{report.id}/pdf", headers=auth_headers(make_user("family")))

        assert response.status_code == 403

    def test_missing_report(self, client, family, auth_headers):
        response = client.get("/api/intake/report/missing/pdf", headers=auth_headers(family))

        assert response.status_code == 404
        assert response.json()["error"] == "Report not found"

    def test_families_only(self, client, director, auth_headers):
        response = client.post("/api/intake/report", headers=auth_headers(director), json={"formData": {"a": 1}})

        assert response.status_code == 403
