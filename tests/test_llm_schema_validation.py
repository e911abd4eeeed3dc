from __future__ import annotations

import pytest

import hackjudge.services.llm_service as llm


def test_extract_json_object_strips_fences_and_prose():
    raw = 'Here you go:\n```json\n{"pros": ["a"], "nested": {"x": 1}}\n```'
    assert llm._extract_json_object(raw) == '{"pros": ["a"], "nested": {"x": 1}}'

    assert llm._extract_json_object('Sure! {"score": 80} Hope that helps.') == '{"score": 80}'


def test_analyze_presentation_parses_fenced_json(monkeypatch):
    reply = '```json\n{"pros": ["Clear demo", "Solid stack", "Real users"], "cons": ["No tests", "Thin pitch", "Costly"], "suggestedQuestions": ["How will it scale?", "Who pays?"]}\n```'
    monkeypatch.setattr(llm, "_call_gemini", lambda system, user, model=None: reply)

    out = llm.analyze_presentation("We built a thing.")
    assert out.pros == ["Clear demo", "Solid stack", "Real users"]
    assert len(out.cons) == 3
    assert out.suggestedQuestions[0] == "How will it scale?"


def test_analyze_presentation_prompt_includes_transcript(monkeypatch):
    seen = {}

    def fake_call(system, user, model=None):
        seen["user"] = user
        return '{"pros": ["p"], "cons": ["c"], "suggestedQuestions": ["q"]}'

    monkeypatch.setattr(llm, "_call_gemini", fake_call)
    llm.analyze_presentation("our drone maps wildfires")
    assert "our drone maps wildfires" in seen["user"]
    assert "3 to 5 biggest strengths" in seen["user"]


def test_analyze_presentation_raises_on_unparseable_output(monkeypatch):
    monkeypatch.setattr(llm, "_call_gemini", lambda system, user, model=None: "The team did great, no complaints.")
    with pytest.raises(llm.LLMError):
        llm.analyze_presentation("transcript")


def test_analyze_presentation_rejects_object_without_analysis_keys(monkeypatch):
    monkeypatch.setattr(llm, "_call_gemini", lambda system, user, model=None: '{"summary": "Solid demo"}')
    with pytest.raises(llm.LLMError):
        llm.analyze_presentation("transcript")

    monkeypatch.setattr(llm, "_call_gemini", lambda system, user, model=None: "{}")
    with pytest.raises(llm.LLMError):
        llm.analyze_presentation("transcript")

    monkeypatch.setattr(llm, "_call_gemini", lambda system, user, model=None: '{"pros": ["Clear demo"]}')
    analysis = llm.analyze_presentation("transcript")
    assert analysis.pros == ["Clear demo"]
    assert analysis.cons == []


def test_summarize_document_parses_json(monkeypatch):
    reply = '{"projectTitle": "FireWatch", "projectSummary": "Drones for wildfire mapping", "keyFeatures": ["Thermal camera"]}'
    monkeypatch.setattr(llm, "_call_gemini", lambda system, user, model=None: reply)

    out = llm.summarize_document("doc text")
    assert out.projectTitle == "FireWatch"
    assert out.keyFeatures == ["Thermal camera"]
    assert out.error is None
    assert "technicalStack" not in out.as_doc_summary()


def test_summarize_document_wraps_non_json_reply(monkeypatch):
    monkeypatch.setattr(llm, "_call_gemini", lambda system, user, model=None: "A drone project about fires.")

    out = llm.summarize_document("doc text")
    assert out.projectTitle == "Project Summary"
    assert out.projectSummary == "A drone project about fires."
    assert out.rawSummary == "A drone project about fires."
    assert out.error == "Response was not in valid JSON format"


def test_summarize_document_reports_llm_failure(monkeypatch):
    def boom(system, user, model=None):
        raise llm.LLMTransientError("Gemini HTTP 503")

    monkeypatch.setattr(llm, "_call_gemini", boom)

    out = llm.summarize_document("doc text")
    assert out.projectTitle == "Error Generating Summary"
    assert out.error == "Gemini HTTP 503"


def test_judge_submission_returns_score_and_feedback(monkeypatch):
    monkeypatch.setattr(
        llm,
        "_call_gemini",
        lambda system, user, model=None: '{"score": 85, "feedback": "Strong architecture."}',
    )
    out = llm.judge_submission(submission_info={"ideaName": "FireWatch"}, analysis={"pros": ["x"]})
    assert out.score == 85
    assert out.feedback == "Strong architecture."


def test_call_gemini_requires_api_key(monkeypatch):
    from hackjudge.settings import get_settings

    monkeypatch.setattr(get_settings(), "GEMINI_API_KEY", "")
    with pytest.raises(llm.LLMError):
        llm._call_gemini(system="s", user="u")
