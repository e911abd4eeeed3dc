from __future__ import annotations

import json
import logging
import time
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from hackjudge.schemas.llm import DocumentSummary, JudgeScore
from hackjudge.schemas.meeting import PresentationAnalysis
from hackjudge.settings import get_settings

logger = logging.getLogger(__name__)


class LLMError(Exception):
    pass


class LLMTransientError(LLMError):
    """Timeouts, 429/5xx and network failures talking to Gemini."""


def _gemini_endpoint(model: str, api_key: str) -> str:
    # Using the public Generative Language API endpoint.
    return f"https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent?key={api_key}"


def _call_gemini(*, system: str, user: str, model: Optional[str] = None) -> str:
    settings = get_settings()
    if not settings.GEMINI_API_KEY:
        raise LLMError("GEMINI_API_KEY not configured")

    model = model or settings.GEMINI_MODEL
    url = _gemini_endpoint(model, settings.GEMINI_API_KEY)
    payload = {
        "systemInstruction": {"parts": [{"text": system}]},
        "contents": [{"role": "user", "parts": [{"text": user}]}],
        "generationConfig": {
            "temperature": 0.3,
            "maxOutputTokens": 8192,
        },
    }

    logger.info("Calling Gemini. model=%s user_prompt_len=%d", model, len(user))
    start_time = time.time()

    try:
        with httpx.Client(timeout=settings.LLM_TIMEOUT_SECONDS) as client:
            resp = client.post(url, json=payload)
            resp.raise_for_status()
            body = resp.json()
    except (httpx.TimeoutException, httpx.NetworkError) as e:
        raise LLMTransientError(str(e)) from e
    except httpx.HTTPStatusError as e:
        code = e.response.status_code
        if code == 429 or 500 <= code <= 599:
            raise LLMTransientError(f"Gemini HTTP {code}") from e
        raise LLMError(f"Gemini HTTP {code}: {e.response.text[:300]}") from e

    elapsed = time.time() - start_time
    try:
        candidate = body["candidates"][0]
        result = candidate["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise LLMError(f"Unexpected Gemini response shape: {str(body)[:500]}") from e

    finish_reason = candidate.get("finishReason", "UNKNOWN")
    logger.info("Gemini response received. elapsed=%.2fs response_len=%d finish_reason=%s", elapsed, len(result), finish_reason)
    if finish_reason != "STOP":
        logger.warning("Gemini response may be incomplete. finish_reason=%s", finish_reason)
    logger.debug("Gemini response (first 1000 chars): %s", result[:1000])
    return result


def _extract_json_object(text: str) -> str:
    """
    Best-effort extraction of a single JSON object from LLM output.
    Handles markdown code blocks (```json ... ```) and prose around the object.
    """
    s = text.strip()

    if s.startswith("```"):
        end_marker = s.find("```", 3)
        if end_marker > 0:
            s = s[3:end_marker].strip()
            if s[:4].lower() == "json":
                s = s[4:].strip()

    start = s.find("{")
    if start < 0:
        return s

    # Find the matching closing brace by counting
    brace_count = 0
    end = -1
    for i in range(start, len(s)):
        if s[i] == "{":
            brace_count += 1
        elif s[i] == "}":
            brace_count -= 1
            if brace_count == 0:
                end = i
                break

    if end > start:
        return s[start : end + 1]

    end = s.rfind("}")
    if end > start:
        return s[start : end + 1]

    return s


def _parse_json_object(text: str) -> dict[str, Any]:
    """Raises LLMError when the output does not contain a JSON object."""
    candidate = _extract_json_object(text)
    try:
        obj = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise LLMError(f"LLM output is not valid JSON: {e}") from e
    if not isinstance(obj, dict):
        raise LLMError(f"LLM output is not a JSON object: {type(obj).__name__}")
    return obj


SUMMARY_SYSTEM = (
    "You are an AI assistant specialized in analyzing hackathon project proposals and presentations. "
    "Ensure your response is valid JSON that can be parsed. Do not include any text outside the JSON object."
)

SUMMARY_TEMPLATE = """Analyze the following text extracted from a hackathon project document and provide a comprehensive summary with the following components:

1. Project Title: Extract or infer the title of the project
2. Problem Statement: What problem is the project trying to solve?
3. Project Summary: A concise overview of the project
4. Key Features: List the main features or components of the solution
5. Technical Stack: Identify any technologies, frameworks, or tools mentioned
6. Target Audience: Who would benefit from this solution?
7. Innovation Aspects: What makes this project innovative or unique?
8. Potential Impact: How might this project create value or impact?

Format your response as a structured JSON object with these exact field names:
{{
  "projectTitle": "Title here",
  "problemStatement": "Problem statement here",
  "projectSummary": "Summary here",
  "keyFeatures": ["Feature 1", "Feature 2", "Feature 3"],
  "technicalStack": ["Tech 1", "Tech 2", "Tech 3"],
  "targetAudience": "Target audience here",
  "innovationAspects": "Innovation aspects here",
  "potentialImpact": "Potential impact here"
}}

Here is the document text:
{document_text}
"""


def summarize_document(document_text: str) -> DocumentSummary:
    """
    Summarize proposal text into a DocumentSummary.

    Never raises: an LLM failure or non-JSON output is folded into the
    returned summary's `error` field.
    """
    settings = get_settings()
    user = SUMMARY_TEMPLATE.format(document_text=document_text)
    try:
        raw = _call_gemini(system=SUMMARY_SYSTEM, user=user, model=settings.GEMINI_SUMMARY_MODEL)
    except LLMError as e:
        logger.error("Summary generation failed: %s", e)
        return DocumentSummary(
            projectTitle="Error Generating Summary",
            projectSummary="There was an error generating the project summary.",
            error=str(e) or "Unknown error generating summary",
        )

    try:
        return DocumentSummary.model_validate(_parse_json_object(raw))
    except (LLMError, ValidationError) as e:
        logger.warning("Summary was not valid JSON; keeping raw text. error=%s", e)
        return DocumentSummary(
            projectTitle="Project Summary",
            projectSummary=raw,
            rawSummary=raw,
            error="Response was not in valid JSON format",
        )


ANALYSIS_SYSTEM = (
    "You are a hackathon judge's assistant. Be honest, objective, and concise. "
    "Return only the JSON object requested, with no markdown and no commentary."
)

ANALYSIS_TEMPLATE = """Carefully read the following transcript.
Write a sharp, clear, and high-quality analysis using short, simple, and direct sentences.
No formatting like lists, bullets, or markdown inside the strings. Just plain text.
Avoid fluff, filler, or vague words.

Your output must cover:

- 3 to 5 biggest strengths (only major positives)
- 3 to 5 real weaknesses or areas for improvement (be direct and critical if needed)
- 2 to 3 strong follow-up questions that show deeper thinking

Important rules:

- Focus only on important points, not minor details
- Your response must contain points for every category
- Keep the tone professional, neutral, and sharp
- If there is missing context or confusion, highlight it in cons

You must return it as JSON like this:

{{
    "pros": ["pro1", "pro2", "pro3", "pro4", "pro5"],
    "cons": ["con1", "con2", "con3", "con4", "con5"],
    "suggestedQuestions": ["question1", "question2", "question3"]
}}

Transcript:
{transcript}"""


def analyze_presentation(transcript: str) -> PresentationAnalysis:
    """Raises LLMError if the model call fails or its output cannot be parsed."""
    raw = _call_gemini(system=ANALYSIS_SYSTEM, user=ANALYSIS_TEMPLATE.format(transcript=transcript))
    obj = _parse_json_object(raw)
    if not any(k in obj for k in ("pros", "cons", "suggestedQuestions")):
        raise LLMError("Analysis has none of pros, cons or suggestedQuestions")
    try:
        return PresentationAnalysis(
            pros=obj.get("pros") or [],
            cons=obj.get("cons") or [],
            suggestedQuestions=obj.get("suggestedQuestions") or [],
        )
    except ValidationError as e:
        raise LLMError(f"Analysis did not match the expected shape: {e}") from e


JUDGE_SYSTEM = "You are an expert judge evaluating hackathon presentations. Respond with a single JSON object only."

JUDGE_TEMPLATE = """Please analyze this presentation summary and provide:
1. A score out of 100 based on:
   - Clarity and organization (30 points)
   - Technical depth (30 points)
   - Innovation and creativity (20 points)
   - Presentation quality (20 points)
   - Analysis by judges (10 points)
2. Brief but specific feedback highlighting strengths and areas for improvement

Summary of the presentation:
{submission_info}

Analysis by judges:
{analysis}

Format your response exactly like this example:
{{
  "score": 85,
  "feedback": "Strong technical implementation with clear architecture. Creative solution to X problem. Could improve Y aspect."
}}"""


def judge_submission(*, submission_info: Any, analysis: Any) -> JudgeScore:
    """Raises LLMError if the model call fails or its output cannot be parsed."""
    user = JUDGE_TEMPLATE.format(
        submission_info=json.dumps(submission_info, indent=2, ensure_ascii=False),
        analysis=json.dumps(analysis, indent=2, ensure_ascii=False),
    )
    obj = _parse_json_object(_call_gemini(system=JUDGE_SYSTEM, user=user))
    try:
        return JudgeScore.model_validate(obj)
    except ValidationError as e:
        raise LLMError(f"Judge output did not match the expected shape: {e}") from e
