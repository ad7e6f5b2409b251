"""OpenAI assignment grading client."""

from __future__ import annotations

import copy
import logging
import os
import time
from typing import Any, Protocol

import httpx
from openai import APITimeoutError, OpenAI, OpenAIError
from pydantic import ValidationError as PydanticValidationError

from assigncheck.errors import AIServiceError, MalformedAIResponseError, MissingCredentialError
from assigncheck.schemas import AnalysisResult, Grade
from assigncheck.settings import settings

logger = logging.getLogger(__name__)

RETRY_MESSAGE = (
    "Failed to get a valid analysis from the AI. "
    "The model may have returned an unexpected format. Please try again."
)
SERVICE_FAILURE_MESSAGE = "The AI service could not complete the analysis. Please try again."


class AssignmentGrader(Protocol):
    def analyze(self, assignment_text: str, criteria_text: str) -> AnalysisResult:
        """Evaluate an assignment against its grading criteria."""


def _base_analysis_schema() -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "achievedGrade": {
                "type": "string",
                "description": "The final grade: 'Distinction', 'Merit', 'Pass', or 'Not Achieved'.",
                "enum": [grade.value for grade in Grade],
            },
            "criteriaAnalysis": {
                "type": "array",
                "description": "A detailed analysis for each criterion.",
                "items": {
                    "type": "object",
                    "properties": {
                        "criterion": {"type": "string", "description": "The criterion code, e.g. P1, M2, D1."},
                        "isFulfilled": {"type": "boolean", "description": "True if the criterion is met."},
                        "explanation": {
                            "type": "string",
                            "description": "Why the criterion was or was not met, quoting the assignment.",
                        },
                    },
                },
            },
            "completionPercentage": {
                "type": "number",
                "description": "Overall completion percentage (0-100) based on the number of criteria met.",
            },
            "suggestionsForImprovement": {
                "type": "string",
                "description": "2-3 one-sentence actionable suggestions for unmet criteria, as a Markdown list.",
            },
            "tipsAndTricks": {
                "type": "string",
                "description": "2-3 one-sentence general tips for improving assignment quality, as a Markdown list.",
            },
        },
    }


def _ensure_strict_schema_node(node: object) -> None:
    if isinstance(node, list):
        for item in node:
            _ensure_strict_schema_node(item)
        return

    if not isinstance(node, dict):
        return

    if node.get("type") == "object":
        properties = node.get("properties")
        if not isinstance(properties, dict):
            properties = {}
            node["properties"] = properties
        node["additionalProperties"] = False
        node["required"] = list(properties.keys())

    properties = node.get("properties")
    if isinstance(properties, dict):
        for value in properties.values():
            _ensure_strict_schema_node(value)

    items = node.get("items")
    if items is not None:
        _ensure_strict_schema_node(items)


def build_analysis_response_schema() -> dict[str, Any]:
    schema = copy.deepcopy(_base_analysis_schema())
    _ensure_strict_schema_node(schema)
    return schema


def build_analysis_prompt(assignment_text: str, criteria_text: str) -> str:
    return "\n".join(
        [
            "You are an expert academic assessor named AssignCheck. "
            "Your task is to evaluate a student's assignment strictly against the provided grading criteria.",
            "",
            "GRADING RULES (follow these strictly):",
            "1. Pass: ALL 'P' criteria (P1, P2, ...) MUST be fulfilled.",
            "2. Merit: ALL 'P' criteria AND ALL 'M' criteria (M1, M2, ...) MUST be fulfilled.",
            "3. Distinction: ALL 'P', ALL 'M' and ALL 'D' criteria (D1, D2, ...) MUST be fulfilled.",
            "4. Not Achieved: if ANY 'P' criterion is not fulfilled the grade is 'Not Achieved', "
            "regardless of other fulfilled criteria.",
            "5. Downgrades: if all 'P' criteria are met but one or more 'M' criteria are not, the grade is 'Pass'. "
            "If all 'P' and 'M' criteria are met but one or more 'D' criteria are not, the grade is 'Merit'.",
            "",
            "INSTRUCTIONS:",
            "1. Identify all criteria codes (P1, P2..., M1, M2..., D1, D2...) in the criteria text.",
            "2. For each criterion, check the assignment text to determine whether it has been met.",
            "3. Explain each decision, quoting relevant parts of the assignment.",
            "4. Determine the final grade using the grading rules above.",
            "5. Calculate a completion percentage from the number of criteria met out of the total available.",
            "6. Give 2-3 concise, actionable suggestions for unmet criteria, one sentence each.",
            "7. Give 2-3 brief, general tips for improving assignment quality, one sentence each.",
            "",
            "CRITERIA TEXT:",
            "---",
            criteria_text,
            "---",
            "",
            "ASSIGNMENT TEXT:",
            "---",
            assignment_text,
            "---",
            "",
            "Return ONLY a single JSON object matching the provided schema.",
        ]
    )


def build_analysis_request(model: str, prompt: str, schema: dict[str, object], temperature: float) -> dict[str, object]:
    return {
        "model": model,
        "input": [{"role": "user", "content": [{"type": "input_text", "text": prompt}]}],
        "temperature": temperature,
        "text": {
            "format": {
                "type": "json_schema",
                "name": "assignment_analysis",
                "strict": True,
                "schema": schema,
            }
        },
    }


def parse_analysis_result(output_text: str) -> AnalysisResult:
    payload = (output_text or "").strip()
    if not payload:
        raise MalformedAIResponseError(RETRY_MESSAGE, body=output_text or "")
    try:
        return AnalysisResult.model_validate_json(payload)
    except PydanticValidationError as exc:
        raise MalformedAIResponseError(RETRY_MESSAGE, body=payload) from exc


class OpenAIAssignmentGrader:
    def __init__(
        self,
        model: str | None = None,
        temperature: float | None = None,
        timeout_seconds: float | None = None,
        client: OpenAI | None = None,
    ) -> None:
        self._model = model or settings.openai_model
        self._temperature = settings.openai_temperature if temperature is None else temperature
        self._timeout_seconds = timeout_seconds or settings.openai_timeout_seconds
        self._client = client

    def _get_client(self) -> OpenAI:
        if self._client is not None:
            return self._client
        api_key = os.getenv("OPENAI_API_KEY", "").strip()
        if not api_key:
            raise MissingCredentialError("OPENAI_API_KEY is not set. Configure an OpenAI API key and try again.")
        self._client = OpenAI(api_key=api_key, timeout=self._timeout_seconds)
        return self._client

    def analyze(self, assignment_text: str, criteria_text: str) -> AnalysisResult:
        client = self._get_client()
        request_payload = build_analysis_request(
            model=self._model,
            prompt=build_analysis_prompt(assignment_text, criteria_text),
            schema=build_analysis_response_schema(),
            temperature=self._temperature,
        )

        started = time.perf_counter()
        try:
            response = client.responses.create(**request_payload)
        except (OpenAIError, httpx.HTTPError) as exc:
            status_code = getattr(exc, "status_code", None)
            if isinstance(exc, (APITimeoutError, httpx.TimeoutException)):
                status_code = 504
            response_obj = getattr(exc, "response", None)
            body_text = ""
            if response_obj is not None:
                body_text = getattr(response_obj, "text", "") or ""
            if not body_text:
                body_text = str(exc)
            logger.exception(
                "analysis openai request failed",
                extra={"stage": "call_openai", "model": self._model, "status_code": status_code},
            )
            raise AIServiceError(SERVICE_FAILURE_MESSAGE, status_code=status_code, body=body_text) from exc

        output_text = getattr(response, "output_text", "") or ""
        try:
            result = parse_analysis_result(output_text)
        except MalformedAIResponseError as exc:
            logger.warning(
                "analysis openai response rejected",
                extra={"stage": "parse_response", "model": self._model, "body": exc.body},
            )
            raise

        logger.info(
            "analysis complete",
            extra={
                "stage": "call_openai",
                "model": self._model,
                "achieved_grade": result.achieved_grade.value,
                "criteria_count": len(result.criteria_analysis),
                "openai_ms": int((time.perf_counter() - started) * 1000),
            },
        )
        return result


class MockAssignmentGrader:
    def analyze(self, assignment_text: str, criteria_text: str) -> AnalysisResult:
        _ = (assignment_text, criteria_text)
        return AnalysisResult.model_validate(
            {
                "achievedGrade": "Pass",
                "criteriaAnalysis": [
                    {"criterion": "P1", "isFulfilled": True, "explanation": "The report describes the network layout."},
                    {"criterion": "P2", "isFulfilled": True, "explanation": "Each protocol in use is named and explained."},
                    {"criterion": "M1", "isFulfilled": False, "explanation": "No comparison of alternative topologies."},
                ],
                "completionPercentage": 66.67,
                "suggestionsForImprovement": "- Compare at least two alternative topologies for M1.",
                "tipsAndTricks": "- Use headings that mirror the criteria codes.\n- Cite sources for technical claims.",
            }
        )


def get_assignment_grader() -> AssignmentGrader:
    if os.getenv("OPENAI_MOCK", "").strip() == "1":
        return MockAssignmentGrader()
    return OpenAIAssignmentGrader()
