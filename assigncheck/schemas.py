"""Grading result and flow snapshot schemas."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FlowStep(str, Enum):
    SELECT_ASSIGNMENT = "SELECT_ASSIGNMENT"
    SELECT_CRITERIA = "SELECT_CRITERIA"
    ANALYZING = "ANALYZING"
    SHOW_RESULTS = "SHOW_RESULTS"


class Grade(str, Enum):
    DISTINCTION = "Distinction"
    MERIT = "Merit"
    PASS = "Pass"
    NOT_ACHIEVED = "Not Achieved"


class CriterionAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    criterion: str
    is_fulfilled: bool = Field(alias="isFulfilled")
    explanation: str


class AnalysisResult(BaseModel):
    """Structured evaluation returned by the grading model."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    achieved_grade: Grade = Field(alias="achievedGrade")
    criteria_analysis: tuple[CriterionAnalysis, ...] = Field(alias="criteriaAnalysis")
    completion_percentage: float = Field(alias="completionPercentage", ge=0, le=100)
    suggestions_for_improvement: str = Field(alias="suggestionsForImprovement")
    tips_and_tricks: str = Field(alias="tipsAndTricks")


class DocumentRead(BaseModel):
    filename: str
    media_type: str
    size_bytes: int


class FlowSnapshot(BaseModel):
    step: FlowStep
    error: str | None = None
    assignment: DocumentRead | None = None
    criteria: DocumentRead | None = None
    has_assignment_text: bool = False
    has_criteria_text: bool = False
    result: AnalysisResult | None = None
