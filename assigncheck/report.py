"""View model for the analysis report page."""

from __future__ import annotations

from dataclasses import dataclass

from assigncheck.schemas import AnalysisResult, Grade

GRADE_BADGE_CLASSES: dict[Grade, str] = {
    Grade.DISTINCTION: "grade-distinction",
    Grade.MERIT: "grade-merit",
    Grade.PASS: "grade-pass",
    Grade.NOT_ACHIEVED: "grade-not-achieved",
}

_LIST_MARKERS = ("- ", "* ")


@dataclass(frozen=True)
class CriterionItem:
    code: str
    fulfilled: bool
    explanation: str

    @property
    def indicator(self) -> str:
        return "✓" if self.fulfilled else "✗"


@dataclass(frozen=True)
class ReportView:
    grade: str
    grade_class: str
    completion_percentage: float
    completion_bar_width: float
    criteria: tuple[CriterionItem, ...]
    suggestions: tuple[str, ...]
    tips: tuple[str, ...]

    @property
    def completion_label(self) -> str:
        return f"{self.completion_percentage:g}%"


def markdown_to_list_items(markdown: str) -> list[str]:
    """Treat every non-blank line as one bullet, stripping a leading list marker."""
    items: list[str] = []
    for line in (markdown or "").split("\n"):
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.startswith(_LIST_MARKERS):
            stripped = stripped[2:]
        items.append(stripped)
    return items


def render_report(result: AnalysisResult) -> ReportView:
    percentage = result.completion_percentage
    return ReportView(
        grade=result.achieved_grade.value,
        grade_class=GRADE_BADGE_CLASSES[result.achieved_grade],
        completion_percentage=percentage,
        completion_bar_width=min(max(percentage, 0.0), 100.0),
        criteria=tuple(
            CriterionItem(code=item.criterion, fulfilled=item.is_fulfilled, explanation=item.explanation)
            for item in result.criteria_analysis
        ),
        suggestions=tuple(markdown_to_list_items(result.suggestions_for_improvement)),
        tips=tuple(markdown_to_list_items(result.tips_and_tricks)),
    )
