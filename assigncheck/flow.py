"""Upload -> analyze -> results flow for one browser session."""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from uuid import uuid4

from assigncheck.ai.openai_grader import AssignmentGrader
from assigncheck.errors import AssignCheckError, InvalidStepError, ValidationError
from assigncheck.extraction.base import UploadedDocument
from assigncheck.extraction.dispatch import extract_text
from assigncheck.schemas import AnalysisResult, DocumentRead, FlowSnapshot, FlowStep
from assigncheck.settings import settings

logger = logging.getLogger(__name__)

Extractor = Callable[[UploadedDocument], str]

MISSING_CONTENT_MESSAGE = "Both assignment and criteria content are required."
UNKNOWN_ANALYSIS_ERROR_MESSAGE = "An unknown error occurred during analysis."

_ALLOWED_TRANSITIONS: dict[FlowStep, frozenset[FlowStep]] = {
    FlowStep.SELECT_ASSIGNMENT: frozenset({FlowStep.SELECT_CRITERIA}),
    FlowStep.SELECT_CRITERIA: frozenset({FlowStep.SELECT_ASSIGNMENT, FlowStep.ANALYZING}),
    FlowStep.ANALYZING: frozenset({FlowStep.SHOW_RESULTS, FlowStep.SELECT_CRITERIA}),
    FlowStep.SHOW_RESULTS: frozenset({FlowStep.SELECT_ASSIGNMENT}),
}


def _document_read(document: UploadedDocument | None) -> DocumentRead | None:
    if document is None:
        return None
    return DocumentRead(filename=document.filename, media_type=document.media_type, size_bytes=document.size)


class GradingFlow:
    """Four-step state machine holding the uploaded documents and the single result.

    Failures never escape an operation: they are recorded in ``error`` and the
    step is left where the failure policy puts it.
    """

    def __init__(self, extractor: Extractor = extract_text) -> None:
        self._extractor = extractor
        self._lock = threading.RLock()
        self.step = FlowStep.SELECT_ASSIGNMENT
        self.error: str | None = None
        self.assignment_document: UploadedDocument | None = None
        self.assignment_text: str | None = None
        self.criteria_document: UploadedDocument | None = None
        self.criteria_text: str | None = None
        self.result: AnalysisResult | None = None

    def _require_step(self, step: FlowStep) -> None:
        if self.step != step:
            raise InvalidStepError(f"That action is not available right now (current step: {self.step.value}).")

    def _move_to(self, step: FlowStep) -> None:
        if step not in _ALLOWED_TRANSITIONS[self.step]:
            raise InvalidStepError(f"Cannot move from {self.step.value} to {step.value}.")
        self.step = step

    def record_error(self, exc: AssignCheckError) -> None:
        self.error = exc.message
        logger.info("flow action failed", extra={"step": self.step.value, "error_type": type(exc).__name__})

    def select_assignment(self, document: UploadedDocument) -> None:
        with self._lock:
            try:
                self._require_step(FlowStep.SELECT_ASSIGNMENT)
                self.error = None
                self.assignment_document = document
                self.assignment_text = None
                self.assignment_text = self._extractor(document)
            except AssignCheckError as exc:
                if self.assignment_document is document:
                    self.assignment_document = None
                self.record_error(exc)

    def continue_to_criteria(self) -> None:
        with self._lock:
            try:
                self._require_step(FlowStep.SELECT_ASSIGNMENT)
                if self.assignment_document is None or self.assignment_text is None:
                    raise ValidationError("Upload an assignment before continuing.")
                self.error = None
                self._move_to(FlowStep.SELECT_CRITERIA)
            except AssignCheckError as exc:
                self.record_error(exc)

    def select_criteria(self, document: UploadedDocument) -> None:
        with self._lock:
            try:
                self._require_step(FlowStep.SELECT_CRITERIA)
                self.error = None
                self.criteria_document = document
                self.criteria_text = None
                self.criteria_text = self._extractor(document)
            except AssignCheckError as exc:
                if self.criteria_document is document:
                    self.criteria_document = None
                self.record_error(exc)

    def back_to_assignment(self) -> None:
        with self._lock:
            try:
                self._require_step(FlowStep.SELECT_CRITERIA)
                self._move_to(FlowStep.SELECT_ASSIGNMENT)
                self.criteria_document = None
                self.criteria_text = None
                self.error = None
            except AssignCheckError as exc:
                self.record_error(exc)

    def analyze(self, grader: AssignmentGrader) -> None:
        with self._lock:
            try:
                self._require_step(FlowStep.SELECT_CRITERIA)
                if self.criteria_document is None:
                    raise ValidationError("Upload the grading criteria before analyzing.")
                if not self.assignment_text or not self.criteria_text:
                    raise ValidationError(MISSING_CONTENT_MESSAGE)
            except AssignCheckError as exc:
                self.record_error(exc)
                return

            self.error = None
            self._move_to(FlowStep.ANALYZING)
            try:
                result = grader.analyze(self.assignment_text, self.criteria_text)
            except AssignCheckError as exc:
                self._move_to(FlowStep.SELECT_CRITERIA)
                self.record_error(exc)
                return
            except Exception:
                logger.exception("analysis failed unexpectedly", extra={"stage": "analyze"})
                self._move_to(FlowStep.SELECT_CRITERIA)
                self.error = UNKNOWN_ANALYSIS_ERROR_MESSAGE
                return

            self.result = result
            self._move_to(FlowStep.SHOW_RESULTS)

    def reset(self) -> None:
        with self._lock:
            self.step = FlowStep.SELECT_ASSIGNMENT
            self.error = None
            self.assignment_document = None
            self.assignment_text = None
            self.criteria_document = None
            self.criteria_text = None
            self.result = None

    def snapshot(self) -> FlowSnapshot:
        # Lock-free so a page load during ANALYZING shows the loader instead of blocking.
        return FlowSnapshot(
            step=self.step,
            error=self.error,
            assignment=_document_read(self.assignment_document),
            criteria=_document_read(self.criteria_document),
            has_assignment_text=self.assignment_text is not None,
            has_criteria_text=self.criteria_text is not None,
            result=self.result,
        )


class FlowStore:
    """In-memory flows keyed by session id. Nothing outlives the process.

    The store is bounded: flows idle for longer than ``ttl_seconds`` are
    dropped, and past ``max_sessions`` the least recently used flow is evicted.
    """

    def __init__(
        self,
        factory: Callable[[], GradingFlow] = GradingFlow,
        max_sessions: int | None = None,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._factory = factory
        self._max_sessions = settings.max_sessions if max_sessions is None else max_sessions
        self._ttl_seconds = settings.session_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._flows: OrderedDict[str, tuple[GradingFlow, float]] = OrderedDict()
        self._lock = threading.Lock()

    def _evict(self, now: float) -> None:
        while self._flows:
            session_id, (_, last_seen) = next(iter(self._flows.items()))
            if now - last_seen <= self._ttl_seconds and len(self._flows) < self._max_sessions:
                break
            del self._flows[session_id]
            logger.info("flow session evicted", extra={"session_id": session_id})

    def get_or_create(self, session_id: str | None) -> tuple[str, GradingFlow]:
        with self._lock:
            now = self._clock()
            if session_id and session_id in self._flows:
                flow, last_seen = self._flows[session_id]
                if now - last_seen <= self._ttl_seconds:
                    self._flows[session_id] = (flow, now)
                    self._flows.move_to_end(session_id)
                    return session_id, flow
                del self._flows[session_id]
            self._evict(now)
            new_id = uuid4().hex
            flow = self._factory()
            self._flows[new_id] = (flow, now)
            return new_id, flow

    def __len__(self) -> int:
        return len(self._flows)


_flow_store: FlowStore | None = None


def get_flow_store() -> FlowStore:
    global _flow_store
    if _flow_store is None:
        _flow_store = FlowStore()
    return _flow_store


def reset_flow_store() -> None:
    global _flow_store
    _flow_store = None
