"""Browser-facing upload and analysis endpoints."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path

from fastapi import APIRouter, File, Request, Response, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from assigncheck.ai.openai_grader import get_assignment_grader
from assigncheck.errors import AssignCheckError, FileReadError, ValidationError
from assigncheck.extraction.base import UploadedDocument
from assigncheck.flow import GradingFlow, get_flow_store
from assigncheck.report import render_report
from assigncheck.schemas import FlowSnapshot, FlowStep
from assigncheck.settings import settings

router = APIRouter(tags=["flow"])

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[1] / "templates"))

ACCEPTED_EXTENSIONS = ".docx,.pdf"


def _session_flow(request: Request) -> tuple[str, GradingFlow]:
    return get_flow_store().get_or_create(request.cookies.get(settings.session_cookie_name))


def _with_session(response: Response, session_id: str) -> Response:
    response.set_cookie(settings.session_cookie_name, session_id, httponly=True, samesite="lax")
    return response


def _redirect_home(session_id: str) -> Response:
    return _with_session(RedirectResponse(url="/", status_code=303), session_id)


async def _read_upload(upload: UploadFile) -> UploadedDocument:
    filename = upload.filename or "upload"
    try:
        content = await upload.read()
    except OSError as exc:
        raise FileReadError(f"Failed to read file {filename}") from exc
    if len(content) > settings.max_upload_bytes:
        raise ValidationError(f"File {filename} exceeds {settings.max_upload_mb}MB")
    return UploadedDocument(content=content, media_type=upload.content_type or "", filename=filename)


async def _select_document(
    request: Request,
    upload: UploadFile,
    select: Callable[[GradingFlow, UploadedDocument], None],
) -> Response:
    session_id, flow = _session_flow(request)
    try:
        document = await _read_upload(upload)
    except AssignCheckError as exc:
        flow.record_error(exc)
        return _redirect_home(session_id)
    await asyncio.to_thread(select, flow, document)
    return _redirect_home(session_id)


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
def index(request: Request) -> Response:
    session_id, flow = _session_flow(request)
    snapshot = flow.snapshot()
    report = None
    if snapshot.step == FlowStep.SHOW_RESULTS and snapshot.result is not None:
        report = render_report(snapshot.result)
    response = templates.TemplateResponse(
        request,
        "index.html",
        {
            "app_name": settings.app_name,
            "flow": snapshot,
            "steps": FlowStep,
            "report": report,
            "accepted": ACCEPTED_EXTENSIONS,
        },
    )
    return _with_session(response, session_id)


@router.post("/assignment")
async def select_assignment(request: Request, file: UploadFile = File(...)) -> Response:
    return await _select_document(request, file, GradingFlow.select_assignment)


@router.post("/assignment/continue")
def continue_to_criteria(request: Request) -> Response:
    session_id, flow = _session_flow(request)
    flow.continue_to_criteria()
    return _redirect_home(session_id)


@router.post("/criteria")
async def select_criteria(request: Request, file: UploadFile = File(...)) -> Response:
    return await _select_document(request, file, GradingFlow.select_criteria)


@router.post("/criteria/back")
def back_to_assignment(request: Request) -> Response:
    session_id, flow = _session_flow(request)
    flow.back_to_assignment()
    return _redirect_home(session_id)


@router.post("/analyze")
def analyze(request: Request) -> Response:
    session_id, flow = _session_flow(request)
    flow.analyze(get_assignment_grader())
    return _redirect_home(session_id)


@router.post("/reset")
def reset(request: Request) -> Response:
    session_id, flow = _session_flow(request)
    flow.reset()
    return _redirect_home(session_id)


@router.get("/api/flow", response_model=FlowSnapshot)
def get_flow(request: Request, response: Response) -> FlowSnapshot:
    session_id, flow = _session_flow(request)
    _with_session(response, session_id)
    return flow.snapshot()
