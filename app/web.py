from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app.api import get_app_settings, get_reading_service
from app.schemas import StatRow
from datastore.repository import StorageError
from services.parser import ParseResult
from services.readings import ReadingService, decode_upload
from settings import Settings

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

_DAY_QUERY = re.compile(r"(\d{4})-(\d{2})-(\d{2})")
_MONTH_QUERY = re.compile(r"(\d{4})-(\d{2})")

router = APIRouter(include_in_schema=False)


def _normalize_view(view: Optional[str]) -> str:
    return "month" if view == "month" else "day"


def _local_rows(service: ReadingService, result: ParseResult, view: str, term: str) -> List[StatRow]:
    daily = service.aggregator.filter_daily(service.aggregator.daily(result.readings), term)
    if view == "month":
        return [StatRow.from_monthly(stat) for stat in service.aggregator.monthly(daily)]
    return [StatRow.from_daily(stat) for stat in daily]


async def _read_text(text: Optional[str], file: Optional[UploadFile]) -> str:
    if file is not None and file.filename:
        contents = await file.read()
        if contents:
            return decode_upload(contents)
    return text or ""


def _render_local(
    request: Request,
    service: ReadingService,
    result: ParseResult,
    view: str,
    term: str,
    text: str,
    upload_status: str = "idle",
    error: Optional[str] = None,
) -> HTMLResponse:
    context: Dict[str, Any] = {
        "source": "local",
        "view": view,
        "q": term,
        "text": text,
        "rows": _local_rows(service, result, view, term),
        "warnings": result.warnings,
        "upload_status": upload_status,
        "page": 1,
        "total_pages": 1,
        "error": error,
    }
    return templates.TemplateResponse(request, "ui/index.html", context)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
def ui_index(
    request: Request,
    view: Optional[str] = Query(None),
    q: str = Query(""),
    page: int = Query(1, ge=1),
    service: ReadingService = Depends(get_reading_service),
    settings: Settings = Depends(get_app_settings),
) -> HTMLResponse:
    view = _normalize_view(view)
    term = q.strip()
    rows: List[StatRow] = []
    total_pages = 1
    error: Optional[str] = None

    try:
        day_match = _DAY_QUERY.fullmatch(term)
        month_match = _MONTH_QUERY.fullmatch(term)
        if day_match:
            year, month, day = (int(part) for part in day_match.groups())
            rows = [StatRow.from_period(service.day_stats(year, month, day))]
        elif month_match:
            year, month = (int(part) for part in month_match.groups())
            rows = [StatRow.from_period(service.month_stats(year, month))]
        elif view == "month":
            result = service.monthly_page(page, settings.default_page_limit)
            rows = [StatRow.from_monthly(stat) for stat in result.items]
            page, total_pages = result.page, result.total_pages
        else:
            result = service.daily_page(page, settings.default_page_limit)
            rows = [StatRow.from_daily(stat) for stat in result.items]
            page, total_pages = result.page, result.total_pages
    except StorageError:
        logger.exception("Dashboard could not fetch statistics")
        error = "Could not fetch from database. Is the server running?"
    except (ValueError, OverflowError):
        error = f"{term} is not a calendar date."

    context: Dict[str, Any] = {
        "source": "database",
        "view": view,
        "q": term,
        "text": "",
        "rows": rows,
        "warnings": [],
        "upload_status": "idle",
        "page": page,
        "total_pages": total_pages,
        "error": error,
    }
    return templates.TemplateResponse(request, "ui/index.html", context)


@router.post("/ui/preview", name="ui_preview", response_class=HTMLResponse)
async def ui_preview(
    request: Request,
    text: Optional[str] = Form(None),
    view: Optional[str] = Form(None),
    q: str = Form(""),
    file: Optional[UploadFile] = File(None),
    service: ReadingService = Depends(get_reading_service),
) -> HTMLResponse:
    try:
        body = await _read_text(text, file)
    except ValueError as exc:
        return _render_local(
            request, service, ParseResult(warnings=[str(exc)]), _normalize_view(view), q, ""
        )
    result = service.preview(body)
    return _render_local(request, service, result, _normalize_view(view), q.strip(), body)


@router.post("/ui/upload", name="ui_upload", response_class=HTMLResponse)
async def ui_upload(
    request: Request,
    text: Optional[str] = Form(None),
    view: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    service: ReadingService = Depends(get_reading_service),
) -> HTMLResponse:
    try:
        body = await _read_text(text, file)
    except ValueError as exc:
        return _render_local(
            request, service, ParseResult(warnings=[str(exc)]), _normalize_view(view), "", ""
        )

    if not body.strip():
        return _render_local(
            request, service, ParseResult(), _normalize_view(view), "", "", error="No file uploaded."
        )

    result = service.preview(body)
    try:
        filename = file.filename if file is not None else None
        await run_in_threadpool(service.persist, result, filename=filename)
        upload_status = "success"
    except StorageError:
        logger.exception("Dashboard upload could not be stored")
        upload_status = "error"
    return _render_local(request, service, result, _normalize_view(view), "", body, upload_status)
