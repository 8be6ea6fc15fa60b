"""HTTP route definitions for the service."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Path, Query, Request, UploadFile, status

from app.schemas import (
    LoadDataResponse,
    PageMeta,
    ParsePreviewResponse,
    PeriodResponse,
    StatRow,
    StatsPage,
)
from datastore.repository import StorageError
from models.records import PeriodStat
from services.readings import Page, ReadingService, decode_upload
from settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter()


def get_reading_service(request: Request) -> ReadingService:
    return request.app.state.reading_service


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def _read_upload(file: Optional[UploadFile]) -> str:
    if file is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file uploaded.",
        )
    file.file.seek(0)
    contents = file.file.read()
    try:
        return decode_upload(contents)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


def _resolve_limit(limit: Optional[int], settings: Settings) -> int:
    if limit is None:
        return settings.default_page_limit
    return min(limit, settings.max_page_limit)


def _page_response(page: Page, rows: list[StatRow]) -> StatsPage:
    return StatsPage(
        data=rows,
        meta=PageMeta(total=page.total, page=page.page, total_pages=page.total_pages),
    )


def _storage_failure(exc: StorageError) -> HTTPException:
    logger.error("Storage operation failed: %s", exc, exc_info=exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(exc),
    )


@router.post(
    "/load-data",
    status_code=status.HTTP_201_CREATED,
    response_model=LoadDataResponse,
    summary="Parse an uploaded text file and store its readings.",
)
def load_data(
    file: Optional[UploadFile] = File(None, description="Plain text file of dated readings."),
    service: ReadingService = Depends(get_reading_service),
) -> LoadDataResponse:
    filename = file.filename if file is not None else None
    text = _read_upload(file)
    try:
        result = service.load_text(text, filename=filename)
    except StorageError as exc:
        raise _storage_failure(exc) from exc
    return LoadDataResponse(
        message=f"Stored {result.count} readings.",
        count=result.count,
        warnings=result.warnings,
    )


@router.post(
    "/parse",
    response_model=ParsePreviewResponse,
    summary="Parse an uploaded text file without storing it.",
)
def parse_data(
    file: Optional[UploadFile] = File(None, description="Plain text file of dated readings."),
    service: ReadingService = Depends(get_reading_service),
) -> ParsePreviewResponse:
    result = service.preview(_read_upload(file))
    daily = service.aggregator.daily(result.readings)
    monthly = service.aggregator.monthly(daily)
    return ParsePreviewResponse(
        count=len(result.readings),
        warnings=result.warnings,
        daily=[StatRow.from_daily(stat) for stat in daily],
        monthly=[StatRow.from_monthly(stat) for stat in monthly],
    )


@router.get(
    "/stats/daily",
    response_model=StatsPage,
    summary="Paginated per-day statistics, newest first.",
)
def daily_stats(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    service: ReadingService = Depends(get_reading_service),
    settings: Settings = Depends(get_app_settings),
) -> StatsPage:
    try:
        result = service.daily_page(page, _resolve_limit(limit, settings))
    except StorageError as exc:
        raise _storage_failure(exc) from exc
    return _page_response(result, [StatRow.from_daily(stat) for stat in result.items])


@router.get(
    "/stats/monthly",
    response_model=StatsPage,
    summary="Paginated per-month statistics, newest first.",
)
def monthly_stats(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    service: ReadingService = Depends(get_reading_service),
    settings: Settings = Depends(get_app_settings),
) -> StatsPage:
    try:
        result = service.monthly_page(page, _resolve_limit(limit, settings))
    except StorageError as exc:
        raise _storage_failure(exc) from exc
    return _page_response(result, [StatRow.from_monthly(stat) for stat in result.items])


@router.get(
    "/stats/month/{year}/{month}",
    response_model=PeriodResponse,
    summary="Statistics for one calendar month.",
)
def month_stats(
    year: int = Path(..., ge=1, le=9999),
    month: int = Path(..., ge=1, le=12),
    service: ReadingService = Depends(get_reading_service),
) -> PeriodResponse:
    return _period_response(lambda: service.month_stats(year, month))


@router.get(
    "/stats/day/{year}/{month}/{day}",
    response_model=PeriodResponse,
    summary="Statistics for one calendar day.",
)
def day_stats(
    year: int = Path(..., ge=1, le=9999),
    month: int = Path(..., ge=1, le=12),
    day: int = Path(..., ge=1, le=31),
    service: ReadingService = Depends(get_reading_service),
) -> PeriodResponse:
    return _period_response(lambda: service.day_stats(year, month, day))


def _period_response(lookup: Callable[[], PeriodStat]) -> PeriodResponse:
    try:
        stat = lookup()
    except (ValueError, OverflowError) as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc
    except StorageError as exc:
        raise _storage_failure(exc) from exc
    return PeriodResponse.from_stat(stat)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
