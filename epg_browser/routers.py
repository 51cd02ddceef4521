from typing import Annotated
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import APIRouter, Depends, Query
import logging

from epg_browser.config import CustomSettings
from epg_browser.database import Database
from epg_browser.dependencies import (
    get_database,
    get_db,
    get_refresh_service,
    get_scheduler,
    get_settings,
)
from epg_browser.exceptions import StoreError
from epg_browser.schemas import (
    ChannelListResponse,
    ErrorResponse,
    FiltersResponse,
    RefreshResponse,
    ReportRequest,
    ReportResponse,
    StatsResponse,
)
from epg_browser.services import (
    ChannelRefreshService,
    RefreshScheduler,
    add_report,
    build_search_filter,
    get_channel_page,
    get_filters,
    get_stats_response,
    resolve_pagination,
)


logger = logging.getLogger(__name__)

main_router = APIRouter()

STORE_ERROR_RESPONSES = {500: {"model": ErrorResponse, "description": "Channel store failure"}}
REFRESH_ERROR_RESPONSES = {
    **STORE_ERROR_RESPONSES,
    502: {"model": ErrorResponse, "description": "Upstream repository listing failed"},
}


@main_router.get("/health")
async def health_check(
    refresh_service: Annotated[ChannelRefreshService, Depends(get_refresh_service)],
    scheduler: Annotated[RefreshScheduler | None, Depends(get_scheduler)],
) -> dict:
    """Health check endpoint"""
    next_run = scheduler.get_next_run_time() if scheduler else None
    return {
        "status": "ok",
        "refreshing": refresh_service.is_refreshing(),
        "scheduler_running": scheduler.running if scheduler else False,
        "next_refresh": next_run.isoformat() if next_run else None
    }


@main_router.get("/api/channels", response_model=ChannelListResponse, responses=STORE_ERROR_RESPONSES)
async def list_channels(
    db: Annotated[AsyncSession, Depends(get_db)],
    settings: Annotated[CustomSettings, Depends(get_settings)],
    search: Annotated[str | None, Query(description="Substring of name, country or xmltv_id")] = None,
    site: Annotated[str | None, Query(description="Exact site")] = None,
    lang: Annotated[str | None, Query(description="Exact language code")] = None,
    page: Annotated[str | None, Query(description="1-based page number")] = None,
    limit: Annotated[str | None, Query(description="Page size")] = None,
) -> ChannelListResponse:
    """
    Get a filtered, name-ordered page of channels

    Invalid page/limit values fall back to defaults instead of failing.
    """
    resolved_page, resolved_limit = resolve_pagination(
        page,
        limit,
        default_limit=settings.default_page_limit,
        max_limit=settings.max_page_limit,
    )
    search_filter = build_search_filter(search, site, lang)
    return await get_channel_page(db, search_filter, resolved_page, resolved_limit)


@main_router.get("/api/filters", response_model=FiltersResponse, responses=STORE_ERROR_RESPONSES)
async def list_filters(db: Annotated[AsyncSession, Depends(get_db)]) -> FiltersResponse:
    """Distinct sites, languages and countries"""
    return await get_filters(db)


@main_router.get("/api/stats", response_model=StatsResponse, responses=STORE_ERROR_RESPONSES)
async def stats(db: Annotated[AsyncSession, Depends(get_db)]) -> StatsResponse:
    return await get_stats_response(db)


@main_router.post("/api/refresh", response_model=RefreshResponse, responses=REFRESH_ERROR_RESPONSES)
async def trigger_refresh(
    refresh_service: Annotated[ChannelRefreshService, Depends(get_refresh_service)],
) -> RefreshResponse:
    """
    Run a full refresh from the upstream repository and wait for it

    A request arriving while a refresh runs waits for that refresh instead of
    starting another one.
    """
    logger.info("Manual channel refresh triggered via API")
    result = await refresh_service.refresh()

    return RefreshResponse(
        channelCount=result.channel_count,
        lastUpdate=result.last_update,
        filesProcessed=result.files_total,
        filesFailed=result.files_failed,
    )


@main_router.post("/api/report", response_model=ReportResponse, responses=STORE_ERROR_RESPONSES)
async def report_channel(
    request: ReportRequest,
    database: Annotated[Database, Depends(get_database)],
) -> ReportResponse:
    """Store a problem report for a channel"""
    try:
        async with database.session_scope() as session:
            report = await add_report(
                session,
                reason=request.reason,
                channel_id=request.channel_id,
                xmltv_id=request.xmltv_id,
                channel_name=request.channel_name,
                site=request.site,
            )
            report_id = report.id
    except SQLAlchemyError as exc:
        logger.error("Failed to store report: %s", exc, exc_info=True)
        raise StoreError(f"Failed to submit report: {exc}") from exc

    return ReportResponse(id=report_id)
