"""
Channel Query Service

Business logic for the browsing API. Translates loosely-typed query
parameters into store queries and response envelopes.
"""
import logging
import math

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from epg_browser.exceptions import StoreError
from epg_browser.schemas import (
    ChannelListResponse,
    ChannelRecord,
    FiltersResponse,
    Pagination,
    StatsResponse,
)
from epg_browser.services import db_service
from epg_browser.services.fetch_types import SearchFilter

logger = logging.getLogger(__name__)

# Largest OFFSET SQLite accepts (signed 64-bit INTEGER)
SQLITE_MAX_OFFSET = 2**63 - 1


def _parse_positive_int(value: str | int | None) -> int | None:
    if value is None:
        return None
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return None
    return parsed if parsed >= 1 else None


def resolve_pagination(
    page: str | int | None,
    limit: str | int | None,
    *,
    default_limit: int = 100,
    max_limit: int = 1000,
) -> tuple[int, int]:
    """
    Turn raw page/limit parameters into safe values

    Invalid or non-positive values fall back to page 1 and the default
    limit instead of failing; the limit is capped at max_limit. The page is
    clamped so its row offset stays within SQLite's INTEGER range.
    """
    resolved_page = _parse_positive_int(page) or 1
    resolved_limit = min(_parse_positive_int(limit) or default_limit, max_limit)
    max_page = SQLITE_MAX_OFFSET // resolved_limit + 1
    return min(resolved_page, max_page), resolved_limit


def build_search_filter(
    search: str | None = None,
    site: str | None = None,
    lang: str | None = None,
) -> SearchFilter:
    """Empty parameters mean 'no constraint'"""
    return SearchFilter(search=search or None, site=site or None, lang=lang or None)


def total_pages(total_count: int, limit: int) -> int:
    return math.ceil(total_count / limit)


async def get_channel_page(
    db: AsyncSession,
    search_filter: SearchFilter,
    page: int,
    limit: int,
) -> ChannelListResponse:
    """
    Get one page of channels plus pagination summary

    Args:
        db: Database session
        search_filter: Site/lang/search constraints
        page: 1-based page number
        limit: Page size

    Returns:
        ChannelListResponse envelope
    """
    try:
        rows, total_count = await db_service.query_channels(db, search_filter, page, limit)
        last_update = await db_service.get_last_update(db)
    except SQLAlchemyError as exc:
        logger.error("Channel query failed: %s", exc, exc_info=True)
        raise StoreError(f"Failed to fetch channels: {exc}") from exc

    return ChannelListResponse(
        channels=[ChannelRecord.model_validate(row) for row in rows],
        pagination=Pagination(
            page=page,
            limit=limit,
            totalCount=total_count,
            totalPages=total_pages(total_count, limit),
        ),
        lastUpdate=last_update,
    )


async def get_filters(db: AsyncSession) -> FiltersResponse:
    try:
        return FiltersResponse(
            sites=await db_service.get_distinct_sites(db),
            languages=await db_service.get_distinct_languages(db),
            countries=await db_service.get_distinct_countries(db),
        )
    except SQLAlchemyError as exc:
        logger.error("Filter query failed: %s", exc, exc_info=True)
        raise StoreError(f"Failed to fetch filters: {exc}") from exc


async def get_stats_response(db: AsyncSession) -> StatsResponse:
    try:
        total, last_update = await db_service.get_stats(db)
    except SQLAlchemyError as exc:
        logger.error("Stats query failed: %s", exc, exc_info=True)
        raise StoreError(f"Failed to fetch stats: {exc}") from exc
    return StatsResponse(totalChannels=total, lastUpdate=last_update)
