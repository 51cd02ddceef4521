"""
Database operations for channel data

This module contains all database operations for channels, refresh metadata and reports.
"""
import logging
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import DateTime, bindparam, delete, func, or_, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from epg_browser.database import Database
from epg_browser.exceptions import StoreError
from epg_browser.models import Channel, Metadata, Report
from epg_browser.services.fetch_types import ChannelPayload, SearchFilter
from epg_browser.utils.timezone import format_iso8601_utc, utc_now


logger = logging.getLogger(__name__)

LAST_UPDATE_KEY = "last_update"

_channel_insert_stmt = text(
    """
    INSERT INTO channels (site, lang, xmltv_id, site_id, name, country, created_at)
    VALUES (:site, :lang, :xmltv_id, :site_id, :name, :country, :created_at)
    """
).bindparams(bindparam("created_at", type_=DateTime()))

_metadata_upsert_stmt = text(
    """
    INSERT INTO metadata (key, value, updated_at)
    VALUES (:key, :value, :updated_at)
    ON CONFLICT(key) DO UPDATE SET
        value = excluded.value,
        updated_at = excluded.updated_at
    """
).bindparams(bindparam("updated_at", type_=DateTime()))


async def _insert_channels(
    db: AsyncSession,
    channels: Sequence[ChannelPayload],
    created_at: datetime,
    chunk_size: int,
) -> int:
    """Insert channels in executemany chunks, returns number of rows sent"""
    inserted = 0
    for start_index in range(0, len(channels), chunk_size):
        chunk = channels[start_index:start_index + chunk_size]
        payload = [
            {
                "site": channel.site,
                "lang": channel.lang,
                "xmltv_id": channel.xmltv_id,
                "site_id": channel.site_id,
                "name": channel.name,
                "country": channel.country,
                "created_at": created_at,
            }
            for channel in chunk
        ]
        await db.execute(_channel_insert_stmt, payload)
        inserted += len(payload)
        logger.debug("Inserted channel chunk: %s rows (%s total)", len(payload), inserted)
    return inserted


async def set_metadata(db: AsyncSession, key: str, value: str) -> None:
    """Upsert a metadata key"""
    await db.execute(
        _metadata_upsert_stmt,
        {"key": key, "value": value, "updated_at": utc_now()},
    )


async def replace_all_channels(
    database: Database,
    channels: Sequence[ChannelPayload],
    *,
    chunk_size: int = 1000,
) -> tuple[int, str]:
    """
    Replace the whole channel set and stamp last_update in one transaction.

    Either the previous set survives untouched or the new set is fully in
    place together with the new last_update.

    Args:
        database: Database handle
        channels: Complete new channel set
        chunk_size: Rows per executemany call

    Returns:
        Tuple of (stored channel count, last_update ISO8601 string)

    Raises:
        StoreError: If any step fails (the transaction is rolled back)
    """
    channel_list = list(channels)
    now = utc_now()
    last_update = format_iso8601_utc(now)

    logger.info("Replacing channel set with %s channels", len(channel_list))

    try:
        async with database.session_scope() as session:
            result = await session.execute(delete(Channel))
            logger.debug("Deleted %s existing channels", result.rowcount)

            inserted = await _insert_channels(session, channel_list, now, chunk_size)
            await set_metadata(session, LAST_UPDATE_KEY, last_update)
    except SQLAlchemyError as exc:
        logger.error("Channel replace failed, previous channel set kept: %s", exc, exc_info=True)
        raise StoreError(f"Failed to store channels: {exc}") from exc

    logger.info("Stored %s channels (last_update=%s)", inserted, last_update)
    return inserted, last_update


def _apply_filter(stmt, search_filter: SearchFilter):
    if search_filter.search:
        term = search_filter.search
        stmt = stmt.where(
            or_(
                Channel.name.icontains(term, autoescape=True),
                Channel.country.icontains(term, autoescape=True),
                Channel.xmltv_id.icontains(term, autoescape=True),
            )
        )
    if search_filter.site:
        stmt = stmt.where(Channel.site == search_filter.site)
    if search_filter.lang:
        stmt = stmt.where(Channel.lang == search_filter.lang)
    return stmt


async def query_channels(
    db: AsyncSession,
    search_filter: SearchFilter,
    page: int,
    limit: int,
) -> tuple[list[Channel], int]:
    """
    Filtered, name-ordered page of channels

    Args:
        db: Database session
        search_filter: Optional site/lang/search constraints
        page: 1-based page number
        limit: Page size

    Returns:
        Tuple of (channels on the page, total matching count)
    """
    count_stmt = _apply_filter(select(func.count(Channel.id)), search_filter)
    total_count = (await db.execute(count_stmt)).scalar_one()

    page_stmt = (
        _apply_filter(select(Channel), search_filter)
        .order_by(Channel.name, Channel.id)
        .limit(limit)
        .offset((page - 1) * limit)
    )
    rows = list((await db.execute(page_stmt)).scalars().all())

    logger.debug(
        "Channel query %s page=%s limit=%s -> %s/%s",
        search_filter,
        page,
        limit,
        len(rows),
        total_count,
    )
    return rows, total_count


async def _distinct_values(db: AsyncSession, column) -> list[str]:
    result = await db.execute(select(column).distinct().order_by(column))
    return list(result.scalars().all())


async def get_distinct_sites(db: AsyncSession) -> list[str]:
    return await _distinct_values(db, Channel.site)


async def get_distinct_languages(db: AsyncSession) -> list[str]:
    return await _distinct_values(db, Channel.lang)


async def get_distinct_countries(db: AsyncSession) -> list[str]:
    return await _distinct_values(db, Channel.country)


async def count_channels(db: AsyncSession) -> int:
    return (await db.execute(select(func.count(Channel.id)))).scalar_one()


async def get_last_update(db: AsyncSession) -> str | None:
    """Timestamp of the last successful refresh, None before the first one"""
    result = await db.execute(select(Metadata.value).where(Metadata.key == LAST_UPDATE_KEY))
    return result.scalar_one_or_none()


async def get_stats(db: AsyncSession) -> tuple[int, str | None]:
    return await count_channels(db), await get_last_update(db)


async def add_report(
    db: AsyncSession,
    *,
    reason: str,
    channel_id: int | None = None,
    xmltv_id: str | None = None,
    channel_name: str | None = None,
    site: str | None = None,
) -> Report:
    """Append a channel problem report"""
    report = Report(
        channel_id=channel_id,
        xmltv_id=xmltv_id,
        channel_name=channel_name,
        site=site,
        reason=reason,
    )
    db.add(report)
    await db.flush()
    logger.info("Stored report %s for channel %s (%s)", report.id, channel_id, xmltv_id)
    return report
