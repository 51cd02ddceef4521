"""
Channel Refresh Service

Coordinates listing, batched download/parse and the atomic store replace
for one refresh cycle.
"""
from __future__ import annotations

import logging

import httpx

from epg_browser.config import CustomSettings
from epg_browser.database import Database
from epg_browser.services.batch_fetcher_service import fetch_all_channels
from epg_browser.services.catalog_service import list_channel_files
from epg_browser.services.db_service import replace_all_channels
from epg_browser.services.fetch_types import RefreshResult
from epg_browser.services.refresh_coordinator import RefreshCoordinator
from epg_browser.utils.logging_helpers import log_refresh_end, log_refresh_start


logger = logging.getLogger(__name__)


class ChannelRefreshService:
    """Runs full refreshes against the upstream repository, one at a time."""

    def __init__(
        self,
        database: Database,
        http_client: httpx.AsyncClient,
        settings: CustomSettings,
        coordinator: RefreshCoordinator | None = None,
    ) -> None:
        self.database = database
        self.http_client = http_client
        self.settings = settings
        self.coordinator = coordinator or RefreshCoordinator()

    async def refresh(self) -> RefreshResult:
        """
        Main entry point for channel refreshes with concurrency protection.

        Raises:
            UpstreamUnavailable: Listing failed; the store was not touched
            StoreError: The replace failed and was rolled back
        """
        return await self.coordinator.execute(self._refresh)

    def is_refreshing(self) -> bool:
        return self.coordinator.is_refreshing()

    async def _refresh(self) -> RefreshResult:
        log_refresh_start(logger)

        files = await list_channel_files(self.http_client, self.settings)

        summary = await fetch_all_channels(
            self.http_client,
            files,
            raw_base_url=self.settings.raw_base_url,
            repo=self.settings.upstream_repo,
            branch=self.settings.upstream_branch,
            batch_size=self.settings.fetch_batch_size,
            pause_seconds=self.settings.fetch_batch_pause_sec,
            max_retries=self.settings.http_max_retries,
        )

        channel_count, last_update = await replace_all_channels(
            self.database,
            summary.channels,
            chunk_size=self.settings.channels_chunk_size,
        )

        files_failed = len(summary.failed)
        log_refresh_end(logger, channel_count, files_failed)

        return RefreshResult(
            channel_count=channel_count,
            last_update=last_update,
            files_total=len(files),
            files_failed=files_failed,
        )
