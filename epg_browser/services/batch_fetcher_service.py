"""
Channel File Batch Fetcher

Downloads and parses channel files in fixed-size concurrent batches with a
pause between batches to stay under the upstream request rate limits.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

import httpx

from epg_browser.services.channel_parser_service import parse_channel_file
from epg_browser.services.fetch_types import BatchFetchSummary, FileDescriptor, FileFetchResult
from epg_browser.utils.http import fetch_bytes
from epg_browser.utils.logging_helpers import log_batch_progress


logger = logging.getLogger(__name__)


def raw_file_url(raw_base_url: str, repo: str, branch: str, path: str) -> str:
    return f"{raw_base_url}/{repo}/{branch}/{path}"


async def fetch_channel_file(
    client: httpx.AsyncClient,
    descriptor: FileDescriptor,
    url: str,
    *,
    max_retries: int = 3,
) -> FileFetchResult:
    """
    Download and parse a single channel file.

    Never raises: any failure is returned as a failed result so one bad file
    cannot abort its batch.
    """
    try:
        content = await fetch_bytes(client, url, max_retries=max_retries)
        loop = asyncio.get_running_loop()
        channels = await loop.run_in_executor(
            None,
            parse_channel_file,
            content,
            descriptor.path,
        )
    except Exception as exc:
        logger.warning("Error processing %s: %s", descriptor.path, exc)
        return FileFetchResult(path=descriptor.path, status="failed", error=str(exc))

    logger.debug("Parsed %s channels from %s", len(channels), descriptor.path)
    return FileFetchResult(path=descriptor.path, status="success", channels=channels)


async def fetch_all_channels(
    client: httpx.AsyncClient,
    files: Sequence[FileDescriptor],
    *,
    raw_base_url: str,
    repo: str,
    branch: str,
    batch_size: int = 5,
    pause_seconds: float = 1.0,
    max_retries: int = 3,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> BatchFetchSummary:
    """
    Fetch and parse every file, batch by batch.

    Args:
        client: Shared HTTP client
        files: Channel files in listing order
        raw_base_url: Base URL for raw file content
        repo: Upstream repository ('owner/name')
        branch: Upstream branch
        batch_size: Files fetched concurrently per batch
        pause_seconds: Delay between batches (not after the last one)
        max_retries: Attempts per file download
        sleep: Awaitable used for the pause

    Returns:
        BatchFetchSummary with one result per file, in input order
    """
    if batch_size <= 0:
        raise ValueError("batch_size must be > 0")

    summary = BatchFetchSummary()
    total_files = len(files)
    channel_count = 0

    for start_index in range(0, total_files, batch_size):
        batch = files[start_index:start_index + batch_size]

        results = await asyncio.gather(*[
            fetch_channel_file(
                client,
                descriptor,
                raw_file_url(raw_base_url, repo, branch, descriptor.path),
                max_retries=max_retries,
            )
            for descriptor in batch
        ])
        summary.results.extend(results)
        channel_count += sum(len(result.channels) for result in results)

        processed = min(start_index + batch_size, total_files)
        log_batch_progress(logger, processed, total_files, channel_count)

        if processed < total_files and pause_seconds > 0:
            await sleep(pause_seconds)

    failed = summary.failed
    if failed:
        logger.warning(
            "%s of %s channel files failed: %s",
            len(failed),
            total_files,
            ", ".join(result.path for result in failed[:10]),
        )

    return summary
