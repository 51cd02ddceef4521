"""
Remote Catalog Service

Lists channel-definition files from the upstream repository tree.
"""
import json
import logging

import httpx

from epg_browser.config import CustomSettings
from epg_browser.exceptions import UpstreamUnavailable
from epg_browser.services.fetch_types import FileDescriptor
from epg_browser.utils.http import fetch_bytes


logger = logging.getLogger(__name__)

GITHUB_ACCEPT = "application/vnd.github.v3+json"


def tree_url(settings: CustomSettings) -> str:
    return (
        f"{settings.github_api_url}/repos/{settings.upstream_repo}"
        f"/git/trees/{settings.upstream_branch}?recursive=1"
    )


async def list_channel_files(client: httpx.AsyncClient, settings: CustomSettings) -> list[FileDescriptor]:
    """
    Fetch the recursive tree listing and keep channel-definition blobs.

    The listing is requested once; retrying a failed refresh is up to the caller.

    Args:
        client: Shared HTTP client
        settings: Upstream location and file naming convention

    Returns:
        FileDescriptors in listing order

    Raises:
        UpstreamUnavailable: If the request fails or the payload has no tree list
    """
    url = tree_url(settings)
    logger.info("Listing upstream tree: %s", url)

    try:
        body = await fetch_bytes(client, url, headers={"Accept": GITHUB_ACCEPT}, max_retries=1)
    except httpx.HTTPError as exc:
        raise UpstreamUnavailable(f"Tree listing request failed: {exc}", {"url": url}) from exc

    try:
        payload = json.loads(body)
    except ValueError as exc:
        raise UpstreamUnavailable(f"Tree listing is not valid JSON: {exc}", {"url": url}) from exc

    tree = payload.get("tree") if isinstance(payload, dict) else None
    if not isinstance(tree, list):
        raise UpstreamUnavailable("Tree listing has no 'tree' field", {"url": url})

    if payload.get("truncated"):
        logger.warning("Upstream tree listing is truncated; some channel files may be missing")

    files = [
        FileDescriptor(path=entry["path"], type=entry["type"])
        for entry in tree
        if _is_channel_file(entry, settings)
    ]

    logger.info("Found %s channel files out of %s tree entries", len(files), len(tree))
    return files


def _is_channel_file(entry: object, settings: CustomSettings) -> bool:
    if not isinstance(entry, dict):
        return False
    path = entry.get("path")
    if not isinstance(path, str):
        return False
    return (
        path.startswith(settings.upstream_directory)
        and path.endswith(settings.channel_file_suffix)
        and entry.get("type") == "blob"
    )
