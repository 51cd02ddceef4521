import httpx
import pytest

from epg_browser.exceptions import UpstreamUnavailable
from epg_browser.services.catalog_service import list_channel_files


@pytest.mark.asyncio
async def test_filters_to_channel_blobs_in_listing_order(http_client, upstream, test_settings):
    upstream.add_tree_entry("README.md", "blob")
    upstream.add_tree_entry("sites", "tree")
    upstream.add_tree_entry("sites/b.tv", "tree")
    upstream.add_file("sites/b.tv/b.tv.channels.xml", b"")
    upstream.add_tree_entry("sites/b.tv/b.tv.config.js", "blob")
    upstream.add_file("sites/a.tv/a.tv_en.channels.xml", b"")
    upstream.add_tree_entry("scripts/old.channels.xml", "blob")
    upstream.add_tree_entry("sites/odd.channels.xml", "tree")

    files = await list_channel_files(http_client, test_settings)

    assert [f.path for f in files] == [
        "sites/b.tv/b.tv.channels.xml",
        "sites/a.tv/a.tv_en.channels.xml",
    ]
    assert all(f.type == "blob" for f in files)
    assert files[0].site_name == "b.tv"


@pytest.mark.asyncio
async def test_requests_recursive_tree_with_github_headers(http_client, upstream, test_settings):
    await list_channel_files(http_client, test_settings)

    [request] = upstream.requests
    assert request.url.path == "/repos/dj1p/epg/git/trees/master"
    assert request.url.params["recursive"] == "1"
    assert request.headers["Accept"] == "application/vnd.github.v3+json"
    assert request.headers["User-Agent"] == "EPG-Browser"


@pytest.mark.asyncio
async def test_server_error_is_upstream_unavailable_without_retry(http_client, upstream, test_settings):
    upstream.tree_status = 503
    upstream.tree_body = b'{"message": "unavailable"}'

    with pytest.raises(UpstreamUnavailable):
        await list_channel_files(http_client, test_settings)

    assert len(upstream.requests) == 1


@pytest.mark.asyncio
async def test_missing_tree_field_is_upstream_unavailable(http_client, upstream, test_settings):
    upstream.tree_body = b'{"message": "API rate limit exceeded"}'

    with pytest.raises(UpstreamUnavailable, match="tree"):
        await list_channel_files(http_client, test_settings)


@pytest.mark.asyncio
async def test_non_json_body_is_upstream_unavailable(http_client, upstream, test_settings):
    upstream.tree_body = b"<html>oops</html>"

    with pytest.raises(UpstreamUnavailable):
        await list_channel_files(http_client, test_settings)


@pytest.mark.asyncio
async def test_connection_error_is_upstream_unavailable(test_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(UpstreamUnavailable):
            await list_channel_files(client, test_settings)
