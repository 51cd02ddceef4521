import os
import tempfile

# Set env vars BEFORE any app imports trigger CustomSettings()
os.environ.setdefault("DATABASE_PATH", os.path.join(tempfile.gettempdir(), "epg-browser-tests", "default.db"))
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("REFRESH_ON_STARTUP", "false")

import json

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from epg_browser.config import CustomSettings
from epg_browser.database import Database
from epg_browser.main import create_app, create_http_client
from epg_browser.services.fetch_types import ChannelPayload
from epg_browser.services.refresh_service import ChannelRefreshService

API_URL = "https://api.github.test"
RAW_URL = "https://raw.github.test"


def channels_xml(*entries: str) -> bytes:
    """Wrap <channel> lines in a channels document"""
    body = "\n".join(f"  {entry}" for entry in entries)
    return f'<?xml version="1.0" encoding="UTF-8"?>\n<channels>\n{body}\n</channels>\n'.encode()


def make_channel(name: str, *, site: str = "example.tv", lang: str = "en",
                 xmltv_id: str = "", site_id: str = "", country: str = "International") -> ChannelPayload:
    return ChannelPayload(
        site=site,
        lang=lang,
        xmltv_id=xmltv_id,
        site_id=site_id,
        name=name,
        country=country,
    )


class UpstreamStub:
    """In-memory stand-in for the GitHub tree API and raw file host."""

    def __init__(self, repo: str = "dj1p/epg", branch: str = "master"):
        self.repo = repo
        self.branch = branch
        self.tree: list[dict] = []
        self.files: dict[str, tuple[int, bytes]] = {}
        self.tree_status = 200
        self.tree_body: bytes | None = None
        self.requests: list[httpx.Request] = []

    def add_file(self, path: str, content: bytes, status: int = 200) -> None:
        self.tree.append({"path": path, "type": "blob", "mode": "100644"})
        self.files[path] = (status, content)

    def add_tree_entry(self, path: str, entry_type: str) -> None:
        self.tree.append({"path": path, "type": entry_type})

    @property
    def raw_paths(self) -> list[str]:
        prefix = f"/{self.repo}/{self.branch}/"
        return [
            request.url.path[len(prefix):]
            for request in self.requests
            if request.url.host == "raw.github.test"
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.host == "api.github.test":
            if request.url.path != f"/repos/{self.repo}/git/trees/{self.branch}":
                return httpx.Response(404, json={"message": "Not Found"})
            if self.tree_body is not None:
                return httpx.Response(self.tree_status, content=self.tree_body)
            return httpx.Response(
                self.tree_status,
                content=json.dumps({"sha": "abc", "tree": self.tree, "truncated": False}).encode(),
            )

        prefix = f"/{self.repo}/{self.branch}/"
        path = request.url.path[len(prefix):]
        status, content = self.files.get(path, (404, b"404: Not Found"))
        return httpx.Response(status, content=content)


@pytest.fixture
def test_settings(tmp_path) -> CustomSettings:
    return CustomSettings(
        database_path=str(tmp_path / "channels.db"),
        github_api_url=API_URL,
        raw_base_url=RAW_URL,
        scheduler_enabled=False,
        refresh_on_startup=False,
        fetch_batch_pause_sec=0,
        http_max_retries=1,
    )


@pytest.fixture
def upstream() -> UpstreamStub:
    return UpstreamStub()


@pytest_asyncio.fixture
async def database(test_settings):
    db = Database(test_settings.database_path)
    await db.init()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def http_client(test_settings, upstream):
    client = create_http_client(test_settings, transport=httpx.MockTransport(upstream.handler))
    yield client
    await client.aclose()


@pytest.fixture
def refresh_service(database, http_client, test_settings) -> ChannelRefreshService:
    return ChannelRefreshService(database, http_client, test_settings)


@pytest_asyncio.fixture
async def client(test_settings, database, http_client, refresh_service):
    app = create_app(test_settings)
    app.state.database = database
    app.state.http_client = http_client
    app.state.refresh_service = refresh_service
    app.state.scheduler = None

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as c:
        yield c
