"""
Dependency Injection

FastAPI dependencies that hand request handlers the lifecycle-scoped objects
created at startup (database handle, refresh service, settings). Everything
lives on app.state, so each application instance, including test apps, owns
its own set.
"""
from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from epg_browser.config import CustomSettings
from epg_browser.database import Database
from epg_browser.services.refresh_service import ChannelRefreshService
from epg_browser.services.scheduler_service import RefreshScheduler


def get_settings(request: Request) -> CustomSettings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_refresh_service(request: Request) -> ChannelRefreshService:
    return request.app.state.refresh_service


def get_scheduler(request: Request) -> RefreshScheduler | None:
    return getattr(request.app.state, "scheduler", None)


async def get_db(
    database: Annotated[Database, Depends(get_database)]
) -> AsyncGenerator[AsyncSession, None]:
    """Read-only session; the transaction is rolled back when the request ends"""
    async for session in database.get_session():
        yield session
