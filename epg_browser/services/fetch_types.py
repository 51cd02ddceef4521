"""
Shared dataclasses used across the channel refresh pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal


@dataclass(slots=True, frozen=True)
class FileDescriptor:
    """Entry from the upstream git tree listing."""
    path: str
    type: str

    @property
    def site_name(self) -> str:
        """Provider directory name (second path segment, e.g. sites/<site>/...)."""
        parts = self.path.split("/")
        return parts[1] if len(parts) > 1 else ""


@dataclass(slots=True)
class ChannelPayload:
    """In-memory representation of a channel row before persistence."""
    site: str
    lang: str
    xmltv_id: str
    site_id: str
    name: str
    country: str


@dataclass(slots=True)
class FileFetchResult:
    """Outcome of fetching and parsing one channel file."""
    path: str
    status: Literal["success", "failed"]
    channels: list[ChannelPayload] = field(default_factory=list)
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == "success"


@dataclass(slots=True)
class BatchFetchSummary:
    """Merged results of a full batched fetch."""
    results: list[FileFetchResult] = field(default_factory=list)

    @property
    def channels(self) -> list[ChannelPayload]:
        return [channel for result in self.results if result.succeeded for channel in result.channels]

    @property
    def failed(self) -> list[FileFetchResult]:
        return [result for result in self.results if not result.succeeded]


@dataclass(slots=True, frozen=True)
class SearchFilter:
    """Optional constraints for channel queries."""
    search: str | None = None
    site: str | None = None
    lang: str | None = None


@dataclass(slots=True, frozen=True)
class RefreshResult:
    """Summary of a completed refresh."""
    channel_count: int
    last_update: str
    files_total: int
    files_failed: int


__all__ = [
    "FileDescriptor",
    "ChannelPayload",
    "FileFetchResult",
    "BatchFetchSummary",
    "SearchFilter",
    "RefreshResult",
]
