from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChannelRecord(BaseModel):
    """Stored channel as returned by the API"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    site: str
    lang: str
    xmltv_id: str
    site_id: str
    name: str
    country: str
    created_at: datetime | None = None


class Pagination(BaseModel):
    page: int
    limit: int
    totalCount: int
    totalPages: int


class ChannelListResponse(BaseModel):
    """Paginated channel listing"""
    channels: list[ChannelRecord]
    pagination: Pagination
    lastUpdate: str | None = Field(None, description="ISO8601 timestamp of the last successful refresh")


class FiltersResponse(BaseModel):
    """Distinct values for the browsing filter controls"""
    sites: list[str]
    languages: list[str]
    countries: list[str]


class StatsResponse(BaseModel):
    totalChannels: int
    lastUpdate: str | None = None


class RefreshResponse(BaseModel):
    """Result of a completed refresh"""
    success: bool = True
    channelCount: int
    lastUpdate: str
    filesProcessed: int
    filesFailed: int


class ReportRequest(BaseModel):
    """Channel problem report submitted from the browser"""
    channel_id: int | None = None
    xmltv_id: str | None = None
    channel_name: str | None = None
    site: str | None = None
    reason: str = Field(..., description="Description of the problem")

    @field_validator("reason")
    @classmethod
    def validate_reason(cls, v: str) -> str:
        """Reason must not be blank"""
        v = v.strip()
        if not v:
            raise ValueError("reason must not be empty")
        return v


class ReportResponse(BaseModel):
    success: bool = True
    id: int


class ErrorResponse(BaseModel):
    """Standard error envelope"""
    error: str = Field(..., description="Error code (e.g., 'UPSTREAM_UNAVAILABLE', 'STORE_ERROR')")
    message: str = Field(..., description="Human-readable error message")
