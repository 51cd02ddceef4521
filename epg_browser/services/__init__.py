"""
Services package for EPG Channel Browser

This package contains all business logic and service layer components.
"""
from epg_browser.services.channel_query_service import (
    build_search_filter,
    get_channel_page,
    get_filters,
    get_stats_response,
    resolve_pagination,
)
from epg_browser.services.country_classifier import classify_country
from epg_browser.services.db_service import add_report, count_channels
from epg_browser.services.refresh_service import ChannelRefreshService
from epg_browser.services.scheduler_service import RefreshScheduler

__all__ = [
    'build_search_filter',
    'get_channel_page',
    'get_filters',
    'get_stats_response',
    'resolve_pagination',
    'classify_country',
    'add_report',
    'count_channels',
    'ChannelRefreshService',
    'RefreshScheduler',
]
