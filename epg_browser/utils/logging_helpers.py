"""
Structured logging helpers for consistent log formatting.
"""
import logging
from datetime import datetime, timezone


def log_refresh_start(logger: logging.Logger) -> None:
    """Log channel refresh start."""
    logger.info(f"Channel refresh started at {datetime.now(timezone.utc).isoformat()}")


def log_refresh_end(logger: logging.Logger, channel_count: int, files_failed: int) -> None:
    """Log channel refresh end."""
    logger.info(
        f"Channel refresh completed at {datetime.now(timezone.utc).isoformat()}: "
        f"{channel_count} channels stored, {files_failed} files failed"
    )


def log_batch_progress(
    logger: logging.Logger,
    processed: int,
    total: int,
    channels_count: int
) -> None:
    """
    Log batch fetch progress.

    Args:
        logger: Logger instance
        processed: Files processed so far
        total: Total number of files
        channels_count: Channels parsed so far
    """
    logger.info(f"Progress: {processed}/{total} files processed ({channels_count} channels)")
