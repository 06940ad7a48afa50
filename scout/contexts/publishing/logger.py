"""
Publishing context logger.

Provides logging interface for publishing context with automatic [publish] prefix.
All publishing modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path

from loguru import logger

from scout.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[publish]"


def setup_publishing_logger(log_dir: Path, site_root: Path = None) -> Path:
    """
    Setup logger for publishing context.

    Args:
        log_dir: Directory for this publishing session
        site_root: Jekyll source root being classified (logged as provenance)

    Returns:
        Path to log file

    Example:
        from scout.contexts.publishing.logger import setup_publishing_logger, _log_info

        log_file = setup_publishing_logger(log_dir, site_root=Path("~/sites/example"))
        _log_info("Classifying site...")
    """
    return _setup_logger(
        context_name="publish",
        log_dir=log_dir,
        extra_provenance={"Site root": site_root} if site_root else None,
    )


# Wrapper functions with automatic [publish] prefix


def _log_info(message: str) -> None:
    """Log info message with [publish] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [publish] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [publish] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [publish] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


# High-level publishing-specific logging helpers


def log_page_warnings(page_url: str, warnings: list) -> None:
    """Log parser warnings collected for a page."""
    for warning in warnings:
        _log_warning(f"{page_url}: {warning}")


def log_context_failure(page_url: str, error: Exception) -> None:
    """Log a page whose context fell back to defaults."""
    _log_error(f"{page_url}: context build failed, publishing fallback context")
    _log_error(f"  {type(error).__name__}: {error}")


def log_site_summary(result, elapsed_time: float) -> None:
    """
    Log the outcome of a site run.

    Args:
        result: SiteClassification from classify_site()
        elapsed_time: Seconds taken
    """
    _log_success(f"Classified {len(result.contexts)} pages ({elapsed_time:.2f}s)")
    if result.fallback_urls:
        _log_warning(f"{len(result.fallback_urls)} pages fell back to default context")
        for url in result.fallback_urls[:5]:
            _log_warning(f"  {url}")
        if len(result.fallback_urls) > 5:
            _log_warning(f"  ... and {len(result.fallback_urls) - 5} more")
    if result.data_path:
        _log_info(f"Data file: {result.data_path}")
    if result.report_path:
        _log_info(f"Report: {result.report_path}")
