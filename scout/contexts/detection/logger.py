"""
Detection context logger.

Provides logging interface for detection context with automatic [detect] prefix.
All detection modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path

from loguru import logger

from scout.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[detect]"


def setup_detection_logger(log_dir: Path) -> Path:
    """
    Setup logger for detection context.

    Args:
        log_dir: Directory for this detection session

    Returns:
        Path to log file
    """
    return _setup_logger(context_name="detect", log_dir=log_dir)


# Wrapper functions with automatic [detect] prefix


def _log_warning(message: str) -> None:
    """Log warning message with [detect] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [detect] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [detect] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level detection-specific logging helpers


def log_taxonomy_result(page_url: str, result) -> None:
    """
    Log one taxonomy decision at debug level.

    Args:
        page_url: Page being classified
        result: TaxonomyResult from the scorer
    """
    breakdown = result.breakdown
    _log_debug(
        f"{page_url} {result.output_key}={result.label} "
        f"(confidence {result.confidence:.3f}, source {breakdown.source}, "
        f"base {breakdown.base:.2f}, component {breakdown.component:.2f}, "
        f"keyword {breakdown.keyword:.2f})"
    )
    runners_up = sorted(
        (
            (name, b.confidence)
            for name, b in result.candidates.items()
            if name != result.label
        ),
        key=lambda item: -item[1],
    )[:2]
    for name, confidence in runners_up:
        _log_debug(f"  runner-up {name}: {confidence:.3f}")


def log_taxonomy_failure(page_url: str, taxonomy: str, error: Exception) -> None:
    """Log a taxonomy that fell back to its default because scoring raised."""
    _log_error(f"{page_url} {taxonomy}: scoring failed, using default label ({error})")


def log_tech_report(page_url: str, report) -> None:
    """
    Log a tech stack validation summary.

    Args:
        page_url: Page being validated
        report: TechStackReport from validate_tech_stack()
    """
    counts = report.status_counts()
    if not counts:
        return
    summary = ", ".join(f"{count} {status}" for status, count in sorted(counts.items()))
    _log_debug(f"{page_url} tech stack: {summary}")
    for validation in report.contradicted:
        _log_warning(f"{page_url} declares {validation.name} but only mentions it negatively")
    for validation in report.technologies:
        if not validation.in_catalog:
            _log_debug(f"  {validation.name} is not in the tech catalog")
