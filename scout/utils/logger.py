"""
Logger setup for Tier 1 (detailed) logging.

One loguru configuration shared by every context: a DEBUG file sink inside
the run's log directory, a colorized console sink, and a provenance header
recording how the run was started. Context-specific wrappers live in
contexts/{context}/logger.py.
"""

import os
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

from scout import __version__

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))
CONSOLE_LEVEL = os.getenv("SCOUT_LOG_LEVEL", "INFO")

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {message}"
CONSOLE_FORMAT = "{time:HH:mm:ss} | <level>{level: <7}</level> | <level>{message}</level>"

LEVEL_COLORS = {
    "WARNING": "<yellow>",
    "ERROR": "<red>",
    "CRITICAL": "<bold><red>",
}


def run_log_dir(prefix: str, logs_path: Path = None) -> Path:
    """
    Directory for one run's logs, e.g. outs/logs/site_20251114_123456.

    Args:
        prefix: Run kind ("site", "page", ...)
        logs_path: Root log directory (defaults to LOGS_PATH)
    """
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return Path(logs_path or LOGS_PATH) / f"{prefix}_{stamp}"


def setup_logger(
    context_name: str,
    log_dir: Path,
    extra_provenance: dict = None,
    level_colors: dict = None,
) -> Path:
    """
    Configure loguru for a context and log the run's provenance.

    Args:
        context_name: Context identifier ("detect", "publish"); names the log file
        log_dir: Directory for this logging session (created if missing)
        extra_provenance: Additional key-value pairs for the provenance header
        level_colors: Override default level colors (e.g., {"INFO": "<cyan>"})

    Returns:
        Path to log file

    Example:
        log_file = setup_logger(
            context_name="publish",
            log_dir=run_log_dir("site"),
            extra_provenance={"Site root": "~/sites/example"},
        )
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / f"{context_name}.log"

    logger.remove()
    for level_name, color in {**LEVEL_COLORS, **(level_colors or {})}.items():
        logger.level(level_name, color=color)

    logger.add(log_file, format=FILE_FORMAT, level="DEBUG")
    logger.add(sys.stdout, format=CONSOLE_FORMAT, level=CONSOLE_LEVEL, colorize=True)

    log_provenance(extra_provenance)
    return log_file


def log_provenance(extra_context: dict = None) -> None:
    """Log the command line, working directory and versions, plus any extra context."""
    lines = [
        f"Command: {' '.join(sys.argv)}",
        f"Working directory: {Path.cwd()}",
        f"Python: {sys.version.split()[0]}",
        f"scout: {__version__}",
    ]
    lines.extend(f"{key}: {value}" for key, value in (extra_context or {}).items())

    logger.info("=" * 80)
    for line in lines:
        logger.info(line)
    logger.info("=" * 80)
