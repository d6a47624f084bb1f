"""
Rendering context logger.

Provides logging interface for rendering context with automatic [convert] prefix.
All rendering modules should import from this module, not from loguru directly.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from wkconvert.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[convert]"


def setup_conversion_logger(log_dir: Path, environment=None) -> Path:
    """
    Setup logger for rendering context.

    Opt-in: conversions log through whatever sinks are configured and never
    call this themselves.

    Args:
        log_dir: Directory for this logging session
        environment: PdfConvertEnvironment recorded in the session header

    Returns:
        Path to log file
    """
    details = {}
    if environment is not None:
        details = {
            "Renderer": environment.wkhtmltopdf_path,
            "Temp folder": environment.temp_folder_path,
            "Timeout": f"{environment.timeout:g}s",
            "Debug": environment.debug,
        }
    return _setup_logger(context_name="convert", log_dir=log_dir, details=details)


# Wrapper functions with automatic [convert] prefix


def _log_info(message: str) -> None:
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level conversion logging helpers


def log_conversion_start(source: str, targets: str, output_path: Path) -> None:
    """Log start of a conversion with context."""
    _log_info(f"Starting conversion: {source}")
    _log_debug(f"  Targets: {targets}")
    _log_debug(f"  Renderer output: {output_path}")


def log_conversion_result(
    source: str,
    success: bool,
    elapsed_time: float,
    byte_count: Optional[int] = None,
    stderr: str = "",
    reason: str = "",
) -> None:
    """
    Log conversion outcome with diagnostics.

    Args:
        source: URL or inline marker of the converted document
        success: Whether the PDF was produced and delivered
        elapsed_time: Seconds spent in the conversion
        byte_count: Size of the produced PDF (success only)
        stderr: Renderer diagnostic text
        reason: Short failure description
    """
    if success:
        _log_success(f"{source}: {byte_count or 0} bytes ({elapsed_time:.2f}s)")
    else:
        _log_error(f"Conversion failed: {source} ({elapsed_time:.2f}s)")
        if reason:
            _log_error(f"  {reason}")

    # Raw output bypasses the format template so multi-line output stays intact
    if stderr and not success:
        logger.opt(raw=True).debug(
            f"\n{'=' * 80}\nWKHTMLTOPDF STDERR:\n{'=' * 80}\n{stderr}\n"
        )
