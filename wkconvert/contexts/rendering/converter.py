"""
HTML to PDF Conversion Module

Public entry points: validate the document, resolve the environment, build the
renderer arguments, run the renderer, then deliver the PDF to the requested
targets. Auto-named temp artifacts are removed on every exit path.
"""

import atexit
import threading
import time
import uuid
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from enum import Enum
from pathlib import Path
from typing import Optional

from wkconvert.contexts.rendering.environment import resolve_environment
from wkconvert.contexts.rendering.exceptions import (
    ConfigurationError,
    ConversionError,
    ConversionTimeoutError,
)
from wkconvert.contexts.rendering.logger import (
    _log_debug,
    _log_warning,
    log_conversion_result,
    log_conversion_start,
)
from wkconvert.contexts.rendering.models import (
    ConversionResult,
    PdfConvertEnvironment,
    PdfDocument,
    PdfOutput,
)
from wkconvert.contexts.rendering.output import deliver_output, remove_artifact
from wkconvert.contexts.rendering.parameters import build_parameters
from wkconvert.contexts.rendering.process import run_renderer
from wkconvert.utils.pdf_processing import looks_like_pdf, page_count

ASYNC_MAX_WORKERS = 4


class ConversionStage(str, Enum):
    VALIDATING = "validating"
    BUILDING_PARAMETERS = "building_parameters"
    STARTING_PROCESS = "starting_process"
    MATERIALIZING_OUTPUT = "materializing_output"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


def _enter(stage: ConversionStage, source: str) -> None:
    _log_debug(f"{source}: {stage.value}")


def _require_source(document: PdfDocument) -> None:
    if not document.has_source:
        raise ConfigurationError(
            f"You must supply a HTML string, if you have entered the url: {document.url}"
        )


def _require_executable(environment: PdfConvertEnvironment) -> None:
    if not environment.wkhtmltopdf_path.exists():
        raise ConfigurationError(
            f"File '{environment.wkhtmltopdf_path}' not found. "
            "Check if wkhtmltopdf application is installed."
        )


def _resolve_output_path(output: PdfOutput, environment: PdfConvertEnvironment) -> Path:
    """Explicit output path, or a fresh random name in the temp folder."""
    if output.output_file_path is not None:
        return Path(output.output_file_path)

    environment.temp_folder_path.mkdir(parents=True, exist_ok=True)
    return environment.temp_folder_path / f"{uuid.uuid4().hex}.pdf"


def convert_html_to_pdf(
    document: PdfDocument,
    output: Optional[PdfOutput] = None,
    environment: Optional[PdfConvertEnvironment] = None,
) -> ConversionResult:
    """
    Convert a document to PDF on the calling thread.

    Validation failures are raised before any subprocess is created. The
    renderer gets one run; nothing is retried.

    On success:
        - Copies the PDF to output.output_stream, if set
        - Calls output.output_callback(document, pdf_bytes), if set
        - Keeps the file only when output.output_file_path was given

    Args:
        document: What to convert (URL or inline HTML, header/footer, cookies, extras)
        output: Where the bytes go (default: discard)
        environment: Renderer settings (default: process-wide default_environment())

    Returns:
        ConversionResult with size, page count and renderer diagnostics

    Raises:
        ConfigurationError: No usable URL or HTML, or renderer executable missing
        ConversionError: Renderer exited nonzero, or exited cleanly without output
        ConversionTimeoutError: Renderer did not finish in time and was killed
    """
    output = output or PdfOutput()
    source = document.source

    _enter(ConversionStage.VALIDATING, source)
    _require_source(document)
    environment = resolve_environment(environment)
    _require_executable(environment)

    output_path = _resolve_output_path(output, environment)
    is_temp = output.output_file_path is None

    log_conversion_start(source, output.describe(), output_path)
    start_time = time.time()

    try:
        _enter(ConversionStage.BUILDING_PARAMETERS, source)
        arguments = build_parameters(document, output_path)

        _enter(ConversionStage.STARTING_PROCESS, source)
        run = run_renderer(
            executable=environment.wkhtmltopdf_path,
            arguments=arguments,
            html=document.html if document.reads_stdin else None,
            timeout=environment.timeout,
            debug=environment.debug,
        )

        if run.timed_out:
            _enter(ConversionStage.TIMED_OUT, source)
            log_conversion_result(
                source, False, time.time() - start_time, stderr=run.stderr, reason="timed out"
            )
            raise ConversionTimeoutError(timeout=environment.timeout, stderr=run.stderr)

        if run.exit_code != 0:
            _enter(ConversionStage.FAILED, source)
            log_conversion_result(
                source,
                False,
                time.time() - start_time,
                stderr=run.stderr,
                reason=f"exit code {run.exit_code}",
            )
            raise ConversionError(
                f"Html to PDF conversion of '{source}' failed.",
                url=source,
                exit_code=run.exit_code,
                stderr=run.stderr,
            )

        if not output_path.exists():
            _enter(ConversionStage.FAILED, source)
            reason = f"Output file '{output_path}' not found."
            log_conversion_result(
                source, False, time.time() - start_time, stderr=run.stderr, reason=reason
            )
            raise ConversionError(
                f"Html to PDF conversion of '{source}' failed. Reason: {reason}",
                url=source,
                exit_code=0,
                stderr=run.stderr,
            )

        _enter(ConversionStage.MATERIALIZING_OUTPUT, source)
        data = deliver_output(document, output, output_path)

        if data is not None and not looks_like_pdf(data):
            _log_warning(f"{source}: renderer output does not start with a PDF header")

        byte_count = len(data) if data is not None else output_path.stat().st_size
        result = ConversionResult(
            output_path=None if is_temp else output_path,
            byte_count=byte_count,
            page_count=page_count(data) if data is not None else None,
            stderr=run.stderr,
            elapsed_s=time.time() - start_time,
            state=document.state,
        )

        _enter(ConversionStage.SUCCEEDED, source)
        log_conversion_result(source, True, result.elapsed_s, byte_count=byte_count)
        return result
    finally:
        if is_temp:
            remove_artifact(output_path)


_shared_executor: Optional[ThreadPoolExecutor] = None
_executor_lock = threading.Lock()


def _get_shared_executor() -> ThreadPoolExecutor:
    """Thread pool for non-blocking conversions, created on first use."""
    global _shared_executor
    with _executor_lock:
        if _shared_executor is None:
            _shared_executor = ThreadPoolExecutor(
                max_workers=ASYNC_MAX_WORKERS, thread_name_prefix="wkconvert"
            )
            atexit.register(_shared_executor.shutdown, wait=False)
        return _shared_executor


def convert_html_to_pdf_async(
    document: PdfDocument,
    output: Optional[PdfOutput] = None,
    environment: Optional[PdfConvertEnvironment] = None,
    executor: Optional[Executor] = None,
) -> "Future[ConversionResult]":
    """
    Schedule convert_html_to_pdf() on a worker and return its future.

    The future resolves to the same ConversionResult, or fails with the same
    exception, that the blocking call would produce.

    Args:
        document: What to convert
        output: Where the bytes go
        environment: Renderer settings
        executor: Executor to run on (default: shared thread pool)

    Example:
        >>> future = convert_html_to_pdf_async(PdfDocument(url="-", html="<h1>hi</h1>"))
        >>> result = future.result(timeout=120)
    """
    executor = executor or _get_shared_executor()
    return executor.submit(convert_html_to_pdf, document, output, environment)
