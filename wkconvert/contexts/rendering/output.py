"""
Delivery of the produced PDF to the requested output targets, and removal of
auto-named temp artifacts.
"""

import shutil
from pathlib import Path
from typing import Optional

from wkconvert.contexts.rendering.logger import _log_debug, _log_warning
from wkconvert.contexts.rendering.models import PdfDocument, PdfOutput

COPY_CHUNK_SIZE = 32 * 1024


def deliver_output(
    document: PdfDocument,
    output: PdfOutput,
    artifact_path: Path,
    chunk_size: int = COPY_CHUNK_SIZE,
) -> Optional[bytes]:
    """
    Route the renderer's artifact to the stream and/or callback targets.

    The stream receives a chunked copy straight from disk. The callback gets
    the full content. With neither target set the file is not opened at all.

    Args:
        document: The converted document, passed to the callback
        output: Requested targets
        artifact_path: PDF written by the renderer
        chunk_size: Bytes per read/write when copying to the stream

    Returns:
        PDF bytes when a callback needed them, else None
    """
    if not output.needs_bytes:
        return None

    if output.output_stream is not None:
        with open(artifact_path, "rb") as fs:
            shutil.copyfileobj(fs, output.output_stream, chunk_size)
        _log_debug(f"Copied {artifact_path.name} to output stream")

    data = None
    if output.output_callback is not None:
        data = artifact_path.read_bytes()
        output.output_callback(document, data)
        _log_debug(f"Delivered {len(data)} bytes to output callback")

    return data


def remove_artifact(artifact_path: Path) -> None:
    """Delete an auto-named output file. Failures are logged, never raised."""
    try:
        artifact_path.unlink(missing_ok=True)
    except OSError as e:
        _log_warning(f"Could not remove temp artifact {artifact_path}: {e}")
