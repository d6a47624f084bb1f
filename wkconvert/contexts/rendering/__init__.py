"""
Rendering Context

Responsibilities:
- Builds wkhtmltopdf argument lists from document descriptions
- Runs the renderer subprocess (stdin piping, stderr draining, timeout, kill)
- Delivers produced PDFs to files, streams, or callbacks
- Removes auto-named temp artifacts

Owns: Renderer invocation, output delivery
Never: Parses or renders HTML itself
"""

from wkconvert.contexts.rendering.converter import (
    convert_html_to_pdf,
    convert_html_to_pdf_async,
)
from wkconvert.contexts.rendering.environment import (
    default_environment,
    load_environment,
    reset_default_environment,
)
from wkconvert.contexts.rendering.exceptions import (
    ConfigurationError,
    ConversionError,
    ConversionTimeoutError,
    PdfConvertError,
)
from wkconvert.contexts.rendering.models import (
    STDIN_MARKER,
    ConversionResult,
    PdfConvertEnvironment,
    PdfDocument,
    PdfOutput,
)
from wkconvert.contexts.rendering.parameters import build_parameters

__all__ = [
    # Entry points
    "convert_html_to_pdf",
    "convert_html_to_pdf_async",
    "build_parameters",
    # Configuration
    "default_environment",
    "load_environment",
    "reset_default_environment",
    # Value objects
    "PdfDocument",
    "PdfOutput",
    "PdfConvertEnvironment",
    "ConversionResult",
    "STDIN_MARKER",
    # Errors
    "PdfConvertError",
    "ConfigurationError",
    "ConversionError",
    "ConversionTimeoutError",
]
