"""
wkconvert - HTML to PDF conversion by driving the wkhtmltopdf renderer

Turns HTML content, fetched by URL or supplied inline, into a PDF by running an
external renderer executable as a subprocess, then delivers the produced bytes
to a file, a stream, or a callback.

Architecture:
- Rendering Context: argument building, subprocess orchestration, output delivery
- Utils: logger setup and PDF inspection helpers
"""

from wkconvert.contexts.rendering import (
    ConfigurationError,
    ConversionError,
    ConversionResult,
    ConversionTimeoutError,
    PdfConvertEnvironment,
    PdfConvertError,
    PdfDocument,
    PdfOutput,
    convert_html_to_pdf,
    convert_html_to_pdf_async,
    default_environment,
    load_environment,
)

__version__ = "0.1.0"

__all__ = [
    "PdfDocument",
    "PdfOutput",
    "PdfConvertEnvironment",
    "ConversionResult",
    "convert_html_to_pdf",
    "convert_html_to_pdf_async",
    "default_environment",
    "load_environment",
    "PdfConvertError",
    "ConfigurationError",
    "ConversionError",
    "ConversionTimeoutError",
]
