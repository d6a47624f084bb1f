"""Custom exceptions for the rendering context."""

from typing import Optional


class PdfConvertError(Exception):
    """Base class for every failure surfaced by an HTML to PDF conversion."""


class ConfigurationError(PdfConvertError):
    """
    Raised before any subprocess is created when the conversion cannot start.

    Covers a document with neither a usable URL nor inline HTML, a renderer
    executable missing at the resolved path, and invalid configuration files.
    """


class ConversionError(PdfConvertError):
    """
    Exception raised when the renderer fails to produce a PDF.

    Attributes:
        message: Error description
        url: Source URL (or the inline marker) of the failed document
        exit_code: Renderer exit code (0 when it exited cleanly but wrote nothing)
        stderr: Full diagnostic text captured from the renderer
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        exit_code: Optional[int] = None,
        stderr: str = "",
    ):
        self.message = message
        self.url = url
        self.exit_code = exit_code
        self.stderr = stderr

        parts = [message]
        if stderr:
            parts.append(f"Wkhtmltopdf output: \n{stderr}")

        super().__init__("\n".join(parts))


class ConversionTimeoutError(PdfConvertError, TimeoutError):
    """
    Exception raised when the renderer did not finish within the timeout.

    The process has been force-terminated by the time this is raised.

    Attributes:
        timeout: Configured timeout in seconds
        stderr: Diagnostic text captured before termination
    """

    def __init__(self, timeout: Optional[float] = None, stderr: str = ""):
        self.timeout = timeout
        self.stderr = stderr
        super().__init__("HTML to PDF conversion process has not finished in the given period.")
