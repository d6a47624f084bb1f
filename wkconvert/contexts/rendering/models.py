"""
Value objects describing a conversion: what to render, where the bytes go,
and which renderer runs it.

All of them are frozen dataclasses. The conversion core reads them and never
mutates them; use dataclasses.replace() (or PdfConvertEnvironment.with_overrides)
to derive a modified copy.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import IO, Any, Callable, Dict, Optional, Union

from wkconvert.contexts.rendering.exceptions import ConfigurationError

# Source selector telling the renderer to read HTML from standard input
STDIN_MARKER = "-"


def is_empty_url(url: Optional[str]) -> bool:
    """True when the URL is missing, blank, or the stdin marker."""
    return not url or url == STDIN_MARKER


@dataclass(frozen=True)
class PdfDocument:
    """
    Document to be converted to PDF.

    Attributes:
        url: URL the renderer fetches for the body, or "-" to read `html` from stdin
        html: Inline HTML body, used when `url` is empty or "-"
        header_url: URL of an HTML document rendered as the page header
        footer_url: URL of an HTML document rendered as the page footer
        header_left, header_center, header_right: Text for the header slots
        footer_left, footer_center, footer_right: Text for the footer slots
        cookies: Cookies sent while fetching, in insertion order
        extra_params: Options passed verbatim to the renderer as --key value
        state: Opaque value for callback correlation, never interpreted
    """

    url: Optional[str] = None
    html: Optional[str] = None
    header_url: Optional[str] = None
    footer_url: Optional[str] = None
    header_left: Optional[str] = None
    header_center: Optional[str] = None
    header_right: Optional[str] = None
    footer_left: Optional[str] = None
    footer_center: Optional[str] = None
    footer_right: Optional[str] = None
    cookies: Dict[str, str] = field(default_factory=dict)
    extra_params: Dict[str, Optional[str]] = field(default_factory=dict)
    state: Any = None

    @property
    def reads_stdin(self) -> bool:
        """Whether the renderer takes its body from the inline HTML payload."""
        return is_empty_url(self.url) and self.html is not None

    @property
    def has_source(self) -> bool:
        return not is_empty_url(self.url) or self.html is not None

    @property
    def source(self) -> str:
        """Positional source token handed to the renderer."""
        return STDIN_MARKER if is_empty_url(self.url) else self.url


OutputCallback = Callable[[PdfDocument, bytes], None]


@dataclass(frozen=True)
class PdfOutput:
    """
    Output targets for a conversion. Any combination may be set.

    With no targets set the converted bytes are discarded.

    Attributes:
        output_file_path: Explicit destination; the file is kept after the call
        output_stream: Binary sink the PDF bytes are copied into
        output_callback: Called with (document, pdf_bytes) after conversion
    """

    output_file_path: Optional[Union[str, Path]] = None
    output_stream: Optional[IO[bytes]] = None
    output_callback: Optional[OutputCallback] = None

    @property
    def needs_bytes(self) -> bool:
        return self.output_stream is not None or self.output_callback is not None

    def describe(self) -> str:
        targets = []
        if self.output_file_path is not None:
            targets.append(f"file={self.output_file_path}")
        if self.output_stream is not None:
            targets.append("stream")
        if self.output_callback is not None:
            targets.append("callback")
        return ", ".join(targets) or "discard"


@dataclass(frozen=True)
class PdfConvertEnvironment:
    """
    Renderer settings.

    Attributes:
        temp_folder_path: Folder for auto-named output files
        wkhtmltopdf_path: Path to the renderer executable
        timeout: Seconds to wait for the renderer before killing it
        debug: Stream renderer diagnostics to the log as they arrive
    """

    temp_folder_path: Path
    wkhtmltopdf_path: Path
    timeout: float = 60.0
    debug: bool = False

    def __post_init__(self):
        object.__setattr__(self, "temp_folder_path", Path(self.temp_folder_path))
        object.__setattr__(self, "wkhtmltopdf_path", Path(self.wkhtmltopdf_path))
        try:
            timeout = float(self.timeout)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid timeout: {self.timeout!r} is not a number") from None
        object.__setattr__(self, "timeout", timeout)

    def with_overrides(self, **changes) -> "PdfConvertEnvironment":
        return replace(self, **changes)


@dataclass
class ConversionResult:
    """
    Result of a successful conversion.

    Attributes:
        output_path: Path of the kept PDF (None when an auto-named file was removed)
        byte_count: Size of the produced PDF
        page_count: Number of pages, when the PDF could be read
        stderr: Diagnostic text the renderer wrote
        elapsed_s: Wall time of the conversion
        state: The document's state value, passed through
    """

    output_path: Optional[Path] = None
    byte_count: int = 0
    page_count: Optional[int] = None
    stderr: str = ""
    elapsed_s: float = 0.0
    state: Any = None
