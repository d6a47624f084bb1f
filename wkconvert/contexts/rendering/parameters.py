"""
Renderer argument building.

Pure translation from a PdfDocument plus a resolved output path to the
wkhtmltopdf argument list. Each argument is its own list item, so values with
embedded whitespace need no shell quoting.
"""

from pathlib import Path
from typing import List, Union
from urllib.parse import quote_plus

from wkconvert.contexts.rendering.models import PdfDocument

DEFAULT_PAGE_SIZE = "A4"
HEADER_FOOTER_MARGIN = "25"
HEADER_FOOTER_SPACING = "5"

# (option, document attribute); each slot is emitted only when its own value is set
TEXT_SLOTS = [
    ("--header-left", "header_left"),
    ("--header-center", "header_center"),
    ("--header-right", "header_right"),
    ("--footer-left", "footer_left"),
    ("--footer-center", "footer_center"),
    ("--footer-right", "footer_right"),
]


def encode_cookie_value(value: str) -> str:
    """Form-style percent encoding (spaces become '+')."""
    return quote_plus(value or "")


def build_parameters(document: PdfDocument, output_path: Union[str, Path]) -> List[str]:
    """
    Build the renderer argument list for a document.

    Order: page size, header HTML block, footer HTML block, header/footer text
    slots, extra params, cookies, then the source selector and output path as
    the two final positional arguments.

    Args:
        document: Document to convert
        output_path: Where the renderer writes the PDF

    Returns:
        Argument list, excluding the executable itself

    Example:
        >>> build_parameters(PdfDocument(url="https://example.com"), "/tmp/out.pdf")
        ['--page-size', 'A4', 'https://example.com', '/tmp/out.pdf']
    """
    args = ["--page-size", DEFAULT_PAGE_SIZE]

    if document.header_url:
        args += ["--header-html", document.header_url]
        args += ["--margin-top", HEADER_FOOTER_MARGIN]
        args += ["--header-spacing", HEADER_FOOTER_SPACING]

    if document.footer_url:
        args += ["--footer-html", document.footer_url]
        args += ["--margin-bottom", HEADER_FOOTER_MARGIN]
        args += ["--footer-spacing", HEADER_FOOTER_SPACING]

    for option, attribute in TEXT_SLOTS:
        value = getattr(document, attribute)
        if value:
            args += [option, value]

    for key, value in document.extra_params.items():
        args.append(f"--{key}")
        # Empty value means a bare flag like --grayscale
        if value is not None and str(value) != "":
            args.append(str(value))

    for key, value in document.cookies.items():
        args += ["--cookie", key, encode_cookie_value(value)]

    args += [document.source, str(output_path)]

    return args
