"""
Shared utilities for wkconvert.

Common functionality used across contexts:
- Logger setup with a session header
- PDF inspection
"""

from wkconvert.utils.logger import setup_logger
from wkconvert.utils.pdf_processing import page_count

__all__ = ["page_count", "setup_logger"]
