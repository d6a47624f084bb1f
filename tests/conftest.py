"""
Shared fixtures: throwaway renderer executables written into tmp_path.

Each stub is a small Python script with a shebang pointing at the running
interpreter, so it behaves like a real executable on the filesystem.
"""

import stat
import sys
import textwrap
from pathlib import Path

import pytest

from wkconvert.contexts.rendering.models import PdfConvertEnvironment

# Writes "%PDF-1.4", the body (stdin when the source is "-", else the URL), "%%EOF"
WRITING_RENDERER = """
import json
import os
import sys

source, out = sys.argv[-2], sys.argv[-1]
body = sys.stdin.buffer.read() if source == "-" else source.encode("utf-8")

args_file = os.environ.get("STUB_ARGS_FILE")
if args_file:
    with open(args_file, "w", encoding="utf-8") as f:
        json.dump(sys.argv[1:], f)

sys.stderr.write("Loading pages (1/6)\\n")
sys.stderr.write("Done\\n")
with open(out, "wb") as f:
    f.write(b"%PDF-1.4\\n" + body + b"\\n%%EOF\\n")
"""

FAILING_RENDERER = """
import sys

with open(sys.argv[-1], "wb") as f:
    f.write(b"partial")
sys.stderr.write("Loading pages (1/6)\\n")
sys.stderr.write("bad font\\n")
sys.exit(2)
"""

HANGING_RENDERER = """
import os
import sys
import time

pid_file = os.environ.get("STUB_PID_FILE")
if pid_file:
    with open(pid_file, "w") as f:
        f.write(str(os.getpid()))
sys.stderr.write("Loading pages (1/6)\\n")
sys.stderr.flush()
time.sleep(60)
"""

SILENT_RENDERER = """
import sys

sys.exit(0)
"""


RENDERER_STUBS = {
    "writing": WRITING_RENDERER,
    "failing": FAILING_RENDERER,
    "hanging": HANGING_RENDERER,
    "silent": SILENT_RENDERER,
}


@pytest.fixture
def make_renderer(tmp_path):
    """Factory writing one of RENDERER_STUBS as an executable and returning its path."""

    def _make(kind: str, name: str = "wkhtmltopdf") -> Path:
        body = RENDERER_STUBS[kind]
        bin_dir = tmp_path / "bin"
        bin_dir.mkdir(exist_ok=True)
        path = bin_dir / name
        path.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body), encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _make


@pytest.fixture
def temp_folder(tmp_path) -> Path:
    folder = tmp_path / "temp"
    folder.mkdir()
    return folder


@pytest.fixture
def environment_for(temp_folder):
    """Factory building an environment around a given renderer path."""

    def _make(executable: Path, timeout: float = 20.0, debug: bool = False):
        return PdfConvertEnvironment(
            temp_folder_path=temp_folder,
            wkhtmltopdf_path=executable,
            timeout=timeout,
            debug=debug,
        )

    return _make
