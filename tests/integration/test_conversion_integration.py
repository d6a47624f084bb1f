"""
Integration tests for the conversion service - runs real renderer stub subprocesses.
"""

import io
import json
import os
import re
import sys
from concurrent.futures import ThreadPoolExecutor

import pytest
from loguru import logger

from wkconvert.contexts.rendering import process as process_module
from wkconvert.contexts.rendering.converter import (
    convert_html_to_pdf,
    convert_html_to_pdf_async,
)
from wkconvert.contexts.rendering.exceptions import (
    ConfigurationError,
    ConversionError,
    ConversionTimeoutError,
)
from wkconvert.contexts.rendering.models import PdfDocument, PdfOutput

posix_only = pytest.mark.skipif(
    sys.platform == "win32", reason="renderer stubs rely on shebang executables"
)

pytestmark = [pytest.mark.integration, posix_only]


def _temp_pdfs(temp_folder):
    return list(temp_folder.glob("*.pdf"))


class TestValidation:
    """Failures raised before any subprocess is created."""

    @pytest.fixture(autouse=True)
    def forbid_spawn(self, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("renderer must not be spawned")

        monkeypatch.setattr(process_module.subprocess, "Popen", fail)

    @pytest.mark.parametrize("url", [None, "", "-"])
    def test_no_url_and_no_html(self, url, make_renderer, environment_for):
        env = environment_for(make_renderer("writing"))

        with pytest.raises(ConfigurationError, match="You must supply a HTML string"):
            convert_html_to_pdf(PdfDocument(url=url), PdfOutput(), env)

    def test_missing_executable_named(self, tmp_path, environment_for):
        missing = tmp_path / "no" / "wkhtmltopdf"

        with pytest.raises(ConfigurationError, match=re.escape(str(missing))):
            convert_html_to_pdf(PdfDocument(url="https://example.com"), PdfOutput(), environment_for(missing))

    def test_async_reports_configuration_error(self, make_renderer, environment_for):
        env = environment_for(make_renderer("writing"))

        future = convert_html_to_pdf_async(PdfDocument(url="-"), PdfOutput(), env)

        assert isinstance(future.exception(timeout=10), ConfigurationError)


class TestSuccess:
    def test_url_document_to_file(self, tmp_path, make_renderer, environment_for, monkeypatch):
        args_file = tmp_path / "args.json"
        monkeypatch.setenv("STUB_ARGS_FILE", str(args_file))
        out = tmp_path / "out dir" / "report.pdf"
        out.parent.mkdir()

        result = convert_html_to_pdf(
            PdfDocument(url="https://example.com", footer_center="Page [page]"),
            PdfOutput(output_file_path=out),
            environment_for(make_renderer("writing")),
        )

        assert out.exists()
        assert out.read_bytes().startswith(b"%PDF-1.4\nhttps://example.com")
        assert result.output_path == out
        assert result.byte_count == out.stat().st_size
        assert "Loading pages (1/6)" in result.stderr

        args = json.loads(args_file.read_text())
        assert args[-2:] == ["https://example.com", str(out)]
        assert args[args.index("--footer-center") + 1] == "Page [page]"

    def test_inline_html_piped_to_stdin(self, make_renderer, environment_for):
        html = "<html><h1>測試</h1></html>"
        received = []

        convert_html_to_pdf(
            PdfDocument(url="-", html=html, state="job-1"),
            PdfOutput(output_callback=lambda doc, pdf: received.append((doc.state, pdf))),
            environment_for(make_renderer("writing")),
        )

        assert len(received) == 1
        state, pdf = received[0]
        assert state == "job-1"
        assert html.encode("utf-8") in pdf

    def test_stream_matches_file_byte_for_byte(self, tmp_path, make_renderer, environment_for):
        out = tmp_path / "kept.pdf"
        stream = io.BytesIO()

        convert_html_to_pdf(
            PdfDocument(url="-", html="<p>" + "x" * 100_000 + "</p>"),
            PdfOutput(output_file_path=out, output_stream=stream),
            environment_for(make_renderer("writing")),
        )

        assert stream.getvalue() == out.read_bytes()

    def test_temp_artifact_removed_after_success(self, temp_folder, make_renderer, environment_for):
        stream = io.BytesIO()

        result = convert_html_to_pdf(
            PdfDocument(url="-", html="<p>x</p>"),
            PdfOutput(output_stream=stream),
            environment_for(make_renderer("writing")),
        )

        assert stream.getvalue().startswith(b"%PDF-")
        assert result.output_path is None
        assert _temp_pdfs(temp_folder) == []

    def test_no_targets_discards_output(self, temp_folder, make_renderer, environment_for):
        result = convert_html_to_pdf(
            PdfDocument(url="-", html="<p>x</p>"),
            environment=environment_for(make_renderer("writing")),
        )

        assert result.byte_count > 0
        assert _temp_pdfs(temp_folder) == []

    def test_debug_streams_diagnostics_to_log(self, make_renderer, environment_for):
        messages = []
        handler_id = logger.add(messages.append, level="DEBUG", format="{message}")
        try:
            convert_html_to_pdf(
                PdfDocument(url="-", html="<p>x</p>"),
                environment=environment_for(make_renderer("writing"), debug=True),
            )
        finally:
            logger.remove(handler_id)

        assert any("wkhtmltopdf: Loading pages (1/6)" in m for m in messages)


class TestFailures:
    def test_nonzero_exit_carries_diagnostics(self, temp_folder, make_renderer, environment_for):
        with pytest.raises(ConversionError, match="bad font") as excinfo:
            convert_html_to_pdf(
                PdfDocument(url="https://example.com"),
                PdfOutput(output_stream=io.BytesIO()),
                environment_for(make_renderer("failing")),
            )

        assert excinfo.value.exit_code == 2
        assert "Loading pages (1/6)" in excinfo.value.stderr
        assert _temp_pdfs(temp_folder) == []

    def test_failure_keeps_explicit_file(self, tmp_path, make_renderer, environment_for):
        out = tmp_path / "explicit.pdf"

        with pytest.raises(ConversionError):
            convert_html_to_pdf(
                PdfDocument(url="https://example.com"),
                PdfOutput(output_file_path=out),
                environment_for(make_renderer("failing")),
            )

        assert out.exists()

    def test_clean_exit_without_output(self, make_renderer, environment_for):
        callback_calls = []

        with pytest.raises(ConversionError, match="not found") as excinfo:
            convert_html_to_pdf(
                PdfDocument(url="https://example.com"),
                PdfOutput(output_callback=lambda doc, pdf: callback_calls.append(pdf)),
                environment_for(make_renderer("silent")),
            )

        assert excinfo.value.exit_code == 0
        assert callback_calls == []

    def test_timeout_kills_renderer(self, tmp_path, temp_folder, make_renderer, environment_for, monkeypatch):
        pid_file = tmp_path / "renderer.pid"
        monkeypatch.setenv("STUB_PID_FILE", str(pid_file))
        callback_calls = []

        with pytest.raises(ConversionTimeoutError) as excinfo:
            convert_html_to_pdf(
                PdfDocument(url="https://example.com"),
                PdfOutput(output_callback=lambda doc, pdf: callback_calls.append(pdf)),
                environment_for(make_renderer("hanging"), timeout=2.0),
            )

        assert isinstance(excinfo.value, TimeoutError)
        assert excinfo.value.timeout == 2.0
        assert callback_calls == []
        assert _temp_pdfs(temp_folder) == []

        pid = int(pid_file.read_text())
        with pytest.raises(ProcessLookupError):
            os.kill(pid, 0)


class TestCallingModeParity:
    """Blocking and non-blocking calls classify outcomes identically."""

    @staticmethod
    def _outcome(call):
        try:
            call()
        except Exception as e:
            return type(e)
        return "success"

    @pytest.mark.parametrize(
        "renderer,document",
        [
            ("writing", PdfDocument(url="-", html="<p>x</p>")),
            ("failing", PdfDocument(url="https://example.com")),
            ("silent", PdfDocument(url="https://example.com")),
            ("writing", PdfDocument(url="-")),
        ],
    )
    def test_same_classification(self, renderer, document, make_renderer, environment_for):
        env = environment_for(make_renderer(renderer))

        blocking = self._outcome(lambda: convert_html_to_pdf(document, PdfOutput(), env))
        with ThreadPoolExecutor(max_workers=1) as executor:
            future = convert_html_to_pdf_async(document, PdfOutput(), env, executor=executor)
            non_blocking = self._outcome(lambda: future.result(timeout=30))

        assert blocking == non_blocking

    def test_shared_executor_result(self, make_renderer, environment_for):
        received = []

        future = convert_html_to_pdf_async(
            PdfDocument(url="-", html="<p>async</p>", state=42),
            PdfOutput(output_callback=lambda doc, pdf: received.append(pdf)),
            environment_for(make_renderer("writing")),
        )
        result = future.result(timeout=30)

        assert result.state == 42
        assert b"<p>async</p>" in received[0]
