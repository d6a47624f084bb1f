"""
Renderer process orchestration.

Runs the renderer with all three standard streams redirected. Inline HTML is
written to stdin and stderr is drained, each on its own background thread, while
the caller waits for process exit and drain completion under a single deadline.
A renderer still running at the deadline is killed, which also unblocks a
stdin write the renderer never read.
"""

import subprocess
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import IO, List, Optional, Union

from wkconvert.contexts.rendering.exceptions import ConfigurationError
from wkconvert.contexts.rendering.logger import _log_debug, _log_warning

# Grace period for the drain thread to notice EOF after a kill
KILL_DRAIN_GRACE_S = 1.0


@dataclass
class RendererResult:
    """
    Outcome of one renderer run.

    Attributes:
        exit_code: Process exit code (None when the run timed out)
        stderr: Diagnostic text, one line per renderer line
        timed_out: Whether the deadline passed and the process was killed
        elapsed_s: Wall time from start to completion or kill
    """

    exit_code: Optional[int] = None
    stderr: str = ""
    timed_out: bool = False
    elapsed_s: float = 0.0

    @property
    def success(self) -> bool:
        return not self.timed_out and self.exit_code == 0


class _StderrDrain(threading.Thread):
    """Reads the error stream line by line until EOF, then sets `drained`."""

    def __init__(self, stream: IO[bytes], echo: bool = False):
        super().__init__(name="wkhtmltopdf-stderr", daemon=True)
        self.stream = stream
        self.echo = echo
        self.lines: List[str] = []
        self.drained = threading.Event()
        self._lock = threading.Lock()

    def run(self) -> None:
        try:
            for raw in iter(self.stream.readline, b""):
                line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
                with self._lock:
                    self.lines.append(line)
                if self.echo:
                    _log_debug(f"  wkhtmltopdf: {line}")
        except (OSError, ValueError) as e:
            # Pipe closed underneath us after a kill
            _log_debug(f"stderr drain stopped: {e}")
        finally:
            self.stream.close()
            self.drained.set()

    def text(self) -> str:
        with self._lock:
            return "\n".join(self.lines)


def _write_stdin(process: subprocess.Popen, html: Optional[str]) -> None:
    """Write the inline HTML payload (if any) and close stdin so the renderer sees EOF."""
    try:
        if html is not None:
            process.stdin.write(html.encode("utf-8"))
            process.stdin.flush()
    except OSError as e:
        # Renderer exited or was killed without reading; its exit code tells the story
        _log_warning(f"Renderer closed stdin before the HTML payload was fully written: {e}")
    finally:
        try:
            process.stdin.close()
        except OSError:
            pass


def _start_stdin_writer(process: subprocess.Popen, html: Optional[str]) -> threading.Thread:
    """Feed stdin from a daemon thread so a renderer that never reads cannot outlast the deadline."""
    writer = threading.Thread(
        target=_write_stdin, args=(process, html), name="wkhtmltopdf-stdin", daemon=True
    )
    writer.start()
    return writer


def _kill_if_running(process: subprocess.Popen) -> None:
    """Kill the process unless it already exited; failures are absorbed."""
    if process.poll() is not None:
        return
    try:
        process.kill()
    except OSError as e:
        _log_warning(f"Failed to kill renderer (pid {process.pid}): {e}")
        return
    try:
        process.wait(timeout=KILL_DRAIN_GRACE_S)
    except subprocess.TimeoutExpired:
        _log_warning(f"Renderer (pid {process.pid}) still running after kill")


def run_renderer(
    executable: Union[str, Path],
    arguments: List[str],
    html: Optional[str] = None,
    timeout: float = 60.0,
    debug: bool = False,
) -> RendererResult:
    """
    Run the renderer once and wait for it under a deadline.

    Success requires both process exit and a fully drained stderr before the
    deadline, so the diagnostic text is complete whenever an exit code is
    reported. Writing the HTML payload counts against the same deadline: a
    renderer that stops reading stdin is killed at the deadline like any other
    stalled run.

    Args:
        executable: Renderer executable
        arguments: Arguments from build_parameters()
        html: Inline HTML written to stdin as UTF-8, or None to just close stdin
        timeout: Seconds before the renderer is killed
        debug: Log each diagnostic line as it arrives

    Returns:
        RendererResult; a timeout is reported via `timed_out`, never raised
    """
    cmd = [str(executable), *arguments]
    _log_debug(f"Running: {subprocess.list2cmdline(cmd)}")

    start_time = time.monotonic()
    deadline = start_time + timeout

    try:
        process = subprocess.Popen(
            cmd,
            stdin=subprocess.PIPE,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
        )
    except OSError as e:
        raise ConfigurationError(f"Failed to start renderer '{executable}': {e}") from e
    # The drain thread owns process.stderr and closes it at EOF
    drain = _StderrDrain(process.stderr, echo=debug)
    drain.start()

    try:
        writer = _start_stdin_writer(process, html)

        exited = threading.Event()
        try:
            process.wait(timeout=max(deadline - time.monotonic(), 0))
            exited.set()
        except subprocess.TimeoutExpired:
            pass

        if exited.is_set():
            drain.drained.wait(timeout=max(deadline - time.monotonic(), 0))

        if exited.is_set() and drain.drained.is_set():
            drain.join()
            writer.join(timeout=KILL_DRAIN_GRACE_S)
            return RendererResult(
                exit_code=process.returncode,
                stderr=drain.text(),
                elapsed_s=time.monotonic() - start_time,
            )

        _log_warning(f"Renderer exceeded {timeout:g}s timeout; killing pid {process.pid}")
        _kill_if_running(process)
        drain.join(timeout=KILL_DRAIN_GRACE_S)
        writer.join(timeout=KILL_DRAIN_GRACE_S)

        return RendererResult(
            exit_code=None,
            stderr=drain.text(),
            timed_out=True,
            elapsed_s=time.monotonic() - start_time,
        )
    finally:
        # No-op once the process has exited; covers interrupts during the wait
        _kill_if_running(process)
