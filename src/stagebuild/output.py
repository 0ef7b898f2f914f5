"""
Timestamped console output for stagebuild.

All user-facing progress lines are prefixed with the elapsed time since
program launch in MM:SS.cc format, so a slow stage is easy to spot:

    00:00.01 [1/5] Creating workspace...
    00:00.01       Done (0.00s)
    00:00.02 [2/5] Populating workspace...
    00:00.02 Copying 'deps' -> 'tmp/src'
    00:00.35       Done (0.33s)
    00:00.35 [3/5] Compiling executables...
    00:00.35 GOPATH = /home/me/project/tmp

Usage:
    from stagebuild.output import log, log_phase, log_detail

    log_phase(1, 5, "Creating workspace...")
    log_detail("src: tmp/src")
"""

import sys
import time
from types import TracebackType
from typing import Optional, TextIO

_start_time: Optional[float] = None
_output_stream: Optional[TextIO] = None
_verbose: bool = False


def init_timer(output_stream: Optional[TextIO] = None) -> None:
    """
    Initialize the program timer.

    Called automatically on first log if not called explicitly.

    Args:
        output_stream: Optional output stream (defaults to sys.stdout at write time)
    """
    global _start_time, _output_stream
    _start_time = time.time()
    if output_stream is not None:
        _output_stream = output_stream


def set_verbose(verbose: bool) -> None:
    """Enable or disable verbose-only messages."""
    global _verbose
    _verbose = verbose


def get_elapsed() -> float:
    """
    Get elapsed time since timer initialization.

    Returns:
        Elapsed time in seconds
    """
    if _start_time is None:
        init_timer()
    return time.time() - _start_time  # type: ignore


def format_timestamp() -> str:
    """Format the current elapsed time as MM:SS.cc."""
    elapsed = get_elapsed()
    minutes = int(elapsed // 60)
    seconds = elapsed % 60
    return f"{minutes:02d}:{seconds:05.2f}"


def _print(message: str) -> None:
    # Resolve sys.stdout lazily so pytest capture and redirection work.
    stream = _output_stream if _output_stream is not None else sys.stdout
    stream.write(f"{format_timestamp()} {message}\n")
    stream.flush()


def log(message: str, verbose_only: bool = False) -> None:
    """
    Log a message with timestamp.

    Args:
        message: Message to log
        verbose_only: If True, only print if verbose mode is enabled
    """
    if verbose_only and not _verbose:
        return
    _print(message)


def log_phase(phase: int, total: int, message: str, verbose_only: bool = False) -> None:
    """
    Log a pipeline stage message in the form ``[N/M] message``.

    Args:
        phase: Current stage number
        total: Total number of stages in this mode
        message: Stage description
        verbose_only: If True, only print if verbose mode is enabled
    """
    if verbose_only and not _verbose:
        return
    _print(f"[{phase}/{total}] {message}")


def log_detail(message: str, indent: int = 6, verbose_only: bool = False) -> None:
    """Log an indented detail line."""
    if verbose_only and not _verbose:
        return
    _print(f"{' ' * indent}{message}")


class TimedLogger:
    """
    Context manager that announces an operation and reports its duration.

    Usage:
        with TimedLogger("Compiling executables", phase=(3, 5)):
            run_compiler()
        # Logs "Done (1.23s)" when the block exits without an exception
    """

    def __init__(self, operation: str, phase: Optional[tuple[int, int]] = None, verbose_only: bool = False):
        self.operation = operation
        self.phase = phase
        self.verbose_only = verbose_only
        self.start_time = 0.0
        self.elapsed = 0.0

    def __enter__(self) -> "TimedLogger":
        self.start_time = time.time()
        if self.phase:
            log_phase(self.phase[0], self.phase[1], f"{self.operation}...", self.verbose_only)
        else:
            log(f"{self.operation}...", self.verbose_only)
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        del exc_val, exc_tb  # Unused
        self.elapsed = time.time() - self.start_time
        if exc_type is None:
            log_detail(f"Done ({self.elapsed:.2f}s)", verbose_only=self.verbose_only)
        return None
