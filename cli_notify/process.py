"""
External process invocation.

Every call to a package-manager binary goes through a ProcessRunner so tests
can substitute a fake without touching real yarn/pnpm/npm installations.
"""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from typing import Protocol, Sequence

from .common import strip_ansi


class ProcessError(Exception):
    """Raised when a binary cannot be spawned or exits non-zero."""

    def __init__(
        self,
        binary: str,
        args: Sequence[str],
        exit_code: int | None = None,
        stderr: str = "",
        reason: str = "",
    ):
        self.binary = binary
        self.arguments = tuple(args)
        self.exit_code = exit_code
        self.stderr = stderr
        command = " ".join((binary, *self.arguments))
        if reason:
            message = f"{command}: {reason}"
        else:
            message = f"{command} exited with code {exit_code}"
        super().__init__(message)


@dataclass(frozen=True)
class ProcessResult:
    """
    Outcome of a successful process invocation.

    Attributes:
        stdout: Standard output, ANSI-stripped and trimmed
        exit_code: Process exit code (always 0 for results that are returned)
    """
    stdout: str
    exit_code: int = 0


class ProcessRunner(Protocol):
    def run(self, binary: str, args: Sequence[str]) -> ProcessResult:
        ...


class SubprocessRunner:
    """
    ProcessRunner backed by subprocess.run.

    No timeout is applied unless one is given: a hanging package manager
    blocks the caller.
    """

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout

    def run(self, binary: str, args: Sequence[str]) -> ProcessResult:
        """
        Run a binary and return its cleaned standard output.

        Args:
            binary: Executable name, resolved through PATH
            args: Arguments passed to the executable

        Returns:
            ProcessResult with trimmed, ANSI-stripped stdout

        Raises:
            ProcessError: If the binary cannot be started, times out,
                or exits with a non-zero status
        """
        try:
            proc = subprocess.run(
                [binary, *args],
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                stdin=subprocess.DEVNULL,
                text=True,
                timeout=self.timeout,
                check=False,
                env={**os.environ, "TERM": "dumb"},  # Disable ANSI/color output from subprocesses
            )
        except subprocess.TimeoutExpired as e:
            raise ProcessError(binary, args, reason=f"timed out after {self.timeout}s") from e
        except OSError as e:
            raise ProcessError(binary, args, reason=str(e)) from e

        if proc.returncode != 0:
            raise ProcessError(binary, args, exit_code=proc.returncode, stderr=proc.stderr or "")

        return ProcessResult(stdout=strip_ansi(proc.stdout or "").strip(), exit_code=proc.returncode)
