"""External command execution helpers.

Terraform and the GitHub CLI are driven as subprocesses. Every call
goes through run_command so failures surface as CommandError with the
command line, exit code and captured output.
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Union


logger = logging.getLogger(__name__)


class CommandError(Exception):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, command: List[str], returncode: int,
                 stdout: str = "", stderr: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.stdout = stdout or ""
        self.stderr = stderr or ""
        detail = self.stderr.strip() or self.stdout.strip()
        message = f"Command failed ({returncode}): {' '.join(command)}"
        if detail:
            message = f"{message}\n{detail}"
        super().__init__(message)


def command_exists(name: str) -> bool:
    """Check whether an executable is available on PATH."""
    return shutil.which(name) is not None


def run_command(
    command: List[str],
    cwd: Optional[Union[str, Path]] = None,
    input_text: Optional[str] = None,
    capture: bool = True,
    check: bool = True,
) -> subprocess.CompletedProcess:
    """Run an external command.

    Args:
        command: Command and arguments
        cwd: Working directory for the command
        input_text: Text written to the command's stdin
        capture: Capture stdout/stderr instead of streaming to the terminal
        check: Raise CommandError on non-zero exit

    Returns:
        Completed process

    Raises:
        CommandError: When check is set and the command fails
    """
    logger.debug("Running: %s (cwd=%s)", " ".join(command), cwd or ".")

    try:
        result = subprocess.run(
            command,
            cwd=str(cwd) if cwd is not None else None,
            input=input_text,
            capture_output=capture,
            text=True,
        )
    except FileNotFoundError:
        raise CommandError(command, 127, stderr=f"{command[0]}: command not found")

    if check and result.returncode != 0:
        raise CommandError(command, result.returncode, result.stdout, result.stderr)

    return result
