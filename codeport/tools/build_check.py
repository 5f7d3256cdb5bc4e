"""
External build check.

Runs a configurable command against a project root and returns its
diagnostics, or None when the project builds cleanly.
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence, Union

from ..errors import BuildCheckError

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = ("./run_cargo_check",)


class BuildChecker:
    """Runs ``command <project root>`` and reports what it printed.

    Diagnostics are read from stdout; an empty stdout means success. If the
    command prints nothing to stdout but exits non-zero, stderr is reported
    instead.
    """

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_COMMAND,
        timeout: Optional[float] = None,
    ):
        if not command:
            raise ValueError("Build check command must not be empty")
        self.command = list(command)
        self.timeout = timeout

    def check(self, root: Union[str, Path]) -> Optional[str]:
        """
        Run the build check on a project root.

        Returns:
            The diagnostic text, or None if there is nothing to report.

        Raises:
            BuildCheckError: If the command cannot be started or times out.
        """
        argv = [*self.command, str(root)]
        logger.info(f"Running build check: {' '.join(argv)}")
        try:
            completed = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise BuildCheckError(f"Build check '{argv[0]}' failed to run: {e}") from e

        diagnostics = completed.stdout
        if not diagnostics.strip() and completed.returncode != 0:
            diagnostics = completed.stderr.strip() or (
                f"Build check exited with status {completed.returncode}"
            )

        if not diagnostics.strip():
            logger.info("Build check passed")
            return None

        logger.info(
            f"Build check reported {len(diagnostics.splitlines())} line(s) of diagnostics"
        )
        return diagnostics
