"""
Convergence loop.

Drives a whole translation session: one analysis instruction, then work
instructions until a cycle writes nothing to the destination or the build
check comes back clean. Build diagnostics become the next instruction.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..models.config import (
    DEFAULT_ANALYSIS_INSTRUCTION,
    DEFAULT_FIX_INSTRUCTION,
    DEFAULT_WORK_INSTRUCTION,
)
from ..tools.build_check import BuildChecker
from ..tools.project import Project
from .conversation import Conversation

logger = logging.getLogger(__name__)


class ConvergenceStatus(Enum):
    """Why the convergence loop stopped."""

    SUCCESS = "success"  # build check reported no diagnostics
    NO_CHANGES = "no_changes"  # a work turn left the destination untouched
    MAX_ITERATIONS = "max_iterations"


@dataclass
class ConvergenceResult:
    """Outcome of a convergence run."""

    status: ConvergenceStatus
    iterations: int
    diagnostics: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status is ConvergenceStatus.SUCCESS


class ConvergenceLoop:
    """Re-prompts the model with build diagnostics until the project builds."""

    def __init__(
        self,
        conversation: Conversation,
        destination: Project,
        build_checker: BuildChecker,
        max_iterations: Optional[int] = 20,
        analysis_instruction: str = DEFAULT_ANALYSIS_INSTRUCTION,
        work_instruction: str = DEFAULT_WORK_INSTRUCTION,
        fix_instruction: str = DEFAULT_FIX_INSTRUCTION,
    ):
        self.conversation = conversation
        self.destination = destination
        self.build_checker = build_checker
        self.max_iterations = max_iterations or None
        self.analysis_instruction = analysis_instruction
        self.work_instruction = work_instruction
        self.fix_instruction = fix_instruction

    def run(self) -> ConvergenceResult:
        """
        Run the session to completion.

        Returns:
            ConvergenceResult with the stop reason, the number of work
            instructions sent and the last diagnostics (if any).
        """
        logger.info("Analyzing source project")
        self.conversation.send_message(self.analysis_instruction)

        instruction = self.work_instruction
        diagnostics: Optional[str] = None
        iteration = 0

        while True:
            if self.max_iterations is not None and iteration >= self.max_iterations:
                logger.warning(
                    f"Stopping after {iteration} iterations without a clean build"
                )
                return ConvergenceResult(
                    ConvergenceStatus.MAX_ITERATIONS, iteration, diagnostics
                )

            iteration += 1
            logger.info(f"Iteration {iteration}: sending work instruction")
            self.conversation.send_message(instruction)

            if not self.destination.is_dirty():
                logger.info(f"Iteration {iteration}: destination unchanged, stopping")
                return ConvergenceResult(
                    ConvergenceStatus.NO_CHANGES, iteration, diagnostics
                )

            self.destination.clear_dirty()
            diagnostics = self.build_checker.check(self.destination.path)
            if diagnostics is None:
                logger.info(f"Iteration {iteration}: build check passed")
                return ConvergenceResult(ConvergenceStatus.SUCCESS, iteration)

            logger.info(f"Iteration {iteration}: build check failed, asking for fixes")
            instruction = self.fix_instruction + diagnostics
