"""
Translation session wiring.

Builds the tool registry, the projects, the model client, the conversation
and the convergence loop from an AppConfig, and runs them under one trace.
"""

import logging
import uuid
from pathlib import Path
from typing import Optional, Union

from .llm_call import LLMClient
from .models.config import AppConfig
from .models.messages import ConversationMessage
from .orchestration import (
    Conversation,
    ConvergenceLoop,
    ConvergenceResult,
)
from .orchestration.conversation import MessageCallback
from .tools import BuildChecker, Project, ToolRegistry, register_project_tools
from .tracing import TracingContext, get_tracing_client

logger = logging.getLogger(__name__)


class TranslationSession:
    """One source -> destination translation run."""

    def __init__(
        self,
        source: Union[str, Path],
        destination: Union[str, Path],
        app_config: Optional[AppConfig] = None,
        llm_client: Optional[LLMClient] = None,
        build_checker: Optional[BuildChecker] = None,
        echo: Optional[MessageCallback] = None,
    ):
        self.config = app_config or AppConfig()
        self.session_id = uuid.uuid4().hex[:12]

        self.source = Project(source)
        self.destination = Project(destination)
        self.registry = register_project_tools(
            ToolRegistry(), self.source, self.destination
        )

        self.llm_client = llm_client or LLMClient(self.config.model)
        self.build_checker = build_checker or BuildChecker(
            command=self.config.build_check.command,
            timeout=self.config.build_check.timeout,
        )
        self.tracing_context = TracingContext(session_id=self.session_id)

        convergence = self.config.convergence
        self.conversation = Conversation(
            llm_client=self.llm_client,
            registry=self.registry,
            messages=[ConversationMessage.system(convergence.system_prompt)],
            echo=echo,
            tracing_context=self.tracing_context,
            report_dispatch_errors=convergence.report_dispatch_errors,
        )
        self.loop = ConvergenceLoop(
            conversation=self.conversation,
            destination=self.destination,
            build_checker=self.build_checker,
            max_iterations=convergence.max_iterations,
            analysis_instruction=convergence.analysis_instruction,
            work_instruction=convergence.work_instruction,
            fix_instruction=convergence.fix_instruction,
        )

    def run(self) -> ConvergenceResult:
        """Run the convergence loop, recording the session as one trace."""
        logger.info(
            f"[{self.session_id}] Translating {self.source.path} -> "
            f"{self.destination.path} with {self.llm_client.model}"
        )
        self.tracing_context.start_trace(
            input={
                "source": str(self.source.path),
                "destination": str(self.destination.path),
            },
            metadata={"model": self.llm_client.model},
        )
        try:
            result = self.loop.run()
        except Exception as e:
            self.tracing_context.end_trace(output=str(e), status="error")
            _flush_tracing()
            raise

        self.tracing_context.end_trace(
            output={
                "status": result.status.value,
                "iterations": result.iterations,
            },
            metadata={"turns": self.conversation.turns},
        )
        _flush_tracing()
        logger.info(
            f"[{self.session_id}] Finished: {result.status.value} after "
            f"{result.iterations} iteration(s), {self.conversation.turns} model turn(s)"
        )
        return result

    def close(self) -> None:
        self.llm_client.close()


def _flush_tracing() -> None:
    """Flush tracing client if available."""
    client = get_tracing_client()
    if client:
        client.flush()
