#!/usr/bin/env python3
"""
codeport command line interface

Translates the project in SOURCE into the (initially empty) project in
DESTINATION by letting a chat model read, write and build-check files until
the destination builds.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .config_loader import load_app_config
from .errors import CodeportError
from .models.messages import ConversationMessage, Role
from .orchestration import ConvergenceStatus
from .session import TranslationSession
from .tools import Project, ToolRegistry, register_project_tools
from .tracing import init_tracing_client, shutdown_tracing

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_CONVERGED = 2
EXIT_INTERRUPTED = 130

_PRINTED_ROLES = (Role.SYSTEM, Role.USER, Role.ASSISTANT)


def setup_logging(level: str = "INFO", verbose: bool = False) -> None:
    """Configure logging based on verbosity level."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def print_message(message: ConversationMessage) -> None:
    """Print the human-readable part of the transcript as it grows."""
    if message.content and message.role in _PRINTED_ROLES:
        print(f"==== {message.role.value.title()} ====\n{message.content}\n", flush=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codeport",
        description="Translate a project into another language with a tool-using LLM",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s ./project_src ./project_dst
  %(prog)s -v --model gpt-4o --max-iterations 5 ./project_src ./project_dst

The model endpoint is configured with OPENAI_API_KEY / OPENAI_BASE_URL / MODEL
(a .env file is honoured) or a YAML file given with --config.
""",
    )
    parser.add_argument("source", type=Path, help="path to the source project directory")
    parser.add_argument(
        "destination", type=Path, help="path to the destination project directory"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )
    parser.add_argument(
        "-c", "--config", type=str, default=None, help="Path to a YAML config file"
    )
    parser.add_argument("--model", type=str, default=None, help="Model name override")
    parser.add_argument(
        "--max-iterations",
        type=int,
        default=None,
        help="Maximum fix-and-recheck iterations (0 for no limit)",
    )
    parser.add_argument(
        "--report-dispatch-errors",
        action="store_true",
        help="Return tool dispatch errors to the model instead of stopping",
    )
    parser.add_argument(
        "--list-tools",
        action="store_true",
        help="List the tools offered to the model and exit",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        app_config = load_app_config(args.config)
    except (CodeportError, FileNotFoundError) as e:
        setup_logging(verbose=args.verbose)
        logger.error(f"Configuration error: {e}")
        return EXIT_ERROR

    setup_logging(app_config.log_level, args.verbose)

    if args.model:
        app_config.model.model = args.model
    if args.max_iterations is not None:
        app_config.convergence.max_iterations = args.max_iterations or None
    if args.report_dispatch_errors:
        app_config.convergence.report_dispatch_errors = True

    if not args.source.is_dir():
        logger.error("The source project directory does not exist.")
        return EXIT_ERROR
    if not args.destination.is_dir():
        logger.error("The destination project directory does not exist.")
        return EXIT_ERROR

    if args.list_tools:
        registry = register_project_tools(
            ToolRegistry(), Project(args.source), Project(args.destination)
        )
        print(registry.get_tools_summary())
        return EXIT_OK

    init_tracing_client(
        public_key=app_config.langfuse.public_key,
        secret_key=app_config.langfuse.secret_key,
        host=app_config.langfuse.host,
        debug=app_config.langfuse.debug,
    )

    session: Optional[TranslationSession] = None
    try:
        session = TranslationSession(
            args.source,
            args.destination,
            app_config=app_config,
            echo=print_message,
        )
        result = session.run()
    except CodeportError as e:
        logger.error(f"Session failed: {e}")
        return EXIT_ERROR
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED
    finally:
        if session is not None:
            session.close()
        shutdown_tracing()

    print(f"Finished: {result.status.value} after {result.iterations} iteration(s)")
    if result.status is ConvergenceStatus.MAX_ITERATIONS:
        return EXIT_NOT_CONVERGED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
