"""
Configuration models for codeport.

Defines dataclasses for the YAML configuration file and the
environment-derived defaults.
"""

from dataclasses import dataclass, field
from typing import Optional

DEFAULT_SYSTEM_PROMPT = (
    "You are a large language model that is capable of converting project source "
    "code to Rust source code. "
    "You have access to two project directories: the source project directory is "
    "read-only and contains the source files of the original project. "
    "The destination project directory is initially empty and should be populated "
    "with project files in Rust language. "
    "When you propose an action or a change to the source code, execute this action "
    "or change right away."
)

DEFAULT_ANALYSIS_INSTRUCTION = (
    "Please analyze the project in the source directory, but don't make any "
    "changes at this point."
)

DEFAULT_WORK_INSTRUCTION = (
    "Now create Rust project in the destination project directory so that it "
    "matches the implementation in the source project directory."
)

DEFAULT_FIX_INSTRUCTION = (
    "Apparently there are some problems with the code. Please correct them. "
    "Here is the `cargo check` output:\n"
)


@dataclass
class ModelConfig:
    """Configuration for the chat-completion endpoint."""
    model: str = "gpt-4o"
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    temperature: Optional[float] = None
    timeout: float = 600.0


@dataclass
class BuildCheckConfig:
    """Configuration for the external build-check command."""
    command: list[str] = field(default_factory=lambda: ["./run_cargo_check"])
    timeout: Optional[float] = None


@dataclass
class ConvergenceConfig:
    """Configuration for the fix-and-recheck cycle."""
    max_iterations: Optional[int] = 20
    report_dispatch_errors: bool = False
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    analysis_instruction: str = DEFAULT_ANALYSIS_INSTRUCTION
    work_instruction: str = DEFAULT_WORK_INSTRUCTION
    fix_instruction: str = DEFAULT_FIX_INSTRUCTION


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse observability.

    Tracing auto-enables when both public_key and secret_key are provided.
    """
    public_key: str = ""
    secret_key: str = ""
    host: str = ""
    debug: bool = False

    @property
    def is_configured(self) -> bool:
        """Check if Langfuse is configured (both keys present)."""
        return bool(self.public_key and self.secret_key)


@dataclass
class AppConfig:
    """Application configuration container."""
    version: str = "1.0"
    model: ModelConfig = field(default_factory=ModelConfig)
    build_check: BuildCheckConfig = field(default_factory=BuildCheckConfig)
    convergence: ConvergenceConfig = field(default_factory=ConvergenceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)

    @property
    def log_level(self) -> str:
        return self.logging.level
