"""
Configuration management for codeport.

Loads configuration from environment variables (and a local ``.env`` file)
with sensible defaults for local development.
"""

import os
import shlex
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigError
from .models.config import (
    AppConfig,
    BuildCheckConfig,
    ConvergenceConfig,
    LangfuseConfig,
    LoggingConfig,
    ModelConfig,
)


def _env_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, str(default)).lower() in ("1", "true", "yes")


def _env_optional_float(name: str) -> Optional[float]:
    value = os.getenv(name, "")
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {value!r}")


def parse_max_iterations(value) -> Optional[int]:
    """Parse an iteration cap; ``None``, empty and ``0`` mean unbounded."""
    if value is None or value == "":
        return None
    try:
        max_iterations = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"max_iterations must be an integer, got {value!r}")
    if max_iterations < 0:
        raise ConfigError("max_iterations must not be negative")
    return max_iterations or None


def get_config(load_env_file: bool = True) -> AppConfig:
    """Build the application configuration from environment variables."""
    if load_env_file:
        load_dotenv()

    defaults = ConvergenceConfig()
    command = os.getenv("BUILD_CHECK_COMMAND", "")

    return AppConfig(
        model=ModelConfig(
            model=os.getenv("MODEL", ModelConfig.model),
            base_url=os.getenv("OPENAI_BASE_URL") or None,
            api_key=os.getenv("OPENAI_API_KEY") or None,
            temperature=_env_optional_float("MODEL_TEMPERATURE"),
            timeout=_env_optional_float("MODEL_TIMEOUT") or ModelConfig.timeout,
        ),
        build_check=BuildCheckConfig(
            command=shlex.split(command) if command else ["./run_cargo_check"],
            timeout=_env_optional_float("BUILD_CHECK_TIMEOUT"),
        ),
        convergence=ConvergenceConfig(
            max_iterations=parse_max_iterations(
                os.getenv("MAX_CONVERGENCE_ITERATIONS", str(defaults.max_iterations))
            ),
            report_dispatch_errors=_env_bool("REPORT_DISPATCH_ERRORS"),
        ),
        logging=LoggingConfig(level=os.getenv("LOG_LEVEL", "INFO")),
        langfuse=LangfuseConfig(
            public_key=os.getenv("LANGFUSE_PUBLIC_KEY", ""),
            secret_key=os.getenv("LANGFUSE_SECRET_KEY", ""),
            host=os.getenv("LANGFUSE_HOST", ""),
            debug=_env_bool("LANGFUSE_DEBUG"),
        ),
    )
