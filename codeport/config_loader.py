"""
Configuration loader for codeport.

Loads configuration from YAML files with support for
environment variable interpolation.
"""

import logging
import os
import re
import shlex
from pathlib import Path
from typing import Any, Optional

import yaml

from .config import get_config, parse_max_iterations
from .errors import ConfigError
from .models import (
    AppConfig,
    BuildCheckConfig,
    ConvergenceConfig,
    LangfuseConfig,
    LoggingConfig,
    ModelConfig,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("codeport.yaml")

# Regex for environment variable interpolation: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def resolve_env_vars(value: str) -> str:
    """
    Resolve environment variable references in a string.

    Supports ${VAR} and ${VAR:-default} syntax.

    Args:
        value: String potentially containing env var references

    Returns:
        String with env vars resolved
    """

    def replace_match(match: re.Match) -> str:
        var_name = match.group(1)
        default_value = match.group(2) if match.group(2) is not None else ""
        return os.environ.get(var_name, default_value)

    return ENV_VAR_PATTERN.sub(replace_match, value)


def _substitute_env_vars_recursive(data: Any) -> Any:
    """Recursively substitute environment variables in a data structure."""
    if isinstance(data, dict):
        return {k: _substitute_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_substitute_env_vars_recursive(item) for item in data]
    elif isinstance(data, str):
        return resolve_env_vars(data)
    return data


def _parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.lower() == "true"
    return bool(value)


def _parse_optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _parse_model_config(data: dict) -> ModelConfig:
    """Parse model endpoint configuration from dict."""
    return ModelConfig(
        model=data.get("model", ModelConfig.model),
        base_url=data.get("base_url") or None,
        api_key=data.get("api_key") or None,
        temperature=_parse_optional_float(data.get("temperature")),
        timeout=float(data.get("timeout", ModelConfig.timeout)),
    )


def _parse_build_check_config(data: dict) -> BuildCheckConfig:
    """Parse build-check configuration from dict.

    ``command`` may be given as a list of arguments or a shell-style string.
    """
    command = data.get("command", ["./run_cargo_check"])
    if isinstance(command, str):
        command = shlex.split(command)
    return BuildCheckConfig(
        command=[str(part) for part in command],
        timeout=_parse_optional_float(data.get("timeout")),
    )


def _parse_convergence_config(data: dict) -> ConvergenceConfig:
    """Parse convergence loop configuration from dict."""
    defaults = ConvergenceConfig()
    return ConvergenceConfig(
        max_iterations=parse_max_iterations(
            data.get("max_iterations", defaults.max_iterations)
        ),
        report_dispatch_errors=_parse_bool(data.get("report_dispatch_errors", False)),
        system_prompt=data.get("system_prompt", defaults.system_prompt),
        analysis_instruction=data.get(
            "analysis_instruction", defaults.analysis_instruction
        ),
        work_instruction=data.get("work_instruction", defaults.work_instruction),
        fix_instruction=data.get("fix_instruction", defaults.fix_instruction),
    )


def _parse_logging_config(data: dict) -> LoggingConfig:
    """Parse logging configuration from dict."""
    return LoggingConfig(level=data.get("level", "INFO"))


def _parse_langfuse_config(data: dict) -> LangfuseConfig:
    """Parse Langfuse configuration from dict."""
    return LangfuseConfig(
        public_key=data.get("public_key", ""),
        secret_key=data.get("secret_key", ""),
        host=data.get("host", ""),
        debug=_parse_bool(data.get("debug", False)),
    )


def validate_app_config(app_config: AppConfig) -> list[str]:
    """
    Validate an application configuration.

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []
    if not app_config.model.model:
        errors.append("model.model must not be empty")
    if app_config.model.timeout <= 0:
        errors.append("model.timeout must be positive")
    if not app_config.build_check.command:
        errors.append("build_check.command must not be empty")
    if app_config.build_check.timeout is not None and app_config.build_check.timeout <= 0:
        errors.append("build_check.timeout must be positive")
    if not app_config.convergence.work_instruction.strip():
        errors.append("convergence.work_instruction must not be empty")
    if not isinstance(logging.getLevelName(str(app_config.log_level).upper()), int):
        errors.append(f"logging.level '{app_config.log_level}' is not a valid log level")
    return errors


def load_app_config(path: Optional[str] = None) -> AppConfig:
    """
    Load application configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file. If None, uses the
              CODEPORT_CONFIG env var or ``codeport.yaml`` in the current
              directory; when that file does not exist, configuration is
              taken from the environment alone.

    Returns:
        AppConfig with all configuration loaded

    Raises:
        FileNotFoundError: If an explicitly given config file doesn't exist
        ConfigError: If the config is invalid
    """
    explicit = path is not None or "CODEPORT_CONFIG" in os.environ
    if path is None:
        path = os.environ.get("CODEPORT_CONFIG", str(DEFAULT_CONFIG_PATH))

    config_path = Path(path)

    if not config_path.exists():
        if explicit:
            raise FileNotFoundError(f"Configuration file not found at {config_path}")
        logger.debug(f"No config file at {config_path}, using environment")
        app_config = get_config()
    else:
        logger.info(f"Loading configuration from {config_path}")
        # .env still feeds ${VAR} references in the file
        get_config()

        with open(config_path, "r") as f:
            try:
                raw_config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

        if raw_config is None:
            raw_config = {}
        if not isinstance(raw_config, dict):
            raise ConfigError(f"Configuration file {config_path} must be a mapping")

        raw_config = _substitute_env_vars_recursive(raw_config)

        try:
            app_config = AppConfig(
                version=str(raw_config.get("version", "1.0")),
                model=_parse_model_config(raw_config.get("model") or {}),
                build_check=_parse_build_check_config(
                    raw_config.get("build_check") or {}
                ),
                convergence=_parse_convergence_config(
                    raw_config.get("convergence") or {}
                ),
                logging=_parse_logging_config(raw_config.get("logging") or {}),
                langfuse=_parse_langfuse_config(raw_config.get("langfuse") or {}),
            )
        except ConfigError:
            raise
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e

    errors = validate_app_config(app_config)
    if errors:
        raise ConfigError("; ".join(errors))

    logger.debug(f"Configuration loaded: model={app_config.model.model}")
    return app_config
