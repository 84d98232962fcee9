"""
Configuration Management for the Mock Lambda Bootstrap

This module reads the process environment (optionally layered over a .env
file) and provides centralized access to the values the bootstrap and the
emulated function runtime need.
"""

import os
import random
from typing import Any, Dict, Mapping, Optional
from dataclasses import dataclass

from dotenv import dotenv_values


DEFAULT_TASK_ROOT = "/var/task"
DEFAULT_EVENT_BODY = "{}"
DEFAULT_ENV_FILE = ".env"


def _random_account_id() -> str:
    return "".join(random.choice("0123456789") for _ in range(12))


@dataclass
class RuntimeConfig:
    """Where to find the handler and what to send it."""
    task_root: str = DEFAULT_TASK_ROOT
    handler: str = ""
    event_body: str = DEFAULT_EVENT_BODY


@dataclass
class FunctionConfig:
    """Function settings the managed runtime would normally supply."""
    name: str = "test"
    version: str = "$LATEST"
    memory_size_mb: int = 1536
    timeout_seconds: int = 300
    region: str = "us-east-1"
    account_id: str = ""


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Config:
    """
    Centralized configuration management.

    Values come from ``environ`` (``os.environ`` by default). When an env file
    exists its values are used for keys the environment does not define.
    """

    def __init__(self,
                 environ: Optional[Mapping[str, str]] = None,
                 env_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            environ: Environment mapping to read (defaults to os.environ)
            env_file: Path to a .env file (optional)
        """
        self.env_file = env_file
        self.environ = self._load_environ(os.environ if environ is None else environ)
        self._initialize_configs()

    def _load_environ(self, environ: Mapping[str, str]) -> Dict[str, str]:
        """Merge the env file underneath the given environment."""
        merged: Dict[str, str] = {}
        if self.env_file and os.path.exists(self.env_file):
            merged.update({k: v for k, v in dotenv_values(self.env_file).items() if v is not None})
        merged.update(environ)
        return merged

    def _get_env(self, key: str, default: Any, type_cast: type = str) -> Any:
        """Get environment variable with type casting and default."""
        value = self.environ.get(key, default)

        try:
            return type_cast(value)
        except (ValueError, TypeError):
            return default

    def _initialize_configs(self):
        """Initialize all configuration sections."""
        self.runtime = RuntimeConfig(
            task_root=self._get_env("LAMBDA_TASK_ROOT", DEFAULT_TASK_ROOT),
            handler=self._get_env("AWS_LAMBDA_FUNCTION_HANDLER", ""),
            event_body=self._get_env("AWS_LAMBDA_CONTEXT", DEFAULT_EVENT_BODY)
        )

        self.function = FunctionConfig(
            name=self._get_env("AWS_LAMBDA_FUNCTION_NAME", "test"),
            version=self._get_env("AWS_LAMBDA_FUNCTION_VERSION", "$LATEST"),
            memory_size_mb=self._get_env("AWS_LAMBDA_FUNCTION_MEMORY_SIZE", 1536, int),
            timeout_seconds=self._get_env("AWS_LAMBDA_FUNCTION_TIMEOUT", 300, int),
            region=self._get_env("AWS_REGION", self._get_env("AWS_DEFAULT_REGION", "us-east-1")),
            account_id=self._get_env("AWS_ACCOUNT_ID", "") or _random_account_id()
        )

        self.logging = LoggingConfig(
            level=self._get_env("LOG_LEVEL", "INFO"),
            format=self._get_env("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    @classmethod
    def from_environment(cls) -> "Config":
        """Build configuration from os.environ and the configured .env file."""
        env_file = os.environ.get("MOCK_BOOTSTRAP_ENV_FILE", DEFAULT_ENV_FILE)
        return cls(env_file=env_file)

    def to_dict(self) -> dict:
        """Convert configuration to dictionary for debugging."""
        return {
            "runtime": self.runtime.__dict__,
            "function": self.function.__dict__,
            "logging": self.logging.__dict__
        }
