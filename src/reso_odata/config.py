"""
Client configuration.

Values come from the caller or from environment variables (optionally
loaded from a ``.env`` file):

  RESO_BASE_URL     Service base URL (required)
  RESO_TOKEN        Bearer token (required)
  RESO_DATASET_ID   Dataset path segment appended to the base URL (optional)
  RESO_TIMEOUT      Per-request timeout in seconds (optional, default 30)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
ENV_PREFIX = "RESO_"


def load_env(path: str | Path | None = None) -> bool:
    """
    Load variables from a ``.env`` file into the process environment.

    Without a path, ``.env`` is searched for from the working directory
    upwards. Existing environment variables win. A missing file is not an
    error; returns whether anything was loaded.
    """
    if path is None:
        path = find_dotenv(usecwd=True)
        if not path:
            return False
    if not Path(path).exists():
        logger.debug("No env file at %s", path)
        return False
    return load_dotenv(path, override=False)


class ClientConfig(BaseModel):
    """Connection settings for one RESO Web API service."""

    model_config = ConfigDict(frozen=True)

    base_url: str
    token: str
    dataset_id: str | None = None
    timeout: float = DEFAULT_TIMEOUT

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("base_url must not be blank")
        if not value.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return value

    @field_validator("token")
    @classmethod
    def _check_token(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("token must not be blank")
        return value

    @field_validator("dataset_id")
    @classmethod
    def _blank_dataset_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().strip("/")
        return value or None

    @field_validator("timeout")
    @classmethod
    def _check_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be greater than zero")
        return value

    @property
    def service_root(self) -> str:
        """Base URL plus the dataset segment, without a trailing slash."""
        if self.dataset_id:
            return f"{self.base_url}/{self.dataset_id}"
        return self.base_url

    @classmethod
    def create(cls, **values: object) -> ClientConfig:
        """Construct, turning pydantic validation failures into ``ConfigurationError``."""
        try:
            return cls(**values)  # type: ignore[arg-type]
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigurationError(f"Invalid client configuration: {problems}") from e

    @classmethod
    def from_env(
        cls,
        prefix: str = ENV_PREFIX,
        environ: Mapping[str, str] | None = None,
    ) -> ClientConfig:
        """
        Read the configuration from environment variables.

        Raises:
            ConfigurationError: A required variable is missing or a value is invalid.
        """
        env = os.environ if environ is None else environ

        missing = [
            f"{prefix}{name}"
            for name in ("BASE_URL", "TOKEN")
            if not env.get(f"{prefix}{name}", "").strip()
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variable(s): {', '.join(missing)}"
            )

        raw_timeout = env.get(f"{prefix}TIMEOUT", "").strip()
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
        except ValueError as e:
            raise ConfigurationError(
                f"{prefix}TIMEOUT must be a number of seconds, got {raw_timeout!r}"
            ) from e

        return cls.create(
            base_url=env[f"{prefix}BASE_URL"],
            token=env[f"{prefix}TOKEN"],
            dataset_id=env.get(f"{prefix}DATASET_ID") or None,
            timeout=timeout,
        )

    def __repr__(self) -> str:
        return (
            f"ClientConfig(base_url={self.base_url!r}, dataset_id={self.dataset_id!r}, "
            f"timeout={self.timeout!r}, token='***')"
        )
