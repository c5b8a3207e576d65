"""Environment-sourced configuration.

Required variables have no defaults. Everything else falls back to the values
the pipeline was tuned for.
"""

import os
import shlex
from dataclasses import dataclass
from typing import List, Mapping, Optional


REQUIRED_VARIABLES = ('AI_API_URL', 'AI_API_KEY', 'AI_MODEL')


class ConfigError(Exception):
    """Raised when required configuration is missing or malformed."""
    pass


@dataclass(frozen=True)
class Settings:
    """Runtime settings.

    Attributes:
        api_url: Chat-completion endpoint (full URL or base URL)
        api_key: Bearer credential for the endpoint
        model: Model identifier sent with every request
        retry_base_delay: Seconds waited before the first classification attempt
        retry_max_delay: Ceiling for the backoff delay (None = uncapped)
        retry_max_attempts: Give up after this many attempts (None = never)
        settle_delay: Seconds a new intake file must survive before it is queued
        gs_command: argv prefix for Ghostscript
        ocrmypdf_command: argv prefix for OCRmyPDF
        pdftotext_command: argv prefix for pdftotext
        rotate_threshold: Page rotation confidence threshold for OCRmyPDF
    """
    api_url: str
    api_key: str
    model: str
    retry_base_delay: float = 30.0
    retry_max_delay: Optional[float] = None
    retry_max_attempts: Optional[int] = None
    settle_delay: float = 10.0
    gs_command: tuple = ('gs',)
    ocrmypdf_command: tuple = ('ocrmypdf',)
    pdftotext_command: tuple = ('pdftotext',)
    rotate_threshold: float = 14.0

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Raises:
            ConfigError: If a required variable is missing or a value is malformed
        """
        env = os.environ if environ is None else environ

        missing = [name for name in REQUIRED_VARIABLES if not env.get(name)]
        if missing:
            raise ConfigError(f"{', '.join(missing)} not set")

        return cls(
            api_url=env['AI_API_URL'],
            api_key=env['AI_API_KEY'],
            model=env['AI_MODEL'],
            retry_base_delay=_float(env, 'AI_RETRY_BASE_DELAY', 30.0),
            retry_max_delay=_float(env, 'AI_RETRY_MAX_DELAY', None),
            retry_max_attempts=_int(env, 'AI_RETRY_MAX_ATTEMPTS', None),
            settle_delay=_float(env, 'SETTLE_DELAY', 10.0),
            gs_command=_command(env, 'GS_COMMAND', 'gs'),
            ocrmypdf_command=_command(env, 'OCRMYPDF_COMMAND', 'ocrmypdf'),
            pdftotext_command=_command(env, 'PDFTOTEXT_COMMAND', 'pdftotext'),
            rotate_threshold=_float(env, 'OCR_ROTATE_THRESHOLD', 14.0),
        )


def _float(env: Mapping[str, str], name: str, default: Optional[float]) -> Optional[float]:
    value = env.get(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got '{value}'")


def _int(env: Mapping[str, str], name: str, default: Optional[int]) -> Optional[int]:
    value = env.get(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got '{value}'")


def _command(env: Mapping[str, str], name: str, default: str) -> tuple:
    """Split a command override like 'uvx ocrmypdf' into an argv prefix."""
    parts: List[str] = shlex.split(env.get(name) or default)
    if not parts:
        raise ConfigError(f"{name} is empty")
    return tuple(parts)
