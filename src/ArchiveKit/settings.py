# === NAVMAP v1 ===
# {
#   "module": "ArchiveKit.settings",
#   "purpose": "Environment-driven defaults for extraction options and logging",
#   "sections": [
#     {"id": "environment", "name": "Environment Overrides", "anchor": "ENV", "kind": "pydantic"},
#     {"id": "defaults", "name": "Cached Default Options", "anchor": "DEF", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Environment-driven defaults for extraction options and logging.

Callers that pass ``options=None`` to the extraction loop get the options built
here: the library defaults with any ``ARCHIVEKIT_*`` environment variables
applied on top.  The result is cached per process; tests and long-running
services call :func:`invalidate_default_options` after changing the
environment.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Dict, Optional

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError
from .io.extraction_policy import ExtractionOptions

__all__ = [
    "ExtractionEnvironment",
    "load_environment",
    "get_default_options",
    "invalidate_default_options",
]

_DEFAULT_OPTIONS_LOCK = threading.Lock()
_DEFAULT_OPTIONS_CACHE: Optional[ExtractionOptions] = None


class ExtractionEnvironment(BaseSettings):
    """Pydantic settings model exposing environment-derived overrides."""

    max_allowed_data_length: Optional[int] = Field(default=None, ge=0)
    max_file_name_length: Optional[int] = Field(default=None, ge=1, le=4096)
    enforce_written_limit: Optional[bool] = None
    log_level: str = "INFO"
    log_dir: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_prefix="ARCHIVEKIT_", case_sensitive=False, extra="ignore"
    )

    def option_overrides(self) -> Dict[str, object]:
        """Return the fields that map onto :class:`ExtractionOptions`, unset ones omitted."""
        data = self.model_dump(
            include={"max_allowed_data_length", "max_file_name_length", "enforce_written_limit"},
            exclude_none=True,
        )
        return data


def load_environment() -> ExtractionEnvironment:
    """Read ``ARCHIVEKIT_*`` variables, raising :class:`ConfigError` on bad values."""

    try:
        return ExtractionEnvironment()
    except PydanticValidationError as exc:
        raise ConfigError(f"Invalid ARCHIVEKIT_* environment settings: {exc}") from exc


def get_default_options() -> ExtractionOptions:
    """Return the cached default :class:`ExtractionOptions` for this process."""

    global _DEFAULT_OPTIONS_CACHE  # noqa: PLW0603

    with _DEFAULT_OPTIONS_LOCK:
        if _DEFAULT_OPTIONS_CACHE is None:
            overrides = load_environment().option_overrides()
            if overrides:
                logging.getLogger("ArchiveKit").debug(
                    "applied environment overrides",
                    extra={"stage": "config", "overrides": overrides},
                )
            _DEFAULT_OPTIONS_CACHE = ExtractionOptions(**overrides)
        return _DEFAULT_OPTIONS_CACHE


def invalidate_default_options() -> None:
    """Invalidate the cached default options."""

    global _DEFAULT_OPTIONS_CACHE  # noqa: PLW0603

    with _DEFAULT_OPTIONS_LOCK:
        _DEFAULT_OPTIONS_CACHE = None
