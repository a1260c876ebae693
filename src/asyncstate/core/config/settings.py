"""Runtime settings for state machines.

Settings live under the ``asyncstate`` key of a YAML document:

    asyncstate:
      invalid_trigger_policy: raise   # log | raise | ignore
      logging:
        level: DEBUG
        path: logs/asyncstate.log

The section is validated against the bundled ``settings`` schema.
"""
from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from functools import cached_property
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..audit.stdlib_logging import configure_stdlib_logging
from ..exceptions import ConfigurationError
from ..schemas import SchemaValidationError, validate_payload
from ..utils.io import read_yaml


class InvalidTriggerPolicy(str, Enum):
    """What a machine does when notified of an invalid trigger."""

    LOG = "log"
    RAISE = "raise"
    IGNORE = "ignore"


class MachineSettings:
    SECTION = "asyncstate"

    def __init__(self, section: Optional[Mapping[str, Any]] = None) -> None:
        data: Dict[str, Any] = dict(section or {})
        try:
            validate_payload(data, "settings")
        except SchemaValidationError as exc:
            raise ConfigurationError(
                f"Invalid {self.SECTION} settings: {exc}",
                context={"errors": "; ".join(exc.errors)},
            ) from exc
        self.section = data

    @classmethod
    def from_file(cls, path: Path) -> "MachineSettings":
        """Load settings from the ``asyncstate`` section of a YAML file.

        A missing section yields default settings; a missing file is an error.
        """
        try:
            document = read_yaml(Path(path), default={}, raise_on_error=True)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigurationError(
                f"Cannot read settings file {path}: {exc}",
                context={"path": str(path)},
            ) from exc
        if not isinstance(document, Mapping):
            raise ConfigurationError(
                f"Settings file {path} must contain a mapping",
                context={"path": str(path)},
            )
        return cls(document.get(cls.SECTION) or {})

    @cached_property
    def invalid_trigger_policy(self) -> InvalidTriggerPolicy:
        return InvalidTriggerPolicy(self.section.get("invalid_trigger_policy", "log"))

    @cached_property
    def log_level(self) -> str:
        logging_cfg = self.section.get("logging") or {}
        return str(logging_cfg.get("level", "INFO"))

    @cached_property
    def log_path(self) -> Optional[Path]:
        logging_cfg = self.section.get("logging") or {}
        raw = logging_cfg.get("path")
        return Path(raw) if raw else None

    def configure_logging(self) -> None:
        """Install the file log handler when a log path is configured."""
        if self.log_path is not None:
            configure_stdlib_logging(log_path=self.log_path, level=self.log_level)


__all__ = ["InvalidTriggerPolicy", "MachineSettings"]
