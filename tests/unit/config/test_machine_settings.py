from __future__ import annotations

import logging
from pathlib import Path

import pytest

from asyncstate.core.config import InvalidTriggerPolicy, MachineSettings
from asyncstate.core.exceptions import ConfigurationError

from helpers.io_utils import write_text, write_yaml


def test_defaults() -> None:
    settings = MachineSettings()

    assert settings.invalid_trigger_policy is InvalidTriggerPolicy.LOG
    assert settings.log_level == "INFO"
    assert settings.log_path is None


def test_from_file_reads_asyncstate_section(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    write_yaml(
        path,
        {
            "asyncstate": {
                "invalid_trigger_policy": "ignore",
                "logging": {"level": "DEBUG", "path": "logs/machine.log"},
            },
            "unrelated": {"key": "value"},
        },
    )

    settings = MachineSettings.from_file(path)

    assert settings.invalid_trigger_policy is InvalidTriggerPolicy.IGNORE
    assert settings.log_level == "DEBUG"
    assert settings.log_path == Path("logs/machine.log")


def test_from_file_without_section_uses_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    write_yaml(path, {"other": True})

    assert MachineSettings.from_file(path).invalid_trigger_policy is InvalidTriggerPolicy.LOG


def test_missing_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Cannot read settings file"):
        MachineSettings.from_file(tmp_path / "missing.yaml")


def test_non_mapping_document_is_an_error(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    write_text(path, "just a string\n")

    with pytest.raises(ConfigurationError, match="must contain a mapping"):
        MachineSettings.from_file(path)


@pytest.mark.parametrize(
    "section",
    [
        {"invalid_trigger_policy": "explode"},
        {"logging": {"level": "LOUD"}},
        {"logging": {"rotate": True}},
        {"unknown": 1},
    ],
)
def test_invalid_sections_are_rejected(section) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        MachineSettings(section)

    assert excinfo.value.context["errors"]


def test_configure_logging_installs_file_handler(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "asyncstate.log"
    settings = MachineSettings({"logging": {"level": "DEBUG", "path": str(log_file)}})

    settings.configure_logging()
    logging.getLogger("asyncstate.core.state.machine").debug("moved")

    assert log_file.exists()
    assert "moved" in log_file.read_text(encoding="utf-8")


def test_configure_logging_without_path_is_a_no_op() -> None:
    MachineSettings().configure_logging()

    assert not any(isinstance(h, logging.FileHandler) for h in logging.getLogger("asyncstate").handlers)
