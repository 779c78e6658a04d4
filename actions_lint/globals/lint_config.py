"""Project configuration file.

The configuration lives in ``.github/actions-lint.yaml`` (or ``.yml``) and
suppresses false positives for project specific setups::

    self-hosted-runner:
      labels:
        - linux-gpu
        - build-*
    config-variables:
      - DEPLOY_TARGET
    disable:
      - shellcheck
"""

import fnmatch
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema
import yaml

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES = ("actions-lint.yaml", "actions-lint.yml")

CONFIG_SCHEMA: Dict[str, Any] = {
    "type": ["object", "null"],
    "additionalProperties": False,
    "properties": {
        "self-hosted-runner": {
            "type": ["object", "null"],
            "additionalProperties": False,
            "properties": {
                "labels": {"type": ["array", "null"], "items": {"type": "string"}},
            },
        },
        "config-variables": {"type": ["array", "null"], "items": {"type": "string"}},
        "disable": {"type": ["array", "null"], "items": {"type": "string"}},
    },
}


class ConfigError(Exception):
    """Raised when the configuration file is unreadable or invalid."""


@dataclass
class LintConfig:
    """
    Settings affecting which problems are reported.

    Attributes:
        runner_labels: Glob patterns of self-hosted runner labels
        config_variables: Known ``vars`` names, or None to skip the check
        disabled_rules: Rule ids that are not run
    """

    runner_labels: List[str] = field(default_factory=list)
    config_variables: Optional[List[str]] = None
    disabled_rules: List[str] = field(default_factory=list)

    def is_known_label(self, label: str) -> bool:
        return any(fnmatch.fnmatchcase(label.lower(), p.lower()) for p in self.runner_labels)

    def is_disabled(self, rule: str) -> bool:
        return rule in self.disabled_rules

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "LintConfig":
        try:
            jsonschema.validate(data, CONFIG_SCHEMA)
        except jsonschema.exceptions.ValidationError as e:
            location = ".".join(str(item) for item in e.absolute_path) or "<root>"
            raise ConfigError(f"invalid configuration at {location}: {e.message}") from e

        data = data or {}
        runner = data.get("self-hosted-runner") or {}
        return cls(
            runner_labels=list(runner.get("labels") or []),
            config_variables=(
                list(data["config-variables"])
                if data.get("config-variables") is not None
                else None
            ),
            disabled_rules=list(data.get("disable") or []),
        )

    @classmethod
    def load(cls, path: Path) -> "LintConfig":
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"could not read configuration {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"could not parse configuration {path}: {e}") from e
        logger.debug("Loaded configuration from %s", path)
        return cls.from_dict(data)

    @classmethod
    def discover(cls, project_root: Path) -> "LintConfig":
        """Load the configuration file of a project, or defaults if there is none."""
        for name in CONFIG_FILE_NAMES:
            candidate = project_root / ".github" / name
            if candidate.is_file():
                return cls.load(candidate)
        logger.debug("No configuration file found under %s", project_root / ".github")
        return cls()
