"""Validation rules for GitHub Actions workflows.

Each rule checks one concern of a loaded workflow document. The rules run
by default are registered in ``rules.yml``.
"""

from .action_version import ActionVersion
from .deprecated_action import DeprecatedAction
from .job_needs import JobNeeds
from .permissions import Permissions
from .rule import Rule
from .runner_label import RunnerLabel
from .shellcheck import ShellCheck

__all__ = [
    "ActionVersion",
    "DeprecatedAction",
    "JobNeeds",
    "Permissions",
    "Rule",
    "RunnerLabel",
    "ShellCheck",
]
