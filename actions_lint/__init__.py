"""Static analysis of GitHub Actions workflow files."""

from pathlib import Path
from typing import Optional, Union

from actions_lint.globals.lint_config import ConfigError, LintConfig
from actions_lint.globals.problems import Problem, ProblemLevel, Problems
from actions_lint.pipeline import DefaultPipeline

__all__ = [
    "ConfigError",
    "LintConfig",
    "Problem",
    "ProblemLevel",
    "Problems",
    "lint_workflow",
]


def lint_workflow(path: Union[str, Path], config: Optional[LintConfig] = None) -> Problems:
    """Validate one workflow file and return its problems sorted by position."""
    return DefaultPipeline(config).process(Path(path))
