"""Types shared across the pipeline, rules and CLI."""

from .cli_config import CLIConfig
from .lint_config import ConfigError, LintConfig
from .problems import Problem, ProblemLevel, Problems
from .process_stage import ProcessStage
from .validation_result import ValidationResult

__all__ = [
    "CLIConfig",
    "ConfigError",
    "LintConfig",
    "Problem",
    "ProblemLevel",
    "Problems",
    "ProcessStage",
    "ValidationResult",
]
