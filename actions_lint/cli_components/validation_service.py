from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from actions_lint.globals.cli_config import CLIConfig
from actions_lint.globals.lint_config import LintConfig
from actions_lint.globals.validation_result import ValidationResult
from actions_lint.pipeline import DefaultPipeline


class ValidationService(ABC):
    """Interface for validation services that process workflow files."""

    @abstractmethod
    def validate_file(self, file: Path, config: CLIConfig) -> ValidationResult:
        """Validate a single workflow file and return results."""
        pass


class StandardValidationService(ValidationService):
    """
    Standard validation service using the pipeline architecture.

    Every file gets its own pipeline, so files can be validated from
    several threads at once.
    """

    def __init__(self, lint_config: Optional[LintConfig] = None):
        self.lint_config = lint_config or LintConfig()

    def validate_file(self, file: Path, config: CLIConfig) -> ValidationResult:
        """Validate a single workflow file and return results."""
        pipeline = DefaultPipeline(self.lint_config)
        problems = pipeline.process(file)

        # Filter out warnings if quiet mode is enabled
        if config.no_warnings:
            problems = problems.without_warnings()

        return ValidationResult.from_problems(file, problems)
