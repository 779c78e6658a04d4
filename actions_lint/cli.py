import logging
import sys
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from actions_lint.cli_components.output_formatter import OutputFormatter, create_formatter
from actions_lint.cli_components.result_aggregator import (
    ResultAggregator,
    StandardResultAggregator,
)
from actions_lint.cli_components.validation_service import (
    StandardValidationService,
    ValidationService,
)
from actions_lint.globals.cli_config import CLIConfig
from actions_lint.globals.lint_config import ConfigError, LintConfig
from actions_lint.globals.validation_result import ValidationResult

logger = logging.getLogger(__name__)


class CLI(ABC):
    """Interface for CLI implementations."""

    @abstractmethod
    def run(self) -> int:
        """
        Run the CLI and return exit code.

        Returns:
            int: Exit code (0=success, 1=errors, 2=warnings only in strict mode)
        """
        pass


class StandardCLI(CLI):
    """
    Standard CLI implementation with separated concerns.

    Coordinates validation using pluggable components:
    - OutputFormatter: handles display formatting
    - ResultAggregator: collects and summarizes results
    - ValidationService: runs the validation pipeline
    """

    def __init__(
        self,
        config: CLIConfig,
        formatter: Optional[OutputFormatter] = None,
        aggregator: Optional[ResultAggregator] = None,
        validation_service: Optional[ValidationService] = None,
    ):
        """
        Initialize CLI with configuration and optional component overrides.

        Args:
            config: CLI configuration (workflow files, output format, strictness)
            formatter: Output formatter (defaults to the one named in config)
            aggregator: Result aggregator (defaults to StandardResultAggregator)
            validation_service: Validation service (defaults to
                StandardValidationService with the project's lint configuration)
        """
        self.config = config
        self.formatter = formatter or create_formatter(config.output_format)
        self.aggregator = aggregator or StandardResultAggregator(strict=config.strict)
        self.validation_service = validation_service

    def run(self) -> int:
        """Main CLI execution method.

        Orchestrates the complete validation process, including configuration
        loading, file discovery, validation execution, result collection, and
        output formatting.

        Validates the workflow files given in the config, or discovers and
        validates all workflow files in the .github/workflows/ directory.

        Returns:
            int: Exit code indicating validation results:
                - 0: Success (no errors)
                - 1: Errors found, or invalid configuration
                - 2: Warnings only, in strict mode
        """
        project_root = self._find_workflows_directory()

        if self.validation_service is None:
            try:
                lint_config = self._load_lint_config(project_root)
            except ConfigError as e:
                print(e, file=sys.stderr)
                return 1
            self.validation_service = StandardValidationService(lint_config)

        if self.config.workflow_files:
            files = [Path(f) for f in self.config.workflow_files]
        else:
            if not project_root:
                print(
                    "Could not find .github/workflows directory. "
                    "Please run from your project root or create the directory structure: "
                    ".github/workflows/",
                    file=sys.stderr,
                )
                return 1
            directory = project_root / ".github/workflows"
            files = self._find_workflow_files(directory)
            if not files:
                print(
                    f"No workflow files (*.yml, *.yaml) found in {directory}. "
                    f"Create workflow files or check the directory path.",
                    file=sys.stderr,
                )
                return 1

        try:
            results = self._validate_files(self.validation_service, files)
        except ImportError as e:
            print(f"Could not load validation rules: {e}", file=sys.stderr)
            return 1

        for result in results:
            self.aggregator.add_result(result)
        self._display_report()
        return self.aggregator.get_exit_code()

    def _load_lint_config(self, project_root: Optional[Path]) -> LintConfig:
        if self.config.config_file:
            return LintConfig.load(Path(self.config.config_file))
        return LintConfig.discover(project_root or Path.cwd())

    def _validate_files(
        self, service: ValidationService, files: List[Path]
    ) -> List[ValidationResult]:
        """Validate files, in parallel when more than one job is configured."""
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=Console(stderr=True),
            transient=True,
        ) as progress:
            progress.add_task(description=f"Validating {len(files)} file(s)...", total=None)
            if self.config.jobs > 1 and len(files) > 1:
                logger.debug("Validating %d files with %d jobs", len(files), self.config.jobs)
                with ThreadPoolExecutor(max_workers=self.config.jobs) as executor:
                    return list(
                        executor.map(lambda f: service.validate_file(f, self.config), files)
                    )
            return [service.validate_file(f, self.config) for f in files]

    def _display_report(self) -> None:
        report = self.formatter.format_report(
            self.aggregator.get_results(),
            self.aggregator.get_total_errors(),
            self.aggregator.get_total_warnings(),
            self.aggregator.get_max_level(),
        )
        if report:
            print(report)

    def _find_workflows_directory(self, marker: str = ".github") -> Optional[Path]:
        """Find the project root containing .github directory."""
        start_dir = Path.cwd()
        for directory in [start_dir] + list(start_dir.parents)[:2]:
            if (directory / marker).is_dir():
                return directory
        return None

    def _find_workflow_files(self, directory: Path) -> List[Path]:
        """Find all YAML workflow files in a directory."""
        return sorted(list(directory.glob("*.yml")) + list(directory.glob("*.yaml")))
