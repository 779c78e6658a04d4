import logging
from abc import abstractmethod
from pathlib import Path
from typing import Optional

from actions_lint import pipeline_stages
from actions_lint.globals.lint_config import LintConfig
from actions_lint.globals.problems import Problems
from actions_lint.globals.process_stage import ProcessStage

logger = logging.getLogger(__name__)

# Problems of the loader and schema stages cannot be disabled
MANDATORY_RULES = (
    pipeline_stages.PyYAMLParser.READ_RULE,
    pipeline_stages.PyYAMLParser.SYNTAX_RULE,
)


class Pipeline(ProcessStage[Path, Problems]):
    """
    Interface for pipelines validating one workflow file.

    Classes implementing this interface should provide a `process` method
    returning the problems found in the file.
    """

    def __init__(self, config: Optional[LintConfig] = None) -> None:
        self.problems: Problems = Problems()
        self.config = config or LintConfig()

    @abstractmethod
    def process(self, file: Path) -> Problems:
        """
        Validate a workflow file and return problems found.

        Args:
            file (Path): Path to the workflow file to validate.

        Returns:
            Problems: Deduplicated problems, sorted by position.
        """
        pass


class DefaultPipeline(Pipeline):
    """Loader, schema validator, expression checker and rule engine in sequence."""

    def __init__(self, config: Optional[LintConfig] = None) -> None:
        super().__init__(config)
        self.parser = pipeline_stages.PyYAMLParser(self.problems)
        self.schema_validator = pipeline_stages.SchemaValidator(self.problems)
        self.expression_checker = pipeline_stages.ExpressionChecker(self.problems, self.config)
        self.validator = pipeline_stages.ExtensibleValidator(self.problems, self.config)

    def process(self, file: Path) -> Problems:
        document = self.parser.process(file)
        if document is None:
            logger.info("Skipping checks of %s, it could not be loaded", file)
            return self.problems

        document = self.schema_validator.process(document)
        document = self.expression_checker.process(document)
        self.validator.process(document)

        problems = self.problems
        disabled = [r for r in self.config.disabled_rules if r not in MANDATORY_RULES]
        if disabled:
            problems = problems.without_rules(disabled)
        problems.deduplicate()
        problems.sort()
        return problems
