from abc import ABC, abstractmethod
from typing import Dict, List

from actions_lint.globals.problems import ProblemLevel
from actions_lint.globals.validation_result import ValidationResult


def exit_code_for(max_level: ProblemLevel, strict: bool = False) -> int:
    """
    Process exit code for the worst problem of a run.

    Args:
        max_level: Highest level reported over all files
        strict: Whether warnings alone fail the run

    Returns:
        int: 0 when clean, 1 on errors, 2 on warnings in strict mode
    """
    match max_level:
        case ProblemLevel.NON:
            return 0
        case ProblemLevel.WAR:
            return 2 if strict else 0
        case ProblemLevel.ERR:
            return 1
        case _:
            raise ValueError(f"Invalid problem level: {max_level}")


class ResultAggregator(ABC):
    """Collects the per-file results of one run for reporting."""

    @abstractmethod
    def add_result(self, result: ValidationResult) -> None:
        pass

    @abstractmethod
    def get_results(self) -> List[ValidationResult]:
        """Results in report order."""
        pass

    @abstractmethod
    def get_total_errors(self) -> int:
        pass

    @abstractmethod
    def get_total_warnings(self) -> int:
        pass

    @abstractmethod
    def get_max_level(self) -> ProblemLevel:
        pass

    @abstractmethod
    def get_exit_code(self) -> int:
        pass


class StandardResultAggregator(ResultAggregator):
    """
    Aggregation keyed by file path.

    Results may arrive in any order when files are validated in parallel;
    they are reported sorted by path. A file passed more than once is
    reported once, with its latest result.
    """

    def __init__(self, strict: bool = False) -> None:
        self.strict = strict
        self._results: Dict[str, ValidationResult] = {}

    def add_result(self, result: ValidationResult) -> None:
        self._results[str(result.file)] = result

    def get_results(self) -> List[ValidationResult]:
        return [self._results[path] for path in sorted(self._results)]

    def get_total_errors(self) -> int:
        return sum(result.error_count for result in self._results.values())

    def get_total_warnings(self) -> int:
        return sum(result.warning_count for result in self._results.values())

    def get_max_level(self) -> ProblemLevel:
        levels = [result.max_level.value for result in self._results.values()]
        return ProblemLevel(max(levels, default=ProblemLevel.NON.value))

    def get_exit_code(self) -> int:
        return exit_code_for(self.get_max_level(), self.strict)
