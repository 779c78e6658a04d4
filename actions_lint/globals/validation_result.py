from dataclasses import dataclass
from pathlib import Path

from actions_lint.globals.problems import ProblemLevel, Problems


@dataclass
class ValidationResult:
    """Problems found in a single workflow file."""

    file: Path
    problems: Problems
    max_level: ProblemLevel
    error_count: int
    warning_count: int

    @classmethod
    def from_problems(cls, file: Path, problems: Problems) -> "ValidationResult":
        return cls(
            file=file,
            problems=problems,
            max_level=problems.max_level,
            error_count=problems.n_error,
            warning_count=problems.n_warning,
        )
