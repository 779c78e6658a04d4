import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from actions_lint.globals.problems import Problem, ProblemLevel
from actions_lint.globals.validation_result import ValidationResult


class OutputFormatter(ABC):
    """Interface for formatting CLI output."""

    @abstractmethod
    def format_file_header(self, file: Path) -> str:
        """Format header for a file being validated."""
        pass

    @abstractmethod
    def format_problem(self, problem: Problem) -> str:
        """Format a single problem for display."""
        pass

    @abstractmethod
    def format_no_problems(self) -> str:
        """Format message when no problems found."""
        pass

    @abstractmethod
    def format_summary(
        self, total_errors: int, total_warnings: int, max_level: ProblemLevel
    ) -> str:
        """Format final summary of all validation results."""
        pass

    def format_report(
        self,
        results: List[ValidationResult],
        total_errors: int,
        total_warnings: int,
        max_level: ProblemLevel,
    ) -> str:
        """Format the complete output of a run. Empty parts are left out."""
        lines = []
        for result in results:
            lines.append(self.format_file_header(result.file))
            if result.problems.problems:
                lines.extend(self.format_problem(p) for p in result.problems.problems)
            else:
                lines.append(self.format_no_problems())
        lines.append(self.format_summary(total_errors, total_warnings, max_level))
        return "\n".join(line for line in lines if line)


class PlainFormatter(OutputFormatter):
    """
    One ``path:line:col: message [rule]`` line per problem.

    Suitable for editors and CI logs that parse compiler-style locations.
    """

    def format_file_header(self, file: Path) -> str:
        return ""

    def format_problem(self, problem: Problem) -> str:
        return f"{problem.path}:{problem.line}:{problem.col}: {problem.desc} [{problem.rule}]"

    def format_no_problems(self) -> str:
        return ""

    def format_summary(
        self, total_errors: int, total_warnings: int, max_level: ProblemLevel
    ) -> str:
        return ""


class ColoredFormatter(OutputFormatter):
    """
    Colored console output formatter.

    Formats CLI output with ANSI color codes and consistent spacing, grouped
    per file. Used for interactive terminal sessions.
    """

    STYLE = {
        ProblemLevel.NON: {"color_bold": "\033[1;92m", "color": "\033[92m", "sign": "✓"},
        ProblemLevel.ERR: {"color_bold": "\033[1;31m", "color": "\033[31m", "sign": "✗"},
        ProblemLevel.WAR: {"color_bold": "\033[1;33m", "color": "\033[33m", "sign": "⚠"},
    }

    DEF_STYLE = {
        "format_end": "\033[0m",
        "neutral": "\033[2m",
        "underline": "\033[4m",
    }

    LEVEL_NAMES = {ProblemLevel.WAR: "warning", ProblemLevel.ERR: "error"}

    def format_file_header(self, file: Path) -> str:
        """Format file header with underline."""
        return f'\n{self.DEF_STYLE["underline"]}{file}{self.DEF_STYLE["format_end"]}'

    def format_problem(self, problem: Problem) -> str:
        """Format problem with colors and positioning."""
        line = (
            f'  {self.DEF_STYLE["neutral"]}{problem.line}:{problem.col}'
            f'{self.DEF_STYLE["format_end"]}'
        )
        line += max(20 - len(line), 0) * " "

        color = self.STYLE[problem.level]["color"]
        name = self.LEVEL_NAMES.get(problem.level, "info")
        line += f'{color}{name}{self.DEF_STYLE["format_end"]}'
        line += max(38 - len(line), 0) * " "
        line += problem.desc

        if problem.rule:
            line += f'  {self.DEF_STYLE["neutral"]}({problem.rule}){self.DEF_STYLE["format_end"]}'

        return line

    def format_no_problems(self) -> str:
        """Format success message when no problems found."""
        return (
            f'  {self.DEF_STYLE["neutral"]}{self.STYLE[ProblemLevel.NON]["sign"]} '
            f'All checks passed{self.DEF_STYLE["format_end"]}'
        )

    def format_summary(
        self, total_errors: int, total_warnings: int, max_level: ProblemLevel
    ) -> str:
        """Format colored summary with counts."""
        style = self.STYLE[max_level]
        total_problems = total_errors + total_warnings

        return (
            f'\n{style["color_bold"]}{style["sign"]} {total_problems} problems '
            f'({total_errors} errors, {total_warnings} warnings){self.DEF_STYLE["format_end"]}\n'
        )


class JsonFormatter(OutputFormatter):
    """Machine readable output: a JSON list of problem objects."""

    def format_file_header(self, file: Path) -> str:
        return ""

    def format_problem(self, problem: Problem) -> str:
        return json.dumps(self._to_dict(problem))

    def format_no_problems(self) -> str:
        return ""

    def format_summary(
        self, total_errors: int, total_warnings: int, max_level: ProblemLevel
    ) -> str:
        return ""

    def format_report(
        self,
        results: List[ValidationResult],
        total_errors: int,
        total_warnings: int,
        max_level: ProblemLevel,
    ) -> str:
        problems = [self._to_dict(p) for result in results for p in result.problems.problems]
        return json.dumps(problems, indent=2)

    @staticmethod
    def _to_dict(problem: Problem) -> dict:
        return {
            "path": problem.path,
            "line": problem.line,
            "column": problem.col,
            "level": "error" if problem.level == ProblemLevel.ERR else "warning",
            "rule": problem.rule,
            "message": problem.desc,
        }


FORMATTERS = {
    "plain": PlainFormatter,
    "colored": ColoredFormatter,
    "json": JsonFormatter,
}


def create_formatter(name: str) -> OutputFormatter:
    """Look up a formatter by its command line name.

    Raises:
        ValueError: If no formatter has that name.
    """
    try:
        return FORMATTERS[name]()
    except KeyError:
        raise ValueError(
            f'unknown output format "{name}". available formats are '
            + ", ".join(f'"{n}"' for n in FORMATTERS)
        ) from None
