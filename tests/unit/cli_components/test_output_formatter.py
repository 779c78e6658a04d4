"""Unit tests for output formatting."""

import json
from pathlib import Path

import pytest

from actions_lint.cli_components.output_formatter import (
    ColoredFormatter,
    JsonFormatter,
    PlainFormatter,
    create_formatter,
)
from actions_lint.domain_model.primitives import Pos
from actions_lint.globals.problems import Problem, ProblemLevel, Problems
from actions_lint.globals.validation_result import ValidationResult

ERROR = Problem(
    desc='"actions/checkout@main" is pinned to branch or unknown ref "main"',
    level=ProblemLevel.ERR,
    pos=Pos(10, 5, 150),
    rule="action-version",
    path=".github/workflows/ci.yml",
)
WARNING = Problem(
    desc='"write-all" grants write access to every scope',
    level=ProblemLevel.WAR,
    pos=Pos(2, 13, 30),
    rule="permissions",
    path=".github/workflows/ci.yml",
)


def make_results():
    problems = Problems()
    problems.extend([WARNING, ERROR])
    return [
        ValidationResult.from_problems(Path(".github/workflows/ci.yml"), problems),
        ValidationResult.from_problems(Path(".github/workflows/empty.yml"), Problems()),
    ]


class TestPlainFormatter:
    def test_format_problem(self):
        assert PlainFormatter().format_problem(ERROR) == (
            ".github/workflows/ci.yml:11:6: "
            '"actions/checkout@main" is pinned to branch or unknown ref "main" '
            "[action-version]"
        )

    def test_report_has_one_line_per_problem(self):
        report = PlainFormatter().format_report(make_results(), 1, 1, ProblemLevel.ERR)

        lines = report.splitlines()
        assert len(lines) == 2
        assert lines[0].startswith(".github/workflows/ci.yml:3:14: ")
        assert lines[1].endswith("[action-version]")

    def test_empty_report(self):
        results = [ValidationResult.from_problems(Path("ci.yml"), Problems())]
        assert PlainFormatter().format_report(results, 0, 0, ProblemLevel.NON) == ""


class TestColoredFormatter:
    """Unit tests for ColoredFormatter output formatting."""

    def test_format_file_header(self):
        """Test file header formatting includes underline and path."""
        header = ColoredFormatter().format_file_header(Path("/test/workflow.yml"))

        assert "/test/workflow.yml" in header
        assert "\033[4m" in header
        assert "\033[0m" in header

    def test_format_problem_error(self):
        formatted = ColoredFormatter().format_problem(ERROR)

        assert "11:6" in formatted
        assert "error" in formatted
        assert ERROR.desc in formatted
        assert "(action-version)" in formatted
        assert "\033[31m" in formatted

    def test_format_problem_warning(self):
        formatted = ColoredFormatter().format_problem(WARNING)

        assert "3:14" in formatted
        assert "warning" in formatted
        assert "\033[33m" in formatted

    def test_format_summary(self):
        summary = ColoredFormatter().format_summary(1, 2, ProblemLevel.ERR)

        assert "3 problems (1 errors, 2 warnings)" in summary
        assert "\033[1;31m" in summary

    def test_report_marks_clean_files(self):
        report = ColoredFormatter().format_report(make_results(), 1, 1, ProblemLevel.ERR)

        assert "empty.yml" in report
        assert "All checks passed" in report


class TestJsonFormatter:
    def test_report(self):
        report = JsonFormatter().format_report(make_results(), 1, 1, ProblemLevel.ERR)

        data = json.loads(report)
        assert data == [
            {
                "path": ".github/workflows/ci.yml",
                "line": 3,
                "column": 14,
                "level": "warning",
                "rule": "permissions",
                "message": WARNING.desc,
            },
            {
                "path": ".github/workflows/ci.yml",
                "line": 11,
                "column": 6,
                "level": "error",
                "rule": "action-version",
                "message": ERROR.desc,
            },
        ]

    def test_empty_report_is_an_empty_list(self):
        assert json.loads(JsonFormatter().format_report([], 0, 0, ProblemLevel.NON)) == []


class TestCreateFormatter:
    @pytest.mark.parametrize(
        "name, cls",
        [("plain", PlainFormatter), ("colored", ColoredFormatter), ("json", JsonFormatter)],
    )
    def test_known_formats(self, name, cls):
        assert isinstance(create_formatter(name), cls)

    def test_unknown_format(self):
        with pytest.raises(ValueError, match='unknown output format "xml"'):
            create_formatter("xml")
