import json
from unittest.mock import Mock

import pytest

from actions_lint.globals.problems import ProblemLevel
from actions_lint.rules import shellcheck
from actions_lint.rules.shellcheck import ShellCheck, mask_expressions
from tests.conftest import check_rule

WORKFLOW = """
on: push
jobs:
  build:
    runs-on: ubuntu-latest
    steps:
      - run: |
          echo start
          echo $FOO
      - run: echo ${{ github.sha }}
      - shell: python
        run: print(1)
"""


def shellcheck_output(*comments) -> Mock:
    return Mock(stdout=json.dumps({"comments": list(comments)}), stderr="", returncode=1)


@pytest.fixture
def fake_shellcheck(monkeypatch):
    monkeypatch.setattr(shellcheck, "find_shellcheck", lambda: "/usr/bin/shellcheck")
    run = Mock(return_value=shellcheck_output())
    monkeypatch.setattr(shellcheck.subprocess, "run", run)
    return run


class TestMaskExpressions:
    def test_spans_keep_their_length(self):
        script = "echo ${{ github.sha }} done"
        masked = mask_expressions(script)
        assert masked == "echo " + "_" * len("${{ github.sha }}") + " done"
        assert len(masked) == len(script)


class TestShellCheck:
    def test_skipped_without_executable(self):
        assert check_rule(ShellCheck, WORKFLOW) == []

    def test_only_shell_scripts_are_checked(self, fake_shellcheck):
        check_rule(ShellCheck, WORKFLOW)

        assert fake_shellcheck.call_count == 2
        cmd = fake_shellcheck.call_args_list[0].args[0]
        assert cmd[0] == "/usr/bin/shellcheck"
        assert "--format=json1" in cmd
        assert "--shell=bash" in cmd
        masked = "echo " + "_" * len("${{ github.sha }}")
        assert fake_shellcheck.call_args_list[1].kwargs["input"] == masked

    def test_findings_are_mapped_to_the_workflow(self, fake_shellcheck):
        fake_shellcheck.side_effect = [
            shellcheck_output(
                {
                    "line": 2,
                    "column": 6,
                    "level": "info",
                    "code": 2086,
                    "message": "Double quote to prevent globbing and word splitting.",
                }
            ),
            shellcheck_output(
                {"line": 1, "column": 1, "level": "error", "code": 1000, "message": "Broken."}
            ),
        ]

        problems = check_rule(ShellCheck, WORKFLOW)

        assert len(problems) == 2
        first, second = problems
        assert first.rule == "shellcheck"
        assert first.level == ProblemLevel.WAR
        assert first.desc == (
            "shellcheck reported issue in this script: SC2086: "
            "Double quote to prevent globbing and word splitting."
        )
        assert (first.line, first.col) == (9, 16)
        assert second.level == ProblemLevel.ERR
        assert (second.line, second.col) == (10, 14)

    def test_unexpected_output_is_ignored(self, fake_shellcheck):
        fake_shellcheck.return_value = Mock(stdout="not json", stderr="", returncode=1)
        assert check_rule(ShellCheck, WORKFLOW) == []

    def test_os_error_is_ignored(self, fake_shellcheck):
        fake_shellcheck.side_effect = OSError("exec format error")
        assert check_rule(ShellCheck, WORKFLOW) == []

    def test_blank_shell_is_skipped(self, fake_shellcheck):
        workflow = """
on: push
jobs:
  build:
    runs-on: ubuntu-latest
    steps:
      - run: echo hi
        shell: ""
      - run: echo hi
        shell: "  "
      - run: echo hi
        shell: sh -e {0}
"""
        assert check_rule(ShellCheck, workflow) == []
        assert fake_shellcheck.call_count == 1
        assert "--shell=sh" in fake_shellcheck.call_args.args[0]
