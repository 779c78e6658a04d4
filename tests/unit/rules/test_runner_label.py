import pytest

from actions_lint.globals.lint_config import LintConfig
from actions_lint.globals.problems import ProblemLevel
from actions_lint.rules.runner_label import RunnerLabel
from tests.conftest import check_rule


def workflow_on(runs_on: str) -> str:
    return f"""
on: push
jobs:
  build:
    runs-on: {runs_on}
    steps:
      - run: echo
"""


class TestRunnerLabel:
    @pytest.mark.parametrize(
        "runs_on",
        [
            "ubuntu-latest",
            "Ubuntu-24.04",
            "windows-latest",
            "macos-14",
            "[self-hosted, linux, x64]",
            "${{ matrix.os }}",
            "{group: large-runners}",
        ],
    )
    def test_known_labels(self, runs_on):
        assert check_rule(RunnerLabel, workflow_on(runs_on)) == []

    def test_unknown_label(self):
        problems = check_rule(RunnerLabel, workflow_on("ubuntu-lates"))
        assert len(problems) == 1
        assert problems[0].rule == "runner-label"
        assert problems[0].desc.startswith('label "ubuntu-lates" is unknown')
        assert (problems[0].line, problems[0].col) == (5, 14)

    def test_retired_runner(self):
        problems = check_rule(RunnerLabel, workflow_on("ubuntu-20.04"))
        assert len(problems) == 1
        assert problems[0].level == ProblemLevel.ERR
        assert "has been retired" in problems[0].desc

    def test_deprecated_runner(self):
        problems = check_rule(RunnerLabel, workflow_on("macos-13"))
        assert len(problems) == 1
        assert problems[0].level == ProblemLevel.WAR

    def test_configured_self_hosted_labels(self):
        config = LintConfig(runner_labels=["gpu-*", "linux-arm"])
        workflow = workflow_on("[self-hosted, gpu-a100, linux-arm]")
        assert check_rule(RunnerLabel, workflow, config) == []
        assert len(check_rule(RunnerLabel, workflow)) == 2

    def test_labels_in_mapping_form(self):
        problems = check_rule(RunnerLabel, workflow_on("{group: ci, labels: [custom]}"))
        assert len(problems) == 1
        assert 'label "custom" is unknown' in problems[0].desc

    def test_hosted_and_self_hosted_mixed(self):
        problems = check_rule(RunnerLabel, workflow_on("[self-hosted, ubuntu-latest]"))
        assert len(problems) == 1
        assert problems[0].level == ProblemLevel.WAR

    def test_multiple_hosted_images(self):
        problems = check_rule(RunnerLabel, workflow_on("[ubuntu-latest, windows-latest]"))
        assert len(problems) == 1
        assert problems[0].level == ProblemLevel.ERR

    def test_job_without_runs_on_is_skipped(self):
        workflow = """
on: push
jobs:
  build:
    steps:
      - run: echo
"""
        assert check_rule(RunnerLabel, workflow) == []
