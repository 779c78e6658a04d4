import pytest

from actions_lint.globals.problems import ProblemLevel
from actions_lint.rules.action_version import ActionVersion, is_commit_sha, split_reference
from tests.conftest import check_rule

SHA = "b4ffde65f46336ab88eb53be808477a3936bae11"


def workflow_using(uses: str) -> str:
    return f"""
on: push
jobs:
  build:
    runs-on: ubuntu-latest
    steps:
      - uses: {uses}
"""


class TestHelpers:
    def test_is_commit_sha(self):
        assert is_commit_sha(SHA)
        assert not is_commit_sha(SHA[:7])
        assert not is_commit_sha(SHA.upper())

    def test_split_reference(self):
        assert split_reference("actions/checkout@v4") == ("actions/checkout", "v4")
        assert split_reference("actions/checkout") == ("actions/checkout", None)
        assert split_reference("octo/repo/path@main") == ("octo/repo/path", "main")


class TestActionVersion:
    @pytest.mark.parametrize(
        "uses",
        [
            f"actions/checkout@{SHA}",
            "actions/checkout@v4",
            "actions/checkout@v4.1.2",
            "actions/checkout@4",
            "github/codeql-action/init@v3",
            "./.github/actions/local",
            "docker://alpine:3.19",
            "docker://ghcr.io/owner/image@sha256:" + "a" * 64,
        ],
    )
    def test_pinned_references(self, uses):
        assert check_rule(ActionVersion, workflow_using(uses)) == []

    def test_branch_reference(self):
        problems = check_rule(ActionVersion, workflow_using("actions/checkout@main"))
        assert len(problems) == 1
        problem = problems[0]
        assert problem.rule == "action-version"
        assert problem.level == ProblemLevel.ERR
        assert 'branch or unknown ref "main"' in problem.desc
        assert (problem.line, problem.col) == (7, 15)

    def test_missing_reference(self):
        problems = check_rule(ActionVersion, workflow_using("actions/checkout"))
        assert len(problems) == 1
        assert problems[0].desc.startswith('"actions/checkout" is not pinned to a version')

    def test_invalid_reference(self):
        problems = check_rule(ActionVersion, workflow_using("checkout@v4"))
        assert len(problems) == 1
        assert problems[0].desc.startswith('invalid action reference "checkout@v4"')

    def test_abbreviated_sha_warns(self):
        problems = check_rule(ActionVersion, workflow_using(f"actions/checkout@{SHA[:7]}"))
        assert len(problems) == 1
        assert problems[0].level == ProblemLevel.WAR

    @pytest.mark.parametrize("uses", ["docker://alpine", "docker://alpine:latest"])
    def test_unpinned_docker_image(self, uses):
        problems = check_rule(ActionVersion, workflow_using(uses))
        assert len(problems) == 1
        assert problems[0].level == ProblemLevel.WAR

    def test_reusable_workflow_call(self):
        workflow = """
on: push
jobs:
  call:
    uses: octo-org/repo/.github/workflows/ci.yml@main
"""
        problems = check_rule(ActionVersion, workflow)
        assert len(problems) == 1
        assert problems[0].line == 5

    def test_expression_reference_is_skipped(self):
        assert check_rule(ActionVersion, workflow_using("${{ matrix.action }}")) == []
