"""Shared test configuration and fixtures for actions-lint tests."""

import tempfile
import textwrap
from pathlib import Path
from typing import List, Optional, Tuple, Type

import pytest

from actions_lint.domain_model.nodes import Document
from actions_lint.globals import problems
from actions_lint.globals.lint_config import LintConfig
from actions_lint.pipeline import DefaultPipeline
from actions_lint.pipeline_stages import parser
from actions_lint.rules import shellcheck
from actions_lint.rules.rule import Rule


@pytest.fixture(autouse=True)
def no_shellcheck(monkeypatch):
    """Keep results independent of a shellcheck binary on the test machine."""
    monkeypatch.setattr(shellcheck, "find_shellcheck", lambda: None)


@pytest.fixture
def sample_workflow():
    """Standard valid workflow for testing."""
    return """name: Test Workflow
on:
  push:
    branches: [main]
  pull_request:
    branches: [main]

jobs:
  test:
    runs-on: ubuntu-latest
    steps:
      - name: Checkout
        uses: actions/checkout@v4
      - name: Setup Node
        uses: actions/setup-node@v4
        with:
          node-version: '18'
      - run: npm test
"""


@pytest.fixture
def invalid_workflow():
    """Workflow with known validation errors for testing."""
    return """name: Invalid Workflow
on:
  push:
    branches: [main]
  pullrequest:
    branches: [main]
jobs:
  build:
    runs-on: ubuntu-latest
    steps:
      - name: Notify Slack
        uses: 8398a7/action-slack@main
"""


@pytest.fixture
def temp_workflow_file(tmp_path):
    """Create workflow files inside a temporary directory."""

    def _create_temp_file(content: str, name: str = "workflow.yml") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _create_temp_file


@pytest.fixture
def test_problems():
    """Empty problems collection for testing."""
    return problems.Problems()


def parse_workflow_string(
    workflow_string: str, path: str = "workflow.yml"
) -> Tuple[Document, problems.Problems]:
    """
    Helper function to load a workflow string into a Document.

    Args:
        workflow_string (str): The workflow YAML content, dedented before parsing
        path (str): Path recorded in the document

    Returns:
        Tuple[Document, Problems]: The document and an empty problems collection
    """
    problems_instance = problems.Problems()
    yaml_parser = parser.PyYAMLParser(problems_instance)
    document = yaml_parser.parse_string(textwrap.dedent(workflow_string), path)
    return document, problems_instance


def lint_workflow_string(
    workflow_string: str, config: Optional[LintConfig] = None
) -> problems.Problems:
    """Run the complete pipeline over a workflow string written to a temporary file."""
    with tempfile.NamedTemporaryFile(suffix=".yml", mode="w+", delete=False) as temp_file:
        temp_file.write(textwrap.dedent(workflow_string))
        temp_file_path = Path(temp_file.name)

    try:
        return DefaultPipeline(config).process(temp_file_path)
    finally:
        temp_file_path.unlink(missing_ok=True)


def check_rule(
    rule_class: Type[Rule], workflow_string: str, config: Optional[LintConfig] = None
) -> List[problems.Problem]:
    """Run a single rule over a workflow string."""
    document, _ = parse_workflow_string(workflow_string)
    return list(rule_class(document, config).check())
