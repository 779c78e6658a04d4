from actions_lint.rules.job_needs import JobNeeds, needs_nodes
from tests.conftest import check_rule, parse_workflow_string


class TestNeedsNodes:
    def test_scalar_and_sequence(self):
        document, _ = parse_workflow_string(
            """
            jobs:
              a:
                needs: b
              c:
                needs: [a, b]
              d: {}
            """
        )
        jobs = document.root.get("jobs")
        assert [n.text for n in needs_nodes(jobs.get("a"))] == ["b"]
        assert [n.text for n in needs_nodes(jobs.get("c"))] == ["a", "b"]
        assert needs_nodes(jobs.get("d")) == []


class TestJobNeeds:
    def test_valid_dependencies(self):
        workflow = """
on: push
jobs:
  lint:
    runs-on: ubuntu-latest
    steps:
      - run: echo
  test:
    needs: lint
    runs-on: ubuntu-latest
    steps:
      - run: echo
  deploy:
    needs: [lint, test]
    runs-on: ubuntu-latest
    steps:
      - run: echo
"""
        assert check_rule(JobNeeds, workflow) == []

    def test_unknown_job(self):
        workflow = """
on: push
jobs:
  test:
    needs: [biuld]
    runs-on: ubuntu-latest
    steps:
      - run: echo
"""
        problems = check_rule(JobNeeds, workflow)
        assert len(problems) == 1
        assert problems[0].rule == "job-needs"
        assert problems[0].desc.startswith(
            'job "test" needs job "biuld" which does not exist. available jobs are "test"'
        )
        assert (problems[0].line, problems[0].col) == (5, 13)

    def test_self_dependency(self):
        workflow = """
on: push
jobs:
  test:
    needs: test
    runs-on: ubuntu-latest
    steps:
      - run: echo
"""
        problems = check_rule(JobNeeds, workflow)
        assert [p.desc for p in problems] == ['job "test" depends on itself']

    def test_duplicate_entry(self):
        workflow = """
on: push
jobs:
  a:
    runs-on: ubuntu-latest
    steps:
      - run: echo
  b:
    needs: [a, A]
    runs-on: ubuntu-latest
    steps:
      - run: echo
"""
        problems = check_rule(JobNeeds, workflow)
        assert [p.desc for p in problems] == ['job "A" is listed more than once in "needs"']

    def test_cycle(self):
        workflow = """
on: push
jobs:
  a:
    needs: c
    runs-on: ubuntu-latest
    steps:
      - run: echo
  b:
    needs: a
    runs-on: ubuntu-latest
    steps:
      - run: echo
  c:
    needs: b
    runs-on: ubuntu-latest
    steps:
      - run: echo
"""
        problems = check_rule(JobNeeds, workflow)
        assert len(problems) == 1
        assert problems[0].desc == "cyclic dependency between jobs: a -> c -> b -> a"
        assert problems[0].line == 5
