"""Runs ``shellcheck`` on the scripts of ``run:`` steps.

The rule is skipped when the ``shellcheck`` executable is not on ``PATH``.
"""

import json
import logging
import shutil
import subprocess
from typing import Generator, List, Optional

from actions_lint.domain_model.catalog import POSIX_SHELLS
from actions_lint.domain_model.expressions import find_spans
from actions_lint.domain_model.nodes import Node, split_lines
from actions_lint.domain_model.primitives import Pos
from actions_lint.domain_model.workflow import effective_shell, iter_run_scripts, shell_name
from actions_lint.globals.problems import Problem, ProblemLevel
from actions_lint.rules.rule import Rule

logger = logging.getLogger(__name__)

# Findings that are noise for scripts embedded in workflows
EXCLUDED_CODES = ("SC1091", "SC2050", "SC2154", "SC2157", "SC2194")


def find_shellcheck() -> Optional[str]:
    return shutil.which("shellcheck")


def mask_expressions(script: str) -> str:
    """Replace ``${{ }}`` spans by underscores of the same length."""
    for span in reversed(find_spans(script)):
        script = script[:span.start] + "_" * (span.end - span.start) + script[span.end:]
    return script


class ShellCheck(Rule):
    NAME = "shellcheck"

    def check(
        self,
    ) -> Generator[Problem, None, None]:
        executable = find_shellcheck()
        if executable is None:
            logger.debug("shellcheck not found on PATH, skipping rule %s", self.NAME)
            return

        for ref, run in iter_run_scripts(self.document):
            if run.is_expression():
                continue
            shell = shell_name(effective_shell(self.document, ref))
            if shell not in POSIX_SHELLS:
                continue
            for comment in self._run(executable, shell, mask_expressions(run.value)):
                yield self.problem(
                    self._script_pos(run, comment.get("line", 1), comment.get("column", 1)),
                    f"shellcheck reported issue in this script: SC{comment.get('code')}: "
                    f"{comment.get('message', '').strip()}",
                    ProblemLevel.ERR if comment.get("level") == "error" else ProblemLevel.WAR,
                )

    def _run(self, executable: str, shell: str, script: str) -> List[dict]:
        cmd = [
            executable,
            "--norc",
            "--format=json1",
            f"--shell={shell}",
            f"--exclude={','.join(EXCLUDED_CODES)}",
            "-",
        ]
        try:
            result = subprocess.run(cmd, input=script, capture_output=True, text=True, check=False)
        except OSError as e:
            logger.warning("Could not run shellcheck: %s", e)
            return []
        if not result.stdout:
            if result.returncode not in (0, 1):
                logger.warning("shellcheck failed: %s", result.stderr.strip())
            return []
        try:
            return json.loads(result.stdout).get("comments", [])
        except json.JSONDecodeError:
            logger.warning("Unexpected shellcheck output: %s", result.stdout[:200])
            return []

    def _script_pos(self, run: Node, line: int, column: int) -> Pos:
        """Map a 1-based position inside the script back to the workflow file."""
        if run.style == "|":
            content = split_lines(run.raw)[1:]
            indents = [len(text) - len(text.lstrip(" ")) for text in content if text.strip()]
            indent = min(indents) if indents else 0
            source_line = run.pos.line + line
            if source_line < len(self.document.line_starts):
                return self.document.pos_at(
                    self.document.line_starts[source_line] + indent + column - 1
                )
            return run.pos
        if len(split_lines(run.raw)) == 1 and line == 1:
            offset = column - 1 + (1 if run.style in ("'", '"') else 0)
            return self.document.pos_at(run.pos.idx + offset)
        return run.pos
