import re
from typing import Dict, Generator, Optional, Tuple

from actions_lint.domain_model.workflow import iter_run_scripts, iter_uses
from actions_lint.globals.problems import Problem, ProblemLevel
from actions_lint.rules.action_version import split_reference
from actions_lint.rules.rule import Rule

# action -> (first supported major version, reason)
OUTDATED_ACTIONS: Dict[str, Tuple[int, str]] = {
    "actions/checkout": (4, "runs on a deprecated Node.js runtime"),
    "actions/setup-node": (4, "runs on a deprecated Node.js runtime"),
    "actions/setup-python": (5, "runs on a deprecated Node.js runtime"),
    "actions/setup-java": (4, "runs on a deprecated Node.js runtime"),
    "actions/setup-go": (5, "runs on a deprecated Node.js runtime"),
    "actions/setup-dotnet": (4, "runs on a deprecated Node.js runtime"),
    "actions/cache": (4, "uses the retired cache service"),
    "actions/upload-artifact": (4, "v3 and older are no longer supported"),
    "actions/download-artifact": (4, "v3 and older are no longer supported"),
    "actions/github-script": (7, "runs on a deprecated Node.js runtime"),
    "github/codeql-action/init": (3, "CodeQL Action v2 and older are retired"),
    "github/codeql-action/analyze": (3, "CodeQL Action v2 and older are retired"),
    "github/codeql-action/autobuild": (3, "CodeQL Action v2 and older are retired"),
    "github/codeql-action/upload-sarif": (3, "CodeQL Action v2 and older are retired"),
}

# archived actions -> suggested replacement
ARCHIVED_ACTIONS: Dict[str, str] = {
    "actions/create-release": "softprops/action-gh-release or the gh CLI",
    "actions/upload-release-asset": "softprops/action-gh-release or the gh CLI",
    "actions/setup-ruby": "ruby/setup-ruby",
    "actions/setup-haskell": "haskell-actions/setup",
    "actions-rs/toolchain": "dtolnay/rust-toolchain",
    "actions-rs/cargo": "plain cargo commands",
    "actions-rs/clippy-check": "plain cargo clippy",
    "actions-rs/audit-check": "rustsec/audit-check",
}

DEPRECATED_COMMANDS = {
    "set-output": ('write to "$GITHUB_OUTPUT" instead', ProblemLevel.WAR),
    "save-state": ('write to "$GITHUB_STATE" instead', ProblemLevel.WAR),
    "set-env": ('disabled, write to "$GITHUB_ENV" instead', ProblemLevel.ERR),
    "add-path": ('disabled, write to "$GITHUB_PATH" instead', ProblemLevel.ERR),
}
COMMAND_RE = re.compile(r"::(set-output|save-state|set-env|add-path)\b")
MAJOR_RE = re.compile(r"^v?(\d+)")


class DeprecatedAction(Rule):
    """Flags archived or outdated actions and deprecated workflow commands."""

    NAME = "deprecated-action"

    def check(
        self,
    ) -> Generator[Problem, None, None]:
        for uses in iter_uses(self.document):
            problem = self._check_action(uses)
            if problem:
                yield problem
        yield from self._check_commands()

    def _check_action(self, uses) -> Optional[Problem]:
        slug, ref = split_reference(uses.text.strip())
        slug = slug.lower()

        replacement = ARCHIVED_ACTIONS.get(slug)
        if replacement:
            return self.problem(
                uses, f'"{slug}" is archived and no longer maintained. use {replacement}'
            )

        outdated = OUTDATED_ACTIONS.get(slug)
        if outdated is None or ref is None:
            return None
        match = MAJOR_RE.match(ref)
        if match is None:
            return None
        supported, reason = outdated
        if int(match.group(1)) < supported:
            return self.problem(
                uses,
                f'"{slug}@{ref}" is deprecated: {reason}. update to v{supported} or later',
                ProblemLevel.WAR,
            )
        return None

    def _check_commands(self) -> Generator[Problem, None, None]:
        for _, run in iter_run_scripts(self.document):
            seen = set()
            for match in COMMAND_RE.finditer(run.value):
                command = match.group(1)
                if command in seen:
                    continue
                seen.add(command)
                offset = run.raw.find(match.group(0))
                pos = self.document.pos_at(run.pos.idx + offset) if offset >= 0 else run.pos
                hint, level = DEPRECATED_COMMANDS[command]
                yield self.problem(
                    pos, f'workflow command "{command}" is deprecated: {hint}', level
                )
