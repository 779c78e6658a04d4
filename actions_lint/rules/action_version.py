import re
from typing import Generator, Optional

from actions_lint.domain_model.nodes import Node
from actions_lint.domain_model.workflow import iter_uses
from actions_lint.globals.problems import Problem, ProblemLevel
from actions_lint.rules.rule import Rule

FULL_SHA_RE = re.compile(r"^[0-9a-f]{40}$")
SHORT_SHA_RE = re.compile(r"^[0-9a-f]{7,39}$")
VERSION_TAG_RE = re.compile(r"^v?\d+(\.\d+){0,2}([-+][0-9A-Za-z.-]+)?$")
DOCKER_DIGEST_RE = re.compile(r"@sha256:[0-9a-f]{64}$")


def is_commit_sha(ref: str) -> bool:
    """Check if a ref is a full 40-character commit SHA."""
    return FULL_SHA_RE.match(ref) is not None


def split_reference(uses: str) -> tuple:
    """Split ``owner/repo/path@ref`` into ``(slug, ref)``; ref is None if missing."""
    slug, sep, ref = uses.partition("@")
    return slug, (ref if sep else None)


class ActionVersion(Rule):
    """
    Validates that ``uses:`` references are pinned.

    Commit hashes and version tags pin an action; branch names move with
    every push and make runs unreproducible.
    """

    NAME = "action-version"

    def check(
        self,
    ) -> Generator[Problem, None, None]:
        for uses in iter_uses(self.document):
            if uses.is_expression():
                continue
            problem = self.check_reference(uses)
            if problem:
                yield problem

    def check_reference(self, uses: Node) -> Optional[Problem]:
        value = uses.text.strip()
        if value.startswith("./"):
            return None
        if value.startswith("docker://"):
            return self._check_docker(uses, value[len("docker://"):])

        slug, ref = split_reference(value)
        if ref is None or ref == "":
            return self.problem(
                uses,
                f'"{value}" is not pinned to a version. specify a tag or a commit SHA '
                f'like "{slug}@v1"',
            )
        if slug.count("/") < 1:
            return self.problem(
                uses, f'invalid action reference "{value}". expected "owner/repo@ref"'
            )
        if is_commit_sha(ref) or VERSION_TAG_RE.match(ref):
            return None
        if SHORT_SHA_RE.match(ref):
            return self.problem(
                uses,
                f'"{value}" uses an abbreviated commit SHA. use the full 40-character SHA',
                ProblemLevel.WAR,
            )
        return self.problem(
            uses,
            f'"{value}" is pinned to branch or unknown ref "{ref}". pin it to a version tag '
            "or a full commit SHA",
        )

    def _check_docker(self, uses: Node, image: str) -> Optional[Problem]:
        if DOCKER_DIGEST_RE.search(image):
            return None
        name = image.rsplit("/", 1)[-1]
        tag = name.partition(":")[2]
        if not tag or tag == "latest":
            return self.problem(
                uses,
                f'docker image "{image}" is not pinned. specify a tag or a digest',
                ProblemLevel.WAR,
            )
        return None
