from typing import Generator

from actions_lint.domain_model import catalog
from actions_lint.domain_model.nodes import Node
from actions_lint.domain_model.workflow import iter_permissions
from actions_lint.globals.problems import Problem, ProblemLevel
from actions_lint.rules.rule import Rule


class Permissions(Rule):
    """Checks ``permissions`` sections of the workflow and its jobs."""

    NAME = "permissions"

    def check(
        self,
    ) -> Generator[Problem, None, None]:
        for permissions in iter_permissions(self.document):
            if permissions.is_expression():
                continue
            if permissions.is_scalar:
                yield from self._check_shorthand(permissions)
            elif permissions.is_mapping:
                yield from self._check_scopes(permissions)

    def _check_shorthand(self, permissions: Node) -> Generator[Problem, None, None]:
        value = permissions.text
        if value == "read-all":
            return
        if value == "write-all":
            yield self.problem(
                permissions,
                '"write-all" grants write access to every scope. '
                "list only the scopes the workflow needs",
                ProblemLevel.WAR,
            )
            return
        yield self.problem(
            permissions,
            f'"{value}" is not a valid permissions value. '
            'use "read-all", "write-all" or a mapping of scopes',
        )

    def _check_scopes(self, permissions: Node) -> Generator[Problem, None, None]:
        for key, value in permissions.items():
            scope = key.text
            if scope not in catalog.PERMISSION_SCOPES:
                yield self.problem(
                    key,
                    f'unknown permission scope "{scope}". available scopes are '
                    + ", ".join(f'"{s}"' for s in sorted(catalog.PERMISSION_SCOPES)),
                )
                continue
            if not value.is_scalar or value.is_expression():
                continue
            allowed = catalog.RESTRICTED_PERMISSION_VALUES.get(scope, catalog.PERMISSION_VALUES)
            if value.text not in allowed:
                yield self.problem(
                    value,
                    f'"{value.text}" is not a valid access level for "{scope}". '
                    "use one of " + ", ".join(f'"{v}"' for v in sorted(allowed)),
                )
