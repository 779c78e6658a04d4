import re
from typing import Dict, Iterator, List, Optional, Tuple

from actions_lint.domain_model import catalog
from actions_lint.domain_model.expressions import (
    ExprNode,
    ExpressionSyntaxError,
    FunctionCall,
    IndexAccess,
    Literal,
    ObjectFilter,
    PropertyAccess,
    Span,
    Variable,
    find_spans,
    iter_nodes,
    parse_expression,
    property_path,
)
from actions_lint.domain_model.nodes import Document, Node
from actions_lint.domain_model.primitives import Pos
from actions_lint.domain_model.workflow import effective_shell, iter_run_scripts, shell_name
from actions_lint.globals.lint_config import LintConfig
from actions_lint.globals.problems import Problem, ProblemLevel, Problems
from actions_lint.globals.process_stage import ProcessStage

PLACEHOLDER_RE = re.compile(r"(?<!\{)\{(\d+)\}(?!\})")


def _matches_path(path: str, pattern: str) -> bool:
    path_parts = path.split(".")
    pattern_parts = pattern.split(".")
    if len(path_parts) != len(pattern_parts):
        return False
    return all(p == "*" or p == q for p, q in zip(pattern_parts, path_parts))


def is_untrusted(path: str) -> bool:
    return any(_matches_path(path, pattern) for pattern in catalog.UNTRUSTED_INPUTS)


def _chain_start(node: ExprNode) -> int:
    """Offset of the variable a property access chain starts with."""
    while isinstance(node, (PropertyAccess, IndexAccess, ObjectFilter)):
        node = node.receiver
    return node.offset


def is_quoted_at(script: str, offset: int) -> bool:
    """Whether ``offset`` in a shell script is inside single or double quotes."""
    in_single = False
    in_double = False
    i = 0
    while i < offset:
        char = script[i]
        if char == "\\" and not in_single:
            i += 2
            continue
        if char == "'" and not in_double:
            in_single = not in_single
        elif char == '"' and not in_single:
            in_double = not in_double
        i += 1
    return in_single or in_double


class ExpressionChecker(ProcessStage[Document, Document]):
    """Parses and checks every ``${{ }}`` expression of a document."""

    RULE_NAME = "expression"
    SHELL_RULE_NAME = "shell-interpolation"

    def __init__(self, problems: Problems, config: Optional[LintConfig] = None) -> None:
        super().__init__(problems)
        self.config = config or LintConfig()
        self.document: Optional[Document] = None
        self.run_shells: Dict[int, str] = {}

    def process(self, document: Document) -> Document:
        self.document = document
        self.run_shells = {
            id(run): shell_name(effective_shell(document, ref))
            for ref, run in iter_run_scripts(document)
        }
        for key, node in self._iter_values(document.root, None):
            self._check_scalar(key, node)
        return document

    def _iter_values(self, node: Node, key: Optional[str]) -> Iterator[Tuple[Optional[str], Node]]:
        """Yield ``(parent key, scalar)`` for every scalar that is not a mapping key."""
        if node.is_scalar:
            yield key, node
        elif node.is_sequence:
            for item in node.value:
                yield from self._iter_values(item, key)
        else:
            for key_node, value in node.items():
                yield from self._iter_values(value, key_node.text)

    def _problem(self, pos: Pos, desc: str, level=ProblemLevel.ERR, rule=None) -> None:
        self.problems.append(
            Problem(
                pos=pos,
                level=level,
                desc=desc,
                rule=rule or self.RULE_NAME,
                path=self.document.path if self.document else None,
            )
        )

    def _pos(self, node: Node, raw_offset: Optional[int]) -> Pos:
        """Position of an offset inside a scalar's raw source text.

        None means the offset could not be mapped and the scalar start is used.
        """
        if self.document is None or raw_offset is None:
            return node.pos
        return self.document.pos_at(node.pos.idx + raw_offset)

    def _check_scalar(self, key: Optional[str], node: Node) -> None:
        if node.is_null:
            return
        value_spans = find_spans(node.value)
        raw_spans: List[Optional[Span]] = list(find_spans(node.raw))
        if len(raw_spans) != len(value_spans):
            # escapes changed the layout of the scalar
            raw_spans = [None] * len(value_spans)

        if key == "if":
            self._check_condition(node, value_spans)

        for value_span, raw_span in zip(value_spans, raw_spans):
            start = raw_span.start if raw_span else None
            inner_start = raw_span.inner_start if raw_span else None
            if not value_span.closed:
                self._problem(
                    self._pos(node, start),
                    'unbalanced expression: "${{" is not closed by "}}"',
                )
                continue
            expr = self._parse(node, value_span.inner(node.value), inner_start)
            if expr is None:
                continue
            self._check_semantics(node, expr, inner_start)
            if key == "run":
                self._check_shell_interpolation(node, expr, value_span, start, inner_start)

    def _parse(self, node: Node, text: str, base: Optional[int]) -> Optional[ExprNode]:
        try:
            return parse_expression(text)
        except ExpressionSyntaxError as e:
            self._problem(
                self._pos(node, None if base is None else base + e.offset),
                f'invalid expression "{text.strip()}": {e.message}',
            )
            return None

    def _check_condition(self, node: Node, spans: List[Span]) -> None:
        """``if:`` accepts a bare expression without ``${{ }}``."""
        if not spans:
            if node.scalar_type != "str":
                return
            base = None if node.style in ("|", ">") else (1 if node.style else 0)
            expr = self._parse(node, node.value, base)
            if expr is not None:
                self._check_semantics(node, expr, base)
            return

        outside = node.value
        for span in reversed(spans):
            outside = outside[:span.start] + outside[span.end:]
        if outside.strip():
            self._problem(
                node.pos,
                f'if: condition "{node.value.strip()}" is always evaluated to true because '
                "extra characters are around ${{ }}",
                level=ProblemLevel.WAR,
            )

    def _check_semantics(self, node: Node, expr: ExprNode, base: Optional[int]) -> None:
        for sub in iter_nodes(expr):
            pos = self._pos(node, None if base is None else base + sub.offset)
            if isinstance(sub, Variable):
                if sub.name.lower() not in catalog.CONTEXTS:
                    self._problem(
                        pos,
                        f'undefined variable "{sub.name}". available variables are '
                        + ", ".join(f'"{c}"' for c in sorted(catalog.CONTEXTS)),
                    )
            elif isinstance(sub, FunctionCall):
                self._check_call(sub, pos)
            elif isinstance(sub, PropertyAccess) and self._is_vars(sub.receiver):
                self._check_config_variable(sub.name, pos)
            elif (
                isinstance(sub, IndexAccess)
                and self._is_vars(sub.receiver)
                and isinstance(sub.index, Literal)
                and isinstance(sub.index.value, str)
            ):
                self._check_config_variable(sub.index.value, pos)

    def _check_call(self, call: FunctionCall, pos: Pos) -> None:
        name = call.name.lower()
        arity = catalog.FUNCTIONS.get(name)
        if arity is None:
            self._problem(
                pos,
                f'undefined function "{call.name}". available functions are '
                + ", ".join(f'"{f}"' for f in sorted(catalog.FUNCTIONS)),
            )
            return

        minimum, maximum = arity
        count = len(call.args)
        if count < minimum or (maximum is not None and count > maximum):
            if maximum is None:
                expected = f"at least {minimum}"
            elif minimum == maximum:
                expected = str(minimum)
            else:
                expected = f"{minimum} to {maximum}"
            self._problem(
                pos,
                f'function "{call.name}" takes {expected} argument(s) but {count} given',
            )
            return

        if name == "format" and isinstance(call.args[0], Literal):
            template = call.args[0].value
            if isinstance(template, str):
                for index in PLACEHOLDER_RE.findall(template):
                    if int(index) >= count - 1:
                        self._problem(
                            pos,
                            f'format string "{template}" contains placeholder {{{index}}} '
                            f"but only {count - 1} argument(s) are given",
                        )

    @staticmethod
    def _is_vars(receiver: ExprNode) -> bool:
        return isinstance(receiver, Variable) and receiver.name.lower() == "vars"

    def _check_config_variable(self, name: str, pos: Pos) -> None:
        known = self.config.config_variables
        if known is None:
            return
        if name.upper() not in {variable.upper() for variable in known}:
            self._problem(pos, f'undefined config variable "{name}"')

    def _check_shell_interpolation(
        self,
        node: Node,
        expr: ExprNode,
        value_span: Span,
        start: Optional[int],
        inner_start: Optional[int],
    ) -> None:
        untrusted = False
        for sub in iter_nodes(expr):
            path = property_path(sub)
            if path is not None and is_untrusted(path):
                untrusted = True
                offset = None if inner_start is None else inner_start + _chain_start(sub)
                self._problem(
                    self._pos(node, offset),
                    f'"{path}" is potentially untrusted. pass it through an environment '
                    "variable instead of interpolating it into the script",
                    rule=self.SHELL_RULE_NAME,
                )
        if untrusted or self.run_shells.get(id(node), "bash") not in catalog.POSIX_SHELLS:
            return
        if not is_quoted_at(node.value, value_span.start):
            self._problem(
                self._pos(node, start),
                "expression interpolated into a shell script without quotes; "
                "wrap it in double quotes",
                level=ProblemLevel.WAR,
                rule=self.SHELL_RULE_NAME,
            )
