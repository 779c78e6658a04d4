from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generator, Optional, Union

from actions_lint.domain_model.nodes import Document, Node
from actions_lint.domain_model.primitives import Pos
from actions_lint.globals.lint_config import LintConfig
from actions_lint.globals.problems import Problem, ProblemLevel


class Rule(ABC):
    NAME = ""

    def __init__(self, document: Document, config: Optional[LintConfig] = None) -> None:
        """
        Initialize the rule with the document to check.

        Rules must not modify the document and keep no state between
        documents, so they can run in any order.
        """
        self.document = document
        self.config = config or LintConfig()

    @abstractmethod
    def check(
        self,
    ) -> Generator[Problem, None, None]:
        """
        Perform checks on the document, yielding Problem instances.
        """
        pass

    def problem(
        self, at: Union[Node, Pos], desc: str, level: ProblemLevel = ProblemLevel.ERR
    ) -> Problem:
        pos = at.pos if isinstance(at, Node) else at
        return Problem(pos=pos, level=level, desc=desc, rule=self.NAME, path=self.document.path)
