from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from actions_lint.domain_model.primitives import Pos


class ProblemLevel(Enum):
    NON = 0
    WAR = 1
    ERR = 2


@dataclass(frozen=True)
class Problem:
    """A single reported issue with location and rule attribution.

    Attributes:
        pos: 0-based position inside the source file.
        level: Severity of the problem.
        desc: Human-readable description.
        rule: Identifier of the rule that produced the problem.
        path: File the problem was found in, None if not yet attributed.
    """

    pos: Pos
    level: ProblemLevel
    desc: str
    rule: str
    path: Optional[str] = None

    @property
    def line(self) -> int:
        """1-based line for display."""
        return self.pos.line + 1

    @property
    def col(self) -> int:
        """1-based column for display."""
        return self.pos.col + 1

    def sort_key(self) -> Tuple[str, int, int, str, str]:
        return (self.path or "", self.pos.line, self.pos.col, self.rule, self.desc)

    def dedup_key(self) -> Tuple[str, int, int, str]:
        return (self.path or "", self.pos.line, self.pos.col, self.rule)


@dataclass
class Problems:
    """Ordered collection of problems found for one or more files."""

    problems: List[Problem] = field(default_factory=list)
    max_level: ProblemLevel = ProblemLevel.NON
    n_error: int = 0
    n_warning: int = 0

    def append(self, problem: Problem) -> None:
        self.problems.append(problem)
        self._count(problem)

    def extend(self, problems: Iterable[Problem]) -> None:
        for problem in problems:
            self.append(problem)

    def _count(self, problem: Problem) -> None:
        if problem.level == ProblemLevel.ERR:
            self.n_error += 1
        elif problem.level == ProblemLevel.WAR:
            self.n_warning += 1
        self.max_level = ProblemLevel(max(self.max_level.value, problem.level.value))

    def sort(self) -> None:
        """Sort problems ascending by (path, line, column)."""
        self.problems.sort(key=lambda problem: problem.sort_key())

    def deduplicate(self) -> None:
        """Drop problems reported twice at the same place by the same rule.

        The first occurrence wins, counters are recomputed.
        """
        seen: Set[Tuple[str, int, int, str]] = set()
        kept = []
        for problem in self.problems:
            key = problem.dedup_key()
            if key in seen:
                continue
            seen.add(key)
            kept.append(problem)
        self._reset(kept)

    def without_warnings(self) -> "Problems":
        filtered = Problems()
        filtered.extend(p for p in self.problems if p.level != ProblemLevel.WAR)
        return filtered

    def without_rules(self, rules: Iterable[str]) -> "Problems":
        excluded = set(rules)
        filtered = Problems()
        filtered.extend(p for p in self.problems if p.rule not in excluded)
        return filtered

    def _reset(self, problems: List[Problem]) -> None:
        self.problems = []
        self.max_level = ProblemLevel.NON
        self.n_error = 0
        self.n_warning = 0
        self.extend(problems)

    def __iter__(self) -> Iterator[Problem]:
        return iter(self.problems)

    def __len__(self) -> int:
        return len(self.problems)
