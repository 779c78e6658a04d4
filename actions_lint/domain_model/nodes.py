"""Position-annotated document tree for workflow files.

The tree is owned top-down: a mapping node owns its ``(key, value)`` pairs and
a sequence node owns its items. Children only keep a weak reference to their
parent for upward navigation.
"""

import bisect
import re
import weakref
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, List, Optional, Tuple

from actions_lint.domain_model.primitives import Pos

TAG_PREFIX = "tag:yaml.org,2002:"

# line breaks as counted by PyYAML marks
LINE_BREAKS = "\n\x85\u2028\u2029"
LINE_BREAK_RE = re.compile("\r\n|[\r" + LINE_BREAKS + "]")


class NodeKind(Enum):
    MAPPING = "mapping"
    SEQUENCE = "sequence"
    SCALAR = "scalar"


@dataclass(eq=False)
class Node:
    """A parsed YAML node.

    Attributes:
        kind: Whether this is a mapping, a sequence or a scalar.
        value: ``str`` for scalars, ``List[Node]`` for sequences and
            ``List[Tuple[Node, Node]]`` for mappings.
        pos: Start of the node in the source.
        end: End of the node in the source.
        tag: Resolved YAML tag, e.g. ``tag:yaml.org,2002:int``.
        style: Scalar style (``None`` for plain, ``'``, ``"``, ``|``, ``>``).
        raw: Source text of a scalar, including quotes or block indicators.
    """

    kind: NodeKind
    value: Any
    pos: Pos
    end: Pos
    tag: str = ""
    style: Optional[str] = None
    raw: str = ""
    _parent: Optional["weakref.ReferenceType[Node]"] = field(default=None, repr=False)

    @property
    def parent(self) -> Optional["Node"]:
        if self._parent is None:
            return None
        return self._parent()

    def set_parent(self, parent: "Node") -> None:
        self._parent = weakref.ref(parent)

    @property
    def is_mapping(self) -> bool:
        return self.kind == NodeKind.MAPPING

    @property
    def is_sequence(self) -> bool:
        return self.kind == NodeKind.SEQUENCE

    @property
    def is_scalar(self) -> bool:
        return self.kind == NodeKind.SCALAR

    @property
    def scalar_type(self) -> Optional[str]:
        """Resolved scalar type: ``str``, ``int``, ``float``, ``bool`` or ``null``."""
        if not self.is_scalar:
            return None
        if self.tag.startswith(TAG_PREFIX):
            return self.tag[len(TAG_PREFIX):]
        return "str"

    @property
    def is_null(self) -> bool:
        return self.scalar_type == "null"

    @property
    def text(self) -> str:
        """Scalar value, empty string for collections."""
        return self.value if self.is_scalar else ""

    def is_expression(self) -> bool:
        """Whether this scalar consists of exactly one ``${{ }}`` expression."""
        if not self.is_scalar:
            return False
        stripped = self.value.strip()
        return (
            stripped.startswith("${{")
            and stripped.endswith("}}")
            and stripped.count("${{") == 1
        )

    # region mapping access
    def items(self) -> List[Tuple["Node", "Node"]]:
        return self.value if self.is_mapping else []

    def keys(self) -> List[str]:
        return [key.text for key, _ in self.items()]

    def get(self, key: str) -> Optional["Node"]:
        """Value for ``key`` in a mapping. With duplicated keys the last wins."""
        found = None
        for key_node, value_node in self.items():
            if key_node.text == key:
                found = value_node
        return found

    def key_node(self, key: str) -> Optional["Node"]:
        for key_node, _ in self.items():
            if key_node.text == key:
                return key_node
        return None

    def __contains__(self, key: str) -> bool:
        return self.key_node(key) is not None

    # endregion mapping access

    def children(self) -> List["Node"]:
        if self.is_sequence:
            return list(self.value)
        if self.is_mapping:
            return [node for pair in self.value for node in pair]
        return []

    def walk(self) -> Iterator["Node"]:
        """Yield this node and all descendants in document order."""
        yield self
        for child in self.children():
            yield from child.walk()

    def __repr__(self) -> str:
        return f"Node({self.kind.value}, {self.pos.line + 1}:{self.pos.col + 1})"


@dataclass(eq=False)
class Document:
    """A loaded workflow file."""

    path: str
    source: str
    root: Node
    line_starts: List[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.line_starts:
            self.line_starts = line_starts(self.source)

    def pos_at(self, idx: int) -> Pos:
        """Convert a character offset into a position."""
        idx = max(0, min(idx, len(self.source)))
        line = bisect.bisect_right(self.line_starts, idx) - 1
        return Pos(line, idx - self.line_starts[line], idx)


def line_starts(source: str) -> List[int]:
    """Offsets at which lines begin. ``\\r\\n`` and a lone ``\\r`` both end a line."""
    starts = [0]
    for i, char in enumerate(source):
        if char in LINE_BREAKS:
            starts.append(i + 1)
        elif char == "\r" and source[i + 1:i + 2] != "\n":
            starts.append(i + 1)
    return starts


def split_lines(text: str) -> List[str]:
    """Split ``text`` at the same line breaks as ``line_starts``."""
    return LINE_BREAK_RE.split(text)
