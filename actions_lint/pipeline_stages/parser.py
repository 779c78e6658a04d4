import bisect
import logging
from abc import abstractmethod
from pathlib import Path
from typing import Optional, Set

import yaml

from actions_lint.domain_model.nodes import LINE_BREAKS, Document, Node, NodeKind, line_starts
from actions_lint.domain_model.primitives import Pos
from actions_lint.globals.problems import Problem, ProblemLevel, Problems
from actions_lint.globals.process_stage import ProcessStage

logger = logging.getLogger(__name__)


class ParseError(Exception):
    """Raised when a workflow file is not well-formed YAML."""

    def __init__(self, message: str, pos: Pos) -> None:
        super().__init__(message)
        self.message = message
        self.pos = pos


class FileReadError(Exception):
    """Raised when a workflow file cannot be read or decoded."""


class YAMLParser(ProcessStage[Path, Optional[Document]]):
    """Loads a workflow file into a position-annotated node tree."""

    SYNTAX_RULE = "syntax-check"
    READ_RULE = "read-error"

    @abstractmethod
    def parse(self, file: Path) -> Document:
        """Parse a workflow file.

        Raises:
            FileReadError: The file could not be read or decoded.
            ParseError: The file is not well-formed YAML.
        """
        pass

    def process(self, file: Path) -> Optional[Document]:
        """Parse a workflow file, recording failures as problems.

        Returns:
            The document, or None if reading or parsing failed.
        """
        try:
            return self.parse(file)
        except FileReadError as e:
            logger.info("Skipping unreadable file %s: %s", file, e)
            self.problems.append(
                Problem(
                    pos=Pos(0, 0),
                    level=ProblemLevel.ERR,
                    desc=f"could not read file: {e}",
                    rule=self.READ_RULE,
                    path=str(file),
                )
            )
        except ParseError as e:
            self.problems.append(
                Problem(
                    pos=e.pos,
                    level=ProblemLevel.ERR,
                    desc=f"could not parse as YAML: {e.message}",
                    rule=self.SYNTAX_RULE,
                    path=str(file),
                )
            )
        return None


class PyYAMLParser(YAMLParser):
    """YAML parser implementation using PyYAML's composer.

    PyYAML's node graph is copied into our own Node tree. Aliases are
    expanded, so every node of the result has exactly one parent.
    """

    def parse(self, file: Path) -> Document:
        try:
            data = file.read_bytes()
        except OSError as e:
            raise FileReadError(e.strerror or str(e)) from e
        return self.parse_bytes(data, str(file))

    def parse_bytes(self, data: bytes, path: str = "<bytes>") -> Document:
        try:
            source = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise FileReadError(f"not valid UTF-8 ({e.reason})") from e
        return self.parse_string(source, path)

    def parse_string(self, source: str, path: str = "<string>") -> Document:
        try:
            yaml_root = yaml.compose(source, Loader=yaml.SafeLoader)
        except yaml.MarkedYAMLError as e:
            raise ParseError(self._describe(e), self._error_pos(e, source)) from e
        except yaml.YAMLError as e:
            # ReaderError carries a character offset but no mark
            raise ParseError(str(e), Pos(0, 0)) from e

        if yaml_root is None:
            raise ParseError("workflow file is empty", Pos(0, 0))

        root = self._convert(yaml_root, source, None, set())
        return Document(path=path, source=source, root=root)

    def _error_pos(self, error: yaml.MarkedYAMLError, source: str) -> Pos:
        mark = error.problem_mark or error.context_mark
        if mark is None:
            return Pos(0, 0)
        # errors at end of stream point past the last line
        last = len(source.rstrip("\r" + LINE_BREAKS)) - 1
        if mark.index > last >= 0:
            starts = line_starts(source)
            line = bisect.bisect_right(starts, last) - 1
            return Pos(line, last - starts[line], last)
        return Pos.from_mark(mark)

    def _convert(
        self,
        yaml_node: yaml.Node,
        source: str,
        parent: Optional[Node],
        active: Set[int],
    ) -> Node:
        if id(yaml_node) in active:
            raise ParseError(
                "recursive alias is not allowed", Pos.from_mark(yaml_node.start_mark)
            )
        active.add(id(yaml_node))

        pos = Pos.from_mark(yaml_node.start_mark)
        end = Pos.from_mark(yaml_node.end_mark)

        node: Node
        if isinstance(yaml_node, yaml.ScalarNode):
            node = Node(
                kind=NodeKind.SCALAR,
                value=yaml_node.value,
                pos=pos,
                end=end,
                tag=yaml_node.tag,
                style=yaml_node.style,
                raw=source[pos.idx:end.idx],
            )
        elif isinstance(yaml_node, yaml.SequenceNode):
            node = Node(kind=NodeKind.SEQUENCE, value=[], pos=pos, end=end, tag=yaml_node.tag)
            for item in yaml_node.value:
                node.value.append(self._convert(item, source, node, active))
        else:
            node = Node(kind=NodeKind.MAPPING, value=[], pos=pos, end=end, tag=yaml_node.tag)
            for key, value in yaml_node.value:
                node.value.append(
                    (
                        self._convert(key, source, node, active),
                        self._convert(value, source, node, active),
                    )
                )

        if parent is not None:
            node.set_parent(parent)
        active.discard(id(yaml_node))
        return node

    @staticmethod
    def _describe(error: yaml.MarkedYAMLError) -> str:
        parts = [p for p in (error.context, error.problem) if p]
        return ", ".join(parts) if parts else "invalid YAML"

