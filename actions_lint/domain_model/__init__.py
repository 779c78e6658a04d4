"""Document tree, positions and expression syntax of workflow files."""

from .nodes import Document, Node, NodeKind
from .primitives import Pos

__all__ = ["Document", "Node", "NodeKind", "Pos"]
