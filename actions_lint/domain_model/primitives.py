from dataclasses import dataclass

from yaml import Mark


@dataclass(frozen=True, order=True)
class Pos:
    """0-based position inside a source file.

    ``idx`` is the character offset from the start of the file.
    """

    line: int
    col: int
    idx: int = 0

    @classmethod
    def from_mark(cls, mark: Mark) -> "Pos":
        """Creates a Pos instance from a PyYAML mark."""
        return cls(mark.line, mark.column, mark.index)
