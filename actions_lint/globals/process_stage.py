from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from actions_lint.globals.problems import Problems

I = TypeVar("I")  # noqa: E741
O = TypeVar("O")  # noqa: E741


class ProcessStage(ABC, Generic[I, O]):
    """A step of the validation pipeline.

    Stages share the Problems collection of the file being processed and
    append to it instead of raising for findings.
    """

    def __init__(self, problems: Problems) -> None:
        self.problems = problems

    @abstractmethod
    def process(self, input: I) -> O:
        pass
