from typing import Generator, List

from actions_lint.domain_model import catalog
from actions_lint.domain_model.nodes import Node
from actions_lint.domain_model.workflow import iter_jobs, runner_label_nodes
from actions_lint.globals.problems import Problem, ProblemLevel
from actions_lint.rules.rule import Rule


class RunnerLabel(Rule):
    """
    Checks the labels of ``runs-on``.

    A label is known if it names a GitHub-hosted runner image, is one of the
    default self-hosted labels, or matches a pattern of the
    ``self-hosted-runner.labels`` setting.
    """

    NAME = "runner-label"

    def check(
        self,
    ) -> Generator[Problem, None, None]:
        for _, job in iter_jobs(self.document):
            labels = [node for node in runner_label_nodes(job) if not node.is_expression()]
            yield from self._check_labels(labels)

    def _check_labels(self, labels: List[Node]) -> Generator[Problem, None, None]:
        hosted = []
        self_hosted = False
        for node in labels:
            label = node.text.strip()
            lowered = label.lower()
            if lowered in catalog.RETIRED_RUNNERS:
                yield self.problem(
                    node, f'runner image "{label}" has been retired and no longer runs jobs'
                )
            elif lowered in catalog.DEPRECATED_RUNNERS:
                yield self.problem(
                    node,
                    f'runner image "{label}" is deprecated and will be removed. '
                    "migrate to a newer image",
                    ProblemLevel.WAR,
                )
                hosted.append(node)
            elif lowered in catalog.GITHUB_HOSTED_RUNNERS:
                hosted.append(node)
            elif lowered in catalog.SELF_HOSTED_LABELS or self.config.is_known_label(label):
                self_hosted = True
            elif "${{" in label:
                continue
            else:
                yield self.problem(
                    node,
                    f'label "{label}" is unknown. if it is a custom label for a self-hosted '
                    'runner, add it to "self-hosted-runner.labels" in the configuration',
                )

        if self_hosted and hosted:
            yield self.problem(
                hosted[0],
                f'GitHub-hosted runner label "{hosted[0].text}" is combined with '
                "self-hosted runner labels. no runner can match this set",
                ProblemLevel.WAR,
            )
        elif len(hosted) > 1:
            yield self.problem(
                hosted[1],
                f'multiple GitHub-hosted runner labels "{hosted[0].text}" and '
                f'"{hosted[1].text}". no runner can match this set',
            )
