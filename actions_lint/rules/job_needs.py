from typing import Dict, Generator, List, Set, Tuple

from actions_lint.domain_model.nodes import Node
from actions_lint.domain_model.workflow import iter_jobs
from actions_lint.globals.problems import Problem
from actions_lint.rules.rule import Rule


def needs_nodes(job: Node) -> List[Node]:
    """Scalar entries of a job's ``needs``."""
    needs = job.get("needs")
    if needs is None:
        return []
    if needs.is_scalar:
        return [] if needs.is_null else [needs]
    if needs.is_sequence:
        return [item for item in needs.value if item.is_scalar and not item.is_null]
    return []


class JobNeeds(Rule):
    """Checks ``needs`` references between jobs and detects dependency cycles."""

    NAME = "job-needs"

    def check(
        self,
    ) -> Generator[Problem, None, None]:
        job_ids = {key.text.lower(): key.text for key, _ in iter_jobs(self.document)}
        graph: Dict[str, List[str]] = {}
        edges: Dict[Tuple[str, str], Node] = {}

        for key, job in iter_jobs(self.document):
            job_id = key.text.lower()
            graph[job_id] = []
            seen: Set[str] = set()
            for node in needs_nodes(job):
                needed = node.text.strip().lower()
                if needed == job_id:
                    yield self.problem(node, f'job "{key.text}" depends on itself')
                    continue
                if needed not in job_ids:
                    yield self.problem(
                        node,
                        f'job "{key.text}" needs job "{node.text}" which does not exist. '
                        "available jobs are "
                        + ", ".join(f'"{j}"' for j in sorted(job_ids.values())),
                    )
                    continue
                if needed in seen:
                    yield self.problem(
                        node, f'job "{node.text}" is listed more than once in "needs"'
                    )
                    continue
                seen.add(needed)
                graph[job_id].append(needed)
                edges[(job_id, needed)] = node

        yield from self._check_cycles(graph, job_ids, edges)

    def _check_cycles(
        self,
        graph: Dict[str, List[str]],
        job_ids: Dict[str, str],
        edges: Dict[Tuple[str, str], Node],
    ) -> Generator[Problem, None, None]:
        cycles: List[List[str]] = []
        visited: Set[str] = set()
        rec_stack: Set[str] = set()

        def dfs(job_id: str, path: List[str]) -> None:
            if job_id in rec_stack:
                cycles.append(path[path.index(job_id):])
                return
            if job_id in visited:
                return
            visited.add(job_id)
            rec_stack.add(job_id)
            path.append(job_id)
            for dep in graph.get(job_id, []):
                dfs(dep, path)
            path.pop()
            rec_stack.remove(job_id)

        for job_id in graph:
            if job_id not in visited:
                dfs(job_id, [])

        for cycle in cycles:
            names = [job_ids[j] for j in cycle]
            yield self.problem(
                edges[(cycle[0], cycle[1])],
                "cyclic dependency between jobs: " + " -> ".join(names + [names[0]]),
            )
