"""Navigation helpers over a workflow document tree.

All helpers tolerate malformed workflows: sections with an unexpected shape
are skipped, the schema validator reports them.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from actions_lint.domain_model.nodes import Document, Node


@dataclass(frozen=True)
class StepRef:
    job_key: Node
    job: Node
    step: Node
    index: int


def iter_jobs(document: Document) -> Iterator[Tuple[Node, Node]]:
    """Yield ``(job id key, job mapping)`` pairs."""
    jobs = document.root.get("jobs")
    if jobs is None:
        return
    for key, job in jobs.items():
        if job.is_mapping:
            yield key, job


def iter_steps(document: Document) -> Iterator[StepRef]:
    for job_key, job in iter_jobs(document):
        steps = job.get("steps")
        if steps is None or not steps.is_sequence:
            continue
        for index, step in enumerate(steps.value):
            if step.is_mapping:
                yield StepRef(job_key, job, step, index)


def iter_uses(document: Document) -> Iterator[Node]:
    """Yield every ``uses:`` scalar of steps and reusable workflow calls."""
    for _, job in iter_jobs(document):
        uses = job.get("uses")
        if uses is not None and uses.is_scalar and not uses.is_null:
            yield uses
        steps = job.get("steps")
        if steps is None or not steps.is_sequence:
            continue
        for step in steps.value:
            uses = step.get("uses")
            if uses is not None and uses.is_scalar and not uses.is_null:
                yield uses


def iter_run_scripts(document: Document) -> Iterator[Tuple[StepRef, Node]]:
    """Yield ``(step, run scalar)`` for steps running a script."""
    for ref in iter_steps(document):
        run = ref.step.get("run")
        if run is not None and run.is_scalar and not run.is_null:
            yield ref, run


def iter_permissions(document: Document) -> Iterator[Node]:
    """Yield the workflow level and every job level ``permissions`` section."""
    permissions = document.root.get("permissions")
    if permissions is not None:
        yield permissions
    for _, job in iter_jobs(document):
        permissions = job.get("permissions")
        if permissions is not None:
            yield permissions


def _default_shell(node: Optional[Node]) -> Optional[str]:
    if node is None:
        return None
    run = node.get("defaults")
    run = run.get("run") if run is not None else None
    shell = run.get("shell") if run is not None else None
    if shell is not None and shell.is_scalar and not shell.is_null:
        return shell.text
    return None


def effective_shell(document: Document, ref: StepRef) -> str:
    """Shell a ``run:`` step executes with.

    Resolution order is step, job defaults, workflow defaults, then the
    runner's default: ``pwsh`` on Windows runners and ``bash`` elsewhere.
    """
    shell = ref.step.get("shell")
    if shell is not None and shell.is_scalar and not shell.is_null:
        return shell.text
    configured = _default_shell(ref.job) or _default_shell(document.root)
    if configured:
        return configured
    if any(label.lower().startswith("windows") for label in runner_labels(ref.job)):
        return "pwsh"
    return "bash"


def runner_labels(job: Node) -> List[str]:
    return [node.text for node in runner_label_nodes(job)]


def runner_label_nodes(job: Node) -> List[Node]:
    """Scalar label nodes of a job's ``runs-on``."""
    runs_on = job.get("runs-on")
    if runs_on is None:
        return []
    if runs_on.is_mapping:
        runs_on = runs_on.get("labels")
        if runs_on is None:
            return []
    if runs_on.is_scalar:
        return [] if runs_on.is_null else [runs_on]
    if runs_on.is_sequence:
        return [item for item in runs_on.value if item.is_scalar and not item.is_null]
    return []


def shell_name(shell: str) -> str:
    """Program of a ``shell:`` value, e.g. ``bash`` for ``bash -e {0}``. Empty if blank."""
    parts = shell.split()
    return parts[0].lower() if parts else ""
