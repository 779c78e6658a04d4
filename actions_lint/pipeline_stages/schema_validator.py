import re
from typing import Dict, FrozenSet, Iterable, Optional

from actions_lint.domain_model import catalog
from actions_lint.domain_model.nodes import Document, Node
from actions_lint.domain_model.primitives import Pos
from actions_lint.domain_model.workflow import shell_name
from actions_lint.globals.problems import Problem, ProblemLevel, Problems
from actions_lint.globals.process_stage import ProcessStage

ID_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")

INPUT_KEYS = frozenset({"description", "required", "default", "type", "deprecationMessage"})
CONTAINER_KEYS = frozenset({"image", "credentials", "env", "ports", "volumes", "options"})
FILTER_KEYS = frozenset(
    {"types", "workflows", *catalog.BRANCH_FILTERS, *catalog.PATH_FILTERS, *catalog.TAG_FILTERS}
)


def _quoted(names: Iterable[str]) -> str:
    return ", ".join(f'"{name}"' for name in sorted(names))


class SchemaValidator(ProcessStage[Document, Document]):
    """Checks a document against the workflow syntax.

    Never stops at the first violation: every section is visited and all
    problems are collected. Sections that are a single ``${{ }}``
    expression are accepted for any shape since they are only known at
    runtime.
    """

    RULE_NAME = "syntax-check"

    def __init__(self, problems: Problems) -> None:
        super().__init__(problems)
        self.path: Optional[str] = None

    def process(self, document: Document) -> Document:
        self.path = document.path
        self._check_duplicate_keys(document.root)
        self._check_workflow(document.root)
        return document

    def _error(self, at: Node, desc: str, level: ProblemLevel = ProblemLevel.ERR) -> None:
        self.problems.append(
            Problem(pos=at.pos, level=level, desc=desc, rule=self.RULE_NAME, path=self.path)
        )

    # region shapes
    def _unknown_keys(self, node: Node, allowed: FrozenSet[str], section: str) -> None:
        for key, _ in node.items():
            if key.text not in allowed:
                self._error(
                    key,
                    f'unexpected key "{key.text}" for "{section}" section. '
                    f"expected one of {_quoted(allowed)}",
                )

    def _mapping(self, node: Node, section: str) -> bool:
        """Whether ``node`` is a mapping, reporting it otherwise."""
        if node.is_mapping:
            return True
        if node.is_expression():
            return False
        self._error(node, f'"{section}" section must be a mapping but it is {node.kind.value}')
        return False

    def _scalar(self, node: Node, section: str) -> bool:
        if node.is_scalar and not node.is_null:
            return True
        self._error(node, f'"{section}" section must be a string but it is {self._describe(node)}')
        return False

    def _string_or_sequence(self, node: Node, section: str) -> None:
        if node.is_scalar and not node.is_null:
            return
        if node.is_sequence:
            for item in node.value:
                if not item.is_scalar or item.is_null:
                    self._error(item, f'elements of "{section}" section must be strings')
            return
        self._error(
            node,
            f'"{section}" section must be a string or a sequence but it is '
            f"{self._describe(node)}",
        )

    def _sequence(self, node: Node, section: str) -> bool:
        if node.is_sequence:
            return True
        if node.is_expression():
            return False
        self._error(node, f'"{section}" section must be a sequence but it is {self._describe(node)}')
        return False

    def _bool(self, node: Node, section: str) -> None:
        if node.scalar_type == "bool" or node.is_expression():
            return
        self._error(node, f'"{section}" must be a boolean but it is {self._describe(node)}')

    def _number(self, node: Node, section: str) -> None:
        if node.scalar_type in ("int", "float") or node.is_expression():
            return
        self._error(node, f'"{section}" must be a number but it is {self._describe(node)}')

    @staticmethod
    def _describe(node: Node) -> str:
        if node.is_scalar:
            return "null" if node.is_null else f'"{node.text}"'
        return f"a {node.kind.value}"

    # endregion shapes

    def _check_duplicate_keys(self, root: Node) -> None:
        for node in root.walk():
            if not node.is_mapping:
                continue
            seen: Dict[str, Pos] = {}
            for key, _ in node.items():
                if not key.is_scalar:
                    self._error(key, "mapping keys must be strings")
                    continue
                first = seen.get(key.text)
                if first is not None:
                    self._error(
                        key,
                        f'key "{key.text}" is duplicated. previously defined at '
                        f"line:{first.line + 1}, col:{first.col + 1}",
                    )
                else:
                    seen[key.text] = key.pos

    def _check_workflow(self, root: Node) -> None:
        if not root.is_mapping:
            self._error(root, f"workflow must be a mapping but it is {self._describe(root)}")
            return

        self._unknown_keys(root, catalog.WORKFLOW_KEYS, "workflow")
        for required in ("on", "jobs"):
            if required not in root:
                self._error(root, f'"{required}" section is missing in workflow')

        for key, value in root.items():
            match key.text:
                case "name" | "run-name":
                    self._scalar(value, key.text)
                case "on":
                    self._check_on(key, value)
                case "permissions":
                    if not value.is_mapping and not (value.is_scalar and not value.is_null):
                        self._error(value, '"permissions" must be a string or a mapping')
                case "env":
                    self._check_env(value)
                case "defaults":
                    self._check_defaults(value)
                case "concurrency":
                    self._check_concurrency(value)
                case "jobs":
                    self._check_jobs(key, value)

    # region on
    def _check_on(self, key: Node, on: Node) -> None:
        if on.is_null or (not on.is_scalar and not on.value):
            self._error(key, '"on" section must not be empty')
            return
        if on.is_scalar:
            self._check_event_name(on, bare=True)
        elif on.is_sequence:
            for event in on.value:
                if self._scalar(event, "on"):
                    self._check_event_name(event, bare=True)
        else:
            for event, config in on.items():
                if self._check_event_name(event, bare=False):
                    self._check_event_config(event, config)

    def _check_event_name(self, event: Node, bare: bool) -> bool:
        name = event.text
        if name not in catalog.EVENTS:
            self._error(event, f'unknown event "{name}"')
            return False
        if bare and name == "schedule":
            self._error(event, '"schedule" event must be configured with "cron"')
            return False
        return True

    def _check_event_config(self, event: Node, config: Node) -> None:
        name = event.text
        if name == "schedule":
            self._check_schedule(config)
            return
        if config.is_null:
            if name == "workflow_run":
                self._error(event, '"workflows" section is missing in "workflow_run" event')
            return
        if not self._mapping(config, name):
            return

        allowed = catalog.EVENTS[name] or frozenset()
        self._unknown_keys(config, allowed, name)
        for filter_key in ("branches", "paths", "tags"):
            if filter_key in config and f"{filter_key}-ignore" in config:
                self._error(
                    config.key_node(f"{filter_key}-ignore"),
                    f'both "{filter_key}" and "{filter_key}-ignore" filters cannot be used '
                    f'for the same event "{name}"',
                )

        for key, value in config.items():
            match key.text:
                case filter_key if filter_key in FILTER_KEYS:
                    self._string_or_sequence(value, filter_key)
                case "inputs":
                    self._check_inputs(name, value)
                case "outputs":
                    self._check_call_outputs(value)
                case "secrets":
                    self._check_call_secrets(value)

        if name == "workflow_run" and "workflows" not in config:
            self._error(event, '"workflows" section is missing in "workflow_run" event')

    def _check_schedule(self, config: Node) -> None:
        if not self._sequence(config, "schedule"):
            return
        if not config.value:
            self._error(config, '"schedule" section must not be empty')
        for entry in config.value:
            if not self._mapping(entry, "schedule"):
                continue
            self._unknown_keys(entry, frozenset({"cron"}), "schedule")
            cron = entry.get("cron")
            if cron is None:
                self._error(entry, '"cron" is missing in "schedule" entry')
            elif self._scalar(cron, "cron") and len(cron.text.split()) != 5:
                self._error(
                    cron,
                    f'invalid cron "{cron.text}": expected 5 fields '
                    "(minute, hour, day of month, month, day of week)",
                )

    def _check_inputs(self, event: str, inputs: Node) -> None:
        if inputs.is_null or not self._mapping(inputs, "inputs"):
            return
        allowed = INPUT_KEYS | ({"options"} if event == "workflow_dispatch" else set())
        types = (
            catalog.WORKFLOW_DISPATCH_INPUT_TYPES
            if event == "workflow_dispatch"
            else catalog.WORKFLOW_CALL_INPUT_TYPES
        )
        for input_id, spec in inputs.items():
            if spec.is_null:
                if event == "workflow_call":
                    self._error(input_id, f'"type" is missing in input "{input_id.text}"')
                continue
            if not self._mapping(spec, f"inputs.{input_id.text}"):
                continue
            self._unknown_keys(spec, frozenset(allowed), f"inputs.{input_id.text}")
            input_type = spec.get("type")
            if input_type is None:
                if event == "workflow_call":
                    self._error(input_id, f'"type" is missing in input "{input_id.text}"')
            elif input_type.text not in types:
                self._error(
                    input_type,
                    f'invalid type "{input_type.text}" for input "{input_id.text}". '
                    f"expected one of {_quoted(types)}",
                )
            elif input_type.text == "choice" and "options" not in spec:
                self._error(input_id, f'"options" is missing in choice input "{input_id.text}"')
            required = spec.get("required")
            if required is not None:
                self._bool(required, "required")

    def _check_call_outputs(self, outputs: Node) -> None:
        if outputs.is_null or not self._mapping(outputs, "outputs"):
            return
        for output_id, spec in outputs.items():
            if not self._mapping(spec, f"outputs.{output_id.text}"):
                continue
            self._unknown_keys(spec, frozenset({"description", "value"}), f"outputs.{output_id.text}")
            if "value" not in spec:
                self._error(output_id, f'"value" is missing in output "{output_id.text}"')

    def _check_call_secrets(self, secrets: Node) -> None:
        if secrets.is_null or not self._mapping(secrets, "secrets"):
            return
        for secret_id, spec in secrets.items():
            if spec.is_null:
                continue
            if self._mapping(spec, f"secrets.{secret_id.text}"):
                self._unknown_keys(
                    spec, frozenset({"description", "required"}), f"secrets.{secret_id.text}"
                )

    # endregion on

    def _check_env(self, env: Node) -> None:
        if not self._mapping(env, "env"):
            return
        for key, value in env.items():
            if not value.is_scalar:
                self._error(value, f'value of env variable "{key.text}" must be a string')

    def _check_defaults(self, defaults: Node) -> None:
        if not self._mapping(defaults, "defaults"):
            return
        self._unknown_keys(defaults, frozenset({"run"}), "defaults")
        run = defaults.get("run")
        if run is None or not self._mapping(run, "run"):
            return
        self._unknown_keys(run, frozenset({"shell", "working-directory"}), "run")
        for key, value in run.items():
            if key.text == "shell":
                self._check_shell(value)
            elif not value.is_expression():
                self._scalar(value, "run")

    def _check_shell(self, shell: Node) -> None:
        """Known shell name, or a custom command taking the script path as ``{0}``."""
        if not self._scalar(shell, "shell") or shell.is_expression():
            return
        name = shell_name(shell.text)
        if not name:
            self._error(shell, "shell name must not be empty")
        elif name not in catalog.SHELLS and "{0}" not in shell.text:
            self._error(
                shell,
                f'shell "{shell.text}" is unknown. use one of {_quoted(catalog.SHELLS)} '
                'or a custom command with "{0}"',
            )

    def _check_concurrency(self, concurrency: Node) -> None:
        if concurrency.is_scalar:
            self._scalar(concurrency, "concurrency")
            return
        if not self._mapping(concurrency, "concurrency"):
            return
        self._unknown_keys(concurrency, frozenset({"group", "cancel-in-progress"}), "concurrency")
        group = concurrency.get("group")
        if group is None:
            self._error(concurrency, '"group" is missing in "concurrency" section')
        else:
            self._scalar(group, "group")
        cancel = concurrency.get("cancel-in-progress")
        if cancel is not None:
            self._bool(cancel, "cancel-in-progress")

    # region jobs
    def _check_jobs(self, key: Node, jobs: Node) -> None:
        if not self._mapping(jobs, "jobs"):
            return
        if not jobs.value:
            self._error(key, '"jobs" section must not be empty')
        for job_key, job in jobs.items():
            if not ID_RE.match(job_key.text):
                self._error(
                    job_key,
                    f'invalid job ID "{job_key.text}". job ID must start with a letter or _ '
                    "and contain only alphanumeric characters, - or _",
                )
            if self._mapping(job, f"jobs.{job_key.text}"):
                self._check_job(job_key, job)

    def _check_job(self, job_key: Node, job: Node) -> None:
        job_id = job_key.text
        self._unknown_keys(job, catalog.JOB_KEYS, f"jobs.{job_id}")
        if "uses" in job:
            for key, _ in job.items():
                if key.text in catalog.JOB_KEYS and key.text not in catalog.REUSABLE_JOB_KEYS:
                    self._error(
                        key,
                        f'"{key.text}" is not available for job "{job_id}" '
                        "calling a reusable workflow",
                    )
        else:
            if "runs-on" not in job:
                self._error(job_key, f'"runs-on" section is missing in job "{job_id}"')
            if "steps" not in job:
                self._error(job_key, f'"steps" section is missing in job "{job_id}"')

        for key, value in job.items():
            match key.text:
                case "name" | "if":
                    self._scalar(value, key.text)
                case "uses":
                    self._scalar(value, "uses")
                case "needs":
                    self._string_or_sequence(value, "needs")
                case "runs-on":
                    self._check_runs_on(value)
                case "environment":
                    self._check_environment(value)
                case "concurrency":
                    self._check_concurrency(value)
                case "outputs":
                    if self._mapping(value, "outputs"):
                        for output_key, output in value.items():
                            if not output.is_scalar:
                                self._error(output, f'output "{output_key.text}" must be a string')
                case "env":
                    self._check_env(value)
                case "defaults":
                    self._check_defaults(value)
                case "steps":
                    self._check_steps(job_key, value)
                case "timeout-minutes":
                    self._number(value, "timeout-minutes")
                case "continue-on-error":
                    self._bool(value, "continue-on-error")
                case "strategy":
                    self._check_strategy(value)
                case "container":
                    self._check_container(value, "container")
                case "services":
                    if self._mapping(value, "services"):
                        for service_key, service in value.items():
                            self._check_container(service, f"services.{service_key.text}")
                case "with":
                    if self._mapping(value, "with"):
                        for input_key, input_value in value.items():
                            if not input_value.is_scalar:
                                self._error(input_value, f'input "{input_key.text}" must be a scalar')
                case "secrets":
                    if value.is_scalar and value.text != "inherit" and not value.is_expression():
                        self._error(value, '"secrets" must be a mapping or "inherit"')
                    elif not value.is_scalar:
                        self._mapping(value, "secrets")

    def _check_runs_on(self, runs_on: Node) -> None:
        if runs_on.is_mapping:
            self._unknown_keys(runs_on, frozenset({"group", "labels"}), "runs-on")
            if "group" not in runs_on and "labels" not in runs_on:
                self._error(runs_on, '"runs-on" section must contain "group" or "labels"')
            labels = runs_on.get("labels")
            if labels is not None:
                self._string_or_sequence(labels, "labels")
            return
        self._string_or_sequence(runs_on, "runs-on")
        if runs_on.is_sequence and not runs_on.value:
            self._error(runs_on, '"runs-on" section must not be empty')

    def _check_environment(self, environment: Node) -> None:
        if environment.is_scalar:
            self._scalar(environment, "environment")
            return
        if not self._mapping(environment, "environment"):
            return
        self._unknown_keys(environment, frozenset({"name", "url"}), "environment")
        if "name" not in environment:
            self._error(environment, '"name" is missing in "environment" section')

    def _check_strategy(self, strategy: Node) -> None:
        if not self._mapping(strategy, "strategy"):
            return
        self._unknown_keys(strategy, frozenset({"matrix", "fail-fast", "max-parallel"}), "strategy")
        for key, value in strategy.items():
            match key.text:
                case "matrix":
                    self._check_matrix(value)
                case "fail-fast":
                    self._bool(value, "fail-fast")
                case "max-parallel":
                    self._number(value, "max-parallel")

    def _check_matrix(self, matrix: Node) -> None:
        if not self._mapping(matrix, "matrix"):
            return
        if not matrix.value:
            self._error(matrix, '"matrix" section must not be empty')
        for key, value in matrix.items():
            if key.text in ("include", "exclude"):
                if self._sequence(value, key.text):
                    for item in value.value:
                        self._mapping(item, key.text)
            elif not value.is_sequence and not value.is_expression():
                self._error(
                    value,
                    f'matrix row "{key.text}" must be a sequence but it is {self._describe(value)}',
                )

    def _check_container(self, container: Node, section: str) -> None:
        if container.is_scalar:
            self._scalar(container, section)
            return
        if not self._mapping(container, section):
            return
        self._unknown_keys(container, CONTAINER_KEYS, section)
        if "image" not in container:
            self._error(container, f'"image" is missing in "{section}" section')
        env = container.get("env")
        if env is not None:
            self._check_env(env)

    # endregion jobs

    # region steps
    def _check_steps(self, job_key: Node, steps: Node) -> None:
        if not self._sequence(steps, "steps"):
            return
        if not steps.value:
            self._error(job_key, f'"steps" section must not be empty in job "{job_key.text}"')
        seen_ids: Dict[str, Node] = {}
        for step in steps.value:
            if not self._mapping(step, "steps"):
                continue
            self._check_step(step)
            step_id = step.get("id")
            if step_id is None or not step_id.is_scalar or step_id.is_expression():
                continue
            if not ID_RE.match(step_id.text):
                self._error(
                    step_id,
                    f'invalid step ID "{step_id.text}". step ID must start with a letter or _ '
                    "and contain only alphanumeric characters, - or _",
                )
            first = seen_ids.get(step_id.text.lower())
            if first is not None:
                self._error(
                    step_id,
                    f'step ID "{step_id.text}" duplicates in job "{job_key.text}". previously '
                    f"defined at line:{first.pos.line + 1}, col:{first.pos.col + 1}",
                )
            else:
                seen_ids[step_id.text.lower()] = step_id

    def _check_step(self, step: Node) -> None:
        self._unknown_keys(step, catalog.STEP_KEYS, "step")
        has_uses = "uses" in step
        has_run = "run" in step
        if not has_uses and not has_run:
            self._error(step, 'step must run a script with "run" or an action with "uses"')
        elif has_uses and has_run:
            self._error(step.key_node("run"), 'step cannot contain both "uses" and "run"')

        for key, value in step.items():
            match key.text:
                case "id" | "name" | "if" | "uses" | "run" | "working-directory":
                    self._scalar(value, key.text)
                case "shell":
                    self._check_shell(value)
                case "with":
                    if self._mapping(value, "with"):
                        for input_key, input_value in value.items():
                            if not input_value.is_scalar:
                                self._error(input_value, f'input "{input_key.text}" must be a scalar')
                case "env":
                    self._check_env(value)
                case "timeout-minutes":
                    self._number(value, "timeout-minutes")
                case "continue-on-error":
                    self._bool(value, "continue-on-error")

        if has_run and "with" in step:
            self._error(step.key_node("with"), '"with" is only available for steps with "uses"')
        if has_uses:
            for key in ("shell", "working-directory"):
                if key in step:
                    self._error(step.key_node(key), f'"{key}" is only available for steps with "run"')

    # endregion steps
