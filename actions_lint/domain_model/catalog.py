"""Static knowledge about GitHub Actions workflow syntax."""

from typing import Dict, FrozenSet, Optional, Tuple

WORKFLOW_KEYS = frozenset(
    {"name", "run-name", "on", "permissions", "env", "defaults", "concurrency", "jobs"}
)

JOB_KEYS = frozenset(
    {
        "name",
        "permissions",
        "needs",
        "if",
        "runs-on",
        "environment",
        "concurrency",
        "outputs",
        "env",
        "defaults",
        "steps",
        "timeout-minutes",
        "strategy",
        "continue-on-error",
        "container",
        "services",
        "uses",
        "with",
        "secrets",
    }
)

# Keys allowed on a job calling a reusable workflow
REUSABLE_JOB_KEYS = frozenset(
    {"name", "uses", "with", "secrets", "needs", "if", "permissions", "strategy", "concurrency"}
)

STEP_KEYS = frozenset(
    {
        "id",
        "if",
        "name",
        "uses",
        "run",
        "shell",
        "with",
        "env",
        "continue-on-error",
        "timeout-minutes",
        "working-directory",
    }
)

BRANCH_FILTERS = ("branches", "branches-ignore")
PATH_FILTERS = ("paths", "paths-ignore")
TAG_FILTERS = ("tags", "tags-ignore")

# Event name -> allowed configuration keys. None means the event takes
# dedicated configuration handled separately.
EVENTS: Dict[str, Optional[FrozenSet[str]]] = {
    "branch_protection_rule": frozenset({"types"}),
    "check_run": frozenset({"types"}),
    "check_suite": frozenset({"types"}),
    "create": frozenset(),
    "delete": frozenset(),
    "deployment": frozenset(),
    "deployment_status": frozenset(),
    "discussion": frozenset({"types"}),
    "discussion_comment": frozenset({"types"}),
    "fork": frozenset(),
    "gollum": frozenset(),
    "issue_comment": frozenset({"types"}),
    "issues": frozenset({"types"}),
    "label": frozenset({"types"}),
    "merge_group": frozenset({"types", *BRANCH_FILTERS}),
    "milestone": frozenset({"types"}),
    "page_build": frozenset(),
    "project": frozenset({"types"}),
    "project_card": frozenset({"types"}),
    "project_column": frozenset({"types"}),
    "public": frozenset(),
    "pull_request": frozenset({"types", *BRANCH_FILTERS, *PATH_FILTERS}),
    "pull_request_review": frozenset({"types"}),
    "pull_request_review_comment": frozenset({"types"}),
    "pull_request_target": frozenset({"types", *BRANCH_FILTERS, *PATH_FILTERS}),
    "push": frozenset({*BRANCH_FILTERS, *PATH_FILTERS, *TAG_FILTERS}),
    "registry_package": frozenset({"types"}),
    "release": frozenset({"types"}),
    "repository_dispatch": frozenset({"types"}),
    "schedule": None,
    "status": frozenset(),
    "watch": frozenset({"types"}),
    "workflow_call": frozenset({"inputs", "outputs", "secrets"}),
    "workflow_dispatch": frozenset({"inputs"}),
    "workflow_run": frozenset({"types", "workflows", *BRANCH_FILTERS}),
}

WORKFLOW_CALL_INPUT_TYPES = frozenset({"boolean", "number", "string"})
WORKFLOW_DISPATCH_INPUT_TYPES = frozenset({"boolean", "number", "string", "choice", "environment"})

CONTEXTS = frozenset(
    {
        "github",
        "env",
        "vars",
        "job",
        "jobs",
        "steps",
        "runner",
        "secrets",
        "strategy",
        "matrix",
        "needs",
        "inputs",
    }
)

# Function name (lowercase) -> (min args, max args or None for variadic)
FUNCTIONS: Dict[str, Tuple[int, Optional[int]]] = {
    "contains": (2, 2),
    "startswith": (2, 2),
    "endswith": (2, 2),
    "format": (1, None),
    "join": (1, 2),
    "tojson": (1, 1),
    "fromjson": (1, 1),
    "hashfiles": (1, None),
    "success": (0, 0),
    "always": (0, 0),
    "cancelled": (0, 0),
    "failure": (0, 0),
}

# Event payload properties controlled by whoever opens an issue, PR or comment
UNTRUSTED_INPUTS = (
    "github.event.issue.title",
    "github.event.issue.body",
    "github.event.pull_request.title",
    "github.event.pull_request.body",
    "github.event.comment.body",
    "github.event.review.body",
    "github.event.review_comment.body",
    "github.event.discussion.title",
    "github.event.discussion.body",
    "github.event.pages.*.page_name",
    "github.event.commits.*.message",
    "github.event.commits.*.author.email",
    "github.event.commits.*.author.name",
    "github.event.head_commit.message",
    "github.event.head_commit.author.email",
    "github.event.head_commit.author.name",
    "github.event.pull_request.head.ref",
    "github.event.pull_request.head.label",
    "github.event.pull_request.head.repo.default_branch",
    "github.event.workflow_run.head_branch",
    "github.event.workflow_run.head_commit.message",
    "github.event.workflow_run.head_commit.author.email",
    "github.event.workflow_run.head_commit.author.name",
    "github.head_ref",
)

PERMISSION_SCOPES = frozenset(
    {
        "actions",
        "attestations",
        "checks",
        "contents",
        "deployments",
        "discussions",
        "id-token",
        "issues",
        "models",
        "packages",
        "pages",
        "pull-requests",
        "repository-projects",
        "security-events",
        "statuses",
    }
)
PERMISSION_VALUES = frozenset({"read", "write", "none"})
# Scopes that do not accept every value
RESTRICTED_PERMISSION_VALUES: Dict[str, FrozenSet[str]] = {
    "id-token": frozenset({"write", "none"}),
    "models": frozenset({"read", "none"}),
}

GITHUB_HOSTED_RUNNERS = frozenset(
    {
        "ubuntu-latest",
        "ubuntu-24.04",
        "ubuntu-22.04",
        "ubuntu-24.04-arm",
        "ubuntu-22.04-arm",
        "ubuntu-slim",
        "windows-latest",
        "windows-2025",
        "windows-2022",
        "windows-11-arm",
        "macos-latest",
        "macos-latest-large",
        "macos-latest-xlarge",
        "macos-26",
        "macos-26-xlarge",
        "macos-15",
        "macos-15-large",
        "macos-15-xlarge",
        "macos-14",
        "macos-14-large",
        "macos-14-xlarge",
        "macos-13",
        "macos-13-large",
        "macos-13-xlarge",
    }
)

# Runner images scheduled for removal: still work but should be migrated
DEPRECATED_RUNNERS = frozenset({"macos-13", "macos-13-large", "macos-13-xlarge"})

RETIRED_RUNNERS = frozenset(
    {
        "ubuntu-16.04",
        "ubuntu-18.04",
        "ubuntu-20.04",
        "windows-2016",
        "windows-2019",
        "macos-10.15",
        "macos-11",
        "macos-12",
        "macos-12-large",
    }
)

SELF_HOSTED_LABELS = frozenset({"self-hosted", "linux", "windows", "macos", "x64", "arm", "arm64"})

SHELLS = frozenset({"bash", "pwsh", "python", "sh", "cmd", "powershell"})
POSIX_SHELLS = frozenset({"bash", "sh"})
