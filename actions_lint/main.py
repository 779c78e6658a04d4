import logging
import sys
from typing import List, Optional

import typer

from actions_lint.cli import CLI, StandardCLI
from actions_lint.globals.cli_config import CLIConfig

app = typer.Typer()


@app.callback(invoke_without_command=True)
def main(
    workflow_files: Optional[List[str]] = typer.Argument(
        default=None, help="Workflow files to validate"
    ),
    config: Optional[str] = typer.Option(
        None, "--config", "-c", help="Path of the configuration file"
    ),
    output_format: str = typer.Option(
        "plain", "--format", "-f", help="Output format: plain, colored or json"
    ),
    quiet: bool = typer.Option(default=False, help="Suppress warning-level problems in output"),
    strict: bool = typer.Option(default=False, help="Exit with code 2 if only warnings are found"),
    jobs: int = typer.Option(1, "--jobs", "-j", min=1, help="Number of files validated in parallel"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug information"),
):
    """Main CLI entry point for actions-lint.

    Statically checks GitHub Actions workflow files for syntax errors,
    invalid expressions, unpinned actions and other mistakes, before they
    are pushed.

    Args:
        workflow_files: Paths of workflow files to validate. If not provided,
            searches for workflow files in .github/workflows/ directory.
        config: Configuration file. Defaults to .github/actions-lint.yaml.
        output_format: How problems are printed.
        quiet: Whether to suppress warning-level problems from output, showing
            only errors.
        strict: Whether warnings alone make the run fail.
        jobs: Number of files validated at the same time.
        verbose: Whether to log debug messages to stderr.

    Examples:
        Validate all workflows:
            $ actions-lint

        Validate specific files:
            $ actions-lint .github/workflows/ci.yml .github/workflows/release.yml

        Colored output, errors only:
            $ actions-lint --format colored --quiet
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    cli_config = CLIConfig(
        workflow_files=list(workflow_files or []),
        config_file=config,
        output_format=output_format,
        no_warnings=quiet,
        strict=strict,
        jobs=jobs,
    )

    try:
        cli: CLI = StandardCLI(cli_config)
    except ValueError as e:
        print(e, file=sys.stderr)
        sys.exit(1)
    exit_code = cli.run()
    sys.exit(exit_code)
