from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class CLIConfig:
    """
    Configuration for CLI operations.

    Attributes:
        workflow_files: Paths of workflow files, or empty to validate all
        config_file: Path of the configuration file, or None to discover it
        output_format: One of "plain", "colored" or "json"
        no_warnings: Whether to drop warning-level problems
        strict: Whether warnings alone fail the run (exit code 2)
        jobs: Number of files validated in parallel
    """

    workflow_files: List[str] = field(default_factory=list)
    config_file: Optional[str] = None
    output_format: str = "plain"
    no_warnings: bool = False
    strict: bool = False
    jobs: int = 1
