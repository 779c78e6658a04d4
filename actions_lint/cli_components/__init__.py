"""CLI components for output formatting, result aggregation, and validation services.

This module provides the building blocks for the CLI interface, including formatters
for plain, colored and JSON output, aggregators for collecting results, and
validation services that orchestrate the pipeline.
"""

from .output_formatter import (
    ColoredFormatter,
    JsonFormatter,
    OutputFormatter,
    PlainFormatter,
    create_formatter,
)
from .result_aggregator import ResultAggregator, StandardResultAggregator, exit_code_for
from .validation_service import StandardValidationService, ValidationService

__all__ = [
    "ColoredFormatter",
    "JsonFormatter",
    "OutputFormatter",
    "PlainFormatter",
    "create_formatter",
    "ResultAggregator",
    "StandardResultAggregator",
    "exit_code_for",
    "StandardValidationService",
    "ValidationService",
]
