"""Pipeline stages for GitHub Actions workflow linting.

This module provides the stages that load, validate the structure of,
check the expressions of, and run the rules over a workflow file.
"""

from .expression_checker import ExpressionChecker
from .parser import FileReadError, ParseError, PyYAMLParser, YAMLParser
from .schema_validator import SchemaValidator
from .validator import ExtensibleValidator, Validator

__all__ = [
    "ExpressionChecker",
    "FileReadError",
    "ParseError",
    "PyYAMLParser",
    "YAMLParser",
    "SchemaValidator",
    "ExtensibleValidator",
    "Validator",
]
