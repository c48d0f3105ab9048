#!/usr/bin/env python3
"""
SLIM2ERB ERRORS - Taxonomy & Collector
--------------------------------------
Typed exceptions raised by the file/config collaborators, and the
ErrorCollector that accumulates per-file problems during a batch so the
run can finish and report one aggregated summary.

Parse diagnostics are never raised. They travel on the ParseResult and are
recorded here as PARSE_ERROR issues by the engine.

Author: Slim2ERB Team
Date: 2026-10-18
"""

import logging
import traceback
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger("slim2erb.errors")


class ErrorType(Enum):
    FILE_READ_ERROR = "FILE_READ_ERROR"
    FILE_WRITE_ERROR = "FILE_WRITE_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    CONVERSION_ERROR = "CONVERSION_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


class Slim2ErbError(Exception):
    """Base class for every failure originating outside the parser/generator."""
    error_type = ErrorType.CONVERSION_ERROR

    def __init__(self, message: str, file_path: Optional[str] = None,
                 line_no: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.file_path = file_path
        self.line_no = line_no


class ReadError(Slim2ErbError):
    error_type = ErrorType.FILE_READ_ERROR


class WriteError(Slim2ErbError):
    error_type = ErrorType.FILE_WRITE_ERROR


class ConversionError(Slim2ErbError):
    error_type = ErrorType.CONVERSION_ERROR


class ValidationError(Slim2ErbError):
    error_type = ErrorType.VALIDATION_ERROR


class ConfigurationError(Slim2ErbError):
    error_type = ErrorType.CONFIGURATION_ERROR


@dataclass
class ConversionIssue:
    """One reportable problem, tagged with its category."""
    type: ErrorType
    message: str
    file_path: Optional[str] = None
    line_no: Optional[int] = None
    details: Optional[str] = None

    def format(self) -> str:
        message = self.message
        if self.file_path:
            message = f"{Path(self.file_path).name}: {message}"
        if self.line_no:
            message += f" (line {self.line_no})"
        return message

    @classmethod
    def from_exception(cls, exc: Slim2ErbError) -> "ConversionIssue":
        return cls(exc.error_type, exc.message, exc.file_path, exc.line_no)


class ErrorCollector:
    """
    Accumulates issues across a batch run. Nothing here raises; the caller
    decides when to present the summary.
    """

    def __init__(self):
        self._issues: List[ConversionIssue] = []

    def add(self, issue: ConversionIssue) -> ConversionIssue:
        self._issues.append(issue)
        logger.error(f"{issue.type.value}: {issue.format()}")
        return issue

    def add_exception(self, exc: Slim2ErbError) -> ConversionIssue:
        return self.add(ConversionIssue.from_exception(exc))

    def add_diagnostics(self, diagnostics: List[str], file_path: Optional[str] = None):
        for diagnostic in diagnostics:
            self.add(ConversionIssue(ErrorType.PARSE_ERROR, diagnostic, file_path))

    def handle_unexpected(self, exc: BaseException, context: str,
                          file_path: Optional[str] = None) -> ConversionIssue:
        """Wraps anything unforeseen as a CONVERSION_ERROR, keeping the traceback."""
        details = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return self.add(ConversionIssue(
            ErrorType.CONVERSION_ERROR,
            f"Unexpected error in {context}: {exc}",
            file_path,
            details=details,
        ))

    def clear(self):
        self._issues = []

    @property
    def issues(self) -> List[ConversionIssue]:
        return list(self._issues)

    def has_errors(self) -> bool:
        return bool(self._issues)

    def summary(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for issue in self._issues:
            counts[issue.type.value] = counts.get(issue.type.value, 0) + 1
        return counts
