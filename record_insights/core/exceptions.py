"""
Record Insights Exception Hierarchy.

This module defines the exception hierarchy for the record insights engine,
providing clear categorization of errors and standardized error handling
across fitting, scoring and serialization.

Exception Severity Levels:
    - FATAL: Stop all processing immediately
    - CRITICAL: Stop the current fit call or record
    - RECOVERABLE: Caller may skip the offending entry and continue
    - WARNING: Log warning, processing continues

Numeric edge cases (zero-variance feature columns, undefined correlations)
are not exceptions. They are absorbed by policy in the normalizer and the
scorer and only logged.
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorSeverity(Enum):
    """
    Classify error severity for handling decisions.

    Attributes:
        FATAL: Unrecoverable error, stop all processing
        CRITICAL: Fit-level or record-level error, abort that unit of work
        RECOVERABLE: Entry-level error, the caller decides whether to continue
        WARNING: Non-critical issue, log and continue
    """
    FATAL = "fatal"
    CRITICAL = "critical"
    RECOVERABLE = "recoverable"
    WARNING = "warning"


class RecordInsightsException(Exception):
    """
    Base exception for all record insights errors with enhanced context.

    Attributes:
        message (str): Human-readable error message
        severity (ErrorSeverity): Error severity level
        details (Dict[str, Any]): Additional context (sizes, offending key, etc.)
        original_exception (Optional[Exception]): Original exception if wrapping

    Example:
        >>> try:
        ...     model = fitter.fit(records, config)
        ... except ValueError as e:
        ...     raise RecordInsightsException(
        ...         "Fit failed",
        ...         severity=ErrorSeverity.CRITICAL,
        ...         details={'records': 10},
        ...         original_exception=e
        ...     )
    """

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.RECOVERABLE,
        details: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        """
        Initialize record insights exception.

        Args:
            message: Human-readable error description
            severity: Error severity level (default: RECOVERABLE)
            details: Additional context dictionary
            original_exception: Original exception if this wraps another error
        """
        super().__init__(message)
        self.message = message
        self.severity = severity
        self.details = details or {}
        self.original_exception = original_exception

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize exception to dictionary for logging/reporting.

        Returns:
            Dictionary containing exception details suitable for JSON serialization
        """
        return {
            'type': self.__class__.__name__,
            'message': self.message,
            'severity': self.severity.value,
            'details': self.details,
            'original_error': str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Configuration Errors (Fatal)
# ============================================================================

class ConfigError(RecordInsightsException):
    """
    Configuration errors (fatal - nothing can be fit or scored).

    Raised when:
    - Configuration file not found
    - Invalid YAML syntax
    - Required configuration section missing

    Attributes:
        field (Optional[str]): Specific config field that caused error
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message,
            severity=ErrorSeverity.FATAL,
            details={'field': field} if field else {}
        )
        self.field = field


class YAMLSizeError(ConfigError):
    """
    YAML file too large.

    Example:
        >>> raise YAMLSizeError(
        ...     "Config file exceeds 10MB limit",
        ...     file_size=15000000,
        ...     max_size=10000000
        ... )
    """

    def __init__(self, message: str, file_size: Optional[int] = None, max_size: Optional[int] = None):
        super().__init__(message)
        self.details.update({
            'file_size': file_size,
            'max_size': max_size
        })


class ConfigValidationError(ConfigError):
    """
    Configuration value failed validation.

    Raised when the configuration parses but holds an unusable value, such
    as an unknown normalization name or a non-positive top_k.

    Example:
        >>> raise ConfigValidationError(
        ...     "top_k must be a positive integer",
        ...     field="top_k",
        ...     expected=">= 1",
        ...     actual="0"
        ... )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[str] = None
    ):
        super().__init__(message, field)
        self.details.update({
            'expected': expected,
            'actual': actual
        })


# ============================================================================
# Schema Errors (Critical)
# ============================================================================

class SchemaMismatch(RecordInsightsException):
    """
    Vector or identifier sizes disagree.

    Raised when:
    - A fit record's prediction or feature vector length differs from the first record's
    - An inference feature vector length differs from the fitted feature size
    - The column identifier list length differs from the feature vector length
    - The fit dataset is empty or has zero-length vectors

    Never auto-corrected, padded or truncated.

    Attributes:
        what (str): Which shape disagreed (e.g. "feature vector")
        expected: Expected size
        actual: Actual size
        record_index (Optional[int]): Offending record position, if known

    Example:
        >>> raise SchemaMismatch(
        ...     "feature vector",
        ...     expected=3,
        ...     actual=4,
        ...     record_index=17
        ... )
    """

    def __init__(
        self,
        what: str,
        expected: Any,
        actual: Any,
        record_index: Optional[int] = None,
        message: Optional[str] = None
    ):
        if message is None:
            message = f"{what} size mismatch: expected {expected}, got {actual}"
            if record_index is not None:
                message += f" (record {record_index})"

        super().__init__(
            message,
            severity=ErrorSeverity.CRITICAL,
            details={
                'what': what,
                'expected': expected,
                'actual': actual,
                'record_index': record_index
            }
        )
        self.what = what
        self.expected = expected
        self.actual = actual
        self.record_index = record_index


# ============================================================================
# Parse Errors (Recoverable)
# ============================================================================

class ParseError(RecordInsightsException):
    """
    Malformed serialized text.

    Raised while decoding an encoded insight (non-JSON value, wrong-arity
    pairs, non-numeric entries, undecodable identifier key) or while loading
    a persisted model. Always propagated to the caller.

    Attributes:
        key (Optional[str]): Offending key
        value (Optional[str]): Offending value (truncated)

    Example:
        >>> raise ParseError(
        ...     "Insight value is not a JSON array",
        ...     key='{"column_name": "age"}',
        ...     value='{"a": 1}'
        ... )
    """

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        value: Optional[str] = None,
        original_exception: Optional[Exception] = None
    ):
        if value is not None and len(value) > 200:
            value = value[:200] + "..."

        super().__init__(
            message,
            severity=ErrorSeverity.RECOVERABLE,
            details={'key': key, 'value': value},
            original_exception=original_exception
        )
        self.key = key
        self.value = value


# ============================================================================
# Aggregation Errors (Critical)
# ============================================================================

class AggregationError(RecordInsightsException):
    """
    Statistics aggregator returned results of the wrong shape.

    Example:
        >>> raise AggregationError(
        ...     "Correlation matrix has shape (3, 3), expected (4, 4)",
        ...     operation="correlation"
        ... )
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(
            message,
            severity=ErrorSeverity.CRITICAL,
            details={'operation': operation},
            original_exception=original_exception
        )
        self.operation = operation
