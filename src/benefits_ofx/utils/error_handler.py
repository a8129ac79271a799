"""Error reporting and structured logging for statement exports."""

import json
import logging
import sys
import traceback
from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Any

from ..exceptions import (
    AuthNotStartedError,
    ConfigurationError,
    EmptyStatementError,
    NotAuthenticatedError,
    ParseError,
    SerializationError,
    TransportError,
)


class ErrorSeverity(Enum):
    """Error severity levels"""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification"""
    NETWORK = "network"
    RESPONSE_FORMAT = "response_format"
    AUTHENTICATION = "authentication"
    DATA_CONVERSION = "data_conversion"
    SERIALIZATION = "serialization"
    CONFIGURATION = "configuration"
    OUTPUT = "output"
    SYSTEM = "system"


@dataclass
class ErrorDetail:
    """Detailed error information"""
    timestamp: str
    severity: str
    category: str
    error_code: str
    message: str
    provider: Optional[str] = None
    raw_value: Optional[str] = None
    stack_trace: Optional[str] = None
    context: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return asdict(self)


class JSONFormatter(logging.Formatter):
    """One JSON object per log record"""

    def format(self, record):
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        for key in ('error_code', 'category', 'provider', 'context'):
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        return json.dumps(log_entry, default=str)


class ErrorHandler:
    """Collects errors and warnings and logs them in a structured way"""

    ERROR_CODES = {
        # Network errors
        "NETWORK_ERROR": "N001",
        "HTTP_STATUS_ERROR": "N002",

        # Response format errors
        "MALFORMED_RESPONSE": "R001",

        # Authentication errors
        "AUTH_NOT_STARTED": "A001",
        "NOT_AUTHENTICATED": "A002",

        # Conversion errors
        "EMPTY_STATEMENT": "D001",
        "INVALID_MONTH": "D002",

        # Output errors
        "SERIALIZATION_ERROR": "O001",
        "OUTPUT_WRITE_ERROR": "O002",

        # Configuration errors
        "MISSING_CONFIG_PARAMETER": "C001",
        "INVALID_CONFIG_VALUE": "C002",

        "UNEXPECTED_ERROR": "S999"
    }

    def __init__(self, log_directory: Optional[str] = None, enable_console: bool = True):
        self.log_directory = Path(log_directory) if log_directory else None
        if self.log_directory:
            self.log_directory.mkdir(parents=True, exist_ok=True)

        self.errors: List[ErrorDetail] = []
        self.warnings: List[ErrorDetail] = []

        self._setup_logging(enable_console)

    def _setup_logging(self, enable_console: bool):
        """Set up JSON file logging and human-readable console logging"""
        self.logger = logging.getLogger('benefits_ofx.errors')
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False

        # Clear existing handlers
        self.logger.handlers.clear()

        if self.log_directory:
            log_file = self.log_directory / f"export_{datetime.now().strftime('%Y%m%d')}.jsonl"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(JSONFormatter())
            self.logger.addHandler(file_handler)

        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(logging.INFO)
            console_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
            self.logger.addHandler(console_handler)

        if not self.logger.handlers:
            self.logger.addHandler(logging.NullHandler())

    def log_error(self,
                  message: str,
                  error_type: str,
                  category: ErrorCategory = ErrorCategory.SYSTEM,
                  provider: Optional[str] = None,
                  raw_value: Optional[str] = None,
                  exception: Optional[BaseException] = None,
                  context: Optional[Dict[str, Any]] = None) -> ErrorDetail:
        """Log an error with detailed information"""
        error_code = self.ERROR_CODES.get(error_type, "S999")
        stack_trace = None

        if exception is not None:
            stack_trace = ''.join(traceback.format_exception(
                type(exception), exception, exception.__traceback__
            ))

        error_detail = ErrorDetail(
            timestamp=datetime.now().isoformat(),
            severity=ErrorSeverity.ERROR.value,
            category=category.value,
            error_code=error_code,
            message=message,
            provider=provider,
            raw_value=raw_value,
            stack_trace=stack_trace,
            context=context or {}
        )
        self.errors.append(error_detail)

        self.logger.error(
            message,
            extra={
                'error_code': error_code,
                'category': category.value,
                'provider': provider,
                'context': context or {}
            }
        )
        return error_detail

    def log_warning(self,
                    message: str,
                    warning_type: str,
                    category: ErrorCategory = ErrorCategory.SYSTEM,
                    provider: Optional[str] = None,
                    context: Optional[Dict[str, Any]] = None) -> ErrorDetail:
        """Log a warning with detailed information"""
        warning_code = self.ERROR_CODES.get(warning_type, "W999")

        warning_detail = ErrorDetail(
            timestamp=datetime.now().isoformat(),
            severity=ErrorSeverity.WARNING.value,
            category=category.value,
            error_code=warning_code,
            message=message,
            provider=provider,
            context=context or {}
        )
        self.warnings.append(warning_detail)

        self.logger.warning(
            message,
            extra={
                'error_code': warning_code,
                'category': category.value,
                'provider': provider,
                'context': context or {}
            }
        )
        return warning_detail

    def log_info(self, message: str, context: Optional[Dict[str, Any]] = None):
        """Log informational message"""
        self.logger.info(message, extra={'context': context or {}})

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary of all errors and warnings"""
        errors_by_category: Dict[str, int] = {}
        for error in self.errors:
            errors_by_category[error.category] = errors_by_category.get(error.category, 0) + 1

        return {
            'total_errors': len(self.errors),
            'total_warnings': len(self.warnings),
            'errors_by_category': errors_by_category,
            'error_codes': [error.error_code for error in self.errors],
        }

    def has_errors(self) -> bool:
        """Check if any errors have been logged"""
        return len(self.errors) > 0


def handle_export_error(error_handler: ErrorHandler,
                        exception: BaseException,
                        provider: Optional[str] = None) -> ErrorDetail:
    """Record a failed export, classifying the exception"""
    raw_value = None

    if isinstance(exception, TransportError):
        error_type = "HTTP_STATUS_ERROR" if exception.status_code else "NETWORK_ERROR"
        category = ErrorCategory.NETWORK
        raw_value = exception.body
    elif isinstance(exception, ParseError):
        error_type = "MALFORMED_RESPONSE"
        category = ErrorCategory.RESPONSE_FORMAT
        raw_value = exception.raw_body
    elif isinstance(exception, AuthNotStartedError):
        error_type = "AUTH_NOT_STARTED"
        category = ErrorCategory.AUTHENTICATION
    elif isinstance(exception, NotAuthenticatedError):
        error_type = "NOT_AUTHENTICATED"
        category = ErrorCategory.AUTHENTICATION
    elif isinstance(exception, EmptyStatementError):
        error_type = "EMPTY_STATEMENT"
        category = ErrorCategory.DATA_CONVERSION
    elif isinstance(exception, SerializationError):
        error_type = "SERIALIZATION_ERROR"
        category = ErrorCategory.SERIALIZATION
    elif isinstance(exception, ConfigurationError):
        error_type = "MISSING_CONFIG_PARAMETER"
        category = ErrorCategory.CONFIGURATION
    elif isinstance(exception, OSError):
        error_type = "OUTPUT_WRITE_ERROR"
        category = ErrorCategory.OUTPUT
    else:
        error_type = "UNEXPECTED_ERROR"
        category = ErrorCategory.SYSTEM

    return error_handler.log_error(
        f"Export failed: {exception}",
        error_type,
        category,
        provider=provider,
        raw_value=raw_value,
        exception=exception
    )
