"""Utility functions and helpers"""

from .config_manager import ConfigManager
from .dates import month_bounds, month_name, parse_month
from .error_handler import ErrorHandler, ErrorCategory, ErrorSeverity, handle_export_error

__all__ = [
    'ConfigManager',
    'month_bounds',
    'month_name',
    'parse_month',
    'ErrorHandler',
    'ErrorCategory',
    'ErrorSeverity',
    'handle_export_error',
]
