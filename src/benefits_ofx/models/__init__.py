"""Data models and structures"""

from .core import (
    FetchConfig,
    Statement,
    Transaction,
    TransactionKind,
    format_amount,
    format_ofx_date,
)

__all__ = [
    'FetchConfig',
    'Statement',
    'Transaction',
    'TransactionKind',
    'format_amount',
    'format_ofx_date',
]
